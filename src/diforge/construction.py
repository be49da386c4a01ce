from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from inspect import Parameter
from typing import Any

from diforge.binder import ParameterBinder
from diforge.exceptions import DIForgeConstructionError, DIForgeError, DIForgeNotFoundError
from diforge.metadata import MetadataProvider, ParameterDescriptor
from diforge.resolver import Resolution
from diforge.rules import RuleStore

logger = logging.getLogger(__name__)

_POSITIONAL_KINDS = frozenset(
    {Parameter.POSITIONAL_ONLY, Parameter.POSITIONAL_OR_KEYWORD, Parameter.VAR_POSITIONAL},
)


@dataclass(frozen=True, slots=True)
class TypeAllocation:
    """Instantiate a class, binding its constructor parameters per call."""

    concrete_type: type[Any]
    parameters: tuple[ParameterDescriptor, ...]

    def __call__(self, binder: ParameterBinder, overrides: Mapping[str, Any]) -> Any:
        if not self.parameters:
            return self.concrete_type()
        bound = binder.bind(self.parameters, overrides)
        return self.concrete_type(*bound.args, **bound.kwargs)


@dataclass(frozen=True, slots=True)
class FactoryAllocation:
    """Call a registered factory, passing the overrides when it takes an argument."""

    factory: Callable[..., Any]
    accepts_overrides: bool

    def __call__(self, binder: ParameterBinder, overrides: Mapping[str, Any]) -> Any:
        if self.accepts_overrides:
            return self.factory(dict(overrides))
        return self.factory()


@dataclass(frozen=True, slots=True)
class InjectionCall:
    """One post-construction method call with its own overrides."""

    method: str
    parameters: tuple[ParameterDescriptor, ...] | None
    """Method parameters, ``None`` when only known from the built instance."""
    overrides: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class ConstructionPlan:
    """Cached recipe for building one identifier.

    Holds only topology and parameter metadata. Argument values, including
    instance markers and typed dependencies, are bound on every ``build``.
    """

    identifier: str
    concrete: str
    allocate: TypeAllocation | FactoryAllocation
    injections: tuple[InjectionCall, ...] = ()
    describe_method: Callable[[type[Any], str], list[ParameterDescriptor]] | None = None

    def build(self, binder: ParameterBinder, overrides: Mapping[str, Any]) -> Any:
        instance = self.allocate(binder, overrides)
        for call in self.injections:
            parameters = call.parameters
            if parameters is None and self.describe_method is not None:
                parameters = tuple(self.describe_method(type(instance), call.method))
            bound = binder.bind(parameters or (), call.overrides)
            getattr(instance, call.method)(*bound.args, **bound.kwargs)
        return instance


class ConstructionCache:
    """Memoize construction plans per original identifier."""

    def __init__(self, rules: RuleStore, metadata: MetadataProvider) -> None:
        self._rules = rules
        self._metadata = metadata
        self._plans: dict[str, ConstructionPlan] = {}

    def get_or_build(self, resolution: Resolution) -> ConstructionPlan:
        """Return the plan for ``resolution.original``, building it on first use.

        Raises:
            DIForgeConstructionError: If introspecting the target fails.

        """
        plan = self._plans.get(resolution.original)
        if plan is not None:
            return plan

        try:
            plan = self._build_plan(resolution)
        except DIForgeError:
            raise
        except Exception as error:
            raise DIForgeConstructionError(resolution.original, error) from error

        self._plans[resolution.original] = plan
        logger.debug(
            "Built construction plan for '%s' (concrete '%s', %d injection calls)",
            plan.identifier,
            plan.concrete,
            len(plan.injections),
        )
        return plan

    def clear(self) -> None:
        self._plans.clear()

    def __len__(self) -> int:
        return len(self._plans)

    def _build_plan(self, resolution: Resolution) -> ConstructionPlan:
        factory = self._rules.find_factory(resolution.concrete)
        concrete_type: type[Any] | None = None
        allocate: TypeAllocation | FactoryAllocation
        if factory is not None:
            allocate = FactoryAllocation(
                factory=factory,
                accepts_overrides=_accepts_overrides(factory),
            )
        else:
            concrete_type = self._metadata.find_type(resolution.concrete)
            if concrete_type is None:
                raise DIForgeNotFoundError(resolution.concrete)
            parameters = self._metadata.describe_constructor(concrete_type) or []
            allocate = TypeAllocation(concrete_type=concrete_type, parameters=tuple(parameters))

        injections: list[InjectionCall] = []
        for method, calls in self._rules.injections_for(resolution.original).items():
            # Factory products have no type until built; describe them per build.
            parameters = (
                tuple(self._metadata.describe_method(concrete_type, method))
                if concrete_type is not None
                else None
            )
            injections.extend(
                InjectionCall(method=method, parameters=parameters, overrides=overrides)
                for overrides in calls
            )

        return ConstructionPlan(
            identifier=resolution.original,
            concrete=resolution.concrete,
            allocate=allocate,
            injections=tuple(injections),
            describe_method=self._metadata.describe_method if concrete_type is None else None,
        )


def _accepts_overrides(factory: Callable[..., Any]) -> bool:
    try:
        signature = inspect.signature(factory)
    except (TypeError, ValueError):
        return True
    return any(parameter.kind in _POSITIONAL_KINDS for parameter in signature.parameters.values())
