from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from inspect import Parameter
from typing import Any, Protocol

from diforge.exceptions import DIForgeMissingParameterError
from diforge.markers import is_instance_marker, unpack_instance_marker
from diforge.metadata import ParameterDescriptor


class InstanceSource(Protocol):
    """Build instances for typed parameters and instance markers."""

    def get(self, key: Any, overrides: Mapping[str, Any] | None = None) -> Any:
        """Return the shared instance, used for unsupplied typed parameters."""
        ...

    def create(self, key: Any, overrides: Mapping[str, Any] | None = None) -> Any:
        """Return a freshly built instance, used for instance markers."""
        ...


@dataclass(slots=True)
class BoundArguments:
    """Arguments ready to be passed to a constructor or method."""

    args: list[Any] = field(default_factory=list)
    kwargs: dict[str, Any] = field(default_factory=dict)


class ParameterBinder:
    """Bind parameter descriptors against an override mapping.

    For every parameter, in declaration order, the first applicable source
    wins: a supplied override (after expansion), the declared default, nothing
    for an unsupplied variadic, and finally a shared instance of the declared
    type. A parameter left without any source fails the binding.
    """

    def __init__(self, source: InstanceSource) -> None:
        self._source = source

    def bind(
        self,
        parameters: Iterable[ParameterDescriptor],
        overrides: Mapping[str, Any],
    ) -> BoundArguments:
        """Produce arguments for ``parameters``.

        Args:
            parameters: Descriptors in declaration order.
            overrides: Values keyed by parameter name. Names that match no
                parameter are ignored.

        Raises:
            DIForgeMissingParameterError: If a required, untyped parameter has
                no override.

        """
        bound = BoundArguments()
        for parameter in parameters:
            if parameter.name in overrides:
                values = self.expand(overrides[parameter.name], variadic=parameter.variadic)
            elif parameter.optional:
                if parameter.variadic:
                    continue
                values = [parameter.default]
            elif parameter.declared_type is not None:
                values = [self._source.get(parameter.declared_type)]
            else:
                raise DIForgeMissingParameterError(parameter.name)
            self._place(bound, parameter, values)
        return bound

    def expand(self, value: Any, *, variadic: bool = False) -> list[Any]:
        """Expand an override into the argument values it contributes.

        A variadic override given as a list or tuple contributes one argument
        per element. Anything else contributes exactly one argument.
        """
        if variadic and isinstance(value, list | tuple) and not is_instance_marker(value):
            return [self.expand_value(item) for item in value]
        return [self.expand_value(value)]

    def expand_value(self, value: Any) -> Any:
        """Replace instance markers in ``value`` with freshly built instances.

        Lists, tuples and dicts are walked recursively. Containers without any
        marker are returned as they are.
        """
        if is_instance_marker(value):
            key, params = unpack_instance_marker(value)
            return self._source.create(key, params)
        if isinstance(value, Mapping):
            expanded_items = {name: self.expand_value(item) for name, item in value.items()}
            if all(expanded_items[name] is item for name, item in value.items()):
                return value
            return expanded_items
        if isinstance(value, list | tuple):
            expanded = [self.expand_value(item) for item in value]
            if all(new is old for new, old in zip(expanded, value, strict=True)):
                return value
            return expanded if isinstance(value, list) else tuple(expanded)
        return value

    def _place(
        self,
        bound: BoundArguments,
        parameter: ParameterDescriptor,
        values: list[Any],
    ) -> None:
        if parameter.kind is Parameter.KEYWORD_ONLY:
            bound.kwargs[parameter.name] = values[0]
        elif parameter.kind is Parameter.VAR_KEYWORD:
            for value in values:
                bound.kwargs.update(value)
        else:
            bound.args.extend(values)
