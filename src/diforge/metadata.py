from __future__ import annotations

import importlib
import inspect
import types
from collections.abc import Callable
from dataclasses import dataclass
from inspect import Parameter
from typing import Any, Protocol, TypeGuard, get_type_hints

from diforge.exceptions import DIForgeInvalidRegistrationError

_PRIMITIVE_MODULES = frozenset({"builtins", "typing", "types", "collections.abc"})
_VARIADIC_KINDS = frozenset({Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD})


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    """Describe one constructor or method parameter."""

    name: str
    optional: bool
    default: Any = None
    """Declared default. ``None`` for required and variadic parameters."""
    variadic: bool = False
    declared_type: str | None = None
    """Identifier of the annotated class, ``None`` for primitive or untyped parameters."""
    kind: inspect._ParameterKind = Parameter.POSITIONAL_OR_KEYWORD


class MetadataProvider(Protocol):
    """Answer "does this type exist and what are its members" for the container."""

    def register_type(self, cls: type[Any]) -> str:
        """Make ``cls`` findable and return its identifier."""
        ...

    def find_type(self, identifier: str) -> type[Any] | None:
        """Return the class named by ``identifier`` or ``None``."""
        ...

    def describe_constructor(self, cls: type[Any]) -> list[ParameterDescriptor] | None:
        """Return constructor parameters, or ``None`` when ``cls`` has no constructor."""
        ...

    def describe_method(self, cls: type[Any], method_name: str) -> list[ParameterDescriptor]:
        """Return parameters of ``method_name`` as called on an instance of ``cls``."""
        ...


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def identifier_of(cls: type[Any]) -> str:
    """Return the dotted identifier used for ``cls``."""
    return f"{cls.__module__}.{cls.__qualname__}"


class InspectMetadataProvider:
    """Describe classes with ``inspect`` and find them by identifier.

    Classes handed to the container (directly or as parameter annotations) are
    remembered by identifier. Anything else is looked up as a dotted import
    path such as ``"fractions.Fraction"``.
    """

    def __init__(self) -> None:
        self._types: dict[str, type[Any]] = {}

    def register_type(self, cls: type[Any]) -> str:
        if not is_runtime_class(cls):
            msg = f"Expected a class, got {cls!r}."
            raise DIForgeInvalidRegistrationError(msg)
        identifier = identifier_of(cls)
        self._types[identifier] = cls
        return identifier

    def find_type(self, identifier: str) -> type[Any] | None:
        cls = self._types.get(identifier)
        if cls is None:
            cls = self._import_type(identifier)
            if cls is not None:
                self._types[identifier] = cls
        return cls

    def describe_constructor(self, cls: type[Any]) -> list[ParameterDescriptor] | None:
        constructor = self._constructor(cls)
        if constructor is None:
            return None
        signature = inspect.signature(cls)
        return self._describe(signature, self._type_hints(constructor))

    def describe_method(self, cls: type[Any], method_name: str) -> list[ParameterDescriptor]:
        method = getattr(cls, method_name)
        signature = inspect.signature(method)
        parameters = list(signature.parameters.values())
        # Plain functions looked up on the class still carry ``self``.
        if inspect.isfunction(method) and not isinstance(
            inspect.getattr_static(cls, method_name),
            staticmethod,
        ):
            parameters = parameters[1:]
        return self._describe(signature.replace(parameters=parameters), self._type_hints(method))

    def _describe(
        self,
        signature: inspect.Signature,
        hints: dict[str, Any],
    ) -> list[ParameterDescriptor]:
        descriptors: list[ParameterDescriptor] = []
        for parameter in signature.parameters.values():
            variadic = parameter.kind in _VARIADIC_KINDS
            has_default = parameter.default is not Parameter.empty
            annotation = hints.get(parameter.name, parameter.annotation)
            descriptors.append(
                ParameterDescriptor(
                    name=parameter.name,
                    optional=variadic or has_default,
                    default=parameter.default if has_default else None,
                    variadic=variadic,
                    declared_type=self._declared_type(annotation),
                    kind=parameter.kind,
                ),
            )
        return descriptors

    def _declared_type(self, annotation: Any) -> str | None:
        if not is_runtime_class(annotation):
            return None
        if annotation.__module__ in _PRIMITIVE_MODULES:
            return None
        return self.register_type(annotation)

    def _constructor(self, cls: type[Any]) -> Callable[..., Any] | None:
        if cls.__init__ is not object.__init__:
            return cls.__init__
        if cls.__new__ is not object.__new__:
            return cls.__new__
        return None

    def _type_hints(self, function: Callable[..., Any]) -> dict[str, Any]:
        try:
            return get_type_hints(function)
        except (TypeError, NameError, AttributeError):
            # Unresolvable string annotations fall back to the raw ones.
            return {}

    def _import_type(self, identifier: str) -> type[Any] | None:
        parts = identifier.split(".")
        for index in range(len(parts) - 1, 0, -1):
            try:
                target: Any = importlib.import_module(".".join(parts[:index]))
            except (ImportError, ValueError):
                continue
            for attribute in parts[index:]:
                target = getattr(target, attribute, None)
                if target is None:
                    return None
            return target if is_runtime_class(target) else None
        return None
