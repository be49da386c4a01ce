from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Alias:
    """Named indirection to ``target`` carrying parameter overrides."""

    target: str
    params: Mapping[str, Any] = field(default_factory=dict)


class RuleStore:
    """Store container configuration keyed by identifier.

    Pure data: entries change only through the setters below and are never
    removed automatically. Injection directives are grouped by method in order
    of first registration; calls to one method keep their registration order.
    """

    def __init__(self) -> None:
        self._preferences: dict[str, str] = {}
        self._aliases: dict[str, Alias] = {}
        self._params: dict[str, dict[str, Any]] = {}
        self._shared: dict[str, bool] = {}
        self._injections: dict[str, dict[str, list[dict[str, Any]]]] = {}
        self._values: dict[str, Any] = {}
        self._factories: dict[str, Callable[..., Any]] = {}

    def set_preference(self, identifier: str, target: str) -> None:
        self._preferences[identifier] = target

    def set_alias(self, identifier: str, target: str, params: Mapping[str, Any]) -> None:
        self._aliases[identifier] = Alias(target=target, params=dict(params))

    def set_params(self, identifier: str, params: Mapping[str, Any]) -> None:
        self._params[identifier] = {**self._params.get(identifier, {}), **params}

    def set_shared(self, identifier: str, *, shared: bool) -> None:
        self._shared[identifier] = shared

    def add_injection(self, identifier: str, method: str, params: Mapping[str, Any]) -> None:
        methods = self._injections.setdefault(identifier, {})
        methods.setdefault(method, []).append(dict(params))

    def set_value(self, identifier: str, value: Any) -> None:
        self._values[identifier] = value

    def set_factory(self, identifier: str, factory: Callable[..., Any]) -> None:
        self._factories[identifier] = factory

    def find_preference(self, identifier: str) -> str | None:
        return self._preferences.get(identifier)

    def find_alias(self, identifier: str) -> Alias | None:
        return self._aliases.get(identifier)

    def params_for(self, identifier: str) -> dict[str, Any]:
        return self._params.get(identifier, {})

    def find_shared(self, identifier: str) -> bool | None:
        """Return the shared flag, ``None`` when it was never set."""
        return self._shared.get(identifier)

    def injections_for(self, identifier: str) -> dict[str, list[dict[str, Any]]]:
        return self._injections.get(identifier, {})

    def has_value(self, identifier: str) -> bool:
        return identifier in self._values

    def value(self, identifier: str) -> Any:
        return self._values[identifier]

    def find_factory(self, identifier: str) -> Callable[..., Any] | None:
        return self._factories.get(identifier)

    def has_rule(self, identifier: str) -> bool:
        """Return whether ``identifier`` is bound to anything besides a type."""
        return (
            identifier in self._preferences
            or identifier in self._preferences.values()
            or identifier in self._aliases
            or identifier in self._values
            or identifier in self._factories
        )
