from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NamedTuple

from diforge.exceptions import (
    DIForgeConstructionError,
    DIForgeCycleDetectedError,
    DIForgeError,
    DIForgeNotFoundError,
)
from diforge.metadata import MetadataProvider
from diforge.rules import RuleStore


class Resolution(NamedTuple):
    """Outcome of resolving an identifier through preferences and aliases."""

    concrete: str
    """Terminal identifier: a known type or a factory binding."""
    overrides: dict[str, Any]
    """Call-time overrides layered over every alias's params, outermost first."""
    original: str
    """Identifier after preferences, before aliases. Keys caches and injections."""


class Resolver:
    """Resolve identifiers to a constructible target and accumulated overrides."""

    def __init__(self, rules: RuleStore, metadata: MetadataProvider) -> None:
        self._rules = rules
        self._metadata = metadata

    def resolve_preference(self, identifier: str) -> str:
        """Follow the preference chain starting at ``identifier``.

        Raises:
            DIForgeCycleDetectedError: If the chain revisits an identifier.

        """
        chain = [identifier]
        while (preferred := self._rules.find_preference(identifier)) is not None:
            if preferred in chain:
                raise DIForgeCycleDetectedError([*chain, preferred])
            chain.append(preferred)
            identifier = preferred
        return identifier

    def resolve(
        self,
        identifier: str,
        overrides: Mapping[str, Any] | None = None,
    ) -> Resolution:
        """Resolve ``identifier`` to its concrete target.

        Preferences apply only to ``identifier`` itself. The alias chain is then
        followed from the preferred name; on conflicting keys the overrides
        closer to the caller win.

        Args:
            identifier: Identifier requested by the caller.
            overrides: Call-time overrides, taking precedence over alias params.

        Raises:
            DIForgeCycleDetectedError: If either chain revisits an identifier.
            DIForgeNotFoundError: If the chain ends at neither a factory nor a
                type known to the metadata provider.
            DIForgeConstructionError: If looking up the terminal type fails.

        """
        original = self.resolve_preference(identifier)
        accumulated = dict(overrides or {})
        chain = [original]
        current = original
        while (alias := self._rules.find_alias(current)) is not None:
            for name, value in alias.params.items():
                accumulated.setdefault(name, value)
            if alias.target in chain:
                raise DIForgeCycleDetectedError([*chain, alias.target])
            chain.append(alias.target)
            current = alias.target

        if self._rules.find_factory(current) is None and self._find_type(current) is None:
            raise DIForgeNotFoundError(current)
        return Resolution(concrete=current, overrides=accumulated, original=original)

    def _find_type(self, identifier: str) -> type[Any] | None:
        try:
            return self._metadata.find_type(identifier)
        except DIForgeError:
            raise
        except Exception as error:
            raise DIForgeConstructionError(identifier, error) from error
