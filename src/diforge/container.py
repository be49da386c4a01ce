from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from contextlib import AbstractContextManager, nullcontext
from contextvars import ContextVar
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from diforge.binder import ParameterBinder
from diforge.config import ContainerRules
from diforge.construction import ConstructionCache
from diforge.exceptions import (
    DIForgeConstructionError,
    DIForgeCycleDetectedError,
    DIForgeError,
    DIForgeInvalidRegistrationError,
    DIForgeMissingParameterError,
)
from diforge.lock_mode import LockMode
from diforge.metadata import InspectMetadataProvider, MetadataProvider, is_runtime_class
from diforge.resolver import Resolver
from diforge.rules import RuleStore

if TYPE_CHECKING:
    from typing_extensions import Self

logger = logging.getLogger(__name__)

# Builds in progress: owning container id, identifier and overrides.
_resolution_stack: ContextVar[tuple[tuple[int, str, dict[str, Any]], ...]] = ContextVar(
    "diforge_resolution_stack",
    default=(),
)


class Container:
    """Build objects by identifier, wiring constructor arguments automatically.

    Identifiers are strings such as ``"app.tv.TV"`` or aliases such as
    ``"LargeTV"``. Class objects are accepted anywhere an identifier is and are
    normalized to ``"<module>.<qualname>"``.

    Constructor arguments come, in order of precedence, from call-time
    overrides, alias params (outer aliases first), params registered for the
    concrete type, declared defaults, and finally shared instances of the
    annotated parameter type.

    ``get`` returns a cached instance per identifier unless the identifier is
    explicitly marked as not shared. ``create`` always builds a new instance
    unless the identifier is explicitly marked as shared.

    Examples:
        .. code-block:: python

            container = Container()
            container.set_alias("LargeTV", TV, {"inches": 55}).set_shared("LargeTV")

            tv = container.get("LargeTV")
            assert tv is container.get("LargeTV")

    """

    def __init__(
        self,
        *,
        metadata_provider: MetadataProvider | None = None,
        lock_mode: LockMode = LockMode.THREAD,
    ) -> None:
        """Initialize an empty container.

        The container registers itself as a raw value under its own class, so
        ``container.get(Container)`` returns it and classes annotated with
        ``Container`` receive it.

        Args:
            metadata_provider: Source of type lookup and parameter metadata.
                Defaults to ``InspectMetadataProvider``.
            lock_mode: ``LockMode.THREAD`` guards all operations with one
                reentrant lock; ``LockMode.NONE`` disables locking.

        """
        self._metadata: MetadataProvider = (
            metadata_provider if metadata_provider is not None else InspectMetadataProvider()
        )
        self._rules = RuleStore()
        self._resolver = Resolver(self._rules, self._metadata)
        self._binder = ParameterBinder(self)
        self._construction_cache = ConstructionCache(self._rules, self._metadata)
        self._shared_instances: dict[str, Any] = {}
        self._lock: AbstractContextManager[Any] = (
            threading.RLock() if lock_mode is LockMode.THREAD else nullcontext()
        )
        self.set(type(self), self)

    # region Rule Setters
    def set_preference(self, key: Any, target: Any) -> Self:
        """Resolve ``key`` as ``target`` before any alias or parameter logic.

        Preferences are typically used to bind an abstract class to one
        implementation. Unlike aliases, injection directives and shared
        instances are keyed by the preferred identifier.

        Args:
            key: Identifier or class to redirect.
            target: Identifier or class used instead.

        """
        with self._lock:
            self._rules.set_preference(self._identifier(key), self._identifier(target))
            self._invalidate()
        return self

    def set_alias(self, alias: Any, target: Any, params: Mapping[str, Any] | None = None) -> Self:
        """Register ``alias`` as ``target`` constructed with ``params``.

        Calling this again for the same alias replaces the previous target and
        params entirely.

        Args:
            alias: Name of the alias.
            target: Identifier, class or other alias the alias points to.
            params: Parameter overrides applied when building through the alias.

        """
        with self._lock:
            self._rules.set_alias(self._identifier(alias), self._identifier(target), params or {})
            self._invalidate()
        return self

    def set_params(self, key: Any, params: Mapping[str, Any]) -> Self:
        """Predefine constructor parameters for a concrete type.

        Repeated calls merge: new keys overwrite, other keys persist.

        Args:
            key: Identifier or class of the concrete type.
            params: Parameter values keyed by name.

        """
        with self._lock:
            self._rules.set_params(self._identifier(key), params)
            self._invalidate()
        return self

    def set_shared(self, key: Any, shared: bool = True) -> Self:  # noqa: FBT001, FBT002
        """Mark an identifier as shared (or explicitly not shared).

        Args:
            key: Identifier, alias or class.
            shared: ``True`` makes ``create`` return the cached instance too.
                ``False`` makes ``get`` build a new instance on every call.

        """
        with self._lock:
            self._rules.set_shared(self._identifier(key), shared=shared)
            self._invalidate()
        return self

    def set_injection(
        self,
        key: Any,
        method: str,
        params: Mapping[str, Any] | None = None,
    ) -> Self:
        """Call ``method`` on every instance built for ``key``.

        Each registration adds one call. Methods run in the order they were first
        registered, and repeated calls to one method in registration order. The
        directive applies only when ``key`` itself is requested, never to other
        aliases of the same type.

        Args:
            key: Identifier, alias or class the directive attaches to.
            method: Name of the method to call after construction.
            params: Method parameter overrides, bound like constructor ones.

        """
        with self._lock:
            self._rules.add_injection(self._identifier(key), method, params or {})
            self._invalidate()
        return self

    def set(self, key: Any, value: Any) -> Self:
        """Bind a raw value returned by ``get``.

        ``create`` ignores raw values unless ``key`` is marked as shared.

        Args:
            key: Identifier or class.
            value: Value to return.

        """
        with self._lock:
            self._rules.set_value(self._identifier(key), value)
            self._invalidate()
        return self

    def set_factory(self, key: Any, factory: Callable[..., Any]) -> Self:
        """Build ``key`` by calling ``factory``.

        A factory taking a positional argument receives the override mapping;
        one without receives nothing. ``get`` caches its result like any other
        build.

        Args:
            key: Identifier or class.
            factory: Function or callable object.

        Raises:
            DIForgeInvalidRegistrationError: If ``factory`` is not callable.

        """
        if not callable(factory):
            msg = f"Factory for {key!r} must be callable, got {factory!r}."
            raise DIForgeInvalidRegistrationError(msg)
        with self._lock:
            self._rules.set_factory(self._identifier(key), factory)
            self._invalidate()
        return self

    def set_rules(self, rules: ContainerRules | Mapping[str, Any]) -> Self:
        """Apply many rules at once.

        Sections are applied in the order preferences, aliases, params, shared,
        injections. Absent sections are skipped.

        Args:
            rules: ``ContainerRules`` or a mapping validated into one.

        Raises:
            DIForgeInvalidRegistrationError: If ``rules`` does not validate.

        """
        if not isinstance(rules, ContainerRules):
            try:
                rules = ContainerRules.model_validate(rules)
            except ValidationError as error:
                msg = f"Invalid container rules: {error}"
                raise DIForgeInvalidRegistrationError(msg) from error

        with self._lock:
            for key, target in rules.preferences.items():
                self.set_preference(key, target)
            for key, (target, *alias_params) in rules.aliases.items():
                self.set_alias(key, target, *alias_params)
            for key, params in rules.params.items():
                self.set_params(key, params)
            for key, shared in rules.shared.items():
                self.set_shared(key, shared)
            for key, calls in rules.injections.items():
                for method, *method_params in calls:
                    self.set_injection(key, method, *method_params)
        return self

    # endregion Rule Setters

    # region Retrieval
    def get(self, key: Any, overrides: Mapping[str, Any] | None = None) -> Any:
        """Return the shared instance for ``key``, building it on first use.

        Raw values are returned as they are. Identifiers marked as not shared
        behave like ``create``. Otherwise the first build is cached under the
        requested identifier (after preferences, before aliases), so two
        aliases of one type cache independently.

        Args:
            key: Identifier, alias or class.
            overrides: Parameter overrides used when a build happens.

        Raises:
            DIForgeNotFoundError: If ``key`` names nothing buildable.
            DIForgeConstructionError: If the build fails.
            DIForgeCycleDetectedError: On cyclic configuration or dependencies.

        """
        with self._lock:
            identifier = self._resolver.resolve_preference(self._identifier(key))
            if self._rules.has_value(identifier):
                return self._rules.value(identifier)
            if self._rules.find_shared(identifier) is False:
                return self._build(identifier, overrides)
            if identifier in self._shared_instances:
                return self._shared_instances[identifier]

            instance = self._build(identifier, overrides)
            self._shared_instances[identifier] = instance
            logger.debug("Cached shared instance for '%s'", identifier)
            return instance

    def create(self, key: Any, overrides: Mapping[str, Any] | None = None) -> Any:
        """Build a new instance for ``key``.

        Identifiers marked as shared are delegated to ``get``. Otherwise the
        shared cache is neither read nor written.

        Args:
            key: Identifier, alias or class.
            overrides: Parameter overrides for this build.

        Raises:
            DIForgeNotFoundError: If ``key`` names nothing buildable.
            DIForgeConstructionError: If the build fails.
            DIForgeCycleDetectedError: On cyclic configuration or dependencies.

        """
        with self._lock:
            identifier = self._resolver.resolve_preference(self._identifier(key))
            if self._rules.find_shared(identifier):
                return self.get(identifier, overrides)
            return self._build(identifier, overrides)

    def has(self, key: Any) -> bool:
        """Return whether ``key`` is bound by any rule or names a known class."""
        with self._lock:
            identifier = self._identifier(key)
            if self._rules.has_rule(identifier):
                return True
            try:
                return self._metadata.find_type(identifier) is not None
            except Exception:  # noqa: BLE001
                logger.debug("Type lookup for '%s' failed", identifier, exc_info=True)
                return False

    # endregion Retrieval

    def _build(self, identifier: str, overrides: Mapping[str, Any] | None) -> Any:
        resolution = self._resolver.resolve(identifier, overrides)
        # Re-entering an identifier with equal overrides is a cycle.
        frame = (id(self), resolution.original, resolution.overrides)
        stack = _resolution_stack.get()
        if frame in stack:
            chain = [name for owner, name, _ in stack[stack.index(frame) :] if owner == id(self)]
            raise DIForgeCycleDetectedError([*chain, resolution.original])

        token = _resolution_stack.set((*stack, frame))
        try:
            plan = self._construction_cache.get_or_build(resolution)
            merged = {**self._rules.params_for(resolution.concrete), **resolution.overrides}
            try:
                return plan.build(self._binder, merged)
            except DIForgeMissingParameterError as error:
                if error.identifier is None:
                    error.identifier = resolution.original
                raise
            except DIForgeError:
                raise
            except Exception as error:
                raise DIForgeConstructionError(resolution.original, error) from error
        finally:
            _resolution_stack.reset(token)

    def _identifier(self, key: Any) -> str:
        if isinstance(key, str):
            return key
        if is_runtime_class(key):
            return self._metadata.register_type(key)
        msg = f"Expected an identifier string or a class, got {key!r}."
        raise DIForgeInvalidRegistrationError(msg)

    def _invalidate(self) -> None:
        # Plans capture alias targets, factories and injection topology.
        self._construction_cache.clear()
