from __future__ import annotations

from collections.abc import Sequence


class DIForgeError(Exception):
    """Represent a base class for all diforge-specific failures.

    Catch this type when you want to handle any diforge error path without
    matching each concrete exception class individually.
    """


class DIForgeInvalidRegistrationError(DIForgeError):
    """Signal invalid registration input.

    Raised by container setters when a key is neither a string identifier nor
    a class, and by ``Container.set_rules`` when the rules structure does not
    validate.
    """


class DIForgeNotFoundError(DIForgeError):
    """Signal that an identifier names nothing the container can produce.

    The identifier is not a known type, alias, preference, raw value or
    factory. Raised directly by ``get``/``create`` and never wrapped into
    ``DIForgeConstructionError``, even when it happens deep inside a
    dependency chain.
    """

    def __init__(self, identifier: str) -> None:
        self.identifier = identifier
        super().__init__(f"Identifier '{identifier}' does not exist")


class DIForgeConstructionError(DIForgeError):
    """Signal that a known identifier could not be built.

    Any failure raised while introspecting a type, binding its parameters,
    calling its constructor or factory, or invoking an injected method is
    re-raised as this error. The original exception is kept as ``cause`` and
    as ``__cause__``.
    """

    def __init__(
        self,
        identifier: str | None,
        cause: BaseException | None = None,
        *,
        message: str | None = None,
    ) -> None:
        self.identifier = identifier
        self.cause = cause
        if message is None:
            message = f"Could not construct '{identifier}'"
            if cause is not None:
                message = f"{message}: {cause}"
        super().__init__(message)


class DIForgeMissingParameterError(DIForgeConstructionError):
    """Signal a required parameter with no override and no typed dependency.

    ``identifier`` names the type being built once the error leaves the
    container; it is ``None`` when raised by a bare ``ParameterBinder``.
    Typical fixes include passing the value at call time, registering it with
    ``Container.set_params``, or annotating the parameter with a class the
    container can build.
    """

    def __init__(self, parameter: str, identifier: str | None = None) -> None:
        self.parameter = parameter
        super().__init__(identifier, message=f"Required parameter '{parameter}' is missing")


class DIForgeCycleDetectedError(DIForgeError):
    """Signal a cyclic preference chain, alias chain or dependency graph."""

    def __init__(self, chain: Sequence[str]) -> None:
        self.chain = tuple(chain)
        super().__init__("Cycle detected: " + " -> ".join(self.chain))
