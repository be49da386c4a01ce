from collections.abc import Mapping
from typing import Any, NamedTuple

INSTANCE_OF = "instanceOf"
"""Key marking a parameter value as "construct this identifier here"."""

PARAMS = "params"
"""Optional key holding overrides for the marked construction."""


class InstanceOf(NamedTuple):
    """Construct ``key`` in place of a literal parameter value.

    Equivalent to the mapping form ``{"instanceOf": key, "params": {...}}``,
    which is what declarative rules use.

    Examples:
        .. code-block:: python

            container.set_params(Garage, {"car": InstanceOf(Car, {"wheels": 4})})

    """

    key: Any
    params: Mapping[str, Any] | None = None


def is_instance_marker(value: object) -> bool:
    """Return whether ``value`` asks for a constructed instance."""
    if isinstance(value, InstanceOf):
        return True
    return isinstance(value, Mapping) and INSTANCE_OF in value


def unpack_instance_marker(value: Any) -> tuple[Any, Mapping[str, Any]]:
    """Return the target key and overrides carried by an instance marker."""
    if isinstance(value, InstanceOf):
        return value.key, value.params or {}
    return value[INSTANCE_OF], value.get(PARAMS) or {}
