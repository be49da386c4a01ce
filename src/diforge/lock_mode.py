from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for container state.

    A container guards its rules, construction plans and shared instances with
    a single coarse lock. Resolution is reentrant, so the lock is a
    ``threading.RLock``.
    """

    THREAD = "thread"
    """Guard every public operation with one ``threading.RLock``."""

    NONE = "none"
    """Disable locking for containers assembled once and used from one thread."""
