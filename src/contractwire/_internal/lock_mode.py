from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for the construction cache.

    The container guarantees that at most one construction completes per cache
    key. ``THREAD`` enforces this across threads; ``NONE`` is intended for
    single-threaded applications that want to skip lock overhead.
    """

    THREAD = "thread"
    """Guard the cache with ``threading.Lock`` and in-progress services with ``threading.RLock``."""

    NONE = "none"
    """Disable locking around cache reads/writes."""
