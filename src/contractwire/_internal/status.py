from __future__ import annotations

from enum import Enum


class ServiceStatus(Enum):
    """Outcome of resolving a service or one of its constructor parameters."""

    NOT_RESOLVED = "not_resolved"
    """Absent by design (no implementations, ``dont_use``, optional parameter); not an error."""

    OK = "ok"
    """A value or a resolved service is available."""

    ERROR = "error"
    """Local, terminal failure of this node."""

    DEPENDENCY_ERROR = "dependency_error"
    """A child failed; this node was not constructed but is not the cause."""

    FAILED = "failed"
    """Rejected before construction, for example a cyclic dependency."""

    def is_bad(self) -> bool:
        return self in _BAD_STATUSES


_BAD_STATUSES = frozenset(
    {ServiceStatus.ERROR, ServiceStatus.DEPENDENCY_ERROR, ServiceStatus.FAILED},
)


__all__ = ["ServiceStatus"]
