from __future__ import annotations

from enum import Enum


class CacheLevel(Enum):
    """Define which container tier owns a constructed service."""

    STATIC = "static"
    """Cache in the process-wide static container, shared by all local containers."""

    LOCAL = "local"
    """Cache in the local container that resolved the service."""
