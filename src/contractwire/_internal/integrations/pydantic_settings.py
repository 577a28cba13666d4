from __future__ import annotations

import importlib
import warnings
from typing import Any

from contractwire._internal.type_checks import is_runtime_class

_PYDANTIC_V1_WARNING_PATTERN = (
    r"Core Pydantic V1 functionality isn't compatible with Python 3\.14 or greater\."
)


def _load_base_settings(module_name: str) -> type[Any] | None:
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        return None
    base_settings = getattr(module, "BaseSettings", None)
    return base_settings if isinstance(base_settings, type) else None


def _discover_settings_bases() -> tuple[type[Any], ...]:
    bases: list[type[Any]] = []
    current = _load_base_settings("pydantic_settings")
    if current is not None:
        bases.append(current)

    with warnings.catch_warnings():
        warnings.filterwarnings(
            "ignore",
            message=_PYDANTIC_V1_WARNING_PATTERN,
            category=UserWarning,
        )
        legacy = _load_base_settings("pydantic.v1")

    if legacy is not None and all(legacy is not base for base in bases):
        bases.append(legacy)
    return tuple(bases)


SETTINGS_BASES: tuple[type[Any], ...] = _discover_settings_bases()


def is_pydantic_settings_subclass(candidate: object) -> bool:
    """Return whether a class is a supported Pydantic settings model.

    Settings models read their values from the environment when instantiated
    without arguments, so the type-metadata provider exposes them with a single
    zero-parameter constructor instead of their field-based ``__init__``. If
    Pydantic is not installed, this function returns ``False`` for every
    candidate.

    Args:
        candidate: Object to test.

    Returns:
        ``True`` when ``candidate`` is a runtime class and subclasses any
        discovered settings base; otherwise ``False``.

    """
    if not is_runtime_class(candidate):
        return False
    try:
        return any(issubclass(candidate, base) for base in SETTINGS_BASES)
    except TypeError:
        return False


__all__ = [
    "SETTINGS_BASES",
    "is_pydantic_settings_subclass",
]
