from __future__ import annotations

import types
from collections.abc import Iterable, Sequence
from typing import Annotated, Any, TypeGuard, Union, get_args, get_origin

_SEQUENCE_ORIGINS: tuple[Any, ...] = (list, tuple, Sequence, Iterable)
_UNION_ORIGINS: tuple[Any, ...] = (Union, types.UnionType)


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_closed_generic(candidate: object) -> bool:
    """Return true when candidate is a parametrized alias of a user generic class."""
    origin = get_origin(candidate)
    return (
        is_runtime_class(origin)
        and bool(get_args(candidate))
        and origin not in _SEQUENCE_ORIGINS
    )


def generic_definition(candidate: Any) -> Any:
    """Return the open generic definition of a closed alias, or the candidate itself."""
    origin = get_origin(candidate)
    return origin if origin is not None else candidate


def runtime_class_of(candidate: Any) -> type[Any] | None:
    """Return the runtime class behind a type key, unwrapping generic aliases."""
    if is_runtime_class(candidate):
        return candidate
    origin = get_origin(candidate)
    if is_runtime_class(origin):
        return origin
    return None


def strip_annotated(annotation: Any) -> tuple[Any, tuple[Any, ...]]:
    """Split ``Annotated[T, *metadata]`` into ``T`` and its metadata."""
    if get_origin(annotation) is Annotated:
        inner, *metadata = get_args(annotation)
        return inner, tuple(metadata)
    return annotation, ()


def unwrap_optional(annotation: Any) -> tuple[Any, bool]:
    """Unwrap ``T | None`` into ``T``.

    Returns:
        The inner annotation and whether ``None`` was part of the union. Unions
        of several non-``None`` members are returned unchanged.

    """
    if get_origin(annotation) not in _UNION_ORIGINS:
        return annotation, False
    members = [member for member in get_args(annotation) if member is not type(None)]
    if len(members) == 1 and len(members) != len(get_args(annotation)):
        return members[0], True
    return annotation, False


def sequence_item_type(annotation: Any) -> Any | None:
    """Return ``T`` for ``list[T]``, ``tuple[T, ...]``, ``Sequence[T]`` or ``Iterable[T]``."""
    origin = get_origin(annotation)
    if origin not in _SEQUENCE_ORIGINS:
        return None
    args = get_args(annotation)
    if origin is tuple:
        if len(args) == 2 and args[1] is Ellipsis:  # noqa: PLR2004
            return args[0]
        return None
    if len(args) != 1:
        return None
    return args[0]


def format_type_name(candidate: Any) -> str:
    """Return the display name used by messages and construction logs."""
    if candidate is None or candidate is type(None):
        return "None"
    origin = get_origin(candidate)
    if origin in _UNION_ORIGINS:
        return " | ".join(format_type_name(member) for member in get_args(candidate))
    if origin is not None and origin is not Annotated:
        arguments = ", ".join(format_type_name(argument) for argument in get_args(candidate))
        return f"{format_type_name(origin)}[{arguments}]"
    name = getattr(candidate, "__name__", None)
    if isinstance(name, str):
        return name
    return repr(candidate)


__all__ = [
    "format_type_name",
    "generic_definition",
    "is_closed_generic",
    "is_runtime_class",
    "runtime_class_of",
    "sequence_item_type",
    "strip_annotated",
    "unwrap_optional",
]
