from __future__ import annotations

import inspect
from collections.abc import Iterable
from typing import Any, TypeVar, get_args, get_origin

from contractwire._internal.type_checks import is_closed_generic, is_runtime_class


class TypesList:
    """Closed universe of candidate types handed to the container.

    The container never discovers types on its own; abstract types are resolved
    by searching this list for their implementations.
    """

    def __init__(self, types: Iterable[type[Any]] = ()) -> None:
        self._types: tuple[type[Any], ...] = tuple(dict.fromkeys(types))
        self._inheritors_cache: dict[Any, tuple[Any, ...]] = {}

    @property
    def types(self) -> tuple[type[Any], ...]:
        return self._types

    def inheritors_of(self, base_type: Any) -> tuple[Any, ...]:
        """Return concrete candidate types assignable to ``base_type``.

        For a closed generic base such as ``Repository[int]``, candidates that
        subclass exactly that alias are returned, and open generic candidates
        declared as ``class SqlRepository(Repository[T])`` are returned closed
        over the same arguments (``SqlRepository[int]``).

        Args:
            base_type: Class or closed generic alias.

        """
        cached = self._inheritors_cache.get(base_type)
        if cached is not None:
            return cached
        if is_closed_generic(base_type):
            result = tuple(self._generic_inheritors(base_type))
        elif is_runtime_class(base_type):
            result = tuple(
                candidate
                for candidate in self._types
                if _is_concrete(candidate) and _is_subclass(candidate, base_type)
            )
        else:
            result = ()
        self._inheritors_cache[base_type] = result
        return result

    def _generic_inheritors(self, base_type: Any) -> Iterable[Any]:
        origin = get_origin(base_type)
        arguments = get_args(base_type)
        for candidate in self._types:
            if not _is_concrete(candidate) or not _is_subclass(candidate, origin):
                continue
            for declared_base in _declared_generic_bases(candidate):
                if get_origin(declared_base) is not origin:
                    continue
                declared_arguments = get_args(declared_base)
                if declared_arguments == arguments:
                    yield candidate
                    break
                parameters = getattr(candidate, "__parameters__", ())
                if (
                    parameters
                    and all(isinstance(argument, TypeVar) for argument in declared_arguments)
                    and tuple(declared_arguments) == tuple(parameters)
                ):
                    yield candidate[arguments[0] if len(arguments) == 1 else arguments]
                    break


def _declared_generic_bases(candidate: type[Any]) -> Iterable[Any]:
    for klass in inspect.getmro(candidate):
        yield from getattr(klass, "__orig_bases__", ())


def _is_concrete(candidate: type[Any]) -> bool:
    return (
        is_runtime_class(candidate)
        and not inspect.isabstract(candidate)
        and not getattr(candidate, "_is_protocol", False)
    )


def _is_subclass(candidate: type[Any], base_type: Any) -> bool:
    # non-runtime protocols refuse issubclass() even for explicit subclasses
    if base_type in candidate.__mro__:
        return True
    try:
        return issubclass(candidate, base_type)
    except TypeError:
        return False


__all__ = ["TypesList"]
