from __future__ import annotations

from collections.abc import Callable
from typing import Any, NamedTuple, TypeVar

C = TypeVar("C", bound=type[Any])
F = TypeVar("F")

REQUIRED_CONTRACT_ATTR = "__contractwire_required_contract__"
STATIC_SERVICE_ATTR = "__contractwire_static__"
CONSTRUCTOR_KIND_ATTR = "__contractwire_constructor__"

CONTAINER_CONSTRUCTOR = "container"
PUBLIC_CONSTRUCTOR = "public"


class RequireContract(NamedTuple):
    """Resolve a parameter under an additional contract.

    Attach ``RequireContract`` metadata to ``typing.Annotated`` so the
    container declares the contract while resolving that parameter.

    Examples:
        .. code-block:: python

            class Report:
                def __init__(
                    self,
                    archive: Annotated[Storage, RequireContract("archive")],
                ) -> None: ...

    """

    name: str


def require_contract(name: str) -> Callable[[C], C]:
    """Declare a contract that is always active while a class is resolved.

    The contract is appended to the contracts requested by the caller, the way
    ``RequireContract`` works for a single parameter.

    Args:
        name: Contract name to declare.

    """

    def decorator(cls: C) -> C:
        setattr(cls, REQUIRED_CONTRACT_ATTR, name)
        return cls

    return decorator


def static(cls: C) -> C:
    """Mark a class as a static service shared by every local container."""
    setattr(cls, STATIC_SERVICE_ATTR, True)
    return cls


def container_constructor(member: F) -> F:
    """Mark ``__init__`` or an alternate constructor class method for container use.

    When a class exposes several public constructors, the container picks the
    single one carrying this marker.
    """
    _mark_constructor(member, CONTAINER_CONSTRUCTOR)
    return member


def public_constructor(member: F) -> F:
    """Expose a class method as an additional public constructor."""
    _mark_constructor(member, PUBLIC_CONSTRUCTOR)
    return member


def constructor_kind(member: object) -> str | None:
    """Return the constructor marker attached to a function or class method, if any."""
    function = member.__func__ if isinstance(member, classmethod | staticmethod) else member
    return getattr(function, CONSTRUCTOR_KIND_ATTR, None)


def required_contract_of(cls: object) -> str | None:
    """Return the contract declared by ``require_contract`` on a class, if any."""
    return vars(cls).get(REQUIRED_CONTRACT_ATTR) if isinstance(cls, type) else None


def is_static_service(cls: object) -> bool:
    """Return whether a class was decorated with ``static``."""
    return isinstance(cls, type) and bool(vars(cls).get(STATIC_SERVICE_ATTR, False))


def _mark_constructor(member: object, kind: str) -> None:
    function = member.__func__ if isinstance(member, classmethod | staticmethod) else member
    setattr(function, CONSTRUCTOR_KIND_ATTR, kind)


__all__ = [
    "RequireContract",
    "constructor_kind",
    "container_constructor",
    "is_static_service",
    "public_constructor",
    "require_contract",
    "required_contract_of",
    "static",
]
