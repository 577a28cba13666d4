from __future__ import annotations

import decimal
import fractions
import types
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, Union, get_args, get_origin

from contractwire._internal.simple_types import SIMPLE_TYPES
from contractwire._internal.status import ServiceStatus
from contractwire._internal.type_checks import (
    format_type_name,
    runtime_class_of,
    sequence_item_type,
    strip_annotated,
    unwrap_optional,
)

if TYPE_CHECKING:
    from typing_extensions import Self

    from contractwire._internal.service import ContainerService

_UNION_ORIGINS: tuple[Any, ...] = (Union, types.UnionType)
_INTEGER_WIDENING_TARGETS: tuple[type[Any], ...] = (decimal.Decimal, fractions.Fraction)


@dataclass(frozen=True, slots=True)
class ServiceDependency:
    """Resolution outcome of exactly one constructor parameter.

    A dependency carries either a plain value (a constant, ``is_constant``) or a
    reference to the ``ContainerService`` it was resolved from, together with
    the value taken from that service.
    """

    status: ServiceStatus
    name: str | None = None
    value: Any = None
    container_service: ContainerService | None = None
    comment: str | None = None
    is_constant: bool = False

    @classmethod
    def constant(cls, parameter_name: str, value: Any) -> Self:
        return cls(
            status=ServiceStatus.OK,
            name=_build_name(parameter_name, None if value is None else type(value)),
            value=value,
            is_constant=True,
        )

    @classmethod
    def service(
        cls,
        container_service: ContainerService,
        value: Any,
        name: str | None = None,
    ) -> Self:
        return cls(
            status=ServiceStatus.OK,
            name=name or format_type_name(container_service.type),
            value=value,
            container_service=container_service,
        )

    @classmethod
    def not_resolved(cls, container_service: ContainerService, name: str | None = None) -> Self:
        return cls(
            status=ServiceStatus.NOT_RESOLVED,
            name=name or format_type_name(container_service.type),
            container_service=container_service,
        )

    @classmethod
    def error(
        cls,
        container_service: ContainerService | None,
        name: str | None,
        message: str,
    ) -> Self:
        return cls(
            status=ServiceStatus.ERROR,
            name=name,
            container_service=container_service,
            comment=message,
        )

    @classmethod
    def service_error(cls, container_service: ContainerService, name: str | None = None) -> Self:
        return cls(
            status=ServiceStatus.DEPENDENCY_ERROR,
            name=name or format_type_name(container_service.type),
            container_service=container_service,
        )

    def with_comment(self, comment: str) -> Self:
        return replace(self, comment=comment)

    def cast_to(self, target_type: Any) -> ServiceDependency:
        """Coerce the value to a parameter type without narrowing or losing precision.

        Values that already satisfy the target are kept, ``T | None`` targets are
        unwrapped, and integers widen to ``Decimal``, ``Fraction`` or, when exact,
        ``float``. Any other mismatch becomes an ``ERROR`` dependency.

        Args:
            target_type: Parameter annotation to coerce to.

        """
        succeeded, casted = _try_cast(self.value, target_type)
        if not succeeded:
            message = (
                f"can't cast value [{self.value}] from [{format_type_name(type(self.value))}] "
                f"to [{format_type_name(target_type)}] for dependency [{self.name}]"
            )
            return ServiceDependency.error(self.container_service, self.name, message)
        return self if casted is self.value else replace(self, value=casted)


def _try_cast(value: Any, target_type: Any) -> tuple[bool, Any]:
    if value is None or target_type is None or target_type is Any:
        return True, value

    target_type, _ = strip_annotated(target_type)
    target_type, _ = unwrap_optional(target_type)

    if get_origin(target_type) in _UNION_ORIGINS:
        for member in get_args(target_type):
            succeeded, casted = _try_cast(value, member)
            if succeeded:
                return True, casted
        return False, None

    runtime_class = runtime_class_of(target_type)
    if runtime_class is None:
        return True, value
    if isinstance(value, runtime_class):
        return True, value
    if type(value) is int:
        if runtime_class in _INTEGER_WIDENING_TARGETS:
            return True, runtime_class(value)
        if runtime_class is float:
            try:
                widened = float(value)
            except OverflowError:
                return False, None
            if widened == value:
                return True, widened
    return False, None


def _build_name(parameter_name: str, dependency_type: Any) -> str:
    if (
        dependency_type is None
        or SIMPLE_TYPES.is_simple(dependency_type)
        or sequence_item_type(dependency_type) is not None
        or issubclass(dependency_type, list | tuple | set | frozenset | dict)
    ):
        return parameter_name
    return format_type_name(dependency_type)


__all__ = ["ServiceDependency"]
