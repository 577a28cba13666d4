from __future__ import annotations

from typing import TYPE_CHECKING, Any

from contractwire._internal.status import ServiceStatus
from contractwire._internal.type_checks import format_type_name
from contractwire.exceptions import (
    ContractWireManyImplementationsError,
    ContractWireServiceCreationError,
    ContractWireServiceNotResolvedError,
)

if TYPE_CHECKING:
    from contractwire._internal.container import Container
    from contractwire._internal.service import ContainerService


class ResolvedService:
    """Public view of a resolution outcome.

    Resolution records failures as statuses; the accessors below raise
    library exceptions when the outcome cannot provide what was asked for.
    Every exception message ends with the construction log.
    """

    def __init__(self, service: ContainerService, container: Container) -> None:
        self.service = service
        self.container = container

    @property
    def status(self) -> ServiceStatus:
        return self.service.status

    def is_ok(self) -> bool:
        return self.service.status is ServiceStatus.OK

    def construction_log(self) -> str:
        return self.service.get_construction_log()

    def single(self) -> Any:
        """Return the only instance.

        Raises:
            ContractWireServiceNotResolvedError: If the service is ``NOT_RESOLVED``.
            ContractWireServiceCreationError: If the service or a dependency failed.
            ContractWireManyImplementationsError: If more than one instance was produced.

        """
        self._raise_if_failed()
        type_name = format_type_name(self.service.type)
        if self.service.status is ServiceStatus.NOT_RESOLVED or not self.service.instances:
            msg = f"no instances for [{type_name}]"
            raise ContractWireServiceNotResolvedError(msg, self.construction_log())
        if len(self.service.instances) > 1:
            msg = f"many instances for [{type_name}]"
            raise ContractWireManyImplementationsError(msg, self.construction_log())
        return self.service.instances[0]

    def all(self) -> list[Any]:
        """Return every instance; empty for a ``NOT_RESOLVED`` service.

        Raises:
            ContractWireServiceCreationError: If the service or a dependency failed.

        """
        self._raise_if_failed()
        return list(self.service.instances)

    def _raise_if_failed(self) -> None:
        if self.service.status.is_bad():
            msg = f"service [{format_type_name(self.service.type)}] construction failed"
            raise ContractWireServiceCreationError(msg, self.construction_log())

    def __repr__(self) -> str:
        return (
            f"ResolvedService(type={format_type_name(self.service.type)}, "
            f"status={self.service.status.name})"
        )


__all__ = ["ResolvedService"]
