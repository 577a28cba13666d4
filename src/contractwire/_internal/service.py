from __future__ import annotations

import threading
from typing import TYPE_CHECKING, Any

from contractwire._internal.contracts import contract_names_equal, declared_contracts_by_names
from contractwire._internal.status import ServiceStatus

if TYPE_CHECKING:
    from contractwire._internal.dependency import ServiceDependency
    from contractwire._internal.resolution_context import ResolutionContext


class ContainerService:
    """One unit of resolution: a type resolved under one contract/name key.

    A service is created in ``NOT_RESOLVED`` state, filled by the container while
    its dependencies resolve, and becomes immutable once ``finished`` is set.
    Finished services, failed ones included, are cached and reused.
    """

    def __init__(self, service_type: Any) -> None:
        self.type = service_type
        self.name: str | None = None
        self.status = ServiceStatus.NOT_RESOLVED
        self.message: str | None = None
        self.exception: BaseException | None = None
        self.instances: list[Any] = []
        self.dependencies: list[ServiceDependency] = []
        self.declared_contracts: list[str] = []
        self.used_contracts: list[str] = []
        self.is_static = False

        self.lock = threading.RLock()
        self.owner: int | None = None
        """Ident of the thread constructing the service, ``None`` when idle."""
        self.resolving = False
        self._finished = False
        self._context: ResolutionContext | None = None

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def context(self) -> ResolutionContext | None:
        return self._context

    def attach_to_context(self, context: ResolutionContext) -> None:
        self._context = context

    def use_contract_with_name(self, name: str) -> None:
        if not any(contract_names_equal(name, used) for used in self.used_contracts):
            self.used_contracts.append(name)

    def union_used_contracts(self, other: ContainerService) -> None:
        for name in other.used_contracts:
            self.use_contract_with_name(name)

    def add_instance(self, instance: Any) -> None:
        if all(instance is not existing for existing in self.instances):
            self.instances.append(instance)

    def add_dependency(self, dependency: ServiceDependency) -> None:
        self.dependencies.append(dependency)
        if dependency.container_service is not None:
            self.union_used_contracts(dependency.container_service)

    def union_from(self, other: ContainerService) -> None:
        """Merge the outcome of another resolution of the same type.

        A bad status in ``other`` turns this service into ``FAILED`` carrying the
        other service's message.
        """
        for instance in other.instances:
            self.add_instance(instance)
        for dependency in other.dependencies:
            if all(dependency is not existing for existing in self.dependencies):
                self.dependencies.append(dependency)
        self.union_used_contracts(other)
        if other.status.is_bad():
            self.status = ServiceStatus.FAILED
            self.message = other.message
            self.exception = other.exception

    def end_resolve_dependencies(self) -> None:
        """Finish resolution, deriving the status from dependencies and instances."""
        if self.status is ServiceStatus.NOT_RESOLVED:
            if any(
                dependency.status in (ServiceStatus.ERROR, ServiceStatus.DEPENDENCY_ERROR)
                for dependency in self.dependencies
            ):
                self.status = ServiceStatus.DEPENDENCY_ERROR
            elif self.instances:
                self.status = ServiceStatus.OK
        self._finish()

    def end_resolve_dependencies_with_error(
        self,
        message: str,
        exception: BaseException | None = None,
    ) -> None:
        self.status = ServiceStatus.ERROR
        self.message = message
        self.exception = exception
        self._finish()

    def end_resolve_dependencies_with_failure(self, message: str) -> None:
        self.status = ServiceStatus.FAILED
        self.message = message
        self._finish()

    def end_resolve_dependencies_not_resolved(self, message: str | None = None) -> None:
        self.status = ServiceStatus.NOT_RESOLVED
        self.instances.clear()
        if message is not None:
            self.message = message
        self._finish()

    def get_construction_log(self) -> str:
        from contractwire._internal.construction_log import format_construction_log  # noqa: PLC0415

        return format_construction_log(self)

    def _finish(self) -> None:
        self.used_contracts = declared_contracts_by_names(
            self.declared_contracts,
            self.used_contracts,
        )
        self._finished = True
        self._context = None

    def __repr__(self) -> str:
        return f"ContainerService(type={self.type!r}, status={self.status.name})"


__all__ = ["ContainerService"]
