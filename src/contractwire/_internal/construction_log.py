from __future__ import annotations

from typing import TYPE_CHECKING, Any

from contractwire._internal.contracts import format_contracts_key
from contractwire._internal.simple_types import SIMPLE_TYPES
from contractwire._internal.status import ServiceStatus
from contractwire._internal.type_checks import format_type_name

if TYPE_CHECKING:
    from contractwire._internal.dependency import ServiceDependency
    from contractwire._internal.service import ContainerService

ERROR_MARKER = " <---------------"
NULL_VALUE = "<null>"
_MARKED_STATUSES = frozenset({ServiceStatus.ERROR, ServiceStatus.FAILED})


def format_construction_log(service: ContainerService) -> str:
    """Render the construction tree of a service as tab-indented text.

    One line per service or value dependency. Lines of services that are not
    ``OK`` start with ``!``, contracts used by a service follow its name as
    ``[a->b]``, comments follow as `` - comment`` and ``ERROR``/``FAILED``
    entries end with ``<---------------``. A service printed earlier in the
    same log is repeated as a single line without its dependencies.

    Args:
        service: Root of the tree.

    Returns:
        Lines joined with ``"\\n"``, without a trailing newline.

    """
    writer = _ConstructionLogWriter()
    writer.write_service(service, depth=0, used_from=None)
    return "\n".join(writer.lines)


class _ConstructionLogWriter:
    def __init__(self) -> None:
        self.lines: list[str] = []
        self._written: set[int] = set()

    def write_service(
        self,
        service: ContainerService,
        *,
        depth: int,
        used_from: ServiceDependency | None,
    ) -> None:
        referenced_with_error = used_from is not None and used_from.status is ServiceStatus.ERROR
        parts = ["\t" * depth]
        if service.status is not ServiceStatus.OK or referenced_with_error:
            parts.append("!")
        parts.append(format_type_name(service.type))
        if service.used_contracts:
            parts.append(f"[{format_contracts_key(service.used_contracts)}]")
        comment = (
            used_from.comment
            if used_from is not None and used_from.comment is not None
            else service.message
        )
        if comment:
            parts.append(f" - {comment}")
        if service.status in _MARKED_STATUSES or referenced_with_error:
            parts.append(ERROR_MARKER)
        self.lines.append("".join(parts))

        if id(service) in self._written:
            return
        self._written.add(id(service))
        for dependency in service.dependencies:
            self.write_dependency(dependency, depth=depth + 1)

    def write_dependency(self, dependency: ServiceDependency, *, depth: int) -> None:
        if dependency.container_service is not None:
            self.write_service(dependency.container_service, depth=depth, used_from=dependency)
            return
        parts = ["\t" * depth]
        if dependency.status is not ServiceStatus.OK:
            parts.append("!")
        parts.append(dependency.name or "")
        if dependency.comment:
            parts.append(f" - {dependency.comment}")
        if dependency.status is ServiceStatus.OK and dependency.is_constant:
            if SIMPLE_TYPES.is_simple_value(dependency.value):
                parts.append(f" -> {dump_value(dependency.value)}")
            else:
                parts.append(" const")
        if dependency.status is ServiceStatus.ERROR:
            parts.append(ERROR_MARKER)
        self.lines.append("".join(parts))


def dump_value(value: Any) -> str:
    return NULL_VALUE if value is None else str(value)


__all__ = ["ERROR_MARKER", "dump_value", "format_construction_log"]
