"""Quickstart: constructor wiring over a closed set of candidate types.

Hand the container every type it may construct, configure the values it cannot
guess, resolve only the top-level service and read the construction log of the
graph it built.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from contractwire import Container, ContainerConfigurationBuilder


class Storage(ABC):
    @abstractmethod
    def location(self) -> str: ...


class DiskStorage(Storage):
    def __init__(self, root: str) -> None:
        self.root = root

    def location(self) -> str:
        return f"disk:{self.root}"


class ReportService:
    def __init__(self, storage: Storage) -> None:
        self.storage = storage


TYPES = [Storage, DiskStorage, ReportService]


def main() -> None:
    builder = ContainerConfigurationBuilder()
    builder.for_type(DiskStorage).dependencies(root="/var/reports")
    container = Container(builder.build(TYPES), TYPES)

    service = container.get(ReportService)
    print(f"location={service.storage.location()}")  # => location=disk:/var/reports

    again = container.get(ReportService)
    print(f"cached={service is again}")  # => cached=True

    log = container.resolve(ReportService).construction_log()
    print(f"log={log!r}")  # => log='ReportService\n\tStorage\n\t\tDiskStorage\n\t\t\troot -> /var/reports'


if __name__ == "__main__":
    main()
