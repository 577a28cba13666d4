"""Failures as statuses and the construction log.

Resolution never raises for broken graphs. ``resolve`` returns the status and a
construction log marking every failing entry; ``get`` raises a library
exception whose message ends with the same log.
"""

from __future__ import annotations

from contractwire import (
    Container,
    ContainerConfigurationBuilder,
    ContractWireServiceCreationError,
)


class Left:
    def __init__(self, right: Right) -> None:
        self.right = right


class Right:
    def __init__(self, left: Left) -> None:
        self.left = left


class Mailer:
    def __init__(self, host: str) -> None:
        self.host = host


TYPES = [Left, Right, Mailer]


def main() -> None:
    container = Container(ContainerConfigurationBuilder().build(TYPES), TYPES)

    cycle = container.resolve(Left)
    print(f"cycle_status={cycle.status.name}")  # => cycle_status=DEPENDENCY_ERROR
    print(f"cycle_log={cycle.construction_log()!r}")  # => cycle_log='!Left\n\t!Right\n\t\t!Left - cyclic dependency Left ...-> Right -> Left <---------------'

    mailer = container.resolve(Mailer)
    print(f"mailer_log={mailer.construction_log()!r}")  # => mailer_log='!Mailer\n\t!host - parameter [host] of service [Mailer] is not configured <---------------'

    try:
        container.get(Mailer)
    except ContractWireServiceCreationError as error:
        print(f"error={type(error).__name__}")  # => error=ContractWireServiceCreationError
        print(f"log_attached={error.construction_log == mailer.construction_log()}")  # => log_attached=True


if __name__ == "__main__":
    main()
