"""Contracts: named configuration scopes.

Configuration written under ``contract("test")`` applies only while the
``test`` contract is declared. Services are cached per declared contracts, so
the production and test graphs never share instances.
"""

from __future__ import annotations

from contractwire import Container, ContainerConfigurationBuilder


class Connection:
    def __init__(self, dsn: str) -> None:
        self.dsn = dsn


class UserRepository:
    def __init__(self, connection: Connection) -> None:
        self.connection = connection


TYPES = [Connection, UserRepository]


def main() -> None:
    builder = ContainerConfigurationBuilder()
    builder.for_type(Connection).dependencies(dsn="postgres://prod")
    builder.contract("test").for_type(Connection).dependencies(dsn="sqlite://memory")
    container = Container(builder.build(TYPES), TYPES)

    production = container.get(UserRepository)
    testing = container.get(UserRepository, "test")

    print(f"production={production.connection.dsn}")  # => production=postgres://prod
    print(f"test={testing.connection.dsn}")  # => test=sqlite://memory
    print(f"separate={production is not testing}")  # => separate=True

    log = container.resolve(UserRepository, ["test"]).construction_log()
    print(f"log={log!r}")  # => log='UserRepository[test]\n\tConnection[test]\n\t\tdsn -> sqlite://memory'


if __name__ == "__main__":
    main()
