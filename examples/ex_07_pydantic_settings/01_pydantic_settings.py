"""Pydantic settings as dependencies.

``BaseSettings`` subclasses read their values from the environment, so the
container constructs them without arguments and caches them like any other
service.
"""

from __future__ import annotations

from pydantic_settings import BaseSettings

from contractwire import Container, ContainerConfigurationBuilder


class AppSettings(BaseSettings):
    value: str = "settings"


class Service:
    def __init__(self, settings: AppSettings) -> None:
        self.settings = settings


TYPES = [AppSettings, Service]


def main() -> None:
    container = Container(ContainerConfigurationBuilder().build(TYPES), TYPES)

    first = container.get(AppSettings)
    service = container.get(Service)

    print(f"settings_singleton={first is service.settings}")  # => settings_singleton=True
    print(f"settings_value={service.settings.value}")  # => settings_value=settings


if __name__ == "__main__":
    main()
