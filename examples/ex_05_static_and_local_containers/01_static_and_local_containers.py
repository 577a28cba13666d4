"""Static and local containers.

A ``StaticContainer`` owns services marked with ``@static``; every local
container created from it shares them. Other services are local: each local
container builds its own, with its own configuration.
"""

from __future__ import annotations

from contractwire import ContainerConfigurationBuilder, StaticContainer, static


@static
class MetricsRegistry:
    def __init__(self) -> None:
        self.samples: list[str] = []


class RequestHandler:
    def __init__(self, metrics: MetricsRegistry, tenant: str) -> None:
        self.metrics = metrics
        self.tenant = tenant


TYPES = [MetricsRegistry, RequestHandler]


def configure_tenant_a(builder: ContainerConfigurationBuilder) -> None:
    builder.for_type(RequestHandler).dependencies(tenant="a")


def configure_tenant_b(builder: ContainerConfigurationBuilder) -> None:
    builder.for_type(RequestHandler).dependencies(tenant="b")


def main() -> None:
    static_container = StaticContainer(ContainerConfigurationBuilder().build(TYPES), TYPES)
    tenant_a = static_container.create_local_container("tenant-a", configure_tenant_a)
    tenant_b = static_container.create_local_container("tenant-b", configure_tenant_b)

    handler_a = tenant_a.get(RequestHandler)
    handler_b = tenant_b.get(RequestHandler)

    print(f"tenants={handler_a.tenant},{handler_b.tenant}")  # => tenants=a,b
    print(f"shared_metrics={handler_a.metrics is handler_b.metrics}")  # => shared_metrics=True

    direct = static_container.resolve(RequestHandler)
    print(f"static_status={direct.status.name}")  # => static_status=ERROR


if __name__ == "__main__":
    main()
