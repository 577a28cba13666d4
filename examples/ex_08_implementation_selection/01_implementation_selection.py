"""Choosing implementations of abstract types.

Abstract types resolve to every implementation found among the candidate
types. ``bind`` narrows the choice, ``ignore_implementation`` hides a class
from the search and ``dont_use`` switches a service off. Optional parameters
accept a service that is not resolved.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from contractwire import Container, ContainerConfigurationBuilder


class PaymentGateway(ABC):
    @abstractmethod
    def name(self) -> str: ...


class StripeGateway(PaymentGateway):
    def name(self) -> str:
        return "stripe"


class PaypalGateway(PaymentGateway):
    def name(self) -> str:
        return "paypal"


class LegacyGateway(PaymentGateway):
    def name(self) -> str:
        return "legacy"


class Checkout:
    def __init__(self, gateway: PaymentGateway) -> None:
        self.gateway = gateway


class Reporter:
    def __init__(self, gateway: PaymentGateway | None = None) -> None:
        self.gateway = gateway


TYPES = [PaymentGateway, StripeGateway, PaypalGateway, LegacyGateway, Checkout, Reporter]


def main() -> None:
    builder = ContainerConfigurationBuilder()
    builder.for_type(LegacyGateway).ignore_implementation()
    builder.contract("eu").for_type(PaymentGateway).bind(PaypalGateway)
    builder.contract("offline").for_type(PaymentGateway).dont_use()
    container = Container(builder.build(TYPES), TYPES)

    gateways = [gateway.name() for gateway in container.get_all(PaymentGateway)]
    print(f"gateways={gateways}")  # => gateways=['stripe', 'paypal']

    print(f"eu={container.get(Checkout, 'eu').gateway.name()}")  # => eu=paypal

    ambiguous = container.resolve(Checkout)
    print(f"ambiguous={ambiguous.status.name}")  # => ambiguous=DEPENDENCY_ERROR

    offline = container.resolve(Checkout, ["offline"])
    print(f"offline={offline.status.name}")  # => offline=NOT_RESOLVED

    reporter = container.resolve(Reporter, ["offline"])
    print(f"reporter_gateway={reporter.single().gateway}")  # => reporter_gateway=None
    print(f"reporter_log={reporter.construction_log()!r}")  # => reporter_log='Reporter[offline]\n\t!PaymentGateway[offline] - DontUse'


if __name__ == "__main__":
    main()
