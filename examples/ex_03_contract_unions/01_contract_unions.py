"""Contract unions: one name resolving under several contracts.

``union("all-channels", "email", "sms")`` resolves the service once under
``email`` and once under ``sms`` and merges the instances. Without contracts,
a ``list[Notifier]`` parameter receives every implementation found among the
candidate types.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from contractwire import Container, ContainerConfigurationBuilder


class Notifier(ABC):
    @abstractmethod
    def channel(self) -> str: ...


class EmailNotifier(Notifier):
    def channel(self) -> str:
        return "email"


class SmsNotifier(Notifier):
    def channel(self) -> str:
        return "sms"


class AlertService:
    def __init__(self, notifiers: list[Notifier]) -> None:
        self.notifiers = notifiers


TYPES = [Notifier, EmailNotifier, SmsNotifier, AlertService]


def main() -> None:
    builder = ContainerConfigurationBuilder()
    builder.contract("email").for_type(Notifier).bind(EmailNotifier)
    builder.contract("sms").for_type(Notifier).bind(SmsNotifier)
    builder.union("all-channels", "email", "sms")
    container = Container(builder.build(TYPES), TYPES)

    email_only = container.get(Notifier, "email")
    print(f"email_only={email_only.channel()}")  # => email_only=email

    channels = [notifier.channel() for notifier in container.get_all(Notifier, "all-channels")]
    print(f"channels={channels}")  # => channels=['email', 'sms']

    alerts = container.get(AlertService)
    alert_channels = [notifier.channel() for notifier in alerts.notifiers]
    print(f"alert_channels={alert_channels}")  # => alert_channels=['email', 'sms']


if __name__ == "__main__":
    main()
