"""Tests for contract unions."""

from abc import ABC, abstractmethod
from collections.abc import Callable

from contractwire import Container, ContainerConfigurationBuilder, ServiceStatus

MakeContainer = Callable[..., Container]


class Channel(ABC):
    @abstractmethod
    def name(self) -> str: ...


class Email(Channel):
    def name(self) -> str:
        return "email"


class Sms(Channel):
    def name(self) -> str:
        return "sms"


class Push(Channel):
    def name(self) -> str:
        return "push"


class Region:
    def __init__(self, code: str) -> None:
        self.code = code


TYPES = [Channel, Email, Sms, Push, Region]


def configure_channels(builder: ContainerConfigurationBuilder) -> None:
    builder.contract("email").for_type(Channel).bind(Email)
    builder.contract("sms").for_type(Channel).bind(Sms)
    builder.contract("push").for_type(Channel).bind(Push)
    builder.contract("broken").for_type(Channel).bind(Region)
    builder.contract("eu").for_type(Region).dependencies(code="eu")
    builder.contract("us").for_type(Region).dependencies(code="us")
    builder.union("messaging", "email", "sms")
    builder.union("regions", "eu", "us")


class TestUnionExpansion:
    def test_union_merges_instances_of_each_member(self, make_container: MakeContainer) -> None:
        container = make_container(TYPES, configure_channels)

        names = [channel.name() for channel in container.get_all(Channel, "messaging")]

        assert names == ["email", "sms"]

    def test_union_equals_merge_of_members(self, make_container: MakeContainer) -> None:
        container = make_container(TYPES, configure_channels)

        merged = container.get_all(Channel, "messaging")

        assert merged == [container.get(Channel, "email"), container.get(Channel, "sms")]

    def test_union_status_is_ok(self, make_container: MakeContainer) -> None:
        container = make_container(TYPES, configure_channels)

        resolved = container.resolve(Channel, ["messaging"])

        assert resolved.status is ServiceStatus.OK
        assert resolved.service.used_contracts == ["email", "sms"]

    def test_cartesian_product_of_unions(self, make_container: MakeContainer) -> None:
        container = make_container(TYPES, configure_channels)

        regions = container.get_all(Region, "regions", "messaging")

        assert [region.code for region in regions] == ["eu", "eu", "us", "us"]
        assert regions[0] is container.get(Region, "eu", "email")
        assert regions[1] is container.get(Region, "eu", "sms")
        assert regions[3] is container.get(Region, "us", "sms")

    def test_union_mixed_with_plain_contract(self, make_container: MakeContainer) -> None:
        container = make_container(TYPES, configure_channels)

        names = [channel.name() for channel in container.get_all(Channel, "push", "messaging")]

        assert names == ["email", "sms"]

    def test_clear_old_replaces_members(self, make_container: MakeContainer) -> None:
        def configure(builder: ContainerConfigurationBuilder) -> None:
            configure_channels(builder)
            builder.union("messaging", "push")
            builder.union("alerts", "email")
            builder.union("alerts", "push", clear_old=True)

        container = make_container(TYPES, configure)

        messaging = [channel.name() for channel in container.get_all(Channel, "messaging")]
        alerts = [channel.name() for channel in container.get_all(Channel, "alerts")]

        assert messaging == ["email", "sms", "push"]
        assert alerts == ["push"]


class TestUnionFailure:
    def test_failing_member_fails_aggregate(self, make_container: MakeContainer) -> None:
        def configure(builder: ContainerConfigurationBuilder) -> None:
            configure_channels(builder)
            builder.union("with-broken", "email", "broken", "sms")

        container = make_container(TYPES, configure)

        resolved = container.resolve(Channel, ["with-broken"])

        assert resolved.status is ServiceStatus.FAILED
        assert container.resolve(Channel, ["broken"]).status is ServiceStatus.DEPENDENCY_ERROR

    def test_failure_short_circuits_remaining_combinations(
        self,
        make_container: MakeContainer,
    ) -> None:
        def configure(builder: ContainerConfigurationBuilder) -> None:
            configure_channels(builder)
            builder.union("with-broken", "broken", "sms")

        container = make_container(TYPES, configure)

        resolved = container.resolve(Channel, ["with-broken"])

        assert resolved.status is ServiceStatus.FAILED
        assert all(
            not isinstance(instance, Sms) for instance in resolved.service.instances
        )

    def test_duplicate_contract_in_combination_fails_aggregate(
        self,
        make_container: MakeContainer,
    ) -> None:
        container = make_container(TYPES, configure_channels)

        resolved = container.resolve(Channel, ["email", "messaging"])

        assert resolved.status is ServiceStatus.FAILED
        assert resolved.service.message == (
            "contract [email] already declared, all declared contracts [email]"
        )
