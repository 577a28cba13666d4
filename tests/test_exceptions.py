"""Tests for the exception hierarchy."""

from collections.abc import Callable

import pytest

from contractwire import (
    Container,
    ContractWireCacheError,
    ContractWireError,
    ContractWireInvalidConfigurationError,
    ContractWireManyImplementationsError,
    ContractWireResolutionError,
    ContractWireServiceCreationError,
    ContractWireServiceNotResolvedError,
)

MakeContainer = Callable[..., Container]


class Endpoint:
    def __init__(self, host: str) -> None:
        self.host = host


@pytest.mark.parametrize(
    "exception_type",
    [
        ContractWireCacheError,
        ContractWireInvalidConfigurationError,
        ContractWireResolutionError,
    ],
)
def test_library_errors_share_base_class(exception_type: type[Exception]) -> None:
    assert issubclass(exception_type, ContractWireError)


@pytest.mark.parametrize(
    "exception_type",
    [
        ContractWireManyImplementationsError,
        ContractWireServiceCreationError,
        ContractWireServiceNotResolvedError,
    ],
)
def test_resolution_errors_share_base_class(exception_type: type[Exception]) -> None:
    assert issubclass(exception_type, ContractWireResolutionError)


def test_resolution_error_message_ends_with_log() -> None:
    error = ContractWireServiceCreationError("service [A] construction failed", "!A - boom")

    assert str(error) == "service [A] construction failed\n\n!A - boom"
    assert error.construction_log == "!A - boom"


def test_creation_error_message(make_container: MakeContainer) -> None:
    container = make_container([Endpoint])

    with pytest.raises(ContractWireServiceCreationError) as exc_info:
        container.get(Endpoint)

    assert str(exc_info.value) == (
        "service [Endpoint] construction failed\n\n"
        "!Endpoint\n"
        "\t!host - parameter [host] of service [Endpoint] is not configured <---------------"
    )


def test_not_resolved_error_message(make_container: MakeContainer) -> None:
    container = make_container(
        [Endpoint],
        lambda builder: builder.for_type(Endpoint).dont_use(),
    )

    with pytest.raises(ContractWireServiceNotResolvedError) as exc_info:
        container.get(Endpoint)

    assert str(exc_info.value) == "no instances for [Endpoint]\n\n!Endpoint - DontUse"


def test_catching_base_class(make_container: MakeContainer) -> None:
    container = make_container([Endpoint])

    with pytest.raises(ContractWireError):
        container.get(Endpoint)
