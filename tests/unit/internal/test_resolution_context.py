from __future__ import annotations

from contractwire._internal.configuration import ConfigurationKind
from contractwire._internal.configuration_builder import ContainerConfigurationBuilder
from contractwire._internal.resolution_context import ResolutionContext
from contractwire._internal.service import ContainerService


class Settings:
    def __init__(self, mode: str) -> None:
        self.mode = mode


def make_context() -> ResolutionContext:
    builder = ContainerConfigurationBuilder()
    builder.for_type(Settings).dependencies(mode="global")
    builder.contract("test").for_type(Settings).dependencies(mode="test")
    builder.contract("a", "b").for_type(Settings).dependencies(mode="a-b")
    return ResolutionContext(builder.build([Settings]))


def test_push_and_pop_contract_declarations() -> None:
    context = make_context()

    assert context.push_contract_declarations(["test", "a"]) is None
    assert context.declared_contract_names() == ["test", "a"]
    assert context.declared_contracts_key() == "test->a"

    context.pop_contract_declarations(1)
    assert context.declared_contract_names() == ["test"]

    context.pop_contract_declarations(0)
    assert context.declared_contract_names() == ["test"]


def test_duplicate_declaration_reports_stack() -> None:
    context = make_context()

    message = context.push_contract_declarations(["test", "a", "Test"])

    assert message == "contract [Test] already declared, all declared contracts [test->a]"
    assert context.declared_contract_names() == ["test", "a"]
    assert context.contract_declared("TEST")


def test_get_or_null_prefers_latest_contract() -> None:
    context = make_context()

    assert context.get_or_null(ConfigurationKind.SERVICE, Settings).contracts == ()

    context.push_contract_declarations(["test"])
    assert context.get_or_null(ConfigurationKind.SERVICE, Settings).contracts == ("test",)

    context.push_contract_declarations(["a", "b"])
    assert context.get_or_null(ConfigurationKind.SERVICE, Settings).contracts == ("a", "b")


def test_definition_requiring_undeclared_contract_is_skipped() -> None:
    context = make_context()

    context.push_contract_declarations(["b", "a"])

    assert context.get_or_null(ConfigurationKind.SERVICE, Settings).contracts == ()


def test_get_or_null_records_used_contracts_on_top_service() -> None:
    context = make_context()
    service = ContainerService(Settings)
    context.push_contract_declarations(["test", "a", "b"])

    # no service is being instantiated yet
    context.get_or_null(ConfigurationKind.SERVICE, Settings)
    assert context.top_service() is None

    context._current.append(service)  # noqa: SLF001
    context.get_or_null(ConfigurationKind.IMPLEMENTATION, Settings)

    assert service.used_contracts == ["b", "a"]
