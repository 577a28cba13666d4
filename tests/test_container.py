"""Tests for constructor injection and caching in Container."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import pytest

from contractwire import (
    Container,
    ContainerConfigurationBuilder,
    ContractWireManyImplementationsError,
    ContractWireServiceCreationError,
    ContractWireServiceNotResolvedError,
    ServiceStatus,
    container_constructor,
    public_constructor,
)

MakeContainer = Callable[..., Container]


class Database:
    pass


class Repository:
    def __init__(self, database: Database) -> None:
        self.database = database


class Service:
    def __init__(self, repository: Repository) -> None:
        self.repository = repository


class WithSimpleParameter:
    def __init__(self, host: str, port: int = 5432) -> None:
        self.host = host
        self.port = port


class Unannotated:
    def __init__(self, value) -> None:  # noqa: ANN001
        self.value = value


class UnannotatedWithDefault:
    def __init__(self, value=7) -> None:  # noqa: ANN001
        self.value = value


class SeveralConstructors:
    def __init__(self, database: Database) -> None:
        self.database = database
        self.created_by = "init"

    @public_constructor
    @classmethod
    def in_memory(cls) -> "SeveralConstructors":
        return cls(Database())


class MarkedConstructor:
    def __init__(self, database: Database) -> None:
        self.database = database
        self.created_by = "init"

    @container_constructor
    @classmethod
    def create(cls, database: Database) -> "MarkedConstructor":
        instance = cls(database)
        instance.created_by = "create"
        return instance


class Plugin(ABC):
    @abstractmethod
    def run(self) -> None: ...


class FirstPlugin(Plugin):
    def run(self) -> None:
        pass


class SecondPlugin(Plugin):
    def run(self) -> None:
        pass


class Exploding:
    def __init__(self) -> None:
        msg = "boom"
        raise RuntimeError(msg)


class DependsOnExploding:
    def __init__(self, exploding: Exploding) -> None:
        self.exploding = exploding


class TestConstructorInjection:
    def test_resolves_dependency_chain(self, make_container: MakeContainer) -> None:
        container = make_container([Database, Repository, Service])

        service = container.get(Service)

        assert isinstance(service.repository.database, Database)

    def test_resolve_returns_ok_status(self, make_container: MakeContainer) -> None:
        container = make_container([Database, Repository, Service])

        resolved = container.resolve(Service)

        assert resolved.status is ServiceStatus.OK
        assert resolved.is_ok()

    def test_types_outside_candidates_are_still_constructible(
        self,
        make_container: MakeContainer,
    ) -> None:
        container = make_container([])

        assert isinstance(container.get(Repository).database, Database)

    def test_simple_parameter_from_configuration(self, make_container: MakeContainer) -> None:
        container = make_container(
            [WithSimpleParameter],
            lambda builder: builder.for_type(WithSimpleParameter).dependencies(host="db"),
        )

        instance = container.get(WithSimpleParameter)

        assert instance.host == "db"
        assert instance.port == 5432

    def test_unconfigured_simple_parameter_is_error(self, make_container: MakeContainer) -> None:
        container = make_container([WithSimpleParameter])

        resolved = container.resolve(WithSimpleParameter)

        assert resolved.status is ServiceStatus.DEPENDENCY_ERROR
        assert resolved.construction_log() == (
            "!WithSimpleParameter\n"
            "\t!host - parameter [host] of service [WithSimpleParameter] is not configured"
            " <---------------"
        )

    def test_unannotated_parameter_without_default_is_error(
        self,
        make_container: MakeContainer,
    ) -> None:
        container = make_container([Unannotated])

        resolved = container.resolve(Unannotated)

        assert resolved.status is ServiceStatus.DEPENDENCY_ERROR
        assert "has no type annotation" in resolved.construction_log()

    def test_unannotated_parameter_uses_default(self, make_container: MakeContainer) -> None:
        container = make_container([UnannotatedWithDefault])

        assert container.get(UnannotatedWithDefault).value == 7

    def test_configured_value_for_unannotated_parameter(
        self,
        make_container: MakeContainer,
    ) -> None:
        container = make_container(
            [Unannotated],
            lambda builder: builder.for_type(Unannotated).dependencies(value="x"),
        )

        assert container.get(Unannotated).value == "x"


class TestConstructorSelection:
    def test_several_public_constructors_are_ambiguous(
        self,
        make_container: MakeContainer,
    ) -> None:
        container = make_container([SeveralConstructors])

        resolved = container.resolve(SeveralConstructors)

        assert resolved.status is ServiceStatus.ERROR
        assert resolved.construction_log() == (
            "!SeveralConstructors - many public constructors <---------------"
        )

    def test_container_constructor_marker_breaks_ambiguity(
        self,
        make_container: MakeContainer,
    ) -> None:
        container = make_container([Database, MarkedConstructor])

        instance = container.get(MarkedConstructor)

        assert instance.created_by == "create"
        assert isinstance(instance.database, Database)


class TestCaching:
    def test_same_instance_for_same_key(self, make_container: MakeContainer) -> None:
        container = make_container([Database, Repository])

        first = container.get(Repository)
        second = container.get(Repository)

        assert first is second
        assert first.database is container.get(Database)

    def test_resolve_returns_cached_service(self, make_container: MakeContainer) -> None:
        container = make_container([Database])

        assert container.resolve(Database).service is container.resolve(Database).service

    def test_name_discriminates_cache_entries(self, make_container: MakeContainer) -> None:
        container = make_container([Database])

        default = container.resolve(Database).single()
        named = container.resolve(Database, name="replica").single()

        assert default is not named
        assert container.resolve(Database, name="replica").single() is named

    def test_failures_are_cached(self, make_container: MakeContainer) -> None:
        calls: list[int] = []

        def factory(_container: Container) -> Database:
            calls.append(1)
            msg = "unavailable"
            raise ConnectionError(msg)

        container = make_container(
            [Database],
            lambda builder: builder.for_type(Database).factory(factory),
        )

        first = container.resolve(Database)
        second = container.resolve(Database)

        assert first.status is ServiceStatus.ERROR
        assert second.service is first.service
        assert calls == [1]

    def test_separate_containers_do_not_share_cache(self) -> None:
        types = [Database]
        registry = ContainerConfigurationBuilder().build(types)

        first = Container(registry, types)
        second = Container(registry, types)

        assert first.get(Database) is not second.get(Database)


class TestInstancesAndFactories:
    def test_use_instance(self, make_container: MakeContainer) -> None:
        database = Database()
        container = make_container(
            [Database, Repository],
            lambda builder: builder.for_type(Database).use_instance(database),
        )

        assert container.get(Repository).database is database

    def test_factory_receives_container(self, make_container: MakeContainer) -> None:
        seen: list[Any] = []

        def factory(container: Container) -> Repository:
            seen.append(container)
            return Repository(Database())

        container = make_container(
            [Database, Repository],
            lambda builder: builder.for_type(Repository).factory(factory),
        )

        assert isinstance(container.get(Repository), Repository)
        assert seen == [container]

    def test_constructor_exception_is_recorded(self, make_container: MakeContainer) -> None:
        container = make_container([Exploding, DependsOnExploding])

        resolved = container.resolve(DependsOnExploding)

        assert resolved.status is ServiceStatus.DEPENDENCY_ERROR
        exploding = resolved.service.dependencies[0].container_service
        assert exploding is not None
        assert exploding.status is ServiceStatus.ERROR
        assert isinstance(exploding.exception, RuntimeError)
        assert resolved.construction_log() == (
            "!DependsOnExploding\n"
            "\t!Exploding - construction exception: RuntimeError('boom') <---------------"
        )


class TestResolvedServiceAccessors:
    def test_single_raises_creation_error_with_log(self, make_container: MakeContainer) -> None:
        container = make_container([WithSimpleParameter])

        with pytest.raises(ContractWireServiceCreationError) as exc_info:
            container.get(WithSimpleParameter)

        assert exc_info.value.construction_log == container.resolve(
            WithSimpleParameter,
        ).construction_log()
        assert str(exc_info.value).endswith(exc_info.value.construction_log)

    def test_get_all_raises_on_failure(self, make_container: MakeContainer) -> None:
        container = make_container([WithSimpleParameter])

        with pytest.raises(ContractWireServiceCreationError):
            container.get_all(WithSimpleParameter)

    def test_single_raises_not_resolved(self, make_container: MakeContainer) -> None:
        container = make_container(
            [Database],
            lambda builder: builder.for_type(Database).dont_use(),
        )

        with pytest.raises(ContractWireServiceNotResolvedError):
            container.get(Database)
        assert container.get_all(Database) == []

    def test_single_raises_for_many_instances(self, make_container: MakeContainer) -> None:
        container = make_container([Plugin, FirstPlugin, SecondPlugin])

        with pytest.raises(ContractWireManyImplementationsError):
            container.get(Plugin)
        assert [type(plugin) for plugin in container.get_all(Plugin)] == [FirstPlugin, SecondPlugin]
