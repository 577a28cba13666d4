from __future__ import annotations

from contractwire._internal.construction_log import dump_value, format_construction_log
from contractwire._internal.dependency import ServiceDependency
from contractwire._internal.service import ContainerService
from contractwire._internal.status import ServiceStatus


class Service:
    pass


class Dependency:
    pass


def test_new_service_is_unfinished_and_not_resolved() -> None:
    service = ContainerService(Service)

    assert service.status is ServiceStatus.NOT_RESOLVED
    assert service.finished is False
    assert service.context is None


def test_instances_are_deduplicated_by_identity() -> None:
    service = ContainerService(Service)
    instance = Service()

    service.add_instance(instance)
    service.add_instance(instance)
    service.add_instance(Service())

    assert len(service.instances) == 2


def test_used_contracts_are_deduplicated_case_insensitively() -> None:
    service = ContainerService(Service)

    service.use_contract_with_name("Test")
    service.use_contract_with_name("test")
    service.use_contract_with_name("other")

    assert service.used_contracts == ["Test", "other"]


def test_dependency_contracts_flow_to_parent() -> None:
    child = ContainerService(Dependency)
    child.declared_contracts = ["archive"]
    child.use_contract_with_name("archive")
    child.add_instance(Dependency())
    child.end_resolve_dependencies()
    parent = ContainerService(Service)

    parent.add_dependency(ServiceDependency.service(child, child.instances[0]))

    assert parent.used_contracts == ["archive"]


def test_finished_service_keeps_only_its_declared_contracts() -> None:
    service = ContainerService(Service)
    service.declared_contracts = ["Outer", "inner"]
    service.use_contract_with_name("inner")
    service.use_contract_with_name("nested")
    service.use_contract_with_name("outer")

    service.end_resolve_dependencies()

    assert service.used_contracts == ["Outer", "inner"]


def test_end_resolve_dependencies_derives_status() -> None:
    ok = ContainerService(Service)
    ok.add_instance(Service())
    ok.end_resolve_dependencies()

    empty = ContainerService(Service)
    empty.end_resolve_dependencies()

    failed_child = ContainerService(Dependency)
    failed_child.end_resolve_dependencies_with_error("boom")
    broken = ContainerService(Service)
    broken.add_instance(Service())
    broken.add_dependency(ServiceDependency.service_error(failed_child))
    broken.end_resolve_dependencies()

    assert ok.status is ServiceStatus.OK
    assert empty.status is ServiceStatus.NOT_RESOLVED
    assert broken.status is ServiceStatus.DEPENDENCY_ERROR
    assert all(service.finished for service in (ok, empty, broken))


def test_not_resolved_clears_instances() -> None:
    service = ContainerService(Service)
    service.add_instance(Service())

    service.end_resolve_dependencies_not_resolved("DontUse")

    assert service.instances == []
    assert service.message == "DontUse"
    assert service.status is ServiceStatus.NOT_RESOLVED


def test_union_from_bad_service_fails() -> None:
    first = ContainerService(Service)
    first.declared_contracts = ["a"]
    first.add_instance(Service())
    first.use_contract_with_name("a")
    first.end_resolve_dependencies()
    error = RuntimeError("boom")
    second = ContainerService(Service)
    second.end_resolve_dependencies_with_error("construction exception", error)
    aggregate = ContainerService(Service)
    aggregate.declared_contracts = ["a"]

    aggregate.union_from(first)
    assert aggregate.status is ServiceStatus.NOT_RESOLVED
    aggregate.union_from(second)
    aggregate.end_resolve_dependencies()

    assert aggregate.status is ServiceStatus.FAILED
    assert aggregate.message == "construction exception"
    assert aggregate.exception is error
    assert aggregate.instances == first.instances
    assert aggregate.used_contracts == ["a"]


def test_construction_log_marks_error_references() -> None:
    child = ContainerService(Dependency)
    child.add_instance(Dependency())
    child.end_resolve_dependencies()
    parent = ContainerService(Service)
    parent.add_dependency(ServiceDependency.error(child, "Dependency", "many implementations"))
    parent.add_dependency(ServiceDependency.constant("retries", 3))
    parent.end_resolve_dependencies()

    assert format_construction_log(parent) == (
        "!Service\n"
        "\t!Dependency - many implementations <---------------\n"
        "\tretries -> 3"
    )
    assert parent.get_construction_log() == format_construction_log(parent)


def test_dump_value() -> None:
    assert dump_value(None) == "<null>"
    assert dump_value(1.5) == "1.5"
    assert dump_value("text") == "text"
