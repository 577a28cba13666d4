from __future__ import annotations

from contractwire._internal.markers import (
    CONTAINER_CONSTRUCTOR,
    PUBLIC_CONSTRUCTOR,
    RequireContract,
    constructor_kind,
    container_constructor,
    is_static_service,
    public_constructor,
    require_contract,
    required_contract_of,
    static,
)


@require_contract("archive")
@static
class Marked:
    @container_constructor
    def __init__(self) -> None:
        pass

    @public_constructor
    @classmethod
    def create(cls) -> Marked:
        return cls()


class Child(Marked):
    pass


def test_require_contract_marks_class_only() -> None:
    assert required_contract_of(Marked) == "archive"
    assert required_contract_of(Child) is None
    assert required_contract_of("not-a-class") is None


def test_static_marks_class_only() -> None:
    assert is_static_service(Marked) is True
    assert is_static_service(Child) is False
    assert is_static_service(None) is False


def test_constructor_markers() -> None:
    assert constructor_kind(Marked.__init__) == CONTAINER_CONSTRUCTOR
    assert constructor_kind(vars(Marked)["create"]) == PUBLIC_CONSTRUCTOR
    assert constructor_kind(Child.__init__) == CONTAINER_CONSTRUCTOR
    assert constructor_kind(len) is None


def test_require_contract_metadata_is_hashable_value() -> None:
    assert RequireContract("a") == RequireContract("a")
    assert {RequireContract("a"), RequireContract("a")} == {RequireContract("a")}
