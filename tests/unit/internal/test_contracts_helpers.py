from __future__ import annotations

import pytest

from contractwire._internal.contracts import (
    cartesian_product,
    contract_names_equal,
    declared_contracts_by_names,
    format_contracts_key,
    matches_ordered_subsequence,
    merge_required_contracts,
    normalize_contracts,
)


@pytest.mark.parametrize(
    ("required", "declared", "expected"),
    [
        ((), [], True),
        ((), ["a"], True),
        (("a",), ["a"], True),
        (("a", "b"), ["a", "b"], True),
        (("a", "b"), ["a", "x", "b"], True),
        (("a", "b"), ["x", "a", "y", "b", "z"], True),
        (("a", "b"), ["b", "a"], False),
        (("a", "b"), ["a"], False),
        (("a",), [], False),
        (("A", "b"), ["a", "B"], True),
    ],
)
def test_matches_ordered_subsequence(
    required: tuple[str, ...],
    declared: list[str],
    expected: bool,  # noqa: FBT001
) -> None:
    assert matches_ordered_subsequence(required, declared) is expected


def test_cartesian_product_keeps_position_order() -> None:
    combinations = list(cartesian_product([["a", "b"], ["x"], ["1", "2"]]))

    assert combinations == [
        ["a", "x", "1"],
        ["a", "x", "2"],
        ["b", "x", "1"],
        ["b", "x", "2"],
    ]


def test_merge_required_contracts_without_any_contract_returns_none() -> None:
    assert merge_required_contracts(None, None) is None
    assert merge_required_contracts([], None) is None


def test_merge_required_contracts_appends_required_contract() -> None:
    assert merge_required_contracts(["a"], "b") == ["a", "b"]
    assert merge_required_contracts(None, "b") == ["b"]
    assert merge_required_contracts(["a"], None) == ["a"]


def test_contract_names_compare_case_insensitively() -> None:
    assert contract_names_equal("Archive", "ARCHIVE")
    assert not contract_names_equal("archive", "archives")
    assert normalize_contracts(["Eu", "TEST"]) == ("eu", "test")


def test_format_contracts_key_keeps_original_spelling() -> None:
    assert format_contracts_key(["Eu", "test"]) == "Eu->test"
    assert format_contracts_key([]) == ""


@pytest.mark.parametrize(
    ("declared", "names", "expected"),
    [
        (["a", "b"], ["b", "a"], ["a", "b"]),
        (["a"], ["b", "a"], ["a"]),
        ([], ["local"], []),
        (["Test", "other"], ["test"], ["Test"]),
        (["a", "b"], [], []),
    ],
)
def test_declared_contracts_by_names(
    declared: list[str],
    names: list[str],
    expected: list[str],
) -> None:
    assert declared_contracts_by_names(declared, names) == expected
