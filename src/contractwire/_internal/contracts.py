from __future__ import annotations

import itertools
from collections.abc import Iterable, Iterator, Sequence

CONTRACTS_SEPARATOR = "->"


def normalize_contract_name(name: str) -> str:
    """Return the case-insensitive lookup form of a contract name."""
    return name.casefold()


def normalize_contracts(names: Iterable[str]) -> tuple[str, ...]:
    return tuple(normalize_contract_name(name) for name in names)


def contract_names_equal(left: str, right: str) -> bool:
    return normalize_contract_name(left) == normalize_contract_name(right)


def format_contracts_key(names: Iterable[str]) -> str:
    """Format contract names the way messages and construction logs print them."""
    return CONTRACTS_SEPARATOR.join(names)


def matches_ordered_subsequence(required: Sequence[str], declared: Sequence[str]) -> bool:
    """Return whether ``required`` occurs in ``declared`` in order, gaps allowed.

    ``["a", "b"]`` matches ``["a", "x", "b"]`` but neither ``["b", "a"]`` nor
    ``["a"]``. Comparison is case-insensitive.
    """
    declared_iterator = iter(normalize_contracts(declared))
    return all(
        any(candidate == name for candidate in declared_iterator)
        for name in normalize_contracts(required)
    )


def declared_contracts_by_names(declared: Sequence[str], names: Iterable[str]) -> list[str]:
    """Return the declared contracts found in ``names``, in declaration order.

    Used contracts of a service are reported only for contracts declared at its
    own level; contracts declared for its dependencies are dropped.
    """
    wanted = set(normalize_contracts(names))
    return [name for name in declared if normalize_contract_name(name) in wanted]


def cartesian_product(alternatives: Sequence[Sequence[str]]) -> Iterator[list[str]]:
    """Yield every combination picking one name from each alternative set, in order."""
    for combination in itertools.product(*alternatives):
        yield list(combination)


def merge_required_contracts(
    contracts: Sequence[str] | None,
    required: str | None,
) -> list[str] | None:
    """Append the contract a class requires to the contracts requested for it.

    Returns:
        ``None`` when neither the caller nor the class asks for any contract,
        otherwise the merged list.

    """
    if not contracts and required is None:
        return None
    result = list(contracts or ())
    if required is not None:
        result.append(required)
    return result


__all__ = [
    "CONTRACTS_SEPARATOR",
    "cartesian_product",
    "contract_names_equal",
    "declared_contracts_by_names",
    "format_contracts_key",
    "matches_ordered_subsequence",
    "merge_required_contracts",
    "normalize_contract_name",
    "normalize_contracts",
]
