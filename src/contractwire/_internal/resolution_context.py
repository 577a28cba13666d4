from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from contractwire._internal.cache_level import CacheLevel
from contractwire._internal.contracts import (
    cartesian_product,
    contract_names_equal,
    format_contracts_key,
    matches_ordered_subsequence,
    merge_required_contracts,
)
from contractwire._internal.service import ContainerService
from contractwire._internal.type_checks import format_type_name

if TYPE_CHECKING:
    from contractwire._internal.configuration import ConfigurationKind
    from contractwire._internal.container import Container
    from contractwire._internal.registry import ConfigurationSource, ContractConfiguration

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ContractDeclaration:
    """A contract pushed on the declaration stack with its applicable definitions."""

    name: str
    definitions: list[ContractConfiguration] = field(default_factory=list)


class ResolutionContext:
    """State of one top-level resolution request.

    The context owns the stack of declared contracts and the stack of services
    being instantiated. It is never shared between concurrent requests; nested
    resolutions of the same request reuse it.
    """

    def __init__(self, configuration: ConfigurationSource) -> None:
        self._configuration = configuration
        self._declared_contracts: list[ContractDeclaration] = []
        self._current: list[ContainerService] = []
        self._current_types: set[Any] = set()

    def declared_contract_names(self) -> list[str]:
        return [declaration.name for declaration in self._declared_contracts]

    def declared_contracts_key(self) -> str:
        return format_contracts_key(self.declared_contract_names())

    def contract_declared(self, name: str) -> bool:
        return any(
            contract_names_equal(declaration.name, name)
            for declaration in self._declared_contracts
        )

    def top_service(self) -> ContainerService | None:
        return self._current[-1] if self._current else None

    def is_instantiating(self, service_type: Any) -> bool:
        return service_type in self._current_types

    def push_contract_declarations(self, names: Sequence[str]) -> str | None:
        """Declare contracts on top of the stack.

        Definitions of each contract apply only when their required contracts
        were declared before it, in order, other contracts allowed in between.

        Returns:
            ``None`` on success, otherwise the message describing the duplicate.
            On failure, contracts pushed by this call before the duplicate stay
            declared and are counted by ``pop_contract_declarations``.

        """
        for name in names:
            if self.contract_declared(name):
                return (
                    f"contract [{name}] already declared, "
                    f"all declared contracts [{self.declared_contracts_key()}]"
                )
            declared = self.declared_contract_names()
            definitions = [
                definition
                for definition in self._configuration.get_contract_configurations(name)
                if matches_ordered_subsequence(definition.required_contracts, declared)
            ]
            self._declared_contracts.append(ContractDeclaration(name=name, definitions=definitions))
        return None

    def pop_contract_declarations(self, count: int) -> None:
        if count:
            del self._declared_contracts[-count:]

    def get_or_null(self, kind: ConfigurationKind, service_type: Any) -> Any:
        """Return the most specific configuration of ``kind`` for a type.

        Declared contracts are searched from the most recently declared one; the
        first definition holding a configuration wins and its contracts are
        recorded as used by the service being instantiated. Without a match the
        contract-free configuration is returned.
        """
        for declaration in reversed(self._declared_contracts):
            for definition in declaration.definitions:
                result = definition.get_or_null(kind, service_type)
                if result is None:
                    continue
                top = self.top_service()
                if top is not None:
                    top.use_contract_with_name(declaration.name)
                    for required in definition.required_contracts:
                        top.use_contract_with_name(required)
                return result
        return self._configuration.get_or_null(kind, service_type)

    def resolve(
        self,
        service_type: Any,
        contracts: Sequence[str] | None,
        name: str | None,
        container: Container,
    ) -> ContainerService:
        """Resolve a type under additional contracts, expanding contract unions.

        A union contract resolves once per combination of its members; the
        results merge into one aggregate service that turns ``FAILED`` at the
        first combination that fails.
        """
        required = container.metadata_provider.get_metadata(service_type).required_contract
        contract_names = merge_required_contracts(contracts, required)
        if contract_names is None:
            return container.resolve_singleton(service_type, name, self)

        unions = [self._configuration.get_contracts_union_or_null(c) for c in contract_names]
        if all(union is None for union in unions):
            return self.resolve_using_contracts(service_type, name, container, contract_names)

        alternatives = [
            list(union) if union is not None else [contract]
            for contract, union in zip(contract_names, unions, strict=True)
        ]
        aggregate = ContainerService(service_type)
        # union members count as declared for the aggregate
        declared = self.declared_contract_names()
        for alternative in alternatives:
            for contract in alternative:
                if not any(contract_names_equal(contract, name) for name in declared):
                    declared.append(contract)
        aggregate.declared_contracts = declared
        aggregate.attach_to_context(self)
        for combination in cartesian_product(alternatives):
            logger.debug(
                "Resolving '%s' for contract union combination [%s]",
                format_type_name(service_type),
                format_contracts_key(combination),
            )
            item = self.resolve_using_contracts(service_type, name, container, combination)
            aggregate.union_from(item)
            if aggregate.status.is_bad():
                break
        aggregate.end_resolve_dependencies()
        return aggregate

    def resolve_using_contracts(
        self,
        service_type: Any,
        name: str | None,
        container: Container,
        contract_names: Sequence[str],
    ) -> ContainerService:
        pushed_before = len(self._declared_contracts)
        try:
            message = self.push_contract_declarations(contract_names)
            if message is not None:
                failed = ContainerService(service_type)
                failed.declared_contracts = self.declared_contract_names()
                failed.end_resolve_dependencies_with_error(message)
                return failed
            return container.resolve_singleton(service_type, name, self)
        finally:
            self.pop_contract_declarations(len(self._declared_contracts) - pushed_before)

    def instantiate(
        self,
        service: ContainerService,
        name: str | None,
        container: Container,
    ) -> None:
        """Construct a service unless its type is already being constructed.

        A type met again while being constructed is a cycle: the service turns
        ``FAILED`` and nothing is constructed.
        """
        previous = self.top_service()
        service.declared_contracts = self.declared_contract_names()
        service.is_static = container.cache_level is CacheLevel.STATIC
        service.name = name
        if service.type in self._current_types:
            type_name = format_type_name(service.type)
            previous_name = "null" if previous is None else format_type_name(previous.type)
            message = f"cyclic dependency {type_name} ...-> {previous_name} -> {type_name}"
            logger.debug("Cyclic dependency detected: %s", message)
            service.end_resolve_dependencies_with_failure(message)
            return

        self._current.append(service)
        self._current_types.add(service.type)
        service.attach_to_context(self)
        try:
            container.instantiate(service)
        finally:
            self._current.pop()
            self._current_types.discard(service.type)


__all__ = ["ContractDeclaration", "ResolutionContext"]
