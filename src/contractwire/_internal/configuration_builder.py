from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from contractwire._internal.registry import ConfigurationRegistry
from contractwire._internal.types_list import TypesList
from contractwire.exceptions import ContractWireInvalidConfigurationError

if TYPE_CHECKING:
    from contractwire._internal.configuration import (
        ImplementationSelector,
        ServiceConfigurationBuilder,
    )
    from contractwire._internal.registry import DynamicConfigurator


class ContainerConfigurationBuilder:
    """Collect service configuration before building an immutable registry.

    Configuration written through ``contract(...)`` applies only while those
    contracts are declared, in that order:

    .. code-block:: python

        builder = ContainerConfigurationBuilder()
        builder.for_type(Storage).bind(DiskStorage)
        builder.contract("test").for_type(Storage).bind(MemoryStorage)
        builder.union("all-storages", "disk", "memory")
        registry = builder.build(types)

    """

    def __init__(
        self,
        registry_builder: ConfigurationRegistry.Builder | None = None,
        contracts: tuple[str, ...] = (),
    ) -> None:
        self._registry_builder = (
            registry_builder if registry_builder is not None else ConfigurationRegistry.Builder()
        )
        self._contracts = contracts

    @property
    def contracts(self) -> tuple[str, ...]:
        return self._contracts

    def for_type(self, service_type: Any) -> ServiceConfigurationBuilder:
        """Return the configuration builder of a type under this builder's contracts."""
        return self._registry_builder.get_configuration_set(service_type).for_contracts(
            self._contracts,
        )

    def contract(self, *names: str) -> ContainerConfigurationBuilder:
        """Scope further configuration to contracts nested under the current ones.

        ``builder.contract("a", "b")`` configures contract ``b`` for the case
        where ``a`` was declared before it.

        Raises:
            ContractWireInvalidConfigurationError: If no name or an empty name is given.

        """
        _validate_contract_names(names)
        path = (*self._contracts, *names)
        for index, name in enumerate(path):
            self._registry_builder.define_contract(name, path[:index])
        return ContainerConfigurationBuilder(self._registry_builder, path)

    def union(
        self,
        contract: str,
        *contract_names: str,
        clear_old: bool = False,
    ) -> ContainerConfigurationBuilder:
        """Declare ``contract`` as an alias resolving under each of ``contract_names``.

        Raises:
            ContractWireInvalidConfigurationError: If a name is empty or no members are given.

        """
        _validate_contract_names((contract, *contract_names))
        if not contract_names:
            msg = f"Contract union [{contract}] must name at least one contract."
            raise ContractWireInvalidConfigurationError(msg)
        self._registry_builder.define_contracts_union(
            contract,
            contract_names,
            clear_old=clear_old,
        )
        return self

    def filtered(
        self,
        base_type: type[Any] | None,
        configure: DynamicConfigurator,
    ) -> ContainerConfigurationBuilder:
        """Configure each candidate type, or each inheritor of ``base_type``, at build time."""
        self._registry_builder.filtered(base_type, configure)
        return self

    def implementation_selector(
        self,
        selector: ImplementationSelector,
    ) -> ContainerConfigurationBuilder:
        self._registry_builder.register_implementation_selector(selector)
        return self

    def build(self, types: TypesList | Iterable[type[Any]]) -> ConfigurationRegistry:
        """Freeze the collected configuration.

        Args:
            types: Candidate types the dynamic configurators run over.

        Raises:
            ContractWireInvalidConfigurationError: If the configuration was already built.

        """
        types_list = types if isinstance(types, TypesList) else TypesList(types)
        return self._registry_builder.build(types_list)


def _validate_contract_names(names: Iterable[str]) -> None:
    names = tuple(names)
    if not names:
        msg = "At least one contract name is required."
        raise ContractWireInvalidConfigurationError(msg)
    for name in names:
        if not isinstance(name, str) or not name.strip():
            msg = f"Contract names must be non-empty strings, got {name!r}."
            raise ContractWireInvalidConfigurationError(msg)


__all__ = ["ContainerConfigurationBuilder"]
