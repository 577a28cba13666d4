from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Any, Protocol

from contractwire._internal.configuration import (
    ConfigurationKind,
    ImplementationSelector,
    ServiceConfiguration,
    ServiceConfigurationBuilder,
    ServiceConfigurationSet,
    ServiceConfigurationSetBuilder,
)
from contractwire._internal.contracts import normalize_contract_name, normalize_contracts
from contractwire._internal.types_list import TypesList
from contractwire.exceptions import ContractWireInvalidConfigurationError

logger = logging.getLogger(__name__)

DynamicConfigurator = Callable[[type[Any], ServiceConfigurationBuilder], None]


@dataclass(frozen=True, slots=True)
class ContractConfiguration:
    """Definition of a named contract.

    A definition applies only when its ``required_contracts`` were declared
    earlier, in order, in the contract stack. Its per-type configurations live
    in the registry under the exact contract path ``required_contracts + (name,)``.
    """

    name: str
    required_contracts: tuple[str, ...] = ()
    union_contract_names: tuple[str, ...] | None = None
    registry: ConfigurationRegistry | None = None

    @property
    def contracts_path(self) -> tuple[str, ...]:
        return (*self.required_contracts, self.name)

    def get_or_null(self, kind: ConfigurationKind, service_type: Any) -> Any:
        if self.registry is None:
            return None
        configuration = self.registry.get_configuration_or_null(service_type, self.contracts_path)
        return None if configuration is None else configuration.get(kind)


@dataclass(slots=True)
class _DynamicConfiguration:
    base_type: type[Any] | None
    configure: DynamicConfigurator


class ConfigurationRegistry:
    """Immutable index of service configurations, contracts and selectors.

    Build instances through ``ConfigurationRegistry.Builder``; a built
    registry never changes and is shared by every container created from it.
    """

    def __init__(
        self,
        configurations: Mapping[Any, ServiceConfigurationSet],
        contract_configurations: Mapping[str, Sequence[ContractConfiguration]],
        contract_unions: Mapping[str, Sequence[str]],
        implementation_selectors: Sequence[ImplementationSelector],
    ) -> None:
        self._configurations = MappingProxyType(dict(configurations))
        self._contract_unions = MappingProxyType(
            {
                normalize_contract_name(name): tuple(names)
                for name, names in contract_unions.items()
            },
        )
        self._contract_configurations = MappingProxyType(
            {
                normalize_contract_name(name): tuple(
                    replace(
                        definition,
                        registry=self,
                        union_contract_names=(
                            self._contract_unions.get(normalize_contract_name(name))
                            if not definition.required_contracts
                            else None
                        ),
                    )
                    for definition in definitions
                )
                for name, definitions in contract_configurations.items()
            },
        )
        self._implementation_selectors = tuple(implementation_selectors)

    def get_configuration_or_null(
        self,
        service_type: Any,
        contracts: Iterable[str],
    ) -> ServiceConfiguration | None:
        """Return the configuration of a type under an exact contract combination.

        Args:
            service_type: Configured type key.
            contracts: Ordered contract names; ``()`` selects the global configuration.

        """
        try:
            configuration_set = self._configurations.get(service_type)
        except TypeError:
            return None
        return None if configuration_set is None else configuration_set.get_configuration(contracts)

    def get_or_null(self, kind: ConfigurationKind, service_type: Any) -> Any:
        """Return the global (contract-free) configuration of a type projected by kind."""
        configuration = self.get_configuration_or_null(service_type, ())
        return None if configuration is None else configuration.get(kind)

    def get_contracts_union_or_null(self, contract: str) -> tuple[str, ...] | None:
        return self._contract_unions.get(normalize_contract_name(contract))

    def get_contract_configurations(self, contract: str) -> tuple[ContractConfiguration, ...]:
        return self._contract_configurations.get(normalize_contract_name(contract), ())

    def get_implementation_selectors(self) -> tuple[ImplementationSelector, ...]:
        return self._implementation_selectors

    class Builder:
        """Mutable staging area producing a ``ConfigurationRegistry`` once."""

        def __init__(self) -> None:
            self._configurations: dict[Any, ServiceConfigurationSetBuilder] = {}
            self._dynamic_configurators: list[_DynamicConfiguration] = []
            self._contract_unions: dict[str, list[str]] = {}
            self._contract_configurations: dict[str, list[ContractConfiguration]] = {}
            self._implementation_selectors: list[ImplementationSelector] = []
            self._built = False

        def get_configuration_set(self, service_type: Any) -> ServiceConfigurationSetBuilder:
            self._ensure_not_built()
            configuration_set = self._configurations.get(service_type)
            if configuration_set is None:
                configuration_set = self._configurations[service_type] = (
                    ServiceConfigurationSetBuilder()
                )
            return configuration_set

        def define_contract(self, name: str, required_contracts: Sequence[str] = ()) -> None:
            """Register a contract definition unless an equal one already exists."""
            self._ensure_not_built()
            definitions = self._contract_configurations.setdefault(
                normalize_contract_name(name),
                [],
            )
            required_key = normalize_contracts(required_contracts)
            if any(
                normalize_contracts(definition.required_contracts) == required_key
                for definition in definitions
            ):
                return
            definitions.append(
                ContractConfiguration(name=name, required_contracts=tuple(required_contracts)),
            )

        def define_contracts_union(
            self,
            contract: str,
            contract_names: Sequence[str],
            *,
            clear_old: bool = False,
        ) -> None:
            self._ensure_not_built()
            union = self._contract_unions.setdefault(normalize_contract_name(contract), [])
            if clear_old:
                union.clear()
            union.extend(contract_names)
            self.define_contract(contract)

        def register_implementation_selector(self, selector: ImplementationSelector) -> None:
            self._ensure_not_built()
            self._implementation_selectors.append(selector)

        def filtered(self, base_type: type[Any] | None, configure: DynamicConfigurator) -> None:
            """Configure every candidate type (or inheritor of ``base_type``) at build time.

            Types configured explicitly, or by an earlier dynamic configurator,
            are skipped.
            """
            self._ensure_not_built()
            self._dynamic_configurators.append(
                _DynamicConfiguration(base_type=base_type, configure=configure),
            )

        def build(self, types_list: TypesList) -> ConfigurationRegistry:
            """Freeze the staged state into a registry.

            Raises:
                ContractWireInvalidConfigurationError: If the builder was already built.

            """
            self._ensure_not_built()
            self._built = True

            built_configurations: dict[Any, ServiceConfigurationSet] = {
                service_type: configuration_set.build()
                for service_type, configuration_set in self._configurations.items()
                if not configuration_set.is_empty()
            }
            dynamic_count = 0
            for dynamic in self._dynamic_configurators:
                target_types = (
                    types_list.types
                    if dynamic.base_type is None
                    else types_list.inheritors_of(dynamic.base_type)
                )
                for target_type in target_types:
                    if target_type in built_configurations:
                        continue
                    configuration_set = ServiceConfigurationSetBuilder()
                    dynamic.configure(target_type, configuration_set.for_contracts(()))
                    if configuration_set.is_empty():
                        continue
                    built_configurations[target_type] = configuration_set.build()
                    dynamic_count += 1

            registry = ConfigurationRegistry(
                configurations=built_configurations,
                contract_configurations=self._contract_configurations,
                contract_unions=self._contract_unions,
                implementation_selectors=self._implementation_selectors,
            )
            logger.info(
                (
                    "Configuration registry built: configured_types=%d dynamic_types=%d "
                    "contracts=%d unions=%d implementation_selectors=%d"
                ),
                len(built_configurations),
                dynamic_count,
                len(self._contract_configurations),
                len(self._contract_unions),
                len(self._implementation_selectors),
            )
            return registry

        def _ensure_not_built(self) -> None:
            if self._built:
                msg = "Configuration registry builder was already built; create a new builder."
                raise ContractWireInvalidConfigurationError(msg)


class ConfigurationSource(Protocol):
    """Read side of a configuration registry, as consumed during resolution."""

    def get_configuration_or_null(
        self,
        service_type: Any,
        contracts: Iterable[str],
    ) -> ServiceConfiguration | None: ...

    def get_or_null(self, kind: ConfigurationKind, service_type: Any) -> Any: ...

    def get_contracts_union_or_null(self, contract: str) -> tuple[str, ...] | None: ...

    def get_contract_configurations(self, contract: str) -> tuple[ContractConfiguration, ...]: ...

    def get_implementation_selectors(self) -> tuple[ImplementationSelector, ...]: ...


class MergedConfigurationRegistry:
    """Layer a local registry over the registry of the static container.

    Local entries win; contract definitions and implementation selectors of
    both layers apply, local ones first.
    """

    def __init__(self, parent: ConfigurationSource, child: ConfigurationSource) -> None:
        self._parent = parent
        self._child = child

    def get_configuration_or_null(
        self,
        service_type: Any,
        contracts: Iterable[str],
    ) -> ServiceConfiguration | None:
        path = tuple(contracts)
        configuration = self._child.get_configuration_or_null(service_type, path)
        if configuration is not None:
            return configuration
        return self._parent.get_configuration_or_null(service_type, path)

    def get_or_null(self, kind: ConfigurationKind, service_type: Any) -> Any:
        configuration = self.get_configuration_or_null(service_type, ())
        return None if configuration is None else configuration.get(kind)

    def get_contracts_union_or_null(self, contract: str) -> tuple[str, ...] | None:
        union = self._child.get_contracts_union_or_null(contract)
        return union if union is not None else self._parent.get_contracts_union_or_null(contract)

    def get_contract_configurations(self, contract: str) -> tuple[ContractConfiguration, ...]:
        return (
            *self._child.get_contract_configurations(contract),
            *self._parent.get_contract_configurations(contract),
        )

    def get_implementation_selectors(self) -> tuple[ImplementationSelector, ...]:
        return (
            *self._child.get_implementation_selectors(),
            *self._parent.get_implementation_selectors(),
        )


__all__ = [
    "ConfigurationRegistry",
    "ConfigurationSource",
    "ContractConfiguration",
    "DynamicConfigurator",
    "MergedConfigurationRegistry",
]
