from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from contractwire._internal.contracts import normalize_contracts
from contractwire.exceptions import ContractWireInvalidConfigurationError

if TYPE_CHECKING:
    from typing_extensions import Self

    from contractwire._internal.container import Container
    from contractwire._internal.metadata import ParameterInfo

NOT_SET: Any = object()


class ConfigurationKind(Enum):
    """Tag selecting which part of a service configuration a lookup returns."""

    SERVICE = "service"
    """The whole ``ServiceConfiguration`` record."""

    IMPLEMENTATION = "implementation"
    """Only the per-parameter ``ImplementationConfiguration`` overrides."""


class ImplementationSelectorAction(Enum):
    INCLUDE = "include"
    EXCLUDE = "exclude"


@dataclass(frozen=True, slots=True)
class ImplementationSelectorDecision:
    """Verdict of an implementation selector about one candidate implementation."""

    target: type[Any]
    action: ImplementationSelectorAction
    comment: str | None = None


ImplementationSelector = Callable[
    [Any, tuple[type[Any], ...]],
    Iterable[ImplementationSelectorDecision],
]
"""Global hook ``(requested type, candidate implementations) -> decisions``."""


@dataclass(frozen=True, slots=True)
class ServiceName:
    """Identify a service by type and the contracts it is resolved under."""

    type: Any
    contracts: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class DependencyConfiguration:
    """Override for one constructor parameter, keyed by parameter name or type."""

    key: Any
    value: Any = NOT_SET
    implementation_type: Any = None
    factory: Callable[[Container], Any] | None = None

    @property
    def has_value(self) -> bool:
        return self.value is not NOT_SET


class ImplementationConfiguration:
    """Per-parameter overrides of one type under one contract combination.

    Named overrides remember whether a constructor parameter ever consulted
    them, so overrides that match no parameter can be reported.
    """

    def __init__(self, dependencies: Iterable[DependencyConfiguration]) -> None:
        self._by_name: dict[str, DependencyConfiguration] = {}
        self._by_type: dict[Any, DependencyConfiguration] = {}
        for dependency in dependencies:
            if isinstance(dependency.key, str):
                self._by_name[dependency.key] = dependency
            else:
                self._by_type[dependency.key] = dependency
        self._used_names: set[str] = set()

    def get_or_null(self, parameter: ParameterInfo) -> DependencyConfiguration | None:
        """Return the override for a parameter, by name first and then by annotation.

        Args:
            parameter: Constructor parameter being resolved.

        """
        by_name = self._by_name.get(parameter.name)
        if by_name is not None:
            self._used_names.add(parameter.name)
            return by_name
        if parameter.annotation is None:
            return None
        try:
            return self._by_type.get(parameter.annotation)
        except TypeError:
            return None

    def get_unused_dependency_configuration_keys(self) -> list[str]:
        return [name for name in self._by_name if name not in self._used_names]

    def __bool__(self) -> bool:
        return bool(self._by_name or self._by_type)


@dataclass(frozen=True, slots=True)
class ServiceConfiguration:
    """Override record for one type under one exact, ordered contract combination."""

    contracts: tuple[str, ...] = ()
    implementation_types: tuple[type[Any], ...] = ()
    use_autosearch: bool = True
    instance: Any = NOT_SET
    factory: Callable[[Container], Any] | None = None
    dont_use: bool = False
    ignore_implementation: bool = False
    implicit_dependencies: tuple[ServiceName, ...] = ()
    implementation: ImplementationConfiguration | None = None
    comment: str | None = None

    @property
    def has_instance(self) -> bool:
        return self.instance is not NOT_SET

    def get(self, kind: ConfigurationKind) -> Any:
        """Project the record onto a configuration kind."""
        if kind is ConfigurationKind.IMPLEMENTATION:
            return self.implementation
        return self


class ServiceConfigurationSet:
    """Immutable configurations of one type, indexed by exact contract combination."""

    def __init__(self, configurations: Mapping[tuple[str, ...], ServiceConfiguration]) -> None:
        self._configurations = MappingProxyType(
            {normalize_contracts(contracts): value for contracts, value in configurations.items()},
        )

    def get_configuration(self, contracts: Iterable[str]) -> ServiceConfiguration | None:
        return self._configurations.get(normalize_contracts(contracts))

    def __len__(self) -> int:
        return len(self._configurations)


class ServiceConfigurationBuilder:
    """Accumulate overrides for one type under one contract combination.

    Every method returns the builder, so calls chain:

    .. code-block:: python

        builder.for_type(Storage).bind(DiskStorage).dependencies(root="/var/data")

    """

    def __init__(self, contracts: tuple[str, ...] = ()) -> None:
        self._contracts = contracts
        self._implementation_types: list[type[Any]] = []
        self._use_autosearch: bool | None = None
        self._instance: Any = NOT_SET
        self._factory: Callable[[Container], Any] | None = None
        self._dont_use = False
        self._ignore_implementation = False
        self._implicit_dependencies: list[ServiceName] = []
        self._dependencies: dict[Any, DependencyConfiguration] = {}
        self._comment: str | None = None

    def bind(self, *implementation_types: type[Any], clear: bool = False) -> Self:
        """Use the given implementations for an abstract type.

        Bound implementations replace autosearch unless ``use_autosearch(True)``
        is also configured.

        Args:
            *implementation_types: Concrete classes implementing the type.
            clear: Drop implementations bound by earlier calls first.

        """
        if clear:
            self._implementation_types.clear()
        for implementation_type in implementation_types:
            if implementation_type not in self._implementation_types:
                self._implementation_types.append(implementation_type)
        return self

    def use_autosearch(self, flag: bool = True) -> Self:  # noqa: FBT001, FBT002
        self._use_autosearch = flag
        return self

    def use_instance(self, instance: Any) -> Self:
        self._instance = instance
        return self

    def factory(self, factory: Callable[[Container], Any]) -> Self:
        """Build the service with ``factory(container)`` instead of a constructor."""
        self._factory = factory
        return self

    def dont_use(self) -> Self:
        self._dont_use = True
        return self

    def ignore_implementation(self) -> Self:
        """Skip this type whenever it is found as an implementation of an abstract type."""
        self._ignore_implementation = True
        return self

    def with_implicit_dependency(self, service_type: Any, *contracts: str) -> Self:
        """Resolve another service together with this one without passing it to the constructor."""
        self._implicit_dependencies.append(ServiceName(type=service_type, contracts=contracts))
        return self

    def dependency(
        self,
        key: Any,
        *,
        value: Any = NOT_SET,
        implementation: Any = None,
        factory: Callable[[Container], Any] | None = None,
    ) -> Self:
        """Override one constructor parameter.

        Args:
            key: Parameter name, or parameter annotation to match every parameter
                of that type.
            value: Constant passed to the parameter.
            implementation: Type resolved for the parameter instead of its annotation.
            factory: Callable receiving the container and returning the value.

        Raises:
            ContractWireInvalidConfigurationError: If not exactly one of
                ``value``, ``implementation`` and ``factory`` is given.

        """
        sources = [value is not NOT_SET, implementation is not None, factory is not None]
        if sources.count(True) != 1:
            msg = (
                f"Dependency override for [{key}] must set exactly one of "
                "'value', 'implementation' or 'factory'."
            )
            raise ContractWireInvalidConfigurationError(msg)
        self._dependencies[key] = DependencyConfiguration(
            key=key,
            value=value,
            implementation_type=implementation,
            factory=factory,
        )
        return self

    def dependencies(self, **values: Any) -> Self:
        for name, value in values.items():
            self.dependency(name, value=value)
        return self

    def with_comment(self, comment: str) -> Self:
        self._comment = comment
        return self

    def is_empty(self) -> bool:
        return (
            not self._implementation_types
            and self._use_autosearch is None
            and self._instance is NOT_SET
            and self._factory is None
            and not self._dont_use
            and not self._ignore_implementation
            and not self._implicit_dependencies
            and not self._dependencies
            and self._comment is None
        )

    def build(self) -> ServiceConfiguration:
        use_autosearch = (
            self._use_autosearch
            if self._use_autosearch is not None
            else not self._implementation_types
        )
        return ServiceConfiguration(
            contracts=self._contracts,
            implementation_types=tuple(self._implementation_types),
            use_autosearch=use_autosearch,
            instance=self._instance,
            factory=self._factory,
            dont_use=self._dont_use,
            ignore_implementation=self._ignore_implementation,
            implicit_dependencies=tuple(self._implicit_dependencies),
            implementation=(
                ImplementationConfiguration(self._dependencies.values())
                if self._dependencies
                else None
            ),
            comment=self._comment,
        )


@dataclass(slots=True)
class ServiceConfigurationSetBuilder:
    """Staging area for the configurations of one type."""

    builders: dict[tuple[str, ...], ServiceConfigurationBuilder] = field(default_factory=dict)

    def for_contracts(self, contracts: tuple[str, ...]) -> ServiceConfigurationBuilder:
        key = normalize_contracts(contracts)
        builder = self.builders.get(key)
        if builder is None:
            builder = self.builders[key] = ServiceConfigurationBuilder(contracts)
        return builder

    def is_empty(self) -> bool:
        return all(builder.is_empty() for builder in self.builders.values())

    def build(self) -> ServiceConfigurationSet:
        return ServiceConfigurationSet(
            {
                contracts: builder.build()
                for contracts, builder in self.builders.items()
                if not builder.is_empty()
            },
        )


__all__ = [
    "NOT_SET",
    "ConfigurationKind",
    "DependencyConfiguration",
    "ImplementationConfiguration",
    "ImplementationSelector",
    "ImplementationSelectorAction",
    "ImplementationSelectorDecision",
    "ServiceConfiguration",
    "ServiceConfigurationBuilder",
    "ServiceConfigurationSet",
    "ServiceConfigurationSetBuilder",
    "ServiceName",
]
