from contractwire._internal.cache_level import CacheLevel
from contractwire._internal.configuration import (
    ConfigurationKind,
    ImplementationSelectorAction,
    ImplementationSelectorDecision,
    ServiceConfigurationBuilder,
    ServiceName,
)
from contractwire._internal.configuration_builder import ContainerConfigurationBuilder
from contractwire._internal.container import Container, StaticContainer
from contractwire._internal.lock_mode import LockMode
from contractwire._internal.markers import (
    RequireContract,
    container_constructor,
    public_constructor,
    require_contract,
    static,
)
from contractwire._internal.metadata import (
    ConstructorInfo,
    ParameterInfo,
    SignatureMetadataProvider,
    TypeMetadata,
    TypeMetadataProvider,
)
from contractwire._internal.resolved_service import ResolvedService
from contractwire._internal.status import ServiceStatus
from contractwire._internal.types_list import TypesList
from contractwire.exceptions import (
    ContractWireCacheError,
    ContractWireError,
    ContractWireInvalidConfigurationError,
    ContractWireManyImplementationsError,
    ContractWireResolutionError,
    ContractWireServiceCreationError,
    ContractWireServiceNotResolvedError,
)

__all__ = [
    "CacheLevel",
    "ConfigurationKind",
    "ConstructorInfo",
    "Container",
    "ContainerConfigurationBuilder",
    "ContractWireCacheError",
    "ContractWireError",
    "ContractWireInvalidConfigurationError",
    "ContractWireManyImplementationsError",
    "ContractWireResolutionError",
    "ContractWireServiceCreationError",
    "ContractWireServiceNotResolvedError",
    "ImplementationSelectorAction",
    "ImplementationSelectorDecision",
    "LockMode",
    "ParameterInfo",
    "RequireContract",
    "ResolvedService",
    "ServiceConfigurationBuilder",
    "ServiceName",
    "ServiceStatus",
    "SignatureMetadataProvider",
    "StaticContainer",
    "TypeMetadata",
    "TypeMetadataProvider",
    "TypesList",
    "container_constructor",
    "public_constructor",
    "require_contract",
    "static",
]
