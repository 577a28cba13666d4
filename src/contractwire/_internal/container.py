from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable, Sequence
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, TypeVar

from contractwire._internal.cache_level import CacheLevel
from contractwire._internal.configuration import (
    ConfigurationKind,
    ImplementationSelectorAction,
    ServiceConfiguration,
)
from contractwire._internal.configuration_builder import ContainerConfigurationBuilder
from contractwire._internal.contracts import normalize_contracts
from contractwire._internal.dependency import ServiceDependency
from contractwire._internal.implementation import Implementation
from contractwire._internal.lock_mode import LockMode
from contractwire._internal.markers import is_static_service
from contractwire._internal.metadata import SignatureMetadataProvider
from contractwire._internal.registry import MergedConfigurationRegistry
from contractwire._internal.resolution_context import ResolutionContext
from contractwire._internal.resolved_service import ResolvedService
from contractwire._internal.service import ContainerService
from contractwire._internal.simple_types import SIMPLE_TYPES
from contractwire._internal.status import ServiceStatus
from contractwire._internal.type_checks import (
    format_type_name,
    generic_definition,
    runtime_class_of,
    sequence_item_type,
    strip_annotated,
    unwrap_optional,
)
from contractwire._internal.types_list import TypesList
from contractwire.exceptions import ContractWireCacheError

if TYPE_CHECKING:
    from contractwire._internal.metadata import ParameterInfo, TypeMetadataProvider
    from contractwire._internal.registry import ConfigurationSource

T = TypeVar("T")

logger = logging.getLogger(__name__)

_VALUE_CONTAINER_TYPES: tuple[type[Any], ...] = (dict, list, tuple, set, frozenset)


@dataclass(frozen=True, slots=True)
class _CacheKey:
    type: Any
    contracts: tuple[str, ...]
    name: str | None


class Container:
    """Resolve services from a built configuration and cache them per contract key.

    The container is handed a closed universe of candidate types. Abstract types
    (ABCs, protocols) are resolved to every candidate implementing them; concrete
    types are constructed through their single (or single container-marked)
    constructor, with parameters resolved recursively.

    Resolution never raises for broken graphs. Every outcome, failures included,
    is a ``ContainerService`` status cached under
    ``(type, declared contracts, name)``; ``ResolvedService`` turns unusable
    outcomes into exceptions at the call site.
    """

    def __init__(
        self,
        configuration: ConfigurationSource,
        types: TypesList | Iterable[type[Any]],
        *,
        lock_mode: LockMode = LockMode.THREAD,
        metadata_provider: TypeMetadataProvider | None = None,
        cache_level: CacheLevel = CacheLevel.LOCAL,
        parent: StaticContainer | None = None,
        name: str | None = None,
    ) -> None:
        """Initialize a container over a configuration and a candidate type universe.

        Args:
            configuration: Registry built by ``ContainerConfigurationBuilder.build``.
            types: Candidate types searched for implementations of abstract types.
            lock_mode: ``LockMode.THREAD`` serializes construction per cache key
                across threads; ``LockMode.NONE`` skips locking.
            metadata_provider: Source of constructor metadata. Defaults to
                ``SignatureMetadataProvider``.
            cache_level: Tier this container caches for.
            parent: Static container owning services of the static tier.
            name: Display name, used in logs.

        Examples:
            .. code-block:: python

                types = [Storage, DiskStorage, Report]
                builder = ContainerConfigurationBuilder()
                builder.for_type(DiskStorage).dependencies(root="/var/data")
                container = Container(builder.build(types), types)
                report = container.get(Report)

        """
        self.configuration = configuration
        self.types = types if isinstance(types, TypesList) else TypesList(types)
        self.lock_mode = lock_mode
        self.metadata_provider: TypeMetadataProvider = (
            metadata_provider if metadata_provider is not None else SignatureMetadataProvider()
        )
        self.cache_level = cache_level
        self.parent = parent
        self.name = name

        self._cache: dict[_CacheKey, ContainerService] = {}
        self._waiting: dict[int, ContainerService] = {}
        self._cache_lock: AbstractContextManager[Any] = (
            threading.Lock() if lock_mode is LockMode.THREAD else nullcontext()
        )

    def resolve(
        self,
        service_type: Any,
        contracts: Sequence[str] | None = None,
        name: str | None = None,
    ) -> ResolvedService:
        """Resolve a type, optionally under contracts, without raising.

        Args:
            service_type: Class, protocol or closed generic alias to resolve.
            contracts: Contracts declared, in order, for this resolution.
            name: Extra cache discriminator: the same type and contracts under
                different names are constructed separately.

        """
        context = ResolutionContext(self.configuration)
        service = context.resolve(service_type, list(contracts or ()), name, self)
        return ResolvedService(service, self)

    def get(self, service_type: type[T], *contracts: str) -> T:
        """Return the single instance of a type or raise."""
        return self.resolve(service_type, contracts).single()

    def get_all(self, service_type: type[T], *contracts: str) -> list[T]:
        """Return every instance of a type (empty when none) or raise on failures."""
        return self.resolve(service_type, contracts).all()

    def get_cache_level(self, service_type: Any) -> CacheLevel:
        if self.parent is not None:
            return self.parent.get_cache_level(service_type)
        return self.cache_level

    def resolve_singleton(
        self,
        service_type: Any,
        name: str | None,
        context: ResolutionContext,
    ) -> ContainerService:
        """Return the cached service for the current contracts, constructing it once.

        Concurrent requests for a key being constructed wait for it. A request
        for a key that the same thread is still constructing is a cycle and
        produces an uncached ``FAILED`` service, and so is a wait that would
        close a chain of threads waiting on each other.
        """
        cache_level = self.get_cache_level(service_type)
        if self.parent is not None and cache_level is CacheLevel.STATIC:
            static_context = ResolutionContext(self.parent.configuration)
            static_context.push_contract_declarations(context.declared_contract_names())
            return self.parent.resolve_singleton(service_type, name, static_context)
        if self.cache_level is CacheLevel.STATIC and cache_level is CacheLevel.LOCAL:
            service = ContainerService(service_type)
            service.end_resolve_dependencies_with_error(
                f"local service [{format_type_name(service_type)}] "
                "can't be resolved in static context",
            )
            return service

        key = _CacheKey(
            type=service_type,
            contracts=normalize_contracts(context.declared_contract_names()),
            name=name,
        )
        thread_id = threading.get_ident()
        with self._cache_lock:
            service = self._cache.get(key)
            if service is None:
                service = self._cache[key] = ContainerService(service_type)
            if service.finished:
                return service
            deadlocked = self._waits_on_thread(service, thread_id)
            if not deadlocked:
                self._waiting[thread_id] = service
        if deadlocked:
            logger.debug(
                "Cross-thread cycle detected while waiting for '%s'",
                format_type_name(service_type),
            )
            return self._resolve_cycle(service_type, name, context)

        with self._service_lock(service):
            with self._cache_lock:
                self._waiting.pop(thread_id, None)
                owned_before = service.owner == thread_id
                service.owner = thread_id
            try:
                return self._construct(service, name, context)
            finally:
                if not owned_before:
                    with self._cache_lock:
                        service.owner = None

    def _construct(
        self,
        service: ContainerService,
        name: str | None,
        context: ResolutionContext,
    ) -> ContainerService:
        if service.finished:
            return service
        if service.resolving:
            return self._resolve_cycle(service.type, name, context)
        logger.debug(
            "Constructing '%s' for contracts [%s] in %s container",
            format_type_name(service.type),
            context.declared_contracts_key(),
            self.cache_level.value,
        )
        service.resolving = True
        try:
            context.instantiate(service, name, self)
        finally:
            service.resolving = False
        if not service.finished:
            msg = (
                f"Service '{format_type_name(service.type)}' left construction "
                "without a terminal status."
            )
            raise ContractWireCacheError(msg)
        return service

    def _waits_on_thread(self, service: ContainerService, thread_id: int) -> bool:
        """Return whether waiting for ``service`` would wait on ``thread_id`` itself.

        Follows the thread constructing ``service``, the service that thread is
        waiting for, its owner and so on. Must be called under the cache lock.
        """
        owner = service.owner
        if owner == thread_id:
            return False
        visited: set[int] = set()
        while owner is not None and owner not in visited:
            if owner == thread_id:
                return True
            visited.add(owner)
            waited = self._waiting.get(owner)
            owner = None if waited is None else waited.owner
        return False

    def instantiate(self, service: ContainerService) -> None:
        """Construct a service attached to a resolution context.

        Applies, in order: ``dont_use``, a configured instance, a configured
        factory, implementation search for abstract types and constructor
        injection for concrete ones. Always leaves the service finished.
        """
        context = service.context
        if context is None:
            msg = (
                f"Service '{format_type_name(service.type)}' is not attached to a "
                "resolution context."
            )
            raise ContractWireCacheError(msg)

        configuration: ServiceConfiguration | None = context.get_or_null(
            ConfigurationKind.SERVICE,
            service.type,
        )
        if configuration is not None and configuration.dont_use:
            service.end_resolve_dependencies_not_resolved("DontUse")
            return
        if configuration is not None and configuration.comment is not None:
            service.message = configuration.comment
        if configuration is not None and configuration.has_instance:
            service.add_instance(configuration.instance)
            service.end_resolve_dependencies()
            return
        if configuration is not None and configuration.factory is not None:
            try:
                instance = configuration.factory(self)
            except Exception as error:  # noqa: BLE001
                service.end_resolve_dependencies_with_error(
                    f"construction exception: {error!r}",
                    error,
                )
                return
            service.add_instance(instance)
            service.end_resolve_dependencies()
            return

        if self.metadata_provider.get_metadata(service.type).is_abstract:
            self._instantiate_interface(service, configuration, context)
            return
        if SIMPLE_TYPES.is_simple(service.type):
            service.end_resolve_dependencies_with_error(
                f"can't create simple type [{format_type_name(service.type)}]",
            )
            return
        self._instantiate_implementation(service, configuration, context)

    def _instantiate_interface(
        self,
        service: ContainerService,
        configuration: ServiceConfiguration | None,
        context: ResolutionContext,
    ) -> None:
        candidates: list[Any] = []
        if configuration is not None:
            candidates.extend(configuration.implementation_types)
        if configuration is None or configuration.use_autosearch:
            candidates.extend(
                candidate
                for candidate in self.types.inheritors_of(service.type)
                if candidate not in candidates
            )

        excluded: dict[Any, str | None] = {}
        for selector in self.configuration.get_implementation_selectors():
            try:
                decisions = list(selector(service.type, tuple(candidates)))
            except Exception as error:  # noqa: BLE001
                service.end_resolve_dependencies_with_error(
                    f"construction exception: {error!r}",
                    error,
                )
                return
            for decision in decisions:
                if decision.action is ImplementationSelectorAction.INCLUDE:
                    excluded.pop(decision.target, None)
                    if decision.target not in candidates:
                        candidates.append(decision.target)
                else:
                    if decision.target in candidates:
                        candidates.remove(decision.target)
                    excluded[decision.target] = decision.comment

        if not candidates and not excluded:
            service.end_resolve_dependencies_not_resolved("has no implementations")
            return

        for candidate in candidates:
            candidate_configuration: ServiceConfiguration | None = context.get_or_null(
                ConfigurationKind.SERVICE,
                candidate,
            )
            if (
                candidate_configuration is not None
                and candidate_configuration.ignore_implementation
            ):
                continue
            implementation_service = context.resolve(candidate, None, None, self)
            service.add_dependency(_service_dependency(implementation_service))
            if implementation_service.status is ServiceStatus.OK:
                for instance in implementation_service.instances:
                    service.add_instance(instance)

        for target, comment in excluded.items():
            excluded_service = ContainerService(target)
            excluded_service.end_resolve_dependencies_not_resolved(comment)
            service.add_dependency(ServiceDependency.not_resolved(excluded_service))
        service.end_resolve_dependencies()

    def _instantiate_implementation(
        self,
        service: ContainerService,
        configuration: ServiceConfiguration | None,
        context: ResolutionContext,
    ) -> None:
        implementation = Implementation(service.type, self.metadata_provider)
        constructor = implementation.try_get_constructor()
        if constructor is None:
            service.end_resolve_dependencies_with_error(
                "many public constructors"
                if implementation.constructors
                else "no public constructors",
            )
            return
        implementation.set_context(context)

        arguments: dict[str, Any] = {}
        for parameter in constructor.parameters:
            dependency = self._resolve_parameter(implementation, parameter, service, context)
            service.add_dependency(dependency)
            if dependency.status is ServiceStatus.NOT_RESOLVED:
                if not _is_optional(parameter):
                    service.end_resolve_dependencies_not_resolved()
                    return
                if not parameter.has_default:
                    arguments[parameter.name] = None
                continue
            if dependency.status is not ServiceStatus.OK:
                service.end_resolve_dependencies()
                return
            arguments[parameter.name] = dependency.value

        if configuration is not None:
            for implicit in configuration.implicit_dependencies:
                implicit_service = context.resolve(
                    implicit.type,
                    list(implicit.contracts) or None,
                    None,
                    self,
                )
                _add_implicit_dependency(service, _service_dependency(implicit_service))
                if implicit_service.status.is_bad():
                    service.end_resolve_dependencies()
                    return

        unused = implementation.get_unused_dependency_configuration_names()
        if unused:
            service.end_resolve_dependencies_with_error(
                f"unused dependency configurations [{', '.join(unused)}]",
            )
            return

        try:
            instance = constructor.invoke(arguments)
        except Exception as error:  # noqa: BLE001
            service.end_resolve_dependencies_with_error(f"construction exception: {error!r}", error)
            return
        service.add_instance(instance)
        service.end_resolve_dependencies()

    def _resolve_parameter(
        self,
        implementation: Implementation,
        parameter: ParameterInfo,
        service: ContainerService,
        context: ResolutionContext,
    ) -> ServiceDependency:
        annotation, _ = strip_annotated(parameter.annotation)
        contracts = list(parameter.required_contracts)
        dependency_type, _ = unwrap_optional(annotation)

        dependency_configuration = implementation.get_dependency_configuration(parameter)
        if dependency_configuration is not None:
            if dependency_configuration.has_value:
                return ServiceDependency.constant(
                    parameter.name,
                    dependency_configuration.value,
                ).cast_to(annotation)
            if dependency_configuration.factory is not None:
                try:
                    value = dependency_configuration.factory(self)
                except Exception as error:  # noqa: BLE001
                    return ServiceDependency.error(
                        None,
                        parameter.name,
                        f"construction exception: {error!r}",
                    )
                return ServiceDependency.constant(parameter.name, value).cast_to(annotation)
            dependency_type = dependency_configuration.implementation_type

        if dependency_type is None:
            if parameter.has_default:
                return ServiceDependency.constant(parameter.name, parameter.default)
            return ServiceDependency.error(
                None,
                parameter.name,
                f"parameter [{parameter.name}] of service "
                f"[{format_type_name(service.type)}] has no type annotation",
            )

        item_type = sequence_item_type(dependency_type)
        if item_type is not None:
            item_type, _ = strip_annotated(item_type)

        if _is_value_type(dependency_type, item_type):
            if parameter.has_default:
                return ServiceDependency.constant(parameter.name, parameter.default)
            return ServiceDependency.error(
                None,
                parameter.name,
                f"parameter [{parameter.name}] of service "
                f"[{format_type_name(service.type)}] is not configured",
            )

        if item_type is not None:
            items_service = context.resolve(item_type, contracts or None, None, self)
            if items_service.status.is_bad():
                return ServiceDependency.service_error(items_service)
            collection_factory = tuple if runtime_class_of(dependency_type) is tuple else list
            return ServiceDependency.service(
                items_service,
                collection_factory(items_service.instances),
                parameter.name,
            )

        dependency_service = context.resolve(dependency_type, contracts or None, None, self)
        if dependency_service.status.is_bad():
            return ServiceDependency.service_error(dependency_service)
        if dependency_service.status is ServiceStatus.NOT_RESOLVED:
            return ServiceDependency.not_resolved(dependency_service)
        if len(dependency_service.instances) > 1:
            return ServiceDependency.error(
                dependency_service,
                format_type_name(dependency_service.type),
                f"many implementations for [{format_type_name(dependency_service.type)}]",
            )
        return ServiceDependency.service(dependency_service, dependency_service.instances[0])

    def _resolve_cycle(
        self,
        service_type: Any,
        name: str | None,
        context: ResolutionContext,
    ) -> ContainerService:
        cyclic = ContainerService(service_type)
        if context.is_instantiating(service_type):
            context.instantiate(cyclic, name, self)
        else:
            type_name = format_type_name(service_type)
            previous = context.top_service()
            chain = [type_name]
            if previous is not None:
                chain.insert(0, format_type_name(previous.type))
            cyclic.end_resolve_dependencies_with_failure(
                f"cyclic dependency {type_name} ...-> {' -> '.join(chain)}",
            )
        return cyclic

    def _service_lock(self, service: ContainerService) -> AbstractContextManager[Any]:
        return service.lock if self.lock_mode is LockMode.THREAD else nullcontext()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, cache_level={self.cache_level.name})"


class StaticContainer(Container):
    """Process-wide container owning services of the static tier.

    Types listed in ``static_services`` or decorated with ``static`` are cached
    here and shared by every local container created with
    ``create_local_container``; all other types are local and can only be
    resolved through a local container.
    """

    def __init__(
        self,
        configuration: ConfigurationSource,
        types: TypesList | Iterable[type[Any]],
        *,
        static_services: Iterable[Any] = (),
        lock_mode: LockMode = LockMode.THREAD,
        metadata_provider: TypeMetadataProvider | None = None,
    ) -> None:
        super().__init__(
            configuration,
            types,
            lock_mode=lock_mode,
            metadata_provider=metadata_provider,
            cache_level=CacheLevel.STATIC,
            name="static",
        )
        self.static_services = frozenset(static_services)

    def get_cache_level(self, service_type: Any) -> CacheLevel:
        if service_type in self.static_services or is_static_service(
            generic_definition(service_type),
        ):
            return CacheLevel.STATIC
        return CacheLevel.LOCAL

    def create_local_container(
        self,
        name: str,
        configure: Callable[[ContainerConfigurationBuilder], None] | None = None,
    ) -> Container:
        """Create a local container layered over this container's configuration.

        Args:
            name: Display name of the local container.
            configure: Callback adding local configuration; local entries win
                over static ones for local services.

        """
        builder = ContainerConfigurationBuilder()
        if configure is not None:
            configure(builder)
        local_configuration = MergedConfigurationRegistry(
            parent=self.configuration,
            child=builder.build(self.types),
        )
        logger.info("Local container '%s' created", name)
        return Container(
            local_configuration,
            self.types,
            lock_mode=self.lock_mode,
            metadata_provider=self.metadata_provider,
            cache_level=CacheLevel.LOCAL,
            parent=self,
            name=name,
        )


def _is_optional(parameter: ParameterInfo) -> bool:
    if parameter.has_default:
        return True
    annotation, _ = strip_annotated(parameter.annotation)
    _, is_optional = unwrap_optional(annotation)
    return is_optional


def _is_value_type(dependency_type: Any, item_type: Any) -> bool:
    if item_type is not None:
        return SIMPLE_TYPES.is_simple(item_type)
    if SIMPLE_TYPES.is_simple(dependency_type):
        return True
    runtime_class = runtime_class_of(dependency_type)
    return runtime_class is not None and issubclass(runtime_class, _VALUE_CONTAINER_TYPES)


def _service_dependency(service: ContainerService) -> ServiceDependency:
    if service.status.is_bad():
        return ServiceDependency.service_error(service)
    if service.status is ServiceStatus.NOT_RESOLVED:
        return ServiceDependency.not_resolved(service)
    value = service.instances[0] if len(service.instances) == 1 else list(service.instances)
    return ServiceDependency.service(service, value)


def _add_implicit_dependency(service: ContainerService, dependency: ServiceDependency) -> None:
    for index, existing in enumerate(service.dependencies):
        if existing.container_service is dependency.container_service:
            service.dependencies[index] = existing.with_comment("implicit")
            return
    service.add_dependency(dependency.with_comment("implicit"))


__all__ = ["Container", "StaticContainer"]
