from __future__ import annotations

from typing import TYPE_CHECKING, Any

from contractwire._internal.configuration import ConfigurationKind
from contractwire._internal.type_checks import generic_definition, is_closed_generic

if TYPE_CHECKING:
    from contractwire._internal.configuration import (
        DependencyConfiguration,
        ImplementationConfiguration,
    )
    from contractwire._internal.metadata import (
        ConstructorInfo,
        ParameterInfo,
        TypeMetadataProvider,
    )
    from contractwire._internal.resolution_context import ResolutionContext


class Implementation:
    """Binds one concrete candidate type to a constructor and its parameter overrides."""

    def __init__(self, implementation_type: Any, metadata_provider: TypeMetadataProvider) -> None:
        self.type = implementation_type
        self.constructors: tuple[ConstructorInfo, ...] = metadata_provider.get_metadata(
            implementation_type,
        ).constructors
        self._implementation_configuration: ImplementationConfiguration | None = None
        self._definition_configuration: ImplementationConfiguration | None = None

    def try_get_constructor(self) -> ConstructorInfo | None:
        """Select the constructor the container calls.

        The single constructor wins; among several, the single one marked with
        ``container_constructor`` wins. ``None`` means there is either no
        constructor or no way to choose one; compare with ``constructors`` to
        tell the cases apart.
        """
        if len(self.constructors) == 1:
            return self.constructors[0]
        marked = [
            constructor for constructor in self.constructors if constructor.is_container_constructor
        ]
        return marked[0] if len(marked) == 1 else None

    def set_context(self, context: ResolutionContext) -> None:
        self._implementation_configuration = context.get_or_null(
            ConfigurationKind.IMPLEMENTATION,
            self.type,
        )
        self._definition_configuration = (
            context.get_or_null(ConfigurationKind.IMPLEMENTATION, generic_definition(self.type))
            if is_closed_generic(self.type)
            else None
        )

    def get_dependency_configuration(
        self,
        parameter: ParameterInfo,
    ) -> DependencyConfiguration | None:
        dependency_configuration = None
        if self._implementation_configuration is not None:
            dependency_configuration = self._implementation_configuration.get_or_null(parameter)
        if dependency_configuration is None and self._definition_configuration is not None:
            dependency_configuration = self._definition_configuration.get_or_null(parameter)
        return dependency_configuration

    def get_unused_dependency_configuration_names(self) -> list[str]:
        if self._implementation_configuration is None:
            return []
        return self._implementation_configuration.get_unused_dependency_configuration_keys()


__all__ = ["Implementation"]
