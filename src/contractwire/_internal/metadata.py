from __future__ import annotations

import inspect
import types
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from inspect import Parameter
from typing import Any, Protocol, TypeVar, Union, get_args, get_origin, get_type_hints

from contractwire._internal.integrations.pydantic_settings import is_pydantic_settings_subclass
from contractwire._internal.markers import (
    CONTAINER_CONSTRUCTOR,
    PUBLIC_CONSTRUCTOR,
    RequireContract,
    constructor_kind,
    required_contract_of,
)
from contractwire._internal.type_checks import (
    is_closed_generic,
    runtime_class_of,
    sequence_item_type,
    strip_annotated,
    unwrap_optional,
)

_SKIPPED_PARAMETER_KINDS = (Parameter.VAR_POSITIONAL, Parameter.VAR_KEYWORD)
_IMPLICIT_FIRST_PARAMETER_NAMES = {"self", "cls"}


@dataclass(frozen=True, slots=True)
class ParameterInfo:
    """Describe one constructor parameter as seen by the container."""

    name: str
    annotation: Any
    """Resolved annotation, ``Annotated`` extras kept, TypeVars substituted for closed generics."""
    default: Any = Parameter.empty
    kind: Any = Parameter.POSITIONAL_OR_KEYWORD
    required_contracts: tuple[str, ...] = ()
    """Contracts declared while resolving the parameter, in order."""

    @property
    def has_default(self) -> bool:
        return self.default is not Parameter.empty

    @property
    def is_positional_only(self) -> bool:
        return self.kind is Parameter.POSITIONAL_ONLY


@dataclass(frozen=True, slots=True)
class ConstructorInfo:
    """Describe one way of constructing a type."""

    name: str
    factory: Callable[..., Any]
    parameters: tuple[ParameterInfo, ...]
    is_container_constructor: bool = False

    def invoke(self, arguments: Mapping[str, Any]) -> Any:
        positional = [
            arguments[parameter.name]
            for parameter in self.parameters
            if parameter.name in arguments and parameter.is_positional_only
        ]
        keyword = {
            parameter.name: arguments[parameter.name]
            for parameter in self.parameters
            if parameter.name in arguments and not parameter.is_positional_only
        }
        return self.factory(*positional, **keyword)


@dataclass(frozen=True, slots=True)
class TypeMetadata:
    """Capabilities of a candidate type, produced by a ``TypeMetadataProvider``."""

    type: Any
    constructors: tuple[ConstructorInfo, ...]
    is_abstract: bool
    required_contract: str | None = None


class TypeMetadataProvider(Protocol):
    """Answer the capability query the container needs for a candidate type.

    The container never inspects classes on its own: constructor selection and
    parameter resolution consume only what the provider returns. Supply a custom
    provider to describe types whose construction is not expressed through their
    Python signatures.
    """

    def get_metadata(self, candidate: Any) -> TypeMetadata: ...


class SignatureMetadataProvider:
    """Build type metadata from runtime signatures and type hints.

    The class itself is a public constructor (its ``__init__`` signature). Class
    methods decorated with ``public_constructor`` or ``container_constructor``
    are additional constructors. Pydantic settings models expose a single
    zero-parameter constructor.
    """

    def __init__(self) -> None:
        self._cache: dict[Any, TypeMetadata] = {}

    def get_metadata(self, candidate: Any) -> TypeMetadata:
        """Return metadata for a class or a closed generic alias.

        Args:
            candidate: Class or closed generic alias, for example ``Box[int]``.

        """
        cached = self._cache.get(candidate)
        if cached is not None:
            return cached

        runtime_class = runtime_class_of(candidate)
        if runtime_class is None:
            metadata = TypeMetadata(type=candidate, constructors=(), is_abstract=True)
        else:
            metadata = TypeMetadata(
                type=candidate,
                constructors=self._constructors(candidate, runtime_class),
                is_abstract=inspect.isabstract(runtime_class) or _is_protocol(runtime_class),
                required_contract=required_contract_of(runtime_class),
            )
        self._cache[candidate] = metadata
        return metadata

    def _constructors(
        self,
        candidate: Any,
        runtime_class: type[Any],
    ) -> tuple[ConstructorInfo, ...]:
        if is_pydantic_settings_subclass(runtime_class):
            return (ConstructorInfo(name="__init__", factory=candidate, parameters=()),)

        typevar_map = _typevar_map(candidate)
        init = runtime_class.__init__
        constructors = [
            ConstructorInfo(
                name="__init__",
                factory=candidate,
                parameters=self._parameters(
                    init,
                    skip_first_parameter=True,
                    typevar_map=typevar_map,
                ),
                is_container_constructor=constructor_kind(init) == CONTAINER_CONSTRUCTOR,
            ),
        ]
        for attribute_name, member in vars(runtime_class).items():
            kind = constructor_kind(member)
            if kind not in {CONTAINER_CONSTRUCTOR, PUBLIC_CONSTRUCTOR}:
                continue
            if attribute_name.startswith("_") or not isinstance(member, classmethod):
                continue
            bound = getattr(runtime_class, attribute_name)
            constructors.append(
                ConstructorInfo(
                    name=attribute_name,
                    factory=bound,
                    parameters=self._parameters(
                        member.__func__,
                        skip_first_parameter=True,
                        typevar_map=typevar_map,
                    ),
                    is_container_constructor=kind == CONTAINER_CONSTRUCTOR,
                ),
            )
        return tuple(constructors)

    def _parameters(
        self,
        function: Callable[..., Any],
        *,
        skip_first_parameter: bool,
        typevar_map: Mapping[TypeVar, Any],
    ) -> tuple[ParameterInfo, ...]:
        if function is object.__init__:
            return ()
        try:
            signature = inspect.signature(function)
        except (TypeError, ValueError):
            return ()
        parameters = tuple(signature.parameters.values())
        if (
            skip_first_parameter
            and parameters
            and parameters[0].name in _IMPLICIT_FIRST_PARAMETER_NAMES
        ):
            parameters = parameters[1:]

        try:
            hints = get_type_hints(function, include_extras=True)
        except (AttributeError, NameError, TypeError):
            hints = {}

        result: list[ParameterInfo] = []
        for parameter in parameters:
            if parameter.kind in _SKIPPED_PARAMETER_KINDS:
                continue
            annotation = hints.get(parameter.name, parameter.annotation)
            if annotation is Parameter.empty or isinstance(annotation, str):
                annotation = None
            elif typevar_map:
                annotation = substitute_typevars(annotation, mapping=typevar_map)
            result.append(
                ParameterInfo(
                    name=parameter.name,
                    annotation=annotation,
                    default=parameter.default,
                    kind=parameter.kind,
                    required_contracts=required_contracts_of(annotation),
                ),
            )
        return tuple(result)


def substitute_typevars(value: Any, *, mapping: Mapping[TypeVar, Any]) -> Any:
    """Substitute TypeVars in a type expression using a resolved mapping.

    Args:
        value: Type expression template that may contain TypeVars.
        mapping: Mapping from template TypeVars to concrete type arguments.

    Returns:
        The substituted type expression with available TypeVars replaced.

    """
    if isinstance(value, TypeVar):
        return mapping.get(value, value)

    origin = get_origin(value)
    arguments = get_args(value)
    if origin is None or not arguments:
        return value

    substituted = tuple(substitute_typevars(argument, mapping=mapping) for argument in arguments)
    if substituted == arguments:
        return value
    if origin is types.UnionType:
        origin = Union
    try:
        if hasattr(value, "copy_with") and origin is not Union:
            return value.copy_with(substituted)
        return origin[substituted[0] if len(substituted) == 1 else substituted]
    except TypeError:
        return value


def required_contracts_of(annotation: Any) -> tuple[str, ...]:
    """Collect ``RequireContract`` names of a parameter annotation.

    Markers on the annotation come first, then markers on the item type of a
    collection annotation such as ``list[Annotated[T, RequireContract("x")]]``.
    """
    if annotation is None:
        return ()
    inner, metadata = strip_annotated(annotation)
    names = [item.name for item in metadata if isinstance(item, RequireContract)]
    item_type = sequence_item_type(unwrap_optional(inner)[0])
    if item_type is not None:
        _, item_metadata = strip_annotated(item_type)
        names.extend(item.name for item in item_metadata if isinstance(item, RequireContract))
    return tuple(names)


def _typevar_map(candidate: Any) -> dict[TypeVar, Any]:
    if not is_closed_generic(candidate):
        return {}
    origin = get_origin(candidate)
    parameters = getattr(origin, "__parameters__", ())
    return dict(zip(parameters, get_args(candidate), strict=False))


def _is_protocol(runtime_class: type[Any]) -> bool:
    return bool(getattr(runtime_class, "_is_protocol", False))


__all__ = [
    "ConstructorInfo",
    "ParameterInfo",
    "SignatureMetadataProvider",
    "TypeMetadata",
    "TypeMetadataProvider",
    "required_contracts_of",
    "substitute_typevars",
]
