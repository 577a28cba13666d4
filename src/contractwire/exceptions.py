class ContractWireError(Exception):
    """Represent a base class for all contractwire-specific failures.

    Catch this type when you want to handle any contractwire error path without
    matching each concrete exception class individually.
    """


class ContractWireInvalidConfigurationError(ContractWireError):
    """Signal invalid use of the configuration builders.

    Raised by ``ContainerConfigurationBuilder`` and ``ServiceConfigurationBuilder``
    when arguments are invalid, for example an empty contract name, a dependency
    override that sets more than one of ``value``/``implementation``/``factory``,
    or a second ``build()`` call on an already built registry builder.

    Typical fixes include building the configuration once at startup and passing
    exactly one override source per dependency.
    """


class ContractWireResolutionError(ContractWireError):
    """Represent a base class for unusable resolution results.

    Resolution itself never raises: failures are recorded as statuses on the
    resolved service graph. These errors are raised by ``ResolvedService``
    accessors such as ``single()`` and ``all()`` when the caller asks for an
    instance that cannot be produced. The message always ends with the
    construction log of the requested service.
    """

    def __init__(self, message: str, construction_log: str) -> None:
        super().__init__(f"{message}\n\n{construction_log}")
        self.construction_log = construction_log


class ContractWireServiceNotResolvedError(ContractWireResolutionError):
    """Signal that a required service has no usable implementation.

    Raised by ``ResolvedService.single()`` when the service status is
    ``NOT_RESOLVED``: an abstract type without implementations in the candidate
    type universe, a service switched off with ``dont_use()``, or a service whose
    required dependency is not resolved.

    Typical fixes include adding the implementation to the candidate types,
    binding an implementation explicitly with ``bind(...)``, or removing the
    ``dont_use()`` switch.
    """


class ContractWireServiceCreationError(ContractWireResolutionError):
    """Signal that a service or one of its dependencies failed.

    Raised by ``ResolvedService.single()`` and ``ResolvedService.all()`` when the
    service status is ``ERROR``, ``DEPENDENCY_ERROR`` or ``FAILED``. The
    construction log marks the failing entries with ``<---------------``.

    Typical causes are ambiguous constructors, unconfigured simple parameters,
    cast mismatches, duplicate contract declarations and cyclic dependencies.
    """


class ContractWireManyImplementationsError(ContractWireResolutionError):
    """Signal that a single instance was requested for a multi-implementation service.

    Raised by ``ResolvedService.single()`` when resolution produced more than one
    instance. Use ``ResolvedService.all()`` to receive every instance, or bind a
    single implementation with ``bind(...)``.
    """


class ContractWireCacheError(ContractWireError):
    """Signal a broken internal invariant of the construction cache.

    This error is never expected in normal operation. It indicates that a cached
    service was finished without a terminal status, which means the cache state
    cannot be trusted anymore.
    """
