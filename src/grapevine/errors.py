"""Exceptions raised by the container."""

__all__ = [
    "GrapevineError",
    "ConfigurationError",
    "InvalidCollectionError",
    "RegistrationError",
    "DuplicateVertexError",
    "DuplicateEdgeError",
    "InvalidDeclarationError",
    "UnknownLifeCycleError",
    "ResolutionError",
    "UnregisteredVertexError",
    "CycleError",
    "FactoryError",
    "CompositionError",
    "CompositionSyntaxError",
]


class GrapevineError(Exception):
    """Base class for every error raised by the container."""

    pass


class ConfigurationError(GrapevineError):
    """Raised when the container or its graph is wired incorrectly."""

    pass


class InvalidCollectionError(ConfigurationError, TypeError):
    """Raised when a backing collection handed to the graph has the wrong type."""

    pass


class RegistrationError(GrapevineError):
    """Raised when a vertex cannot be registered."""

    pass


class DuplicateVertexError(RegistrationError):
    pass


class DuplicateEdgeError(RegistrationError):
    pass


class InvalidDeclarationError(RegistrationError):
    """Raised when an ``__inject__`` or ``__compose__`` declaration is malformed."""

    pass


class UnknownLifeCycleError(RegistrationError, ValueError):
    pass


class ResolutionError(GrapevineError):
    """Raised when a registered vertex cannot be resolved."""

    pass


class UnregisteredVertexError(ResolutionError):
    pass


class CycleError(ResolutionError):
    pass


class FactoryError(ResolutionError):
    pass


class CompositionError(GrapevineError):
    """Raised when a talent cannot be composed onto an instance."""

    pass


class CompositionSyntaxError(CompositionError):
    pass
