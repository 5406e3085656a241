"""Lifecycle policies for constructible vertexes.

A lifecycle is an opaque name chosen at registration time. The registry below
knows which names are valid, which one applies when none is given, and how
instances built under each name are cached.
"""

from enum import Enum
from typing import Optional

from grapevine.errors import ConfigurationError, UnknownLifeCycleError

__all__ = ["Caching", "LifeCycles", "SINGLETON", "PER_REQUEST", "UNIQUE"]


class Caching(Enum):
    """Caching discipline applied to instances of a constructible vertex.

    Attributes:
        SHARED: One instance for the lifetime of the container.
        PER_REQUEST: One instance per top-level ``get`` call.
        NONE: A new instance every time the vertex is resolved.
    """

    SHARED = "shared"
    PER_REQUEST = "per_request"
    NONE = "none"


SINGLETON = "singleton"
PER_REQUEST = "per_request"
UNIQUE = "unique"


class LifeCycles:
    """Registry of known lifecycle names.

    Example:
        >>> lifecycles = LifeCycles()
        >>> lifecycles.contains("singleton")
        True
        >>> lifecycles.get_default()
        'unique'
        >>> lifecycles.caching_of("per_request")
        <Caching.PER_REQUEST: 'per_request'>
    """

    def __init__(
        self, policies: Optional[dict[str, Caching]] = None, default: str = UNIQUE
    ):
        if policies is None:
            policies = {
                SINGLETON: Caching.SHARED,
                PER_REQUEST: Caching.PER_REQUEST,
                UNIQUE: Caching.NONE,
            }
        if default not in policies:
            raise ConfigurationError(
                f"Default lifecycle '{default}' is not one of {sorted(policies)}"
            )
        self._policies = dict(policies)
        self._default = default

    def contains(self, name: str) -> bool:
        return name in self._policies

    def get_default(self) -> str:
        return self._default

    def caching_of(self, name: str) -> Caching:
        """Return the caching discipline implied by a lifecycle name.

        Raises:
            UnknownLifeCycleError: If the name is not registered.
        """
        try:
            return self._policies[name]
        except KeyError:
            raise UnknownLifeCycleError(f"Unknown lifecycle '{name}'") from None
