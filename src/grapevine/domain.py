"""Domain models used throughout the container."""

import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, NamedTuple, Optional, Union

__all__ = [
    "VertexKind",
    "VertexRecord",
    "Edge",
    "DependencySpec",
    "Rename",
    "Exclude",
    "Resolution",
    "CompositionSpec",
    "classify",
]


class VertexKind(Enum):
    """How a registered payload is turned into a value.

    Attributes:
        CONSTRUCTIBLE: A class; resolving it builds a new instance.
        CALLABLE: Any other callable; resolving it returns what the call returns.
        PASS_THROUGH: Any other value; resolving it returns the value itself.
    """

    CONSTRUCTIBLE = "class"
    CALLABLE = "function"
    PASS_THROUGH = "passThrough"


@dataclass(frozen=True)
class VertexRecord:
    """Everything the graph knows about one registered name.

    Attributes:
        name: The unique name the vertex was registered under.
        payload: The registered class, callable or value.
        kind: The kind decided from the payload at registration time.
        lifecycle: Name of the lifecycle policy. Only set for constructibles.
        dependencies: Raw dependency declarations, in declaration order.
        compositions: Raw composition declarations. Only kept for constructibles.
    """

    name: str
    payload: Any
    kind: VertexKind
    lifecycle: Optional[str] = None
    dependencies: tuple[str, ...] = ()
    compositions: tuple[str, ...] = ()


class Edge(NamedTuple):
    """A directed "depends on" relation: ``source`` depends on ``target``."""

    source: str
    target: str


@dataclass(frozen=True)
class DependencySpec:
    """A parsed dependency declaration.

    Attributes:
        target: Name of the vertex the dependency points at, modifiers stripped.
        optional: Inject ``None`` instead of failing when the target is unregistered.
        factory: Inject a :class:`~grapevine.resolver.Factory` instead of an instance.
    """

    target: str
    optional: bool = False
    factory: bool = False


@dataclass(frozen=True)
class Rename:
    method: str
    alias: str


@dataclass(frozen=True)
class Exclude:
    method: str


Resolution = Union[Rename, Exclude]


@dataclass(frozen=True)
class CompositionSpec:
    """A parsed composition declaration.

    Attributes:
        talent: Name of the registered talent to compose.
        resolutions: Conflict resolutions applied to the talent's methods.
    """

    talent: str
    resolutions: tuple[Resolution, ...] = ()


def classify(payload: Any) -> VertexKind:
    """Decide the kind of a payload.

    Example:
        >>> classify(Database)            # VertexKind.CONSTRUCTIBLE
        >>> classify(make_database)       # VertexKind.CALLABLE
        >>> classify({"url": "..."})      # VertexKind.PASS_THROUGH
    """
    if inspect.isclass(payload):
        return VertexKind.CONSTRUCTIBLE
    if callable(payload):
        return VertexKind.CALLABLE
    return VertexKind.PASS_THROUGH
