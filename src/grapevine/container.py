"""Registration and lookup of vertexes.

The :class:`Container` is the entry point applications use: ``register`` reads
and validates a payload's declarations and writes it into the graph, ``get``
resolves a name into a value.
"""

import logging
from typing import Any, Callable, Optional

from grapevine.composer import Composer
from grapevine.declarations import (
    COMPOSE_ATTRIBUTE,
    INJECT_ATTRIBUTE,
    parse_dependency,
    read_declaration,
)
from grapevine.domain import Edge, VertexKind, VertexRecord, classify
from grapevine.errors import DuplicateEdgeError, DuplicateVertexError
from grapevine.graph import Graph
from grapevine.resolver import Resolver
from grapevine.talents import is_talent as default_is_talent

__all__ = ["Container"]

logger = logging.getLogger(__name__)


class Container:
    """Dependency injection container over a :class:`Graph`.

    Args:
        graph: The graph vertexes are registered in.
        is_talent: Predicate recognising talents referenced by ``__compose__``.

    Example:
        >>> class Database:
        ...     pass
        >>> class UserService:
        ...     __inject__ = ["db", "cache?"]
        ...     def __init__(self, db, cache):
        ...         self.db = db
        >>>
        >>> container = make_container()
        >>> container.register("db", Database, "singleton")
        >>> container.register("users", UserService)
        >>> container.get("users").db is container.get("db")
        True
    """

    def __init__(self, graph: Graph, is_talent: Callable[[Any], bool] = default_is_talent):
        self._graph = graph
        self._resolver = Resolver(graph, Composer(graph, is_talent))

    @property
    def graph(self) -> Graph:
        return self._graph

    def register(
        self, name: str, payload: Any, lifecycle: Optional[str] = None
    ) -> VertexRecord:
        """Register a class, callable or value under ``name``.

        Classes and callables may declare dependencies in ``__inject__``;
        classes may also declare talents in ``__compose__``. One edge is added
        per declared dependency, pointing at the dependency name with its
        modifiers removed. Nothing is written unless every check passes.

        Args:
            name: Unique name of the vertex.
            payload: The class, callable or value to register.
            lifecycle: Lifecycle name for classes; defaults to the registry default.

        Returns:
            The stored :class:`VertexRecord`.

        Raises:
            RegistrationError: If the name is taken, a declaration is malformed,
                a dependency is declared twice or the lifecycle is unknown.
        """
        if name in self._graph:
            raise DuplicateVertexError(f"{name} has already been registered")

        kind = classify(payload)
        dependencies = (
            read_declaration(payload, INJECT_ATTRIBUTE, name)
            if kind is not VertexKind.PASS_THROUGH
            else ()
        )
        compositions = (
            read_declaration(payload, COMPOSE_ATTRIBUTE, name)
            if kind is VertexKind.CONSTRUCTIBLE
            else ()
        )
        edges = _edges_for(name, dependencies)

        for edge in edges:
            if self._graph.has_edge(edge):
                raise DuplicateEdgeError(f"Duplicated edge {edge.source} -> {edge.target}")

        record = self._graph.add_vertex(name, payload, lifecycle, dependencies, compositions)
        for edge in edges:
            self._graph.add_edge(edge)

        logger.debug(
            "Registered %s as %s with dependencies %s",
            name,
            record.kind.value,
            list(dependencies),
        )
        return record

    def get(self, name: str, *args: Any) -> Any:
        """Resolve ``name`` into a value.

        Args:
            name: The registered name, optionally with ``?`` or ``Factory`` modifiers.
            *args: Extra arguments passed after the resolved dependencies.

        Raises:
            ResolutionError: If the name or one of its dependencies cannot be resolved.
            CompositionError: If a declared talent cannot be composed.
        """
        return self._resolver.get(name, *args)

    def __contains__(self, name: str) -> bool:
        return name in self._graph


def _edges_for(name: str, dependencies: tuple[str, ...]) -> list[Edge]:
    edges: list[Edge] = []
    for raw in dependencies:
        edge = Edge(name, parse_dependency(raw).target)
        if edge in edges:
            raise DuplicateEdgeError(
                f"Duplicated edge {edge.source} -> {edge.target} in the dependencies of {name}"
            )
        edges.append(edge)
    return edges
