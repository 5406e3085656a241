"""Storage for registered vertexes and the edges between them.

The graph is a plain data structure: it validates what is written to it but
never resolves anything. Vertexes are keyed by name; edges are ``(source,
target)`` pairs compared by value, and the target of an edge does not have to
be registered yet.
"""

from typing import Any, Iterable, Optional, Union

from grapevine.domain import Edge, VertexKind, VertexRecord, classify
from grapevine.errors import (
    ConfigurationError,
    DuplicateEdgeError,
    DuplicateVertexError,
    InvalidCollectionError,
    UnknownLifeCycleError,
)

__all__ = ["Graph"]


class Graph:
    """Vertex and edge store backed by a ``dict`` and a ``set``.

    Args:
        lifecycles: Lifecycle registry; must provide ``contains(name)`` and
            ``get_default()``.
        vertexes: Optional backing dict of name to :class:`VertexRecord`.
        edges: Optional backing set of ``(source, target)`` pairs.

    Raises:
        ConfigurationError: If no lifecycle registry is given.
        InvalidCollectionError: If a backing collection has the wrong type.

    Example:
        >>> graph = Graph(LifeCycles())
        >>> graph.add_vertex("db", Database)
        >>> graph.add_edge(Edge("service", "db"))
        >>> graph.get_adjacent_vertexes("service")
        {'db'}
    """

    def __init__(
        self,
        lifecycles: Any,
        vertexes: Optional[dict[str, VertexRecord]] = None,
        edges: Optional[set[Edge]] = None,
    ):
        if lifecycles is None:
            raise ConfigurationError("The life cycles must be a parameter of the constructor")
        if vertexes is not None and not isinstance(vertexes, dict):
            raise InvalidCollectionError("The vertexes parameter has to be a dict")
        if edges is not None and not isinstance(edges, set):
            raise InvalidCollectionError("The edges parameter has to be a set")

        self._lifecycles = lifecycles
        self._vertexes = vertexes if vertexes is not None else {}
        self._edges = edges if edges is not None else set()

    @property
    def lifecycles(self) -> Any:
        return self._lifecycles

    def add_vertex(
        self,
        name: str,
        payload: Any,
        lifecycle: Optional[str] = None,
        dependencies: Iterable[str] = (),
        compositions: Iterable[str] = (),
    ) -> VertexRecord:
        """Store a new vertex.

        The lifecycle only applies to constructible payloads: when omitted it
        falls back to the registry default, and it must be a name the registry
        knows. For other kinds it is ignored, as are compositions.

        Args:
            name: Unique name of the vertex.
            payload: The class, callable or value to register.
            lifecycle: Optional lifecycle name.
            dependencies: Raw dependency declarations.
            compositions: Raw composition declarations.

        Returns:
            The stored :class:`VertexRecord`.

        Raises:
            DuplicateVertexError: If the name is already registered.
            UnknownLifeCycleError: If the lifecycle is not known to the registry.
        """
        if name in self._vertexes:
            raise DuplicateVertexError(f"{name} has already been registered")

        kind = classify(payload)
        if kind is VertexKind.CONSTRUCTIBLE:
            if lifecycle is None:
                lifecycle = self._lifecycles.get_default()
            if not self._lifecycles.contains(lifecycle):
                raise UnknownLifeCycleError(f"Unknown lifecycle '{lifecycle}' for {name}")
            compositions = tuple(compositions)
        else:
            lifecycle = None
            compositions = ()

        record = VertexRecord(
            name, payload, kind, lifecycle, tuple(dependencies), compositions
        )
        self._vertexes[name] = record
        return record

    def get_vertex_data(self, name: str) -> Optional[VertexRecord]:
        """Return the record stored under ``name``, or ``None`` if there is none."""
        return self._vertexes.get(name)

    def has_edge(self, edge: Union[Edge, tuple[str, str]]) -> bool:
        return Edge(*edge) in self._edges

    def add_edge(self, edge: Union[Edge, tuple[str, str]]) -> None:
        """Add a ``(source, target)`` edge.

        Raises:
            DuplicateEdgeError: If a value-equal edge is already stored.
        """
        edge = Edge(*edge)
        if edge in self._edges:
            raise DuplicateEdgeError(f"Duplicated edge {edge.source} -> {edge.target}")
        self._edges.add(edge)

    def get_adjacent_vertexes(self, name: str) -> set[str]:
        """Return the names ``name`` has an edge to."""
        return {target for source, target in self._edges if source == name}

    def __contains__(self, name: str) -> bool:
        return name in self._vertexes
