"""Resolution of registered vertexes into values.

Resolution walks the graph depth-first from the requested name. Each top-level
call owns a :class:`ResolutionContext`: its ``visiting`` set detects eager
cycles and its ``request_cache`` holds per-request instances. Instances under
a shared lifecycle live in the resolver's singleton cache for as long as the
resolver does.

Factory dependencies are not resolved eagerly. A :class:`Factory` is injected
instead and every call to its ``get`` builds a new instance of the target in
the context the factory was created in. Since nothing is built until ``get``
is called, a factory is how a cycle between vertexes can be broken.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Sequence

from grapevine.composer import Composer
from grapevine.declarations import parse_dependency
from grapevine.domain import DependencySpec, VertexKind, VertexRecord
from grapevine.errors import CycleError, FactoryError, UnregisteredVertexError
from grapevine.graph import Graph
from grapevine.lifecycles import Caching

__all__ = ["ResolutionContext", "Factory", "Resolver"]

logger = logging.getLogger(__name__)


@dataclass
class ResolutionContext:
    """State shared by one resolution tree.

    Attributes:
        visiting: Names currently being built on the active branch.
        request_cache: Instances of per-request vertexes built so far.
    """

    visiting: set[str] = field(default_factory=set)
    request_cache: dict[str, Any] = field(default_factory=dict)


class Factory:
    """Lazily builds new instances of a constructible vertex.

    Example:
        >>> class Pool:
        ...     __inject__ = ["connectionFactory"]
        ...     def __init__(self, connections):
        ...         self.first = connections.get("primary")
    """

    def __init__(self, resolver: "Resolver", name: str, context: ResolutionContext):
        self._resolver = resolver
        self._name = name
        self._context = context

    @property
    def name(self) -> str:
        return self._name

    def get(self, *args: Any) -> Any:
        """Build a new instance, passing ``args`` after its declared dependencies.

        The instance is built within the resolution that created this factory:
        per-request dependencies are shared with that resolution, and building
        a vertex that is still under construction raises :class:`CycleError`.
        """
        return self._resolver.build(self._name, self._context, args)

    def __repr__(self) -> str:
        return f"Factory({self._name!r})"


class Resolver:
    """Turn names registered in a :class:`Graph` into values."""

    def __init__(self, graph: Graph, composer: Composer):
        self._graph = graph
        self._composer = composer
        self._singletons: dict[str, Any] = {}
        # One lock per singleton name, so a constructor may hand work to
        # another thread that resolves a different singleton.
        self._singleton_locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def get(self, name: str, *args: Any) -> Any:
        """Resolve ``name`` in a new resolution context.

        ``name`` accepts the same modifiers as a dependency declaration, so
        ``"userFactory"`` returns a :class:`Factory` and ``"user?"`` returns
        ``None`` when ``user`` is not registered. Extra arguments for a factory
        are passed to :meth:`Factory.get`, not here.

        Args:
            name: The name to resolve.
            *args: Extra arguments appended after the resolved dependencies.

        Raises:
            ResolutionError: If the name or one of its dependencies cannot be
                resolved, or if extra arguments are given for a factory.
            CompositionError: If a talent cannot be composed onto an instance.
        """
        spec = parse_dependency(name)
        if spec.factory and args:
            raise FactoryError(
                f"Extra arguments cannot be given when requesting {name}; "
                "pass them to its get method instead"
            )
        return self._resolve_dependency(spec, ResolutionContext(), args)

    def build(
        self, name: str, context: ResolutionContext, args: Sequence[Any] = ()
    ) -> Any:
        """Build a new instance of ``name`` within ``context``, bypassing its lifecycle cache."""
        return self._resolve(name, context, args, fresh=True)

    def _resolve_dependency(
        self, spec: DependencySpec, context: ResolutionContext, args: Sequence[Any] = ()
    ) -> Any:
        record = self._graph.get_vertex_data(spec.target)
        if record is None and spec.optional:
            return None
        if spec.factory:
            if record is None:
                raise UnregisteredVertexError(f"{spec.target} hasn't been registered")
            if record.kind is not VertexKind.CONSTRUCTIBLE:
                raise FactoryError(
                    f"Only classes can be factorized, but {spec.target} is a {record.kind.value}"
                )
            return Factory(self, spec.target, context)
        return self._resolve(spec.target, context, args)

    def _resolve(
        self,
        name: str,
        context: ResolutionContext,
        args: Sequence[Any] = (),
        fresh: bool = False,
    ) -> Any:
        record = self._graph.get_vertex_data(name)
        if record is None:
            raise UnregisteredVertexError(f"{name} hasn't been registered")
        if record.kind is VertexKind.PASS_THROUGH:
            return record.payload
        if name in context.visiting:
            raise CycleError(
                f"A cycle has been detected while resolving {name}: {sorted(context.visiting)}"
            )

        caching = self._caching_of(record)
        if fresh or caching is Caching.NONE:
            return self._instantiate(record, context, args)

        if caching is Caching.PER_REQUEST:
            if name not in context.request_cache:
                context.request_cache[name] = self._instantiate(record, context, args)
            else:
                logger.debug("Reusing per-request instance of %s", name)
            return context.request_cache[name]

        with self._singleton_lock(name):
            if name not in self._singletons:
                self._singletons[name] = self._instantiate(record, context, args)
            return self._singletons[name]

    def _singleton_lock(self, name: str) -> threading.RLock:
        with self._locks_guard:
            return self._singleton_locks.setdefault(name, threading.RLock())

    def _caching_of(self, record: VertexRecord) -> Caching:
        if record.kind is not VertexKind.CONSTRUCTIBLE:
            return Caching.NONE
        return self._graph.lifecycles.caching_of(record.lifecycle)

    def _instantiate(
        self, record: VertexRecord, context: ResolutionContext, args: Sequence[Any]
    ) -> Any:
        context.visiting.add(record.name)
        try:
            dependencies = [
                self._resolve_dependency(parse_dependency(raw), context)
                for raw in record.dependencies
            ]
            value = record.payload(*dependencies, *args)
            if record.kind is VertexKind.CONSTRUCTIBLE and record.compositions:
                self._composer.compose(value, record.compositions)
        finally:
            context.visiting.discard(record.name)

        logger.debug("Built %s (%s)", record.name, record.kind.value)
        return value
