"""High level entry point for constructing containers."""

from typing import Any, Callable, Optional

from grapevine.container import Container
from grapevine.graph import Graph
from grapevine.lifecycles import LifeCycles
from grapevine.talents import is_talent as default_is_talent

__all__ = ["make_container"]


def make_container(
    lifecycles: Optional[LifeCycles] = None,
    is_talent: Optional[Callable[[Any], bool]] = None,
) -> Container:
    """Construct an empty :class:`Container`.

    Args:
        lifecycles: Lifecycle registry to validate and interpret lifecycle
            names. Defaults to ``singleton``, ``per_request`` and ``unique``,
            with ``unique`` applied when none is given.
        is_talent: Predicate recognising talents. Defaults to
            :func:`grapevine.talents.is_talent`.

    Returns:
        A container backed by a new :class:`Graph`.

    Example:
        >>> container = make_container()
        >>> container.register("config", {"debug": True})
        >>> container.get("config")
        {'debug': True}
    """
    graph = Graph(lifecycles or LifeCycles())
    return Container(graph, is_talent or default_is_talent)
