"""Composition of talents onto freshly constructed instances."""

import logging
import types
from typing import Any, Callable, Iterable

from grapevine.declarations import parse_composition
from grapevine.domain import CompositionSpec, Exclude, Rename
from grapevine.errors import CompositionError
from grapevine.graph import Graph
from grapevine.talents import required

__all__ = ["Composer"]

logger = logging.getLogger(__name__)


class Composer:
    """Apply the talents named in a ``__compose__`` declaration to an instance.

    Talents are looked up in the graph by name and must satisfy ``is_talent``.
    Each talent method is bound to the instance under its own name, under its
    alias when renamed, or skipped when excluded. Talents applied later
    overwrite attributes set by earlier ones.
    """

    def __init__(self, graph: Graph, is_talent: Callable[[Any], bool]):
        self._graph = graph
        self._is_talent = is_talent

    def compose(self, instance: Any, compositions: Iterable[str]) -> Any:
        """Compose every declared talent onto ``instance``.

        Args:
            instance: The object to extend; it is mutated in place.
            compositions: Raw composition declarations.

        Returns:
            The same ``instance``.

        Raises:
            CompositionError: If a talent is missing, is not a talent, or its
                conflict resolutions do not match its methods.
        """
        for raw in compositions:
            spec = parse_composition(raw)
            self._apply(instance, spec, self._find_talent(spec.talent))
        return instance

    def _find_talent(self, name: str) -> Any:
        record = self._graph.get_vertex_data(name)
        if record is None:
            raise CompositionError(f'The talent "{name}" is not registered')
        if not self._is_talent(record.payload):
            raise CompositionError(
                f'The talent "{name}" has to be a talent created by "create_talent"'
            )
        return record.payload

    def _apply(self, instance: Any, spec: CompositionSpec, talent: Any) -> None:
        renamed = {r.method: r.alias for r in spec.resolutions if isinstance(r, Rename)}
        excluded = {r.method for r in spec.resolutions if isinstance(r, Exclude)}

        unknown = (renamed.keys() | excluded) - set(talent)
        if unknown:
            raise CompositionError(
                f'Conflict resolutions name methods {sorted(unknown)} '
                f'that the talent "{spec.talent}" does not have'
            )

        for method_name in talent:
            if method_name in excluded:
                continue
            target_name = renamed.get(method_name, method_name)
            method = talent[method_name]
            if method is required:
                if not hasattr(instance, target_name):
                    raise CompositionError(
                        f'The talent "{spec.talent}" requires '
                        f"{type(instance).__name__}.{target_name}"
                    )
                continue
            setattr(instance, target_name, types.MethodType(method, instance))

        logger.debug(
            "Composed talent %s onto %s", spec.talent, type(instance).__name__
        )
