"""Talents: named bundles of methods composed onto constructed instances.

A talent is created once, registered in the container like any other value
and then referenced from a class's ``__compose__`` declaration:

    >>> auditing = create_talent(log=lambda self, line: ..., flush=lambda self: ...)
    >>> container.register("auditing", auditing)
    >>>
    >>> class UserService:
    ...     __compose__ = ["auditing : flush -"]

A talent can also be declared as a class, in which case its own functions
become the talent's methods. Members set to :data:`required` are not copied;
instead the target instance must already provide them.
"""

import inspect
from collections.abc import Mapping
from typing import Any, Callable, Iterator, Optional

__all__ = ["Talent", "required", "create_talent", "is_talent"]


class _Required:
    def __repr__(self) -> str:
        return "required"


required = _Required()
"""Marker for a talent member the composed instance has to supply itself."""


class Talent(Mapping):
    """Immutable mapping of method names to functions (or :data:`required`)."""

    def __init__(self, methods: dict[str, Any]):
        self._methods = dict(methods)

    def __getitem__(self, name: str) -> Any:
        return self._methods[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._methods)

    def __len__(self) -> int:
        return len(self._methods)

    def __getattr__(self, name: str) -> Any:
        if name == "_methods":
            raise AttributeError(name)
        try:
            return self._methods[name]
        except KeyError:
            raise AttributeError(name) from None

    def __repr__(self) -> str:
        return f"Talent({sorted(self._methods)})"


def create_talent(source: Optional[Any] = None, **methods: Callable) -> Talent:
    """Create a talent from a mapping, a class and/or keyword arguments.

    Args:
        source: A mapping of names to functions, or a class whose own
            plain functions (dunder methods, static methods, class methods and
            properties excluded) become the talent's methods.
        **methods: Additional methods; they override those taken from ``source``.

    Returns:
        The new :class:`Talent`.

    Raises:
        TypeError: If a member is neither callable nor :data:`required`.

    Example:
        >>> @create_talent
        ... class Greeting:
        ...     def greet(self):
        ...         return f"Hello from {self.name}"
        ...     name = required
    """
    collected: dict[str, Any] = {}
    if inspect.isclass(source):
        # plain functions and required markers only
        collected.update(
            (name, member)
            for name, member in vars(source).items()
            if not (name.startswith("__") and name.endswith("__"))
            and (inspect.isfunction(member) or member is required)
        )
    elif source is not None:
        collected.update(source)
    collected.update(methods)

    for name, member in collected.items():
        if member is not required and (
            not callable(member) or isinstance(member, (staticmethod, classmethod))
        ):
            raise TypeError(f"Talent member {name!r} has to be callable, got {member!r}")

    return Talent(collected)


def is_talent(value: Any) -> bool:
    return isinstance(value, Talent)
