"""Parsing of dependency and composition declarations.

Registrants declare what they need through two class (or function) attributes:

    class UserService:
        __inject__ = ["db", "cache?", "sessionFactory"]
        __compose__ = ["auditing : log > audit_log, flush -"]

Dependency names carry two optional modifiers. A trailing ``?`` marks the
dependency as optional (``None`` is injected if it is not registered) and a
``Factory`` suffix asks for a factory of the vertex named by the prefix rather
than an instance of it.

Composition strings name a talent, optionally followed by ``:`` and a comma
separated list of conflict resolutions: ``method > alias`` renames a method and
``method -`` leaves it out.
"""

from typing import Any

from grapevine.domain import CompositionSpec, DependencySpec, Exclude, Rename, Resolution
from grapevine.errors import CompositionSyntaxError, InvalidDeclarationError

__all__ = [
    "INJECT_ATTRIBUTE",
    "COMPOSE_ATTRIBUTE",
    "OPTIONAL_MARKER",
    "FACTORY_SUFFIX",
    "read_declaration",
    "parse_dependency",
    "parse_composition",
]

INJECT_ATTRIBUTE = "__inject__"
COMPOSE_ATTRIBUTE = "__compose__"
OPTIONAL_MARKER = "?"
FACTORY_SUFFIX = "Factory"

_RENAME_MARKER = ">"
_EXCLUDE_MARKER = "-"


def read_declaration(payload: Any, attribute: str, name: str) -> tuple[str, ...]:
    """Read a declaration list from a payload.

    Args:
        payload: The class or function being registered.
        attribute: The attribute holding the declaration.
        name: Name the payload is being registered under, for error messages.

    Returns:
        The declared strings, or an empty tuple when nothing is declared.

    Raises:
        InvalidDeclarationError: If the declaration is not a list of strings.
    """
    declared = getattr(payload, attribute, None)
    if declared is None:
        return ()
    if not isinstance(declared, (list, tuple)) or not all(
        isinstance(item, str) for item in declared
    ):
        raise InvalidDeclarationError(
            f'The "{attribute}" list of {name} should be a list of strings'
        )
    return tuple(declared)


def parse_dependency(raw: str) -> DependencySpec:
    """Parse one dependency declaration.

    Example:
        >>> parse_dependency("db")            # DependencySpec("db")
        >>> parse_dependency("cache?")        # DependencySpec("cache", optional=True)
        >>> parse_dependency("userFactory")   # DependencySpec("user", factory=True)
        >>> parse_dependency("userFactory?")  # DependencySpec("user", True, True)

    Raises:
        InvalidDeclarationError: If no vertex name is left once modifiers are removed.
    """
    name = raw.strip()

    optional = name.endswith(OPTIONAL_MARKER)
    if optional:
        name = name[: -len(OPTIONAL_MARKER)].rstrip()

    factory = len(name) > len(FACTORY_SUFFIX) and name.endswith(FACTORY_SUFFIX)
    if factory:
        name = name[: -len(FACTORY_SUFFIX)]

    if not name:
        raise InvalidDeclarationError(f"Dependency declaration {raw!r} names no vertex")

    return DependencySpec(name, optional, factory)


def parse_composition(raw: str) -> CompositionSpec:
    """Parse one composition declaration.

    Example:
        >>> parse_composition("auditing")
        CompositionSpec(talent='auditing', resolutions=())
        >>> parse_composition("auditing : log > audit_log, flush -")
        CompositionSpec(talent='auditing', resolutions=(Rename(method='log', alias='audit_log'), Exclude(method='flush')))

    Raises:
        CompositionSyntaxError: If the declaration is malformed or resolves the
            same method twice.
    """
    talent, separator, body = raw.partition(":")
    talent = talent.strip()
    if not talent or any(c.isspace() or c in ",>" for c in talent):
        raise CompositionSyntaxError(f"Invalid talent name in composition {raw!r}")

    if not separator:
        return CompositionSpec(talent)

    resolutions = []
    seen = set()
    for clause in body.split(","):
        resolution = _parse_resolution(clause.strip(), raw)
        if resolution.method in seen:
            raise CompositionSyntaxError(
                f"Method {resolution.method!r} is resolved more than once in {raw!r}"
            )
        seen.add(resolution.method)
        resolutions.append(resolution)

    return CompositionSpec(talent, tuple(resolutions))


def _parse_resolution(clause: str, raw: str) -> Resolution:
    if _RENAME_MARKER in clause:
        method, _, alias = clause.partition(_RENAME_MARKER)
        method, alias = method.strip(), alias.strip()
        if method.isidentifier() and alias.isidentifier():
            return Rename(method, alias)
    elif clause.endswith(_EXCLUDE_MARKER):
        method = clause[: -len(_EXCLUDE_MARKER)].strip()
        if method.isidentifier():
            return Exclude(method)

    raise CompositionSyntaxError(f"Invalid conflict resolution {clause!r} in {raw!r}")
