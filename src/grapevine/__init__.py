"""Grapevine dependency injection container.

Grapevine resolves named vertexes (classes, callables or plain values) into
fully wired values on demand. Dependencies are declared as names on the
registered class or function, looked up lazily in a dependency graph and
instantiated according to the lifecycle chosen at registration.

Key Features:
    - Name based registration of classes, callables and plain values
    - Singleton, per-request and unique lifecycles
    - Optional dependencies (``"cache?"``) and lazy factories (``"userFactory"``)
    - Eager cycle detection, with factories as the way to break a cycle
    - Composition of talents onto instances with rename/exclude resolutions

Basic Usage:
    >>> from grapevine.builders import make_container
    >>>
    >>> class Database:
    ...     pass
    >>>
    >>> class UserService:
    ...     __inject__ = ["db"]
    ...     def __init__(self, db):
    ...         self.db = db
    >>>
    >>> container = make_container()
    >>> container.register("db", Database, "singleton")
    >>> container.register("users", UserService)
    >>> users = container.get("users")

The package consists of several modules:
    - builders: High-level container construction
    - container: Registration and lookup
    - graph: Vertex and edge storage
    - declarations: Parsing of ``__inject__`` and ``__compose__`` declarations
    - resolver: Dependency resolution and lifecycle caching
    - composer: Talent composition
    - talents: Talent creation
    - lifecycles: Lifecycle registry
    - domain: Core domain models
    - errors: Framework-specific exceptions
"""
