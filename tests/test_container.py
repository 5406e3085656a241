import threading

import pytest

from grapevine.builders import make_container
from grapevine.container import Container
from grapevine.domain import Edge, VertexKind
from grapevine.errors import (
    CycleError,
    DuplicateEdgeError,
    DuplicateVertexError,
    FactoryError,
    InvalidDeclarationError,
    UnknownLifeCycleError,
    UnregisteredVertexError,
)
from grapevine.graph import Graph
from grapevine.lifecycles import LifeCycles
from grapevine.resolver import Factory


@pytest.fixture
def vertexes():
    return {}


@pytest.fixture
def edges():
    return set()


@pytest.fixture
def container(vertexes, edges) -> Container:
    return Container(Graph(LifeCycles(), vertexes, edges))


class Recorder:
    """Keeps the arguments it was constructed with."""

    def __init__(self, *args):
        self.args = args


def test_register_adds_vertex(container, vertexes):
    class Foo:
        __inject__ = ["bar"]

    container.register("foo", Foo)

    assert "foo" in vertexes
    assert "foo" in container


def test_register_adds_one_edge_per_dependency(container, edges):
    class Foo:
        __inject__ = ["bar", "rab?", "oofFactory"]

    container.register("foo", Foo)

    assert edges == {Edge("foo", "bar"), Edge("foo", "rab"), Edge("foo", "oof")}


def test_register_without_declaration_adds_no_edges(container, edges):
    class Foo:
        pass

    container.register("foo", Foo)

    assert edges == set()


def test_register_with_malformed_declaration_raises(container, vertexes):
    class Foo:
        __inject__ = {"foo": "foo"}

    with pytest.raises(InvalidDeclarationError, match='"__inject__" list of foo'):
        container.register("foo", Foo)
    assert vertexes == {}


def test_register_with_malformed_composition_list_raises(container, vertexes):
    class Foo:
        __compose__ = "talent"

    with pytest.raises(InvalidDeclarationError, match='"__compose__" list of foo'):
        container.register("foo", Foo)
    assert vertexes == {}


def test_register_same_name_twice_raises(container):
    container.register("foo", {"a": 1})

    with pytest.raises(DuplicateVertexError, match="foo has already been registered"):
        container.register("foo", Recorder)


def test_register_with_repeated_dependency_raises_before_writing(container, vertexes, edges):
    class Foo:
        __inject__ = ["bar", "bar?"]

    with pytest.raises(DuplicateEdgeError, match="Duplicated edge foo -> bar"):
        container.register("foo", Foo)
    assert vertexes == {}
    assert edges == set()


def test_register_clashing_with_existing_edge_raises_before_writing(vertexes):
    container = Container(Graph(LifeCycles(), vertexes, {("foo", "bar")}))

    class Foo:
        __inject__ = ["bar"]

    with pytest.raises(DuplicateEdgeError):
        container.register("foo", Foo)
    assert vertexes == {}


def test_register_with_unknown_lifecycle_raises(container, edges):
    class Foo:
        __inject__ = ["bar"]

    with pytest.raises(UnknownLifeCycleError, match="Unknown lifecycle 'forever'"):
        container.register("foo", Foo, "forever")
    assert "foo" not in container
    assert edges == set()


def test_get_unregistered_vertex_raises(container):
    with pytest.raises(UnregisteredVertexError, match="foo hasn't been registered"):
        container.get("foo")


def test_get_class_vertex(container):
    class One:
        pass

    container.register("one", One)

    assert isinstance(container.get("one"), One)


def test_get_class_vertex_with_extra_arguments(container):
    container.register("one", Recorder)

    assert container.get("one", "foo", "bar").args == ("foo", "bar")


def test_extra_arguments_follow_dependencies(container):
    class Two:
        pass

    class One(Recorder):
        __inject__ = ["two"]

    container.register("one", One)
    container.register("two", Two)

    two, *extra = container.get("one", "foo", "bar").args
    assert isinstance(two, Two)
    assert extra == ["foo", "bar"]


def test_get_function_vertex_returns_its_result(container):
    def one():
        return "whatOneReturns"

    container.register("one", one)

    assert container.get("one") == "whatOneReturns"


def test_function_vertex_with_dependencies_and_extra_arguments(container):
    def two():
        return "whatTwoReturns"

    def one(two_result, extra):
        return f"{two_result}-{extra}"

    one.__inject__ = ["two"]
    container.register("one", one)
    container.register("two", two)

    assert container.get("one", "foo") == "whatTwoReturns-foo"


def test_pass_through_vertex_returns_the_same_value(container):
    value = {"foo": "bar"}
    container.register("one", value)

    assert container.get("one") is value
    assert container.get("one", "ignored") is value


def test_pass_through_dependency_is_injected(container):
    value = {"foo": "bar"}

    class One(Recorder):
        __inject__ = ["two"]

    container.register("one", One)
    container.register("two", value)

    assert container.get("one").args == (value,)


def test_straight_dependency_graph(container):
    class Five(Recorder):
        pass

    class Four(Recorder):
        __inject__ = ["five"]

    class Three(Recorder):
        __inject__ = ["four"]

    class Two(Recorder):
        __inject__ = ["three"]

    class One(Recorder):
        __inject__ = ["two"]

    for name, cls in [("one", One), ("two", Two), ("three", Three), ("four", Four), ("five", Five)]:
        container.register(name, cls)

    one = container.get("one")
    (two,) = one.args
    (three,) = two.args
    (four,) = three.args
    (five,) = four.args
    assert isinstance(two, Two)
    assert isinstance(three, Three)
    assert isinstance(four, Four)
    assert isinstance(five, Five)
    assert five.args == ()


def test_dependencies_are_injected_in_declaration_order(container):
    class One(Recorder):
        __inject__ = ["five", "two", "four"]

    container.register("one", One)
    container.register("two", lambda: 2)
    container.register("four", lambda: 4)
    container.register("five", lambda: 5)

    assert container.get("one").args == (5, 2, 4)


def test_diamond_dependency_graph(container):
    class Four:
        pass

    class Two(Recorder):
        __inject__ = ["four"]

    class Three(Recorder):
        __inject__ = ["four"]

    class One(Recorder):
        __inject__ = ["two", "three"]

    container.register("one", One)
    container.register("two", Two)
    container.register("three", Three)
    container.register("four", Four)

    two, three = container.get("one").args
    assert isinstance(two.args[0], Four)
    assert two.args[0] is not three.args[0]


def test_cycled_dependency_graph_raises(container):
    for name, dependency in [("one", "two"), ("two", "three"), ("three", "one")]:
        container.register(name, type(name.title(), (Recorder,), {"__inject__": [dependency]}))

    with pytest.raises(CycleError, match="A cycle has been detected"):
        container.get("one")


def test_self_dependency_raises(container):
    class One(Recorder):
        __inject__ = ["one"]

    container.register("one", One)

    with pytest.raises(CycleError):
        container.get("one")


def test_factory_breaks_a_cycle(container):
    class One(Recorder):
        __inject__ = ["two"]

    class Two(Recorder):
        __inject__ = ["three"]

    class Three(Recorder):
        __inject__ = ["oneFactory"]

    container.register("one", One)
    container.register("two", Two)
    container.register("three", Three)

    one = container.get("one")
    (one_factory,) = one.args[0].args[0].args
    assert isinstance(one_factory, Factory)
    assert isinstance(one_factory.get(), One)


def test_cycle_through_callables_raises(container):
    def one(two):
        return two

    def two(one):
        return one

    one.__inject__ = ["two"]
    two.__inject__ = ["one"]
    container.register("one", one)
    container.register("two", two)

    with pytest.raises(CycleError):
        container.get("one")


def test_get_factory_of_registered_class(container):
    class One:
        pass

    container.register("one", One)

    one_factory = container.get("oneFactory")

    first, second = one_factory.get(), one_factory.get()
    assert isinstance(first, One)
    assert isinstance(second, One)
    assert first is not second


def test_factory_does_not_change_stored_vertex(container):
    class One:
        pass

    container.register("one", One, "singleton")
    before = container.graph.get_vertex_data("one")

    container.get("oneFactory").get()

    after = container.graph.get_vertex_data("one")
    assert after == before
    assert after.kind is VertexKind.CONSTRUCTIBLE
    assert after.lifecycle == "singleton"


def test_factory_builds_independent_instances_of_singletons(container):
    container.register("one", Recorder, "singleton")

    shared = container.get("one")
    built = container.get("oneFactory").get()

    assert built is not shared
    assert container.get("one") is shared


def test_factorized_dependency_forwards_arguments(container):
    class Three:
        pass

    class Two(Recorder):
        __inject__ = ["three"]

    class One(Recorder):
        __inject__ = ["twoFactory"]

    container.register("one", One)
    container.register("two", Two)
    container.register("three", Three)

    (two_factory,) = container.get("one").args
    three, factorized = two_factory.get(True).args

    assert isinstance(three, Three)
    assert factorized is True


@pytest.mark.parametrize("two", [lambda: None, {"foo": "bar"}])
def test_factorized_non_class_dependency_raises(container, two):
    class One(Recorder):
        __inject__ = ["twoFactory"]

    container.register("one", One)
    container.register("two", two)

    with pytest.raises(FactoryError, match="Only classes can be factorized"):
        container.get("one")


def test_factorized_unregistered_dependency_raises(container):
    class One(Recorder):
        __inject__ = ["twoFactory"]

    container.register("one", One)

    with pytest.raises(UnregisteredVertexError, match="two hasn't been registered"):
        container.get("one")


def test_optional_unregistered_dependency_injects_none(container):
    class One(Recorder):
        __inject__ = ["two?"]

    container.register("one", One)

    assert container.get("one").args == (None,)


def test_optional_registered_dependency_is_resolved(container):
    class One(Recorder):
        __inject__ = ["two?"]

    container.register("one", One)
    container.register("two", lambda: "two")

    assert container.get("one").args == ("two",)


def test_optional_factory_dependency(container):
    class One(Recorder):
        __inject__ = ["twoFactory?"]

    container.register("one", One)
    assert container.get("one").args == (None,)

    container.register("two", Recorder)
    (two_factory,) = container.get("one").args
    assert isinstance(two_factory.get(), Recorder)


def test_optional_top_level_request(container):
    assert container.get("one?") is None


def test_missing_transitive_dependency_raises(container):
    class One(Recorder):
        __inject__ = ["two"]

    class Two(Recorder):
        __inject__ = ["three"]

    container.register("one", One)
    container.register("two", Two)

    with pytest.raises(UnregisteredVertexError, match="three hasn't been registered"):
        container.get("one")


def test_constructor_errors_propagate_unchanged(container):
    class Broken:
        def __init__(self):
            raise RuntimeError("boom")

    container.register("broken", Broken)

    with pytest.raises(RuntimeError, match="boom"):
        container.get("broken")


def test_failed_resolution_can_be_retried(container):
    class One(Recorder):
        __inject__ = ["two"]

    container.register("one", One)
    with pytest.raises(UnregisteredVertexError):
        container.get("one")

    container.register("two", Recorder)
    assert isinstance(container.get("one").args[0], Recorder)


class Four:
    pass


@pytest.fixture
def shared_four_tree(container):
    seen = []

    class Three:
        __inject__ = ["four"]

        def __init__(self, four):
            seen.append(four)

    class Two:
        __inject__ = ["four"]

        def __init__(self, four):
            seen.append(four)

    class One(Recorder):
        __inject__ = ["two", "three"]

    container.register("one", One)
    container.register("two", Two)
    container.register("three", Three)

    def register_four(lifecycle):
        container.register("four", Four, lifecycle)
        return seen

    return register_four


def test_per_request_vertex_is_shared_within_one_request(container, shared_four_tree):
    seen = shared_four_tree("per_request")

    container.get("one")

    first, second = seen
    assert first is second


def test_per_request_vertex_is_not_shared_across_requests(container, shared_four_tree):
    shared_four_tree("per_request")

    assert container.get("four") is not container.get("four")


def test_unique_vertex_is_never_shared(container, shared_four_tree):
    seen = shared_four_tree("unique")

    container.get("one")

    first, second = seen
    assert isinstance(first, Four)
    assert isinstance(second, Four)
    assert first is not second
    assert container.get("four") is not container.get("four")


def test_singleton_vertex_is_shared_across_requests(container, shared_four_tree):
    seen = shared_four_tree("singleton")

    container.get("one")
    container.get("one")

    assert len(seen) == 4
    assert all(four is seen[0] for four in seen)
    assert container.get("four") is seen[0]


def test_default_lifecycle_comes_from_the_registry():
    container = Container(Graph(LifeCycles(default="singleton")))
    container.register("one", Recorder)

    assert container.get("one") is container.get("one")
    assert container.graph.get_vertex_data("one").lifecycle == "singleton"


def test_singleton_is_built_once_under_concurrent_access(container):
    built = []
    barrier = threading.Barrier(4)

    class Slow:
        def __init__(self):
            built.append(self)

    container.register("slow", Slow, "singleton")
    results = []

    def resolve():
        barrier.wait()
        results.append(container.get("slow"))

    threads = [threading.Thread(target=resolve) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(built) == 1
    assert all(result is built[0] for result in results)


def test_singleton_constructor_may_wait_on_another_thread_resolving_a_singleton(container):
    class Inner:
        pass

    class Outer:
        def __init__(self):
            results = []
            worker = threading.Thread(target=lambda: results.append(container.get("inner")))
            worker.start()
            worker.join(timeout=5)
            self.inner = results[0] if results else None

    container.register("inner", Inner, "singleton")
    container.register("outer", Outer, "singleton")

    outer = container.get("outer")

    assert outer.inner is container.get("inner")


def test_factory_built_instance_shares_per_request_dependencies(container):
    class C:
        pass

    class Two(Recorder):
        __inject__ = ["c"]

    class One:
        __inject__ = ["c", "twoFactory"]

        def __init__(self, c, two_factory):
            self.c = c
            self.two = two_factory.get()

    container.register("c", C, "per_request")
    container.register("two", Two)
    container.register("one", One)

    one = container.get("one")

    assert one.two.args[0] is one.c


def test_factory_leading_back_to_a_vertex_under_construction_raises(container):
    class Two(Recorder):
        __inject__ = ["one"]

    class One:
        __inject__ = ["twoFactory"]

        def __init__(self, two_factory):
            self.two = two_factory.get()

    container.register("one", One)
    container.register("two", Two)

    with pytest.raises(CycleError, match="A cycle has been detected"):
        container.get("one")


def test_extra_arguments_for_a_factory_request_raise(container):
    container.register("one", Recorder)

    with pytest.raises(FactoryError, match="pass them to its get method"):
        container.get("oneFactory", "foo")


def test_singleton_built_before_a_failure_stays_cached(container):
    built = []

    class Shared:
        def __init__(self):
            built.append(self)

    class Broken:
        def __init__(self):
            raise RuntimeError("broken")

    class One(Recorder):
        __inject__ = ["shared", "broken"]

    container.register("one", One)
    container.register("shared", Shared, "singleton")
    container.register("broken", Broken)

    with pytest.raises(RuntimeError, match="broken"):
        container.get("one")

    assert len(built) == 1
    assert container.get("shared") is built[0]


def test_failed_branch_does_not_leave_its_vertex_visiting(container):
    attempts = []

    class Four:
        def __init__(self):
            attempts.append(self)
            if len(attempts) == 1:
                raise RuntimeError("first attempt fails")

    def first(four_factory):
        try:
            four_factory.get()
        except RuntimeError:
            return "recovered"

    first.__inject__ = ["fourFactory"]

    class One(Recorder):
        __inject__ = ["first", "four"]

    container.register("one", One)
    container.register("first", first)
    container.register("four", Four)

    recovered, four = container.get("one").args

    assert recovered == "recovered"
    assert four is attempts[1]


def test_make_container_builds_a_working_container():
    container = make_container()
    container.register("config", {"debug": True})

    assert isinstance(container, Container)
    assert container.get("config") == {"debug": True}
