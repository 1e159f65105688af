from typing import Protocol

import pytest

from bindery import Ref, Registry, UnboundAbstractionError


class Shape(Protocol):
    def set_area(self, area: int) -> None: ...
    def get_area(self) -> int: ...


class Circle:
    def __init__(self, area: int):
        self.area = area

    def set_area(self, area: int) -> None:
        self.area = area

    def get_area(self) -> int:
        return self.area


class Database(Protocol):
    def connect(self) -> bool: ...


class MySQL:
    def connect(self) -> bool:
        return True


def test_singleton_fill_makes_an_instance_of_the_abstraction():
    r = Registry()

    def make_shape() -> Shape:
        return Circle(5)

    r.register_singleton(make_shape)

    shape = Ref(Shape)
    r.resolve(shape)
    assert shape.value.get_area() == 5


def test_singleton_callback_receives_the_concrete():
    r = Registry()

    def make_shape() -> Shape:
        return Circle(5)

    r.register_singleton(make_shape)

    seen = []

    def callback(s: Shape):
        seen.append(s.get_area())

    r.resolve(callback)
    assert seen == [5]


def test_singleton_mutation_is_visible_on_next_resolve():
    r = Registry()

    def make_shape() -> Shape:
        return Circle(5)

    r.register_singleton(make_shape)

    def mutate(s1: Shape):
        s1.set_area(6)

    r.resolve(mutate)

    def check(s2: Shape):
        assert s2.get_area() == 6

    r.resolve(check)


def test_transient_mutation_is_not_visible_on_next_resolve():
    r = Registry()

    def make_shape() -> Shape:
        return Circle(5)

    r.register_transient(make_shape)

    first = r.make(Shape)
    first.set_area(6)
    second = r.make(Shape)

    assert second.get_area() == 5
    assert second is not first


def test_producer_receives_resolved_dependency():
    r = Registry()
    seen = []

    def make_shape() -> Shape:
        return Circle(5)

    def make_database(s: Shape) -> Database:
        seen.append(s.get_area())
        return MySQL()

    r.register_singleton(make_shape)
    r.register_singleton(make_database)
    assert seen == []  # bindings are lazy

    db = r.make(Database)
    assert isinstance(db, MySQL)
    assert seen == [5]


def test_dependency_sees_the_singleton_instance():
    r = Registry()

    def make_shape() -> Shape:
        return Circle(5)

    def make_database(s: Shape) -> Database:
        assert s.get_area() == 6
        return MySQL()

    r.register_singleton(make_shape)
    r.register_transient(make_database)

    r.make(Shape).set_area(6)
    r.make(Database)


def test_callback_with_multiple_parameters():
    r = Registry()

    def make_shape() -> Shape:
        return Circle(5)

    def make_database() -> Database:
        return MySQL()

    r.register_singleton(make_shape)
    r.register_singleton(make_database)

    def callback(s: Shape, d: Database):
        assert isinstance(s, Circle)
        assert isinstance(d, MySQL)
        return "done"

    assert r.resolve(callback) is None
    assert r.invoke(callback) == "done"


def test_fill_multiple_refs():
    r = Registry()

    def make_shape() -> Shape:
        return Circle(5)

    def make_database() -> Database:
        return MySQL()

    r.register_singleton(make_shape)
    r.register_singleton(make_database)

    s = Ref(Shape)
    d = Ref[Database]()
    r.resolve(s)
    r.resolve(d)

    assert isinstance(s.value, Circle)
    assert isinstance(d.value, MySQL)


def test_fill_returns_the_ref():
    r = Registry()

    def make_database() -> Database:
        return MySQL()

    r.register_transient(make_database)
    assert r.fill(Ref(Database)).value.connect()


def test_clear_drops_bindings():
    r = Registry()

    def make_shape() -> Shape:
        return Circle(5)

    r.register_singleton(make_shape)
    r.make(Shape)
    r.clear()

    assert Shape not in r
    assert len(r) == 0
    with pytest.raises(UnboundAbstractionError) as ctx:
        r.resolve(Ref(Shape))

    assert ctx.value.abstraction is Shape
    assert str(ctx.value) == f"no concrete found for the abstraction {__name__}.Shape"


def test_clear_drops_cached_singletons():
    r = Registry()
    built = []

    def make_shape() -> Shape:
        built.append(Circle(5))
        return built[-1]

    r.register_singleton(make_shape)
    first = r.make(Shape)
    r.clear()
    r.register_singleton(make_shape)

    assert r.make(Shape) is not first
    assert len(built) == 2


def test_last_registration_wins():
    r = Registry()

    def make_small() -> Shape:
        return Circle(1)

    def make_big() -> Shape:
        return Circle(100)

    r.register_singleton(make_small)
    r.register_transient(make_big)

    assert len(r) == 1
    assert r.make(Shape).get_area() == 100


def test_register_as_decorator():
    r = Registry()

    @r.register_singleton
    def make_shape() -> Shape:
        return Circle(5)

    assert make_shape().get_area() == 5
    assert r.is_bound(Shape)


def test_cyclic_producers_exhaust_the_stack():
    r = Registry()

    def make_shape(d: Database) -> Shape:
        return Circle(5)

    def make_database(s: Shape) -> Database:
        return MySQL()

    r.register_singleton(make_shape)
    r.register_singleton(make_database)

    with pytest.raises(RecursionError):
        r.make(Shape)
