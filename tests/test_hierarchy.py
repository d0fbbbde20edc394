# tests/test_hierarchy.py
"""
Tests for the hierarchy closure and the subtype resolver built on it.
"""

import pytest

from phptypes.hierarchy import HierarchyClosure
from phptypes.lattice import TypeLattice
from phptypes.resolver import TypeResolver
from phptypes.types import Type
from tests.conftest import ScriptBuilder, reconstruct


def closure_of(edges, names=None):
    c = HierarchyClosure()
    for name in names or edges:
        c.add_name(name)
    for child, parents in edges.items():
        c.add_edges(child, parents)
    c.close()
    return c


class TestClosure:

    def test_class_with_parent_and_interface(self):
        c = closure_of(
            {"Bar": ["Foo", "Interface1"], "Foo": [], "Interface1": []},
        )
        assert c.ancestors("bar") == {"bar", "foo", "interface1"}
        assert c.descendants("foo") == {"foo", "bar"}
        assert c.descendants("interface1") == {"interface1", "bar"}
        assert c.check_invariant()

    def test_names_are_case_insensitive(self):
        c = closure_of({"Bar": ["Foo"], "Foo": []})
        assert c.is_subtype("BAR", "foo")
        assert "FOO" in c
        assert c.is_declared("bAr")

    def test_transitive_chain(self):
        c = closure_of({"A": [], "B": ["A"], "C": ["B"], "D": ["C"]})
        assert c.ancestors("d") == {"a", "b", "c", "d"}
        assert c.descendants("a") == {"a", "b", "c", "d"}
        assert c.check_invariant()

    def test_diamond(self):
        c = closure_of({"I": [], "J": ["I"], "K": ["I"], "X": ["J", "K"]})
        assert c.ancestors("x") == {"x", "j", "k", "i"}
        assert c.descendants("i") == {"i", "j", "k", "x"}

    def test_order_independent(self):
        edges = {"D": ["C"], "C": ["B"], "B": ["A"], "A": []}
        forward = closure_of(edges, ["A", "B", "C", "D"])
        backward = closure_of(edges, ["D", "C", "B", "A"])
        assert forward.as_dict() == backward.as_dict()

    def test_reflexive(self):
        c = closure_of({"Lonely": []})
        assert c.ancestors("lonely") == {"lonely"}
        assert c.descendants("lonely") == {"lonely"}

    def test_undeclared_parent_not_expanded(self):
        c = closure_of({"Child": ["Missing"]})
        assert c.is_subtype("child", "missing")
        assert not c.is_declared("missing")
        assert c.descendants("missing") == {"child"}
        assert c.ancestors("missing") == frozenset()
        assert c.check_invariant()

    def test_cycle_terminates(self):
        c = closure_of({"A": ["B"], "B": ["A"]})
        assert c.ancestors("a") == {"a", "b"}
        assert c.descendants("a") == {"a", "b"}
        assert c.check_invariant()

    def test_unknown_name(self):
        c = HierarchyClosure()
        assert c.ancestors("nope") == frozenset()
        assert c.descendants("nope") == frozenset()
        assert not c.is_subtype("nope", "other")

    def test_seeded_copy_is_independent(self):
        base = closure_of({"A": []})
        copy = HierarchyClosure.seeded(base)
        copy.add_name("B")
        copy.add_edge("B", "A")
        copy.close()
        assert "b" not in base
        assert base.descendants("a") == {"a"}
        assert copy.descendants("a") == {"a", "b"}

    def test_seeded_without_baseline(self):
        assert len(HierarchyClosure.seeded(None)) == 0


class TestStateHierarchy:

    def test_declared_types(self):
        b = ScriptBuilder()
        b.interface("Interface1")
        b.klass("Foo")
        b.klass("Bar", extends="Foo", implements=["Interface1"])
        state, _ = reconstruct(b.build())
        assert state.closure.ancestors("bar") == {"bar", "foo", "interface1"}
        assert state.closure.descendants("foo") == {"foo", "bar"}
        assert state.closure.check_invariant()

    def test_user_class_extends_builtin(self):
        b = ScriptBuilder()
        b.klass("MyError", extends="InvalidArgumentException")
        state, _ = reconstruct(b.build())
        ancestors = state.closure.ancestors("myerror")
        assert {"invalidargumentexception", "logicexception", "exception", "throwable"} <= ancestors
        assert "myerror" in state.closure.descendants("throwable")

    def test_trait_use_is_an_edge(self):
        b = ScriptBuilder()
        b.trait("Greets")
        b.klass("Person", uses=["Greets"])
        state, _ = reconstruct(b.build())
        assert state.closure.is_subtype("person", "greets")

    def test_interface_extends_many(self):
        b = ScriptBuilder()
        b.interface("A")
        b.interface("B")
        b.interface("C", extends=["A", "B"])
        b.klass("Impl", implements=["C"])
        state, _ = reconstruct(b.build())
        assert state.closure.ancestors("impl") == {"impl", "a", "b", "c"}


class TestResolver:

    @pytest.fixture
    def resolver(self):
        return TypeResolver(closure_of({"Foo": [], "Bar": ["Foo"], "Baz": []}))

    def test_identity(self, resolver):
        assert resolver.resolves(Type.int_type(), Type.int_type())
        assert resolver.resolves(Type.mixed(), Type.mixed())

    def test_nominal(self, resolver):
        assert resolver.resolves(Type.object_of("Bar"), Type.object_of("Foo"))
        assert not resolver.resolves(Type.object_of("Foo"), Type.object_of("Bar"))
        assert not resolver.resolves(Type.object_of("Baz"), Type.object_of("Foo"))

    def test_unnamed_object(self, resolver):
        assert resolver.resolves(Type.object_of("Foo"), Type.object_type())
        assert not resolver.resolves(Type.object_type(), Type.object_of("Foo"))

    def test_into_union(self, resolver):
        assert resolver.resolves(Type.int_type(), Type.numeric())
        assert resolver.resolves(Type.object_of("Bar"), Type.parse_decl("Foo|null"))
        assert not resolver.resolves(Type.string_type(), Type.numeric())

    def test_union_into_union(self, resolver):
        assert resolver.resolves(Type.numeric(), Type.mixed())
        assert not resolver.resolves(Type.mixed(), Type.numeric())

    def test_union_into_single(self, resolver):
        assert resolver.resolves(Type.parse_decl("Bar|Foo"), Type.object_of("Foo"))
        assert not resolver.resolves(Type.parse_decl("Bar|null"), Type.object_of("Foo"))

    def test_intersections(self, resolver):
        both = Type.parse_decl("Bar&Baz")
        assert resolver.resolves(both, Type.object_of("Foo"))
        assert not resolver.resolves(Type.object_of("Bar"), both)
        assert resolver.resolves(Type.object_of("Bar"), Type.parse_decl("Foo&Bar"))

    def test_kind_mismatch(self, resolver):
        assert not resolver.resolves(Type.int_type(), Type.string_type())

    def test_arrays(self, resolver):
        assert resolver.resolves(Type.parse_decl("Bar[]"), Type.parse_decl("Foo[]"))
        assert resolver.resolves(Type.parse_decl("int[]"), Type.array_type())
        assert not resolver.resolves(Type.array_type(), Type.parse_decl("int[]"))
        assert not resolver.resolves(Type.parse_decl("string[]"), Type.parse_decl("int[]"))

    def test_allows_null(self, resolver):
        assert resolver.allows_null(Type.parse_decl("?Foo"))
        assert resolver.allows_null(Type.mixed())
        assert not resolver.allows_null(Type.object_of("Foo"))


class TestTypeLattice:

    @pytest.fixture
    def lattice(self):
        return TypeLattice(TypeResolver(closure_of({"Foo": [], "Bar": ["Foo"]})))

    def test_bounds(self, lattice):
        assert lattice.bottom() is Type.unknown()
        assert lattice.top() is Type.mixed()

    def test_unknown_is_join_identity(self, lattice):
        assert lattice.join(Type.unknown(), Type.int_type()) is Type.int_type()
        assert lattice.join(Type.string_type(), Type.unknown()) is Type.string_type()

    def test_join_all(self, lattice):
        joined = lattice.join_all([Type.int_type(), Type.unknown(), Type.float_type()])
        assert joined == Type.numeric()
        assert lattice.join_all([]) is Type.unknown()

    def test_leq(self, lattice):
        assert lattice.leq(Type.unknown(), Type.int_type())
        assert not lattice.leq(Type.int_type(), Type.unknown())
        assert lattice.leq(Type.object_of("Bar"), Type.object_of("Foo"))
        assert lattice.leq(Type.int_type(), lattice.top())
