# tests/test_declparser.py
"""
Tests for the textual declaration parser.
"""

import pytest

from phptypes.declparser import from_decl, parse_decl
from phptypes.errors import InvalidDeclaration
from phptypes.types import Type, TypeKind


class TestCanonicalRendering:

    @pytest.mark.parametrize("text", [
        "int",
        "string",
        "null",
        "Foo",
        "int[]",
        "Foo[][]",
        "int|string",
        "A&B",
        "int|float|string",
        "(A&B)|null",
        "(int|float)[]",
        "Vendor\\Pkg\\Thing",
    ])
    def test_canonical_text_round_trips(self, text):
        assert str(parse_decl(text)) == text

    @pytest.mark.parametrize("text, expected", [
        ("boolean", "bool"),
        ("true", "bool"),
        ("integer", "int"),
        ("double", "float"),
        ("real", "float"),
        ("void", "null"),
        ("numeric", "int|float"),
        ("\\Foo", "Foo"),
        ("INT", "int"),
    ])
    def test_aliases(self, text, expected):
        assert str(parse_decl(text)) == expected


class TestStructure:

    def test_nullable(self):
        t = parse_decl("?Foo")
        assert t == Type.object_of("Foo").union_with(Type.null_type())
        assert str(t) == "Foo|null"

    def test_nullable_wraps_whole_remainder(self):
        t = parse_decl("?int|string")
        assert t.kind == TypeKind.UNION
        assert len(t.subtypes) == 3
        assert t.allows_null()

    def test_array_binds_to_operand(self):
        t = parse_decl("int|string[]")
        assert t.subtypes == (Type.int_type(), Type.array_of(Type.string_type()))

    def test_grouped_array(self):
        t = parse_decl("(int|string)[]")
        assert t.kind == TypeKind.ARRAY
        assert t.element_type == Type.parse_decl("int|string")

    def test_right_nesting(self):
        t = parse_decl("A|B&C")
        assert t.kind == TypeKind.UNION
        assert t.subtypes[1].kind == TypeKind.INTERSECTION
        t = parse_decl("A&B|C")
        assert t.kind == TypeKind.INTERSECTION
        assert t.subtypes[1].kind == TypeKind.UNION

    def test_same_kind_chain_is_flat(self):
        t = parse_decl("int|float|string|null")
        assert len(t.subtypes) == 4

    def test_mixed_keyword(self):
        assert parse_decl("mixed") is Type.mixed()

    def test_class_names_keep_case(self):
        assert parse_decl("MyClass").user_type == "MyClass"

    def test_surrounding_whitespace(self):
        assert parse_decl("  int  ") is Type.int_type()

    def test_type_passes_through(self):
        t = Type.object_of("Foo")
        assert parse_decl(t) is t


class TestMalformed:

    @pytest.mark.parametrize("text", [
        "",
        "   ",
        "int|",
        "|int",
        "(int",
        "int)",
        "int[",
        "[]",
        "int string",
        "?",
        "1abc",
    ])
    def test_invalid(self, text):
        with pytest.raises(InvalidDeclaration):
            parse_decl(text)

    def test_non_string(self):
        with pytest.raises(InvalidDeclaration):
            parse_decl(42)

    def test_error_code(self):
        with pytest.raises(InvalidDeclaration) as info:
            parse_decl("int|")
        assert str(info.value).startswith("[PHPT-1001]")
        assert info.value.decl == "int|"

    def test_from_decl_falls_back_to_mixed(self):
        assert from_decl("int|") is Type.mixed()
        assert from_decl(None) is Type.mixed()
        assert from_decl("") is Type.mixed()

    def test_from_decl_parses_valid(self):
        assert from_decl("?int") == parse_decl("int|null")
