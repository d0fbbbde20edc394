# tests/test_builtins.py

import json

import pytest

from phptypes.builtins import BuiltinSignatures
from phptypes.types import Type


class TestPackagedSignatures:

    def test_functions(self, builtins):
        assert builtins.function_return("strlen") is Type.int_type()
        assert builtins.function_return("STRLEN") is Type.int_type()
        assert str(builtins.function_return("explode")) == "string[]"
        assert builtins.has_function("var_dump")
        assert builtins.function_return("var_dump") is None
        assert builtins.function_return("no_such_function") is None

    def test_methods_walk_extends(self, builtins):
        assert builtins.method_return("ArrayIterator", "current") is Type.mixed()
        assert builtins.method_return("InvalidArgumentException", "getMessage") is Type.string_type()
        assert str(builtins.method_return("exception", "getprevious")) == "Throwable|null"
        assert builtins.method_return("Exception", "nope") is None

    def test_properties_and_constants(self, builtins):
        assert builtins.property_type("RuntimeException", "code") is Type.int_type()
        assert builtins.class_constant_type("ArrayIterator", "STD_PROP_LIST") is Type.int_type()
        assert builtins.class_constant_type("DateTime", "ATOM") is Type.string_type()

    def test_class_names(self, builtins):
        assert builtins.is_builtin_class("stdclass")
        assert builtins.is_builtin_class("Closure")
        assert not builtins.is_builtin_class("MyApp")

    def test_baseline_hierarchy(self, builtins):
        closure = builtins.baseline_hierarchy()
        assert closure.is_subtype("InvalidArgumentException", "Throwable")
        assert closure.is_subtype("ArgumentCountError", "Error")
        assert closure.is_subtype("RecursiveArrayIterator", "Countable")
        assert "pdoexception" in closure.descendants("exception")
        assert closure.check_invariant()


class TestMerge:

    def test_inline_data(self):
        sigs = BuiltinSignatures({
            "functions": {"Custom": "int"},
            "classes": {
                "Base": {"methods": {"run": "string"}},
                "Derived": {"extends": "Base", "constants": {"X": "float"}},
            },
        })
        assert sigs.function_return("custom") is Type.int_type()
        assert sigs.method_return("derived", "RUN") is Type.string_type()
        assert sigs.class_constant_type("Derived", "x") is Type.float_type()

    def test_cyclic_extends(self):
        sigs = BuiltinSignatures({
            "classes": {"A": {"extends": "B"}, "B": {"extends": "A"}},
        })
        assert sigs.method_return("A", "missing") is None

    def test_extra_file_overrides(self, tmp_path):
        extra = tmp_path / "extra.json"
        extra.write_text(json.dumps({
            "functions": {"strlen": "string", "my_helper": "bool"},
            "classes": {"Vendor\\Client": {"methods": {"send": "int"}}},
        }), encoding="utf-8")
        sigs = BuiltinSignatures.load(extra)
        assert sigs.function_return("strlen") is Type.string_type()
        assert sigs.function_return("my_helper") is Type.bool_type()
        assert sigs.method_return("vendor\\client", "send") is Type.int_type()
        assert sigs.function_return("count") is Type.int_type()

    def test_missing_extra_file(self, tmp_path):
        with pytest.raises(OSError):
            BuiltinSignatures.load(tmp_path / "absent.json")
