"""
Unit tests for runtime values and memory.
"""

import math

import pytest
from jolt import Memory, Record
from jolt.runtime import (
    JoltBool, JoltNum, JoltString, JoltList, format_number, jolt_value,
)


class TestValues:
    """Test value printing, equality and iteration."""

    def test_type_tags(self):
        assert JoltBool(True).type == "bool"
        assert JoltNum(1).type == "num"
        assert JoltString("").type == "string"
        assert JoltList().type == "list"

    def test_number_is_float(self):
        assert isinstance(JoltNum(3).value, float)

    def test_format_number(self):
        assert format_number(3.0) == "3"
        assert format_number(-0.5) == "-0.5"
        assert format_number(1e21) == "1000000000000000000000"
        assert format_number(math.nan) == "NaN"
        assert format_number(math.inf) == "Infinity"
        assert format_number(-math.inf) == "-Infinity"

    def test_print(self):
        assert str(JoltBool(False)) == "false"
        assert str(JoltString("hi")) == "hi"
        assert str(JoltList()) == "[]"
        nested = JoltList([JoltNum(1), JoltList([JoltString("a")])])
        assert str(nested) == "[ 1, [ a ] ]"

    def test_equals_across_variants(self):
        assert not JoltNum(1).equals(JoltString("1"))
        assert not JoltBool(True).equals(JoltNum(1))
        assert JoltList([JoltNum(1)]).equals(JoltList([JoltNum(1.0)]))

    def test_number_iteration(self):
        assert list(JoltNum(3).iterable()) == [JoltNum(0), JoltNum(1), JoltNum(2)]
        assert list(JoltNum(2.9).iterable()) == [JoltNum(0), JoltNum(1)]
        assert list(JoltNum(-2).iterable()) == []
        assert JoltNum(math.inf).iterable() is None

    def test_bool_not_iterable(self):
        assert JoltBool(True).iterable() is None

    def test_list_iteration_is_a_snapshot(self):
        items = JoltList([JoltNum(1)])
        seen = items.iterable()
        items.elements.append(JoltNum(2))
        assert list(seen) == [JoltNum(1)]

    def test_jolt_value(self):
        value = jolt_value([1, "a", True, [2.5]])
        assert value == JoltList([
            JoltNum(1), JoltString("a"), JoltBool(True), JoltList([JoltNum(2.5)]),
        ])
        assert value.to_python() == [1.0, "a", True, [2.5]]

    def test_jolt_value_rejects_unknown(self):
        with pytest.raises(TypeError):
            jolt_value({"a": 1})


class TestMemory:
    """Test the scope chain."""

    def test_declare_and_get(self):
        memory = Memory()
        record = memory.declare("x", False, JoltNum(1))
        assert isinstance(record, Record)
        assert memory.get("x") is record
        assert memory.get("y") is None

    def test_duplicate_in_same_scope(self):
        memory = Memory()
        memory.declare("x", False, JoltNum(1))
        assert memory.declare("x", True, JoltNum(2)) is None

    def test_shadowing(self):
        memory = Memory()
        memory.declare("x", False, JoltNum(1))
        with memory.scope():
            memory.declare("x", True, JoltNum(2))
            assert memory.get("x").value == JoltNum(2)
            assert memory.depth == 1
        assert memory.get("x").value == JoltNum(1)
        assert memory.depth == 0

    def test_scope_pops_on_exception(self):
        memory = Memory()
        with pytest.raises(KeyError):
            with memory.scope("block"):
                raise KeyError("boom")
        assert memory.current is memory.root

    def test_cannot_pop_root(self):
        with pytest.raises(RuntimeError):
            Memory().pop()

    def test_bind_overwrites_in_root(self):
        memory = Memory()
        memory.bind("_", JoltNum(1))
        with memory.scope():
            memory.bind("_", JoltNum(2))
        assert memory.get("_").value == JoltNum(2)
        assert memory.get("_").constant is True

    def test_clear(self):
        memory = Memory()
        memory.declare("x", False, JoltNum(1))
        memory.push()
        memory.clear()
        assert memory.depth == 0
        assert memory.get("x") is None
