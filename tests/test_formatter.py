"""Tests for the wat formatter."""

from __future__ import annotations

import pytest

from wattle.ast_nodes import (
    FunctionType,
    GlobalType,
    Limits,
    MemoryType,
    Param,
    ValType,
)
from wattle.formatter import (
    WatFormatter,
    format_function_type,
    format_global_type,
    format_memory_type,
    format_string,
    format_type_use,
)
from wattle.module import parse_module
from wattle.types import parse_type_use

from tests.helpers import parse_with, shape, signature


def reformat(source: str) -> str:
    return WatFormatter().format(parse_module(source, "test.wat"))


class TestFormatPieces:
    def test_global_types(self):
        assert format_global_type(GlobalType(ValType.I32)) == "i32"
        assert format_global_type(GlobalType(ValType.F64, True)) == "(mut f64)"

    def test_memory_types(self):
        assert format_memory_type(MemoryType(Limits(1))) == "1"
        assert format_memory_type(MemoryType(Limits(1, 4), True)) == "1 4 shared"

    def test_shorthand_grouping(self):
        func = FunctionType(
            params=(Param(ValType.I32), Param(ValType.I32), Param(ValType.F32)),
            results=(ValType.I32, ValType.I64),
        )
        assert format_function_type(func) == "(param i32 i32 f32) (result i32 i64)"

    def test_named_params_split_groups(self):
        func = signature("(param i32 i32) (param $x f32) (result i32)")
        assert format_function_type(func) == "(param i32 i32) (param $x f32) (result i32)"

    def test_display_name(self):
        func = signature('(param $a (@name "alpha") i64)')
        assert format_function_type(func) == '(param $a (@name "alpha") i64)'

    def test_empty_signature(self):
        assert format_function_type(FunctionType()) == ""

    def test_legacy_alias_is_canonicalized(self):
        assert format_function_type(signature("(result anyfunc)")) == "(result funcref)"

    def test_type_use(self):
        assert format_type_use(parse_with(parse_type_use, "(type 3)")) == "(type 3)"
        use = parse_with(parse_type_use, "(type $t) (param i32)")
        assert format_type_use(use) == "(type $t) (param i32)"

    def test_string_escapes(self):
        assert format_string('a"b\\') == '"a\\"b\\\\"'
        assert format_string("x\ny\x01") == '"x\\ny\\01"'


class TestRoundTrip:
    @pytest.mark.parametrize("source", [
        "(param i32 i32) (param $x f32) (result i32)",
        "(param $a i32) (param $b i32) (result f64 f64)",
        "(param) (param v128) (result) (result nullref)",
        '(param (@name "tab\\there") anyref)',
        "",
    ])
    def test_signature_survives_reformat(self, source):
        func = signature(source)
        again = signature(format_function_type(func))
        assert shape(again) == shape(func)
        assert [p.name.name if p.name else None for p in again.params] == [
            p.name.name if p.name else None for p in func.params
        ]


class TestWatFormatter:
    def test_module_with_id(self):
        source = "(module $m (type $t (func (param i32))) (memory 1))"
        assert reformat(source) == (
            "(module $m\n"
            "  (type $t (func (param i32)))\n"
            "  (memory 1))\n"
        )

    def test_bare_fields(self):
        source = "(type (func))\n(global $g (mut i32))\n(table 1 2 anyfunc)\n(func $f (type 0))"
        assert reformat(source) == (
            "(type (func))\n"
            "(global $g (mut i32))\n"
            "(table 1 2 funcref)\n"
            "(func $f (type 0))\n"
        )

    def test_empty_named_module(self):
        assert reformat("(module $empty)") == "(module $empty)\n"

    def test_formatting_is_stable(self):
        source = "(module $m (type $t (func (param $x i32) (param i64 i64) (result i32))) (func (type $t)))"
        once = reformat(source)
        assert reformat(once) == once
