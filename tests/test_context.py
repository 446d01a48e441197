"""Tests for comment/string detection and enclosing-construct lookup."""

from __future__ import annotations

from usagehunter.context import (
    extract_imported_items,
    get_class_context,
    get_function_context,
    get_match_context,
    get_surrounding_lines,
    is_import_statement,
    is_in_comment,
    is_in_string,
)


class TestIsInComment:
    def test_whole_line_comment(self):
        assert is_in_comment("// foo bar", 5) is True

    def test_before_trailing_comment(self):
        assert is_in_comment("let x = 5; // trailing", 3) is False

    def test_inside_trailing_comment(self):
        assert is_in_comment("let x = 5; // trailing", 12) is True

    def test_at_comment_token(self):
        assert is_in_comment("let x = 5; // trailing", 11) is True

    def test_block_comment_span(self):
        line = "a = 1; /* note here */ b = 2;"
        assert is_in_comment(line, line.index("note")) is True
        assert is_in_comment(line, line.index("b =")) is False

    def test_unclosed_block_comment_is_not_detected(self):
        assert is_in_comment("/* still open", 5) is False

    def test_hash_comment(self):
        assert is_in_comment("   # python comment", 10) is True

    def test_slashes_inside_string_still_count(self):
        line = "const url = 'http://x'; value"
        assert is_in_comment(line, line.index("value")) is True

    def test_only_first_block_span_considered(self):
        line = "/* a */ code /* b */"
        # "/*" before and "*/" after the column, even though "code" sits between spans
        assert is_in_comment(line, line.index("code")) is True

    def test_column_past_end_is_clamped(self):
        assert is_in_comment("x = 1", 99) is False


class TestIsInString:
    def test_inside_single_quotes(self):
        assert is_in_string("const x = 'a,b';", 12) is True

    def test_before_literal_opens(self):
        assert is_in_string("const x = 'a,b';", 5) is False

    def test_after_literal_closes(self):
        assert is_in_string("const x = 'a,b';", 15) is False

    def test_escaped_quote_not_counted(self):
        line = 'msg = "say \\"hi\\" now"'
        assert is_in_string(line, line.index("now")) is True

    def test_backticks(self):
        line = "const s = `hello ${name}`"
        assert is_in_string(line, line.index("name")) is True

    def test_independent_parity_counters(self):
        # one stray ' and one stray " are both odd; still reported as inside
        assert is_in_string("it's \"x", 7) is True

    def test_column_zero(self):
        assert is_in_string("'abc'", 0) is False


class TestEnclosingConstructs:
    def test_function_declaration(self):
        lines = ["function foo() {", "  return 1;", "}"]
        assert get_function_context(lines, 1) == "foo"

    def test_async_function(self):
        lines = ["async function load(id) {", "  await x;"]
        assert get_function_context(lines, 1) == "load"

    def test_arrow_function(self):
        lines = ["const handler = (evt) => {", "  evt.stop();", "};"]
        assert get_function_context(lines, 1) == "handler"

    def test_method_shape(self):
        lines = ["class A {", "  render() {", "    return 1;", "  }", "}"]
        assert get_function_context(lines, 2) == "render"

    def test_control_flow_skipped(self):
        lines = ["function outer() {", "  while(x) {", "    go;"]
        assert get_function_context(lines, 2) == "outer"

    def test_substring_blacklist_applies_to_any_word(self):
        # "format" contains "for" so the method shape is rejected
        lines = ["function top() {", "format(value)"]
        assert get_function_context(lines, 1) == "top"

    def test_defining_line_participates(self):
        lines = ["function foo() {"]
        assert get_function_context(lines, 0) == "foo"

    def test_no_function_found(self):
        assert get_function_context(["let a = 1;", "a += 2;"], 1) is None

    def test_line_number_past_end(self):
        lines = ["function foo() {", "}"]
        assert get_function_context(lines, 10) == "foo"

    def test_empty_file(self):
        assert get_function_context([], 0) is None
        assert get_class_context([], 0) is None

    def test_class_context(self):
        lines = ["class Bar {", "  method() {}", "}"]
        assert get_class_context(lines, 1) == "Bar"

    def test_exported_abstract_class(self):
        lines = ["export abstract class Shape {", "  area() {}"]
        assert get_class_context(lines, 1) == "Shape"

    def test_no_class(self):
        assert get_class_context(["function f() {}"], 0) is None


class TestImportedItems:
    def test_named_imports(self):
        assert extract_imported_items("import { a, b } from 'm'") == ["a", "b"]

    def test_default_import(self):
        assert extract_imported_items("import x from 'm'") == ["x"]

    def test_namespace_import(self):
        assert extract_imported_items("import * as ns from 'm'") == ["ns"]

    def test_named_braces_must_follow_import(self):
        assert extract_imported_items("import {useState} from 'react'") == ["useState"]
        # mixed default + named form matches none of the shapes
        assert extract_imported_items("import React, { useState } from 'react'") == []

    def test_aliases_kept_verbatim(self):
        assert extract_imported_items("import { a as b, c } from 'm'") == ["a as b", "c"]

    def test_no_identifiers(self):
        assert extract_imported_items("import './side-effect'") == []
        assert extract_imported_items("from os import path") == []


class TestSurroundingLines:
    lines = ["l0", "l1", "l2", "l3", "l4", "l5", "l6"]

    def test_middle(self):
        assert get_surrounding_lines(self.lines, 3) == ["l1", "l2", "l3", "l4", "l5"]

    def test_clipped_at_start(self):
        assert get_surrounding_lines(self.lines, 0) == ["l0", "l1", "l2"]

    def test_clipped_at_end(self):
        assert get_surrounding_lines(self.lines, 6) == ["l4", "l5", "l6"]

    def test_custom_radius(self):
        assert get_surrounding_lines(self.lines, 3, radius=0) == ["l3"]


class TestGetMatchContext:
    def test_import_line_populates_items(self):
        line = "import { fetchUser, saveUser } from './client';"
        ctx = get_match_context(line, line.index("saveUser"), [line], 0)
        assert ctx.imported_items == ["fetchUser", "saveUser"]
        assert ctx.is_in_comment is False
        assert ctx.is_in_string is False
        assert ctx.surrounding_lines == [line]

    def test_non_import_line_has_no_items(self):
        lines = ["class Cart {", "  total() {", "    return this.items;", "  }", "}"]
        ctx = get_match_context(lines[2], lines[2].index("items"), lines, 2)
        assert ctx.imported_items is None
        assert ctx.function_name == "total"
        assert ctx.class_name == "Cart"
        assert len(ctx.surrounding_lines) == 5

    def test_python_from_import_is_import_without_items(self):
        line = "from pkg import thing"
        assert is_import_statement(line)
        ctx = get_match_context(line, line.index("thing"), [line], 0)
        assert ctx.imported_items == []
