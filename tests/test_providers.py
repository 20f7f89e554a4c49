"""
Editor provider tests — completion, hover, formatting and playground links.
"""

import os
import sys
import unittest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from vrl_lint.completion import (
    COMMON_FIELDS, KEYWORDS, provide_completions, function_snippet, field_completions,
)
from vrl_lint.formatter import format_vrl, playground_url
from vrl_lint.function_registry import default_registry, get_function
from vrl_lint.hover import provide_hover


class TestCompletion(unittest.TestCase):

    def test_functions_keywords_and_types(self):
        items = provide_completions(".x = ", 0, 5)
        kinds = {i.kind for i in items}
        self.assertEqual(kinds, {"function", "keyword", "type"})
        functions = [i for i in items if i.kind == "function"]
        self.assertEqual(len(functions), len(default_registry()))
        self.assertEqual([i.label for i in items if i.kind == "keyword"], KEYWORDS)

    def test_function_item_details(self):
        items = {i.label: i for i in provide_completions("", 0, 0) if i.kind == "function"}
        parse_json = items["parse_json"]
        self.assertEqual(parse_json.insert_text, "parse_json!(${1:value})")
        self.assertTrue(parse_json.is_snippet)
        self.assertEqual(parse_json.detail, "parse_json!(value: string, max_depth?: int) -> any")
        self.assertEqual(parse_json.documentation, get_function("parse_json").description)

    def test_snippets(self):
        self.assertEqual(function_snippet(get_function("to_string")), "to_string(${1:value})")
        self.assertEqual(function_snippet(get_function("now")), "now()")
        self.assertEqual(function_snippet(get_function("parse_timestamp")),
                         "parse_timestamp!(${1:value}, ${2:format})")

    def test_fields_after_dot(self):
        text = ".customer_id = 1\n.message = 2\n."
        items = provide_completions(text, 2, 1)
        self.assertTrue(all(i.kind == "field" for i in items))
        labels = [i.label for i in items]
        self.assertEqual(labels[:len(COMMON_FIELDS)], COMMON_FIELDS)
        self.assertIn("customer_id", labels)
        self.assertEqual(labels.count("message"), 1)

    def test_field_completions_dedupe(self):
        labels = [i.label for i in field_completions(".a.b = .a")]
        self.assertEqual(labels.count("a"), 1)
        self.assertIn("b", labels)

    def test_out_of_range_position(self):
        items = provide_completions("", 5, 0)
        self.assertTrue(any(i.kind == "function" for i in items))

    def test_to_dict(self):
        item = next(i for i in provide_completions("", 0, 0) if i.label == "if")
        d = item.to_dict()
        self.assertEqual(d["insertText"], "if")
        self.assertFalse(d["isSnippet"])


class TestHover(unittest.TestCase):

    def test_function_hover(self):
        h = provide_hover(". = parse_json!(.message)", 0, 6)
        self.assertIsNotNone(h)
        self.assertIn("parse_json!(value: string, max_depth?: int) -> any", h.contents)
        self.assertIn("Fallible", h.contents)
        self.assertEqual((h.range.start.character, h.range.end.character), (4, 14))

    def test_infallible_function_hover(self):
        h = provide_hover(".u = upcase(.m)", 0, 5)
        self.assertIn("upcase(text: string) -> string", h.contents)
        self.assertNotIn("Fallible", h.contents)

    def test_keyword_hover(self):
        h = provide_hover("if .a { .b = 1 }", 0, 1)
        self.assertTrue(h.contents.startswith("**if**"))

    def test_field_path_hover(self):
        h = provide_hover(".user.name = 1", 0, 7)
        self.assertIn("`.user.name`", h.contents)
        self.assertEqual((h.range.start.character, h.range.end.character), (6, 10))

    def test_operator_hover(self):
        h = provide_hover(".a = .b ?? 1", 0, 8)
        self.assertIn("`??`", h.contents)
        self.assertEqual((h.range.start.character, h.range.end.character), (8, 10))

    def test_nothing_to_show(self):
        self.assertIsNone(provide_hover(".a = 1", 0, 3))
        self.assertIsNone(provide_hover("x = 1", 0, 0))
        self.assertIsNone(provide_hover(".a = 1", 4, 0))

    def test_to_dict(self):
        d = provide_hover("null", 0, 2).to_dict()
        self.assertEqual(d["contents"]["kind"], "markdown")
        self.assertEqual(d["range"]["end"]["character"], 4)


class TestFormatter(unittest.TestCase):

    def test_reindents_blocks(self):
        text = "if .a {\n.b = 1\n} else {\n      .b = 2\n}"
        self.assertEqual(format_vrl(text),
                         "if .a {\n  .b = 1\n} else {\n  .b = 2\n}")

    def test_nested_and_indent_size(self):
        text = "if .a {\nif .b {\n.c = 1\n}\n}"
        self.assertEqual(format_vrl(text, indent_size=4),
                         "if .a {\n    if .b {\n        .c = 1\n    }\n}")

    def test_blank_lines_and_stray_closer(self):
        self.assertEqual(format_vrl("}\n   \n.a = 1"), "}\n\n.a = 1")

    def test_idempotent(self):
        once = format_vrl("if .a {\n.b = 1\n}")
        self.assertEqual(format_vrl(once), once)


class TestPlayground(unittest.TestCase):

    def test_blank_script(self):
        self.assertEqual(playground_url(""), "https://playground.vrl.dev/")
        self.assertEqual(playground_url("  \n"), "https://playground.vrl.dev/")

    def test_script_is_encoded(self):
        self.assertEqual(playground_url(".a = 1"),
                         "https://playground.vrl.dev/?script=.a%20%3D%201")

    def test_custom_base(self):
        self.assertTrue(playground_url(".a", "http://localhost/").startswith("http://localhost/?script="))


if __name__ == "__main__":
    unittest.main()
