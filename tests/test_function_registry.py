"""
Function Registry Tests — built-in dataset, derived views, extra-function loading
and edit-distance suggestions.
"""

import json
import os
import sys
import tempfile
import unittest

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from pydantic import ValidationError

from vrl_lint.function_registry import (
    FunctionCategory, FunctionRegistry, FunctionSpec, default_registry, get_function,
    load_functions_file, format_function_signature, format_function_explanation,
)
from vrl_lint.fuzzy import levenshtein_distance, suggest_similar


class TestBuiltinDataset(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.registry = default_registry()

    def test_registry_size(self):
        self.assertGreater(len(self.registry), 80)

    def test_parse_cef(self):
        spec = self.registry.get("parse_cef")
        self.assertIsNotNone(spec)
        self.assertEqual([p.name for p in spec.parameters], ["message", "transform_fields"])
        self.assertEqual(spec.return_type, "object")
        self.assertTrue(spec.fallible)

    def test_to_int_and_upcase(self):
        to_int = get_function("to_int")
        self.assertEqual([p.name for p in to_int.parameters], ["value"])
        self.assertEqual(to_int.return_type, "int")
        upcase = get_function("upcase")
        self.assertEqual([p.name for p in upcase.parameters], ["text"])
        self.assertEqual(upcase.return_type, "string")

    def test_fallible_flags(self):
        for name in ("parse_cef", "parse_json", "parse_timestamp", "to_int",
                     "to_float", "decode_base64"):
            self.assertIn(name, self.registry.fallible_names, name)
        for name in ("upcase", "downcase", "to_string", "length", "now", "uuid_v4"):
            self.assertIn(name, self.registry.names, name)
            self.assertNotIn(name, self.registry.fallible_names, name)

    def test_find_pop_and_short_type_checks(self):
        self.assertEqual(format_function_signature(get_function("find")),
                         "find(value: string, pattern: string|regex, from?: int) -> int")
        self.assertEqual(format_function_signature(get_function("pop")),
                         "pop(value: array) -> array")
        for name in ("is_int", "is_bool", "is_integer", "is_boolean", "type"):
            self.assertIn(name, self.registry.names, name)
            self.assertNotIn(name, self.registry.fallible_names, name)

    def test_every_entry_is_complete(self):
        for spec in self.registry:
            self.assertTrue(spec.description, spec.name)
            self.assertTrue(spec.return_type, spec.name)

    def test_names_keep_registration_order(self):
        self.assertEqual(self.registry.names[0], "parse_json")
        self.assertEqual(list(self.registry.names), [s.name for s in self.registry])

    def test_default_registry_is_shared(self):
        self.assertIs(default_registry(), self.registry)

    def test_mapping_is_read_only(self):
        with self.assertRaises(TypeError):
            self.registry.specs["parse_json"] = None

    def test_specs_are_frozen(self):
        with self.assertRaises(ValidationError):
            self.registry.get("to_int").fallible = False

    def test_categories(self):
        categories = self.registry.categories()
        self.assertIn(FunctionCategory.PARSE, categories)
        parse = self.registry.by_category("parse")
        self.assertTrue(all(s.category == FunctionCategory.PARSE for s in parse))
        with self.assertRaises(ValueError):
            self.registry.by_category("no-such-category")


class TestRegistryMerging(unittest.TestCase):

    def test_merged_with_adds_and_overrides(self):
        base = default_registry()
        extra = [
            FunctionSpec(name="my_func", category=FunctionCategory.STRING, fallible=False,
                         return_type="string", description="Custom."),
            FunctionSpec(name="upcase", category=FunctionCategory.STRING, fallible=True,
                         return_type="string", description="Overridden."),
        ]
        merged = base.merged_with(extra)
        self.assertIn("my_func", merged)
        self.assertIn("upcase", merged.fallible_names)
        self.assertEqual(len(merged), len(base) + 1)
        # The original registry is untouched
        self.assertNotIn("my_func", base)
        self.assertNotIn("upcase", base.fallible_names)

    def test_empty_registry(self):
        registry = FunctionRegistry([])
        self.assertEqual(len(registry), 0)
        self.assertIsNone(registry.get("parse_json"))


class TestLoadFunctionsFile(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def _write(self, name, content):
        path = os.path.join(self.tmp.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def test_object_format_skips_bad_entries(self):
        path = self._write("fns.json", json.dumps({"functions": [
            {"name": "geoip", "category": "ip", "fallible": True,
             "parameters": [{"name": "value", "type": "string"}],
             "return_type": "object", "description": "GeoIP lookup."},
            {"name": "broken"},
        ]}))
        with self.assertLogs("vrl_lint.function_registry", level="WARNING"):
            specs = load_functions_file(path)
        self.assertEqual([s.name for s in specs], ["geoip"])
        self.assertEqual(specs[0].parameters[0].name, "value")

    def test_bare_list_format(self):
        path = self._write("fns.json", json.dumps([
            {"name": "tag", "category": "event", "fallible": False,
             "return_type": "null", "description": "Tags the event."},
        ]))
        self.assertEqual(len(load_functions_file(path)), 1)

    def test_missing_and_invalid_files(self):
        self.assertEqual(load_functions_file(os.path.join(self.tmp.name, "nope.json")), [])
        self.assertEqual(load_functions_file(self._write("bad.json", "{not json")), [])
        self.assertEqual(load_functions_file(self._write("str.json", '"text"')), [])


class TestFormatting(unittest.TestCase):

    def test_signature(self):
        self.assertEqual(format_function_signature(get_function("to_int")),
                         "to_int!(value: any) -> int")
        self.assertEqual(format_function_signature(get_function("parse_json")),
                         "parse_json!(value: string, max_depth?: int) -> any")
        self.assertEqual(format_function_signature(get_function("now")), "now() -> timestamp")

    def test_explanation(self):
        md = format_function_explanation("parse_json")
        self.assertIn("## parse_json", md)
        self.assertIn("**Fallible**", md)
        self.assertIn("### Example", md)
        self.assertNotIn("**Fallible**", format_function_explanation("upcase"))

    def test_unknown_explanation(self):
        self.assertEqual(format_function_explanation("nope"), "Unknown function: nope")


class TestSuggestions(unittest.TestCase):

    def test_levenshtein(self):
        self.assertEqual(levenshtein_distance("kitten", "sitting"), 3)
        self.assertEqual(levenshtein_distance("", "abc"), 3)
        self.assertEqual(levenshtein_distance("abc", ""), 3)
        self.assertEqual(levenshtein_distance("same", "same"), 0)
        self.assertEqual(levenshtein_distance("pars_json", "parse_json"), 1)

    def test_ranking_and_ties(self):
        self.assertEqual(suggest_similar("ab", ["xyz", "ad", "ac", "ab_long_name"]),
                         ["ad", "ac", "xyz"])

    def test_distance_cutoff_and_limit(self):
        self.assertEqual(suggest_similar("abcdef", ["uvwxyz"]), [])
        self.assertEqual(len(suggest_similar("a", ["b", "c", "d", "e"])), 3)

    def test_registry_typo(self):
        self.assertEqual(suggest_similar("to_itn", default_registry().names)[0], "to_int")


if __name__ == "__main__":
    unittest.main()
