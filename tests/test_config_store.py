"""
Configuration loading, the per-document diagnostics store and the debouncer.
"""

import json
import os
import sys
import tempfile
import threading
import time
import unittest
from unittest import mock

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from vrl_lint.config import CONFIG_ENV_VAR, LinterConfig, config_from_env, load_config
from vrl_lint.diagnostics import Diagnostic, Range, Severity
from vrl_lint.document_store import Debouncer, DiagnosticStore


class TestLoadConfig(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmp.cleanup()

    def _write(self, name, content):
        path = os.path.join(self.tmp.name, name)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content)
        return path

    def test_defaults(self):
        config = load_config(None)
        self.assertEqual(config.disabled_codes, [])
        self.assertEqual(config.debounce_seconds, 0.5)
        self.assertEqual(config.indent_size, 2)
        self.assertEqual(config.playground_url, "https://playground.vrl.dev/")

    def test_valid_file(self):
        path = self._write("vrl-lint.json", json.dumps({
            "disabled_codes": ["regex-performance"],
            "debounce_seconds": 0.1,
            "extra_functions_path": "custom.json",
            "indent_size": 4,
        }))
        config = load_config(path)
        self.assertEqual(config.disabled_codes, ["regex-performance"])
        self.assertEqual(config.debounce_seconds, 0.1)
        self.assertEqual(config.indent_size, 4)
        self.assertEqual(config.extra_functions_path, os.path.join(self.tmp.name, "custom.json"))

    def test_absolute_functions_path_is_kept(self):
        absolute = os.path.join(self.tmp.name, "abs.json")
        path = self._write("c.json", json.dumps({"extra_functions_path": absolute}))
        self.assertEqual(load_config(path).extra_functions_path, absolute)

    def test_missing_file_uses_defaults(self):
        config = load_config(os.path.join(self.tmp.name, "missing.json"))
        self.assertEqual(config, LinterConfig())

    def test_invalid_json_uses_defaults(self):
        path = self._write("bad.json", "{disabled_codes: ")
        with self.assertLogs("vrl_lint.config", level="ERROR"):
            config = load_config(path)
        self.assertEqual(config, LinterConfig())

    def test_invalid_values_use_defaults(self):
        path = self._write("bad.json", json.dumps({"debounce_seconds": -1}))
        with self.assertLogs("vrl_lint.config", level="ERROR"):
            config = load_config(path)
        self.assertEqual(config.debounce_seconds, 0.5)

    def test_config_from_env(self):
        path = self._write("env.json", json.dumps({"indent_size": 3}))
        with mock.patch.dict(os.environ, {CONFIG_ENV_VAR: path}):
            self.assertEqual(config_from_env().indent_size, 3)
        with mock.patch.dict(os.environ, {}, clear=True):
            self.assertEqual(config_from_env(), LinterConfig())


def _diag(code):
    return Diagnostic(range=Range.on_line(0, 0, 1), message=code,
                      severity=Severity.ERROR, code=code)


class TestDiagnosticStore(unittest.TestCase):

    def test_set_replaces_wholesale(self):
        store = DiagnosticStore()
        store.set("a.vrl", [_diag("x"), _diag("y")])
        store.set("a.vrl", [_diag("z")])
        self.assertEqual([d.code for d in store.get("a.vrl")], ["z"])

    def test_get_returns_copy(self):
        store = DiagnosticStore()
        store.set("a.vrl", [_diag("x")])
        store.get("a.vrl").clear()
        self.assertEqual(len(store.get("a.vrl")), 1)

    def test_unknown_uri_and_clear(self):
        store = DiagnosticStore()
        self.assertEqual(store.get("nope"), [])
        store.set("b.vrl", [])
        store.set("a.vrl", [_diag("x")])
        self.assertEqual(store.uris(), ["a.vrl", "b.vrl"])
        store.clear("a.vrl")
        self.assertEqual(store.uris(), ["b.vrl"])


class TestDebouncer(unittest.TestCase):

    def test_only_latest_call_runs(self):
        debouncer = Debouncer(0.05)
        calls = []
        done = threading.Event()

        debouncer.schedule("doc", lambda: calls.append("first"))
        debouncer.schedule("doc", lambda: (calls.append("second"), done.set()))

        self.assertTrue(done.wait(timeout=2))
        time.sleep(0.1)
        self.assertEqual(calls, ["second"])
        self.assertFalse(debouncer.pending("doc"))

    def test_keys_are_independent(self):
        debouncer = Debouncer(0.01)
        a_done, b_done = threading.Event(), threading.Event()
        debouncer.schedule("a", a_done.set)
        debouncer.schedule("b", b_done.set)
        self.assertTrue(a_done.wait(timeout=2))
        self.assertTrue(b_done.wait(timeout=2))

    def test_cancel(self):
        debouncer = Debouncer(0.05)
        ran = threading.Event()
        debouncer.schedule("doc", ran.set)
        self.assertTrue(debouncer.pending("doc"))
        debouncer.cancel("doc")
        self.assertFalse(debouncer.pending("doc"))
        self.assertFalse(ran.wait(timeout=0.2))

    def test_cancel_all_returns_dropped_callbacks(self):
        debouncer = Debouncer(5)
        ran = threading.Event()
        debouncer.schedule("a", ran.set)
        debouncer.schedule("b", ran.set)
        dropped = debouncer.cancel_all()
        self.assertEqual(sorted(dropped), ["a", "b"])
        self.assertEqual(dropped["a"], ran.set)
        self.assertFalse(debouncer.pending("a"))
        self.assertEqual(debouncer.cancel_all(), {})

    def test_failing_callback_is_logged(self):
        debouncer = Debouncer(0.01)
        finished = threading.Event()

        def boom():
            finished.set()
            raise RuntimeError("boom")

        with self.assertLogs("vrl_lint.document_store", level="ERROR"):
            debouncer.schedule("doc", boom)
            self.assertTrue(finished.wait(timeout=2))
            time.sleep(0.05)


if __name__ == "__main__":
    unittest.main()
