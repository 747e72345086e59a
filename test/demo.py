"""
Demo script tests (the root main.py stays importable and runnable).

Conventions
- Test method names follow CamelCase per project convention.
- main.py is loaded from the repository root by path; it is not installed.
"""

from __future__ import annotations

import contextlib
import importlib.util
import io
import unittest
from pathlib import Path
from unittest import TestCase


def load():
    location = Path(__file__).resolve().parent.parent / "main.py"
    spec = importlib.util.spec_from_file_location("argclaim_demo", location)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class TestDemo(TestCase):
    """Behavioral tests for the demo entry point."""

    def testImports(self):
        self.assertTrue(callable(load().main))

    def testRunsCommandLine(self):
        demo = load()
        shown = []
        demo.pprint = shown.append
        demo.main(["-vv", "-p", "80", "-H", "a", "-H", "b", "run", "x", "y"])
        namespace, = shown
        self.assertEqual(namespace.verbose, 2)
        self.assertEqual(namespace.port, 80)
        self.assertEqual(namespace.host, ["a", "b"])
        self.assertEqual(namespace.command, "run")
        self.assertEqual(namespace.rest, ["x", "y"])

    def testPrintsHelp(self):
        stream = io.StringIO()
        with contextlib.redirect_stdout(stream):
            load().main(["-h"])
        self.assertIn("claim-based argument demo", stream.getvalue())


if __name__ == "__main__":
    unittest.main()
