"""
Tests for the shared helpers.

This module verifies:
- The Unset sentinel (singleton, falsy, final, PEP 604 unions).
- coalesce() keeps legitimate falsy values.
- mirror() exposes read-only, copied views.
- Wording helpers: keyname(), ordinal(), pluralize().
"""
import unittest
from typing import NamedTuple
from unittest import TestCase

from argclaim.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` sentinel.
    """

    def testSingleton(self) -> None:
        self.assertIs(Unset, UnsetType())

    def testFalsy(self) -> None:
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testUnionWithTypes(self) -> None:
        """
        `str | Unset` can be used directly in isinstance checks.
        """
        self.assertTrue(isinstance("x", str | Unset))
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertFalse(isinstance(1, str | Unset))

    def testNotSubclassable(self) -> None:
        with self.assertRaises(TypeError):
            class Subclass(UnsetType):  # NOQA: F-811
                pass


class HelpersTest(TestCase):
    """
    Test suite for coalesce(), rename() and mirror().
    """

    def testCoalesce(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce(0, 5), 0)
        self.assertEqual(coalesce("", "fallback"), "")

    def testRenameForms(self) -> None:
        def helper():
            pass

        self.assertIs(rename(helper, "renamed"), helper)
        self.assertEqual(helper.__name__, "renamed")

        @rename("decorated")
        def other():
            pass

        self.assertEqual(other.__qualname__, "decorated")

        with self.assertRaises(TypeError):
            rename(1, "name")

    def testMirrorReturnsImmutableCopies(self) -> None:
        class Record(NamedTuple):
            a: int
            b: int

        class Holder:
            items = mirror("items")
            mapping = mirror("mapping")
            records = mirror("records")

            def __init__(self):
                self._items = [1, [2, 3]]
                self._mapping = {"k": [1]}
                self._records = [Record(1, 2)]

        holder = Holder()
        self.assertEqual(holder.items, (1, (2, 3)))
        self.assertEqual(holder.mapping, {"k": (1,)})
        # named tuples keep their type
        self.assertIsInstance(holder.records[0], Record)

        with self.assertRaises(AttributeError):
            holder.items = []


class WordingTest(TestCase):
    """
    Test suite for the wording helpers used in faults.
    """

    def testKeyname(self) -> None:
        self.assertEqual(keyname("v", "verbose"), "-v/--verbose")
        self.assertEqual(keyname("o", Unset), "-o")
        self.assertEqual(keyname(Unset, "word-size"), "--word-size")

    def testOrdinalWords(self) -> None:
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")

    def testOrdinalSuffixes(self) -> None:
        self.assertEqual(ordinal(11), "11th")
        self.assertEqual(ordinal(21), "21st")
        self.assertEqual(ordinal(22), "22nd")
        self.assertEqual(ordinal(23), "23rd")
        self.assertEqual(ordinal(112), "112th")

    def testPluralize(self) -> None:
        self.assertEqual(pluralize("token"), "tokens")
        self.assertEqual(pluralize("unclaimed index"), "unclaimed indexes")
        self.assertEqual(pluralize("Entry"), "Entries")
        self.assertEqual(pluralize("key"), "keys")


if __name__ == "__main__":
    unittest.main()
