"""
Options module behavioral tests (flag, count, arg, list).

Scope
- Validate binding semantics of each declaration kind.
- Validate value adjacency and last-occurrence-wins.
- Validate registration faults and their effect on the declaration.
- Validate API misuse errors.

Conventions
- Test method names follow CamelCase per project convention.
- Faults are inspected through Parser.faults; nothing here calls finalize().
"""

from __future__ import annotations

import unittest
from types import SimpleNamespace
from unittest import TestCase

from argclaim import Descriptor, Float32, Kind, Namespace, Needs, Parser, UInt8
from argclaim.faults import (
    DanglingSwitchError,
    DuplicateKeyError,
    FaultCode,
    InvalidKeyError,
    MalformedValueError,
    MissingValueError,
    RequiredArgumentError,
    UnhandledValueError,
)


def parse(*tokens, **options):
    return Parser("testing", "prog", **options).parse(tokens)


class TestFlag(TestCase):
    """Behavioral tests for presence-only flags."""

    def testPresent(self):
        parser = parse("-v").flag("-v", "--verbose")
        self.assertIs(parser.namespace.verbose, True)
        self.assertTrue(parser.ok)

    def testAbsent(self):
        parser = parse().flag("-v", "--verbose")
        self.assertIs(parser.namespace.verbose, False)

    def testLongForm(self):
        parser = parse("--verbose", "file").flag("-v", "--verbose")
        self.assertIs(parser.namespace.verbose, True)
        self.assertEqual(parser.unclaimed(), 1)

    def testInverted(self):
        self.assertIs(parse().flag("-c", "--color", inverted=True).namespace.color, True)
        self.assertIs(parse("-c").flag("-c", "--color", inverted=True).namespace.color, False)

    def testInvertedShowsDefault(self):
        parser = parse().flag("-c", "--color", inverted=True)
        self.assertEqual(parser.descriptors[0].default, "true")

    def testClusterSetsEveryFlag(self):
        parser = parse("-abc").flag("-a").flag("-b").flag("-c").flag("-d")
        self.assertEqual(
            (parser.namespace.a, parser.namespace.b, parser.namespace.c, parser.namespace.d),
            (True, True, True, False)
        )

    def testDanglingLongFlagIsAFault(self):
        parser = parse("--verbose").flag("-v", "--verbose")
        self.assertIsInstance(parser.faults[0], DanglingSwitchError)
        self.assertIs(parser.namespace.verbose, False)

    def testDestinations(self):
        parser = parse("--dry-run", "-x", "x").flag("--dry-run").flag("-x").flag("-q", dest="quiet")
        self.assertIs(parser.namespace.dry_run, True)
        self.assertIs(parser.namespace.x, True)
        self.assertIs(parser.namespace.quiet, False)

    def testRequiredMissing(self):
        parser = parse().flag("-f", "--force", needs=Needs.REQUIRED)
        self.assertFalse(parser.ok)
        self.assertIsInstance(parser.faults[0], RequiredArgumentError)
        self.assertEqual(str(parser.faults[0]), "required argument not given: -f/--force")

    def testReturnsReceiver(self):
        parser = parse()
        self.assertIs(parser.flag("-v"), parser)


class TestCount(TestCase):
    """Behavioral tests for occurrence counters."""

    def testStackedCluster(self):
        self.assertEqual(parse("-vvv").count("-v", "--verbose").namespace.verbose, 3)

    def testAcrossTokens(self):
        self.assertEqual(parse("-vv", "-v", "-v").count("-v", "--verbose").namespace.verbose, 4)

    def testLongOccurrences(self):
        parser = parse("--verbose", "--verbose", "x").count("-v", "--verbose")
        self.assertEqual(parser.namespace.verbose, 2)

    def testShortKeyWinsOverLong(self):
        parser = parse("-v", "--verbose", "x").count("-v", "--verbose")
        self.assertEqual(parser.namespace.verbose, 1)

    def testAbsentKeepsDefault(self):
        self.assertEqual(parse().count("-v").namespace.v, 0)
        self.assertEqual(parse().count("-v", default=5).namespace.v, 5)

    def testPreseededNamespaceIsKept(self):
        namespace = SimpleNamespace(verbose=2)
        parser = parse(namespace=namespace).count("-v", "--verbose")
        self.assertIs(parser.namespace, namespace)
        self.assertEqual(namespace.verbose, 2)


class TestArg(TestCase):
    """Behavioral tests for single-value options."""

    def testValue(self):
        parser = parse("-o", "out.bin").arg("-o", "--output")
        self.assertEqual(parser.namespace.output, "out.bin")
        self.assertEqual(parser.unclaimed(), 0)

    def testLastOccurrenceWins(self):
        parser = parse("-o", "a", "-o", "b", "--output", "c").arg("-o", "--output")
        # the short key is probed first: "--output c" is not an occurrence of -o
        self.assertEqual(parser.namespace.output, "b")
        self.assertEqual(parser.unclaimed(), 1)

        parser = parse("-o", "a", "-o", "b", "-o", "c").arg("-o", "--output")
        self.assertEqual(parser.namespace.output, "c")
        self.assertEqual(parser.unclaimed(), 0)

    def testPriorOccurrenceWithoutValueFails(self):
        parser = parse("-o", "-o", "c").arg("-o", "--output", default="a.out")
        self.assertIsInstance(parser.faults[0], MissingValueError)
        self.assertEqual(str(parser.faults[0]), "no argument given to -o/--output")
        self.assertEqual(parser.namespace.output, "a.out")

    def testLastOccurrenceWithoutValueFails(self):
        parser = parse("-o", "a", "-o").arg("-o", "--output")
        self.assertIsInstance(parser.faults[0], MissingValueError)
        self.assertEqual(parser.faults[0].options["index"], 2)
        self.assertIsNone(parser.namespace.output)

    def testAdjacentFlagsDoNotStealValues(self):
        parser = parse("-a", "-b", "x").arg("-a").arg("-b")
        self.assertIsInstance(parser.faults[0], MissingValueError)
        self.assertEqual(parser.namespace.b, "x")

    def testDeclarationOrderDoesNotMatter(self):
        first = parse("-a", "1", "-b", "2").arg("-a").arg("-b").namespace
        second = parse("-a", "1", "-b", "2").arg("-b").arg("-a").namespace
        self.assertEqual((first.a, first.b), ("1", "2"))
        self.assertEqual((second.a, second.b), ("1", "2"))

    def testClusterWithValue(self):
        parser = parse("-vo", "out").count("-v").arg("-o")
        self.assertEqual((parser.namespace.v, parser.namespace.o), (1, "out"))

    def testTypedValue(self):
        parser = parse("-m", "100", "--word-size", "128", "x")
        parser.arg("-m", "--max-phys", type=UInt8).arg("--word-size", type=float, default=64.0)
        self.assertEqual(parser.namespace.max_phys, 100)
        self.assertEqual(parser.namespace.word_size, 128.0)

    def testMalformedValue(self):
        parser = parse("-n", "x").arg("-n", "--number", type=int, default=3)
        self.assertIsInstance(parser.faults[0], MalformedValueError)
        self.assertEqual(str(parser.faults[0]), "error while parsing value of -n/--number: invalid literal for int: 'x'")
        self.assertEqual(parser.namespace.number, 3)
        # the value token is still consumed
        self.assertEqual(parser.unclaimed(), 0)

    def testOverflowIsUnhandled(self):
        parser = parse("-m", "300").arg("-m", type=UInt8)
        self.assertIsInstance(parser.faults[0], UnhandledValueError)
        self.assertTrue(str(parser.faults[0]).startswith("error while handling -m: "))

    def testUnhandledValue(self):
        def explode(token):
            raise LookupError("boom")

        parser = parse("-x", "1").arg("-x", "--explode", type=explode)
        self.assertIsInstance(parser.faults[0], UnhandledValueError)
        self.assertEqual(str(parser.faults[0]), "error while handling -x/--explode: boom")
        self.assertEqual(parser.faults[0].options["code"], FaultCode.UNHANDLED_VALUE)

    def testRequiredMissing(self):
        parser = parse().arg("-o", "--output", needs=Needs.REQUIRED)
        self.assertEqual(str(parser.faults[0]), "required argument not given: -o/--output")

    def testOptionalMissingKeepsDefault(self):
        self.assertEqual(parse().arg("-o", "--output", default="a.out").namespace.output, "a.out")
        self.assertIsNone(parse().arg("-o", "--output").namespace.output)

    def testDefaultedShowsCurrentValue(self):
        parser = parse().arg("-o", "--output", default="a.out", kind=Kind.DEFAULTED, metavar="FILE")
        self.assertEqual(
            parser.descriptors[0],
            Descriptor("o", "output", None, "a.out", "FILE", Kind.DEFAULTED, Needs.OPTIONAL)
        )

    def testDefaultedFromPreseededNamespace(self):
        parser = parse(namespace=SimpleNamespace(output="b.out")).arg("-o", "--output", kind=Kind.DEFAULTED)
        self.assertEqual(parser.descriptors[0].default, "b.out")
        self.assertEqual(parser.namespace.output, "b.out")

    def testDefaultedWithoutStartingValueShowsNothing(self):
        parser = parse().arg("-o", "--output", kind=Kind.DEFAULTED)
        self.assertIsNone(parser.descriptors[0].default)
        self.assertNotIn("[default:", parser.render().plain)

    def testSinglePrecisionOverflowIsUnhandled(self):
        parser = parse("-f", "1e39").arg("-f", "--factor", type=Float32)
        self.assertIsInstance(parser.faults[0], UnhandledValueError)
        self.assertEqual(str(parser.faults[0]), "error while handling -f/--factor: '1e39' is out of range for float32")
        self.assertIsNone(parser.namespace.factor)


class TestList(TestCase):
    """Behavioral tests for repeatable options."""

    def testCollectsInOrder(self):
        parser = parse("-W", "all", "-W", "abi", "-W", "inline").list("-W", "--warn")
        self.assertEqual(parser.namespace.warn, ["all", "abi", "inline"])

    def testTyped(self):
        parser = parse("-I", "1", "-I", "2").list("-I", type=int)
        self.assertEqual(parser.namespace.I, [1, 2])

    def testAbsentIsEmpty(self):
        self.assertEqual(parse().list("-I").namespace.I, [])

    def testDefaultIsCopied(self):
        default = ["x"]
        parser = parse("-I", "a").list("-I", default=default)
        self.assertEqual(parser.namespace.I, ["x", "a"])
        self.assertEqual(default, ["x"])

    def testFailureKeepsEarlierValues(self):
        parser = parse("-I", "a", "-I").list("-I")
        self.assertEqual(parser.namespace.I, ["a"])
        self.assertIsInstance(parser.faults[0], MissingValueError)


class TestRegistration(TestCase):
    """Behavioral tests for registration faults."""

    def testDuplicateShortKey(self):
        parser = parse("-v").flag("-v", "--verbose").count("-v", dest="again")
        self.assertIsInstance(parser.faults[0], DuplicateKeyError)
        self.assertEqual(str(parser.faults[0]), "duplicate short code detected: v")
        self.assertNotIn("again", parser.namespace)
        self.assertEqual(len(parser.descriptors), 1)

    def testDuplicateLongKey(self):
        parser = parse().arg("--output", default="a").arg("--output", default="b")
        self.assertEqual(str(parser.faults[0]), "duplicate long code detected: output")
        # the rejected declaration does not touch the destination
        self.assertEqual(parser.namespace.output, "a")

    def testInvalidKeys(self):
        parser = parse().flag("--x").flag("-ab")
        self.assertEqual(
            [fault.options["code"] for fault in parser.faults],
            [FaultCode.INVALID_LONG_KEY, FaultCode.INVALID_SHORT_KEY]
        )
        self.assertTrue(all(isinstance(fault, InvalidKeyError) for fault in parser.faults))
        self.assertEqual(parser.descriptors, ())

    def testLaterDeclarationsStillRun(self):
        parser = parse("-v").arg("-o", needs=Needs.REQUIRED).flag("-v")
        self.assertEqual(len(parser.faults), 1)
        self.assertIs(parser.namespace.v, True)


class TestMisuse(TestCase):
    """API misuse raises immediately."""

    def testDeclaringBeforeParse(self):
        with self.assertRaises(RuntimeError):
            Parser("testing", "prog").flag("-v")

    def testNames(self):
        parser = parse()
        with self.assertRaises(TypeError):
            parser.flag()
        with self.assertRaises(TypeError):
            parser.flag(1)
        with self.assertRaises(ValueError):
            parser.flag("v")
        with self.assertRaises(ValueError):
            parser.flag("-")
        with self.assertRaises(ValueError):
            parser.flag("-a", "-b")
        with self.assertRaises(ValueError):
            parser.flag("--aa", "--bb")

    def testKeywordTypes(self):
        parser = parse()
        with self.assertRaises(TypeError):
            parser.arg("-x", type=5)
        with self.assertRaises(TypeError):
            parser.arg("-x", kind="normal")
        with self.assertRaises(TypeError):
            parser.arg("-x", needs=True)
        with self.assertRaises(TypeError):
            parser.arg("-x", descr=1)
        with self.assertRaises(ValueError):
            parser.arg("-x", dest="")

    def testListDestinationMustBeASequence(self):
        parser = parse(namespace=SimpleNamespace(I=3))
        with self.assertRaises(TypeError):
            parser.list("-I")


class TestTypes(TestCase):
    """Descriptor and Namespace helpers."""

    def testDescriptorName(self):
        self.assertEqual(Descriptor("v", "verbose", None, None, None, Kind.NORMAL, Needs.OPTIONAL).name, "-v/--verbose")
        self.assertEqual(Descriptor(None, "file", None, None, None, Kind.POSITIONAL, Needs.REQUIRED).name, "file")

    def testNamespaceContains(self):
        namespace = Namespace(a=1)
        self.assertIn("a", namespace)
        self.assertNotIn("b", namespace)


if __name__ == "__main__":
    unittest.main()
