"""
Tests for the shared helpers.

This module verifies the small building blocks every other module leans on:
- The Unset sentinel: singleton identity, falsy semantics, unions, finality.
- coalesce() replacing only Unset.
- mirror() properties returning detached copies.
- ordinal() and pluralize() wording used by fault messages.
"""
import unittest
from unittest import TestCase

from subcommander.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` singleton.
    """

    def testSingleton(self) -> None:
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsy(self) -> None:
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, "")

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testUnionWithTypes(self) -> None:
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("text", str | Unset)
        self.assertNotIsInstance(1, str | Unset)

    def testFinal(self) -> None:
        with self.assertRaises(TypeError):
            type("Derived", (UnsetType,), {})


class HelpersTest(TestCase):
    """
    Test suite for coalesce, rename, mirror, ordinal and pluralize.
    """

    def testCoalesce(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertEqual(coalesce("", "fallback"), "")
        self.assertIsNone(coalesce(None, "fallback"))

    def testRename(self) -> None:
        function = rename(lambda: None, "named")
        self.assertEqual(function.__name__, "named")
        self.assertEqual(function.__qualname__, "named")
        with self.assertRaises(TypeError):
            rename(function, 1)

    def testMirrorReturnsDetachedCopies(self) -> None:
        class Holder:
            items = mirror("items")
            table = mirror("table")

            def __init__(self):
                self._items = ("a", ("b",))
                self._table = {"key": ["value"]}

        holder = Holder()
        self.assertEqual(holder.items, ["a", ["b"]])
        holder.table["key"].append("other")
        self.assertEqual(holder.table, {"key": ["value"]})
        with self.assertRaises(AttributeError):
            holder.items = []

    def testOrdinalWords(self) -> None:
        self.assertEqual(ordinal(1), "first")
        self.assertEqual(ordinal(10), "tenth")

    def testOrdinalSuffixes(self) -> None:
        self.assertEqual(
            [ordinal(number) for number in (11, 12, 13, 21, 22, 23, 24, 101, 111)],
            ["11th", "12th", "13th", "21st", "22nd", "23rd", "24th", "101st", "111th"],
        )

    def testOrdinalRejectsNonPositive(self) -> None:
        with self.assertRaises(ValueError):
            ordinal(0)

    def testPluralize(self) -> None:
        self.assertEqual(pluralize("fault", 1), "1 fault")
        self.assertEqual(pluralize("fault", 3), "3 faults")
        self.assertEqual(pluralize("match", 2), "2 matches")
        self.assertEqual(pluralize("entry", 0), "0 entries")
        self.assertEqual(pluralize("key", 2), "2 keys")


if __name__ == '__main__':
    unittest.main()
