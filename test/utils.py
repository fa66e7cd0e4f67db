"""
Tests for the utility helpers.

This module verifies:
- Unset sentinel guarantees (singleton identity, falsy, copy/pickle stability, finality).
- coalesce() only replaces Unset.
- rename() in both forms.
- mirror() read-only properties and mapping views.
- ordinal() words used by position-first fault messages.
"""
import copy
import pickle
import unittest
from types import MappingProxyType
from unittest import TestCase

from sextant.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` singleton.
    """

    def testSingleton(self) -> None:
        self.assertIs(Unset, UnsetType())

    def testFalsely(self) -> None:
        self.assertFalse(bool(Unset))

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testNotEqualToNoneOrFalse(self) -> None:
        self.assertNotEqual(Unset, None)
        self.assertNotEqual(Unset, False)  # noqa: E712

    def testUnionWithTypes(self) -> None:
        """
        Unset participates in isinstance unions on either side.
        """
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", Unset | str)
        self.assertNotIsInstance(1, str | Unset)

    def testCopyDeepcopyPreserveSingleton(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testPickleRoundTrip(self) -> None:
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            type("UnsetType", (UnsetType,), {})


class CoalesceTest(TestCase):

    def testReplacesUnset(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testPreservesFalseyValues(self) -> None:
        for value in (None, 0, "", False):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "fallback"), value)


class RenameTest(TestCase):

    def testFunctionForm(self) -> None:
        def f(): ...
        self.assertIs(rename(f, "work"), f)
        self.assertEqual((f.__name__, f.__qualname__), ("work", "work"))

    def testDecoratorForm(self) -> None:
        @rename("work")
        def f(): ...
        self.assertEqual(f.__name__, "work")

    def testRejectsBadArguments(self) -> None:
        with self.assertRaises(TypeError):
            rename(1, "work")
        with self.assertRaises(TypeError):
            rename(1)
        with self.assertRaises(TypeError):
            rename()


class MirrorTest(TestCase):

    def setUp(self) -> None:
        class Holder:
            items = mirror("items")
            label = mirror("label")

            def __init__(self):
                self._items = {"a": 1}
                self._label = "holder"

        self.holder = Holder()

    def testReadsBackingField(self) -> None:
        self.assertEqual(self.holder.label, "holder")

    def testMappingIsReadOnlyView(self) -> None:
        items = self.holder.items
        self.assertIsInstance(items, MappingProxyType)
        with self.assertRaises(TypeError):
            items["b"] = 2

    def testPropertyHasNoSetter(self) -> None:
        with self.assertRaises(AttributeError):
            self.holder.label = "other"

    def testRejectsNonString(self) -> None:
        with self.assertRaises(TypeError):
            mirror(1)


class OrdinalTest(TestCase):

    def testWords(self) -> None:
        expected = {
            1: "first",
            2: "second",
            3: "third",
            11: "eleventh",
            12: "twelfth",
            20: "twentieth",
            21: "twenty-first",
            42: "forty-second",
            99: "ninety-ninth",
        }
        for number, word in expected.items():
            with self.subTest(number=number):
                self.assertEqual(ordinal(number), word)

    def testNumericSuffixes(self) -> None:
        for number, word in {100: "100th", 101: "101st", 112: "112th", 123: "123rd"}.items():
            with self.subTest(number=number):
                self.assertEqual(ordinal(number), word)

    def testRejectsBadArguments(self) -> None:
        with self.assertRaises(TypeError):
            ordinal("1")
        with self.assertRaises(TypeError):
            ordinal(True)
        with self.assertRaises(ValueError):
            ordinal(-1)


if __name__ == '__main__':
    unittest.main()
