"""
Tests for the internal helpers.

This module verifies semantic guarantees of the utilities module:
- The `Unset` sentinel: singleton identity, falsy semantics, finality.
- coalesce() only replaces `Unset`.
- rename() and mirror() behave as decorators/property factories.
- ordinal() and negative() helpers used by the parser.
"""
import copy
import unittest
from unittest import TestCase

from commandant.utils import *


class UnsetTest(TestCase):
    """
    Test suite for the `Unset` singleton.
    """

    def testSingleton(self) -> None:
        """
        The constructor returns the exported sentinel on every call.
        """
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsely(self) -> None:
        """
        The sentinel is falsy but distinct from None and False.
        """
        self.assertFalse(bool(Unset))
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, False)  # noqa: E712

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testUnionWithTypes(self) -> None:
        """
        `str | Unset` can be used in isinstance checks.
        """
        self.assertTrue(isinstance("x", str | Unset))
        self.assertTrue(isinstance(Unset, str | Unset))
        self.assertFalse(isinstance(1, str | Unset))

    def testCopyPreservesSingleton(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)

    def testFinalClass(self) -> None:
        """
        The class is final: attempts to subclass must fail with TypeError.
        """
        with self.assertRaises(TypeError):
            type("UnsetType", (UnsetType,), {})


class HelpersTest(TestCase):
    def testCoalesce(self) -> None:
        self.assertEqual(coalesce("name", "fallback"), "name")
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 1), 0)
        self.assertIsNone(coalesce(Unset))

    def testRename(self) -> None:
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")
        self.assertEqual(original.__qualname__, "renamed")
        with self.assertRaises(TypeError):
            rename(5, "x")
        with self.assertRaises(TypeError):
            rename(lambda: None, 5)
        with self.assertRaises(TypeError):
            rename()

    def testMirrorCopiesContainers(self) -> None:
        class Box:
            items = mirror("items")

            def __init__(self):
                self._items = ["a", ("b", ["c"])]

        box = Box()
        box.items.append("d")
        self.assertEqual(box.items, ["a", ("b", ["c"])])
        with self.assertRaises(AttributeError):
            box.items = []

    def testOrdinal(self) -> None:
        """
        Zero-based indices read as English positions.
        """
        self.assertEqual(ordinal(0), "first")
        self.assertEqual(ordinal(2), "third")
        self.assertEqual(ordinal(9), "tenth")
        self.assertEqual(ordinal(10), "11th")
        self.assertEqual(ordinal(11), "12th")
        self.assertEqual(ordinal(20), "21st")
        self.assertEqual(ordinal(21), "22nd")
        self.assertEqual(ordinal(22), "23rd")
        with self.assertRaises(TypeError):
            ordinal("1")

    def testNegative(self) -> None:
        for token in ("-5", "-0.25", "-.5", "-1e3", "-2.5E-4"):
            self.assertTrue(negative(token), token)
        for token in ("-v", "--5", "-", "5", "-5a"):
            self.assertFalse(negative(token), token)


if __name__ == '__main__':
    unittest.main()
