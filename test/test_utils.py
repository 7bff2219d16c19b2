"""
Tests for the internal helpers.

This module verifies:
- Unset sentinel guarantees (singleton, falsy, stable repr, copy/pickle identity, finality).
- coalesce() only replaces Unset.
- tokenize() splits on the first single space.
- rename() and mirror() metadata and copying behavior.
"""
import copy
import pickle
import unittest
from unittest import TestCase

from parlance.utils import *


class UnsetTest(TestCase):
    """Behavioral tests for the Unset sentinel."""

    def testSingleton(self) -> None:
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsy(self) -> None:
        self.assertFalse(bool(Unset))

    def testRepr(self) -> None:
        self.assertEqual(repr(Unset), "Unset")

    def testNotEqualToNone(self) -> None:
        self.assertNotEqual(Unset, None)
        self.assertIsNot(Unset, None)

    def testCopyAndPicklePreserveSingleton(self) -> None:
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testUnionWithTypes(self) -> None:
        self.assertIsInstance("text", str | Unset)
        self.assertIsInstance(Unset, str | Unset)
        self.assertNotIsInstance(3, str | Unset)

    def testFinalClass(self) -> None:
        with self.assertRaises(TypeError):
            class Custom(UnsetType):
                pass


class HelperTest(TestCase):
    """Behavioral tests for coalesce, tokenize, rename and mirror."""

    def testCoalesceReplacesOnlyUnset(self) -> None:
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))
        self.assertIsNone(coalesce(None, "fallback"))
        self.assertEqual(coalesce(0, 5), 0)

    def testTokenizeSplitsOnFirstSpace(self) -> None:
        self.assertEqual(tokenize("hello 5 rest"), ("hello", "5 rest"))
        self.assertEqual(tokenize("single"), ("single", ""))
        self.assertEqual(tokenize(""), ("", ""))
        self.assertEqual(tokenize("a  b"), ("a", " b"))

    def testTokenizeRejectsNonStrings(self) -> None:
        with self.assertRaises(TypeError):
            tokenize(42)

    def testRenameFunctionForm(self) -> None:
        def original():
            pass

        self.assertIs(rename(original, "renamed"), original)
        self.assertEqual(original.__name__, "renamed")
        self.assertEqual(original.__qualname__, "renamed")

    def testRenameDecoratorForm(self) -> None:
        @rename("renamed")
        def original():
            pass

        self.assertEqual(original.__name__, "renamed")

    def testRenameWrongArity(self) -> None:
        with self.assertRaises(TypeError):
            rename()

    def testMirrorCopiesContainers(self) -> None:
        class Holder:
            items = mirror("items")

            def __init__(self):
                self._items = [1, 2]

        holder = Holder()
        items = holder.items
        items.append(3)
        self.assertEqual(holder.items, [1, 2])
        with self.assertRaises(AttributeError):
            holder.items = []


if __name__ == '__main__':
    unittest.main()
