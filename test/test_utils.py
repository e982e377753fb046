"""
Tests for the internal helpers.

This module verifies:
- The Unset sentinel: singleton identity, falsy semantics, repr, pickling,
  copying and finality.
- coalesce() preserving legitimate falsey values.
- rename() in both call forms.
- mirror() exposing frozen views of backing fields.
"""
import copy
import pickle
import unittest
from types import MappingProxyType
from unittest import TestCase

from argrove.utils import Unset, UnsetType, coalesce, mirror, rename


class UnsetTest(TestCase):
    """
    The Unset sentinel.
    """

    def testSingleton(self):
        self.assertIs(UnsetType(), Unset)
        self.assertIs(UnsetType(), UnsetType())

    def testFalsy(self):
        self.assertFalse(Unset)
        self.assertIsNot(Unset, None)
        self.assertNotEqual(Unset, None)

    def testRepr(self):
        self.assertEqual(repr(Unset), "Unset")

    def testCopyAndPickle(self):
        self.assertIs(copy.copy(Unset), Unset)
        self.assertIs(copy.deepcopy(Unset), Unset)
        self.assertIs(pickle.loads(pickle.dumps(Unset)), Unset)

    def testUnion(self):
        self.assertIsInstance(Unset, str | Unset)
        self.assertIsInstance("x", Unset | str)

    def testFinal(self):
        with self.assertRaises(TypeError):
            class _(UnsetType):
                pass


class CoalesceTest(TestCase):
    """
    coalesce() only replaces Unset.
    """

    def testUnsetUsesDefault(self):
        self.assertEqual(coalesce(Unset, "fallback"), "fallback")
        self.assertIsNone(coalesce(Unset))

    def testFalseyValuesArePreserved(self):
        for value in (None, 0, "", (), False):
            with self.subTest(value=value):
                self.assertIs(coalesce(value, "fallback"), value)


class RenameTest(TestCase):
    """
    rename() direct and decorator forms.
    """

    def testDirect(self):
        def function():
            pass

        self.assertIs(rename(function, "renamed"), function)
        self.assertEqual((function.__name__, function.__qualname__), ("renamed", "renamed"))

    def testDecorator(self):
        @rename("renamed")
        def function():
            pass

        self.assertEqual(function.__name__, "renamed")

    def testArgumentChecks(self):
        with self.assertRaises(TypeError):
            rename(42, "name")
        with self.assertRaises(TypeError):
            rename(len, 42)
        with self.assertRaises(TypeError):
            rename()
        with self.assertRaises(TypeError):
            rename(42)


class MirrorTest(TestCase):
    """
    mirror() read-only properties.
    """

    class Holder:
        items = mirror("items")
        table = mirror("table")
        name = mirror("name")

        def __init__(self):
            self._items = [1, [2, 3]]
            self._table = {"a": [1]}
            self._name = "holder"

    def testFrozenViews(self):
        holder = self.Holder()
        self.assertEqual(holder.items, (1, (2, 3)))
        self.assertIsInstance(holder.table, MappingProxyType)
        self.assertEqual(holder.table["a"], (1,))
        self.assertEqual(holder.name, "holder")

    def testReadOnly(self):
        with self.assertRaises(AttributeError):
            self.Holder().name = "other"

    def testPropertyName(self):
        self.assertEqual(self.Holder.items.fget.__name__, "items")

    def testArgumentCheck(self):
        with self.assertRaises(TypeError):
            mirror(42)


if __name__ == "__main__":
    unittest.main()
