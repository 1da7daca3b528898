# -*- coding: utf-8 -*-
"""
Test suite for POT -> PO synchronization.
"""
from __future__ import annotations

import unittest

from xgettext_app.catalog.po import POT_HEADER, CatalogDocument
from xgettext_app.catalog.sync import synchronize, synchronize_with_stats
from xgettext_app.errors import CatalogSyncError


def pot(*ids, plurals=None):
    return CatalogDocument(
        ids=[""] + list(ids),
        strings=[POT_HEADER] + [""] * len(ids),
        plurals=[None] + list(plurals or [None] * len(ids)),
    )


class TestSynchronize(unittest.TestCase):
    """Test insertions, removals and the count check."""

    def test_new_id_inserted_with_placeholder(self):
        new = CatalogDocument(ids=["", "Hello", "World"])
        existing = CatalogDocument(ids=["", "Hello"], strings=["", "Bonjour"])
        out = synchronize(new, existing)
        self.assertEqual(out.ids, ["", "Hello", "World"])
        self.assertEqual(out.strings, ["", "Bonjour", "World"])

    def test_stale_id_removed(self):
        new = CatalogDocument(ids=["", "Hello"])
        existing = CatalogDocument(ids=["", "Hello", "Goodbye"], strings=["", "Bonjour", "Au revoir"])
        out = synchronize(new, existing)
        self.assertEqual(out.ids, ["", "Hello"])
        self.assertEqual(out.strings, ["", "Bonjour"])

    def test_inputs_not_mutated(self):
        new = pot("A", "B")
        existing = CatalogDocument(ids=["", "B", "C"], strings=["", "b", "c"])
        synchronize(new, existing)
        self.assertEqual(existing.ids, ["", "B", "C"])
        self.assertEqual(existing.strings, ["", "b", "c"])
        self.assertEqual(new.ids, ["", "A", "B"])

    def test_sorted_insertion_among_survivors(self):
        existing = CatalogDocument(ids=["", "b", "d"], strings=["", "B", "D"])
        out = synchronize(pot("a", "c", "d", "e"), existing)
        self.assertEqual(out.ids, ["", "a", "c", "d", "e"])
        self.assertEqual(out.strings, ["", "a", "c", "D", "e"])
        self.assertEqual(out.message_ids, sorted(out.message_ids))

    def test_header_never_matched_or_removed(self):
        existing = CatalogDocument(ids=["", "A"], strings=["Language: fr\\n", "a"])
        out = synchronize(pot("A"), existing)
        self.assertEqual(out.ids[0], "")
        self.assertEqual(out.strings[0], "Language: fr\\n")

    def test_missing_catalog_seeded_from_pot(self):
        out = synchronize(pot("B", "A"), CatalogDocument())
        self.assertEqual(out.ids[0], "")
        self.assertEqual(out.strings[0], POT_HEADER)
        self.assertEqual(sorted(out.message_ids), ["A", "B"])

    def test_plural_carried_to_inserted_entry(self):
        out = synchronize(pot("File", plurals=["Files"]), CatalogDocument(ids=[""], strings=[""]))
        self.assertEqual(out.plurals, [None, "Files"])

    def test_count_conserved(self):
        existing = CatalogDocument(ids=["", "x", "y", "z"], strings=["", "X", "Y", "Z"])
        new = pot("a", "y", "q", "w")
        out = synchronize(new, existing)
        self.assertEqual(len(out.ids) - 1, len(new.ids) - 1)
        self.assertEqual(len(out.ids), len(out.strings))
        self.assertEqual(set(out.message_ids), set(new.message_ids))

    def test_idempotent(self):
        existing = CatalogDocument(ids=["", "Hello"], strings=["", "Bonjour"])
        new = pot("Hello", "World")
        once = synchronize(new, existing)
        twice = synchronize(new, once)
        self.assertEqual(twice.ids, once.ids)
        self.assertEqual(twice.strings, once.strings)

    def test_stats(self):
        existing = CatalogDocument(ids=["", "Old", "Keep"], strings=["", "o", "k"])
        _, added, removed = synchronize_with_stats(pot("Keep", "New"), existing, "messages")
        self.assertEqual((added, removed), (1, 1))


class TestSynchronizeFailures(unittest.TestCase):
    """A catalog that cannot be reconciled raises instead of returning a document."""

    def test_misaligned_existing_catalog(self):
        existing = CatalogDocument(ids=["", "A", "B"], strings=["", "a"])
        with self.assertRaises(CatalogSyncError) as cm:
            synchronize(pot("A", "B"), existing, namespace="admin")
        self.assertEqual(cm.exception.namespace, "admin")
        self.assertIn("failed for this namespace: admin", str(cm.exception))

    def test_count_mismatch_logged_and_raised(self):
        # duplicate ids in the extracted catalog collapse to one PO entry
        new = CatalogDocument(ids=["", "A", "A"])
        with self.assertLogs("xgettext_app", level="ERROR"):
            with self.assertRaises(CatalogSyncError):
                synchronize(new, CatalogDocument(ids=[""], strings=[""]), namespace="messages")


if __name__ == "__main__":
    unittest.main(verbosity=2)
