# -*- coding: utf-8 -*-
"""
End-to-end tests for extraction runs on a temporary source tree.
"""
from __future__ import annotations

import pathlib
import tempfile
import unittest

from xgettext_app.catalog.po import parse
from xgettext_app.errors import CatalogWriteError, TranslationDriftError
from xgettext_app.extract.engine import DEFAULT_NAMESPACE, MessageEntry
from xgettext_app.task import extract_task, handle_translations
from xgettext_app.utils.files import atomic_write
from xgettext_app.utils.task_config import build_task_config


class TaskTestCase(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = pathlib.Path(self._tmp.name)
        self.addCleanup(self._tmp.cleanup)

    def put(self, rel: str, text: str) -> pathlib.Path:
        p = self.root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(text, encoding="utf-8")
        return p

    def read(self, rel: str) -> str:
        return (self.root / rel).read_text(encoding="utf-8")

    def task(self, files, languages=("fr",), **options):
        options.setdefault("namespace_separator", "::")
        options.setdefault("pot_path", "i18n")
        return build_task_config(
            "test",
            {"options": options, "files": files, "languages": list(languages)},
            self.root,
        )


class TestExtractTask(TaskTestCase):
    def test_same_message_in_two_files(self):
        self.put("src/one.js", 'tr("Save");')
        self.put("src/two.js", 'tr("Save", "Saves");')
        result = extract_task(self.task({"javascript": ["src/**/*.js"]}))
        self.assertEqual(
            result.translations[DEFAULT_NAMESPACE]["Save"],
            MessageEntry(singular="Save", plural="Saves", message=""),
        )
        self.assertEqual(result.locations[DEFAULT_NAMESPACE]["Save"], ["src/one.js", "src/two.js"])

    def test_threads_give_same_result(self):
        for i in range(6):
            self.put(f"src/f{i}.js", f'tr("Message {i}"); tr("Shared")')
        task = self.task({"javascript": ["src/*.js"]})
        serial = extract_task(task)
        parallel = extract_task(task, threads=4)
        self.assertEqual(serial.translations, parallel.translations)
        self.assertEqual(serial.locations, parallel.locations)

    def test_ignore_globs(self):
        self.put("src/app.js", 'tr("Mine")')
        self.put("src/node_modules/lib/x.js", 'tr("Vendor")')
        result = extract_task(self.task({"javascript": ["src/**/*.js"]}))
        self.assertEqual(sorted(result.translations[DEFAULT_NAMESPACE]), ["Mine"])

    def test_unknown_format_skipped(self):
        self.put("src/app.js", 'tr("Mine")')
        task = self.task({"coffee": ["src/*.coffee"], "javascript": ["src/*.js"]})
        with self.assertLogs("xgettext_app", level="WARNING"):
            result = extract_task(task)
        self.assertEqual(result.message_count, 1)

    def test_several_formats_merge(self):
        self.put("src/app.js", 'tr("shop::Cart")')
        self.put("views/cart.handlebars", '{{tr "shop::Cart"}} {{tr "Checkout"}}')
        result = extract_task(self.task({"javascript": ["src/*.js"], "handlebars": ["views/*.handlebars"]}))
        self.assertEqual(result.locations["shop"]["Cart"], ["src/app.js", "views/cart.handlebars"])
        self.assertIn("Checkout", result.translations[DEFAULT_NAMESPACE])


class TestReportMode(TaskTestCase):
    def test_drift_reported(self):
        self.put("file.tpl", '{{tr "New Label"}} {{tr "Old"}}')
        self.put("i18n/messages.pot", 'msgid ""\nmsgstr ""\n\nmsgid "Old"\nmsgstr ""\n')
        with self.assertRaises(TranslationDriftError) as cm:
            handle_translations(self.task({"handlebars": ["file.tpl"]}))
        self.assertIn('"New Label" -- file.tpl', cm.exception.report)
        self.assertNotIn('"Old"', cm.exception.report)
        self.assertEqual(cm.exception.namespaces, ["messages"])

    def test_missing_pot_reports_everything(self):
        self.put("src/a.js", 'tr("A"); tr("admin::B")')
        with self.assertRaises(TranslationDriftError) as cm:
            handle_translations(self.task({"javascript": ["src/*.js"]}))
        self.assertEqual(cm.exception.namespaces, ["admin", "messages"])

    def test_report_never_writes(self):
        self.put("src/a.js", 'tr("A")')
        calls = []
        with self.assertRaises(TranslationDriftError):
            handle_translations(self.task({"javascript": ["src/*.js"]}), write=lambda p, t: calls.append(p))
        self.assertEqual(calls, [])
        self.assertFalse((self.root / "i18n").exists())


class TestFixMode(TaskTestCase):
    def test_writes_pot_and_po(self):
        self.put("src/a.js", 'tr("World"); tr("Hello"); tr("File", "Files", n)')
        self.put("i18n/messages-fr.po", 'msgid ""\nmsgstr ""\n\nmsgid "Hello"\nmsgstr "Bonjour"\n\nmsgid "Gone"\nmsgstr "Parti"\n')
        task = self.task({"javascript": ["src/*.js"]})

        result = handle_translations(task, fix=True)

        pot = parse(self.read("i18n/messages.pot"))
        self.assertEqual(pot.ids, ["", "File", "Hello", "World"])
        self.assertEqual(pot.plurals, [None, "Files", None, None])
        po = parse(self.read("i18n/messages-fr.po"))
        self.assertEqual(po.ids, ["", "File", "Hello", "World"])
        self.assertEqual(po.strings[1:], ["File", "Bonjour", "World"])
        self.assertEqual((result.added, result.removed), (2, 1))
        self.assertEqual(len(result.written), 2)

        # catalogs are current now
        handle_translations(task)

    def test_translator_edits_survive_fix(self):
        """Plural forms, flags and references of a PO entry are written back unchanged."""
        self.put("src/a.js", 'tr("File", "Files", n); tr("New")')
        self.put(
            "i18n/messages-fr.po",
            'msgid ""\nmsgstr ""\n\n'
            '#, fuzzy\n#: src/a.js\nmsgid "File"\nmsgid_plural "Files"\nmsgstr[0] "Fichier"\nmsgstr[1] "Fichiers"\n',
        )
        result = handle_translations(self.task({"javascript": ["src/*.js"]}), fix=True)

        self.assertEqual((result.added, result.removed), (1, 0))
        text = self.read("i18n/messages-fr.po")
        self.assertIn(
            '#, fuzzy\n#: src/a.js\nmsgid "File"\nmsgid_plural "Files"\nmsgstr[0] "Fichier"\nmsgstr[1] "Fichiers"\n',
            text,
        )
        self.assertIn('msgid "New"\nmsgstr "New"\n', text)

    def test_unchanged_plural_catalog_not_rewritten(self):
        self.put("src/a.js", 'tr("File", "Files", n)')
        task = self.task({"javascript": ["src/*.js"]})
        handle_translations(task, fix=True)
        po = self.root / "i18n" / "messages-fr.po"
        po.write_text(po.read_text(encoding="utf-8").replace('msgstr[0] "File"', 'msgstr[0] "Fichier"\nmsgstr[1] "Fichiers"'), encoding="utf-8")

        second = handle_translations(task, fix=True)
        self.assertEqual(second.written, [])
        self.assertIn('msgstr[1] "Fichiers"', po.read_text(encoding="utf-8"))

    def test_second_run_writes_nothing(self):
        self.put("src/a.js", 'tr("Hello")')
        task = self.task({"javascript": ["src/*.js"]}, languages=("fr", "de"))
        first = handle_translations(task, fix=True)
        self.assertEqual(len(first.written), 3)
        second = handle_translations(task, fix=True)
        self.assertEqual(second.written, [])

    def test_failing_namespace_not_written(self):
        self.put("src/a.js", 'tr("Hello"); tr("admin::Ban")')
        # msgid without msgstr: ids and strings differ in length
        self.put("i18n/admin-fr.po", 'msgid ""\nmsgstr ""\n\nmsgid "Ban"\n')
        written = []

        def record(path, text):
            written.append(path.name)
            atomic_write(path, text)

        with self.assertRaises(CatalogWriteError) as cm:
            handle_translations(self.task({"javascript": ["src/*.js"]}), fix=True, write=record)

        self.assertEqual(cm.exception.namespaces, ["admin"])
        self.assertEqual(sorted(written), ["messages-fr.po", "messages.pot"])
        self.assertFalse((self.root / "i18n/admin.pot").exists())
        self.assertEqual(self.read("i18n/admin-fr.po"), 'msgid ""\nmsgstr ""\n\nmsgid "Ban"\n')

    def test_dry_run_collects_diffs(self):
        self.put("src/a.js", 'tr("Hello")')
        calls = []
        result = handle_translations(
            self.task({"javascript": ["src/*.js"]}), fix=True, dry_run=True, write=lambda p, t: calls.append(p)
        )
        self.assertEqual(calls, [])
        self.assertEqual(len(result.diffs), 2)
        self.assertTrue(any('+msgid "Hello"' in d for d in result.diffs))
        self.assertFalse((self.root / "i18n").exists())

    def test_separate_po_path(self):
        self.put("src/a.js", 'tr("Hello")')
        task = build_task_config(
            "test",
            {"options": {"pot_path": "pot"}, "po_path": "po", "languages": ["fr"], "files": {"javascript": ["src/*.js"]}},
            self.root,
        )
        handle_translations(task, fix=True)
        self.assertTrue((self.root / "pot/messages.pot").exists())
        self.assertTrue((self.root / "po/messages-fr.po").exists())


if __name__ == "__main__":
    unittest.main(verbosity=2)
