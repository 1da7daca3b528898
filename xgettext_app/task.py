# -*- coding: utf-8 -*-
"""
One extraction run for a configured task.

- Extraction: every file group is handed to the extractor registered for its
  format; results of all files and groups are merged into one translation
  set and one location index.
- Report mode (default): each namespace is compared with its committed POT.
  Drift in any namespace fails the run after all namespaces were checked.
- Fix mode: POT files are rendered and every ``<namespace>-<language>.po`` is
  synchronized against them. A namespace whose catalogs do not reconcile is
  not written at all; the other namespaces are.
"""
from __future__ import annotations

import concurrent.futures as cf
import dataclasses
import pathlib
from typing import Callable, Dict, List, Optional

from xgettext_app.catalog.po import CatalogDocument, parse, serialize
from xgettext_app.catalog.sync import synchronize_with_stats
from xgettext_app.catalog.writer import (
    build_pot_document,
    calculate_drift,
    existing_message_ids,
)
from xgettext_app.errors import (
    CatalogSyncError,
    CatalogWriteError,
    TranslationDriftError,
    XgettextConfigError,
)
from xgettext_app.extract.adapters import Extractor, get_extractor
from xgettext_app.extract.engine import ExtractionResult, merge_results
from xgettext_app.utils.files import (
    atomic_write,
    display_name,
    expand_patterns,
    read_text_if_exists,
    unified_diff,
)
from xgettext_app.utils.logging import compact_json, xgettext_logger as LOG
from xgettext_app.utils.task_config import TaskConfig, TaskOptions

Writer = Callable[[pathlib.Path, str], None]
Reader = Callable[[pathlib.Path], Optional[str]]


@dataclasses.dataclass
class RunResult:
    fix: bool
    extraction: ExtractionResult
    written: List[pathlib.Path] = dataclasses.field(default_factory=list)
    diffs: List[str] = dataclasses.field(default_factory=list)
    added: int = 0
    removed: int = 0


# ── Extraction ───────────────────────────────────────────────────────────────

def extract_file(path: pathlib.Path, extractor: Extractor, options: TaskOptions, file_name: str) -> ExtractionResult:
    try:
        content = path.read_text(encoding="utf-8")
    except (UnicodeDecodeError, OSError) as e:
        raise XgettextConfigError(f"Failed to read {path}: {e}") from e
    result = extractor(content, options, file_name)
    LOG.debug("%s: %d message(s)", file_name, result.message_count)
    return result


def extract_task(task: TaskConfig, threads: int = 1) -> ExtractionResult:
    """Run every file group of ``task`` through its extractor and merge the results."""
    base = pathlib.Path(task.base_dir)
    total = ExtractionResult()

    for group in task.files:
        extractor = get_extractor(group.format)
        if extractor is None:
            continue
        files = expand_patterns(base, group.patterns, task.ignore)
        if not files:
            LOG.info("No %s sources matched %s", group.format, ", ".join(group.patterns))
            continue

        def _work(p: pathlib.Path, _extractor: Extractor = extractor) -> ExtractionResult:
            return extract_file(p, _extractor, task.options, display_name(base, p))

        if threads > 1:
            with cf.ThreadPoolExecutor(max_workers=threads) as ex:
                results = list(ex.map(_work, files))
        else:
            results = [_work(p) for p in files]

        group_result = merge_results(results)
        LOG.info("%s: %d file(s), %d message(s)", group.format, len(files), group_result.message_count)
        total = total.merge(group_result)

    LOG.debug("Messages per namespace: %s", compact_json({ns: len(m) for ns, m in total.translations.items()}))
    return total


# ── Report mode ──────────────────────────────────────────────────────────────

def report_drift(task: TaskConfig, extraction: ExtractionResult, read: Reader = read_text_if_exists) -> None:
    """Raise :class:`TranslationDriftError` listing every extracted id missing from its committed POT."""
    errors: List[str] = []
    drifted: List[str] = []
    for name in sorted(extraction.translations):
        existing = existing_message_ids(read(task.pot_file(name)))
        diff = calculate_drift(existing, extraction.locations.get(name, {}))
        if diff:
            errors.append(diff)
            drifted.append(name)

    if errors:
        LOG.error("Catalogs out of date for: %s", ", ".join(drifted))
        raise TranslationDriftError("\n".join(errors), drifted)


# ── Fix mode ─────────────────────────────────────────────────────────────────

def plan_namespace(
    task: TaskConfig, name: str, extraction: ExtractionResult, read: Reader = read_text_if_exists
):
    """Return ``({path: text}, added, removed)`` for one namespace without touching disk."""
    pot = build_pot_document(extraction.translations[name])
    outputs: Dict[pathlib.Path, str] = {task.pot_file(name): serialize(pot)}
    added = removed = 0
    for language in task.languages:
        po_path = task.po_file(name, language)
        text = read(po_path)
        existing = parse(text) if text is not None else CatalogDocument()
        synced, a, r = synchronize_with_stats(pot, existing, namespace=name)
        LOG.info("%s: +%d -%d", po_path.name, a, r)
        outputs[po_path] = serialize(synced)
        added += a
        removed += r
    return outputs, added, removed


def apply_fix(
    task: TaskConfig,
    extraction: ExtractionResult,
    result: RunResult,
    dry_run: bool = False,
    read: Reader = read_text_if_exists,
    write: Writer = atomic_write,
) -> None:
    failures: Dict[str, CatalogSyncError] = {}
    for name in sorted(extraction.translations):
        try:
            outputs, added, removed = plan_namespace(task, name, extraction, read)
        except CatalogSyncError as e:
            LOG.error("%s", e)
            failures[name] = e
            continue

        result.added += added
        result.removed += removed
        for path, text in outputs.items():
            before = read(path)
            if before == text:
                continue
            if dry_run:
                result.diffs.append(unified_diff(before or "", text, path))
                continue
            write(path, text)
            result.written.append(path)

    if failures:
        raise CatalogWriteError(failures)


def handle_translations(
    task: TaskConfig,
    fix: bool = False,
    dry_run: bool = False,
    threads: int = 1,
    read: Reader = read_text_if_exists,
    write: Writer = atomic_write,
) -> RunResult:
    extraction = extract_task(task, threads=threads)
    result = RunResult(fix=fix, extraction=extraction)
    if fix:
        apply_fix(task, extraction, result, dry_run=dry_run, read=read, write=write)
    else:
        report_drift(task, extraction, read=read)
    return result
