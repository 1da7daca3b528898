#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
xgettext.py: extract translatable messages and keep gettext catalogs in sync.

Key points
- Reads source groups per format (angular, handlebars, vue, json, javascript)
  and extracts messages for the configured trigger names.
- Report mode (default) never writes: it fails when an extracted message is
  missing from the committed <namespace>.pot and lists the contributing files.
- Fix mode (--fix) writes <namespace>.pot and synchronizes every
  <namespace>-<language>.po against it. Existing translations are kept, new
  ids are inserted in sorted position, stale ids are removed.
- A namespace whose catalogs do not reconcile is never written.

Usage Examples
--------------

1. Check catalogs with a config file (xgettext.json in the working directory):
   xgettext-sync

2. Pick one task of a multi-task config and rewrite the catalogs:
   xgettext-sync --config xgettext.json --task xgettextKingsschool --fix

3. Preview catalog changes without writing:
   xgettext-sync --fix --dry-run --diff

4. Without a config file:
   xgettext-sync --target ./assets \\
     --format "javascript=**/*.js" --format "handlebars=**/*.handlebars" \\
     --function-name tr --namespace-separator "::" --pot-path translations --fix
"""

from __future__ import annotations

import argparse
import dataclasses
import os
import pathlib
import sys
from typing import Any, Dict, List, Optional, Tuple

from xgettext_app import hooks
from xgettext_app.errors import XgettextConfigError, XgettextError
from xgettext_app.task import handle_translations
from xgettext_app.utils.logging import get_xgettext_logger
from xgettext_app.utils.task_config import TaskConfig, build_task_config, load_config, resolve_normalizer


def _split_csv(values: Optional[List[str]]) -> List[str]:
    out: List[str] = []
    for v in values or []:
        out.extend(a.strip() for a in v.split(",") if a.strip())
    return out


def _parse_format_args(values: List[str]) -> Dict[str, List[str]]:
    files: Dict[str, List[str]] = {}
    for item in values:
        fmt, sep, pattern = item.partition("=")
        if not sep or not fmt.strip() or not pattern.strip():
            raise XgettextConfigError(f"--format expects FORMAT=GLOB, got {item!r}")
        files.setdefault(fmt.strip(), []).append(pattern.strip())
    return files


def _option_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    names = _split_csv(args.function_name)
    if names:
        overrides["function_name"] = names
    if args.namespace_separator:
        overrides["namespace_separator"] = args.namespace_separator
    if args.process_message:
        overrides["process_message"] = resolve_normalizer(args.process_message)
    if args.pot_path:
        overrides["pot_path"] = str(pathlib.Path(args.pot_path).resolve())
    return overrides


def resolve_task(args: argparse.Namespace) -> Tuple[TaskConfig, Optional[str], Optional[str]]:
    """Return ``(task, log_level, log_file)`` from the config file and/or CLI flags."""
    config_path = args.config
    if config_path is None and not args.format and os.path.exists(hooks.default_config_file):
        config_path = hooks.default_config_file

    if config_path is not None:
        cfg = load_config(config_path)
        task = cfg.task(args.task)
        log_level, log_file = cfg.log_level, cfg.log_file
    else:
        if not args.format:
            raise XgettextConfigError(
                f"No {hooks.default_config_file} found. Pass --config PATH or at least one --format FORMAT=GLOB"
            )
        base = pathlib.Path(args.target or ".").resolve()
        task = build_task_config("cli", {"files": _parse_format_args(args.format)}, base)
        log_level, log_file = None, None

    overrides = _option_overrides(args)
    if overrides:
        task.options = dataclasses.replace(task.options, **overrides)
    if args.po_path:
        task.po_path = str(pathlib.Path(args.po_path).resolve())
    languages = _split_csv(args.languages)
    if languages:
        task.languages = languages
    if args.ignore:
        task.ignore = list(task.ignore) + list(args.ignore)
    return task, log_level, log_file


def run(args: argparse.Namespace) -> int:
    try:
        task, log_level, log_file = resolve_task(args)
    except XgettextConfigError as e:
        get_xgettext_logger(level=args.log_level).error("%s", e)
        return 2

    logger = get_xgettext_logger(level=args.log_level, config_level=log_level, log_file=log_file)
    mode = "fix" if args.fix else "report"
    logger.debug("Task %s (%s): %d file group(s)", task.name, mode, len(task.files))

    try:
        result = handle_translations(
            task,
            fix=args.fix,
            dry_run=args.dry_run,
            threads=max(1, args.threads),
        )
    except XgettextConfigError as e:
        logger.error("%s", e)
        return 2
    except XgettextError as e:
        logger.error("%s", e)
        return 1

    if args.diff and result.diffs:
        sys.stdout.write("\n".join(d for d in result.diffs if d))

    total = result.extraction.message_count
    if not args.fix:
        print(f"\nDone. {total} message(s) extracted; catalogs are up to date.")
    elif args.dry_run:
        print(f"\nDone. Catalogs that would change: {len(result.diffs)}")
    else:
        print(f"\nDone. Files written: {len(result.written)} (+{result.added} -{result.removed})")
    return 0


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="xgettext-sync", description=hooks.app_description)
    ap.add_argument("--config", help=f"JSON task config (default: ./{hooks.default_config_file} when present)")
    ap.add_argument("--task", help="Task name inside the config file (required when it defines several)")
    ap.add_argument("--fix", action="store_true", help="Write POT files and synchronize PO files instead of reporting drift")
    ap.add_argument("--dry-run", action="store_true", help="With --fix: compute catalogs but do not write them")
    ap.add_argument("--diff", action="store_true", help="Print unified diff for catalog changes (with --dry-run)")
    ap.add_argument("--threads", type=int, default=1, help="Parallel file workers for extraction")
    ap.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR (env XGETTEXT_LOG_LEVEL also applies)")

    # Config-less invocation and overrides
    ap.add_argument("--target", help="Base directory for --format globs (default: current directory)")
    ap.add_argument("--format", action="append", default=[], metavar="FORMAT=GLOB", help=f"Source group, e.g. javascript=src/**/*.js; formats: {', '.join(hooks.extractor_types)} (repeatable)")
    ap.add_argument("--function-name", action="append", help="Trigger name(s), comma-separated (repeatable)")
    ap.add_argument("--namespace-separator", help="Token between namespace and message (default: .)")
    ap.add_argument("--process-message", help="Message normalizer: identity, strip or collapse_whitespace")
    ap.add_argument("--pot-path", help="Directory of <namespace>.pot files")
    ap.add_argument("--po-path", help="Directory of <namespace>-<language>.po files (default: --pot-path)")
    ap.add_argument("--languages", action="append", help="Languages to synchronize, comma-separated (default: en)")
    ap.add_argument("--ignore", action="append", default=[], help="Glob patterns to exclude (repeatable)")
    return ap


def main():
    args = build_arg_parser().parse_args()
    sys.exit(run(args))


if __name__ == "__main__":
    main()
