"""Filesystem ops: atomic writes, ignore globs, source discovery and diffs."""
from __future__ import annotations

import difflib
import fnmatch
import glob
import os
import pathlib
import tempfile
from typing import Iterable, List, Optional

from xgettext_app.utils.logging import xgettext_logger as logger

NEWLINE = "\n"


def is_ignored(base: pathlib.Path, path: pathlib.Path, ignore_globs: List[str]) -> bool:
    try:
        rel = str(path.resolve().relative_to(base.resolve())).replace("\\", "/")
    except ValueError:
        rel = str(path).replace("\\", "/")
    return any(fnmatch.fnmatch(rel, pat) or fnmatch.fnmatch("./" + rel, pat) for pat in ignore_globs)


def expand_patterns(
    base: pathlib.Path, patterns: Iterable[str], ignore_globs: Optional[List[str]] = None
) -> List[pathlib.Path]:
    """Expand glob patterns relative to ``base`` into a sorted list of files."""
    ignore_globs = ignore_globs or []
    found = set()
    for pat in patterns:
        for name in glob.glob(str(base / pat), recursive=True):
            p = pathlib.Path(name)
            if p.is_file() and not is_ignored(base, p, ignore_globs):
                found.add(p)
    return sorted(found)


def display_name(base: pathlib.Path, path: pathlib.Path) -> str:
    """Posix path of ``path`` relative to ``base`` when possible."""
    try:
        return path.resolve().relative_to(base.resolve()).as_posix()
    except ValueError:
        return path.as_posix()


def read_text_if_exists(path: pathlib.Path) -> Optional[str]:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None


def atomic_write(path: pathlib.Path, data: str) -> None:
    """Atomically write ``data`` to ``path``.

    This function writes to a temporary file in the same directory, fsyncs,
    then replaces the target. If the target exists, its permissions are
    preserved when possible.
    """
    path = pathlib.Path(path)
    tmp_dir = path.parent
    tmp_dir.mkdir(parents=True, exist_ok=True)
    orig_mode = None
    try:
        st = path.stat()
    except OSError:
        st = None
    if st is not None:
        orig_mode = st.st_mode & 0o777

    tmp_name = None
    try:
        with tempfile.NamedTemporaryFile("w", delete=False, dir=tmp_dir, encoding="utf-8", newline=NEWLINE) as tf:
            tmp_name = tf.name
            tf.write(data)
            tf.flush()
            os.fsync(tf.fileno())
        os.replace(tmp_name, str(path))
        if orig_mode is not None:
            try:
                os.chmod(str(path), orig_mode)
            except OSError:
                logger.debug("Failed to chmod %s", path)
    finally:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)


def unified_diff(a: str, b: str, path: pathlib.Path) -> str:
    return "".join(
        difflib.unified_diff(
            a.splitlines(keepends=True),
            b.splitlines(keepends=True),
            fromfile=f"a/{path}",
            tofile=f"b/{path}",
        )
    )
