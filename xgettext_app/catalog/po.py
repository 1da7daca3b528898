# -*- coding: utf-8 -*-
"""
Gettext catalog text model.

A catalog is kept as parallel, index-aligned sequences:

    ids[i]      msgid
    strings[i]  msgstr (or msgstr[0] for plural entries)
    plurals[i]  msgid_plural, None for singular entries
    plural_strings[i]  msgstr[1..n], None for singular entries
    comments[i]        "#" lines above the entry

Index 0 is the header entry. It is never matched against extracted messages
and never removed. Comment lines in front of the header block are kept in
``header_comments``; comment and flag lines of every other entry are kept in
``comments``. Plural entries keep ``msgstr[1..n]`` in ``plural_strings``.

Only ``"`` is escaped when writing (``\\"``) and unescaped when reading, so
message text captured from source keeps its own escapes (``\\n`` stays a
two-character sequence and is written verbatim).
"""
from __future__ import annotations

import dataclasses
import re
from typing import Any, Dict, List, Optional

HEADER_INDEX = 0

# Literal backslash-n: PO header fields end with the escape sequence, not a newline
POT_HEADER = "Content-Type: text/plain; charset=UTF-8\\n"

FIELD_RE = re.compile(r'^(msgid_plural|msgid|msgstr(?:\[(\d+)\])?)\s*"(.*)"\s*$')
CONTINUATION_RE = re.compile(r'^"(.*)"\s*$')


def escape_string(string: str) -> str:
    return '"' + string.replace('"', '\\"') + '"'


def unescape_string(string: str) -> str:
    return string.replace('\\"', '"')


@dataclasses.dataclass
class CatalogDocument:
    ids: List[str] = dataclasses.field(default_factory=list)
    strings: List[str] = dataclasses.field(default_factory=list)
    plurals: List[Optional[str]] = dataclasses.field(default_factory=list)
    header_comments: List[str] = dataclasses.field(default_factory=list)
    # msgstr[1..n] of plural entries, None for singular entries
    plural_strings: List[Optional[List[str]]] = dataclasses.field(default_factory=list)
    # comment and flag lines written above each entry ("#, fuzzy", "#: a.js")
    comments: List[List[str]] = dataclasses.field(default_factory=list)

    def __post_init__(self) -> None:
        n = len(self.ids)
        if len(self.plurals) < n:
            self.plurals = list(self.plurals) + [None] * (n - len(self.plurals))
        if len(self.plural_strings) < n:
            self.plural_strings = list(self.plural_strings) + [None] * (n - len(self.plural_strings))
        if len(self.comments) < n:
            self.comments = list(self.comments) + [[] for _ in range(n - len(self.comments))]

    def copy(self) -> "CatalogDocument":
        return CatalogDocument(
            ids=list(self.ids),
            strings=list(self.strings),
            plurals=list(self.plurals),
            header_comments=list(self.header_comments),
            plural_strings=[list(p) if p is not None else None for p in self.plural_strings],
            comments=[list(c) for c in self.comments],
        )

    def append(
        self,
        msgid: str,
        msgstr: str,
        plural: Optional[str] = None,
        plural_strings: Optional[List[str]] = None,
        comments: Optional[List[str]] = None,
    ) -> None:
        self.insert(len(self.ids), msgid, msgstr, plural, plural_strings, comments)

    def insert(
        self,
        index: int,
        msgid: str,
        msgstr: str,
        plural: Optional[str] = None,
        plural_strings: Optional[List[str]] = None,
        comments: Optional[List[str]] = None,
    ) -> None:
        self.ids.insert(index, msgid)
        self.strings.insert(index, msgstr)
        self.plurals.insert(index, plural)
        self.plural_strings.insert(index, plural_strings)
        self.comments.insert(index, list(comments or []))

    def keep(self, indexes: List[int]) -> None:
        """Retain only the entries at ``indexes``, in that order."""
        self.ids = [self.ids[i] for i in indexes]
        self.strings = [self.strings[i] for i in indexes]
        self.plurals = [self.plurals[i] for i in indexes]
        self.plural_strings = [self.plural_strings[i] for i in indexes]
        self.comments = [self.comments[i] for i in indexes]

    @property
    def message_ids(self) -> List[str]:
        """Ids without the header entry."""
        return self.ids[HEADER_INDEX + 1:]

    @property
    def is_consistent(self) -> bool:
        return len(self.ids) == len(self.strings) == len(self.plurals)


# ── Parsing ──────────────────────────────────────────────────────────────────

def _close(entries: List[Dict[str, Any]], current: Dict[str, Any]) -> Dict[str, Any]:
    if current:
        entries.append(current)
    return {}


def _has_fields(current: Dict[str, Any]) -> bool:
    return any(k != "#" for k in current)


def _has_msgstr(current: Dict[str, Any]) -> bool:
    return any(k.startswith("msgstr") for k in current)


def parse(text: str) -> CatalogDocument:
    """Parse catalog text into a :class:`CatalogDocument`.

    Line oriented: ``msgid`` opens an entry, ``msgstr``/``msgstr[n]`` and
    ``msgid_plural`` seed the other fields, a line starting with ``"`` is
    appended to the field opened last, a blank line closes the entry. Comment
    lines belong to the entry that follows them. Entries missing a field are
    kept as they are, so a broken catalog surfaces as sequences of different
    length.
    """
    entries: List[Dict[str, Any]] = []
    current: Dict[str, Any] = {}
    section: Optional[str] = None

    for line in text.lstrip("\ufeff").splitlines():
        stripped = line.strip()
        if not stripped:
            # comments separated from their entry by a blank line still belong to it
            if _has_fields(current):
                current = _close(entries, current)
            section = None
            continue

        if stripped.startswith("#"):
            if _has_msgstr(current):
                current = _close(entries, current)
            current.setdefault("#", []).append(line.rstrip())
            section = None
            continue

        m = FIELD_RE.match(stripped)
        if m:
            kind, plural_index, value = m.group(1), m.group(2), m.group(3)
            if kind.startswith("msgstr"):
                kind = "msgstr" if plural_index in (None, "0") else f"msgstr[{int(plural_index)}]"
            if kind == "msgid" and "msgid" in current:
                current = _close(entries, current)
            current[kind] = unescape_string(value)
            section = kind
            continue

        m = CONTINUATION_RE.match(stripped)
        if m and section is not None:
            current[section] += unescape_string(m.group(1))

    _close(entries, current)

    doc = CatalogDocument()
    for entry in entries:
        if "msgid" not in entry:
            # an orphan msgstr still counts, so the catalog shows up as misaligned
            if "msgstr" in entry:
                doc.strings.append(entry["msgstr"])
            continue
        extra = sorted(
            (int(k[len("msgstr["):-1]), v) for k, v in entry.items() if k.startswith("msgstr[")
        )
        comments = entry.get("#", [])
        if not doc.ids:
            doc.header_comments = comments
            comments = []
        doc.ids.append(entry["msgid"])
        doc.plurals.append(entry.get("msgid_plural"))
        doc.plural_strings.append([v for _, v in extra] or None)
        doc.comments.append(comments)
        if "msgstr" in entry:
            doc.strings.append(entry["msgstr"])
    return doc


# ── Serialization ────────────────────────────────────────────────────────────

def _header_lines(keyword: str, value: str) -> List[str]:
    """Header values are written one ``\\n``-terminated field per line."""
    parts = value.split("\\n")
    chunks = [p + "\\n" for p in parts[:-1]]
    if parts[-1]:
        chunks.append(parts[-1])
    if len(chunks) <= 1:
        return [f"{keyword} {escape_string(value)}"]
    return [f'{keyword} ""'] + [escape_string(c) for c in chunks]


def serialize(doc: CatalogDocument) -> str:
    """Render ``doc`` as blank-line separated entries, header first, in array order."""
    blocks: List[str] = []
    for i, (msgid, msgstr) in enumerate(zip(doc.ids, doc.strings)):
        lines: List[str] = []
        if i == HEADER_INDEX:
            lines.extend(doc.header_comments)
        elif i < len(doc.comments):
            lines.extend(doc.comments[i])
        lines.append(f"msgid {escape_string(msgid)}")
        plural = doc.plurals[i] if i < len(doc.plurals) else None
        extra = doc.plural_strings[i] if i < len(doc.plural_strings) else None
        if plural is not None:
            lines.append(f"msgid_plural {escape_string(plural)}")
            lines.append(f"msgstr[0] {escape_string(msgstr)}")
            for n, value in enumerate(extra or [], start=1):
                lines.append(f"msgstr[{n}] {escape_string(value)}")
        elif i == HEADER_INDEX:
            lines.extend(_header_lines("msgstr", msgstr))
        else:
            lines.append(f"msgstr {escape_string(msgstr)}")
        blocks.append("\n".join(lines))
    if not blocks:
        return ""
    return "\n\n".join(blocks) + "\n"
