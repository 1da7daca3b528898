# -*- coding: utf-8 -*-
"""
Pattern extraction engine.

Recovers translatable messages from raw source text with a pair of nested
patterns:

- the *outer* pattern finds a usage site (a call, a filter expression, a
  quoted resource value) and captures one group, the argument blob;
- the *inner* pattern is applied repeatedly inside that blob. Each match is
  either ``(namespace, text)`` or ``(text)``.

The first inner match of a site is the singular form and the lookup key. Every
later inner match of the same site is stored as the plural form, so with more
than two strings only the last one survives as plural.

Results are accumulated in plain mappings:

    TranslationSet        {namespace: {singular: MessageEntry}}
    MessageLocationIndex  {namespace: {singular: [file, ...]}}
"""
from __future__ import annotations

import dataclasses
import re
from typing import Callable, Dict, List, Optional, Tuple, TypeVar

from xgettext_app import hooks

DEFAULT_NAMESPACE = hooks.default_namespace

MessageNormalizer = Callable[[str], str]


@dataclasses.dataclass
class MessageEntry:
    singular: str
    plural: Optional[str] = None
    message: str = ""


Namespace = Dict[str, MessageEntry]
TranslationSet = Dict[str, Namespace]
MessageLocationIndex = Dict[str, Dict[str, List[str]]]


def identity(text: str) -> str:
    return text


K = TypeVar("K")
V = TypeVar("V")


def get_or_create(mapping: Dict[K, V], key: K, factory: Callable[[], V]) -> V:
    """Return ``mapping[key]``, inserting ``factory()`` first when missing."""
    try:
        return mapping[key]
    except KeyError:
        value = factory()
        mapping[key] = value
        return value


# ── Merging ────────────────────────────────────────────────────────────────────

def merge_entry(existing: MessageEntry, incoming: MessageEntry) -> MessageEntry:
    """Combine two entries sharing a singular key.

    A plural already known is kept; a non-empty incoming ``message`` replaces
    the existing one, an empty one never erases it.
    """
    return MessageEntry(
        singular=existing.singular,
        plural=existing.plural if existing.plural is not None else incoming.plural,
        message=incoming.message or existing.message,
    )


def merge_namespace(existing: Namespace, incoming: Namespace) -> Namespace:
    """Return a new namespace holding the entries of both inputs."""
    merged: Namespace = {key: dataclasses.replace(entry) for key, entry in existing.items()}
    for key, entry in incoming.items():
        if key in merged:
            merged[key] = merge_entry(merged[key], entry)
        else:
            merged[key] = dataclasses.replace(entry)
    return merged


def merge_translation_sets(existing: TranslationSet, incoming: TranslationSet) -> TranslationSet:
    merged: TranslationSet = {name: merge_namespace(ns, {}) for name, ns in existing.items()}
    for name, ns in incoming.items():
        merged[name] = merge_namespace(merged.get(name, {}), ns)
    return merged


def merge_location_indexes(
    existing: MessageLocationIndex, incoming: MessageLocationIndex
) -> MessageLocationIndex:
    """Union of two location indexes; file lists keep first-seen order without duplicates."""
    merged: MessageLocationIndex = {
        name: {key: list(files) for key, files in by_key.items()}
        for name, by_key in existing.items()
    }
    for name, by_key in incoming.items():
        target = get_or_create(merged, name, dict)
        for key, files in by_key.items():
            known = get_or_create(target, key, list)
            for f in files:
                if f not in known:
                    known.append(f)
    return merged


@dataclasses.dataclass
class ExtractionResult:
    translations: TranslationSet = dataclasses.field(default_factory=dict)
    locations: MessageLocationIndex = dataclasses.field(default_factory=dict)

    def merge(self, other: "ExtractionResult") -> "ExtractionResult":
        return ExtractionResult(
            translations=merge_translation_sets(self.translations, other.translations),
            locations=merge_location_indexes(self.locations, other.locations),
        )

    @property
    def message_count(self) -> int:
        return sum(len(ns) for ns in self.translations.values())


def _absorb(target: ExtractionResult, other: ExtractionResult) -> None:
    # target is owned by the caller; entries from other are copied in, never shared
    for name, ns in other.translations.items():
        bucket = get_or_create(target.translations, name, dict)
        for key, entry in ns.items():
            if key in bucket:
                bucket[key] = merge_entry(bucket[key], entry)
            else:
                bucket[key] = dataclasses.replace(entry)
    for name, by_key in other.locations.items():
        target_ns = get_or_create(target.locations, name, dict)
        for key, files in by_key.items():
            known = get_or_create(target_ns, key, list)
            for f in files:
                if f not in known:
                    known.append(f)


def merge_results(results) -> ExtractionResult:
    """Fold many results into one new result in a single pass; inputs are left untouched."""
    merged = ExtractionResult()
    for r in results:
        _absorb(merged, r)
    return merged


# ── Patterns ───────────────────────────────────────────────────────────────────

@dataclasses.dataclass(frozen=True)
class MessagePatterns:
    """A compiled outer/inner matcher pair for one quote style."""
    outer: re.Pattern
    inner: re.Pattern
    quote: str

    @property
    def namespaced(self) -> bool:
        return self.inner.groups >= 2

    def unescape(self, raw: str) -> str:
        # \" -> " (or \' -> ') for the quote style this pair was built for
        return raw.replace("\\" + self.quote, self.quote)

    def split(self, match: re.Match) -> Tuple[Optional[str], str]:
        if self.namespaced:
            return match.group(1), match.group(2)
        return None, match.group(1)


# ── Engine ─────────────────────────────────────────────────────────────────────

def _record_location(locations: MessageLocationIndex, namespace: str, key: str, file_name: str) -> None:
    files = get_or_create(get_or_create(locations, namespace, dict), key, list)
    if file_name not in files:
        files.append(file_name)


def extract_messages(
    content: str,
    patterns: MessagePatterns,
    file_name: str,
    process_message: MessageNormalizer = identity,
) -> ExtractionResult:
    """Run one outer/inner pattern pair over ``content``.

    Sites are visited in document order and never overlap. A site whose blob
    yields no inner match contributes nothing.
    """
    result = ExtractionResult()

    for site in patterns.outer.finditer(content):
        blob = site.group(1)
        if not blob:
            continue

        namespace = DEFAULT_NAMESPACE
        entry: Optional[MessageEntry] = None
        for piece in patterns.inner.finditer(blob):
            prefix, raw = patterns.split(piece)
            text = process_message(patterns.unescape(raw))
            if entry is None:
                namespace = prefix or DEFAULT_NAMESPACE
                entry = MessageEntry(singular=text)
            else:
                entry.plural = text

        if entry is None or not entry.singular:
            continue

        bucket = get_or_create(result.translations, namespace, dict)
        if entry.singular in bucket:
            bucket[entry.singular] = merge_entry(bucket[entry.singular], entry)
        else:
            bucket[entry.singular] = entry
        _record_location(result.locations, namespace, entry.singular, file_name)

    return result
