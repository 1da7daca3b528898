# -*- coding: utf-8 -*-
"""POT rendering and drift reporting for one namespace."""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set

from xgettext_app.catalog.po import POT_HEADER, CatalogDocument, escape_string, parse, serialize
from xgettext_app.extract.engine import Namespace


def build_pot_document(namespace: Namespace) -> CatalogDocument:
    """Header entry followed by every message, sorted by singular."""
    doc = CatalogDocument()
    doc.append("", POT_HEADER)
    for key in sorted(namespace):
        entry = namespace[key]
        doc.append(entry.singular, entry.message, plural=entry.plural or None)
    return doc


def render_pot(namespace: Namespace) -> str:
    return serialize(build_pot_document(namespace))


def existing_message_ids(catalog_text: Optional[str]) -> Set[str]:
    """Ids of a committed catalog; a missing catalog has none."""
    if not catalog_text:
        return set()
    return set(parse(catalog_text).ids)


def calculate_drift(existing_ids: Iterable[str], locations: Dict[str, List[str]]) -> str:
    """One ``"<id>" -- <files>`` line per extracted id absent from ``existing_ids``."""
    known = set(existing_ids)
    diff = ""
    for message_id in sorted(locations):
        if message_id not in known:
            diff += f"{escape_string(message_id)} -- {', '.join(locations[message_id])}\n"
    return diff
