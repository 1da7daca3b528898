# -*- coding: utf-8 -*-
"""Merge a freshly extracted catalog (POT) into a human-maintained one (PO)."""
from __future__ import annotations

import bisect
from typing import Tuple

from xgettext_app.catalog.po import HEADER_INDEX, CatalogDocument
from xgettext_app.errors import CatalogSyncError
from xgettext_app.utils.logging import xgettext_logger as LOG


def _seed_header(new: CatalogDocument, existing: CatalogDocument) -> CatalogDocument:
    po = existing.copy()
    if not po.ids and new.ids:
        po.append(new.ids[HEADER_INDEX], new.strings[HEADER_INDEX] if new.strings else "")
        po.header_comments = list(new.header_comments)
    return po


def synchronize_with_stats(
    new: CatalogDocument, existing: CatalogDocument, namespace: str = ""
) -> Tuple[CatalogDocument, int, int]:
    """Return ``(synchronized, added, removed)``; see :func:`synchronize`."""
    if len(existing.ids) != len(existing.strings):
        raise CatalogSyncError(namespace)

    po = _seed_header(new, existing)

    # New ids go to their sorted position; the header slot is never a target.
    known = set(po.ids)
    added = 0
    for i in range(HEADER_INDEX + 1, len(new.ids)):
        msgid = new.ids[i]
        if msgid in known:
            continue
        pos = bisect.bisect_left(po.ids, msgid, HEADER_INDEX + 1)
        po.insert(pos, msgid, msgid, plural=new.plurals[i])
        known.add(msgid)
        added += 1

    # Stale ids are dropped; survivors keep their order.
    wanted = set(new.ids)
    keep = [i for i, msgid in enumerate(po.ids) if i == HEADER_INDEX or msgid in wanted]
    removed = len(po.ids) - len(keep)
    po.keep(keep)

    if len(new.ids) - 1 != len(po.ids) - 1 or len(po.ids) != len(po.strings):
        LOG.error(
            "Catalog counts do not reconcile for %s: extracted=%d synchronized=%d strings=%d",
            namespace, len(new.ids) - 1, len(po.ids) - 1, len(po.strings),
        )
        raise CatalogSyncError(namespace)

    return po, added, removed


def synchronize(new: CatalogDocument, existing: CatalogDocument, namespace: str = "") -> CatalogDocument:
    """Bring ``existing`` in line with the ids of ``new``.

    1. ids missing from ``existing`` are inserted at their ascending position
       (binary search over the growing array) with the id as placeholder
       translation;
    2. ids at index >= 1 absent from ``new`` are removed;
    3. the message count must equal the extracted count and ``ids`` must stay
       aligned with ``strings``, otherwise :class:`CatalogSyncError` is raised
       and nothing is returned.

    Removals do not re-sort: the result is sorted among survivors and inserted
    entries only as far as ``existing`` already was. Neither input is mutated.
    """
    po, _, _ = synchronize_with_stats(new, existing, namespace)
    return po
