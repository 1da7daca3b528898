# -*- coding: utf-8 -*-
"""Exceptions raised by the extraction and catalog pipeline."""
from __future__ import annotations

from typing import Dict, List, Optional

__all__ = [
    "XgettextError",
    "XgettextConfigError",
    "CatalogSyncError",
    "CatalogWriteError",
    "TranslationDriftError",
]


class XgettextError(Exception):
    """Base exception for xgettext_app."""


class XgettextConfigError(XgettextError):
    """Raised when configuration or a source file cannot be used."""


class CatalogSyncError(XgettextError):
    """Raised when a synchronized catalog fails its count invariant."""

    def __init__(self, namespace: str, message: Optional[str] = None) -> None:
        super().__init__(
            message
            or f"Convert from pot file to po file failed for this namespace: {namespace}."
        )
        self.namespace = namespace


class CatalogWriteError(XgettextError):
    """Raised after a fix run when one or more namespaces could not be synchronized."""

    def __init__(self, failures: Dict[str, CatalogSyncError]) -> None:
        lines = [str(err) for _, err in sorted(failures.items())]
        super().__init__("\n".join(lines))
        self.failures = dict(failures)

    @property
    def namespaces(self) -> List[str]:
        return sorted(self.failures)


class TranslationDriftError(XgettextError):
    """Raised in report mode when extracted messages are missing from committed catalogs."""

    def __init__(self, report: str, namespaces: Optional[List[str]] = None) -> None:
        super().__init__(
            "It appears that you have resource changes not yet updated in po and pot files. "
            "Please run 'xgettext-sync --fix'. The diff is:\n" + report
        )
        self.report = report
        self.namespaces = list(namespaces or [])
