# -*- coding: utf-8 -*-
"""
Format adapters: one extractor per source format.

Every adapter normalizes the source (line breaks collapsed, ``"a" + "b"``
concatenations joined), builds the outer/inner pattern pairs for each quote
style and trigger name, runs them through the engine and merges the partial
results.

    {{ "text" | tr }}                 angular / vue template filter
    ng-i18next='[html:tr]text'        angular attribute directive
    :title="'text' | tr"              vue bound attribute
    {{ tr "text" "texts" }}           handlebars helper
    "ns:::key"                        json resource value
    tr("text", "texts") / tr_("x")    javascript call
"""
from __future__ import annotations

import functools
import re
from typing import Callable, Dict, Iterable, List, Optional

from xgettext_app.extract.engine import (
    ExtractionResult,
    MessagePatterns,
    extract_messages,
    merge_results,
)
from xgettext_app.utils.logging import xgettext_logger as LOG
from xgettext_app.utils.task_config import TaskOptions

QUOTES = ("'", '"')

# Marker between namespace and key in structured resources: "ns:::key"
RESOURCE_NAMESPACE_MARKER = ":::"

# Suffix of the deferred variant of a javascript trigger: tr_("text")
DEFERRED_TRIGGER_SUFFIX = "_"

LINE_BREAK_RE = re.compile(r"\r\n|\r|\n")
CONCAT_RE = {
    '"': re.compile(r'"\s*\+\s*"'),
    "'": re.compile(r"'\s*\+\s*'"),
}

# ── Vue regions (same block matcher as the template wrapper tooling) ──────────
SCRIPT_BLOCK_RE = re.compile(r"(<script[\s\S]*?>)([\s\S]*?)(</script>)", re.I)

Extractor = Callable[[str, TaskOptions, str], ExtractionResult]


def normalize_source(content: str) -> str:
    """Collapse hard line breaks and adjacent string concatenations."""
    content = LINE_BREAK_RE.sub(" ", content)
    for quote in QUOTES:
        content = CONCAT_RE[quote].sub("", content)
    return content


def split_vue_regions(content: str):
    """Return ``(template_region, script_region)`` of a single-file component."""
    scripts = [m.group(2) for m in SCRIPT_BLOCK_RE.finditer(content)]
    template = SCRIPT_BLOCK_RE.sub(" ", content)
    return template, "\n".join(scripts)


# ── Pattern builders ──────────────────────────────────────────────────────────

def _string_body(quote: str) -> str:
    q = re.escape(quote)
    return rf"(?:[^{q}\\]|\\.)+"


def _namespace_group(separator: str) -> str:
    return rf"(?:([\d\w]*){re.escape(separator)})?"


def _inner_pattern(quote: str, separator: str) -> re.Pattern:
    q = re.escape(quote)
    return re.compile(rf"{q}{_namespace_group(separator)}({_string_body(quote)}){q}")


@functools.lru_cache(maxsize=None)
def filter_patterns(quote: str, function_name: str, separator: str, variables: str) -> MessagePatterns:
    """``{{ 'text' | tr }}`` with optional filter arguments after the trigger."""
    q = re.escape(quote)
    fn = re.escape(function_name)
    outer = re.compile(
        rf"\{{\{{\s*((?::{{0,2}}\(?{q}{_string_body(quote)}{q}\s*)+)[^}}]*\s*\|\s*{fn}{variables}\)?\s*\}}\}}"
    )
    return MessagePatterns(outer=outer, inner=_inner_pattern(quote, separator), quote=quote)


@functools.lru_cache(maxsize=None)
def directive_patterns(quote: str, function_name: str) -> MessagePatterns:
    """``ng-i18next='[html:tr]text'`` with an optional ``({...})`` argument object."""
    q = re.escape(quote)
    fn = re.escape(function_name)
    outer = re.compile(rf"ng-i18next={q}\[html:{fn}\](?:\(\{{(?!\}}\)).+\}}\))?([^{q}]+){q}")
    return MessagePatterns(outer=outer, inner=re.compile(r"(.+)"), quote=quote)


@functools.lru_cache(maxsize=None)
def bound_attribute_patterns(outer_quote: str, quote: str, function_name: str, separator: str) -> MessagePatterns:
    """``:attr="'text' | tr"`` inside a vue template."""
    oq = re.escape(outer_quote)
    q = re.escape(quote)
    fn = re.escape(function_name)
    outer = re.compile(
        rf":\w[-\w]*={oq}({q}{_string_body(quote)}{q})\s*\|\s*{fn}(?:\(.*\))?\s*{oq}"
    )
    return MessagePatterns(outer=outer, inner=_inner_pattern(quote, separator), quote=quote)


@functools.lru_cache(maxsize=None)
def helper_patterns(quote: str, function_name: str, separator: str) -> MessagePatterns:
    """``{{ tr 'text' 'texts' }}`` handlebars helper call."""
    q = re.escape(quote)
    fn = re.escape(function_name)
    outer = re.compile(
        rf"\{{\{{\s*{fn}\s+((?:{q}{_string_body(quote)}{q}\s*)+)[^}}]*\s*\}}\}}"
    )
    return MessagePatterns(outer=outer, inner=_inner_pattern(quote, separator), quote=quote)


@functools.lru_cache(maxsize=None)
def call_patterns(quote: str, function_name: str, separator: str) -> MessagePatterns:
    """``tr('text', 'texts')`` direct call; the name must not be part of a longer identifier."""
    q = re.escape(quote)
    fn = re.escape(function_name)
    outer = re.compile(
        rf"(?:\W|^){fn}\s*\(\s*((?:{q}{_string_body(quote)}{q}\s*[,)]\s*)+)"
    )
    return MessagePatterns(outer=outer, inner=_inner_pattern(quote, separator), quote=quote)


@functools.lru_cache(maxsize=None)
def resource_patterns() -> MessagePatterns:
    """``"ns:::key"`` values in structured resource files."""
    marker = re.escape(RESOURCE_NAMESPACE_MARKER)
    outer = re.compile(rf'"((?:[\d\w]+{marker})[^"]+)"')
    inner = re.compile(rf'(?:([\d\w]*){marker})?([^"]+)')
    return MessagePatterns(outer=outer, inner=inner, quote='"')


# ── Adapters ──────────────────────────────────────────────────────────────────

def _run(content: str, patterns: Iterable[MessagePatterns], options: TaskOptions, file_name: str) -> ExtractionResult:
    return merge_results(
        extract_messages(content, p, file_name, options.process_message) for p in patterns
    )


def extract_angular(content: str, options: TaskOptions, file_name: str) -> ExtractionResult:
    content = normalize_source(content)
    sep = options.namespace_separator
    patterns: List[MessagePatterns] = []
    for fn in options.function_name:
        patterns.append(filter_patterns("'", fn, sep, r"(?::\{.*\})?"))
        patterns.append(filter_patterns('"', fn, sep, r"(?::\{.*\})?"))
        patterns.append(directive_patterns("'", fn))
    return _run(content, patterns, options, file_name)


def extract_handlebars(content: str, options: TaskOptions, file_name: str) -> ExtractionResult:
    content = normalize_source(content)
    sep = options.namespace_separator
    patterns: List[MessagePatterns] = []
    for fn in options.function_name:
        patterns.append(helper_patterns("'", fn, sep))
        patterns.append(helper_patterns('"', fn, sep))
    return _run(content, patterns, options, file_name)


def extract_javascript(content: str, options: TaskOptions, file_name: str) -> ExtractionResult:
    content = normalize_source(content)
    sep = options.namespace_separator
    patterns: List[MessagePatterns] = []
    for fn in options.function_name:
        for name in (fn, fn + DEFERRED_TRIGGER_SUFFIX):
            patterns.append(call_patterns("'", name, sep))
            patterns.append(call_patterns('"', name, sep))
    return _run(content, patterns, options, file_name)


def extract_vue(content: str, options: TaskOptions, file_name: str) -> ExtractionResult:
    """Filter and bound-attribute forms in the template region, direct calls anywhere in the file."""
    template, _ = split_vue_regions(content)
    template = normalize_source(template)
    sep = options.namespace_separator
    patterns: List[MessagePatterns] = []
    for fn in options.function_name:
        patterns.append(filter_patterns("'", fn, sep, r"(?:\(.*\))?"))
        patterns.append(filter_patterns('"', fn, sep, r"(?:\(.*\))?"))
        patterns.append(bound_attribute_patterns("'", '"', fn, sep))
        patterns.append(bound_attribute_patterns('"', "'", fn, sep))
    template_result = _run(template, patterns, options, file_name)
    return template_result.merge(extract_javascript(content, options, file_name))


def extract_json(content: str, options: TaskOptions, file_name: str) -> ExtractionResult:
    """Trigger names do not apply: any ``"ns:::key"`` value is a message."""
    content = normalize_source(content)
    return _run(content, [resource_patterns()], options, file_name)


EXTRACTORS: Dict[str, Extractor] = {
    "angular": extract_angular,
    "handlebars": extract_handlebars,
    "vue": extract_vue,
    "json": extract_json,
    "javascript": extract_javascript,
}


def get_extractor(format_id: str) -> Optional[Extractor]:
    extractor = EXTRACTORS.get(format_id)
    if extractor is None:
        LOG.warning("No gettext extractor for type: %s", format_id)
    return extractor
