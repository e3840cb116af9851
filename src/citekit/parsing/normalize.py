"""Rewrite citation markers into one canonical tag form.

``normalize_citations`` turns whatever a model produced into
``<cite attachment_id='...' full_phrase='...' ... />``: canonical attribute
names in a fixed order, single-quoted values, free-text values on one line,
line ids expanded. Text wrapped by a paired tag moves in front of the tag.
Prose outside markers is left as is.
"""

import logging
import re
from collections.abc import Mapping

from citekit.parsing.attributes import TEXT_FIELDS, parse_attributes
from citekit.parsing.builder import parse_line_ids
from citekit.parsing.scanner import scan_cite_tags

logger = logging.getLogger(__name__)

CANONICAL_ORDER = (
    "attachment_id",
    "page_number",
    "start_page_id",
    "full_phrase",
    "anchor_text",
    "line_ids",
    "timestamps",
    "start_time",
    "end_time",
    "reasoning",
    "value",
    "url",
    "domain",
    "title",
)

_NEWLINES = re.compile(r"\s*[\r\n]+\s*")
_BOLD = re.compile(r"\*\*|__")


def _format_value(name: str, value: str) -> str | None:
    if name == "line_ids":
        ids = parse_line_ids(value)
        return ",".join(str(n) for n in ids) if ids else None
    if name in TEXT_FIELDS:
        value = _BOLD.sub("", _NEWLINES.sub(" ", value)).strip()
    # A trailing backslash would escape the closing quote
    value = value.rstrip("\\")
    return value.replace("'", "\\'") if value else None


def canonical_tag(attrs: Mapping[str, str]) -> str:
    """Self-closing tag for a normalized attribute map."""
    names = [name for name in CANONICAL_ORDER if name in attrs]
    names.extend(name for name in attrs if name not in CANONICAL_ORDER)
    parts = []
    for name in names:
        value = _format_value(name, attrs[name])
        if value is not None:
            parts.append(f"{name}='{value}'")
    return f"<cite {' '.join(parts)} />"


def normalize_citations(text: str | None) -> str:
    """Rewrite every citation marker in ``text`` into canonical form.

    Markers whose attributes cannot be parsed are left untouched.
    Normalizing the result again changes nothing.

    Args:
        text: Model output

    Returns:
        Trimmed text with canonical ``<cite ... />`` tags
    """
    if not text:
        return ""

    tags = scan_cite_tags(text)
    parts: list[str] = []
    cursor = 0
    rewritten = 0
    for tag in tags:
        parts.append(text[cursor:tag.start])
        cursor = tag.end
        attrs = parse_attributes(tag.attribute_text)
        if not attrs:
            parts.append(tag.raw)
            continue
        if tag.inner_text and tag.inner_text.strip():
            parts.append(tag.inner_text.strip())
        parts.append(canonical_tag(attrs))
        rewritten += 1
    parts.append(text[cursor:])

    if rewritten:
        logger.debug(f"CITATIONS_NORMALIZED count={rewritten}")
    return "".join(parts).strip()
