"""Attribute normalizer for citation tags.

Turns the raw attribute text of one tag into ``{canonical_name: value}``.
Every spelling a model is known to emit (snake_case, camelCase, legacy
names) maps to one canonical snake_case name through an explicit table.
"""

import logging
import re

logger = logging.getLogger(__name__)

# Canonical name -> accepted spellings. Lookup ignores case and underscores.
ATTRIBUTE_ALIASES: dict[str, tuple[str, ...]] = {
    "attachment_id": ("attachment_id", "attachmentId", "file_id", "fileId", "source_id", "sourceId"),
    "start_page_id": (
        "start_page_id",
        "startPageId",
        "start_page_key",
        "startPageKey",
        "page_id",
        "pageId",
        "page_key",
        "pageKey",
    ),
    "page_number": ("page_number", "pageNumber"),
    "full_phrase": ("full_phrase", "fullPhrase"),
    "anchor_text": ("anchor_text", "anchorText", "key_span", "keySpan"),
    "line_ids": ("line_ids", "lineIds", "line_id", "lineId"),
    "timestamps": ("timestamps", "timestamp"),
    "start_time": ("start_time", "startTime"),
    "end_time": ("end_time", "endTime"),
    "citation_number": ("citation_number", "citationNumber"),
    "reasoning": ("reasoning",),
    "value": ("value",),
    "url": ("url", "source_url", "sourceUrl"),
    "domain": ("domain",),
    "title": ("title",),
}

# Fields whose value may appear unquoted (line_ids=3,4)
NUMERIC_FIELDS = frozenset({"line_ids", "page_number", "start_page_id", "timestamps", "citation_number"})
# Free-text fields; only these get HTML entities decoded
TEXT_FIELDS = frozenset({"full_phrase", "anchor_text", "reasoning", "value", "title"})

HTML_ENTITIES = {
    "&lt;": "<",
    "&gt;": ">",
    "&amp;": "&",
    "&quot;": '"',
    "&apos;": "'",
}


def _compress(key: str) -> str:
    return key.replace("_", "").replace("-", "").lower()


_ALIAS_LOOKUP: dict[str, str] = {
    _compress(spelling): canonical
    for canonical, spellings in ATTRIBUTE_ALIASES.items()
    for spelling in spellings
}

_KEY = re.compile(r"[A-Za-z_][\w\-]*")
_UNQUOTED_VALUE = re.compile(r"[^\s'\"]+")
_NUMERIC_VALUE = re.compile(r"[0-9][0-9,\-:._]*")
_NEXT_ATTRIBUTE_OR_END = re.compile(r"\s+[A-Za-z_][\w\-]*\s*=|\s*$")
_ESCAPED_QUOTE = re.compile(r"\\{1,2}(['\"])")
_ENTITY = re.compile(r"&(?:lt|gt|amp|quot|apos);")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def canonical_attribute_name(key: str) -> str:
    """Map any known spelling to its canonical name.

    Unknown keys are converted from camelCase to snake_case.
    """
    canonical = _ALIAS_LOOKUP.get(_compress(key))
    if canonical:
        return canonical
    return _CAMEL_BOUNDARY.sub(r"\1_\2", key).lower()


def decode_entities(value: str) -> str:
    """Decode the core HTML entities in a single pass ("&amp;lt;" -> "&lt;")."""
    return _ENTITY.sub(lambda m: HTML_ENTITIES[m.group(0)], value)


def unescape_value(value: str, entities: bool = True) -> str:
    """Unescape backslash-escaped quotes, then decode entities if asked."""
    unescaped = _ESCAPED_QUOTE.sub(r"\1", value)
    return decode_entities(unescaped) if entities else unescaped


def _find_closing_quote(text: str, start: int, quote: str) -> int | None:
    """Index of the quote closing a value that opened just before ``start``.

    Preferred: the first unescaped quote followed by another attribute or
    the end of the text. Otherwise the first unescaped quote. None when the
    value is unterminated.
    """
    first: int | None = None
    i = start
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote:
            if first is None:
                first = i
            if _NEXT_ATTRIBUTE_OR_END.match(text, i + 1):
                return i
        i += 1
    return first


def parse_attributes(attribute_text: str) -> dict[str, str]:
    """Parse the attribute text of one citation tag.

    Never raises. Attributes that cannot be parsed confidently are
    omitted: a key without ``=``, an unquoted value for a text field, and
    an unterminated quote (which also stops parsing, since the rest of
    the text belongs to that broken value).

    Args:
        attribute_text: Text between ``<cite`` and the tag end

    Returns:
        Canonical attribute name -> unescaped value
    """
    attrs: dict[str, str] = {}
    text = attribute_text
    n = len(text)
    i = 0

    while i < n:
        if text[i].isspace():
            i += 1
            continue

        key_match = _KEY.match(text, i)
        if key_match is None:
            # Skip a junk token
            while i < n and not text[i].isspace():
                i += 1
            continue

        key = key_match.group(0)
        j = key_match.end()
        while j < n and text[j].isspace():
            j += 1
        if j >= n or text[j] != "=":
            logger.debug(f"CITE_ATTRIBUTE_OMITTED key={key} reason=missing_equals")
            i = j
            continue

        j += 1
        while j < n and text[j].isspace():
            j += 1
        if j >= n:
            break

        canonical = canonical_attribute_name(key)
        quote = text[j]
        if quote in ("'", '"'):
            close = _find_closing_quote(text, j + 1, quote)
            if close is None:
                logger.debug(f"CITE_ATTRIBUTE_OMITTED key={key} reason=unterminated_quote")
                break
            attrs[canonical] = unescape_value(text[j + 1:close], entities=canonical in TEXT_FIELDS)
            i = close + 1
            continue

        value_match = _UNQUOTED_VALUE.match(text, j)
        if value_match is None:
            i = j + 1
            continue
        raw = value_match.group(0)
        i = value_match.end()
        if canonical in NUMERIC_FIELDS and _NUMERIC_VALUE.fullmatch(raw):
            attrs[canonical] = raw
        else:
            logger.debug(f"CITE_ATTRIBUTE_OMITTED key={key} reason=unquoted_value")

    return attrs
