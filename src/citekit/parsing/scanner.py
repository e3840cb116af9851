"""Citation tag scanner.

Finds ``<cite ... />`` and ``<cite ...>...</cite>`` markers in model
output and reports their positions. The scan is a quote-aware walk over
the text, so ``>`` or ``/>`` inside a quoted attribute value never ends a
tag. Every call keeps its own cursor: compiled patterns carry no match
position between calls.

Recoveries for common model mistakes:
- ``cite attachment_id=...`` with the leading ``<`` dropped
- markdown-escaped underscores (``attachment\\_id``) inside the tag
- a value with an unterminated quote ends at the first ``/>``, and never
  runs into the next marker
- an opening ``<cite ...>`` with no ``</cite>`` acts as self-closing
"""

import logging
import re
from dataclasses import dataclass

from citekit.core.config import get_settings

logger = logging.getLogger(__name__)

# "<cite" followed by whitespace, or a bare "cite" directly before an id attribute
_TAG_START = re.compile(
    r"<cite(?=\s)|(?<![<\w])cite(?=\s+(?:attachment|file|source)\\?_?id\s*=)",
    re.IGNORECASE,
)
_CLOSE_TAG = re.compile(r"</cite\s*>", re.IGNORECASE)
_OPEN_TAG = re.compile(r"<cite\s", re.IGNORECASE)

# A quote closes a value only when another attribute, the tag end, or the
# end of input follows it. This keeps unescaped inner quotes inside values.
_VALUE_END = re.compile(r"\s*/?>|\s+[A-Za-z_][\w\\]*\s*=|\s*$")


@dataclass(frozen=True)
class CiteTag:
    """One marker found in the text. ``start``/``end`` index the original text."""

    start: int
    end: int
    raw: str
    attribute_text: str
    inner_text: str | None = None
    self_closing: bool = True
    repaired: bool = False


def _walk_to_tag_end(text: str, pos: int) -> tuple[int, bool] | None:
    """Walk from ``pos`` (just past "cite") to the end of the opening tag.

    Returns (index just past the tag, self_closing) or None when the tag
    never closes.
    """
    n = len(text)
    quote: str | None = None
    i = pos
    while i < n:
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == "<" and _OPEN_TAG.match(text, i):
                # The quote never closed before the next marker: end at a "/>"
                # ahead of that marker, or give this tag up
                fallback = text.find("/>", pos, i)
                return (fallback + 2, True) if fallback != -1 else None
            if ch == quote and _VALUE_END.match(text, i + 1):
                quote = None
            i += 1
            continue

        if ch in ("'", '"'):
            quote = ch
        elif text.startswith("/>", i):
            return i + 2, True
        elif ch == ">":
            return i + 1, False
        elif ch == "<" and _OPEN_TAG.match(text, i):
            # Another marker starts before this one ended
            return None
        i += 1

    if quote:
        # Unterminated quote: fall back to the first "/>" after the tag start
        fallback = text.find("/>", pos)
        if fallback != -1:
            return fallback + 2, True
    return None


def _attribute_text(raw_attributes: str) -> str:
    text = raw_attributes.strip()
    if text.endswith("/>"):
        text = text[:-2]
    elif text.endswith(">"):
        text = text[:-1]
    return text.replace("\\_", "_").strip()


def scan_cite_tags(text: str | None, max_input_length: int | None = None) -> list[CiteTag]:
    """Find every citation marker in ``text``, in document order.

    Never raises. Text that looks like a marker but cannot be delimited is
    left as ordinary text, and scanning resumes after it.

    Args:
        text: Arbitrary text, possibly containing markers
        max_input_length: Inputs longer than this are not scanned
            (defaults to ``Settings.max_input_length``)

    Returns:
        Markers ordered by position
    """
    if not text:
        return []

    limit = max_input_length if max_input_length is not None else get_settings().max_input_length
    if len(text) > limit:
        logger.warning(
            f"CITE_SCAN_SKIPPED reason=input_too_large length={len(text)} max={limit}"
        )
        return []

    tags: list[CiteTag] = []
    pos = 0
    while True:
        match = _TAG_START.search(text, pos)
        if match is None:
            break

        start = match.start()
        repaired = not match.group(0).startswith("<")
        walked = _walk_to_tag_end(text, match.end())
        if walked is None:
            logger.debug(f"CITE_TAG_UNTERMINATED offset={start}")
            pos = match.end()
            continue

        end, self_closing = walked
        attribute_text = _attribute_text(text[match.end():end])
        if not attribute_text:
            # Plain HTML <cite >...</cite> with no attributes is not a marker
            pos = end
            continue

        inner_text: str | None = None
        if not self_closing:
            close = _CLOSE_TAG.search(text, end)
            next_open = _TAG_START.search(text, end)
            if close and (next_open is None or close.start() < next_open.start()):
                inner_text = text[end:close.start()]
                end = close.end()
            else:
                # Unclosed opening tag: treat as self-closing
                self_closing = True

        tags.append(
            CiteTag(
                start=start,
                end=end,
                raw=text[start:end],
                attribute_text=attribute_text,
                inner_text=inner_text,
                self_closing=self_closing,
                repaired=repaired,
            )
        )
        pos = end

    if tags:
        logger.debug(
            f"CITE_TAGS_SCANNED count={len(tags)} repaired={sum(t.repaired for t in tags)}"
        )
    return tags
