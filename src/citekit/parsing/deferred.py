"""Deferred citation format decoder.

In the deferred format the model writes plain prose with bracketed
markers (``[1]``, ``[2]``) and appends one JSON block between sentinels::

    Revenue grew 45% [1].

    <<<CITATION_DATA>>>
    {"att_1": [{"id": 1, "full_phrase": "...", "anchor_text": "45%",
                "page_id": "2_1", "line_ids": [12, 13]}]}
    <<<END_CITATION_DATA>>>

The block is keyed by source id (grouped format). A flat array with a
per-entry ``attachment_id`` is also accepted, as are single-letter
compact keys (``{"n": 1, "a": "att_1", "f": "...", "k": "45%"}``).
Broken JSON goes through ``json_repair``; nothing here raises on bad input.
"""

import json
import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from json_repair import repair_json

from citekit.core.logging import sanitize_for_log
from citekit.models.citation import Citation, CitationKind, Timestamps
from citekit.parsing.builder import parse_line_ids, parse_page_location

logger = logging.getLogger(__name__)

CITATION_DATA_START = "<<<CITATION_DATA>>>"
CITATION_DATA_END = "<<<END_CITATION_DATA>>>"

COMPACT_KEYS = {
    "n": "id",
    "a": "attachment_id",
    "r": "reasoning",
    "f": "full_phrase",
    "k": "anchor_text",
    "p": "page_id",
    "l": "line_ids",
    "t": "timestamps",
}
TIMESTAMP_KEYS = {"s": "start_time", "e": "end_time"}

# "[3]" but not a markdown link "[3](...)"
DEFERRED_MARKER = re.compile(r"\[(\d+)\](?!\()")

_CODE_FENCE_OPEN = re.compile(r"^```(?:json)?\s*", re.IGNORECASE)
_CODE_FENCE_CLOSE = re.compile(r"\s*```$")


@dataclass(frozen=True)
class DeferredEntry:
    """One citation object from the deferred JSON block."""

    id: int | None = None
    source_id: str | None = None
    full_phrase: str | None = None
    anchor_text: str | None = None
    reasoning: str | None = None
    page_id: str | None = None
    page_number: int | None = None
    line_ids: tuple[int, ...] | None = None
    timestamps: Timestamps | None = None


@dataclass
class DeferredParseResult:
    """Outcome of decoding a deferred-format response."""

    visible_text: str
    entries: list[DeferredEntry] = field(default_factory=list)
    success: bool = True
    error: str | None = None
    # True when the JSON only parsed after repair
    repaired: bool = False
    # Span of the sentinel block in the original text
    block_span: tuple[int, int] | None = None

    @property
    def entries_by_id(self) -> dict[int, DeferredEntry]:
        """Entries keyed by marker id; the first entry wins on duplicates."""
        by_id: dict[int, DeferredEntry] = {}
        for entry in self.entries:
            if entry.id is not None and entry.id not in by_id:
                by_id[entry.id] = entry
        return by_id


def has_deferred_block(text: str | None) -> bool:
    """Check whether text carries a deferred citation block."""
    return bool(text) and CITATION_DATA_START in text


def find_deferred_block(text: str) -> tuple[int, int, int, int] | None:
    """Locate the sentinel block.

    Returns:
        (block_start, json_start, json_end, block_end) or None. A missing
        end sentinel makes the block run to the end of the text.
    """
    start = text.find(CITATION_DATA_START)
    if start == -1:
        return None
    json_start = start + len(CITATION_DATA_START)
    end = text.find(CITATION_DATA_END, json_start)
    if end == -1:
        return start, json_start, len(text), len(text)
    return start, json_start, end, end + len(CITATION_DATA_END)


def _strip_code_fence(payload: str) -> str:
    """Remove a markdown code fence around the JSON payload."""
    return _CODE_FENCE_CLOSE.sub("", _CODE_FENCE_OPEN.sub("", payload.strip()))


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _coerce_line_ids(value: Any) -> tuple[int, ...] | None:
    if isinstance(value, str):
        return parse_line_ids(value)
    if isinstance(value, list | tuple):
        ids = {n for n in (_as_int(v) for v in value) if n is not None and n > 0}
        return tuple(sorted(ids)) if ids else None
    number = _as_int(value)
    return (number,) if number else None


def _coerce_timestamps(value: Any) -> Timestamps | None:
    if not isinstance(value, Mapping):
        return None
    start = value.get("start_time", value.get("s"))
    end = value.get("end_time", value.get("e"))
    if start is None and end is None:
        return None
    return Timestamps(start=_as_text(start), end=_as_text(end))


def _expand_entry(raw: Mapping[str, Any], source_id: str | None = None) -> DeferredEntry:
    data = {COMPACT_KEYS.get(key, key): value for key, value in raw.items()}
    page_id = data.get("page_id", data.get("start_page_id"))
    return DeferredEntry(
        id=_as_int(data.get("id")),
        source_id=_as_text(data.get("attachment_id")) or source_id,
        full_phrase=_as_text(data.get("full_phrase")),
        anchor_text=_as_text(data.get("anchor_text")),
        reasoning=_as_text(data.get("reasoning")),
        page_id=_as_text(page_id),
        page_number=_as_int(data.get("page_number")),
        line_ids=_coerce_line_ids(data.get("line_ids")),
        timestamps=_coerce_timestamps(data.get("timestamps")),
    )


def _is_empty(entry: DeferredEntry) -> bool:
    return entry.id is None and entry.full_phrase is None and entry.anchor_text is None


def _entries_from_json(parsed: Any) -> list[DeferredEntry]:
    """Entries from the grouped object, a flat array, or a single object.

    Entries with no id, phrase or anchor text are dropped.
    """
    entries: list[DeferredEntry] = []
    if isinstance(parsed, Mapping):
        groups = {
            key: value
            for key, value in parsed.items()
            if isinstance(value, list) and any(isinstance(item, Mapping) for item in value)
        }
        if groups:
            # Other values next to the groups are metadata
            entries = [
                _expand_entry(item, str(source_id))
                for source_id, items in groups.items()
                for item in items
                if isinstance(item, Mapping)
            ]
        else:
            entries = [_expand_entry(parsed)]
    elif isinstance(parsed, list):
        entries = [_expand_entry(item) for item in parsed if isinstance(item, Mapping)]

    kept = [entry for entry in entries if not _is_empty(entry)]
    if len(kept) < len(entries):
        logger.debug(f"DEFERRED_EMPTY_ENTRIES_DROPPED count={len(entries) - len(kept)}")
    return kept


def _visible_text(text: str, block_start: int, block_end: int) -> str:
    before = text[:block_start].rstrip()
    after = text[block_end:].strip()
    if before and after:
        return f"{before}\n\n{after}"
    return before or after


def _failed(result: DeferredParseResult, payload: str, reason: str) -> DeferredParseResult:
    logger.warning(
        f"DEFERRED_JSON_UNRECOVERABLE error={reason} "
        f"payload={sanitize_for_log(payload, 200)}"
    )
    result.success = False
    result.error = f"Failed to parse citation JSON: {reason}"
    return result


def parse_deferred_response(text: str | None) -> DeferredParseResult:
    """Split a deferred-format response into visible prose and entries.

    Never raises: JSON that cannot be decoded even after repair yields
    ``success=False`` with ``error`` set and no entries.

    Args:
        text: Full model response

    Returns:
        DeferredParseResult
    """
    if not text:
        return DeferredParseResult(visible_text="")

    block = find_deferred_block(text)
    if block is None:
        return DeferredParseResult(visible_text=text.strip())

    block_start, json_start, json_end, block_end = block
    result = DeferredParseResult(
        visible_text=_visible_text(text, block_start, block_end),
        block_span=(block_start, block_end),
    )

    payload = _strip_code_fence(text[json_start:json_end])
    if not payload:
        return result

    try:
        parsed = json.loads(payload)
    except json.JSONDecodeError as e:
        logger.warning(
            f"DEFERRED_JSON_INVALID error={e.msg} position={e.pos}, attempting repair"
        )
        result.repaired = True
        try:
            parsed = json.loads(repair_json(payload))
        except json.JSONDecodeError as repair_e:
            return _failed(result, payload, repair_e.msg)

    if not isinstance(parsed, Mapping | list):
        return _failed(result, payload, "not a JSON object or array")

    result.entries = _entries_from_json(parsed)
    logger.debug(
        f"DEFERRED_BLOCK_PARSED entries={len(result.entries)} "
        f"sources={len({e.source_id for e in result.entries})}"
    )
    return result


def deferred_entry_to_citation(entry: DeferredEntry, ordinal: int) -> Citation:
    """Convert a deferred entry to the same Citation the inline format yields."""
    page_number, start_page_id = parse_page_location(entry.page_id)
    if entry.page_number is not None and entry.page_number > 0:
        page_number = entry.page_number
    return Citation(
        kind=CitationKind.DOCUMENT,
        source_id=entry.source_id,
        page_number=page_number,
        start_page_id=start_page_id,
        full_phrase=entry.full_phrase,
        anchor_text=entry.anchor_text,
        line_ids=entry.line_ids,
        timestamps=entry.timestamps,
        ordinal=ordinal,
        reasoning=entry.reasoning,
    )


def deferred_marker_ids(text: str) -> list[int]:
    """Marker ids in reading order, repeats included."""
    return [int(m.group(1)) for m in DEFERRED_MARKER.finditer(text or "")]


def replace_deferred_markers(
    text: str,
    entries_by_id: Mapping[int, DeferredEntry] | None = None,
    show_anchor_text: bool = False,
    replacer: Callable[[int, DeferredEntry | None], str] | None = None,
) -> str:
    """Replace ``[n]`` markers.

    With ``replacer`` each marker becomes ``replacer(id, entry)``.
    Otherwise markers are removed, or replaced by the entry's anchor
    text when ``show_anchor_text`` is set.
    """
    entries_by_id = entries_by_id or {}

    def _replace(match: re.Match[str]) -> str:
        marker_id = int(match.group(1))
        entry = entries_by_id.get(marker_id)
        if replacer is not None:
            return replacer(marker_id, entry)
        if show_anchor_text and entry is not None and entry.anchor_text:
            return entry.anchor_text
        return ""

    return DEFERRED_MARKER.sub(_replace, text)
