"""Build Citation records from normalized tag attributes."""

import logging
import re
from collections.abc import Mapping
from urllib.parse import urlparse

from citekit.core.config import get_settings
from citekit.models.citation import Citation, CitationKind, Timestamps

logger = logging.getLogger(__name__)

# "2_1" -> page 2, index 1
_COMPACT_PAGE = re.compile(r"^(\d+)_(\d+)$")
# "page_number_2_index_1", "page_id_2_index_1", "pageNumber2_index_1"
_LEGACY_PAGE = re.compile(r"page[_a-zA-Z]*?(\d+)_index_(\d+)", re.IGNORECASE)
# "page_number_2"
_LEGACY_PAGE_ONLY = re.compile(r"page[_a-zA-Z]*?(\d+)\b", re.IGNORECASE)
_FIRST_INT = re.compile(r"\d+")
_RANGE = re.compile(r"(\d+)\s*-\s*(\d+)")
_BRACKETS = re.compile(r"[\[\](){}]")


def _page_or_none(page: int) -> int | None:
    return page if page > 0 else None


def parse_page_location(token: str | None) -> tuple[int | None, str | None]:
    """Parse a page-location token.

    Accepts the compact ``"<page>_<index>"`` form and the legacy
    ``"page_number_<page>_index_<index>"`` form. ``"0_0"`` is how models
    write the first page and resolves to page 1; any other zero page is
    absent.

    Returns:
        (page number, normalized "page_number_<p>_index_<i>" token)
    """
    if not token:
        return None, None
    token = token.strip()

    match = _COMPACT_PAGE.match(token) or _LEGACY_PAGE.search(token)
    if match:
        page, index = int(match.group(1)), int(match.group(2))
        if page == 0 and index == 0:
            page = 1
        return _page_or_none(page), f"page_number_{page}_index_{index}"

    match = _LEGACY_PAGE_ONLY.search(token)
    if match:
        return _page_or_none(int(match.group(1))), token

    logger.debug(f"PAGE_TOKEN_UNPARSED token={token[:40]!r}")
    return None, None


def parse_page_number(
    explicit: str | None, token: str | None
) -> tuple[int | None, str | None]:
    """Resolve the page: a positive explicit page number wins over the token."""
    derived, start_page_id = parse_page_location(token)
    if explicit:
        match = _FIRST_INT.search(explicit)
        if match and int(match.group(0)) > 0:
            return int(match.group(0)), start_page_id
    return derived, start_page_id


def _sample_range(start: int, end: int, samples: int) -> list[int]:
    """Evenly spaced points of a range, always including both ends."""
    points = [start]
    inner = min(samples - 2, end - start - 1)
    if inner > 0:
        step = max(1, (end - start) // (inner + 1))
        points.extend(
            start + step * k for k in range(1, inner + 1) if start + step * k < end
        )
    points.append(end)
    return points


def parse_line_ids(
    text: str | None,
    max_range: int | None = None,
    samples: int | None = None,
) -> tuple[int, ...] | None:
    """Parse a line-id list such as ``"1-3, 10-12, 20"``.

    Each comma-separated token is a single integer or an inclusive
    ``start-end`` range. Invalid tokens are dropped, the result is sorted
    and deduplicated, and an empty result is None. A descending range
    keeps only its start. Ranges wider than ``max_range`` are sampled.

    Args:
        text: Raw attribute value
        max_range: Widest range expanded in full (default from Settings)
        samples: Points kept from a sampled range (default from Settings)

    Returns:
        Ascending unique positive line ids, or None
    """
    if not text:
        return None

    settings = get_settings()
    max_range = max_range or settings.max_line_range
    samples = samples or settings.line_range_samples

    ids: set[int] = set()
    for token in _BRACKETS.sub("", text).split(","):
        token = token.strip()
        if not token:
            continue
        range_match = _RANGE.fullmatch(token)
        if range_match:
            start, end = int(range_match.group(1)), int(range_match.group(2))
            if start > end:
                ids.add(start)
            elif end - start + 1 > max_range:
                logger.debug(f"LINE_RANGE_SAMPLED start={start} end={end} samples={samples}")
                ids.update(_sample_range(start, end, samples))
            else:
                ids.update(range(start, end + 1))
        elif token.isdigit():
            ids.add(int(token))

    ids.discard(0)
    return tuple(sorted(ids)) if ids else None


def parse_timestamps(attrs: Mapping[str, str]) -> Timestamps | None:
    """Read ``timestamps="start-end"`` or separate start/end attributes."""
    start = attrs.get("start_time") or None
    end = attrs.get("end_time") or None
    combined = attrs.get("timestamps")
    if combined and not (start or end):
        first, sep, second = combined.partition("-")
        start = first.strip() or None
        end = second.strip() or None
    if start is None and end is None:
        return None
    return Timestamps(start=start, end=end)


def _text(attrs: Mapping[str, str], key: str) -> str | None:
    value = attrs.get(key)
    if value is None or not value.strip():
        return None
    return value


def domain_from_url(url: str) -> str | None:
    """Host without a leading "www.", or None for unparseable URLs."""
    try:
        host = urlparse(url).netloc
    except ValueError:
        return None
    if not host:
        return None
    return host[4:] if host.startswith("www.") else host


def build_citation(attrs: Mapping[str, str], ordinal: int) -> Citation:
    """Build a Citation from a normalized attribute map.

    Args:
        attrs: Canonical attribute name -> value (see ``parse_attributes``)
        ordinal: 1-based position among the citations of this parse

    Returns:
        Immutable Citation
    """
    source_id = _text(attrs, "attachment_id")
    url = _text(attrs, "url")
    page_number, start_page_id = parse_page_number(
        attrs.get("page_number"), attrs.get("start_page_id")
    )

    kind = CitationKind.URL if url and not source_id else CitationKind.DOCUMENT
    domain = _text(attrs, "domain")
    if kind is CitationKind.URL and domain is None:
        domain = domain_from_url(url)

    return Citation(
        kind=kind,
        source_id=source_id,
        page_number=page_number,
        start_page_id=start_page_id,
        full_phrase=_text(attrs, "full_phrase"),
        anchor_text=_text(attrs, "anchor_text"),
        line_ids=parse_line_ids(attrs.get("line_ids")),
        timestamps=parse_timestamps(attrs),
        ordinal=ordinal,
        reasoning=_text(attrs, "reasoning"),
        value=_text(attrs, "value"),
        url=url,
        domain=domain,
        title=_text(attrs, "title"),
    )
