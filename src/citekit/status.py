"""Status engine: verification outcome -> one of four display statuses."""

import logging
from dataclasses import dataclass
from enum import Enum

from citekit.models.citation import Citation
from citekit.models.verification import SearchOutcome, VerificationResult

logger = logging.getLogger(__name__)


class StatusKind(str, Enum):
    """The four mutually exclusive display statuses."""

    VERIFIED = "verified"
    PARTIAL = "partial"
    MISS = "not_found"
    PENDING = "pending"


class LinePosition(str, Enum):
    START = "start"
    EARLY = "early"
    MIDDLE = "middle"
    LATE = "late"
    END = "end"


PARTIAL_OUTCOMES = frozenset(
    {
        SearchOutcome.FOUND_ON_OTHER_PAGE,
        SearchOutcome.FOUND_ON_OTHER_LINE,
        SearchOutcome.PARTIAL_TEXT_FOUND,
        SearchOutcome.FIRST_WORD_FOUND,
        SearchOutcome.FOUND_ANCHOR_TEXT_ONLY,
        SearchOutcome.FOUND_PHRASE_MISSED_ANCHOR_TEXT,
    }
)

# No verdict yet: the service is still working or skipped the citation
PENDING_OUTCOMES = frozenset(
    {
        SearchOutcome.PENDING,
        SearchOutcome.LOADING,
        SearchOutcome.TIMESTAMP_WIP,
        SearchOutcome.SKIPPED,
    }
)


@dataclass(frozen=True)
class CitationStatus:
    """Derived display status. Never stored; always recomputed."""

    kind: StatusKind

    @property
    def is_verified(self) -> bool:
        return self.kind is StatusKind.VERIFIED

    @property
    def is_partial(self) -> bool:
        return self.kind is StatusKind.PARTIAL

    @property
    def is_miss(self) -> bool:
        return self.kind is StatusKind.MISS

    @property
    def is_pending(self) -> bool:
        return self.kind is StatusKind.PENDING

    @property
    def found_something(self) -> bool:
        """Verified or partial: some form of the claim was located."""
        return self.kind in (StatusKind.VERIFIED, StatusKind.PARTIAL)


def get_citation_status(result: VerificationResult | None) -> CitationStatus:
    """Classify a verification result.

    Priority, highest first: pending, partial, miss, verified. Written as
    an explicit chain so the override order reads top to bottom.
    """
    outcome = result.outcome if result is not None else None

    if outcome is None or outcome in PENDING_OUTCOMES:
        kind = StatusKind.PENDING
    elif outcome in PARTIAL_OUTCOMES:
        kind = StatusKind.PARTIAL
    elif outcome is SearchOutcome.NOT_FOUND:
        kind = StatusKind.MISS
    elif outcome is SearchOutcome.FOUND:
        kind = StatusKind.VERIFIED
    else:
        logger.warning(f"UNHANDLED_SEARCH_OUTCOME outcome={outcome} treated_as=pending")
        kind = StatusKind.PENDING
    return CitationStatus(kind)


def status_from_flags(
    is_pending: bool = False,
    is_partial: bool = False,
    is_miss: bool = False,
    is_verified: bool = False,
) -> CitationStatus:
    """Resolve caller-held flags that may overlap.

    Pending overrides everything, partial overrides miss, and miss
    overrides verified. No flag set means pending.
    """
    if is_pending:
        kind = StatusKind.PENDING
    elif is_partial:
        kind = StatusKind.PARTIAL
    elif is_miss:
        kind = StatusKind.MISS
    elif is_verified:
        kind = StatusKind.VERIFIED
    else:
        kind = StatusKind.PENDING
    return CitationStatus(kind)


def humanize_line_position(line_id: int, total_lines: int | None) -> LinePosition | None:
    """Describe where on a page a line sits, by fraction of the page.

    Returns None when the page's line count is unknown.
    """
    if not total_lines or total_lines <= 0:
        return None

    ratio = line_id / total_lines
    if ratio < 0.2:
        return LinePosition.START
    if ratio < 0.33:
        return LinePosition.EARLY
    if ratio < 0.66:
        return LinePosition.MIDDLE
    if ratio < 0.8:
        return LinePosition.LATE
    return LinePosition.END


def format_page_location(
    citation: Citation,
    result: VerificationResult | None,
    show_page_number: bool = True,
    show_line_position: bool = True,
) -> str:
    """Short location text such as ``p.3`` or ``p.3 (expected start, found end)``.

    The verified page wins over the cited one. Line positions are only
    added for found-on-other-line outcomes whose humanized positions
    differ.
    """
    if not show_page_number:
        return ""

    page = None
    if result is not None and result.verified_page_number is not None:
        page = result.verified_page_number
    if page is None or page <= 0:
        page = citation.page_number
    if not page or page <= 0:
        return ""

    location = f"p.{page}"
    if (
        show_line_position
        and result is not None
        and result.outcome is SearchOutcome.FOUND_ON_OTHER_LINE
        and citation.line_ids
        and result.verified_line_ids
    ):
        expected = humanize_line_position(citation.line_ids[0], result.total_lines_on_page)
        found = humanize_line_position(result.verified_line_ids[0], result.total_lines_on_page)
        if expected and found and expected is not found:
            location += f" (expected {expected.value}, found {found.value})"
    return location
