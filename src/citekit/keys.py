"""Citation key derivation.

A citation key is the only link between a client-side Citation and the
VerificationResult the verification service computes for it. Both sides
hash the same identifying fields, in the same order:

    KEY_FIELD_ORDER = (origin, page_number, full_phrase, anchor_text,
                       line_ids, timestamp_start, timestamp_end)

``origin`` is the source id for documents and the URL for web citations.
Absent fields hash as empty strings, line ids are comma-joined in
ascending order, and the SHA-1 hex digest is truncated to 16 characters.

The field order is part of the wire contract: changing it silently
breaks correlation with previously issued verification results.
"""

import hashlib
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from citekit.models.citation import Citation, Timestamps
from citekit.models.verification import VerificationResult

logger = logging.getLogger(__name__)

KEY_LENGTH = 16
KEY_SEPARATOR = "|"
KEY_FIELD_ORDER = (
    "origin",
    "page_number",
    "full_phrase",
    "anchor_text",
    "line_ids",
    "timestamp_start",
    "timestamp_end",
)


@dataclass(frozen=True)
class KeyFields:
    """The identifying subset of a citation, in hashing order."""

    origin: str | None = None
    page_number: int | None = None
    full_phrase: str | None = None
    anchor_text: str | None = None
    line_ids: tuple[int, ...] | None = None
    timestamps: Timestamps | None = None

    def parts(self) -> list[str]:
        """Hash input parts, ordered as KEY_FIELD_ORDER."""
        timestamps = self.timestamps or Timestamps()
        return [
            self.origin or "",
            str(self.page_number) if self.page_number is not None else "",
            self.full_phrase or "",
            self.anchor_text or "",
            ",".join(str(n) for n in sorted(self.line_ids or ())),
            timestamps.start or "",
            timestamps.end or "",
        ]

    def key(self) -> str:
        payload = KEY_SEPARATOR.join(self.parts())
        return hashlib.sha1(payload.encode("utf-8")).hexdigest()[:KEY_LENGTH]


def key_fields(citation: Citation) -> KeyFields:
    return KeyFields(
        origin=citation.origin,
        page_number=citation.page_number,
        full_phrase=citation.full_phrase,
        anchor_text=citation.anchor_text,
        line_ids=citation.line_ids,
        timestamps=citation.timestamps,
    )


def verification_key_fields(result: VerificationResult) -> KeyFields:
    return KeyFields(
        origin=result.source_id or result.url,
        page_number=result.page_number,
        full_phrase=result.full_phrase,
        anchor_text=result.anchor_text,
        line_ids=result.line_ids,
        timestamps=result.timestamps,
    )


def citation_key(citation: Citation) -> str:
    """Derive the 16-hex-character key of a citation.

    Sparse citations (no phrase, no anchor text) still get a key; it
    simply never matches a verification result, so they render pending.
    """
    return key_fields(citation).key()


def verification_key(result: VerificationResult) -> str:
    """Derive the key of the citation a verification result echoes."""
    return verification_key_fields(result).key()


def citations_by_key(citations: Iterable[Citation]) -> dict[str, Citation]:
    """Index citations by key; the first citation wins on identical keys."""
    indexed: dict[str, Citation] = {}
    for citation in citations:
        indexed.setdefault(citation_key(citation), citation)
    return indexed


def group_citations_by_source(
    citations: Iterable[Citation],
) -> dict[str, dict[str, Citation]]:
    """Group citations as ``{origin: {key: citation}}`` for verify requests.

    Citations with no origin are skipped: there is nothing to verify
    them against.
    """
    grouped: dict[str, dict[str, Citation]] = {}
    skipped = 0
    for citation in citations:
        origin = citation.origin
        if not origin:
            skipped += 1
            continue
        grouped.setdefault(origin, {}).setdefault(citation_key(citation), citation)
    if skipped:
        logger.debug(f"CITATIONS_WITHOUT_SOURCE skipped={skipped}")
    return grouped
