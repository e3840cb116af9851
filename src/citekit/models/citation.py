"""Citation value objects recovered from model output."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class CitationKind(str, Enum):
    """What a citation points at."""

    DOCUMENT = "document"
    URL = "url"


@dataclass(frozen=True)
class Timestamps:
    """Start/end offsets for audio or video sources (e.g. "00:01:05.000")."""

    start: str | None = None
    end: str | None = None

    def to_dict(self) -> dict[str, str]:
        result: dict[str, str] = {}
        if self.start is not None:
            result["start_time"] = self.start
        if self.end is not None:
            result["end_time"] = self.end
        return result


@dataclass(frozen=True)
class Citation:
    """One claim recovered from model output.

    Citations are immutable and hold no reference to the text they came
    from. Identity for verification purposes is the citation key derived
    from the identifying fields (see ``citekit.keys``); ``ordinal``,
    ``reasoning`` and ``value`` never take part in it.
    """

    kind: CitationKind = CitationKind.DOCUMENT
    source_id: str | None = None
    page_number: int | None = None
    # Normalized page-location token, e.g. "page_number_2_index_1"
    start_page_id: str | None = None
    full_phrase: str | None = None
    anchor_text: str | None = None
    line_ids: tuple[int, ...] | None = None
    timestamps: Timestamps | None = None
    ordinal: int = 1
    reasoning: str | None = None
    value: str | None = None

    # URL citations
    url: str | None = None
    domain: str | None = None
    title: str | None = None

    @property
    def is_url(self) -> bool:
        return self.kind is CitationKind.URL

    @property
    def origin(self) -> str | None:
        """Source id for documents, URL for web citations."""
        return self.url if self.is_url else self.source_id

    @property
    def display_text(self) -> str:
        """Best short text for inline display."""
        return self.anchor_text or self.full_phrase or str(self.ordinal)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict, omitting absent fields."""
        result: dict[str, Any] = {"kind": self.kind.value, "ordinal": self.ordinal}
        fields: dict[str, Any] = {
            "source_id": self.source_id,
            "page_number": self.page_number,
            "start_page_id": self.start_page_id,
            "full_phrase": self.full_phrase,
            "anchor_text": self.anchor_text,
            "line_ids": list(self.line_ids) if self.line_ids else None,
            "timestamps": self.timestamps.to_dict() if self.timestamps else None,
            "reasoning": self.reasoning,
            "value": self.value,
            "url": self.url,
            "domain": self.domain,
            "title": self.title,
        }
        result.update({k: v for k, v in fields.items() if v is not None})
        return result
