"""
Rendering Base Types
====================

Types shared by every render target.

This module provides:
- CitationVariant / IndicatorStyle: how a marker is drawn
- INDICATOR_SETS: status glyphs per indicator style
- RenderOptions: options common to all targets
- RenderedCitation / RenderedOutput: what a render returns
"""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import BaseModel, ConfigDict

from citekit.models.citation import Citation
from citekit.models.verification import VerificationResult
from citekit.status import CitationStatus, StatusKind


class CitationVariant(str, Enum):
    """Visual form of an inline citation token."""

    INLINE = "inline"  # Revenue grew 45%✓
    BRACKETS = "brackets"  # [1✓]
    SUPERSCRIPT = "superscript"  # ¹✓
    FOOTNOTE = "footnote"  # [^1] plus footnote definitions
    ACADEMIC = "academic"  # (Source, p.5)✓
    MINIMAL = "minimal"  # ✓
    CHIP = "chip"  # pill badge (HTML)
    UNDERLINE = "underline"  # status-colored underline (HTML)

    @classmethod
    def _missing_(cls, value: object) -> "CitationVariant | None":
        if isinstance(value, str):
            lowered = value.lower()
            aliases = {"linter": cls.UNDERLINE, "number": cls.SUPERSCRIPT, "bracket": cls.BRACKETS}
            if lowered in aliases:
                return aliases[lowered]
            for member in cls:
                if member.value == lowered:
                    return member
        return None


class IndicatorStyle(str, Enum):
    """Glyph family used for status indicators."""

    CHECK = "check"
    SEMANTIC = "semantic"
    CIRCLE = "circle"
    SQUARE = "square"
    LETTER = "letter"
    WORD = "word"
    NONE = "none"


@dataclass(frozen=True)
class IndicatorSet:
    verified: str
    partial: str
    not_found: str
    pending: str

    def for_status(self, kind: StatusKind) -> str:
        if kind is StatusKind.MISS:
            return self.not_found
        if kind is StatusKind.PARTIAL:
            return self.partial
        if kind is StatusKind.VERIFIED:
            return self.verified
        return self.pending


INDICATOR_SETS: dict[IndicatorStyle, IndicatorSet] = {
    IndicatorStyle.CHECK: IndicatorSet("✓", "⚠", "✗", "◌"),
    IndicatorStyle.SEMANTIC: IndicatorSet("✓", "~", "✗", "…"),
    IndicatorStyle.CIRCLE: IndicatorSet("●", "◐", "○", "◌"),
    IndicatorStyle.SQUARE: IndicatorSet("■", "▪", "□", "▫"),
    IndicatorStyle.LETTER: IndicatorSet("V", "P", "X", "?"),
    IndicatorStyle.WORD: IndicatorSet("✓verified", "⚠partial", "✗missed", "◌pending"),
    IndicatorStyle.NONE: IndicatorSet("", "", "", ""),
}

SUPERSCRIPT_DIGITS = "⁰¹²³⁴⁵⁶⁷⁸⁹"

STATUS_LABELS: dict[StatusKind, str] = {
    StatusKind.VERIFIED: "Verified",
    StatusKind.PARTIAL: "Partial Match",
    StatusKind.MISS: "Not Found",
    StatusKind.PENDING: "Pending",
}

SHORT_STATUS_LABELS: dict[StatusKind, str] = {
    **STATUS_LABELS,
    StatusKind.PARTIAL: "Partial",
}

# Stable per-status keys used in CSS classes and color tables
STATUS_KEYS: dict[StatusKind, str] = {
    StatusKind.VERIFIED: "verified",
    StatusKind.PARTIAL: "partial",
    StatusKind.MISS: "not_found",
    StatusKind.PENDING: "pending",
}


def get_indicator(status: CitationStatus, style: IndicatorStyle = IndicatorStyle.CHECK) -> str:
    """Indicator glyph for a status in the given style."""
    return INDICATOR_SETS[IndicatorStyle(style)].for_status(status.kind)


def to_superscript(number: int) -> str:
    """Render an integer with unicode superscript digits."""
    return "".join(
        SUPERSCRIPT_DIGITS[int(ch)] if ch.isdigit() else ch for ch in str(number)
    )


class RenderOptions(BaseModel):
    """Options shared by every render target.

    Target-specific subclasses add their own fields. Unset fields fall
    back to the target's entry in the render config, then to the class
    defaults.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # None uses the target's default variant
    variant: CitationVariant | None = None
    indicator_style: IndicatorStyle = IndicatorStyle.CHECK
    include_sources: bool = False
    # Human labels by source id
    source_labels: dict[str, str] = {}
    proof_base_url: str | None = None


@dataclass(frozen=True)
class RenderedCitation:
    """A citation paired with its key, verification and derived status."""

    citation: Citation
    key: str
    result: VerificationResult | None
    status: CitationStatus
    proof_url: str | None = None
    proof_image_url: str | None = None

    @property
    def ordinal(self) -> int:
        return self.citation.ordinal


@dataclass
class RenderedOutput:
    """Result of rendering text for one target.

    Attributes:
        content: Text with every marker replaced
        full: content plus the sources section (and any target wrapping)
        sources: Sources/references section, if requested and non-empty
        citations: One entry per citation, ordered by ordinal
        proof_urls: Proof page URL by citation key
    """

    content: str = ""
    full: str = ""
    sources: str | None = None
    citations: list[RenderedCitation] = field(default_factory=list)
    proof_urls: dict[str, str] = field(default_factory=dict)
