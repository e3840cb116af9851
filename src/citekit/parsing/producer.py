"""Citation producer: one entry point over both citation formats.

``parse_document`` runs every strategy over the text and merges their
markers by position into a single token stream. Downstream code (keys,
status, rendering) only sees ``Citation`` records and tokens and never
knows which format a citation came from.

Numbering follows reading order across the whole document, whatever the
format. A deferred ``[n]`` that appears several times is one citation
with one ordinal; entries in the deferred block that the prose never
references are numbered after all referenced ones.
"""

import dataclasses
import logging
from collections.abc import Callable, Hashable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol

from citekit.keys import citation_key
from citekit.models.citation import Citation
from citekit.parsing.attributes import parse_attributes
from citekit.parsing.builder import build_citation
from citekit.parsing.deferred import (
    DEFERRED_MARKER,
    DeferredParseResult,
    deferred_entry_to_citation,
    has_deferred_block,
    parse_deferred_response,
)
from citekit.parsing.scanner import scan_cite_tags
from citekit.parsing.structured import extract_structured_citations, iter_strings

logger = logging.getLogger(__name__)

CitationFactory = Callable[[int], Citation]


@dataclass(frozen=True)
class TextToken:
    """Literal text between markers."""

    text: str


@dataclass(frozen=True)
class MarkerToken:
    """A citation marker occurrence."""

    citation: Citation
    raw: str
    # Visible text wrapped by a paired <cite>...</cite> marker
    inner_text: str | None = None
    format: str = "inline"


Token = TextToken | MarkerToken


@dataclass(frozen=True)
class MarkerSpan:
    """A marker located by a strategy, before numbering."""

    start: int
    end: int
    raw: str
    # Markers with equal identity share one citation
    identity: Hashable
    factory: CitationFactory
    inner_text: str | None = None
    format: str = "inline"


@dataclass
class StrategyResult:
    markers: list[MarkerSpan] = field(default_factory=list)
    # Spans dropped from display text (the deferred data block)
    hidden: list[tuple[int, int]] = field(default_factory=list)
    # Citations listed by the strategy but never referenced in the prose
    unreferenced: list[tuple[Hashable, CitationFactory]] = field(default_factory=list)
    deferred: DeferredParseResult | None = None


class CitationStrategy(Protocol):
    """A way of finding citation markers in text."""

    name: str

    def find(self, text: str) -> StrategyResult:
        """Locate markers in ``text``. Must never raise."""
        ...


class InlineTagStrategy:
    """``<cite ... />`` tags carrying their attributes inline."""

    name = "inline"

    def find(self, text: str) -> StrategyResult:
        markers = []
        for tag in scan_cite_tags(text):
            attrs = parse_attributes(tag.attribute_text)
            markers.append(
                MarkerSpan(
                    start=tag.start,
                    end=tag.end,
                    raw=tag.raw,
                    identity=("inline", tag.start),
                    factory=lambda ordinal, attrs=attrs: build_citation(attrs, ordinal),
                    inner_text=tag.inner_text,
                    format=self.name,
                )
            )
        return StrategyResult(markers=markers)


class DeferredBlockStrategy:
    """``[n]`` markers resolved against a trailing JSON data block."""

    name = "deferred"

    def find(self, text: str) -> StrategyResult:
        if not has_deferred_block(text):
            return StrategyResult()

        parsed = parse_deferred_response(text)
        result = StrategyResult(deferred=parsed)
        if parsed.block_span:
            result.hidden.append(parsed.block_span)
        entries = parsed.entries_by_id
        block_start = parsed.block_span[0] if parsed.block_span else len(text)

        for match in DEFERRED_MARKER.finditer(text, 0, block_start):
            marker_id = int(match.group(1))
            entry = entries.get(marker_id)
            if entry is None:
                # Bracketed numbers without an entry stay ordinary text
                continue
            result.markers.append(
                MarkerSpan(
                    start=match.start(),
                    end=match.end(),
                    raw=match.group(0),
                    identity=("deferred", marker_id),
                    factory=lambda ordinal, entry=entry: deferred_entry_to_citation(entry, ordinal),
                    format=self.name,
                )
            )

        for index, entry in enumerate(parsed.entries):
            identity = ("deferred", entry.id) if entry.id is not None else ("deferred-unnumbered", index)
            result.unreferenced.append(
                (identity, lambda ordinal, entry=entry: deferred_entry_to_citation(entry, ordinal))
            )
        return result


DEFAULT_STRATEGIES: tuple[CitationStrategy, ...] = (InlineTagStrategy(), DeferredBlockStrategy())


@dataclass
class ParsedDocument:
    """Token stream and citations recovered from one text."""

    tokens: list[Token] = field(default_factory=list)
    citations: list[Citation] = field(default_factory=list)
    deferred: DeferredParseResult | None = None

    @property
    def display_text(self) -> str:
        """Text with every marker and the deferred block removed."""
        parts = []
        for token in self.tokens:
            if isinstance(token, TextToken):
                parts.append(token.text)
            elif token.inner_text:
                parts.append(token.inner_text)
        return "".join(parts)

    @property
    def markers(self) -> list[MarkerToken]:
        return [t for t in self.tokens if isinstance(t, MarkerToken)]


def _inside(span: MarkerSpan, hidden: Sequence[tuple[int, int]]) -> bool:
    return any(start <= span.start < end for start, end in hidden)


def parse_document(
    text: str | None,
    strategies: Sequence[CitationStrategy] = DEFAULT_STRATEGIES,
) -> ParsedDocument:
    """Parse text in any supported citation format.

    Args:
        text: Model output
        strategies: Marker finders to run (inline tags and deferred block
            by default)

    Returns:
        ParsedDocument whose citations are ordered by ordinal
    """
    if not text:
        return ParsedDocument()

    results = [strategy.find(text) for strategy in strategies]
    hidden = sorted(span for r in results for span in r.hidden)
    deferred = next((r.deferred for r in results if r.deferred is not None), None)

    # Earlier start wins; at equal start the earlier strategy wins
    candidates = sorted(
        (
            (span.start, priority, span)
            for priority, r in enumerate(results)
            for span in r.markers
            if not _inside(span, hidden)
        ),
        key=lambda item: (item[0], item[1]),
    )

    doc = ParsedDocument(deferred=deferred)
    by_identity: dict[Hashable, Citation] = {}
    pending_text: list[str] = []
    after_hidden = False

    def _emit_text(segment: str) -> None:
        nonlocal after_hidden
        if after_hidden:
            # Whitespace around the hidden block collapses to one paragraph break
            segment = segment.lstrip()
            if segment:
                after_hidden = False
                if pending_text or doc.tokens:
                    segment = "\n\n" + segment
        if segment:
            pending_text.append(segment)

    def _flush_text() -> None:
        if pending_text:
            doc.tokens.append(TextToken("".join(pending_text)))
            pending_text.clear()

    events: list[tuple[int, int, MarkerSpan | None]] = [
        (start, end, None) for start, end in hidden
    ]
    events.extend((span.start, span.end, span) for _, _, span in candidates)
    events.sort(key=lambda e: (e[0], e[2] is not None))

    cursor = 0
    for start, end, span in events:
        if start < cursor:
            # Overlaps something already consumed (e.g. "[1]" inside a tag)
            continue
        _emit_text(text[cursor:start])
        cursor = end
        if span is None:
            if pending_text:
                pending_text[-1] = pending_text[-1].rstrip()
                if not pending_text[-1]:
                    pending_text.pop()
            after_hidden = True
            continue

        citation = by_identity.get(span.identity)
        if citation is None:
            citation = span.factory(len(doc.citations) + 1)
            by_identity[span.identity] = citation
            doc.citations.append(citation)
        _flush_text()
        doc.tokens.append(
            MarkerToken(
                citation=citation,
                raw=span.raw,
                inner_text=span.inner_text,
                format=span.format,
            )
        )
        after_hidden = False

    _emit_text(text[cursor:])
    _flush_text()

    for r in results:
        for identity, factory in r.unreferenced:
            if identity not in by_identity:
                citation = factory(len(doc.citations) + 1)
                by_identity[identity] = citation
                doc.citations.append(citation)

    if doc.citations:
        logger.info(
            f"CITATIONS_PARSED count={len(doc.citations)} markers={len(doc.markers)} "
            f"deferred={deferred is not None}"
        )
    return doc


def extract_citations(output: str | Mapping[str, Any] | Sequence[Any] | None) -> list[Citation]:
    """All citations in model output, ordered by ordinal.

    ``output`` is model text, or structured output (a dict or list). For
    structured output, citation objects come first, then markers found in
    any of its string values. A citation found both ways is kept once.
    """
    if output is None or isinstance(output, str):
        return parse_document(output).citations

    citations = extract_structured_citations(output)
    seen = {citation_key(c) for c in citations}
    for text in iter_strings(output):
        for citation in parse_document(text).citations:
            key = citation_key(citation)
            if key in seen:
                continue
            seen.add(key)
            citations.append(dataclasses.replace(citation, ordinal=len(citations) + 1))

    logger.debug(f"STRUCTURED_OUTPUT_PARSED citations={len(citations)}")
    return citations
