"""Unit tests for citation tag normalization."""

from citekit.parsing.normalize import canonical_tag, normalize_citations
from citekit.parsing.producer import extract_citations


class TestCanonicalTag:
    """Tests for canonical tag formatting."""

    def test_fixed_attribute_order(self) -> None:
        """Attributes are written in canonical order with single quotes."""
        tag = canonical_tag({"anchor_text": "b", "full_phrase": "a b", "attachment_id": "d"})
        assert tag == "<cite attachment_id='d' full_phrase='a b' anchor_text='b' />"

    def test_quotes_escaped(self) -> None:
        """Single quotes inside values are backslash-escaped."""
        assert canonical_tag({"full_phrase": "the CEO's view"}) == "<cite full_phrase='the CEO\\'s view' />"

    def test_line_ids_expanded(self) -> None:
        """Line id ranges are written out in full."""
        assert canonical_tag({"line_ids": "5, 1-3"}) == "<cite line_ids='1,2,3,5' />"


class TestNormalizeCitations:
    """Tests for normalize_citations."""

    def test_spellings_and_missing_bracket(self) -> None:
        """Camel case, unquoted numbers and a dropped '<' are all canonicalized."""
        text = 'Claim cite fileId="doc1" pageNumber=3 fullPhrase="Revenue\ngrew" keySpan="grew" lineIds="1-3"> tail'
        assert normalize_citations(text) == (
            "Claim <cite attachment_id='doc1' page_number='3' full_phrase='Revenue grew' "
            "anchor_text='grew' line_ids='1,2,3' /> tail"
        )

    def test_paired_tag_content_moves_before_tag(self) -> None:
        """Text wrapped by a paired tag is placed in front of the tag."""
        text = "<cite attachment_id='a' full_phrase='x'>Revenue grew</cite> today"
        assert normalize_citations(text) == "Revenue grew<cite attachment_id='a' full_phrase='x' /> today"

    def test_bold_markers_removed_from_text(self) -> None:
        """Markdown bold markers are dropped from free-text values."""
        text = "<cite attachment_id='a' full_phrase='**Revenue** grew' />"
        assert normalize_citations(text) == "<cite attachment_id='a' full_phrase='Revenue grew' />"

    def test_idempotent(self, inline_output: str) -> None:
        """Normalizing twice gives the same text as normalizing once."""
        once = normalize_citations(inline_output)
        assert normalize_citations(once) == once

    def test_same_citations_after_normalizing(self, inline_output: str) -> None:
        """Normalized text parses to the same citations."""
        assert extract_citations(normalize_citations(inline_output)) == extract_citations(inline_output)

    def test_text_without_markers(self) -> None:
        """Prose without markers is only trimmed."""
        assert normalize_citations("  Plain text.  ") == "Plain text."
        assert normalize_citations("") == ""
        assert normalize_citations(None) == ""
