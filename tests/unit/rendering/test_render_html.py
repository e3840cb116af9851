"""Unit tests for the HTML render target."""

import pytest

from citekit.keys import citation_key
from citekit.models.citation import Citation
from citekit.models.verification import VerificationResult
from citekit.rendering.html import HtmlOutput, HtmlTarget, escape_html
from citekit.rendering.html_styles import generate_style_block, inline_style
from citekit.status import StatusKind


@pytest.fixture
def target() -> HtmlTarget:
    return HtmlTarget()


class TestHtmlMarkers:
    """Tests for citation spans."""

    def test_status_classes_and_key(
        self,
        target: HtmlTarget,
        inline_output: str,
        inline_citations: list[Citation],
        mixed_verifications: dict[str, VerificationResult],
    ) -> None:
        """Spans carry status classes and the citation key."""
        output = target.render(inline_output, mixed_verifications)
        first, second = (citation_key(c) for c in inline_citations)
        assert f'<span class="dc-citation dc-verified" data-citation-key="{first}">' in output.content
        assert f'<span class="dc-citation dc-not-found" data-citation-key="{second}">' in output.content
        assert '<span class="dc-indicator">✓</span>' in output.content

    def test_tooltip(
        self, target: HtmlTarget, inline_output: str, mixed_verifications: dict[str, VerificationResult]
    ) -> None:
        """Tooltips show status, source and quote."""
        content = target.render(inline_output, mixed_verifications).content
        assert '<span class="dc-tooltip-status">✓ Verified</span>' in content
        assert '<span class="dc-tooltip-source">Annual Report — p.3</span>' in content
        assert '<span class="dc-tooltip-quote">"Revenue grew 45%"</span>' in content

    def test_tooltips_disabled(self, target: HtmlTarget, inline_output: str) -> None:
        """Tooltips can be turned off."""
        assert "dc-tooltip" not in target.render(inline_output, include_tooltips=False).content

    def test_underline_alias(self, target: HtmlTarget, inline_output: str) -> None:
        """'linter' selects the underline variant."""
        content = target.render(inline_output, variant="linter").content
        assert 'class="dc-citation dc-pending dc-linter"' in content
        assert '<span class="dc-citation-text">grew 45%</span>' in content

    def test_chip(self, target: HtmlTarget, inline_output: str) -> None:
        """Chips show anchor text followed by the indicator."""
        content = target.render(inline_output, variant="chip").content
        assert "dc-chip" in content

    def test_superscript(self, target: HtmlTarget, inline_output: str) -> None:
        """Superscript digits replace the bracketed number."""
        assert '<span class="dc-citation-text">¹</span>' in target.render(inline_output, variant="superscript").content

    def test_quote_escaped(self, target: HtmlTarget) -> None:
        """Model text inside attributes and tooltips is escaped."""
        content = target.render("x<cite attachment_id='d' full_phrase='a <b> & \"c\"' />").content
        assert "a &lt;b&gt; &amp; &quot;c&quot;" in content
        assert "<b>" not in content

    def test_proof_link(self, target: HtmlTarget, inline_output: str, inline_citations: list[Citation]) -> None:
        """A proof URL wraps the marker in a link and a data attribute."""
        content = target.render(inline_output, proof_base_url="https://proofs.example.com").content
        key = citation_key(inline_citations[0])
        assert f'data-proof-url="https://proofs.example.com/p/{key}"' in content
        assert 'class="dc-citation-link"' in content
        assert "dc-tooltip-image" in content

    def test_class_prefix(self, target: HtmlTarget, inline_output: str) -> None:
        """Every class uses the configured prefix."""
        output = target.render(inline_output, class_prefix="cite-")
        assert 'class="cite-citation cite-pending"' in output.content
        assert output.styles is not None
        assert ".cite-citation {" in output.styles


class TestHtmlStyles:
    """Tests for style output."""

    def test_style_block_included(
        self, target: HtmlTarget, inline_output: str, mixed_verifications: dict[str, VerificationResult]
    ) -> None:
        """A style block precedes the content."""
        output = target.render(inline_output, mixed_verifications)
        assert isinstance(output, HtmlOutput)
        assert output.styles is not None
        assert output.styles.startswith("<style>")
        assert output.full.startswith(output.styles)
        assert output.html == output.content

    def test_inline_styles(self, target: HtmlTarget, inline_output: str) -> None:
        """Inline styles replace the style block."""
        output = target.render(inline_output, inline_styles=True)
        assert output.styles is None
        assert 'style="color: #6b7280;"' in output.content

    def test_no_styles_without_citations(self, target: HtmlTarget) -> None:
        """Marker-free text gets no style block."""
        output = target.render("Plain text.")
        assert output.styles is None
        assert output.full == "Plain text."

    def test_auto_theme_media_query(self) -> None:
        """The auto theme adds a dark-mode media query."""
        assert "@media (prefers-color-scheme: dark)" in generate_style_block("dc-", "auto")
        assert "@media" not in generate_style_block("dc-", "light")

    def test_inline_underline_style(self) -> None:
        """Underline styles depend on status."""
        assert "underline wavy" in inline_style(StatusKind.MISS, "underline")
        assert "underline dotted" in inline_style(StatusKind.PENDING, "linter")


class TestHtmlSources:
    """Tests for the sources list."""

    def test_sources_list(
        self, target: HtmlTarget, inline_output: str, mixed_verifications: dict[str, VerificationResult]
    ) -> None:
        """Sources render as a list with labels and locations."""
        sources = target.render(inline_output, mixed_verifications).sources
        assert sources is not None
        assert sources.startswith('<div class="dc-sources">')
        assert "<li>[1] Annual Report — p.3</li>" in sources
        assert "<li>[2] Source 2 — p.5</li>" in sources

    def test_empty_input(self, target: HtmlTarget) -> None:
        """Empty input renders to empty output."""
        output = target.render("")
        assert output.full == ""
        assert output.styles is None


class TestEscapeHtml:
    """Tests for escape_html."""

    def test_escapes(self) -> None:
        """Ampersand first, then angle brackets and quotes."""
        assert escape_html('<a href="x">&amp;</a>') == "&lt;a href=&quot;x&quot;&gt;&amp;amp;&lt;/a&gt;"
