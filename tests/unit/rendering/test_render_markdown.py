"""Unit tests for the markdown render target."""

import pytest

from citekit.keys import citation_key
from citekit.models.citation import Citation
from citekit.models.verification import VerificationResult
from citekit.rendering.markdown import MarkdownTarget


@pytest.fixture
def target() -> MarkdownTarget:
    return MarkdownTarget()


class TestMarkdownMarkers:
    """Tests for marker variants."""

    def test_default_inline_variant(
        self, target: MarkdownTarget, inline_output: str, mixed_verifications: dict[str, VerificationResult]
    ) -> None:
        """Anchor text plus indicator, linked to the reference anchor."""
        output = target.render(inline_output, mixed_verifications)
        assert output.content == (
            "Revenue grew 45% year over year[grew 45%✓](#ref-1). "
            "Margins were flat[margin✗](#ref-2)."
        )

    def test_brackets(
        self, target: MarkdownTarget, inline_output: str, mixed_verifications: dict[str, VerificationResult]
    ) -> None:
        """Bracketed numbers carry the indicator."""
        output = target.render(inline_output, mixed_verifications, variant="brackets")
        assert "[1✓](#ref-1)" in output.content
        assert "[2✗](#ref-2)" in output.content

    def test_unlinked(self, target: MarkdownTarget, inline_output: str) -> None:
        """link_style='none' drops the anchor links."""
        output = target.render(inline_output, variant="brackets", link_style="none")
        assert "[1◌]" in output.content
        assert "#ref-" not in output.content

    def test_superscript(self, target: MarkdownTarget, inline_output: str) -> None:
        """Superscript digits with indicator."""
        output = target.render(inline_output, variant="superscript")
        assert "[¹◌](#ref-1)" in output.content

    def test_academic(
        self, target: MarkdownTarget, inline_output: str, mixed_verifications: dict[str, VerificationResult]
    ) -> None:
        """Academic markers show the source label and page."""
        output = target.render(
            inline_output, mixed_verifications, variant="academic", source_labels={"doc1": "10-K"}
        )
        assert "[(10-K, p.3)✓](#ref-1)" in output.content

    def test_academic_uses_result_label(
        self, target: MarkdownTarget, inline_output: str, mixed_verifications: dict[str, VerificationResult]
    ) -> None:
        """Without explicit labels the verification label is shown."""
        output = target.render(inline_output, mixed_verifications, variant="academic")
        assert "[(Annual Report, p.3)✓](#ref-1)" in output.content
        assert "[(Source, p.5)✗](#ref-2)" in output.content

    def test_minimal(self, target: MarkdownTarget, inline_output: str) -> None:
        """Minimal markers are only the indicator."""
        output = target.render(inline_output, variant="minimal", link_style="none", include_sources=False)
        assert output.content == "Revenue grew 45% year over year◌. Margins were flat◌."

    def test_unsupported_variant_falls_back(self, target: MarkdownTarget, inline_output: str) -> None:
        """A variant markdown cannot draw uses the default one."""
        output = target.render(inline_output, variant="chip")
        assert "[grew 45%◌](#ref-1)" in output.content

    def test_indicator_style(
        self, target: MarkdownTarget, inline_output: str, mixed_verifications: dict[str, VerificationResult]
    ) -> None:
        """Indicator glyphs follow the requested style."""
        output = target.render(
            inline_output, mixed_verifications, variant="brackets", indicator_style="letter"
        )
        assert "[1V](#ref-1)" in output.content
        assert "[2X](#ref-2)" in output.content


class TestMarkdownReferences:
    """Tests for the references section."""

    def test_grouped_by_status(
        self, target: MarkdownTarget, inline_output: str, mixed_verifications: dict[str, VerificationResult]
    ) -> None:
        """Verified entries come before not-found ones; empty groups are omitted."""
        sources = target.render(inline_output, mixed_verifications).sources
        assert sources is not None
        assert sources.startswith("## References")
        assert sources.index("### Verified") < sources.index("### Not Found")
        assert "### Pending" not in sources
        assert '<a id="ref-1"></a>\n**[1]** ✓ **grew 45%** - p.3\n> "Revenue grew 45%"' in sources

    def test_full_joins_with_rule(
        self, target: MarkdownTarget, inline_output: str, mixed_verifications: dict[str, VerificationResult]
    ) -> None:
        """Full output separates content and references with a rule."""
        output = target.render(inline_output, mixed_verifications)
        assert output.full == f"{output.content}\n\n---\n\n{output.sources}"

    def test_sources_disabled(self, target: MarkdownTarget, inline_output: str) -> None:
        """Without sources full equals content."""
        output = target.render(inline_output, include_sources=False)
        assert output.sources is None
        assert output.full == output.content

    def test_footnote_variant(
        self, target: MarkdownTarget, inline_output: str, mixed_verifications: dict[str, VerificationResult]
    ) -> None:
        """Footnotes use [^N] markers and definitions."""
        output = target.render(inline_output, mixed_verifications, variant="footnote")
        assert "[^1]" in output.content
        assert output.sources is not None
        assert '[^1]: "Revenue grew 45%" - p.3 ✓' in output.sources
        assert "### Verified" not in output.sources

    def test_reasoning_shown(self, target: MarkdownTarget, deferred_output: str) -> None:
        """Reasoning is added when requested."""
        output = target.render(deferred_output, show_reasoning=True)
        assert output.sources is not None
        assert "> *growth figure*" in output.sources
        assert "### Pending" in output.sources

    def test_page_number_hidden(self, target: MarkdownTarget, inline_output: str) -> None:
        """Locations can be turned off."""
        output = target.render(inline_output, show_page_number=False)
        assert output.sources is not None
        assert "p.3" not in output.sources

    def test_custom_heading(self, target: MarkdownTarget, inline_output: str) -> None:
        """The heading is configurable."""
        output = target.render(inline_output, reference_heading="## Sources")
        assert output.sources is not None
        assert output.sources.startswith("## Sources")


class TestMarkdownVerifications:
    """Tests for verification handling."""

    def test_raw_payloads_accepted(self, target: MarkdownTarget, inline_citations: list[Citation], inline_output: str) -> None:
        """Raw service payloads are parsed on the fly."""
        raw = {citation_key(inline_citations[0]): {"status": "found_on_other_page", "verifiedPageNumber": 4}}
        output = target.render(inline_output, raw)
        assert "[grew 45%⚠](#ref-1)" in output.content
        assert output.sources is not None
        assert "### Partial Match" in output.sources
        assert "p.4" in output.sources

    def test_deferred_matches_inline(
        self,
        target: MarkdownTarget,
        deferred_output: str,
        mixed_verifications: dict[str, VerificationResult],
    ) -> None:
        """Deferred output picks up results keyed from inline output."""
        output = target.render(deferred_output, mixed_verifications)
        assert "[grew 45%✓](#ref-1)" in output.content
        assert "<<<CITATION_DATA>>>" not in output.full

    def test_proof_urls(self, target: MarkdownTarget, inline_output: str, inline_citations: list[Citation]) -> None:
        """A proof base URL yields one proof URL per citation key."""
        output = target.render(inline_output, proof_base_url="https://proofs.example.com")
        key = citation_key(inline_citations[0])
        assert output.proof_urls[key] == f"https://proofs.example.com/p/{key}"

    def test_empty_input(self, target: MarkdownTarget) -> None:
        """Empty input renders to empty output."""
        output = target.render("")
        assert output.content == ""
        assert output.full == ""
        assert output.citations == []
