"""Unit tests for citation stripping."""

from citekit.models.verification import VerificationResult
from citekit.rendering.strip import strip_citations


class TestStripCitations:
    """Tests for strip_citations."""

    def test_inline_tags_removed(self, inline_output: str) -> None:
        """Tags vanish without leaving '/>' behind."""
        assert strip_citations(inline_output) == "Revenue grew 45% year over year. Margins were flat."

    def test_deferred_removed(self, deferred_output: str) -> None:
        """Markers and the data block are removed."""
        stripped = strip_citations(deferred_output)
        assert stripped == "Revenue grew 45% . Margins were flat ."

    def test_leave_anchor_text(self, inline_output: str) -> None:
        """Anchor text can take the marker's place."""
        assert strip_citations(inline_output, leave_anchor_text=True) == (
            "Revenue grew 45% year over yeargrew 45%. Margins were flatmargin."
        )

    def test_paired_inner_text_kept(self) -> None:
        """Text wrapped by a paired tag is always kept."""
        assert strip_citations("<cite attachment_id='a' anchor_text='x'>Revenue</cite> up") == "Revenue up"

    def test_indicators_by_key(
        self, inline_output: str, mixed_verifications: dict[str, VerificationResult]
    ) -> None:
        """Status indicators follow each stripped marker."""
        assert strip_citations(inline_output, verifications=mixed_verifications, indicator_style="check") == (
            "Revenue grew 45% year over year✓. Margins were flat✗."
        )

    def test_indicators_by_ordinal(self, inline_output: str) -> None:
        """Results keyed by ordinal are accepted."""
        stripped = strip_citations(
            inline_output, verifications={"2": {"status": "found"}}, indicator_style="letter"
        )
        assert stripped == "Revenue grew 45% year over year?. Margins were flatV."

    def test_empty(self) -> None:
        """Empty or missing text strips to nothing."""
        assert strip_citations("") == ""
        assert strip_citations(None) == ""

    def test_plain_text_unchanged(self) -> None:
        """Text without markers is returned as is."""
        assert strip_citations("No citations [here].") == "No citations [here]."
