"""Unit tests for the terminal render target."""

import pytest

from citekit.models.verification import VerificationResult
from citekit.rendering.terminal import (
    RULE_CHAR,
    TerminalOutput,
    TerminalTarget,
    horizontal_rule,
    should_use_color,
)


@pytest.fixture
def target() -> TerminalTarget:
    return TerminalTarget()


class TestColorDetection:
    """Tests for NO_COLOR handling."""

    def test_explicit_choice_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """An explicit flag overrides the environment."""
        monkeypatch.setenv("NO_COLOR", "1")
        assert should_use_color(True) is True
        assert should_use_color(False) is False

    def test_no_color_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """NO_COLOR disables color when not decided explicitly."""
        assert should_use_color() is True
        monkeypatch.setenv("NO_COLOR", "")
        assert should_use_color() is False

    def test_rule_width(self) -> None:
        """Rules pad to the requested width."""
        rule = horizontal_rule("Sources", 40, use_color=False)
        assert rule.startswith(f"{RULE_CHAR * 3} Sources ")
        assert len(rule) == 40


class TestTerminalRender:
    """Tests for terminal rendering."""

    def test_plain_brackets(
        self, target: TerminalTarget, inline_output: str, mixed_verifications: dict[str, VerificationResult]
    ) -> None:
        """Without color markers are plain bracketed numbers."""
        output = target.render(inline_output, mixed_verifications, color=False)
        assert output.content == "Revenue grew 45% year over year[1✓]. Margins were flat[2✗]."

    def test_colored_output_has_plain_twin(
        self, target: TerminalTarget, inline_output: str, mixed_verifications: dict[str, VerificationResult]
    ) -> None:
        """Colored output carries ANSI codes; the plain twin has none."""
        output = target.render(inline_output, mixed_verifications, color=True)
        assert isinstance(output, TerminalOutput)
        assert "\x1b[" in output.content
        assert output.plain == "Revenue grew 45% year over year[1✓]. Margins were flat[2✗]."
        assert "\x1b[" not in output.plain_full

    def test_no_color_env_respected(
        self, target: TerminalTarget, inline_output: str, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """NO_COLOR turns color off by default."""
        monkeypatch.setenv("NO_COLOR", "1")
        output = target.render(inline_output)
        assert "\x1b[" not in output.full

    def test_inline_variant(self, target: TerminalTarget, inline_output: str) -> None:
        """Inline markers show anchor text."""
        output = target.render(inline_output, variant="inline", color=False)
        assert "year over yeargrew 45%◌" in output.content

    def test_sources_block(
        self, target: TerminalTarget, inline_output: str, mixed_verifications: dict[str, VerificationResult]
    ) -> None:
        """Sources list label, location and quote between rules."""
        output = target.render(inline_output, mixed_verifications, color=False)
        assert output.sources is not None
        lines = output.sources.split("\n")
        assert lines[0].startswith(f"{RULE_CHAR * 3} Sources ")
        assert lines[1] == " [1] ✓ Annual Report — p.3"
        assert lines[2] == '     "Revenue grew 45%"'
        assert lines[3] == " [2] ✗ Source 2 — p.5"
        assert lines[-1] == RULE_CHAR * 80
        assert output.full == f"{output.content}\n\n{output.sources}"

    def test_long_quotes_truncated(self, target: TerminalTarget, inline_output: str) -> None:
        """Quotes longer than the width allows are cut with an ellipsis."""
        output = target.render(inline_output, color=False, max_width=20)
        assert output.sources is not None
        assert '"Operati..."' in output.sources

    def test_empty_input(self, target: TerminalTarget) -> None:
        """Empty input renders to empty output."""
        output = target.render("", color=True)
        assert output.full == ""
        assert output.plain == ""
