"""ANSI terminal target.

Status colors are drawn with rich ``Style`` objects rendered to the
standard 16-color palette, so output stays readable on any terminal.
Every colored string has a plain twin, and the ``NO_COLOR`` convention
turns color off when the caller does not decide explicitly.
"""

import os
from dataclasses import dataclass

from pydantic import Field
from rich.color import ColorSystem
from rich.style import Style

from citekit.core.logging import strip_ansi
from citekit.rendering.base import (
    CitationVariant,
    RenderedCitation,
    RenderedOutput,
    RenderOptions,
)
from citekit.rendering.core import BaseRenderTarget, RenderContext
from citekit.status import StatusKind

STATUS_STYLES: dict[StatusKind, Style] = {
    StatusKind.VERIFIED: Style(color="green"),
    StatusKind.PARTIAL: Style(color="yellow"),
    StatusKind.MISS: Style(color="red"),
    StatusKind.PENDING: Style(color="bright_black"),
}
BOLD = Style(bold=True)
DIM = Style(dim=True)

RULE_CHAR = "─"


def should_use_color(color: bool | None = None) -> bool:
    """Explicit choice wins; otherwise color unless NO_COLOR is set."""
    if color is not None:
        return color
    return "NO_COLOR" not in os.environ


def stylize(text: str, style: Style, use_color: bool) -> str:
    if not use_color:
        return text
    return style.render(text, color_system=ColorSystem.STANDARD)


def horizontal_rule(title: str, width: int, use_color: bool) -> str:
    """``─── Title ─────`` padded to ``width``."""
    padded = f" {title} "
    right = max(1, width - 3 - len(padded))
    return stylize(f"{RULE_CHAR * 3}{padded}{RULE_CHAR * right}", BOLD, use_color)


class TerminalOptions(RenderOptions):
    # None: auto-detect from NO_COLOR
    color: bool | None = None
    max_width: int = Field(default=80, ge=20)


@dataclass
class TerminalOutput(RenderedOutput):
    """Rendered output with ANSI-free twins of ``content`` and ``full``."""

    plain: str = ""
    plain_full: str = ""


class TerminalTarget(BaseRenderTarget):
    """Colored status markers and a ruled sources list for CLIs."""

    name = "terminal"
    description = "ANSI-colored text for terminals, with a plain-text twin"
    default_variant = CitationVariant.BRACKETS
    supported_variants = frozenset(
        {CitationVariant.BRACKETS, CitationVariant.INLINE, CitationVariant.MINIMAL}
    )
    options_model = TerminalOptions

    def render_marker(self, rendered: RenderedCitation, context: RenderContext) -> str:
        indicator = context.indicator(rendered)
        if context.variant is CitationVariant.INLINE:
            text = f"{rendered.citation.anchor_text or f'Citation {rendered.ordinal}'}{indicator}"
        elif context.variant is CitationVariant.MINIMAL:
            text = indicator
        else:
            text = f"[{rendered.ordinal}{indicator}]"
        return stylize(text, STATUS_STYLES[rendered.status.kind], should_use_color(context.options.color))

    def render_sources(self, citations: list[RenderedCitation], context: RenderContext) -> str:
        options: TerminalOptions = context.options
        use_color = should_use_color(options.color)
        width = options.max_width

        lines = [horizontal_rule("Sources", width, use_color)]
        for rc in citations:
            style = STATUS_STYLES[rc.status.kind]
            marker = stylize(f"[{rc.ordinal}]", style, use_color)
            indicator = stylize(context.indicator(rc), style, use_color)
            location = context.location(rc)
            suffix = f" — {location}" if location else ""
            lines.append(f" {marker} {indicator} {context.source_label(rc)}{suffix}")

            phrase = rc.citation.full_phrase
            if phrase:
                if len(phrase) > width - 10:
                    phrase = f"{phrase[: width - 13]}..."
                quoted = f'"{phrase}"'
                lines.append(f"     {stylize(quoted, DIM, use_color)}")

        lines.append(stylize(RULE_CHAR * width, BOLD, use_color))
        return "\n".join(lines)

    def assemble(
        self,
        content: str,
        sources: str | None,
        citations: list[RenderedCitation],
        context: RenderContext,
    ) -> TerminalOutput:
        full = f"{content}\n\n{sources}" if sources else content
        return TerminalOutput(
            content=content,
            full=full,
            sources=sources,
            citations=citations,
            plain=strip_ansi(content),
            plain_full=strip_ansi(full),
        )
