"""Plain markdown target.

Markers become linked tokens such as ``[1✓](#ref-1)`` and the optional
references section groups entries by status, each with an ``#ref-N``
anchor. The footnote variant emits ``[^N]`` markers with footnote
definitions instead.
"""

from typing import Literal

from citekit.rendering.base import (
    CitationVariant,
    RenderedCitation,
    RenderedOutput,
    RenderOptions,
    to_superscript,
)
from citekit.rendering.core import BaseRenderTarget, RenderContext
from citekit.status import StatusKind, format_page_location

REFERENCE_GROUPS: tuple[tuple[StatusKind, str], ...] = (
    (StatusKind.VERIFIED, "### Verified"),
    (StatusKind.PARTIAL, "### Partial Match"),
    (StatusKind.MISS, "### Not Found"),
    (StatusKind.PENDING, "### Pending"),
)


class MarkdownOptions(RenderOptions):
    reference_heading: str = "## References"
    show_reasoning: bool = False
    show_page_number: bool = True
    show_line_position: bool = True
    link_style: Literal["anchor", "none"] = "anchor"


class MarkdownTarget(BaseRenderTarget):
    """Markdown with linked status markers and a references section."""

    name = "markdown"
    description = "Markdown with status indicators and an anchored references section"
    default_variant = CitationVariant.INLINE
    supported_variants = frozenset(
        {
            CitationVariant.INLINE,
            CitationVariant.BRACKETS,
            CitationVariant.SUPERSCRIPT,
            CitationVariant.FOOTNOTE,
            CitationVariant.ACADEMIC,
            CitationVariant.MINIMAL,
        }
    )
    options_model = MarkdownOptions

    def render_marker(self, rendered: RenderedCitation, context: RenderContext) -> str:
        options: MarkdownOptions = context.options
        indicator = context.indicator(rendered)
        number = rendered.ordinal
        variant = context.variant

        if variant is CitationVariant.FOOTNOTE:
            # Footnote syntax has no room for an indicator
            return f"[^{number}]"

        if variant is CitationVariant.BRACKETS:
            if options.link_style == "anchor":
                return f"[{number}{indicator}](#ref-{number})"
            return f"[{number}{indicator}]"

        if variant is CitationVariant.SUPERSCRIPT:
            text = f"{to_superscript(number)}{indicator}"
        elif variant is CitationVariant.ACADEMIC:
            label = context.source_label(rendered, fallback=False) or "Source"
            page = f", p.{rendered.citation.page_number}" if rendered.citation.page_number else ""
            text = f"({label}{page}){indicator}"
        elif variant is CitationVariant.MINIMAL:
            text = indicator
        else:
            text = f"{rendered.citation.anchor_text or ''}{indicator}"

        if options.link_style == "anchor":
            return f"[{text}](#ref-{number})"
        return text

    def _location(self, rendered: RenderedCitation, options: MarkdownOptions) -> str:
        return format_page_location(
            rendered.citation,
            rendered.result,
            show_page_number=options.show_page_number,
            show_line_position=options.show_line_position,
        )

    def render_entry(self, rendered: RenderedCitation, context: RenderContext) -> str:
        """One references-section entry."""
        options: MarkdownOptions = context.options
        citation = rendered.citation
        number = rendered.ordinal
        indicator = context.indicator(rendered)
        location = self._location(rendered, options)
        quote = citation.full_phrase or citation.anchor_text or ""

        if context.variant is CitationVariant.FOOTNOTE:
            entry = f"[^{number}]: "
            if quote:
                entry += f'"{quote}"'
            if location:
                entry += f" - {location}"
            return f"{entry} {indicator}"

        entry = f'<a id="ref-{number}"></a>\n**[{number}]** {indicator}'
        if citation.anchor_text:
            entry += f" **{citation.anchor_text}**"
        if location:
            entry += f" - {location}"
        lines = [entry]
        if quote:
            lines.append(f'> "{quote}"')
        if options.show_reasoning and citation.reasoning:
            lines.append(f"> *{citation.reasoning}*")
        return "\n".join(lines)

    def render_sources(self, citations: list[RenderedCitation], context: RenderContext) -> str:
        lines = [context.options.reference_heading, ""]
        if context.variant is CitationVariant.FOOTNOTE:
            lines.extend(self.render_entry(rc, context) for rc in citations)
        else:
            for kind, heading in REFERENCE_GROUPS:
                group = [rc for rc in citations if rc.status.kind is kind]
                if not group:
                    continue
                lines.extend([heading, ""])
                for rc in group:
                    lines.extend([self.render_entry(rc, context), ""])
        return "\n".join(lines).strip()

    def assemble(
        self,
        content: str,
        sources: str | None,
        citations: list[RenderedCitation],
        context: RenderContext,
    ) -> RenderedOutput:
        full = f"{content}\n\n---\n\n{sources}" if sources else content
        return RenderedOutput(content=content, full=full, sources=sources, citations=citations)
