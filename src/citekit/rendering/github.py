"""GitHub-flavored markdown target.

Markers link straight to proof pages, and sources collapse into a
``<details>`` block rendered as a table, a bullet list or a detailed
list with quotes and snippet images. The footnote variant uses GitHub's
native footnotes instead.
"""

from dataclasses import dataclass
from typing import Literal

from citekit.rendering.base import (
    SHORT_STATUS_LABELS,
    CitationVariant,
    RenderedCitation,
    RenderOptions,
    to_superscript,
)
from citekit.rendering.core import BaseRenderTarget, RenderContext

SourcesFormat = Literal["table", "list", "detailed"]


class GitHubOptions(RenderOptions):
    sources_format: SourcesFormat = "table"
    # Snippet images in the detailed sources format
    include_images: bool = False


@dataclass(frozen=True)
class SourceEntry:
    number: int
    indicator: str
    status_label: str
    label: str
    location: str
    quote: str | None
    proof_url: str | None
    image_url: str | None


def _details(count: int, body: list[str]) -> list[str]:
    return ["<details>", f"<summary><b>Sources ({count})</b></summary>", "<br>", "", *body]


def render_sources_table(entries: list[SourceEntry]) -> str:
    lines = _details(
        len(entries),
        [
            "| # | Status | Source | Location | Proof |",
            "|---|--------|--------|----------|-------|",
        ],
    )
    for entry in entries:
        proof = f"[View proof]({entry.proof_url})" if entry.proof_url else "—"
        lines.append(
            f"| {entry.number} | {entry.indicator} {entry.status_label} | {entry.label} "
            f"| {entry.location or '—'} | {proof} |"
        )
    lines.extend(["", "</details>"])
    return "\n".join(lines)


def render_sources_list(entries: list[SourceEntry]) -> str:
    lines = _details(len(entries), [])
    for entry in entries:
        location = f" — {entry.location}" if entry.location else ""
        proof = f" — [View proof]({entry.proof_url})" if entry.proof_url else ""
        lines.append(f"- **[{entry.number}]** {entry.indicator} {entry.label}{location}{proof}")
    lines.extend(["", "</details>"])
    return "\n".join(lines)


def render_sources_detailed(entries: list[SourceEntry]) -> str:
    lines = _details(len(entries), [])
    for entry in entries:
        location = f" — {entry.location}" if entry.location else ""
        lines.append(f"**[{entry.number}{entry.indicator}] {entry.label}{location}**")
        if entry.quote:
            lines.append(f'> "{entry.quote}"')
        if entry.image_url:
            lines.extend(["", f"![Proof snippet]({entry.image_url})"])
        lines.extend(["", "---", ""])
    lines.append("</details>")
    return "\n".join(lines)


SOURCE_RENDERERS = {
    "table": render_sources_table,
    "list": render_sources_list,
    "detailed": render_sources_detailed,
}


class GitHubTarget(BaseRenderTarget):
    """Markdown for GitHub issues, PRs and READMEs."""

    name = "github"
    description = "GitHub markdown with proof links and a collapsible sources block"
    default_variant = CitationVariant.BRACKETS
    supported_variants = frozenset(
        {
            CitationVariant.BRACKETS,
            CitationVariant.SUPERSCRIPT,
            CitationVariant.INLINE,
            CitationVariant.FOOTNOTE,
        }
    )
    options_model = GitHubOptions

    def render_marker(self, rendered: RenderedCitation, context: RenderContext) -> str:
        number = rendered.ordinal
        if context.variant is CitationVariant.FOOTNOTE:
            return f"[^{number}]"

        indicator = context.indicator(rendered)
        if context.variant is CitationVariant.SUPERSCRIPT:
            text = f"{to_superscript(number)}{indicator}"
        elif context.variant is CitationVariant.INLINE:
            text = f"{rendered.citation.anchor_text or f'Citation {number}'}{indicator}"
        else:
            text = f"[{number}{indicator}]"
        return f"[{text}]({rendered.proof_url})" if rendered.proof_url else text

    def _entry(self, rendered: RenderedCitation, context: RenderContext) -> SourceEntry:
        options: GitHubOptions = context.options
        return SourceEntry(
            number=rendered.ordinal,
            indicator=context.indicator(rendered),
            status_label=SHORT_STATUS_LABELS[rendered.status.kind],
            label=context.source_label(rendered),
            location=context.location(rendered),
            quote=rendered.citation.full_phrase,
            proof_url=rendered.proof_url,
            image_url=rendered.proof_image_url if options.include_images else None,
        )

    def render_sources(self, citations: list[RenderedCitation], context: RenderContext) -> str:
        entries = [self._entry(rc, context) for rc in citations]
        if context.variant is CitationVariant.FOOTNOTE:
            lines = []
            for entry in entries:
                location = f" — {entry.location}" if entry.location else ""
                proof = f" [View proof]({entry.proof_url})" if entry.proof_url else ""
                lines.append(f"[^{entry.number}]: {entry.indicator} {entry.label}{location}{proof}")
            return "\n".join(lines)
        return SOURCE_RENDERERS[context.options.sources_format](entries)
