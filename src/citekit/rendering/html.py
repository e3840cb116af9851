"""Static HTML target.

Each marker becomes a ``<span>`` carrying status classes, the citation
key and (when a proof service is configured) the proof URL, with an
optional CSS-only hover tooltip. Styling comes from a ``<style>`` block
or, for email-like contexts, inline ``style`` attributes.
"""

from dataclasses import dataclass

from pydantic import Field

from citekit.rendering.base import (
    STATUS_LABELS,
    CitationVariant,
    RenderedCitation,
    RenderedOutput,
    RenderOptions,
    to_superscript,
)
from citekit.rendering.core import BaseRenderTarget, RenderContext
from citekit.rendering.html_styles import (
    STATUS_CLASS_SUFFIXES,
    HtmlTheme,
    generate_style_block,
    indicator_inline_style,
    inline_style,
)

TOOLTIP_QUOTE_LENGTH = 100


def escape_html(text: str) -> str:
    """Escape ``& < > "`` for text and attribute values."""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


class HtmlOptions(RenderOptions):
    include_styles: bool = True
    # style="" attributes instead of classes + <style> (email)
    inline_styles: bool = False
    include_tooltips: bool = True
    theme: HtmlTheme = "light"
    class_prefix: str = Field(default="dc-", pattern=r"^[A-Za-z_-][\w-]*$")


@dataclass
class HtmlOutput(RenderedOutput):
    """Rendered output plus the ``<style>`` block, if one was generated."""

    styles: str | None = None

    @property
    def html(self) -> str:
        return self.content


class HtmlTarget(BaseRenderTarget):
    """HTML spans with status classes, data attributes and tooltips."""

    name = "html"
    description = "Static HTML with CSS status classes and hover tooltips"
    default_variant = CitationVariant.BRACKETS
    supported_variants = frozenset(
        {
            CitationVariant.BRACKETS,
            CitationVariant.UNDERLINE,
            CitationVariant.CHIP,
            CitationVariant.SUPERSCRIPT,
        }
    )
    options_model = HtmlOptions

    def _tooltip(self, rendered: RenderedCitation, context: RenderContext, indicator: str) -> str:
        p = context.options.class_prefix
        parts = [
            f'<span class="{p}tooltip-status">{indicator} {STATUS_LABELS[rendered.status.kind]}</span>'
        ]
        label = context.source_label(rendered, fallback=False)
        if label:
            location = context.location(rendered)
            suffix = f" — {escape_html(location)}" if location else ""
            parts.append(f'<span class="{p}tooltip-source">{escape_html(label)}{suffix}</span>')
        quote = rendered.citation.full_phrase
        if quote:
            if len(quote) > TOOLTIP_QUOTE_LENGTH:
                quote = f"{quote[:TOOLTIP_QUOTE_LENGTH]}..."
            parts.append(f'<span class="{p}tooltip-quote">"{escape_html(quote)}"</span>')
        if rendered.proof_image_url:
            parts.append(
                f'<img class="{p}tooltip-image" src="{escape_html(rendered.proof_image_url)}" '
                'alt="Proof snippet" loading="lazy" />'
            )
        return f'<span class="{p}tooltip">{"".join(parts)}</span>'

    def render_marker(self, rendered: RenderedCitation, context: RenderContext) -> str:
        options: HtmlOptions = context.options
        p = options.class_prefix
        variant = context.variant
        kind = rendered.status.kind
        indicator = context.indicator(rendered)
        label_text = escape_html(rendered.citation.anchor_text or f"Citation {rendered.ordinal}")

        variant_class = ""
        if variant is CitationVariant.UNDERLINE:
            variant_class = f"{p}linter"
        elif variant is CitationVariant.CHIP:
            variant_class = f"{p}chip"

        indicator_style = ""
        span_style = ""
        if options.inline_styles:
            indicator_style = f' style="{indicator_inline_style(kind, options.theme)}"'
            span_style = f' style="{inline_style(kind, variant.value, options.theme)}"'
        indicator_span = f'<span class="{p}indicator"{indicator_style}>{indicator}</span>'

        if variant is CitationVariant.UNDERLINE:
            inner = f'<span class="{p}citation-text">{label_text}</span>'
        elif variant is CitationVariant.CHIP:
            inner = f'<span class="{p}citation-text">{label_text}</span>{indicator_span}'
        elif variant is CitationVariant.SUPERSCRIPT:
            inner = f'<span class="{p}citation-text">{to_superscript(rendered.ordinal)}</span>{indicator_span}'
        else:
            inner = (
                f'<span class="{p}citation-text">[{rendered.ordinal}</span>'
                f'{indicator_span}<span class="{p}citation-text">]</span>'
            )

        proof_attr = ""
        if rendered.proof_url:
            url = escape_html(rendered.proof_url)
            inner = f'<a href="{url}" target="_blank" rel="noopener" class="{p}citation-link">{inner}</a>'
            proof_attr = f' data-proof-url="{url}"'

        if options.include_tooltips:
            inner += self._tooltip(rendered, context, indicator)

        classes = " ".join(c for c in (f"{p}citation", f"{p}{STATUS_CLASS_SUFFIXES[kind]}", variant_class) if c)
        return (
            f'<span class="{classes}"{span_style} data-citation-key="{escape_html(rendered.key)}"'
            f"{proof_attr}>{inner}</span>"
        )

    def render_sources(self, citations: list[RenderedCitation], context: RenderContext) -> str:
        p = context.options.class_prefix
        lines = [f'<div class="{p}sources">', "<h3>Sources</h3>", "<ul>"]
        for rc in citations:
            location = context.location(rc)
            suffix = f" — {escape_html(location)}" if location else ""
            number = f"[{rc.ordinal}]"
            if rc.proof_url:
                number = f'<a href="{escape_html(rc.proof_url)}" target="_blank" rel="noopener">{number}</a>'
            lines.append(f"<li>{number} {escape_html(context.source_label(rc))}{suffix}</li>")
        lines.extend(["</ul>", "</div>"])
        return "\n".join(lines)

    def assemble(
        self,
        content: str,
        sources: str | None,
        citations: list[RenderedCitation],
        context: RenderContext,
    ) -> HtmlOutput:
        options: HtmlOptions = context.options
        styles = None
        if citations and options.include_styles and not options.inline_styles:
            styles = generate_style_block(options.class_prefix, options.theme)
        full = "\n".join(part for part in (styles, content, sources) if part)
        return HtmlOutput(content=content, full=full, sources=sources, citations=citations, styles=styles)
