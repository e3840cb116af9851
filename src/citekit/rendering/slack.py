"""Slack mrkdwn target.

Markers become ``<url|[1✓]>`` links when a proof URL exists. The full
message is capped at ``max_message_length`` characters.
"""

import logging

from pydantic import Field

from citekit.rendering.base import (
    CitationVariant,
    RenderedCitation,
    RenderedOutput,
    RenderOptions,
    to_superscript,
)
from citekit.rendering.core import BaseRenderTarget, RenderContext

logger = logging.getLogger(__name__)

TRUNCATION_SUFFIX = "..."


class SlackOptions(RenderOptions):
    max_message_length: int = Field(default=4000, gt=len(TRUNCATION_SUFFIX))


def slack_link(url: str | None, text: str) -> str:
    return f"<{url}|{text}>" if url else text


class SlackTarget(BaseRenderTarget):
    """Compact linked markers and a bulleted sources appendix for Slack."""

    name = "slack"
    description = "Slack mrkdwn with proof links and a message length cap"
    default_variant = CitationVariant.BRACKETS
    # The superscript variant is what Slack callers know as "number"
    supported_variants = frozenset(
        {CitationVariant.BRACKETS, CitationVariant.INLINE, CitationVariant.SUPERSCRIPT}
    )
    options_model = SlackOptions

    def render_marker(self, rendered: RenderedCitation, context: RenderContext) -> str:
        indicator = context.indicator(rendered)
        number = rendered.ordinal
        if context.variant is CitationVariant.INLINE:
            text = f"{rendered.citation.anchor_text or f'Citation {number}'}{indicator}"
        elif context.variant is CitationVariant.SUPERSCRIPT:
            text = f"{to_superscript(number)}{indicator}"
        else:
            text = f"[{number}{indicator}]"
        return slack_link(rendered.proof_url, text)

    def render_sources(self, citations: list[RenderedCitation], context: RenderContext) -> str:
        lines = ["*Sources:*"]
        for rc in citations:
            marker = slack_link(rc.proof_url, f"[{rc.ordinal}{context.indicator(rc)}]")
            location = context.location(rc)
            suffix = f" — {location}" if location else ""
            lines.append(f"• {marker} {context.source_label(rc)}{suffix}")
        return "\n".join(lines)

    def assemble(
        self,
        content: str,
        sources: str | None,
        citations: list[RenderedCitation],
        context: RenderContext,
    ) -> RenderedOutput:
        limit = context.options.max_message_length
        full = f"{content}\n\n{sources}" if sources else content
        if len(full) > limit:
            logger.warning(f"SLACK_MESSAGE_TRUNCATED length={len(full)} limit={limit}")
            full = f"{full[: limit - len(TRUNCATION_SUFFIX)]}{TRUNCATION_SUFFIX}"
        return RenderedOutput(content=content, full=full, sources=sources, citations=citations)
