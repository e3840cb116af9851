"""Shared render walk used by every built-in target.

``BaseRenderTarget.render`` parses the text once, derives key, status and
proof URL for each citation, then walks the token stream, handing each
marker to the target's ``render_marker``. Numbering and the
status -> indicator mapping live here, so switching targets never changes
which citations are flagged.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from citekit.core.config import get_render_config
from citekit.keys import citation_key
from citekit.models.verification import VerificationResult, parse_verification_map
from citekit.parsing.producer import MarkerToken, ParsedDocument, TextToken, parse_document
from citekit.rendering.base import (
    CitationVariant,
    RenderedCitation,
    RenderedOutput,
    RenderOptions,
    get_indicator,
)
from citekit.rendering.proof import build_proof_url, build_snippet_image_url
from citekit.status import format_page_location, get_citation_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderContext:
    """Per-call state handed to target hooks."""

    options: Any
    variant: CitationVariant
    document: ParsedDocument

    def indicator(self, rendered: RenderedCitation) -> str:
        return get_indicator(rendered.status, self.options.indicator_style)

    def source_label(self, rendered: RenderedCitation, fallback: bool = True) -> str | None:
        """Label for a citation's source.

        Explicit ``source_labels`` win, then the verification label, then
        the page title (cited, then verified), then the domain, then
        ``Source N`` unless ``fallback`` is off.
        """
        citation = rendered.citation
        label = (
            self.options.source_labels.get(citation.source_id or "")
            or (rendered.result.label if rendered.result else None)
            or citation.title
            or (rendered.result.verified_title if rendered.result else None)
            or citation.domain
        )
        if label or not fallback:
            return label
        return f"Source {rendered.ordinal}"

    def location(self, rendered: RenderedCitation, show_line_position: bool = False) -> str:
        return format_page_location(
            rendered.citation, rendered.result, show_line_position=show_line_position
        )


def coerce_verifications(
    verifications: Mapping[str, VerificationResult | Mapping[str, Any]] | None,
) -> dict[str, VerificationResult]:
    """Accept parsed results or raw service payloads keyed by citation key."""
    if not verifications:
        return {}
    if all(isinstance(v, VerificationResult) for v in verifications.values()):
        return dict(verifications)  # type: ignore[arg-type]
    return parse_verification_map(verifications)


class BaseRenderTarget:
    """Template for render targets.

    Subclasses set the class attributes and implement ``render_marker``;
    ``render_sources`` and ``assemble`` have defaults that suit plain
    text targets.
    """

    name: ClassVar[str] = ""
    description: ClassVar[str] = ""
    default_variant: ClassVar[CitationVariant] = CitationVariant.BRACKETS
    supported_variants: ClassVar[frozenset[CitationVariant]] = frozenset({CitationVariant.BRACKETS})
    options_model: ClassVar[type[RenderOptions]] = RenderOptions

    def resolve_options(self, options: RenderOptions | None = None, **overrides: Any) -> RenderOptions:
        """Merge config defaults, explicit options and overrides (last wins)."""
        data: dict[str, Any] = dict(get_render_config().defaults_for(self.name))
        if options is not None:
            data.update(options.model_dump(exclude_unset=True))
        data.update(overrides)
        allowed = self.options_model.model_fields
        return self.options_model.model_validate({k: v for k, v in data.items() if k in allowed or k in overrides})

    def resolve_variant(self, requested: CitationVariant | None) -> CitationVariant:
        if requested is None:
            return self.default_variant
        if requested not in self.supported_variants:
            logger.debug(
                f"RENDER_VARIANT_FALLBACK target={self.name} requested={requested.value} "
                f"using={self.default_variant.value}"
            )
            return self.default_variant
        return requested

    def _rendered_citation(
        self, citation: Any, results: dict[str, VerificationResult], options: RenderOptions
    ) -> RenderedCitation:
        key = citation_key(citation)
        result = results.get(key)
        proof_url = result.proof_url if result else None
        proof_image_url = result.proof_image_url if result else None
        if options.proof_base_url:
            proof_id = (result.proof_id if result else None) or key
            proof_url = proof_url or build_proof_url(options.proof_base_url, proof_id)
            proof_image_url = proof_image_url or build_snippet_image_url(options.proof_base_url, proof_id)
        return RenderedCitation(
            citation=citation,
            key=key,
            result=result,
            status=get_citation_status(result),
            proof_url=proof_url,
            proof_image_url=proof_image_url,
        )

    def render(
        self,
        text: str,
        verifications: Mapping[str, VerificationResult | Mapping[str, Any]] | None = None,
        options: RenderOptions | None = None,
        **overrides: Any,
    ) -> RenderedOutput:
        opts = self.resolve_options(options, **overrides)
        document = parse_document(text)
        context = RenderContext(
            options=opts,
            variant=self.resolve_variant(opts.variant),
            document=document,
        )
        results = coerce_verifications(verifications)

        rendered = [self._rendered_citation(c, results, opts) for c in document.citations]
        by_ordinal = {rc.ordinal: rc for rc in rendered}

        parts: list[str] = []
        for token in document.tokens:
            if isinstance(token, TextToken):
                parts.append(self.render_text(token.text, context))
            elif isinstance(token, MarkerToken):
                if token.inner_text:
                    parts.append(self.render_text(token.inner_text, context))
                parts.append(self.render_marker(by_ordinal[token.citation.ordinal], context))
        content = "".join(parts)

        sources = None
        if opts.include_sources and rendered:
            sources = self.render_sources(rendered, context) or None

        output = self.assemble(content, sources, rendered, context)
        output.proof_urls = {rc.key: rc.proof_url for rc in rendered if rc.proof_url}

        if rendered:
            logger.debug(
                f"RENDER_COMPLETE target={self.name} variant={context.variant.value} "
                f"citations={len(rendered)} verified={sum(rc.status.is_verified for rc in rendered)}",
                extra={"target": self.name},
            )
        return output

    def render_text(self, text: str, context: RenderContext) -> str:
        """Hook for literal text between markers (unchanged by default)."""
        return text

    def render_marker(self, rendered: RenderedCitation, context: RenderContext) -> str:
        raise NotImplementedError

    def render_sources(self, citations: list[RenderedCitation], context: RenderContext) -> str:
        return ""

    def assemble(
        self,
        content: str,
        sources: str | None,
        citations: list[RenderedCitation],
        context: RenderContext,
    ) -> RenderedOutput:
        full = f"{content}\n\n{sources}" if sources else content
        return RenderedOutput(content=content, full=full, sources=sources, citations=citations)
