"""
Rendering Module
================

Turns cited text plus verification results into annotated output.

Targets:
- markdown: linked status markers and an anchored references section
- terminal: ANSI colors with a plain-text twin
- html: status-classed spans with tooltips and a style block
- github: proof links and a collapsible sources block
- slack: mrkdwn links with a message length cap

Example usage:
    from citekit.rendering import render

    output = render(llm_output, target="html", verifications=results)
    print(output.full)
"""

from citekit.rendering.base import (
    INDICATOR_SETS,
    CitationVariant,
    IndicatorStyle,
    RenderedCitation,
    RenderedOutput,
    RenderOptions,
    get_indicator,
)
from citekit.rendering.core import BaseRenderTarget
from citekit.rendering.proof import build_proof_url, build_proof_urls, build_snippet_image_url
from citekit.rendering.protocol import RenderTarget
from citekit.rendering.registry import (
    RenderTargetRegistry,
    get_render_registry,
    render,
    reset_render_registry,
)
from citekit.rendering.strip import strip_citations

__all__ = [
    # Base types
    "INDICATOR_SETS",
    "CitationVariant",
    "IndicatorStyle",
    "RenderOptions",
    "RenderedCitation",
    "RenderedOutput",
    "get_indicator",
    # Protocol
    "BaseRenderTarget",
    "RenderTarget",
    # Registry
    "RenderTargetRegistry",
    "get_render_registry",
    "render",
    "reset_render_registry",
    # Helpers
    "build_proof_url",
    "build_proof_urls",
    "build_snippet_image_url",
    "strip_citations",
]
