"""
citekit - Verifiable citation markers for language model output.

This package parses citation markers that a model embeds in its output,
derives a stable key per citation for correlation with an external
verification service, classifies verification results into four display
statuses, and renders the annotated text for several output targets.

Quick Start
-----------
Extract citations and render them:

    from citekit import extract_citations, render

    citations = extract_citations(llm_output)
    output = render(llm_output, target="markdown", verifications=results)
    print(output.full)

Public API Exports
------------------

Parsing:
    extract_citations: All citations in a text or structured output, in reading order
    normalize_citations: Rewrite markers into canonical tag form
    parse_document: Token stream plus citations
    Citation: Immutable citation record

Keys and status:
    citation_key: Fingerprint used to look up verification results
    get_citation_status: Verification result -> display status
    VerificationResult: Result returned by the verification service

Rendering:
    render: Render text with a registered target
    strip_citations: Remove markers, optionally leaving anchor text
    get_render_registry: Global render target registry

Configuration:
    get_settings: Environment settings
    setup_logging: Configure the citekit logger
"""

__version__ = "0.1.0"


def __getattr__(name: str):
    """Lazy loading of exports to avoid import cost for parsing-only users."""
    # Parsing
    if name == "extract_citations":
        from citekit.parsing.producer import extract_citations

        return extract_citations
    if name == "parse_document":
        from citekit.parsing.producer import parse_document

        return parse_document
    if name == "normalize_citations":
        from citekit.parsing.normalize import normalize_citations

        return normalize_citations
    if name == "Citation":
        from citekit.models.citation import Citation

        return Citation

    # Keys and status
    if name == "citation_key":
        from citekit.keys import citation_key

        return citation_key
    if name == "get_citation_status":
        from citekit.status import get_citation_status

        return get_citation_status
    if name == "VerificationResult":
        from citekit.models.verification import VerificationResult

        return VerificationResult

    # Rendering
    if name == "render":
        from citekit.rendering.registry import render

        return render
    if name == "strip_citations":
        from citekit.rendering.strip import strip_citations

        return strip_citations
    if name == "get_render_registry":
        from citekit.rendering.registry import get_render_registry

        return get_render_registry

    # Configuration
    if name == "get_settings":
        from citekit.core.config import get_settings

        return get_settings
    if name == "setup_logging":
        from citekit.core.logging import setup_logging

        return setup_logging

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "__version__",
    "extract_citations",
    "parse_document",
    "normalize_citations",
    "Citation",
    "citation_key",
    "get_citation_status",
    "VerificationResult",
    "render",
    "strip_citations",
    "get_render_registry",
    "get_settings",
    "setup_logging",
]
