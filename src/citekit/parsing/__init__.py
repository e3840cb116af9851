"""
Parsing Module
==============

Recovers citation records from model output.

This module provides:
- scan_cite_tags: locate ``<cite ... />`` markers, tolerating malformed markup
- parse_attributes: normalize attribute spellings and escapes
- build_citation: typed Citation from normalized attributes
- parse_deferred_response: ``[n]`` markers with a trailing JSON data block
- parse_document / extract_citations: one entry point over both formats
- extract_structured_citations: citation objects in JSON-shaped output
- normalize_citations: rewrite markers into canonical tag form

Example usage:
    from citekit.parsing import extract_citations

    citations = extract_citations(llm_output)
"""

from citekit.parsing.attributes import canonical_attribute_name, parse_attributes
from citekit.parsing.builder import build_citation, parse_line_ids, parse_page_location
from citekit.parsing.deferred import (
    CITATION_DATA_END,
    CITATION_DATA_START,
    DeferredEntry,
    DeferredParseResult,
    has_deferred_block,
    parse_deferred_response,
    replace_deferred_markers,
)
from citekit.parsing.producer import (
    MarkerToken,
    ParsedDocument,
    TextToken,
    extract_citations,
    parse_document,
)
from citekit.parsing.normalize import normalize_citations
from citekit.parsing.scanner import CiteTag, scan_cite_tags
from citekit.parsing.structured import extract_structured_citations

__all__ = [
    # Inline tags
    "CiteTag",
    "scan_cite_tags",
    "canonical_attribute_name",
    "parse_attributes",
    "build_citation",
    "parse_line_ids",
    "parse_page_location",
    # Deferred format
    "CITATION_DATA_START",
    "CITATION_DATA_END",
    "DeferredEntry",
    "DeferredParseResult",
    "has_deferred_block",
    "parse_deferred_response",
    "replace_deferred_markers",
    # Producer
    "MarkerToken",
    "ParsedDocument",
    "TextToken",
    "extract_citations",
    "parse_document",
    # Structured output and normalization
    "extract_structured_citations",
    "normalize_citations",
]
