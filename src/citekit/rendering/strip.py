"""Marker removal for plain-text consumers (search indexes, TTS, previews)."""

from collections.abc import Mapping
from typing import Any

from citekit.keys import citation_key
from citekit.models.verification import VerificationResult
from citekit.parsing.producer import TextToken, parse_document
from citekit.rendering.base import IndicatorStyle, get_indicator
from citekit.rendering.core import coerce_verifications
from citekit.status import get_citation_status


def strip_citations(
    text: str | None,
    leave_anchor_text: bool = False,
    verifications: Mapping[str, VerificationResult | Mapping[str, Any]] | None = None,
    indicator_style: IndicatorStyle | str | None = None,
) -> str:
    """Remove every citation marker and the deferred data block.

    Args:
        text: Model output
        leave_anchor_text: Keep each citation's anchor text where its
            marker was (paired tags always keep their wrapped text)
        verifications: Results keyed by citation key, or by ordinal
            ("1", "2", ...) when the caller has no keys
        indicator_style: When set, append the status indicator in this
            style after each stripped marker

    Returns:
        Text without ``<cite`` tags, dangling ``/>`` or deferred markers
    """
    document = parse_document(text)
    results = coerce_verifications(verifications)

    parts: list[str] = []
    for token in document.tokens:
        if isinstance(token, TextToken):
            parts.append(token.text)
            continue

        citation = token.citation
        if token.inner_text:
            parts.append(token.inner_text)
        elif leave_anchor_text and citation.anchor_text:
            parts.append(citation.anchor_text)

        if indicator_style is not None:
            result = results.get(citation_key(citation)) or results.get(str(citation.ordinal))
            parts.append(get_indicator(get_citation_status(result), IndicatorStyle(indicator_style)))
    return "".join(parts)
