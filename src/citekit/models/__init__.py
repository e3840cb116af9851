"""Citation and verification data types."""

from citekit.models.citation import Citation, CitationKind, Timestamps
from citekit.models.verification import (
    SearchOutcome,
    UrlAccessStatus,
    VerificationResult,
    parse_verification_map,
)

__all__ = [
    "Citation",
    "CitationKind",
    "SearchOutcome",
    "Timestamps",
    "UrlAccessStatus",
    "VerificationResult",
    "parse_verification_map",
]
