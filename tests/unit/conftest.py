"""Unit test fixtures: sample model output and verification results.

These fixtures provide:
- Inline-tag and deferred-format model output
- Citations and verification results keyed the way the service keys them
"""

import pytest

from citekit.keys import citation_key
from citekit.models.citation import Citation
from citekit.models.verification import SearchOutcome, VerificationResult
from citekit.parsing.producer import extract_citations

# ---------------------------------------------------------------------------
# Model output
# ---------------------------------------------------------------------------

INLINE_OUTPUT = (
    "Revenue grew 45% year over year"
    "<cite attachment_id='doc1' page_number='3' full_phrase='Revenue grew 45%' "
    "anchor_text='grew 45%' line_ids='12-14' />. "
    "Margins were flat"
    "<cite attachment_id='doc1' page_number='5' full_phrase='Operating margin was unchanged' "
    "anchor_text='margin' line_ids='40' />."
)

DEFERRED_OUTPUT = """Revenue grew 45% [1]. Margins were flat [2].

<<<CITATION_DATA>>>
{"doc1": [
  {"n": 1, "r": "growth figure", "f": "Revenue grew 45%", "k": "grew 45%", "p": "3_0", "l": [12, 13, 14]},
  {"n": 2, "r": "margin figure", "f": "Operating margin was unchanged", "k": "margin", "p": "5_0", "l": [40]}
]}
<<<END_CITATION_DATA>>>"""


@pytest.fixture
def inline_output() -> str:
    """Model output with two self-closing inline tags."""
    return INLINE_OUTPUT


@pytest.fixture
def deferred_output() -> str:
    """Model output in the deferred JSON format, equivalent to inline_output."""
    return DEFERRED_OUTPUT


@pytest.fixture
def inline_citations() -> list[Citation]:
    """Citations recovered from inline_output."""
    return extract_citations(INLINE_OUTPUT)


# ---------------------------------------------------------------------------
# Verification results
# ---------------------------------------------------------------------------


def make_result(citation: Citation, outcome: SearchOutcome, **fields: object) -> VerificationResult:
    """Build a result echoing ``citation``'s identifying fields."""
    return VerificationResult(
        outcome=outcome,
        source_id=citation.source_id,
        page_number=citation.page_number,
        full_phrase=citation.full_phrase,
        anchor_text=citation.anchor_text,
        line_ids=citation.line_ids,
        **fields,
    )


@pytest.fixture
def mixed_verifications(inline_citations: list[Citation]) -> dict[str, VerificationResult]:
    """First citation found, second not found."""
    first, second = inline_citations
    return {
        citation_key(first): make_result(first, SearchOutcome.FOUND, label="Annual Report"),
        citation_key(second): make_result(second, SearchOutcome.NOT_FOUND),
    }
