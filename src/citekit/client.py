"""
Verification Client Interface
=============================

The verification service is an external collaborator: it ingests source
documents, then checks citations against them and returns one
VerificationResult per citation key. citekit never calls it itself; this
module defines the interface an integration implements and the helper
that shapes its requests.

Typical flow:

    prepared = await client.prepare(files)          # prompt text per source
    llm_output = await llm(prompt_with(prepared))   # emits <cite .../> markers
    for source_id, citations in build_verify_requests(llm_output).items():
        results.update(await client.verify(source_id, citations))
    output = render(llm_output, target="markdown", verifications=results)
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from citekit.keys import group_citations_by_source
from citekit.models.citation import Citation
from citekit.models.verification import VerificationResult
from citekit.parsing.producer import extract_citations

logger = logging.getLogger(__name__)


@dataclass
class PreparedSource:
    """A source the service has ingested.

    Attributes:
        source_id: Id the model must cite this source by
        prompt_text: Source text with page and line markers, for the prompt
        metadata: Service-specific extras (file name, page count, ...)
    """

    source_id: str
    prompt_text: str
    metadata: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class VerificationClient(Protocol):
    """Async interface to a citation verification service."""

    async def prepare(self, sources: Sequence[Any]) -> list[PreparedSource]:
        """Upload sources and return their prompt-ready text.

        Args:
            sources: Files, URLs or raw documents, in the service's accepted forms

        Returns:
            One PreparedSource per input, in input order
        """
        ...

    async def verify(
        self, source_id: str, citations: dict[str, Citation]
    ) -> dict[str, VerificationResult]:
        """Verify citations against one source.

        Args:
            source_id: Source the citations refer to
            citations: Citations keyed by citation key

        Returns:
            Results keyed by the same citation keys. Keys missing from the
            response render as pending.
        """
        ...


def build_verify_requests(
    citations: str | Mapping[str, Any] | Iterable[Citation],
) -> dict[str, dict[str, Citation]]:
    """Group citations into per-source verify requests.

    Args:
        citations: Model output to parse (text or structured output), or
            already extracted citations

    Returns:
        ``{source_id_or_url: {citation_key: citation}}``
    """
    if isinstance(citations, str | Mapping):
        citations = extract_citations(citations)
    requests = group_citations_by_source(citations)
    logger.info(
        f"VERIFY_REQUESTS_BUILT sources={len(requests)} "
        f"citations={sum(len(group) for group in requests.values())}"
    )
    return requests
