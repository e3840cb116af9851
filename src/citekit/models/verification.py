"""Verification results produced by the external verification service.

Results arrive as JSON in either snake_case or camelCase, optionally with
the service's nested ``document`` / ``url`` / ``proof`` / ``citation``
sub-objects. ``VerificationResult`` flattens all of these into one frozen
model. Results are looked up by citation key at render time and are never
merged into a ``Citation``.
"""

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from citekit.models.citation import Timestamps

logger = logging.getLogger(__name__)


class SearchOutcome(str, Enum):
    """Closed set of outcomes reported by the verification service."""

    LOADING = "loading"
    PENDING = "pending"
    NOT_FOUND = "not_found"
    PARTIAL_TEXT_FOUND = "partial_text_found"
    FOUND = "found"
    FOUND_ANCHOR_TEXT_ONLY = "found_anchor_text_only"
    FOUND_PHRASE_MISSED_ANCHOR_TEXT = "found_phrase_missed_anchor_text"
    FOUND_ON_OTHER_PAGE = "found_on_other_page"
    FOUND_ON_OTHER_LINE = "found_on_other_line"
    FIRST_WORD_FOUND = "first_word_found"
    TIMESTAMP_WIP = "timestamp_wip"
    SKIPPED = "skipped"


class UrlAccessStatus(str, Enum):
    """Reachability of a cited URL."""

    ACCESSIBLE = "accessible"
    REDIRECTED = "redirected"
    REDIRECTED_SAME_DOMAIN = "redirected_same_domain"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    SERVER_ERROR = "server_error"
    TIMEOUT = "timeout"
    BLOCKED = "blocked"
    NETWORK_ERROR = "network_error"
    PENDING = "pending"
    UNKNOWN = "unknown"


# Sub-object field -> flat field
_DOCUMENT_FIELDS = {
    "verifiedPageNumber": "verified_page_number",
    "verifiedLineIds": "verified_line_ids",
    "totalLinesOnPage": "total_lines_on_page",
    "verificationImageSrc": "verification_image_src",
}
_URL_FIELDS = {
    "verifiedUrl": "verified_url",
    "urlAccessStatus": "url_access_status",
    "verifiedTitle": "verified_title",
    "urlVerificationError": "url_block_reason",
}
_PROOF_FIELDS = {
    "proofId": "proof_id",
    "proofUrl": "proof_url",
    "proofImageUrl": "proof_image_url",
}
_CITATION_FIELDS = {
    "attachmentId": "source_id",
    "pageNumber": "page_number",
    "fullPhrase": "full_phrase",
    "anchorText": "anchor_text",
    "lineIds": "line_ids",
    "timestamps": "timestamps",
    "url": "url",
}


def _merge_sub_object(
    data: dict[str, Any], sub: Any, mapping: dict[str, str], overwrite: bool = True
) -> None:
    if not isinstance(sub, Mapping):
        return
    for camel, flat in mapping.items():
        for key in (camel, flat):
            if key in sub and sub[key] is not None:
                if overwrite or (data.get(flat) is None and data.get(camel) is None):
                    data[flat] = sub[key]
                break


class VerificationResult(BaseModel):
    """Outcome of verifying one citation against its source."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    outcome: SearchOutcome | None = Field(
        default=None, validation_alias=AliasChoices("outcome", "status", "searchStatus")
    )

    # Echoed claim (identifying subset), used to recompute the key
    source_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("source_id", "sourceId", "attachment_id", "attachmentId"),
    )
    url: str | None = None
    page_number: int | None = None
    full_phrase: str | None = None
    anchor_text: str | None = None
    line_ids: tuple[int, ...] | None = None
    timestamps: Timestamps | None = None

    # Where the phrase was actually found
    verified_page_number: int | None = None
    verified_line_ids: tuple[int, ...] | None = None
    verified_match_snippet: str | None = None
    verified_full_phrase: str | None = None
    verified_anchor_text: str | None = None
    total_lines_on_page: int | None = None
    verification_image_src: str | None = None

    # Proof artifacts
    proof_id: str | None = None
    proof_url: str | None = None
    proof_image_url: str | None = None

    label: str | None = None

    # URL citations
    verified_url: str | None = None
    verified_title: str | None = None
    url_access_status: UrlAccessStatus | None = None
    url_block_reason: str | None = None

    @model_validator(mode="before")
    @classmethod
    def flatten_sub_objects(cls, data: Any) -> Any:
        """Lift nested service sub-objects into flat fields."""
        if not isinstance(data, Mapping):
            return data
        flat = dict(data)
        _merge_sub_object(flat, flat.pop("document", None), _DOCUMENT_FIELDS)
        _merge_sub_object(flat, flat.pop("proof", None), _PROOF_FIELDS)
        if isinstance(flat.get("url"), Mapping):
            _merge_sub_object(flat, flat.pop("url"), _URL_FIELDS)
        # The echoed citation only fills gaps left by top-level fields
        _merge_sub_object(flat, flat.pop("citation", None), _CITATION_FIELDS, overwrite=False)
        return flat

    @field_validator("outcome", mode="before")
    @classmethod
    def unknown_outcome_is_pending(cls, v: Any) -> Any:
        """Unknown outcome strings degrade to None (rendered pending)."""
        if v is None or isinstance(v, SearchOutcome):
            return v
        try:
            return SearchOutcome(str(v))
        except ValueError:
            logger.warning(f"UNKNOWN_SEARCH_OUTCOME value={str(v)[:40]!r} treated_as=pending")
            return None

    @field_validator("url_access_status", mode="before")
    @classmethod
    def unknown_access_status(cls, v: Any) -> Any:
        if v is None or isinstance(v, UrlAccessStatus):
            return v
        try:
            return UrlAccessStatus(str(v))
        except ValueError:
            return UrlAccessStatus.UNKNOWN

    @field_validator("timestamps", mode="before")
    @classmethod
    def coerce_timestamps(cls, v: Any) -> Any:
        """Accept {"startTime", "endTime"} / {"start_time", "end_time"} dicts."""
        if v is None or isinstance(v, Timestamps):
            return v
        if isinstance(v, Mapping):
            start = v.get("start_time", v.get("startTime", v.get("start")))
            end = v.get("end_time", v.get("endTime", v.get("end")))
            if start is None and end is None:
                return None
            return Timestamps(
                start=str(start) if start is not None else None,
                end=str(end) if end is not None else None,
            )
        return v


def parse_verification_map(payload: Mapping[str, Any]) -> dict[str, VerificationResult]:
    """Parse a ``{citation_key: result}`` mapping from the verification service.

    Accepts the bare mapping or a ``{"verifications": {...}}`` envelope.
    Entries that fail validation are skipped with a warning; their
    citations then render as pending.

    Args:
        payload: Decoded JSON payload

    Returns:
        Mapping of citation key to VerificationResult
    """
    entries = payload.get("verifications", payload)
    if not isinstance(entries, Mapping):
        logger.warning(f"VERIFICATION_PAYLOAD_INVALID type={type(entries).__name__}")
        return {}

    results: dict[str, VerificationResult] = {}
    for key, raw in entries.items():
        if isinstance(raw, VerificationResult):
            results[key] = raw
            continue
        try:
            results[key] = VerificationResult.model_validate(raw)
        except ValidationError as e:
            logger.warning(
                f"VERIFICATION_ENTRY_SKIPPED key={key} errors={e.error_count()}"
            )
    logger.debug(f"VERIFICATION_MAP_PARSED entries={len(results)} skipped={len(entries) - len(results)}")
    return results
