"""Unit tests for verification result parsing."""

from citekit.models.verification import (
    SearchOutcome,
    UrlAccessStatus,
    VerificationResult,
    parse_verification_map,
)


class TestVerificationResult:
    """Tests for VerificationResult validation."""

    def test_camel_case_fields(self) -> None:
        """camelCase payloads populate snake_case fields."""
        result = VerificationResult.model_validate(
            {
                "status": "found",
                "attachmentId": "doc1",
                "pageNumber": 3,
                "fullPhrase": "x",
                "verifiedPageNumber": 4,
                "proofUrl": "https://proof/1",
            }
        )
        assert result.outcome is SearchOutcome.FOUND
        assert result.source_id == "doc1"
        assert result.page_number == 3
        assert result.verified_page_number == 4
        assert result.proof_url == "https://proof/1"

    def test_nested_sub_objects(self) -> None:
        """document, proof and url sub-objects are flattened."""
        result = VerificationResult.model_validate(
            {
                "searchStatus": "found_on_other_page",
                "document": {"verifiedPageNumber": 9, "totalLinesOnPage": 40},
                "proof": {"proofId": "p1", "proofImageUrl": "https://img/1"},
                "url": {"verifiedTitle": "Example", "urlAccessStatus": "accessible"},
            }
        )
        assert result.verified_page_number == 9
        assert result.total_lines_on_page == 40
        assert result.proof_id == "p1"
        assert result.proof_image_url == "https://img/1"
        assert result.verified_title == "Example"
        assert result.url_access_status is UrlAccessStatus.ACCESSIBLE

    def test_echoed_citation_fills_gaps(self) -> None:
        """The echoed citation does not override top-level fields."""
        result = VerificationResult.model_validate(
            {
                "pageNumber": 2,
                "citation": {"pageNumber": 5, "fullPhrase": "echoed", "attachmentId": "d"},
            }
        )
        assert result.page_number == 2
        assert result.full_phrase == "echoed"
        assert result.source_id == "d"

    def test_unknown_access_status(self) -> None:
        """Unknown access statuses become UNKNOWN."""
        result = VerificationResult.model_validate({"urlAccessStatus": "teapot"})
        assert result.url_access_status is UrlAccessStatus.UNKNOWN

    def test_timestamps_from_dict(self) -> None:
        """Timestamp dicts in either spelling are accepted."""
        result = VerificationResult.model_validate({"timestamps": {"startTime": "1", "endTime": "2"}})
        assert result.timestamps is not None
        assert (result.timestamps.start, result.timestamps.end) == ("1", "2")


class TestParseVerificationMap:
    """Tests for parse_verification_map."""

    def test_bare_mapping(self) -> None:
        """A plain key -> result mapping is parsed."""
        parsed = parse_verification_map({"k1": {"status": "found"}, "k2": {"status": "not_found"}})
        assert parsed["k1"].outcome is SearchOutcome.FOUND
        assert parsed["k2"].outcome is SearchOutcome.NOT_FOUND

    def test_envelope(self) -> None:
        """A {"verifications": ...} envelope is unwrapped."""
        parsed = parse_verification_map({"verifications": {"k1": {"status": "found"}}})
        assert list(parsed) == ["k1"]

    def test_invalid_entry_skipped(self) -> None:
        """Entries that fail validation are skipped, others kept."""
        parsed = parse_verification_map(
            {"good": {"status": "found"}, "bad": {"pageNumber": "not a number"}}
        )
        assert list(parsed) == ["good"]

    def test_non_mapping_payload(self) -> None:
        """A non-mapping envelope gives an empty map."""
        assert parse_verification_map({"verifications": ["x"]}) == {}

    def test_results_passed_through(self) -> None:
        """Already-built results are kept as is."""
        result = VerificationResult(outcome=SearchOutcome.FOUND)
        assert parse_verification_map({"k": result})["k"] is result
