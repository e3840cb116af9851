"""Unit tests for citations in structured (JSON-shaped) model output."""

from citekit.keys import citation_key
from citekit.models.citation import Citation
from citekit.parsing.producer import extract_citations
from citekit.parsing.structured import (
    citation_from_object,
    extract_structured_citations,
    find_citation_objects,
    is_json_citation_format,
)


class TestDetection:
    """Tests for recognizing citation objects."""

    def test_camel_and_snake_keys(self) -> None:
        """Either key style marks an object as a citation."""
        assert is_json_citation_format({"fullPhrase": "x"}) is True
        assert is_json_citation_format({"full_phrase": "x"}) is True
        assert is_json_citation_format([{"answer": 1}, {"keySpan": "x"}]) is True

    def test_plain_objects_are_not_citations(self) -> None:
        """Objects and lists without citation keys are rejected."""
        assert is_json_citation_format({"answer": "x"}) is False
        assert is_json_citation_format([]) is False
        assert is_json_citation_format("full_phrase") is False

    def test_nested_citation_properties(self) -> None:
        """citation/citations properties are collected at any depth."""
        data = {
            "sections": [
                {"text": "a", "citations": [{"fullPhrase": "one"}, {"fullPhrase": "two"}]},
                {"text": "b", "citation": {"full_phrase": "three"}},
            ],
            "citations": "not a list of objects",
        }
        assert [item.get("fullPhrase") or item.get("full_phrase") for item in find_citation_objects(data)] == [
            "one",
            "two",
            "three",
        ]


class TestCitationFromObject:
    """Tests for building citations from objects."""

    def test_same_citation_as_tag(self) -> None:
        """An object and the equivalent tag build identical citations."""
        from_object = citation_from_object(
            {
                "fileId": "doc1",
                "pageNumber": 3,
                "fullPhrase": "Revenue grew 45%",
                "keySpan": "grew 45%",
                "lineIds": [14, 12, 13],
            },
            ordinal=1,
        )
        from_tag = extract_citations(
            "<cite attachment_id='doc1' page_number='3' full_phrase='Revenue grew 45%' "
            "anchor_text='grew 45%' line_ids='12-14' />"
        )[0]
        assert from_object == from_tag

    def test_start_page_key(self) -> None:
        """A legacy page key gives the page number."""
        citation = citation_from_object(
            {"full_phrase": "x", "start_page_key": "page_number_4_index_1"}, ordinal=2
        )
        assert citation is not None
        assert citation.page_number == 4
        assert citation.start_page_id == "page_number_4_index_1"
        assert citation.ordinal == 2

    def test_timestamp_object(self) -> None:
        """A timestamps object is flattened to start and end times."""
        citation = citation_from_object(
            {"full_phrase": "x", "timestamps": {"startTime": "00:01", "endTime": "00:04"}}, ordinal=1
        )
        assert citation is not None
        assert citation.timestamps is not None
        assert (citation.timestamps.start, citation.timestamps.end) == ("00:01", "00:04")

    def test_missing_phrase_is_skipped(self) -> None:
        """Objects without a full phrase are not citations."""
        assert citation_from_object({"keySpan": "x", "fileId": "d"}, ordinal=1) is None
        assert citation_from_object({"fullPhrase": "  "}, ordinal=1) is None


class TestExtractStructured:
    """Tests for structured input to extract_citations."""

    def test_root_list(self) -> None:
        """A list of citation objects is read directly and numbered in order."""
        citations = extract_structured_citations(
            [{"fullPhrase": "a", "fileId": "d"}, {"note": "skip"}, {"full_phrase": "b", "file_id": "d"}]
        )
        assert [(c.full_phrase, c.ordinal) for c in citations] == [("a", 1), ("b", 2)]

    def test_objects_then_embedded_tags(self) -> None:
        """Citation objects come first, then tags inside string values."""
        output = {
            "answer": "Margins were flat<cite attachment_id='doc1' full_phrase='Margin unchanged' />.",
            "citations": [{"fileId": "doc1", "fullPhrase": "Revenue grew"}],
        }
        citations = extract_citations(output)
        assert [(c.full_phrase, c.ordinal) for c in citations] == [
            ("Revenue grew", 1),
            ("Margin unchanged", 2),
        ]
        assert all(isinstance(c, Citation) for c in citations)

    def test_duplicate_found_both_ways_kept_once(self) -> None:
        """The same citation as an object and as a tag is one citation."""
        output = {
            "answer": "x<cite attachment_id='doc1' full_phrase='Revenue grew' />",
            "citations": [{"attachmentId": "doc1", "fullPhrase": "Revenue grew"}],
        }
        citations = extract_citations(output)
        assert len(citations) == 1
        assert citation_key(citations[0]) == citation_key(extract_citations(output["answer"])[0])

    def test_no_citations(self) -> None:
        """Structured output without citations yields none."""
        assert extract_citations({"answer": "plain", "score": 3}) == []
        assert extract_citations([]) == []
