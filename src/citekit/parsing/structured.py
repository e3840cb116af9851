"""Citations from structured model output.

Models asked for JSON output return citations as objects instead of tags::

    {"answer": "...",
     "citations": [{"fileId": "doc1", "fullPhrase": "Revenue grew 45%",
                    "startPageKey": "page_number_3_index_0", "lineIds": [12, 13]}]}

Object keys go through the same alias table as tag attributes, so camelCase,
snake_case and legacy spellings all build the same ``Citation``.
"""

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from citekit.models.citation import Citation
from citekit.parsing.attributes import canonical_attribute_name
from citekit.parsing.builder import build_citation

logger = logging.getLogger(__name__)

# An object carrying any of these is a citation object
CITATION_FIELDS = frozenset({"full_phrase", "start_page_id", "anchor_text", "line_ids"})
# Properties searched for nested citation objects
CONTAINER_KEYS = ("citation", "citations")


def is_citation_object(item: Any) -> bool:
    """Check whether ``item`` is a mapping with citation-like keys."""
    return isinstance(item, Mapping) and any(
        canonical_attribute_name(str(key)) in CITATION_FIELDS for key in item
    )


def is_json_citation_format(data: Any) -> bool:
    """A citation object, or a list holding at least one."""
    if isinstance(data, list | tuple):
        return any(is_citation_object(item) for item in data)
    return is_citation_object(data)


def find_citation_objects(data: Any) -> list[Mapping[str, Any]]:
    """Collect citation objects under ``citation``/``citations`` keys, at any depth."""
    found: list[Mapping[str, Any]] = []

    def _walk(node: Any) -> None:
        if isinstance(node, Mapping):
            for key in CONTAINER_KEYS:
                value = node.get(key)
                if value and is_json_citation_format(value):
                    items = value if isinstance(value, list | tuple) else [value]
                    found.extend(item for item in items if isinstance(item, Mapping))
            for key, value in node.items():
                if key not in CONTAINER_KEYS:
                    _walk(value)
        elif isinstance(node, list | tuple):
            for item in node:
                _walk(item)

    _walk(data)
    return found


def _attribute_value(value: Any) -> str | None:
    if value is None or isinstance(value, Mapping):
        return None
    if isinstance(value, list | tuple):
        return ",".join(str(v) for v in value)
    return str(value)


def citation_from_object(item: Mapping[str, Any], ordinal: int) -> Citation | None:
    """Build a Citation from one citation object.

    Objects without a full phrase are not citations and yield None.
    """
    data = {canonical_attribute_name(str(key)): value for key, value in item.items()}

    timestamps = data.pop("timestamps", None)
    if isinstance(timestamps, Mapping):
        for key, value in timestamps.items():
            data.setdefault(canonical_attribute_name(str(key)), value)
    elif timestamps is not None:
        data["timestamps"] = timestamps

    attrs = {}
    for key, value in data.items():
        text = _attribute_value(value)
        if text is not None:
            attrs[key] = text

    if not attrs.get("full_phrase", "").strip():
        logger.debug(f"STRUCTURED_CITATION_SKIPPED reason=no_full_phrase keys={sorted(attrs)}")
        return None
    return build_citation(attrs, ordinal)


def extract_structured_citations(data: Any, first_ordinal: int = 1) -> list[Citation]:
    """Citations held as objects in structured output.

    A root that is itself a citation object (or list of them) is read
    directly; otherwise ``citation``/``citations`` properties are collected
    from anywhere in the tree.
    """
    if is_json_citation_format(data):
        items = list(data) if isinstance(data, list | tuple) else [data]
    else:
        items = find_citation_objects(data)

    citations: list[Citation] = []
    for item in items:
        if not isinstance(item, Mapping):
            continue
        citation = citation_from_object(item, first_ordinal + len(citations))
        if citation is not None:
            citations.append(citation)
    return citations


def iter_strings(data: Any) -> Iterator[str]:
    """Every string value in a nested structure, depth first."""
    if isinstance(data, str):
        yield data
    elif isinstance(data, Mapping):
        for value in data.values():
            yield from iter_strings(value)
    elif isinstance(data, list | tuple):
        for item in data:
            yield from iter_strings(item)
