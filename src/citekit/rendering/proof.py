"""Proof page URL construction.

A proof page shows where a cited phrase was found in its source. The
proof id comes from the verification result; when the service did not
assign one, the citation key stands in for it.
"""

from collections.abc import Mapping
from typing import Literal
from urllib.parse import quote, urlencode

from citekit.models.verification import VerificationResult

ProofView = Literal["snippet", "context", "page"]
ProofFormat = Literal["html", "png"]
ProofTheme = Literal["light", "dark"]


def build_proof_url(
    base_url: str,
    proof_id: str,
    view: ProofView | None = None,
    format: ProofFormat | None = None,
    theme: ProofTheme | None = None,
    pad: int | None = None,
    token: str | None = None,
    expires: int | None = None,
) -> str:
    """Build ``{base}/p/{proof_id}`` with optional query parameters.

    Args:
        base_url: Proof service base URL (trailing slashes ignored)
        proof_id: Proof id or citation key
        view: Snippet, surrounding context, or full page
        format: HTML page or PNG image
        theme: Light or dark rendering
        pad: Extra context padding in pixels
        token: Signed-URL token
        expires: Signed-URL expiry timestamp

    Returns:
        Absolute proof URL
    """
    url = f"{base_url.rstrip('/')}/p/{quote(proof_id, safe='')}"
    params: dict[str, str] = {}
    if view:
        params["view"] = view
    if format:
        params["format"] = format
    if theme:
        params["theme"] = theme
    if pad is not None:
        params["pad"] = str(pad)
    if token:
        params["token"] = token
    if expires is not None:
        params["expires"] = str(expires)
    return f"{url}?{urlencode(params)}" if params else url


def build_snippet_image_url(base_url: str, proof_id: str, theme: ProofTheme | None = None) -> str:
    """Direct PNG URL of a proof snippet, for image embeds."""
    return build_proof_url(base_url, proof_id, view="snippet", format="png", theme=theme)


def build_proof_urls(
    verifications: Mapping[str, VerificationResult], base_url: str
) -> dict[str, str]:
    """Proof URL for every verification, keyed by citation key."""
    return {
        key: build_proof_url(base_url, result.proof_id or key)
        for key, result in verifications.items()
    }
