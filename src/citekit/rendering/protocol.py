"""
Render Target Protocol
======================

Protocol for output encodings of cited text.

A render target turns model output (with citation markers), a map of
verification results and options into a ``RenderedOutput``. The built-in
targets derive from ``BaseRenderTarget``; third-party targets only need
to satisfy this protocol to be registered.
"""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from citekit.models.verification import VerificationResult
from citekit.rendering.base import CitationVariant, RenderedOutput, RenderOptions


@runtime_checkable
class RenderTarget(Protocol):
    """Protocol for render targets.

    Example:
        >>> class PlainTextTarget:
        ...     name = "plain"
        ...     description = "Markers removed, nothing else"
        ...     default_variant = CitationVariant.MINIMAL
        ...     supported_variants = frozenset({CitationVariant.MINIMAL})
        ...
        ...     def render(self, text, verifications=None, options=None, **overrides):
        ...         ...
    """

    @property
    def name(self) -> str:
        """Unique target name used for registry lookup (e.g. "html")."""
        ...

    @property
    def description(self) -> str:
        """Human-readable description of the output encoding."""
        ...

    @property
    def default_variant(self) -> CitationVariant:
        """Variant used when none (or an unsupported one) is requested."""
        ...

    @property
    def supported_variants(self) -> frozenset[CitationVariant]:
        """Variants this target can draw."""
        ...

    def render(
        self,
        text: str,
        verifications: Mapping[str, VerificationResult | Mapping[str, Any]] | None = None,
        options: RenderOptions | None = None,
        **overrides: Any,
    ) -> RenderedOutput:
        """Render ``text`` with every citation marker replaced.

        Args:
            text: Model output containing citation markers
            verifications: Verification results keyed by citation key
            options: Target options; unset fields use config defaults
            **overrides: Individual option overrides

        Returns:
            RenderedOutput
        """
        ...
