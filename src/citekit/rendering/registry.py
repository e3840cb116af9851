"""
Render Target Registry
======================

Central registry for managing render targets.

This module provides the RenderTargetRegistry class that manages
registration and lookup of output encodings, plus the module-level
``render`` convenience.
"""

from collections.abc import Mapping
from typing import Any

from citekit.core.exceptions import RenderTargetNotFoundError
from citekit.models.verification import VerificationResult
from citekit.rendering.base import RenderedOutput
from citekit.rendering.github import GitHubTarget
from citekit.rendering.html import HtmlTarget
from citekit.rendering.markdown import MarkdownTarget
from citekit.rendering.protocol import RenderTarget
from citekit.rendering.slack import SlackTarget
from citekit.rendering.terminal import TerminalTarget

DEFAULT_TARGET = "markdown"


class RenderTargetRegistry:
    """Central registry for render targets.

    The built-in targets are registered on construction. Third-party
    targets register here under a unique name.

    Example:
        >>> registry = RenderTargetRegistry()
        >>> registry.register("plain", PlainTextTarget())
        >>> output = registry.get_or_raise("html").render(text, verifications)
    """

    def __init__(self) -> None:
        """Initialize the registry with the built-in targets."""
        self._targets: dict[str, RenderTarget] = {}
        for target in (MarkdownTarget(), TerminalTarget(), HtmlTarget(), GitHubTarget(), SlackTarget()):
            self.register(target.name, target)

    def register(self, name: str, target: RenderTarget, replace: bool = False) -> None:
        """Register a render target.

        Args:
            name: Target name
            target: Target instance
            replace: If True, replace existing target

        Raises:
            ValueError: If name already registered and replace=False
        """
        if name in self._targets and not replace:
            raise ValueError(
                f"Render target '{name}' already registered. "
                f"Use replace=True to override."
            )
        self._targets[name] = target

    def unregister(self, name: str) -> bool:
        """Unregister a render target.

        Returns:
            True if unregistered, False if not found
        """
        if name in self._targets:
            del self._targets[name]
            return True
        return False

    def get(self, name: str) -> RenderTarget | None:
        """Get a render target by name, or None if not found."""
        return self._targets.get(name)

    def get_or_raise(self, name: str) -> RenderTarget:
        """Get a render target by name.

        Raises:
            RenderTargetNotFoundError: If no target has that name
        """
        target = self._targets.get(name)
        if target is None:
            raise RenderTargetNotFoundError(name, self.list_targets())
        return target

    def get_or_default(self, name: str | None) -> RenderTarget:
        """Get a render target, falling back to markdown."""
        if name is None:
            name = DEFAULT_TARGET
        target = self._targets.get(name)
        if target is None:
            return self._targets[DEFAULT_TARGET]
        return target

    def list_targets(self) -> list[str]:
        """Get list of registered target names."""
        return list(self._targets.keys())

    def list_targets_with_description(self) -> list[dict[str, str]]:
        """Get list of targets with descriptions.

        Returns:
            List of dicts with 'name' and 'description' keys
        """
        return [
            {"name": name, "description": target.description}
            for name, target in self._targets.items()
        ]

    def has(self, name: str) -> bool:
        """Check if a target is registered."""
        return name in self._targets

    def __len__(self) -> int:
        """Get number of registered targets."""
        return len(self._targets)

    def __contains__(self, name: str) -> bool:
        """Check if a target is registered."""
        return name in self._targets


# Global registry instance
_global_registry: RenderTargetRegistry | None = None


def get_render_registry() -> RenderTargetRegistry:
    """Get the global render target registry.

    Returns:
        Global RenderTargetRegistry instance
    """
    global _global_registry
    if _global_registry is None:
        _global_registry = RenderTargetRegistry()
    return _global_registry


def reset_render_registry() -> None:
    """Reset the global render target registry.

    Primarily for testing purposes.
    """
    global _global_registry
    _global_registry = None


def render(
    text: str,
    target: str = DEFAULT_TARGET,
    verifications: Mapping[str, VerificationResult | Mapping[str, Any]] | None = None,
    **options: Any,
) -> RenderedOutput:
    """Render text with the named target from the global registry.

    Args:
        text: Model output containing citation markers
        target: Registered target name
        verifications: Verification results keyed by citation key
        **options: Target option overrides (variant, include_sources, ...)

    Raises:
        RenderTargetNotFoundError: If the target is not registered
    """
    return get_render_registry().get_or_raise(target).render(text, verifications, **options)
