"""Configuration: environment settings and per-target render defaults."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from citekit.core.yaml_loader import load_yaml_config

logger = logging.getLogger(__name__)

_package_root = Path(__file__).resolve().parent.parent  # config.py -> core -> citekit
DEFAULT_RENDER_CONFIG_PATH = _package_root / "config" / "render.yaml"


class Settings(BaseSettings):
    """Library settings loaded from CITEKIT_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CITEKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["text", "json"] = "text"

    # Render defaults file; None uses the packaged render.yaml
    render_config_path: str | None = None

    # Inputs above this many characters are not scanned for markers
    max_input_length: int = Field(default=100_000, gt=0)

    # Line-id ranges wider than this are sampled instead of expanded
    max_line_range: int = Field(default=1000, gt=1)
    line_range_samples: int = Field(default=50, ge=2)

    proof_base_url: str | None = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class RenderConfig(BaseModel):
    """Render defaults for every output target.

    ``targets`` maps a target name ("markdown", "html", ...) to option
    overrides which the target's options model validates.
    """

    proof_base_url: str | None = None
    targets: dict[str, dict[str, Any]] = Field(default_factory=dict)

    model_config = {"frozen": True}

    def defaults_for(self, target: str) -> dict[str, Any]:
        """Return option defaults for a target (empty if unconfigured)."""
        defaults = dict(self.targets.get(target, {}))
        if self.proof_base_url and "proof_base_url" not in defaults:
            defaults["proof_base_url"] = self.proof_base_url
        return defaults


@lru_cache
def load_render_config(config_path: Path | None = None) -> RenderConfig:
    """Load render defaults from YAML.

    Args:
        config_path: YAML file path. If None, uses CITEKIT_RENDER_CONFIG_PATH
            or the packaged defaults.

    Returns:
        Validated RenderConfig instance
    """
    if config_path is None:
        configured = get_settings().render_config_path
        config_path = Path(configured) if configured else DEFAULT_RENDER_CONFIG_PATH

    raw_config = load_yaml_config(config_path)
    # Empty interpolation (${VAR:-}) means "unset"
    if not raw_config.get("proof_base_url"):
        raw_config["proof_base_url"] = get_settings().proof_base_url
    config = RenderConfig.model_validate(raw_config)
    logger.debug(
        f"RENDER_CONFIG_LOADED path={config_path} targets={sorted(config.targets)}"
    )
    return config


def get_render_config() -> RenderConfig:
    """Get the cached render configuration."""
    return load_render_config()


def clear_config_cache() -> None:
    """Clear cached settings and render config (useful for tests)."""
    get_settings.cache_clear()
    load_render_config.cache_clear()
