"""Render config file loading.

String values may reference the environment as ``${VAR}`` (required) or
``${VAR:-default}``. A missing required variable is reported with the
dotted key it sits under, e.g. ``targets.html.proof_base_url``.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from citekit.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_REFERENCE = re.compile(r"\$\{(?P<name>[^}:]+)(?::-(?P<default>[^}]*))?\}")


def _expand(text: str, key: str | None) -> str:
    def _lookup(match: re.Match[str]) -> str:
        name = match.group("name")
        resolved = os.environ.get(name, match.group("default"))
        if resolved is None:
            raise ConfigurationError(
                f"Environment variable '{name}' is not set and no default provided",
                key=key,
            )
        return resolved

    return ENV_REFERENCE.sub(_lookup, text)


def interpolate_env_vars(value: Any, key: str | None = None) -> Any:
    """Expand environment references in every string of a parsed YAML tree.

    Args:
        value: Parsed YAML (mapping, list, string or scalar)
        key: Dotted key of ``value`` in the enclosing document

    Raises:
        ConfigurationError: A required variable is unset
    """
    if isinstance(value, str):
        return _expand(value, key)
    if isinstance(value, dict):
        return {
            name: interpolate_env_vars(item, f"{key}.{name}" if key else str(name))
            for name, item in value.items()
        }
    if isinstance(value, list):
        return [interpolate_env_vars(item, f"{key or ''}[{i}]") for i, item in enumerate(value)]
    return value


def load_yaml_config(config_path: Path) -> dict[str, Any]:
    """Read a YAML mapping and expand its environment references.

    An empty file is an empty mapping.

    Raises:
        ConfigurationError: The file is missing or unparseable, its top
            level is not a mapping, or a required variable is unset
    """
    path = str(config_path)
    try:
        raw = yaml.safe_load(Path(config_path).read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigurationError(f"Config file not found: {path}", path) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}: {e}", path) from e

    if raw is None:
        logger.warning(f"RENDER_CONFIG_EMPTY path={path}")
        return {}
    if not isinstance(raw, dict):
        raise ConfigurationError(f"Expected mapping in {path}, got {type(raw).__name__}", path)

    try:
        config = interpolate_env_vars(raw)
    except ConfigurationError as e:
        raise ConfigurationError(e.message, path, key=e.details.get("key")) from e
    logger.debug(f"RENDER_CONFIG_LOADED path={path} keys={sorted(config)}")
    return config
