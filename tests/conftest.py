"""Pytest configuration for citekit tests.

This file is automatically loaded by pytest and sets up:
1. Loading of .env file for local overrides
2. Logging configuration
3. Isolation of cached settings, render config and the target registry
"""

import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from dotenv import load_dotenv

from citekit.core.config import clear_config_cache
from citekit.core.logging import setup_logging
from citekit.rendering.registry import reset_render_registry

# tests/conftest.py -> tests -> project_root
_project_root = Path(__file__).resolve().parent.parent

_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

_log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
setup_logging(log_level=_log_level, log_format="text")


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Give every test fresh settings, render config and registry."""
    for name in list(os.environ):
        if name.startswith("CITEKIT_"):
            monkeypatch.delenv(name)
    monkeypatch.delenv("NO_COLOR", raising=False)
    clear_config_cache()
    reset_render_registry()
    yield
    clear_config_cache()
    reset_render_registry()
