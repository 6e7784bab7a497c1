"""Shared pytest fixtures for the express-gen test suite.

Provides reusable fixtures for:
- Raw and normalized project configurations
- Temporary output directories
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from expressgen.scaffolder.models import ProjectConfig, normalize


# ---------------------------------------------------------------------------
# Configurations
# ---------------------------------------------------------------------------


@pytest.fixture
def raw_minimal() -> dict[str, Any]:
    """Only the required field; every other choice takes its default."""
    return {"project_name": "my-api"}


@pytest.fixture
def default_config(raw_minimal: dict[str, Any]) -> ProjectConfig:
    return normalize(raw_minimal)


@pytest.fixture
def ts_full_config() -> ProjectConfig:
    """TypeScript with every optional component switched on."""
    return normalize(
        {
            "project_name": "full-api",
            "language": "typescript",
            "auth": "jwt",
            "database": "postgresql",
            "features": {"cors": True, "validation": True, "testing": True, "docker": True},
        }
    )


@pytest.fixture
def bare_config() -> ProjectConfig:
    """JavaScript with no auth, no database and no extras."""
    return normalize(
        {
            "project_name": "bare-api",
            "language": "javascript",
            "auth": "none",
            "database": "none",
            "features": {"cors": False, "validation": False, "testing": False, "docker": False},
        }
    )


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Temporary parent directory for generated projects (auto-cleanup)."""
    out = tmp_path / "output"
    out.mkdir()
    return out
