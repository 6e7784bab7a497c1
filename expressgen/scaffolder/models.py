"""Configuration model for the Express.js scaffolder.

A ``ProjectConfig`` is the single, immutable record of every generation
choice.  It is built once per run by :func:`normalize` and then read by the
resolver, the composer and the manifest assembler; none of them mutate it.

Defaults applied to unset fields::

    language   = javascript
    auth       = jwt
    database   = mongodb
    cors       = True
    validation = True
    testing    = False
    docker     = False
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class LanguageVariant(str, Enum):
    """Language of the generated sources. Selects extension and syntax branch."""
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"


class AuthMode(str, Enum):
    """Authentication strategy wired into the generated server."""
    NONE = "none"
    JWT = "jwt"
    SESSION = "session"


class DatabaseKind(str, Enum):
    """Persistence backend. ``mongodb`` is a document store, the rest are relational."""
    NONE = "none"
    MONGODB = "mongodb"
    POSTGRESQL = "postgresql"
    MYSQL = "mysql"
    SQLITE = "sqlite"


RELATIONAL_DATABASES = frozenset(
    {DatabaseKind.POSTGRESQL, DatabaseKind.MYSQL, DatabaseKind.SQLITE}
)


# ---------------------------------------------------------------------------
# Project name rules
# ---------------------------------------------------------------------------

MAX_PROJECT_NAME_LENGTH = 50

RESERVED_PROJECT_NAMES = frozenset(
    {"node_modules", "src", "dist", "build", "test", "tests"}
)

_NAME_CHARS_RE = re.compile(r"^[A-Za-z0-9_-]+$")
_NAME_START_RE = re.compile(r"^[A-Za-z]")


class ConfigValidationError(ValueError):
    """Raised when raw input cannot be turned into a ``ProjectConfig``.

    Attributes:
        field: Name of the offending input field (e.g. ``"project_name"``).
        message: Human-readable description of the violated rule.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


def validate_project_name(name: str) -> str:
    """Check *name* against the project naming rules.

    Returns the stripped name.  Raises ``ValueError`` with a message naming
    the first rule that fails.
    """
    name = (name or "").strip()
    if not name:
        raise ValueError("Project name cannot be empty")
    if not _NAME_CHARS_RE.match(name):
        raise ValueError(
            "Project name can only contain letters, numbers, hyphens, and underscores"
        )
    if not _NAME_START_RE.match(name):
        raise ValueError("Project name must start with a letter")
    if len(name) > MAX_PROJECT_NAME_LENGTH:
        raise ValueError(
            f"Project name must be {MAX_PROJECT_NAME_LENGTH} characters or less"
        )
    if name.lower() in RESERVED_PROJECT_NAMES:
        raise ValueError(f'"{name}" is a reserved name. Please choose a different name.')
    return name


# ---------------------------------------------------------------------------
# Configuration models
# ---------------------------------------------------------------------------

class Features(BaseModel):
    """Independent optional extras."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    cors: bool = Field(default=True, description="Enable the CORS middleware")
    validation: bool = Field(default=True, description="Validate request bodies with express-validator")
    testing: bool = Field(default=False, description="Generate Jest config and tests")
    docker: bool = Field(default=False, description="Generate Dockerfile and Compose files")


FEATURE_NAMES: tuple[str, ...] = tuple(Features.model_fields)


class ProjectConfig(BaseModel):
    """Validated, normalized description of the project to scaffold."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    project_name: str = Field(..., description="Directory and package name")
    language: LanguageVariant = Field(default=LanguageVariant.JAVASCRIPT)
    auth: AuthMode = Field(default=AuthMode.JWT)
    database: DatabaseKind = Field(default=DatabaseKind.MONGODB)
    features: Features = Field(default_factory=Features)

    @field_validator("project_name")
    @classmethod
    def _check_project_name(cls, value: str) -> str:
        return validate_project_name(value)

    # -- Derived values ----------------------------------------------------

    @property
    def extension(self) -> str:
        """Source file extension without the dot."""
        return "ts" if self.is_typed else "js"

    @property
    def is_typed(self) -> bool:
        return self.language is LanguageVariant.TYPESCRIPT

    @property
    def has_auth(self) -> bool:
        return self.auth is not AuthMode.NONE

    @property
    def has_database(self) -> bool:
        return self.database is not DatabaseKind.NONE

    @property
    def is_relational(self) -> bool:
        return self.database in RELATIONAL_DATABASES

    # -- Serialisation -----------------------------------------------------

    def as_raw_input(self) -> dict[str, Any]:
        """Return a plain dict that :func:`normalize` turns back into ``self``."""
        return self.model_dump(mode="json")

    def save(self, path: str | Path) -> Path:
        """Persist the choices as JSON and return the written path."""
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2) + "\n", encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: str | Path) -> "ProjectConfig":
        """Load saved choices, applying the same validation as :func:`normalize`."""
        import json

        raw = json.loads(Path(path).read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ConfigValidationError("config", "Configuration file must contain a JSON object")
        return normalize(raw)


# ---------------------------------------------------------------------------
# normalize()
# ---------------------------------------------------------------------------

def normalize(raw: Mapping[str, Any]) -> ProjectConfig:
    """Build a ``ProjectConfig`` from loosely-shaped user input.

    Keys whose value is ``None`` are treated as unset so the documented
    defaults apply.  Feature flags may be given either nested under
    ``"features"`` or as top-level keys (``"cors"``, ``"testing"``, ...).

    Raises:
        ConfigValidationError: On input that is not a mapping, an invalid
            project name, an unknown enum value, or an unrecognised key.
            ``field`` names the culprit.
    """
    if not isinstance(raw, Mapping):
        raise ConfigValidationError(
            "config", f"Expected a mapping of options, got {type(raw).__name__}"
        )

    data: dict[str, Any] = {k: v for k, v in raw.items() if v is not None}

    features: dict[str, Any] = {}
    nested = data.pop("features", None)
    if nested is not None:
        if isinstance(nested, BaseModel):
            nested = nested.model_dump()
        if not isinstance(nested, Mapping):
            raise ConfigValidationError("features", "Expected a mapping of feature flags")
        features.update({k: v for k, v in nested.items() if v is not None})
    for name in FEATURE_NAMES:
        if name in data:
            features[name] = data.pop(name)
    data["features"] = features

    try:
        return ProjectConfig.model_validate(data)
    except ValidationError as exc:
        raise _to_config_error(exc) from exc


def _to_config_error(exc: ValidationError) -> ConfigValidationError:
    """Reduce a pydantic error to the first offending field and message."""
    error = exc.errors()[0]
    loc = [str(part) for part in error.get("loc", ())]
    field = loc[-1] if loc else "config"
    if error.get("type") == "value_error":
        message = str(error.get("ctx", {}).get("error", error["msg"]))
    elif error.get("type") == "extra_forbidden":
        message = f"Unknown option '{field}'"
    elif error.get("type") == "missing":
        message = "This field is required"
    else:
        message = f"Invalid value {error.get('input')!r}: {error['msg']}"
    return ConfigValidationError(field, message)
