"""express-gen tool settings.

Settings that shape how the command runs, as opposed to the ``ProjectConfig``
describing what it generates.  They are plain Pydantic v2 models so they can
be validated at construction time and built from environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from expressgen.scaffolder.models import (
    AuthMode,
    ConfigValidationError,
    DatabaseKind,
    LanguageVariant,
)

ENV_PREFIX = "EXPRESS_GEN_"

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Global express-gen settings.

    ``language``, ``auth`` and ``database`` seed the defaults offered by the
    command; explicit flags and prompt answers override them.
    """

    output_dir: Path = Field(default=Path("."), description="Parent directory for new projects")
    show_banner: bool = Field(default=True)
    language: LanguageVariant = Field(default=LanguageVariant.JAVASCRIPT)
    auth: AuthMode = Field(default=AuthMode.JWT)
    database: DatabaseKind = Field(default=DatabaseKind.MONGODB)

    def project_defaults(self) -> dict[str, str]:
        """Default choices in the shape ``normalize`` accepts."""
        return {
            "language": self.language.value,
            "auth": self.auth.value,
            "database": self.database.value,
        }

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            EXPRESS_GEN_OUTPUT_DIR, EXPRESS_GEN_NO_BANNER,
            EXPRESS_GEN_LANGUAGE, EXPRESS_GEN_AUTH, EXPRESS_GEN_DATABASE.

        Raises:
            ConfigValidationError: a variable holds an unsupported value.
        """
        env = os.environ if environ is None else environ

        kwargs: dict[str, Any] = {}
        if env.get(ENV_PREFIX + "OUTPUT_DIR"):
            kwargs["output_dir"] = Path(env[ENV_PREFIX + "OUTPUT_DIR"])
        if env.get(ENV_PREFIX + "NO_BANNER"):
            kwargs["show_banner"] = env[ENV_PREFIX + "NO_BANNER"].strip().lower() not in _TRUTHY
        for name in ("language", "auth", "database"):
            value = env.get(ENV_PREFIX + name.upper())
            if value:
                kwargs[name] = value.strip().lower()

        try:
            return cls(**kwargs)
        except ValidationError as exc:
            error = exc.errors()[0]
            field = str(error["loc"][0]) if error.get("loc") else "settings"
            raise ConfigValidationError(
                ENV_PREFIX + field.upper(),
                f"Invalid value {error.get('input')!r}: {error['msg']}",
            ) from exc
