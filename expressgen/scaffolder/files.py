"""File-set resolver.

Maps a ``ProjectConfig`` to the ordered list of files the generated project
contains.  Every artifact is declared once in ``LOGICAL_FILES`` with its
target path, the gate that includes it and the template branch used for
each language variant; :func:`resolve` is a plain filter over that table.
"""

from __future__ import annotations

import posixpath
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from . import features as gates
from .features import FeatureGate
from .models import LanguageVariant, ProjectConfig

JS = LanguageVariant.JAVASCRIPT
TS = LanguageVariant.TYPESCRIPT


@dataclass(frozen=True)
class LogicalFile:
    """A generated artifact, independent of its final extension.

    Attributes:
        id: Stable identifier (e.g. ``"error-handler"``).
        path: Target path relative to the project root; ``{ext}`` is
            replaced with ``js`` or ``ts``.
        gate: Inclusion predicate.
        branches: Template name per language variant.  Empty when the
            content comes from ``builder`` instead.
        builder: Key of a structured-document builder in the composer
            (``package.json``, ``tsconfig.json``, ``docker-compose.yml``).
    """

    id: str
    path: str
    gate: FeatureGate = gates.ALWAYS
    branches: Mapping[LanguageVariant, str] = field(default_factory=dict)
    builder: str | None = None

    def target_path(self, config: ProjectConfig) -> str:
        return self.path.format(ext=config.extension)

    def branch_for(self, variant: LanguageVariant) -> str | None:
        return self.branches.get(variant)


@dataclass(frozen=True)
class ResolvedFile:
    """A logical file bound to its concrete path for one configuration."""

    logical_id: str
    path: str


def _common(template: str) -> dict[LanguageVariant, str]:
    return {JS: f"common/{template}", TS: f"common/{template}"}


def _variant(path: str) -> dict[LanguageVariant, str]:
    """Per-language templates mirroring the output path (``{ext}`` expanded)."""
    return {
        JS: "js/" + path.format(ext="js") + ".j2",
        TS: "ts/" + path.format(ext="ts") + ".j2",
    }


def _entry(id: str, path: str, gate: FeatureGate = gates.ALWAYS) -> LogicalFile:
    return LogicalFile(id=id, path=path, gate=gate, branches=_variant(path))


# ---------------------------------------------------------------------------
# The file table
# ---------------------------------------------------------------------------

LOGICAL_FILES: tuple[LogicalFile, ...] = (
    # Project root
    LogicalFile("manifest", "package.json", builder="package.json"),
    LogicalFile("env-template", ".env.example", branches=_common("env.example.j2")),
    LogicalFile("ignore-file", ".gitignore", branches=_common("gitignore.j2")),
    LogicalFile("readme", "README.md", branches=_common("README.md.j2")),
    LogicalFile(
        "compiler-config", "tsconfig.json", gate=gates.TYPED, builder="tsconfig.json"
    ),
    _entry("entry-point", "server.{ext}"),
    # Application
    _entry("app-root", "src/app.{ext}"),
    _entry("environment-config", "src/config/environment.{ext}"),
    _entry("database-config", "src/config/database.{ext}", gates.DATABASE),
    _entry("auth-middleware", "src/middleware/auth.{ext}", gates.AUTH),
    _entry("error-handler", "src/middleware/errorHandler.{ext}"),
    _entry("route-aggregator", "src/routes/index.{ext}"),
    _entry("user-routes", "src/routes/userRoutes.{ext}"),
    _entry("user-controller", "src/controllers/userController.{ext}"),
    _entry("user-service", "src/services/userService.{ext}"),
    _entry("user-model", "src/models/User.{ext}", gates.DATABASE),
    _entry("helpers", "src/utils/helpers.{ext}"),
    _entry("constants", "src/utils/constants.{ext}"),
    LogicalFile(
        "type-definitions",
        "src/types/index.ts",
        gate=gates.TYPED,
        branches={TS: "ts/src/types/index.ts.j2"},
    ),
    # Testing
    LogicalFile(
        "test-config", "jest.config.js", gate=gates.TESTING, branches=_common("jest.config.js.j2")
    ),
    _entry("unit-test", "tests/unit/user.test.{ext}", gates.TESTING),
    _entry("api-test", "tests/integration/api.test.{ext}", gates.TESTING),
    # Containers
    LogicalFile("dockerfile", "Dockerfile", gate=gates.DOCKER, branches=_common("Dockerfile.j2")),
    LogicalFile(
        "compose-file", "docker-compose.yml", gate=gates.DOCKER, builder="docker-compose.yml"
    ),
    LogicalFile(
        "docker-ignore", ".dockerignore", gate=gates.DOCKER, branches=_common("dockerignore.j2")
    ),
)

FILES_BY_ID: dict[str, LogicalFile] = {f.id: f for f in LOGICAL_FILES}


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------

def get_logical_file(logical_id: str) -> LogicalFile:
    """Look up a table entry.  Raises ``KeyError`` for unknown ids."""
    try:
        return FILES_BY_ID[logical_id]
    except KeyError:
        raise KeyError(f"Unknown logical file: {logical_id!r}") from None


def resolve(config: ProjectConfig) -> list[ResolvedFile]:
    """Return every file the project contains for *config*, in table order."""
    return [
        ResolvedFile(logical_id=f.id, path=f.target_path(config))
        for f in LOGICAL_FILES
        if f.gate(config)
    ]


def resolve_paths(config: ProjectConfig) -> dict[str, str]:
    """Return ``{logical_id: path}`` for the resolved files."""
    return {rf.logical_id: rf.path for rf in resolve(config)}


def required_directories(files: Iterable[ResolvedFile]) -> list[str]:
    """Minimal set of directories implied by *files*, parents first.

    The project root itself is not included.
    """
    dirs: set[str] = set()
    for rf in files:
        parent = posixpath.dirname(rf.path)
        while parent:
            dirs.add(parent)
            parent = posixpath.dirname(parent)
    return sorted(dirs, key=lambda d: (d.count("/"), d))
