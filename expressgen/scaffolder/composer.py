"""Content composer.

Turns a logical file and a ``ProjectConfig`` into file content.  Templated
files pick the branch for the configured language and render it with a
context holding the config flags and ``imports``: the import specifier of
every resolved file as seen from the file being composed.  Templates only
reference other files through ``imports``, and ``imports`` only holds files
the resolver produced, so a reference to an absent file fails at render
time (``StrictUndefined``) instead of yielding a dangling import.

JavaScript output uses relative CommonJS paths.  TypeScript output imports
through the ``@/`` alias, which ``tsconfig.json`` and the Jest config map to
``src/``.
"""

from __future__ import annotations

import json
import posixpath
from collections.abc import Callable
from functools import lru_cache
from typing import Any

from .docker_gen import APP_PORT, database_url, render_compose
from .files import ResolvedFile, get_logical_file, resolve, resolve_paths
from .manifest import assemble_manifest
from .models import AuthMode, DatabaseKind, LanguageVariant, ProjectConfig
from .templates import TemplateRenderer

# Path alias shared by composed imports, tsconfig "paths" and Jest's moduleNameMapper.
PATH_ALIAS = "@/"
ALIAS_ROOT = "src/"

_SOURCE_SUFFIXES = (".js", ".ts")


class ReferentialIntegrityError(RuntimeError):
    """A file was composed that the resolver does not produce for this config.

    Indicates a defect in the file table or a template, never bad user input.
    """


# ---------------------------------------------------------------------------
# Import specifiers
# ---------------------------------------------------------------------------

def import_specifier(from_path: str, to_path: str, language: LanguageVariant) -> str:
    """Specifier that *from_path* uses to import *to_path*.

    Extensions are dropped and ``dir/index`` collapses to ``dir``, matching
    Node's resolution.  TypeScript files import anything under ``src/``
    through the path alias.
    """
    stem = to_path
    for suffix in _SOURCE_SUFFIXES:
        if stem.endswith(suffix):
            stem = stem[: -len(suffix)]
            break
    if stem.endswith("/index"):
        stem = stem[: -len("/index")]

    if language is LanguageVariant.TYPESCRIPT and stem.startswith(ALIAS_ROOT):
        return PATH_ALIAS + stem[len(ALIAS_ROOT):]

    rel = posixpath.relpath(stem, posixpath.dirname(from_path) or ".")
    if not rel.startswith("."):
        rel = "./" + rel
    return rel


# ---------------------------------------------------------------------------
# Structured documents
# ---------------------------------------------------------------------------

def build_tsconfig(config: ProjectConfig) -> dict[str, Any]:
    """Compiler options; ``paths`` carries the same alias the sources import with."""
    return {
        "compilerOptions": {
            "target": "ES2020",
            "module": "commonjs",
            "lib": ["ES2020"],
            "outDir": "./dist",
            "rootDir": "./",
            "strict": True,
            "esModuleInterop": True,
            "skipLibCheck": True,
            "forceConsistentCasingInFileNames": True,
            "resolveJsonModule": True,
            "sourceMap": True,
            "typeRoots": ["./node_modules/@types"],
            "baseUrl": ".",
            "paths": {PATH_ALIAS + "*": [ALIAS_ROOT + "*"]},
        },
        "include": ["src/**/*", "server.ts"],
        "exclude": ["node_modules", "dist", "tests"],
    }


def _render_tsconfig(config: ProjectConfig) -> str:
    return json.dumps(build_tsconfig(config), indent=2) + "\n"


def _render_package_json(config: ProjectConfig) -> str:
    return assemble_manifest(config).render()


BUILDERS: dict[str, Callable[[ProjectConfig], str]] = {
    "package.json": _render_package_json,
    "tsconfig.json": _render_tsconfig,
    "docker-compose.yml": render_compose,
}


# ---------------------------------------------------------------------------
# ContentComposer
# ---------------------------------------------------------------------------

class ContentComposer:
    """Composes file content for a configuration."""

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    def compose(self, logical_id: str, config: ProjectConfig) -> str:
        """Return the content of *logical_id* for *config*.

        Raises:
            KeyError: *logical_id* is not in the file table.
            ReferentialIntegrityError: the file is not resolved for *config*,
                or has no branch for the configured language.
        """
        logical = get_logical_file(logical_id)
        if not logical.gate(config):
            raise ReferentialIntegrityError(
                f"{logical_id!r} is not part of the file set for this configuration"
            )
        if logical.builder is not None:
            return BUILDERS[logical.builder](config)

        template = logical.branch_for(config.language)
        if template is None:
            raise ReferentialIntegrityError(
                f"{logical_id!r} has no {config.language.value} content branch"
            )
        paths = resolve_paths(config)
        context = self.build_context(config, paths[logical_id], paths)
        return self.renderer.render(template, context)

    def compose_all(self, config: ProjectConfig) -> list[tuple[ResolvedFile, str]]:
        """Compose every resolved file, in resolver order."""
        return [(rf, self.compose(rf.logical_id, config)) for rf in resolve(config)]

    @staticmethod
    def build_context(
        config: ProjectConfig, own_path: str, paths: dict[str, str]
    ) -> dict[str, Any]:
        """Template context for the file at *own_path*."""
        imports = {
            logical_id: import_specifier(own_path, path, config.language)
            for logical_id, path in paths.items()
            if path.endswith(_SOURCE_SUFFIXES)
        }
        return {
            "project_name": config.project_name,
            "language": config.language.value,
            "typed": config.is_typed,
            "ext": config.extension,
            "port": APP_PORT,
            # Authentication
            "auth": config.auth.value,
            "auth_enabled": config.has_auth,
            "jwt": config.auth is AuthMode.JWT,
            "session": config.auth is AuthMode.SESSION,
            # Persistence
            "database": config.database.value,
            "database_enabled": config.has_database,
            "database_url": database_url(config),
            "mongodb": config.database is DatabaseKind.MONGODB,
            "relational": config.is_relational,
            "postgresql": config.database is DatabaseKind.POSTGRESQL,
            "mysql": config.database is DatabaseKind.MYSQL,
            "sqlite": config.database is DatabaseKind.SQLITE,
            # Extras
            "cors": config.features.cors,
            "validation": config.features.validation,
            "testing": config.features.testing,
            "docker": config.features.docker,
            # Cross-file references
            "imports": imports,
            "alias_pattern": "^" + PATH_ALIAS + "(.*)$",
            "alias_target": "<rootDir>/" + ALIAS_ROOT + "$1",
        }


@lru_cache(maxsize=1)
def _default_composer() -> ContentComposer:
    return ContentComposer()


def compose(logical_id: str, config: ProjectConfig) -> str:
    """Module-level shortcut for :meth:`ContentComposer.compose`."""
    return _default_composer().compose(logical_id, config)


def compose_all(config: ProjectConfig) -> list[tuple[ResolvedFile, str]]:
    return _default_composer().compose_all(config)
