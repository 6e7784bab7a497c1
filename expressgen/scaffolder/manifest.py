"""Manifest assembler.

Derives the generated project's ``package.json`` (dependencies and scripts)
from a ``ProjectConfig``.  Dependencies come from ``MANIFEST_RULES``, a table
keyed by the same feature gates as the file table in ``files.py``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from . import features as gates
from .features import FeatureGate, all_of
from .models import ProjectConfig


class Scope(str, Enum):
    """Which ``package.json`` section an entry lands in."""
    RUNTIME = "runtime"
    DEVELOPMENT = "development"


@dataclass(frozen=True)
class ManifestEntry:
    """One dependency: name, semver range and scope.

    ``peer`` marks packages loaded by another dependency rather than
    imported by the generated sources (e.g. ``pg-hstore`` for Sequelize).
    """

    name: str
    version: str
    scope: Scope = Scope.RUNTIME
    peer: bool = False


@dataclass(frozen=True)
class ManifestRule:
    gate: FeatureGate
    entry: ManifestEntry


def _rt(name: str, version: str, gate: FeatureGate = gates.ALWAYS, *, peer: bool = False) -> ManifestRule:
    return ManifestRule(gate, ManifestEntry(name, version, Scope.RUNTIME, peer))


def _dev(name: str, version: str, gate: FeatureGate = gates.ALWAYS) -> ManifestRule:
    return ManifestRule(gate, ManifestEntry(name, version, Scope.DEVELOPMENT))


_TYPED_CORS = all_of(gates.TYPED, gates.CORS)
_TYPED_AUTH = all_of(gates.TYPED, gates.AUTH)
_TYPED_TESTING = all_of(gates.TYPED, gates.TESTING)

MANIFEST_RULES: tuple[ManifestRule, ...] = (
    # Security and logging baseline
    _rt("express", "^4.18.2"),
    _rt("dotenv", "^16.3.1"),
    _rt("helmet", "^7.1.0"),
    _rt("morgan", "^1.10.0"),
    _rt("express-rate-limit", "^7.1.5"),
    _dev("nodemon", "^3.0.2"),
    # Optional middleware
    _rt("cors", "^2.8.5", gates.CORS),
    _rt("express-validator", "^7.0.1", gates.VALIDATION),
    # Persistence
    _rt("mongoose", "^8.0.3", gates.DOC_STORE),
    _rt("sequelize", "^6.35.0", gates.RELATIONAL),
    _rt("pg", "^8.11.3", gates.POSTGRES),
    _rt("pg-hstore", "^2.3.4", gates.POSTGRES, peer=True),
    _rt("mysql2", "^3.6.5", gates.MYSQL),
    _rt("sqlite3", "^5.1.6", gates.SQLITE),
    # Authentication
    _rt("bcryptjs", "^2.4.3", gates.AUTH),
    _rt("jsonwebtoken", "^9.0.2", gates.JWT),
    _rt("express-session", "^1.17.3", gates.SESSION),
    _rt("connect-mongo", "^5.1.0", all_of(gates.SESSION, gates.DOC_STORE)),
    _rt("connect-session-sequelize", "^7.1.7", all_of(gates.SESSION, gates.RELATIONAL)),
    # TypeScript toolchain
    _dev("typescript", "^5.3.2", gates.TYPED),
    _dev("ts-node", "^10.9.1", gates.TYPED),
    _dev("tsconfig-paths", "^4.2.0", gates.TYPED),
    _dev("tsc-alias", "^1.8.8", gates.TYPED),
    _dev("@types/node", "^20.8.0", gates.TYPED),
    _dev("@types/express", "^4.17.20", gates.TYPED),
    _dev("@types/morgan", "^1.9.9", gates.TYPED),
    _dev("@types/cors", "^2.8.15", _TYPED_CORS),
    _dev("@types/bcryptjs", "^2.4.5", _TYPED_AUTH),
    _dev("@types/jsonwebtoken", "^9.0.5", all_of(gates.TYPED, gates.JWT)),
    _dev("@types/express-session", "^1.17.10", all_of(gates.TYPED, gates.SESSION)),
    _dev("@types/pg", "^8.10.7", all_of(gates.TYPED, gates.POSTGRES)),
    # Testing
    _dev("jest", "^29.7.0", gates.TESTING),
    _dev("supertest", "^6.3.3", gates.TESTING),
    _dev("ts-jest", "^29.1.1", _TYPED_TESTING),
    _dev("@types/jest", "^29.5.8", _TYPED_TESTING),
    _dev("@types/supertest", "^2.0.16", _TYPED_TESTING),
)


# ---------------------------------------------------------------------------
# Manifest model
# ---------------------------------------------------------------------------

class Manifest(BaseModel):
    """The generated project's package descriptor."""

    name: str
    version: str = "1.0.0"
    description: str = "Professional Express.js server"
    main: str
    scripts: dict[str, str] = Field(default_factory=dict)
    keywords: list[str] = Field(default_factory=lambda: ["express", "nodejs", "api", "server"])
    author: str = ""
    license: str = "MIT"
    runtime_dependencies: dict[str, str] = Field(default_factory=dict)
    development_dependencies: dict[str, str] = Field(default_factory=dict)
    entries: list[ManifestEntry] = Field(default_factory=list, exclude=True)

    def all_dependencies(self) -> dict[str, str]:
        return {**self.runtime_dependencies, **self.development_dependencies}

    def to_package_json(self) -> dict[str, Any]:
        """Return the document written to ``package.json``, in npm's key order."""
        doc: dict[str, Any] = {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "main": self.main,
            "scripts": dict(self.scripts),
            "keywords": list(self.keywords),
            "author": self.author,
            "license": self.license,
            "dependencies": dict(self.runtime_dependencies),
        }
        if self.development_dependencies:
            doc["devDependencies"] = dict(self.development_dependencies)
        return doc

    def render(self) -> str:
        return json.dumps(self.to_package_json(), indent=2) + "\n"


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

def manifest_entries(config: ProjectConfig) -> list[ManifestEntry]:
    """Every dependency entry whose gate is open for *config*, in table order."""
    return [rule.entry for rule in MANIFEST_RULES if rule.gate(config)]


def build_scripts(config: ProjectConfig) -> dict[str, str]:
    """npm scripts.  TypeScript builds before ``start`` runs the compiled output."""
    if config.is_typed:
        scripts = {
            "build": "tsc && tsc-alias",
            "build:watch": "tsc -w",
            "prestart": "npm run build",
            "start": "node dist/server.js",
            "dev": "nodemon --exec ts-node -r tsconfig-paths/register server.ts",
        }
    else:
        scripts = {
            "start": "node server.js",
            "dev": "nodemon server.js",
        }
    if config.features.testing:
        scripts["test"] = "jest"
        scripts["test:watch"] = "jest --watch"
        scripts["test:coverage"] = "jest --coverage"
    return scripts


def entry_point(config: ProjectConfig) -> str:
    return "dist/server.js" if config.is_typed else "server.js"


def assemble_manifest(config: ProjectConfig) -> Manifest:
    """Derive the full package manifest for *config*.  Never fails."""
    entries = manifest_entries(config)
    runtime = {e.name: e.version for e in entries if e.scope is Scope.RUNTIME}
    development = {e.name: e.version for e in entries if e.scope is Scope.DEVELOPMENT}
    return Manifest(
        name=config.project_name,
        main=entry_point(config),
        scripts=build_scripts(config),
        runtime_dependencies=dict(sorted(runtime.items())),
        development_dependencies=dict(sorted(development.items())),
        entries=entries,
    )
