"""Feature gates shared by the file table and the dependency rule table.

A gate is a named predicate over ``ProjectConfig``.  The resolver includes a
file when its gate is open and the manifest assembler includes a dependency
when its gate is open; both tables point at the same gate objects, so a file
and the package it needs cannot be switched on by different conditions.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .models import AuthMode, DatabaseKind, ProjectConfig


@dataclass(frozen=True)
class FeatureGate:
    """A named inclusion predicate."""

    name: str
    predicate: Callable[[ProjectConfig], bool]

    def __call__(self, config: ProjectConfig) -> bool:
        return self.predicate(config)

    def __repr__(self) -> str:
        return f"FeatureGate({self.name!r})"


def all_of(*gates: FeatureGate) -> FeatureGate:
    """Gate that is open only when every one of *gates* is open."""
    name = "+".join(g.name for g in gates)
    return FeatureGate(name, lambda config: all(g(config) for g in gates))


ALWAYS = FeatureGate("always", lambda config: True)

# Language
TYPED = FeatureGate("typed", lambda config: config.is_typed)

# Persistence
DATABASE = FeatureGate("database", lambda config: config.has_database)
DOC_STORE = FeatureGate("doc-store", lambda config: config.database is DatabaseKind.MONGODB)
RELATIONAL = FeatureGate("relational", lambda config: config.is_relational)
POSTGRES = FeatureGate("postgres", lambda config: config.database is DatabaseKind.POSTGRESQL)
MYSQL = FeatureGate("mysql", lambda config: config.database is DatabaseKind.MYSQL)
SQLITE = FeatureGate("sqlite", lambda config: config.database is DatabaseKind.SQLITE)

# Authentication
AUTH = FeatureGate("auth", lambda config: config.has_auth)
JWT = FeatureGate("jwt", lambda config: config.auth is AuthMode.JWT)
SESSION = FeatureGate("session", lambda config: config.auth is AuthMode.SESSION)

# Optional extras
CORS = FeatureGate("cors", lambda config: config.features.cors)
VALIDATION = FeatureGate("validation", lambda config: config.features.validation)
TESTING = FeatureGate("testing", lambda config: config.features.testing)
DOCKER = FeatureGate("docker", lambda config: config.features.docker)
