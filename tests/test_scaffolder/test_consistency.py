"""Whole-system properties checked over every configuration.

Covers:
- Totality and determinism of resolve/compose/assemble_manifest
- Referential integrity: every local import points at a generated file
- Every package imported by generated code is declared in package.json
- Every non-peer runtime dependency is imported by generated code
- Scenarios for common configurations
"""

from __future__ import annotations

import itertools
import json
import posixpath
import re
from collections.abc import Iterable, Iterator

import pytest
import yaml

from expressgen.scaffolder.composer import compose, compose_all
from expressgen.scaffolder.files import resolve
from expressgen.scaffolder.manifest import Scope, assemble_manifest
from expressgen.scaffolder.models import (
    AuthMode,
    ConfigValidationError,
    DatabaseKind,
    LanguageVariant,
    ProjectConfig,
    normalize,
)

pytestmark = pytest.mark.unit

_SOURCE_SUFFIXES = (".js", ".ts")


# ---------------------------------------------------------------------------
# Configuration helpers
# ---------------------------------------------------------------------------


FEATURE_COMBINATIONS: list[dict[str, bool]] = [
    {"cors": cors, "validation": validation, "testing": testing, "docker": docker}
    for cors, validation, testing, docker in itertools.product([True, False], repeat=4)
]


def iter_all_configs(project_name: str = "demo-api") -> Iterator[ProjectConfig]:
    """Every combination of language, auth, database and feature flags."""
    for language, auth, database, features in itertools.product(
        LanguageVariant, AuthMode, DatabaseKind, FEATURE_COMBINATIONS
    ):
        yield normalize(
            {
                "project_name": project_name,
                "language": language.value,
                "auth": auth.value,
                "database": database.value,
                "features": features,
            }
        )


def config_id(config: ProjectConfig) -> str:
    flags = "".join(
        name[0] if getattr(config.features, name) else "-"
        for name in ("cors", "validation", "testing", "docker")
    )
    return f"{config.language.value[:2]}-{config.auth.value}-{config.database.value}-{flags}"


ALL_CONFIGS: list[ProjectConfig] = list(iter_all_configs())


# ---------------------------------------------------------------------------
# Import extraction
# ---------------------------------------------------------------------------

_IMPORT_PATTERNS = (
    re.compile(r"""require\(\s*['"]([^'"]+)['"]\s*\)"""),
    re.compile(r"""^\s*import\s+[^;]*?\s+from\s+['"]([^'"]+)['"]""", re.MULTILINE),
    re.compile(r"""^\s*import\s+['"]([^'"]+)['"]""", re.MULTILINE),
)

NODE_BUILTINS = frozenset({"fs", "path"})


def extract_specifiers(content: str) -> list[str]:
    """Every module specifier imported or required by *content*."""
    found: list[str] = []
    for pattern in _IMPORT_PATTERNS:
        found.extend(pattern.findall(content))
    return found


def is_local_specifier(specifier: str) -> bool:
    return specifier.startswith(".") or specifier.startswith("@/")


def package_name(specifier: str) -> str:
    """``@scope/pkg/sub`` -> ``@scope/pkg``; ``pkg/sub`` -> ``pkg``."""
    parts = specifier.split("/")
    if specifier.startswith("@"):
        return "/".join(parts[:2])
    return parts[0]


def resolve_local_specifier(from_path: str, specifier: str) -> str:
    """Project-relative stem a local specifier points at (no extension)."""
    if specifier.startswith("@/"):
        return "src/" + specifier[2:]
    base = posixpath.dirname(from_path)
    return posixpath.normpath(posixpath.join(base, specifier))


def target_exists(stem: str, paths: Iterable[str], ext: str) -> bool:
    available = set(paths)
    return any(
        candidate in available
        for candidate in (f"{stem}.{ext}", f"{stem}/index.{ext}", stem)
    )


def _source_files(config):
    return [(rf, content) for rf, content in compose_all(config) if rf.path.endswith(_SOURCE_SUFFIXES)]


# ---------------------------------------------------------------------------
# Cross-product
# ---------------------------------------------------------------------------


def test_cross_product_size():
    assert len(ALL_CONFIGS) == 2 * 3 * 5 * 16
    assert len({config_id(c) for c in ALL_CONFIGS}) == len(ALL_CONFIGS)


@pytest.mark.parametrize("config", ALL_CONFIGS, ids=config_id)
class TestEveryConfiguration:
    def test_composes_every_resolved_file(self, config):
        composed = compose_all(config)
        assert len(composed) == len(resolve(config))
        for rf, content in composed:
            assert content.strip(), rf.path

    def test_local_imports_resolve(self, config):
        paths = [rf.path for rf in resolve(config)]
        for rf, content in _source_files(config):
            for specifier in extract_specifiers(content):
                if not is_local_specifier(specifier):
                    continue
                stem = resolve_local_specifier(rf.path, specifier)
                assert target_exists(stem, paths, config.extension), (
                    f"{rf.path} imports {specifier!r} which is not generated"
                )

    def test_typescript_imports_src_through_alias(self, config):
        if not config.is_typed:
            pytest.skip("JavaScript uses relative paths")
        for rf, content in _source_files(config):
            for specifier in extract_specifiers(content):
                if specifier.startswith("."):
                    assert not resolve_local_specifier(rf.path, specifier).startswith("src/")

    def test_bare_imports_are_declared(self, config):
        declared = set(assemble_manifest(config).all_dependencies()) | NODE_BUILTINS
        for rf, content in _source_files(config):
            for specifier in extract_specifiers(content):
                if is_local_specifier(specifier):
                    continue
                assert package_name(specifier) in declared, (
                    f"{rf.path} imports undeclared package {specifier!r}"
                )

    def test_runtime_dependencies_are_used(self, config):
        imported = {
            package_name(s)
            for rf, content in _source_files(config)
            if not rf.path.startswith("tests/")
            for s in extract_specifiers(content)
            if not is_local_specifier(s)
        }
        manifest = assemble_manifest(config)
        for entry in manifest.entries:
            if entry.scope is Scope.RUNTIME and not entry.peer:
                assert entry.name in imported, f"{entry.name} is declared but never imported"

    def test_manifest_document_is_valid_json(self, config):
        doc = json.loads(compose("manifest", config))
        assert doc["main"] in ("server.js", "dist/server.js")
        assert doc["dependencies"]["express"]

    def test_compose_file_is_valid_yaml(self, config):
        if not config.features.docker:
            pytest.skip("Docker disabled")
        doc = yaml.safe_load(compose("compose-file", config))
        assert "app" in doc["services"]

    def test_deterministic(self, config):
        assert compose_all(config) == compose_all(config)
        assert assemble_manifest(config) == assemble_manifest(config)


# ---------------------------------------------------------------------------
# Feature / manifest agreement
# ---------------------------------------------------------------------------


class TestFeatureManifestAgreement:
    @pytest.mark.parametrize("config", ALL_CONFIGS[::7], ids=config_id)
    def test_files_and_packages_switch_together(self, config):
        ids = {rf.logical_id for rf in resolve(config)}
        deps = assemble_manifest(config).all_dependencies()
        assert ("user-model" in ids) == ("mongoose" in deps or "sequelize" in deps)
        assert ("auth-middleware" in ids) == ("bcryptjs" in deps)
        assert ("compiler-config" in ids) == ("typescript" in deps)
        assert ("test-config" in ids) == ("jest" in deps)

    def test_idempotent_defaults(self, default_config):
        again = normalize(default_config.as_raw_input())
        assert resolve(again) == resolve(default_config)
        assert assemble_manifest(again) == assemble_manifest(default_config)


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


class TestScenarios:
    def test_scenario_a_javascript_defaults(self):
        config = normalize(
            {"project_name": "my-api", "language": "javascript", "auth": "jwt", "database": "mongodb"}
        )
        ids = [rf.logical_id for rf in resolve(config)]
        assert set(ids) == {
            "manifest",
            "env-template",
            "ignore-file",
            "readme",
            "entry-point",
            "app-root",
            "environment-config",
            "database-config",
            "auth-middleware",
            "error-handler",
            "route-aggregator",
            "user-routes",
            "user-controller",
            "user-service",
            "user-model",
            "helpers",
            "constants",
        }
        assert len(ids) == 17
        deps = assemble_manifest(config).all_dependencies()
        assert "mongoose" in deps
        assert "jsonwebtoken" in deps
        assert "typescript" not in deps

    def test_scenario_b_typescript(self):
        base = {"project_name": "my-api", "auth": "jwt", "database": "mongodb"}
        js = normalize({**base, "language": "javascript"})
        ts = normalize({**base, "language": "typescript"})
        added = {rf.logical_id for rf in resolve(ts)} - {rf.logical_id for rf in resolve(js)}
        assert added == {"compiler-config", "type-definitions"}

        manifest = assemble_manifest(ts)
        assert "typescript" in manifest.development_dependencies
        assert "@types/express" in manifest.development_dependencies
        scripts = list(manifest.scripts)
        assert manifest.scripts["prestart"] == "npm run build"
        assert scripts.index("build") < scripts.index("start")

    def test_scenario_c_no_database_no_auth(self):
        config = normalize({"project_name": "my-api", "database": "none", "auth": "none"})
        ids = {rf.logical_id for rf in resolve(config)}
        assert not ids & {"database-config", "auth-middleware", "user-model"}
        deps = assemble_manifest(config).all_dependencies()
        for name in ("mongoose", "sequelize", "bcryptjs", "jsonwebtoken", "express-session"):
            assert name not in deps

    def test_scenario_d_testing(self, default_config):
        config = normalize({**default_config.as_raw_input(), "testing": True})
        added = {rf.logical_id for rf in resolve(config)} - {
            rf.logical_id for rf in resolve(default_config)
        }
        assert added == {"test-config", "unit-test", "api-test"}
        manifest = assemble_manifest(config)
        assert {"jest", "supertest"} <= set(manifest.development_dependencies)
        assert manifest.scripts["test"] == "jest"

    def test_scenario_e_invalid_name(self):
        with pytest.raises(ConfigValidationError, match="must start with a letter"):
            normalize({"project_name": "123project"})
