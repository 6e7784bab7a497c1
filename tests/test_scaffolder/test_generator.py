"""Tests for the project scaffolding generator.

Covers:
- plan() is pure and mirrors resolve/compose/assemble_manifest
- generate() writes every planned file under <output>/<project_name>
- Refusal to overwrite an existing project
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from expressgen.scaffolder.composer import compose
from expressgen.scaffolder.files import resolve
from expressgen.scaffolder.generator import GenerationPlan, PlannedFile, ProjectGenerator
from expressgen.scaffolder.manifest import assemble_manifest
from expressgen.scaffolder.writer import WriteError


# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# plan()
# ---------------------------------------------------------------------------


class TestPlan:
    def test_plan_matches_core_operations(self, ts_full_config):
        plan = ProjectGenerator(ts_full_config).plan()

        assert isinstance(plan, GenerationPlan)
        assert plan.config == ts_full_config
        assert plan.paths == [rf.path for rf in resolve(ts_full_config)]
        assert plan.manifest == assemble_manifest(ts_full_config)
        for planned in plan.files:
            assert planned.content == compose(planned.logical_id, ts_full_config)

    def test_plan_directories(self, default_config):
        plan = ProjectGenerator(default_config).plan()
        assert plan.directories[0] == "src"
        assert "src/models" in plan.directories
        assert "tests" not in plan.directories

    def test_plan_contents_mapping(self, bare_config):
        contents = ProjectGenerator(bare_config).plan().contents()
        assert list(contents)[0] == "package.json"
        assert json.loads(contents["package.json"])["name"] == "bare-api"

    def test_plan_touches_no_files(self, default_config, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        ProjectGenerator(default_config).plan()
        assert list(tmp_path.iterdir()) == []

    def test_planned_file_is_frozen(self):
        planned = PlannedFile("readme", "README.md", "# x\n")
        with pytest.raises(Exception):
            planned.path = "OTHER.md"


# ---------------------------------------------------------------------------
# generate()
# ---------------------------------------------------------------------------


class TestGenerate:
    async def test_generate_writes_every_file(self, ts_full_config, output_dir: Path):
        gen = ProjectGenerator(ts_full_config)
        root = await gen.generate(output_dir)

        assert root == output_dir / "full-api"
        for planned in gen.plan().files:
            written = root / planned.path
            assert written.is_file(), planned.path
            assert written.read_text(encoding="utf-8") == planned.content

    async def test_generate_reports_progress(self, default_config, output_dir: Path):
        seen: list[str] = []
        await ProjectGenerator(default_config).generate(output_dir, on_file=seen.append)
        assert seen == [rf.path for rf in resolve(default_config)]

    async def test_generate_refuses_existing_project(self, default_config, output_dir: Path):
        existing = output_dir / "my-api"
        existing.mkdir()
        (existing / "server.js").write_text("// mine\n", encoding="utf-8")

        with pytest.raises(WriteError):
            await ProjectGenerator(default_config).generate(output_dir)
        assert (existing / "server.js").read_text(encoding="utf-8") == "// mine\n"

    async def test_generate_delegates_to_writer(self, bare_config, tmp_path: Path):
        with patch(
            "expressgen.scaffolder.generator.ProjectWriter.write",
            new_callable=AsyncMock,
            return_value=tmp_path / "bare-api",
        ) as mock_write:
            result = await ProjectGenerator(bare_config).generate(tmp_path)

        assert result == tmp_path / "bare-api"
        directories, files = mock_write.call_args.args
        assert "src/config" in directories
        assert [path for path, _ in files][0] == "package.json"
