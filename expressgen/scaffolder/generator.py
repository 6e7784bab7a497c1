"""Main scaffolding orchestrator.

Takes a ``ProjectConfig`` and produces an Express.js project directory.  The
work is split in two: :meth:`ProjectGenerator.plan` resolves the file set,
composes every file and assembles the manifest without touching the disk;
:meth:`ProjectGenerator.generate` hands that plan to ``ProjectWriter``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from .composer import ContentComposer
from .files import ResolvedFile, required_directories, resolve
from .manifest import Manifest, assemble_manifest
from .models import ProjectConfig
from .templates import TemplateRenderer
from .writer import ProjectWriter


@dataclass(frozen=True)
class PlannedFile:
    """A resolved file together with its composed content."""

    logical_id: str
    path: str
    content: str


@dataclass(frozen=True)
class GenerationPlan:
    """Everything needed to write a project, computed without side effects."""

    config: ProjectConfig
    files: tuple[PlannedFile, ...]
    directories: tuple[str, ...]
    manifest: Manifest

    @property
    def paths(self) -> list[str]:
        return [f.path for f in self.files]

    def contents(self) -> dict[str, str]:
        """Return ``{path: content}`` in resolver order."""
        return {f.path: f.content for f in self.files}


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Generates an Express.js project for a configuration.

    The generated tree contains:
    - ``server`` entry point and the ``src/`` application (routes,
      controllers, services, middleware, config, utils)
    - a ``User`` model when a database is selected
    - ``tsconfig.json`` and shared type definitions for TypeScript
    - Jest config, unit and integration tests when testing is enabled
    - Dockerfile and Compose file when Docker is enabled
    - ``package.json``, ``.env.example``, ``.gitignore`` and README
    """

    def __init__(
        self,
        config: ProjectConfig,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config
        self.composer = ContentComposer(renderer)

    # -- Public API --------------------------------------------------------

    def plan(self) -> GenerationPlan:
        """Resolve and compose the whole project in memory."""
        resolved: list[ResolvedFile] = resolve(self.config)
        files = tuple(
            PlannedFile(
                logical_id=rf.logical_id,
                path=rf.path,
                content=self.composer.compose(rf.logical_id, self.config),
            )
            for rf in resolved
        )
        return GenerationPlan(
            config=self.config,
            files=files,
            directories=tuple(required_directories(resolved)),
            manifest=assemble_manifest(self.config),
        )

    async def generate(
        self,
        output_dir: str | Path,
        on_file: Callable[[str], None] | None = None,
    ) -> Path:
        """Generate the project structure.

        Args:
            output_dir: Parent directory where the project folder will be
                created.  A subdirectory named after the project is created
                inside it.
            on_file: Optional callback receiving each written relative path.

        Returns:
            Path to the generated project root.

        Raises:
            WriteError: the target directory is not empty or a write failed.
        """
        plan = self.plan()
        project_root = Path(output_dir) / self.config.project_name
        writer = ProjectWriter(project_root, on_file=on_file)
        return await writer.write(
            plan.directories,
            ((f.path, f.content) for f in plan.files),
        )
