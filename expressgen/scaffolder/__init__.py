"""express-gen scaffolder -- turns a configuration into an Express.js project.

The four core operations are pure: ``normalize`` builds a ``ProjectConfig``
from raw input, ``resolve`` lists the files it implies, ``compose`` renders a
file's content and ``assemble_manifest`` derives ``package.json``.  Only
``ProjectWriter`` touches the disk.

Quick usage::

    from expressgen.scaffolder import ProjectGenerator, normalize

    config = normalize({"project_name": "my-api", "language": "typescript"})
    generator = ProjectGenerator(config)
    project_path = await generator.generate("/tmp/output")
"""

from expressgen.scaffolder.composer import (
    ContentComposer,
    ReferentialIntegrityError,
    compose,
    compose_all,
)
from expressgen.scaffolder.files import LOGICAL_FILES, LogicalFile, ResolvedFile, resolve
from expressgen.scaffolder.generator import GenerationPlan, PlannedFile, ProjectGenerator
from expressgen.scaffolder.manifest import Manifest, ManifestEntry, Scope, assemble_manifest
from expressgen.scaffolder.models import (
    AuthMode,
    ConfigValidationError,
    DatabaseKind,
    Features,
    LanguageVariant,
    ProjectConfig,
    normalize,
    validate_project_name,
)
from expressgen.scaffolder.templates import TemplateRenderer
from expressgen.scaffolder.writer import ProjectWriter, WriteError

__all__ = [
    "AuthMode",
    "ConfigValidationError",
    "ContentComposer",
    "DatabaseKind",
    "Features",
    "GenerationPlan",
    "LOGICAL_FILES",
    "LanguageVariant",
    "LogicalFile",
    "Manifest",
    "ManifestEntry",
    "PlannedFile",
    "ProjectConfig",
    "ProjectGenerator",
    "ProjectWriter",
    "ReferentialIntegrityError",
    "ResolvedFile",
    "Scope",
    "TemplateRenderer",
    "WriteError",
    "assemble_manifest",
    "compose",
    "compose_all",
    "normalize",
    "resolve",
    "validate_project_name",
]
