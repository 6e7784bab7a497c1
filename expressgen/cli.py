"""express-gen command-line interface.

Usage::

    express-gen my-api
    express-gen my-api --language typescript --database postgresql --testing
    express-gen                      # interactive mode
    express-gen my-api --dry-run     # show what would be generated

Exit codes: 0 on success, 1 on invalid configuration or a failed write,
130 when interrupted.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from rich.panel import Panel
from rich.prompt import Confirm, Prompt

from expressgen import __version__
from expressgen.config import Settings
from expressgen.scaffolder.files import resolve
from expressgen.scaffolder.generator import GenerationPlan, ProjectGenerator
from expressgen.scaffolder.models import (
    FEATURE_NAMES,
    AuthMode,
    ConfigValidationError,
    DatabaseKind,
    Features,
    LanguageVariant,
    ProjectConfig,
    normalize,
    validate_project_name,
)
from expressgen.scaffolder.writer import WriteError
from expressgen.utils import (
    console,
    create_progress,
    print_banner,
    print_dependency_table,
    print_error,
    print_file_table,
    print_section,
    print_success,
    print_summary_table,
)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

_FEATURE_PROMPTS: dict[str, str] = {
    "cors": "Enable CORS?",
    "validation": "Add request validation (express-validator)?",
    "testing": "Set up Jest tests?",
    "docker": "Add Docker support?",
}


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="express-gen",
        description="Generate a professional Express.js server project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  express-gen my-api\n"
            "  express-gen my-api --language typescript --auth session --database postgresql\n"
            "  express-gen my-api --database none --testing --docker -o ./projects\n"
            "  express-gen --config express-gen.json\n"
        ),
    )
    parser.add_argument(
        "project_name",
        nargs="?",
        default=None,
        help="Project name (prompted for when omitted)",
    )
    parser.add_argument(
        "--language",
        choices=[v.value for v in LanguageVariant],
        default=None,
        help="Source language (default: javascript)",
    )
    parser.add_argument(
        "--auth",
        choices=[v.value for v in AuthMode],
        default=None,
        help="Authentication strategy (default: jwt)",
    )
    parser.add_argument(
        "--database",
        choices=[v.value for v in DatabaseKind],
        default=None,
        help="Database (default: mongodb)",
    )
    parser.add_argument(
        "--cors",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Include the CORS middleware (default: on)",
    )
    parser.add_argument(
        "--validation",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Include express-validator request validation (default: on)",
    )
    parser.add_argument(
        "--testing",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Generate Jest config and tests (default: off)",
    )
    parser.add_argument(
        "--docker",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Generate Dockerfile and docker-compose.yml (default: off)",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Parent directory for the project (default: current directory)",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Load project choices from a JSON file",
    )
    parser.add_argument(
        "--save-config",
        default=None,
        help="Save the final project choices to a JSON file",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the files and dependencies without writing anything",
    )
    parser.add_argument(
        "--no-banner",
        action="store_true",
        help="Do not print the banner",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _flag_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Choices given explicitly on the command line."""
    overrides: dict[str, Any] = {}
    for name in ("language", "auth", "database", *FEATURE_NAMES):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    return overrides


def _load_config_file(path: str) -> dict[str, Any]:
    try:
        return ProjectConfig.load(path).as_raw_input()
    except OSError as exc:
        raise ConfigValidationError("config", f"Cannot read {path}: {exc.strerror or exc}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigValidationError("config", f"{path} is not valid JSON: {exc.msg}") from exc


# ---------------------------------------------------------------------------
# Interactive mode
# ---------------------------------------------------------------------------


def prompt_project_name(default: str | None = None) -> str:
    """Ask for a project name until it passes validation."""
    extra: dict[str, Any] = {} if default is None else {"default": default}
    while True:
        answer = Prompt.ask("[bold]Project name[/bold]", console=console, **extra)
        try:
            return validate_project_name(answer or "")
        except ValueError as exc:
            print_error(str(exc))


def prompt_choices(defaults: dict[str, Any]) -> dict[str, Any]:
    """Ask for every configuration choice, offering *defaults*."""
    raw: dict[str, Any] = {"project_name": prompt_project_name(defaults.get("project_name"))}
    raw["language"] = Prompt.ask(
        "Language",
        choices=[v.value for v in LanguageVariant],
        default=defaults["language"],
        console=console,
    )
    raw["auth"] = Prompt.ask(
        "Authentication",
        choices=[v.value for v in AuthMode],
        default=defaults["auth"],
        console=console,
    )
    raw["database"] = Prompt.ask(
        "Database",
        choices=[v.value for v in DatabaseKind],
        default=defaults["database"],
        console=console,
    )
    for name, question in _FEATURE_PROMPTS.items():
        raw[name] = Confirm.ask(question, default=defaults[name], console=console)
    return raw


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


def describe_config(config: ProjectConfig) -> dict[str, str]:
    enabled = [name for name in FEATURE_NAMES if getattr(config.features, name)]
    return {
        "Project": config.project_name,
        "Language": config.language.value,
        "Authentication": config.auth.value,
        "Database": config.database.value,
        "Features": ", ".join(enabled) or "none",
    }


def next_steps(config: ProjectConfig) -> list[str]:
    steps = [f"cd {config.project_name}", "cp .env.example .env", "npm install"]
    if config.is_typed:
        steps.append("npm run build")
    steps.append("npm run dev")
    return steps


def print_plan(plan: GenerationPlan) -> None:
    print_summary_table(describe_config(plan.config), title="Configuration")
    print_file_table(plan.paths, title=f"Files ({len(plan.files)})")
    print_dependency_table(plan.manifest.entries)


def print_completion(config: ProjectConfig, project_root: Path) -> None:
    steps = "\n".join(f"  [cyan]{step}[/cyan]" for step in next_steps(config))
    summary = "\n".join(f"{k}: [bold]{v}[/bold]" for k, v in describe_config(config).items())
    console.print()
    console.print(
        Panel(
            f"[bold green]Project created successfully![/bold green]\n\n"
            f"Location: [bold]{project_root}[/bold]\n\n"
            f"{summary}\n\n"
            f"Next steps:\n{steps}",
            title="express-gen",
            border_style="green",
        )
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


async def _generate(generator: ProjectGenerator, output_dir: Path, total: int) -> Path:
    with create_progress() as progress:
        task = progress.add_task("Generating files...", total=total)
        project_root = await generator.generate(
            output_dir,
            on_file=lambda _path: progress.advance(task),
        )
        progress.update(task, description="Files generated")
    return project_root


def run(argv: list[str] | None = None) -> int:
    """Parse *argv*, generate the project and return the exit code."""
    args = build_parser().parse_args(argv)

    try:
        settings = Settings.from_env()
        if settings.show_banner and not args.no_banner:
            print_banner()

        overrides = _flag_overrides(args)
        if args.config:
            raw = {**_load_config_file(args.config), **overrides}
            if args.project_name is not None:
                raw["project_name"] = args.project_name
        elif args.project_name is None:
            defaults: dict[str, Any] = {
                **settings.project_defaults(),
                **Features().model_dump(),
                **overrides,
            }
            raw = prompt_choices(defaults)
        else:
            raw = {
                **settings.project_defaults(),
                **overrides,
                "project_name": args.project_name,
            }

        config = normalize(raw)

        if args.save_config:
            try:
                saved = config.save(args.save_config)
            except OSError as exc:
                raise WriteError(args.save_config, exc.strerror or str(exc)) from exc
            print_success(f"Configuration saved to {saved}")

        generator = ProjectGenerator(config)
        if args.dry_run:
            plan = generator.plan()
            print_section("Dry run")
            print_plan(plan)
            print_success("Dry run complete; nothing was written.")
            return EXIT_OK

        output_dir = Path(args.output) if args.output else settings.output_dir
        total = len(resolve(config))
        project_root = asyncio.run(_generate(generator, output_dir, total))
    except ConfigValidationError as exc:
        print_error(str(exc))
        return EXIT_FAILURE
    except WriteError as exc:
        print_error(str(exc))
        return EXIT_FAILURE
    except KeyboardInterrupt:
        print_error("Interrupted")
        return EXIT_INTERRUPTED

    print_completion(config, project_root)
    return EXIT_OK


def main() -> None:
    """CLI entry point for ``express-gen`` and ``python -m expressgen``."""
    sys.exit(run())


if __name__ == "__main__":
    main()
