"""create-karetech-stack command-line interface.

Commands:

    create [project-name]         Generate a project (default command)
    check-env                     Diagnose the development environment
    examples                      Print usage examples
    export-config <project-name>  Resolve a configuration and save it
    presets [--check]             List presets, optionally self-check them

Usage::

    create-karetech-stack my-app --preset saas --database sqlite
    create-karetech-stack my-app --yolo --no-install
    create-karetech-stack export-config my-app --preset blog --format yaml
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from rich.markup import escape

from . import __version__
from .config import Settings
from .environment import check_environment, print_report
from .errors import ConfigResolutionError, KaretechError
from .persistence import ConfigFormat, default_config_path, export_config, import_config
from .presets import get_preset, list_presets
from .resolver import (
    Mode,
    Resolution,
    build_sources,
    resolve,
    resolve_and_validate,
    resolve_identity,
    select_mode,
    validate_resolution,
)
from .scaffolder import ProjectGenerator
from .schema import (
    PartialConfig,
    PresetConfig,
    ProjectIdentity,
    Severity,
    field_spec,
    has_errors,
)
from .utils import (
    console,
    create_progress,
    git_user_name,
    is_interactive,
    print_detail,
    print_error,
    print_findings,
    print_section,
    print_success,
    print_summary_table,
    print_warning,
    probe_tool,
)
from .validation import check_all_presets, check_config_mapping, tracking_report
from .wizard import Wizard

COMMANDS = ("create", "check-env", "examples", "export-config", "presets")

# (option strings, field name)
_CONFIG_FLAGS: tuple[tuple[tuple[str, ...], str], ...] = (
    (("--database",), "database"),
    (("--auth",), "auth"),
    (("--api",), "api_style"),
    (("--component-lib",), "component_library"),
    (("--theme",), "ui_style"),
    (("--base-color",), "base_color"),
    (("--color",), "accent_color"),
    (("--font",), "font"),
    (("--icons",), "icons"),
    (("--radius",), "border_radius"),
    (("--menu-accent",), "menu_accent"),
    (("--testing",), "testing"),
    (("--unit-testing",), "unit_testing"),
    (("--example-tests",), "example_tests"),
    (("--docker",), "docker"),
    (("--cicd",), "cicd"),
    (("--deploy", "--web-deploy"), "deploy_target"),
    (("--pbs",), "pbs_level"),
    (("--beads",), "beads_integration"),
    (("--claude-hooks",), "claude_code_hooks"),
    (("--mcp",), "mcp_servers"),
    (("--pwa",), "pwa"),
    (("--analytics",), "analytics"),
    (("--email",), "email"),
    (("--error-tracking",), "error_tracking"),
    (("--feature-flags",), "feature_flags"),
)

EXAMPLES = """\
# SaaS app with PostgreSQL and the full AI workflow
create-karetech-stack my-saas \\
  --database postgresql \\
  --auth email,github \\
  --theme maia \\
  --testing playwright \\
  --docker \\
  --pbs full \\
  --claude-hooks \\
  --beads

# Start from a preset and override one field
create-karetech-stack my-store --preset ecommerce --database sqlite

# Simple blog with documentation-only PBS
create-karetech-stack my-blog --database sqlite --auth email --theme lyra --pbs docs --no-beads

# YOLO mode: all defaults, no prompts
create-karetech-stack my-yolo-app --yolo

# Save a configuration and re-use it later
create-karetech-stack export-config my-app --preset saas --format yaml
create-karetech-stack my-app --config my-app.karetech-config.yaml

# Check your environment
create-karetech-stack check-env
"""


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_config_flags(parser: argparse.ArgumentParser) -> None:
    group = parser.add_argument_group("configuration")
    for options, name in _CONFIG_FLAGS:
        spec = field_spec(name)
        if spec.is_flag:
            group.add_argument(
                *options,
                dest=name,
                action=argparse.BooleanOptionalAction,
                default=None,
                help=spec.label,
            )
        else:
            values = ", ".join(spec.allowed_values())
            group.add_argument(
                *options,
                dest=name,
                default=None,
                metavar="LIST" if spec.multiple else "VALUE",
                help=(
                    f"{spec.label} (comma-separated, or none: {values})"
                    if spec.multiple else f"{spec.label} ({values})"
                ),
            )

    parser.add_argument("--description", default=None, help="Project description")
    parser.add_argument("--author", default=None, help="Project author")
    parser.add_argument("--preset", default=None, help="Start from a named preset")
    parser.add_argument("--config", default=None, help="Load configuration from a JSON/YAML file")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="create-karetech-stack",
        description="Scaffold a KareTech stack project from presets, flags or a wizard",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Run 'create-karetech-stack examples' for usage examples.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command")

    create = sub.add_parser("create", help="Generate a new project (default)")
    create.add_argument("project_name", nargs="?", default=None, help="Project directory name")
    _add_config_flags(create)
    create.add_argument("--yolo", action="store_true", help="Use defaults for everything, no prompts")
    create.add_argument("-y", "--yes", action="store_true", help="Never prompt")
    create.add_argument(
        "--git", action=argparse.BooleanOptionalAction, default=True,
        help="Initialise a git repository (default: yes)",
    )
    create.add_argument(
        "--install", action=argparse.BooleanOptionalAction, default=True,
        help="Install dependencies with bun (default: yes)",
    )
    create.add_argument("--output-dir", default=".", help="Parent directory for the project (default: .)")
    create.add_argument("--verbose", action="store_true", help="Print each step")

    sub.add_parser("check-env", help="Check the development environment")
    sub.add_parser("examples", help="Show usage examples")

    export = sub.add_parser("export-config", help="Resolve a configuration and write it to a file")
    export.add_argument("project_name", help="Project name")
    _add_config_flags(export)
    export.add_argument(
        "--format", dest="fmt", choices=[f.value for f in ConfigFormat], default=None,
        help="Output format (default: from --output suffix, else json)",
    )
    export.add_argument("--output", "-o", default=None, help="Output file path")

    presets = sub.add_parser("presets", help="List presets")
    presets.add_argument("--check", action="store_true", help="Run the preset self-consistency checks")

    return parser


def normalise_argv(argv: Sequence[str]) -> list[str]:
    """Insert the default ``create`` command when none is given."""
    args = list(argv)
    if not args or (args[0] not in COMMANDS and args[0] not in ("-h", "--help", "--version")):
        args.insert(0, "create")
    return args


# ---------------------------------------------------------------------------
# Configuration gathering
# ---------------------------------------------------------------------------


@dataclass
class GatheredInput:
    """Everything the user supplied before any prompting."""

    identity: ProjectIdentity
    cli: PartialConfig
    file_identity: ProjectIdentity | None
    file_config: PartialConfig | None
    preset: PresetConfig | None

    @property
    def explicit(self) -> bool:
        return not self.cli.is_empty() or self.file_config is not None


def config_flag_values(args: argparse.Namespace) -> dict[str, Any]:
    """Raw values of the configuration flags that were given."""
    return {
        name: getattr(args, name)
        for _, name in _CONFIG_FLAGS
        if getattr(args, name, None) is not None
    }


def gather_input(args: argparse.Namespace) -> GatheredInput:
    """Check flags, load ``--config`` and look up the preset.

    Raises:
        KaretechError: With every invalid flag value as a finding.
        ConfigFileError: If the config file is missing or invalid.
        UnknownPresetError: If the preset does not exist.
    """
    checked = check_config_mapping(config_flag_values(args))
    if checked.findings:
        raise KaretechError("Invalid command-line options", checked.findings)

    file_identity = file_config = None
    file_preset = None
    if args.config:
        imported = import_config(args.config)
        file_identity, file_config, file_preset = imported.identity, imported.config, imported.preset

    preset_name = args.preset or file_preset
    return GatheredInput(
        identity=ProjectIdentity(
            project_name=args.project_name,
            description=args.description,
            author=args.author,
        ),
        cli=checked.config,
        file_identity=file_identity,
        file_config=file_config,
        preset=get_preset(preset_name) if preset_name else None,
    )


async def _default_author(*identities: ProjectIdentity | None) -> str | None:
    if any(i is not None and i.author for i in identities):
        return None
    return await git_user_name()


def report_error(exc: KaretechError) -> None:
    if exc.findings:
        print_findings(exc.findings, title="Configuration problems")
    print_error(f"Error: {exc}")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def run_create(args: argparse.Namespace, settings: Settings) -> int:
    gathered = gather_input(args)
    interactive = not args.yes and is_interactive()
    mode = select_mode(
        yolo=args.yolo,
        explicit=gathered.explicit,
        preset=gathered.preset.name if gathered.preset else None,
        interactive=interactive,
    )
    if args.verbose:
        print_detail(f"Mode: {mode.value}")

    preset = gathered.preset
    sources = build_sources(cli=gathered.cli, config_file=gathered.file_config, preset=preset)
    wizard: Wizard | None = None
    wizard_identity: ProjectIdentity | None = None

    if mode is Mode.INTERACTIVE:
        gh = await probe_tool("gh", timeout=settings.probe_timeout)
        partial_identity = resolve_partial_identity(gathered.identity, gathered.file_identity)
        wizard = Wizard(github_available=gh.available)
        result = wizard.run(sources, identity=partial_identity)
        wizard_identity = result.identity
        if result.preset is not None:
            preset = get_preset(result.preset)
        sources = build_sources(
            cli=gathered.cli,
            config_file=gathered.file_config,
            preset=preset,
            wizard=result.answers,
        )

    identity = resolve_identity(
        gathered.identity,
        gathered.file_identity,
        wizard_identity,
        default_author=await _default_author(gathered.identity, gathered.file_identity, wizard_identity),
    )
    output_dir = Path(args.output_dir)
    resolution = await resolve_and_validate(
        identity,
        sources,
        preset=preset.name if preset else None,
        settings=settings,
        cwd=output_dir,
    )

    print_findings(resolution.findings, title="Notes")
    print_summary_table(resolution.summary(), title=f"Configuration ({mode.value} mode)")

    if wizard is not None and not wizard.prompter.confirm("Generate project?", default=True):
        print_warning("Operation cancelled")
        return 0

    generator = ProjectGenerator(resolution.config, settings)
    with create_progress() as progress:
        task = progress.add_task("Generating project files...", total=None)
        result = await generator.generate(output_dir)
        progress.update(task, description=f"Wrote {len(result.files)} files")

    if args.verbose:
        for path in result.files:
            print_detail(str(path.relative_to(result.project_root)))

    result.steps = await generator.run_post_steps(
        result.project_root, git=args.git, install=args.install
    )
    for step in result.steps:
        if step.ok and not step.skipped:
            print_success(f"{step.name}: {step.message}")
        elif step.skipped:
            print_detail(f"{step.name}: {step.message}")
        else:
            print_warning(f"{step.name} failed: {step.message}")

    print_tracking(resolution)
    print_success(f"Created {resolution.config.project_name} in {result.project_root}")
    console.print(f"\n  cd {escape(str(result.project_root))}")
    if not args.install:
        console.print("  bun install")
    console.print("  bun run dev\n")
    return 0


def resolve_partial_identity(*candidates: ProjectIdentity | None) -> ProjectIdentity:
    """First-set-wins merge of identity fields, without generated defaults."""
    values: dict[str, str] = {}
    for attr in ("project_name", "description", "author"):
        for candidate in candidates:
            value = getattr(candidate, attr) if candidate is not None else None
            if value:
                values[attr] = value
                break
    return ProjectIdentity(**values)


def print_tracking(resolution: Resolution) -> None:
    report = tracking_report(resolution.config)
    print_section("Project Tracking")
    style = "green" if report.score >= 70 else "yellow"
    console.print(f"Tracking score: [{style}]{report.score}/100[/{style}]")
    for item in report.recommendations:
        print_detail(f"- {item}")


async def run_export(args: argparse.Namespace, settings: Settings) -> int:
    """Resolve without prompts, validate and save. Generates nothing."""
    gathered = gather_input(args)
    identity = resolve_identity(
        gathered.identity,
        gathered.file_identity,
        default_author=await _default_author(gathered.identity, gathered.file_identity),
    )
    sources = build_sources(cli=gathered.cli, config_file=gathered.file_config, preset=gathered.preset)
    resolution = resolve(identity, sources, gathered.preset.name if gathered.preset else None)
    findings = validate_resolution(resolution)
    if has_errors(findings):
        raise ConfigResolutionError(findings)
    print_findings(findings, title="Notes")

    fmt = args.fmt
    output = args.output
    if output is None and fmt is not None:
        output = default_config_path(resolution.config.project_name, fmt)
    path = export_config(resolution.config, output, fmt)
    print_success(f"Configuration exported to {path}")
    print_detail(f"Re-use with: create-karetech-stack {resolution.config.project_name} --config {path}")
    return 0


async def run_check_env(args: argparse.Namespace, settings: Settings) -> int:
    report = await check_environment(settings)
    print_report(report)
    return 0 if report.ok else 1


def run_presets(args: argparse.Namespace) -> int:
    if not args.check:
        rows = {
            p["name"]: f"[dim]({p['category']})[/dim] {escape(p['description'])}"
            for p in list_presets()
        }
        print_summary_table(rows, title="Presets")
        return 0

    failed = False
    for name, findings in check_all_presets().items():
        if not findings:
            print_success(f"{name}: ok")
            continue
        print_findings(findings, title=f"Preset: {name}")
        failed = failed or any(f.severity is Severity.ERROR for f in findings)
    return 1 if failed else 0


def run_command_line(argv: Sequence[str], settings: Settings | None = None) -> int:
    """Parse *argv*, run the command and return the exit code."""
    parser = build_parser()
    args = parser.parse_args(normalise_argv(argv))

    try:
        settings = settings or Settings.from_env()
        if args.command == "check-env":
            return asyncio.run(run_check_env(args, settings))
        if args.command == "examples":
            console.print(EXAMPLES, markup=False, highlight=False)
            return 0
        if args.command == "presets":
            return run_presets(args)
        if args.command == "export-config":
            return asyncio.run(run_export(args, settings))
        return asyncio.run(run_create(args, settings))
    except KaretechError as exc:
        report_error(exc)
        return 1
    except KeyboardInterrupt:
        print_warning("Operation cancelled")
        return 0


def main() -> None:
    """Console-script entry point."""
    sys.exit(run_command_line(sys.argv[1:]))


if __name__ == "__main__":
    main()
