"""Main scaffolding orchestrator.

Takes a validated ``ProjectConfig`` and renders the starter project: the
template layers the configuration selects, ``package.json``, Docker, test,
CI/deploy and PBS files, and a copy of the configuration for later
regeneration. Post-generation steps (git, install, Beads) run afterwards and
are best-effort.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config import Settings
from ..errors import GenerationError
from ..mcp import required_env_vars
from ..persistence import dump_config
from ..schema import (
    CiCdPlatform,
    DatabaseType,
    DeployTarget,
    ProjectConfig,
)
from ..utils import probe_tool, run_command, save_json
from ..validation.presets import tracking_report
from .dependencies import build_package_json
from .docker_gen import DockerGenerator
from .pbs_gen import PBS_LEVEL_NAMES, PbsGenerator
from .templates import TemplateRenderer, pascal_case
from .testing_gen import TestingGenerator

CONFIG_FILENAME = "karetech.config.json"


# ---------------------------------------------------------------------------
# Theme data
# ---------------------------------------------------------------------------

FONT_STACKS: dict[str, str] = {
    "inter": "'Inter', system-ui, sans-serif",
    "geist": "'Geist', system-ui, sans-serif",
    "crimson": "'Crimson Pro', Georgia, serif",
    "mono": "'JetBrains Mono', ui-monospace, monospace",
    "figtree": "'Figtree', system-ui, sans-serif",
}

# Tailwind palette shade 600 for each accent colour.
ACCENT_HEX: dict[str, str] = {
    "red": "#dc2626",
    "orange": "#ea580c",
    "yellow": "#ca8a04",
    "green": "#16a34a",
    "blue": "#2563eb",
    "purple": "#9333ea",
    "pink": "#db2777",
    "violet": "#7c3aed",
}

# Default radius per UI style, used when border radius is "default".
STYLE_RADIUS: dict[str, str] = {
    "vega": "0.5",
    "nova": "0.75",
    "maia": "0.625",
    "lyra": "0",
    "mira": "0.375",
    "default": "0.5",
}


@dataclass
class StepResult:
    """Outcome of one post-generation step."""

    name: str
    ok: bool
    message: str = ""
    skipped: bool = False


@dataclass
class GenerationResult:
    project_root: Path
    files: list[Path] = field(default_factory=list)
    steps: list[StepResult] = field(default_factory=list)


def build_context(
    config: ProjectConfig,
    settings: Settings | None = None,
    generated_at: datetime | None = None,
) -> dict[str, Any]:
    """Build the Jinja2 template context from the project config.

    All configuration fields are present under their snake_case names with
    plain JSON values; derived values (dependencies, theme, tracking) are
    added alongside.
    """
    settings = settings or Settings()
    ctx: dict[str, Any] = config.model_dump(mode="json")
    package_json = build_package_json(config)

    radius = config.border_radius.value
    if radius == "default":
        radius = STYLE_RADIUS[config.ui_style.value]

    ctx.update({
        "project_title": pascal_case(config.project_name),
        "generated_at": (generated_at or datetime.now(timezone.utc)).isoformat(timespec="seconds"),
        "cli_version": settings.cli_version,
        "dependencies": package_json["dependencies"],
        "dev_dependencies": package_json["devDependencies"],
        "scripts": package_json["scripts"],
        "has_database": config.database is not DatabaseType.NONE,
        "has_e2e": any(t in ctx["testing"] for t in ("playwright", "puppeteer")),
        "mcp_env_vars": required_env_vars(config.mcp_servers),
        "font_stack": FONT_STACKS[config.font.value],
        "accent_hex": ACCENT_HEX[config.accent_color.value],
        "radius_rem": f"{radius}rem",
        "pbs_level_name": PBS_LEVEL_NAMES[config.pbs_level],
        "tracking": tracking_report(config).model_dump(),
    })
    return ctx


# ---------------------------------------------------------------------------
# Main generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Renders one project from a resolved configuration.

    Given a ``ProjectConfig``, generates a directory containing:
    - the base TanStack Router + Hono + oRPC application
    - theme, component library, database and auth layers
    - package.json with dependencies and scripts
    - Docker, test runner, CI/CD and deploy configuration
    - PBS documentation for the configured level
    """

    def __init__(
        self,
        config: ProjectConfig,
        settings: Settings | None = None,
        renderer: TemplateRenderer | None = None,
    ) -> None:
        self.config = config
        self.settings = settings or Settings()
        self.renderer = renderer or TemplateRenderer(self.settings.templates_dir)
        self.docker_gen = DockerGenerator(self.renderer)
        self.testing_gen = TestingGenerator(self.renderer)
        self.pbs_gen = PbsGenerator(self.renderer)

    # -- Layers ------------------------------------------------------------

    def layers(self) -> list[str]:
        """Template layers rendered onto the project root, in order."""
        c = self.config
        layers = ["base", "themes", f"component-libraries/{c.component_library.value}"]
        if c.database is not DatabaseType.NONE:
            layers.append(f"database/{c.database.value}")
        if c.auth:
            layers.append("auth/common")
            layers.extend(f"auth/{provider.value}" for provider in c.auth)
        if c.cicd is CiCdPlatform.GITHUB_ACTIONS:
            layers.append("devops/github-actions")
        if c.deploy_target is DeployTarget.VERCEL or c.cicd is CiCdPlatform.VERCEL:
            layers.append("devops/vercel")
        if c.deploy_target is DeployTarget.NETLIFY:
            layers.append("devops/netlify")
        if c.pwa:
            layers.append("extras/pwa")
        return layers

    def missing_layers(self) -> list[str]:
        return [layer for layer in self.layers() if not self.renderer.has_layer(layer)]

    def missing_templates(self, context: dict[str, Any]) -> list[str]:
        """Single templates the test, PBS and Docker generators need but cannot find."""
        needed = [
            *self.testing_gen.templates(context),
            *self.pbs_gen.templates(context),
            *self.docker_gen.templates(context),
        ]
        return [name for name in needed if not self.renderer.has_template(name)]

    # -- Public API --------------------------------------------------------

    async def generate(self, output_dir: str | Path) -> GenerationResult:
        """Generate the project under ``output_dir/<project-name>``.

        Raises:
            GenerationError: If the target directory already exists or a
                template layer or file is missing. Nothing is written in
                any of these cases.
        """
        project_root = Path(output_dir) / self.config.project_name
        if project_root.exists():
            raise GenerationError(f"Target directory already exists: {project_root}")
        missing = self.missing_layers()
        if missing:
            raise GenerationError(
                f"Template directory not found: {', '.join(missing)} "
                f"(template root {self.renderer.template_dir})"
            )
        ctx = build_context(self.config, self.settings)
        missing = self.missing_templates(ctx)
        if missing:
            raise GenerationError(
                f"Template files not found: {', '.join(missing)} "
                f"(template root {self.renderer.template_dir})"
            )

        await asyncio.to_thread(project_root.mkdir, parents=True)

        # Layers write disjoint files, so they render concurrently.
        batches = await asyncio.gather(
            *(self.renderer.render_tree(layer, project_root, ctx, required=True) for layer in self.layers()),
            self.testing_gen.generate(project_root, ctx),
            self.pbs_gen.generate(project_root, ctx),
        )
        docker_files = await self.docker_gen.generate_all(project_root, ctx)

        files: list[Path] = [path for batch in batches for path in batch]
        files.extend(docker_files.values())
        files.append(await save_json(build_package_json(self.config), project_root / "package.json"))
        config_path = project_root / CONFIG_FILENAME
        await asyncio.to_thread(config_path.write_text, dump_config(self.config), "utf-8")
        files.append(config_path)

        return GenerationResult(project_root=project_root, files=sorted(files))

    # -- Post-generation steps ---------------------------------------------

    async def run_post_steps(
        self,
        project_root: Path,
        *,
        git: bool = True,
        install: bool = True,
    ) -> list[StepResult]:
        """Initialise git, install dependencies and set up Beads.

        Every step is best-effort: failures are reported in the returned
        results and never raised.
        """
        steps: list[StepResult] = []
        timeout = self.settings.command_timeout

        if git:
            steps.append(await self._git_init(project_root, timeout))
        else:
            steps.append(StepResult("git", ok=True, message="Skipped (--no-git)", skipped=True))

        if install:
            steps.append(await self._run_tool_step(
                "install", "bun", ["bun", "install"], project_root, timeout
            ))
        else:
            steps.append(StepResult("install", ok=True, message="Skipped (--no-install)", skipped=True))

        if self.config.beads_integration:
            steps.append(await self._run_tool_step(
                "beads", "bd", ["bd", "init"], project_root, timeout
            ))
        return steps

    async def _run_tool_step(
        self,
        name: str,
        tool: str,
        cmd: list[str],
        cwd: Path,
        timeout: int,
    ) -> StepResult:
        probe = await probe_tool(tool, timeout=self.settings.probe_timeout)
        if not probe.available:
            return StepResult(name, ok=False, message=f"{tool} not available", skipped=True)
        try:
            rc, _, stderr = await run_command(cmd, cwd=cwd, timeout=timeout)
        except OSError as exc:
            return StepResult(name, ok=False, message=str(exc))
        if rc != 0:
            return StepResult(name, ok=False, message=stderr or f"{' '.join(cmd)} exited with {rc}")
        return StepResult(name, ok=True, message=" ".join(cmd))

    async def _git_init(self, root: Path, timeout: int) -> StepResult:
        probe = await probe_tool("git", timeout=self.settings.probe_timeout)
        if not probe.available:
            return StepResult("git", ok=False, message="git not available", skipped=True)

        commands = [
            ["git", "init"],
            ["git", "add", "-A"],
            ["git", "commit", "-m", f"Initial commit from create-karetech-stack {self.settings.cli_version}"],
        ]
        for cmd in commands:
            try:
                rc, _, stderr = await run_command(cmd, cwd=root, timeout=timeout)
            except OSError as exc:
                return StepResult("git", ok=False, message=str(exc))
            if rc != 0:
                return StepResult("git", ok=False, message=stderr or f"{' '.join(cmd)} exited with {rc}")
        return StepResult("git", ok=True, message="Initialized repository with initial commit")
