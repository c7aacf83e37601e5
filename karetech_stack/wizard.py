"""Interactive configuration wizard.

Walks the user through seven steps (project info, core stack, design
system, testing, DevOps, AI workflow, extras) and asks only about fields no
higher-precedence source has already fixed. Answers become the wizard
source of the resolver; they never override CLI flags, a config file or a
preset.

Prompting goes through the small :class:`Prompter` interface so the wizard
can be driven by a scripted prompter in tests. :class:`RichPrompter` is the
terminal implementation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

from rich.markup import escape
from rich.prompt import Confirm, Prompt

from .mcp import recommended_servers
from .presets import PRESETS, get_preset
from .resolver import ConfigSource, coalesce, default_description, fixed_fields
from .schema import (
    STACK_FIELDS,
    AuthProvider,
    EmailProvider,
    FieldSpec,
    McpServer,
    PartialConfig,
    PbsLevel,
    ProjectIdentity,
    Severity,
)
from .utils import console, print_section, print_warning
from .validation.fields import validate_author, validate_description, validate_project_name


class Prompter(Protocol):
    def text(self, message: str, default: str | None = None) -> str: ...

    def confirm(self, message: str, default: bool = True) -> bool: ...

    def select(self, message: str, choices: Sequence[str], default: str | None = None) -> str: ...

    def multiselect(
        self, message: str, choices: Sequence[str], default: Sequence[str] = ()
    ) -> list[str]: ...


class RichPrompter:
    """Terminal prompts built on ``rich.prompt``."""

    def text(self, message: str, default: str | None = None) -> str:
        if default is None:
            return Prompt.ask(message, console=console)
        return Prompt.ask(message, default=default, console=console)

    def confirm(self, message: str, default: bool = True) -> bool:
        return Confirm.ask(message, default=default, console=console)

    def select(self, message: str, choices: Sequence[str], default: str | None = None) -> str:
        return Prompt.ask(message, choices=list(choices), default=default, console=console)

    def multiselect(
        self, message: str, choices: Sequence[str], default: Sequence[str] = ()
    ) -> list[str]:
        hint = f"{message} [dim](comma-separated: {', '.join(choices)}, or none)[/dim]"
        while True:
            raw = Prompt.ask(hint, default=",".join(default) or "none", console=console)
            picked = [part.strip().lower() for part in raw.split(",") if part.strip()]
            if picked == ["none"]:
                return []
            unknown = [p for p in picked if p not in choices]
            if not unknown:
                return list(dict.fromkeys(picked))
            print_warning(f"Unknown choice(s): {', '.join(unknown)}")


@dataclass(frozen=True)
class WizardStep:
    key: str
    title: str
    description: str
    fields: tuple[str, ...]


WIZARD_STEPS: tuple[WizardStep, ...] = (
    WizardStep(
        "core-stack",
        "Core Stack",
        "Database, authentication and API layer",
        ("database", "auth", "api_style"),
    ),
    WizardStep(
        "design-system",
        "Design System",
        "Component library, theme, typography and icons",
        (
            "component_library", "ui_style", "base_color", "accent_color",
            "font", "icons", "border_radius", "menu_accent",
        ),
    ),
    WizardStep(
        "testing-setup",
        "Testing",
        "End-to-end and unit testing",
        ("testing", "unit_testing", "example_tests"),
    ),
    WizardStep(
        "devops-config",
        "DevOps",
        "Containers, CI/CD and deployment",
        ("docker", "cicd", "deploy_target"),
    ),
    WizardStep(
        "ai-workflow",
        "AI Workflow",
        "PBS documentation, Beads, Claude Code hooks and MCP servers",
        ("pbs_level", "beads_integration", "claude_code_hooks", "mcp_servers"),
    ),
    WizardStep(
        "extras",
        "Extras",
        "PWA, analytics, email, error tracking and feature flags",
        ("pwa", "analytics", "email", "error_tracking", "feature_flags"),
    ),
)

_SPECS: dict[str, FieldSpec] = {spec.name: spec for spec in STACK_FIELDS}


@dataclass
class WizardResult:
    identity: ProjectIdentity
    answers: PartialConfig
    preset: str | None = None
    asked: list[str] = field(default_factory=list)


def _plain(value: Any) -> Any:
    if isinstance(value, tuple):
        return [getattr(v, "value", v) for v in value]
    return getattr(value, "value", value)


class Wizard:
    """One interactive session."""

    def __init__(
        self,
        prompter: Prompter | None = None,
        *,
        github_available: bool = False,
    ) -> None:
        self.prompter = prompter or RichPrompter()
        self.github_available = github_available

    # -- Public API --------------------------------------------------------

    def run(
        self,
        sources: Sequence[ConfigSource],
        identity: ProjectIdentity | None = None,
        preset: str | None = None,
    ) -> WizardResult:
        """Ask for everything *sources* leave open.

        Args:
            sources: Higher-precedence sources plus defaults, as built by
                :func:`karetech_stack.resolver.build_sources`.
            identity: Identity fields already supplied.
            preset: Preset already selected, if any.
        """
        identity = identity or ProjectIdentity()
        print_section("Project Info")
        identity = self._ask_identity(identity)

        fixed = fixed_fields(sources)
        if preset is None and not fixed:
            preset = self._ask_preset()
            if preset is not None:
                fixed |= set(get_preset(preset).defined())

        current, _ = coalesce(sources)
        if preset is not None:
            current.update(get_preset(preset).defined())
        answers: dict[str, Any] = {}
        asked: list[str] = []

        for step in WIZARD_STEPS:
            open_fields = [name for name in step.fields if name not in fixed]
            if not open_fields:
                continue
            print_section(step.title)
            console.print(f"[dim]{step.description}[/dim]")
            for name in open_fields:
                if name in answers:
                    continue
                value = self._ask_field(name, {**current, **answers})
                if value is None:
                    continue
                answers[name] = value
                asked.append(name)
                self._apply_follow_ups(name, value, answers, fixed, current)

        return WizardResult(
            identity=identity,
            answers=PartialConfig(**answers),
            preset=preset,
            asked=asked,
        )

    # -- Identity ----------------------------------------------------------

    def _ask_identity(self, identity: ProjectIdentity) -> ProjectIdentity:
        name = identity.project_name
        while not name:
            candidate = self.prompter.text("Project name", default="karetech-app").strip()
            problems = [f for f in validate_project_name(candidate) if f.severity is Severity.ERROR]
            if not problems:
                name = candidate
            else:
                print_warning(problems[0].message)

        description = identity.description
        while not description:
            candidate = self.prompter.text("Description", default=default_description(name)).strip()
            problems = [f for f in validate_description(candidate) if f.severity is Severity.ERROR]
            if not problems:
                description = candidate
            else:
                print_warning(problems[0].message)

        author = identity.author
        while not author:
            candidate = self.prompter.text("Author").strip()
            problems = [f for f in validate_author(candidate) if f.severity is Severity.ERROR]
            if not problems:
                author = candidate
            else:
                print_warning(problems[0].message)

        return ProjectIdentity(project_name=name, description=description, author=author)

    def _ask_preset(self) -> str | None:
        choices = ["custom", *PRESETS]
        for preset in PRESETS.values():
            console.print(f"  [bold]{preset.name}[/bold] [dim]({preset.category.value})[/dim] {escape(preset.description)}")
        picked = self.prompter.select("Start from a preset", choices, default="custom")
        return None if picked == "custom" else picked

    # -- Stack fields ------------------------------------------------------

    def _ask_field(self, name: str, current: dict[str, Any]) -> Any:
        spec = _SPECS[name]
        default = current.get(name)

        if spec.is_flag:
            return self.prompter.confirm(spec.label, default=bool(default))

        choices = spec.allowed_values()
        if len(choices) == 1:
            return None

        if spec.multiple:
            if name == "mcp_servers":
                default = recommended_servers(
                    current.get("database"),
                    current.get("testing") or (),
                    github_available=self.github_available,
                )
            picked = self.prompter.multiselect(spec.label, choices, default=_plain(default or ()))
            return tuple(picked)

        return self.prompter.select(spec.label, choices, default=_plain(default))

    def _apply_follow_ups(
        self,
        name: str,
        value: Any,
        answers: dict[str, Any],
        fixed: set[str],
        current: dict[str, Any],
    ) -> None:
        """Set dependent fields implied by an answer, unless already fixed."""
        if name == "pbs_level" and PbsLevel(value) is PbsLevel.FULL:
            for dependent in ("beads_integration", "claude_code_hooks"):
                if dependent not in fixed:
                    answers[dependent] = True
            console.print("[dim]Full PBS enables Beads integration and Claude Code hooks.[/dim]")

        if name == "auth" and AuthProvider.MAGIC_LINKS.value in _plain(value):
            if "email" not in fixed and "email" not in answers:
                answers["email"] = EmailProvider.RESEND.value
                console.print("[dim]Magic links need an email provider; using resend.[/dim]")

        effective = {**current, **answers}
        if name == "mcp_servers" and effective.get("claude_code_hooks") is True:
            servers = list(value)
            if McpServer.FILESYSTEM.value not in servers:
                answers["mcp_servers"] = (McpServer.FILESYSTEM.value, *servers)
