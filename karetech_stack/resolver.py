"""Configuration resolution.

Merges up to five partial sources into one complete ``ProjectConfig``.
Sources are consulted highest precedence first:

1. explicit CLI flags
2. a config file passed with ``--config``
3. the selected preset
4. interactive wizard answers
5. built-in defaults, which define every field

Each field takes the value of the first source that defines it. List
fields (``auth``, ``testing``, ``mcpServers``) are replaced wholesale by
the winning source and never merged element-wise. Identity fields are
resolved separately from explicit input or generated defaults.

Typical usage::

    sources = build_sources(cli=cli_values, preset=get_preset("saas"))
    resolution = await resolve_and_validate(identity, sources, settings=settings)
    generate(resolution.config)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Sequence

from pydantic import ValidationError
from rich.markup import escape

from .config import Settings
from .errors import ConfigResolutionError, KaretechError
from .schema import (
    STACK_FIELD_NAMES,
    Finding,
    PartialConfig,
    PresetConfig,
    ProjectConfig,
    ProjectIdentity,
    alias_of,
    has_errors,
)
from .validation.context import gather_validation_context
from .validation.fields import ValidationContext, validate_config


# ---------------------------------------------------------------------------
# Built-in defaults
# ---------------------------------------------------------------------------

DEFAULT_PROJECT_NAME = "karetech-app"
DEFAULT_AUTHOR = "KareTech Developer"

DEFAULT_CONFIG = PartialConfig(
    database="postgresql",
    auth=("email", "github"),
    api_style="orpc",
    component_library="base-ui",
    ui_style="maia",
    base_color="zinc",
    accent_color="blue",
    font="figtree",
    icons="hugeicons",
    border_radius="default",
    menu_accent="subtle",
    testing=("playwright",),
    unit_testing=True,
    example_tests=True,
    docker=False,
    cicd="github-actions",
    deploy_target="vercel",
    pbs_level="full",
    beads_integration=True,
    claude_code_hooks=True,
    mcp_servers=("filesystem", "github"),
    pwa=False,
    analytics="vercel",
    email="none",
    error_tracking="sentry",
    feature_flags=False,
)


def default_description(project_name: str) -> str:
    return f"A {project_name} application"


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------


class SourceName(str, Enum):
    CLI = "cli"
    CONFIG_FILE = "config-file"
    PRESET = "preset"
    WIZARD = "wizard"
    DEFAULTS = "defaults"


@dataclass(frozen=True)
class ConfigSource:
    """One named layer of partial configuration."""

    name: SourceName
    values: PartialConfig


def build_sources(
    cli: PartialConfig | None = None,
    config_file: PartialConfig | None = None,
    preset: PresetConfig | None = None,
    wizard: PartialConfig | None = None,
) -> list[ConfigSource]:
    """Order the available sources by precedence, defaults last."""
    sources: list[ConfigSource] = []
    if cli is not None:
        sources.append(ConfigSource(SourceName.CLI, cli))
    if config_file is not None:
        sources.append(ConfigSource(SourceName.CONFIG_FILE, config_file))
    if preset is not None:
        sources.append(ConfigSource(SourceName.PRESET, preset.stack()))
    if wizard is not None:
        sources.append(ConfigSource(SourceName.WIZARD, wizard))
    sources.append(ConfigSource(SourceName.DEFAULTS, DEFAULT_CONFIG))
    return sources


def fixed_fields(sources: Sequence[ConfigSource]) -> set[str]:
    """Stack fields already decided by a non-default source."""
    names: set[str] = set()
    for source in sources:
        if source.name is not SourceName.DEFAULTS:
            names.update(source.values.defined())
    return names


def coalesce(sources: Sequence[ConfigSource]) -> tuple[dict[str, Any], dict[str, SourceName]]:
    """Per-field first-defined-wins merge.

    Returns:
        ``(values, provenance)`` where ``provenance`` maps each field to the
        source that supplied it. Fields no source defines are absent.
    """
    values: dict[str, Any] = {}
    provenance: dict[str, SourceName] = {}
    for name in STACK_FIELD_NAMES:
        for source in sources:
            value = getattr(source.values, name)
            if value is not None:
                values[name] = value
                provenance[name] = source.name
                break
    return values, provenance


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


def resolve_identity(
    *candidates: ProjectIdentity | None,
    default_author: str | None = None,
) -> ProjectIdentity:
    """Fill identity fields from the first candidate that sets each one.

    Candidates are given highest precedence first (CLI, config file,
    wizard). Missing values fall back to generated defaults.
    """
    resolved: dict[str, str] = {}
    for attr in ("project_name", "description", "author"):
        for candidate in candidates:
            value = getattr(candidate, attr, None) if candidate is not None else None
            if value is not None and value.strip():
                resolved[attr] = value.strip()
                break

    name = resolved.get("project_name", DEFAULT_PROJECT_NAME)
    return ProjectIdentity(
        project_name=name,
        description=resolved.get("description", default_description(name)),
        author=resolved.get("author", default_author or DEFAULT_AUTHOR),
    )


# ---------------------------------------------------------------------------
# Mode selection
# ---------------------------------------------------------------------------


class Mode(str, Enum):
    YOLO = "yolo"
    EXPLICIT = "explicit"
    PRESET = "preset"
    INTERACTIVE = "interactive"


def select_mode(
    *,
    yolo: bool = False,
    explicit: bool = False,
    preset: str | None = None,
    interactive: bool = False,
) -> Mode:
    """Pick the run mode: yolo > explicit > preset > interactive.

    A session that cannot prompt and matches no other mode runs as
    ``yolo`` so it still ends with a complete configuration.
    """
    if yolo:
        return Mode.YOLO
    if explicit:
        return Mode.EXPLICIT
    if preset:
        return Mode.PRESET
    if interactive:
        return Mode.INTERACTIVE
    return Mode.YOLO


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


@dataclass
class Resolution:
    """A resolved configuration together with where each field came from."""

    config: ProjectConfig
    provenance: dict[str, SourceName]
    findings: list[Finding] = field(default_factory=list)

    def source_of(self, name: str) -> SourceName:
        return self.provenance[name]

    def summary(self) -> dict[str, str]:
        """camelCase field -> ``value (source)`` rows for display.

        Values are Rich markup with user text escaped.
        """
        document = self.config.to_document()
        rows: dict[str, str] = {}
        for attr in ("project_name", "description", "author", "preset"):
            value = document[alias_of(attr)]
            if value is not None:
                rows[alias_of(attr)] = escape(str(value))
        for name in STACK_FIELD_NAMES:
            value = document[alias_of(name)]
            if isinstance(value, list):
                shown = ", ".join(value) or "(none)"
            elif isinstance(value, bool):
                shown = "yes" if value else "no"
            else:
                shown = str(value)
            rows[alias_of(name)] = f"{escape(shown)}  [dim]({self.provenance[name].value})[/dim]"
        return rows


def resolve(
    identity: ProjectIdentity,
    sources: Sequence[ConfigSource],
    preset: str | None = None,
) -> Resolution:
    """Coalesce *sources* into a ``ProjectConfig``. Does not validate.

    Raises:
        KaretechError: If some field is defined by no source, which can only
            happen when the defaults layer is left out.
    """
    values, provenance = coalesce(sources)
    missing = [alias_of(name) for name in STACK_FIELD_NAMES if name not in values]
    if missing:
        raise KaretechError(f"No value for: {', '.join(missing)}")

    try:
        config = ProjectConfig(
            project_name=identity.project_name,
            description=identity.description,
            author=identity.author,
            preset=preset,
            **values,
        )
    except ValidationError as exc:
        raise KaretechError(f"Resolved configuration is not valid: {exc}") from exc
    return Resolution(config=config, provenance=provenance)


def validate_resolution(
    resolution: Resolution,
    context: ValidationContext | None = None,
) -> list[Finding]:
    """Validate a resolution, store and return its findings."""
    resolution.findings = validate_config(resolution.config, context)
    return resolution.findings


async def resolve_and_validate(
    identity: ProjectIdentity,
    sources: Sequence[ConfigSource],
    preset: str | None = None,
    settings: Settings | None = None,
    cwd: str | Path | None = None,
) -> Resolution:
    """Resolve, gather environment facts, validate, and enforce zero errors.

    Raises:
        ConfigResolutionError: Carrying every finding when any of them is
            an error. Nothing has been written at that point.
    """
    resolution = resolve(identity, sources, preset)
    context = await gather_validation_context(
        resolution.config.project_name, settings=settings, cwd=cwd
    )
    findings = validate_resolution(resolution, context)
    if has_errors(findings):
        raise ConfigResolutionError(findings)
    return resolution
