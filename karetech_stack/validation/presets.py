"""Preset self-consistency checks and tracking scores.

Runs the same stack rules used for live input over every registered preset,
plus structural and category-specific advice, so authoring mistakes in the
registry are caught by the test suite and ``create-karetech-stack presets
--check`` instead of by users.
"""

from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel, Field

from ..presets import PRESETS
from ..schema import (
    AnalyticsProvider,
    DatabaseType,
    ErrorTrackingProvider,
    Finding,
    McpServer,
    PbsLevel,
    PresetCategory,
    PresetConfig,
    TestingFramework,
    error,
    info,
    warning,
)
from .fields import validate_preset_expectations, validate_stack


def _check_structure(preset: PresetConfig) -> list[Finding]:
    findings: list[Finding] = []
    if not preset.name.strip():
        findings.append(error("name", "Preset name is required"))
    if not preset.description.strip():
        findings.append(error("description", "Preset description is required"))
    if preset.database is None:
        findings.append(error("database", "Preset must choose a database"))
    return findings


def _check_category(preset: PresetConfig) -> list[Finding]:
    findings: list[Finding] = []
    category = preset.category

    if category is PresetCategory.STARTER:
        if preset.beads_integration is not True:
            findings.append(warning(
                "beadsIntegration",
                "Starter presets should enable Beads issue tracking",
            ))
        if preset.pbs_level is PbsLevel.NONE:
            findings.append(warning(
                "pbsLevel",
                "Starter presets should include PBS documentation",
            ))
    elif category is PresetCategory.SPECIALIZED:
        if preset.claude_code_hooks is not True:
            findings.append(info(
                "claudeCodeHooks",
                "Specialized presets benefit from Claude Code hooks",
            ))
    elif category is PresetCategory.MINIMAL:
        if preset.beads_integration is True:
            findings.append(info(
                "beadsIntegration",
                "Minimal presets usually skip Beads integration",
            ))

    if (
        preset.database is DatabaseType.POSTGRESQL
        and preset.mcp_servers is not None
        and McpServer.POSTGRES not in preset.mcp_servers
    ):
        findings.append(info(
            "mcpServers",
            "PostgreSQL presets benefit from the postgres MCP server",
        ))
    if (
        preset.testing is not None
        and TestingFramework.PLAYWRIGHT in preset.testing
        and preset.example_tests is False
    ):
        findings.append(warning(
            "exampleTests",
            "Presets with Playwright should ship example tests",
        ))
    return findings


def check_preset(preset: PresetConfig) -> list[Finding]:
    """All findings for one preset, in a stable order."""
    return [
        *_check_structure(preset),
        *validate_stack(preset),
        *validate_preset_expectations(preset, preset.name),
        *_check_category(preset),
    ]


def check_all_presets(presets: Mapping[str, PresetConfig] | None = None) -> dict[str, list[Finding]]:
    """Findings grouped by preset name."""
    registry = PRESETS if presets is None else presets
    return {name: check_preset(preset) for name, preset in registry.items()}


# ---------------------------------------------------------------------------
# Tracking score
# ---------------------------------------------------------------------------


class TrackingReport(BaseModel):
    """How much of the project-tracking tooling a configuration enables."""

    score: int = Field(default=0, ge=0, le=100)
    checks: dict[str, bool] = Field(default_factory=dict)
    recommendations: list[str] = Field(default_factory=list)


_RECOMMENDATIONS: dict[str, str] = {
    "beads": "Enable Beads integration (--beads) for issue tracking",
    "claude_hooks": "Enable Claude Code hooks (--claude-hooks) for automated PBS updates",
    "mcp_servers": "Add MCP servers (--mcp filesystem,github) for AI-assisted development",
    "documentation": "Choose a PBS level (--pbs docs) for project documentation",
    "testing": "Add a testing framework (--testing vitest) or enable unit tests",
    "analytics": "Add analytics (--analytics vercel) to measure usage",
    "error_tracking": "Add error tracking (--error-tracking sentry) for production monitoring",
}


def tracking_report(config: Any) -> TrackingReport:
    """Score the tracking setup of a configuration from 0 to 100."""
    checks = {
        "beads": config.beads_integration is True,
        "claude_hooks": config.claude_code_hooks is True,
        "mcp_servers": bool(config.mcp_servers),
        "documentation": config.pbs_level not in (None, PbsLevel.NONE),
        "testing": bool(config.testing) or config.unit_testing is True,
        "analytics": config.analytics not in (None, AnalyticsProvider.NONE),
        "error_tracking": config.error_tracking not in (None, ErrorTrackingProvider.NONE),
    }
    passed = sum(checks.values())
    return TrackingReport(
        score=round(passed * 100 / len(checks)),
        checks=checks,
        recommendations=[_RECOMMENDATIONS[name] for name, ok in checks.items() if not ok],
    )
