"""Development environment diagnostics for ``check-env``.

Each check probes one external tool through :func:`probe_tool`, which never
raises, and turns the tri-state result into pass / warning / fail. Only
required tools (Bun and Git) can fail the report; optional tools degrade to
warnings.
"""

from __future__ import annotations

import asyncio
from enum import Enum

from pydantic import BaseModel, Field
from rich.markup import escape
from rich.table import Table

from .config import Settings
from .utils import ProbeResult, ProbeStatus, console, probe_tool, version_tuple


class CheckStatus(str, Enum):
    PASS = "pass"
    WARNING = "warning"
    FAIL = "fail"


class EnvironmentCheck(BaseModel):
    name: str
    status: CheckStatus
    required: bool = False
    version: str | None = None
    message: str = ""


class EnvironmentSummary(BaseModel):
    passed: int = 0
    warnings: int = 0
    failed: int = 0
    total: int = 0


class EnvironmentReport(BaseModel):
    """All checks plus an overall verdict."""

    overall: CheckStatus
    checks: list[EnvironmentCheck] = Field(default_factory=list)
    summary: EnvironmentSummary = Field(default_factory=EnvironmentSummary)

    @property
    def ok(self) -> bool:
        return self.overall is not CheckStatus.FAIL


# ---------------------------------------------------------------------------
# Individual checks
# ---------------------------------------------------------------------------


def _missing(name: str, required: bool, probe: ProbeResult, hint: str) -> EnvironmentCheck:
    if probe.status is ProbeStatus.UNKNOWN:
        return EnvironmentCheck(
            name=name,
            status=CheckStatus.FAIL if required else CheckStatus.WARNING,
            required=required,
            message=f"Could not determine version: {probe.message}",
        )
    return EnvironmentCheck(
        name=name,
        status=CheckStatus.FAIL if required else CheckStatus.WARNING,
        required=required,
        message=f"Not installed. {hint}",
    )


def check_bun(probe: ProbeResult) -> EnvironmentCheck:
    if not probe.available:
        return _missing("Bun", True, probe, "Install from https://bun.sh")
    if version_tuple(probe.version) < (1, 0):
        return EnvironmentCheck(
            name="Bun",
            status=CheckStatus.WARNING,
            required=True,
            version=probe.version,
            message="Bun 1.0 or newer is recommended",
        )
    return EnvironmentCheck(name="Bun", status=CheckStatus.PASS, required=True, version=probe.version)


def check_node(probe: ProbeResult) -> EnvironmentCheck:
    if not probe.available:
        return _missing("Node.js", False, probe, "Optional; some tooling expects Node.js 18+")
    if version_tuple(probe.version) < (18,):
        return EnvironmentCheck(
            name="Node.js",
            status=CheckStatus.WARNING,
            version=probe.version,
            message="Node.js 18 or newer is recommended",
        )
    return EnvironmentCheck(name="Node.js", status=CheckStatus.PASS, version=probe.version)


def check_git(probe: ProbeResult) -> EnvironmentCheck:
    if not probe.available:
        return _missing("Git", True, probe, "Install from https://git-scm.com")
    return EnvironmentCheck(name="Git", status=CheckStatus.PASS, required=True, version=probe.version)


def check_beads(probe: ProbeResult) -> EnvironmentCheck:
    if not probe.available:
        return _missing("Beads CLI", False, probe, "Needed for --beads issue tracking")
    return EnvironmentCheck(name="Beads CLI", status=CheckStatus.PASS, version=probe.version)


def check_github_cli(probe: ProbeResult, auth: ProbeResult | None) -> EnvironmentCheck:
    if not probe.available:
        return _missing("GitHub CLI", False, probe, "Needed for GitHub repository setup")
    if auth is None or not auth.available:
        return EnvironmentCheck(
            name="GitHub CLI",
            status=CheckStatus.WARNING,
            version=probe.version,
            message="Not authenticated. Run 'gh auth login'",
        )
    return EnvironmentCheck(
        name="GitHub CLI", status=CheckStatus.PASS, version=probe.version, message="Authenticated"
    )


def check_docker(probe: ProbeResult) -> EnvironmentCheck:
    if not probe.available:
        return _missing("Docker", False, probe, "Needed for --docker")
    return EnvironmentCheck(name="Docker", status=CheckStatus.PASS, version=probe.version)


# ---------------------------------------------------------------------------
# Report
# ---------------------------------------------------------------------------


def build_report(checks: list[EnvironmentCheck]) -> EnvironmentReport:
    summary = EnvironmentSummary(
        passed=sum(1 for c in checks if c.status is CheckStatus.PASS),
        warnings=sum(1 for c in checks if c.status is CheckStatus.WARNING),
        failed=sum(1 for c in checks if c.status is CheckStatus.FAIL),
        total=len(checks),
    )
    if summary.failed:
        overall = CheckStatus.FAIL
    elif summary.warnings:
        overall = CheckStatus.WARNING
    else:
        overall = CheckStatus.PASS
    return EnvironmentReport(overall=overall, checks=checks, summary=summary)


async def check_environment(settings: Settings | None = None) -> EnvironmentReport:
    """Probe every tool concurrently and build the report."""
    settings = settings or Settings()
    timeout = settings.probe_timeout

    bun, node, git, bd, gh, docker = await asyncio.gather(
        probe_tool("bun", timeout=timeout),
        probe_tool("node", timeout=timeout),
        probe_tool("git", timeout=timeout),
        probe_tool("bd", timeout=timeout),
        probe_tool("gh", timeout=timeout),
        probe_tool("docker", timeout=timeout),
    )
    gh_auth = await probe_tool("gh", ("auth", "status"), timeout=timeout) if gh.available else None

    return build_report([
        check_bun(bun),
        check_node(node),
        check_git(git),
        check_beads(bd),
        check_github_cli(gh, gh_auth),
        check_docker(docker),
    ])


_STATUS_STYLES: dict[CheckStatus, str] = {
    CheckStatus.PASS: "[green]pass[/green]",
    CheckStatus.WARNING: "[yellow]warning[/yellow]",
    CheckStatus.FAIL: "[bold red]fail[/bold red]",
}


def print_report(report: EnvironmentReport) -> None:
    table = Table(title="Environment", show_header=True, header_style="bold cyan")
    table.add_column("Tool", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Version", style="dim")
    table.add_column("Required")
    table.add_column("Notes")

    for check in report.checks:
        table.add_row(
            check.name,
            _STATUS_STYLES[check.status],
            escape(check.version or "-"),
            "yes" if check.required else "no",
            escape(check.message),
        )
    console.print(table)
    s = report.summary
    console.print(
        f"{s.passed} passed, {s.warnings} warning(s), {s.failed} failed "
        f"({s.total} checks) - overall: {_STATUS_STYLES[report.overall]}"
    )
