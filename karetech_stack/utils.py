"""Shared utility functions for create-karetech-stack.

Provides async command execution, a non-raising tool probe, JSON I/O, and
the Rich console helpers every command uses for its output.
"""

from __future__ import annotations

import asyncio
import json
import os
import re
import shutil
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Sequence

from pydantic import BaseModel, Field
from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.rule import Rule
from rich.table import Table

from .schema import Finding, Severity

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: Sequence[str],
    cwd: str | Path | None = None,
    timeout: int = 120,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run *cmd* (an argv list, never a shell string) and capture its output.

    Returns:
        ``(returncode, stdout, stderr)`` with both streams decoded and
        stripped. A command still running after *timeout* seconds is killed
        and reported as ``-1`` with the reason on stderr.

    Raises:
        OSError: If the executable cannot be started.
    """
    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=str(cwd) if cwd else None,
        env={**os.environ, **env} if env else None,
    )
    try:
        out, err = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return -1, "", f"{' '.join(cmd)} timed out after {timeout}s"

    return (
        process.returncode or 0,
        (out or b"").decode("utf-8", errors="replace").strip(),
        (err or b"").decode("utf-8", errors="replace").strip(),
    )


# ---------------------------------------------------------------------------
# Tool probing
# ---------------------------------------------------------------------------


class ProbeStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


class ProbeResult(BaseModel):
    """Outcome of running an external tool once."""

    tool: str
    status: ProbeStatus
    version: str | None = Field(default=None, description="First dotted version in the output")
    output: str = ""
    message: str = ""

    @property
    def available(self) -> bool:
        return self.status is ProbeStatus.AVAILABLE


_VERSION_RE = re.compile(r"(\d+\.\d+(?:\.\d+)?)")


def parse_version(text: str) -> str | None:
    """Return the first ``X.Y[.Z]`` version found in *text*."""
    match = _VERSION_RE.search(text or "")
    return match.group(1) if match else None


def version_tuple(version: str | None) -> tuple[int, ...]:
    if not version:
        return ()
    return tuple(int(part) for part in version.split("."))


async def probe_tool(
    tool: str,
    args: Sequence[str] = ("--version",),
    timeout: int = 5,
    cwd: str | Path | None = None,
) -> ProbeResult:
    """Run ``tool *args`` and classify the result. Never raises.

    * ``unavailable`` when the executable is not on ``PATH`` or cannot start.
    * ``available`` when it exits with status 0.
    * ``unknown`` when it times out or exits non-zero.
    """
    if shutil.which(tool) is None:
        return ProbeResult(tool=tool, status=ProbeStatus.UNAVAILABLE, message=f"{tool} not found on PATH")

    try:
        returncode, stdout, stderr = await run_command([tool, *args], cwd=cwd, timeout=timeout)
    except OSError as exc:
        return ProbeResult(tool=tool, status=ProbeStatus.UNAVAILABLE, message=str(exc))

    output = stdout or stderr
    if returncode == 0:
        return ProbeResult(
            tool=tool,
            status=ProbeStatus.AVAILABLE,
            version=parse_version(output),
            output=output,
        )
    return ProbeResult(
        tool=tool,
        status=ProbeStatus.UNKNOWN,
        output=output,
        message=stderr or f"{tool} exited with status {returncode}",
    )


async def git_user_name(timeout: int = 5) -> str | None:
    """The configured ``git config user.name``, or ``None``."""
    result = await probe_tool("git", ("config", "user.name"), timeout=timeout)
    if result.available and result.output:
        return result.output.splitlines()[0].strip() or None
    return None


def is_interactive() -> bool:
    """True when both stdin and stdout are attached to a terminal."""
    return sys.stdin.isatty() and sys.stdout.isatty()


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


async def save_json(data: dict[str, Any] | list[Any], path: str | Path) -> Path:
    """Save data as pretty-printed JSON with a trailing newline.

    Parent directories are created automatically and the write runs in a
    worker thread.
    """
    file_path = Path(path)
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    def _write() -> None:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")

    await asyncio.to_thread(_write)
    return file_path


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------

SEVERITY_STYLES: dict[Severity, str] = {
    Severity.ERROR: "bold red",
    Severity.WARNING: "yellow",
    Severity.INFO: "cyan",
}


def print_section(title: str, color: str = "bright_cyan") -> None:
    """Print a full-width rule with *title*."""
    console.print()
    console.print(Rule(f"[bold {color}] {title} [/bold {color}]", style=color))
    console.print()


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table.

    Keys are plain text. Values are Rich markup, so callers escape any user
    text they put there.
    """
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(escape(key), str(value))

    console.print(table)
    console.print()


def print_findings(findings: Iterable[Finding], title: str = "Validation") -> None:
    """Print findings as a table, errors first, preserving order otherwise."""
    ordered = sorted(
        findings,
        key=lambda f: list(SEVERITY_STYLES).index(f.severity),
    )
    if not ordered:
        return

    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Severity", no_wrap=True)
    table.add_column("Field", style="bold", no_wrap=True)
    table.add_column("Message")
    table.add_column("Suggestion", style="dim")

    for finding in ordered:
        style = SEVERITY_STYLES[finding.severity]
        table.add_row(
            f"[{style}]{finding.severity.value}[/{style}]",
            escape(finding.field),
            escape(finding.message),
            escape(finding.suggestion or ""),
        )

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{escape(message)}[/bold yellow]")


def print_detail(message: str) -> None:
    console.print(f"[dim]{escape(message)}[/dim]")


def create_progress() -> Progress:
    """Create a Rich progress display for generation steps."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
    )
