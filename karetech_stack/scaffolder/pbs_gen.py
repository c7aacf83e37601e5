"""PBS (Plan-Build-Ship) documentation generation.

Each PBS level writes a fixed set of documents. ``full`` adds architecture
decision records, ``.specify`` planning files and two executable helper
scripts; ``none`` writes nothing beyond the base README.
"""

from __future__ import annotations

import asyncio
import stat
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from ..schema import PbsLevel
from .templates import TemplateRenderer

PBS_FILES: Mapping[PbsLevel, tuple[str, ...]] = MappingProxyType({
    PbsLevel.FULL: (
        "docs/PBS_MASTER_SYSTEM.md",
        "docs/FORK_PLAN.md",
        "docs/ARCHITECTURE.md",
        "docs/PROJECT_STATUS.md",
        "docs/CHANGELOG.md",
        "docs/ADR/README.md",
        "docs/TECH/README.md",
        "CLAUDE.md",
        "constitution.md",
        ".specify/spec.md",
        ".specify/plan.md",
        ".specify/tasks/README.md",
        "scripts/pbs-init.sh",
        "scripts/pbs-status.sh",
    ),
    PbsLevel.DOCS: (
        "docs/ARCHITECTURE.md",
        "docs/PROJECT_STATUS.md",
        "docs/CHANGELOG.md",
        "CLAUDE.md",
    ),
    PbsLevel.MINIMAL: (
        "CLAUDE.md",
        "docs/PROJECT_STATUS.md",
    ),
    PbsLevel.NONE: (),
})

PBS_LEVEL_NAMES: Mapping[PbsLevel, str] = MappingProxyType({
    PbsLevel.FULL: "Full PBS System",
    PbsLevel.DOCS: "Documentation Only",
    PbsLevel.MINIMAL: "Minimal PBS",
    PbsLevel.NONE: "No PBS",
})


def template_for(output_path: str) -> str:
    """``.specify/spec.md`` -> ``pbs/dot-specify/spec.md.j2``."""
    parts = ["dot-" + p[1:] if p.startswith(".") else p for p in output_path.split("/")]
    return "pbs/" + "/".join(parts) + ".j2"


class PbsGenerator:
    """Generates the PBS documents for the configured level."""

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def templates(self, context: dict[str, Any]) -> list[str]:
        return [template_for(rel) for rel in PBS_FILES[PbsLevel(context["pbs_level"])]]

    async def generate(self, project_root: Path, context: dict[str, Any]) -> list[Path]:
        level = PbsLevel(context["pbs_level"])
        written: list[Path] = []
        for rel in PBS_FILES[level]:
            out = project_root / rel
            await self.renderer.render_to_file(template_for(rel), out, context)
            if rel.endswith(".sh"):
                await asyncio.to_thread(_make_executable, out)
            written.append(out)
        return written


def _make_executable(path: Path) -> None:
    """Set the executable bit on a file."""
    current = path.stat().st_mode
    path.chmod(current | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
