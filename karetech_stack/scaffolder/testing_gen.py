"""Test tooling generation.

Writes runner configuration for each selected framework (Playwright,
Puppeteer, Vitest) and, when example tests are enabled, a starter test for
each. Unit testing without Vitest in the E2E list still gets the Vitest
setup, since Vitest is the unit runner.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .templates import TemplateRenderer, output_relpath


# framework -> (configuration templates, example templates)
_FRAMEWORK_TEMPLATES: dict[str, tuple[tuple[str, ...], tuple[str, ...]]] = {
    "playwright": (
        ("playwright.config.ts.j2",),
        ("e2e/home.spec.ts.j2",),
    ),
    "puppeteer": (
        ("scripts/e2e-puppeteer.js.j2",),
        (),
    ),
    "vitest": (
        ("vitest.config.ts.j2", "src/test/setup.ts.j2"),
        ("src/lib/utils.test.ts.j2",),
    ),
}


class TestingGenerator:
    """Generates test runner configuration and example tests."""

    __test__ = False

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    @staticmethod
    def frameworks(context: dict[str, Any]) -> list[str]:
        """Frameworks to set up, in a stable order."""
        selected = list(context.get("testing", []))
        if context.get("unit_testing") and "vitest" not in selected:
            selected.append("vitest")
        return [name for name in _FRAMEWORK_TEMPLATES if name in selected]

    async def generate(
        self,
        project_root: Path,
        context: dict[str, Any],
    ) -> list[Path]:
        """Render configuration (and examples) for every framework.

        Args:
            project_root: Root of the generated project.
            context: Template context; reads ``testing``, ``unit_testing``
                and ``example_tests``.

        Returns:
            Written file paths.
        """
        written: list[Path] = []
        for framework, rel in self._plan(context):
            out = project_root / output_relpath(rel)
            written.append(
                await self.renderer.render_to_file(f"testing/{framework}/{rel}", out, context)
            )
        return written

    def templates(self, context: dict[str, Any]) -> list[str]:
        """Template paths ``generate`` renders for *context*."""
        return [f"testing/{framework}/{rel}" for framework, rel in self._plan(context)]

    def _plan(self, context: dict[str, Any]) -> list[tuple[str, str]]:
        plan: list[tuple[str, str]] = []
        for framework in self.frameworks(context):
            config_templates, example_templates = _FRAMEWORK_TEMPLATES[framework]
            plan.extend((framework, rel) for rel in config_templates)
            if context.get("example_tests"):
                plan.extend((framework, rel) for rel in example_templates)
        return plan
