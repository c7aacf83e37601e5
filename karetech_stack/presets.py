"""Preset registry.

A preset is a named partial configuration that fills in the stack for a
common kind of project. The registry is built once at import time and is
read-only; fields a preset leaves out fall through to lower-precedence
sources during resolution.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

from .errors import UnknownPresetError
from .schema import PresetCategory, PresetConfig


_PRESETS: tuple[PresetConfig, ...] = (
    PresetConfig(
        name="saas",
        description="Full-featured SaaS starter with PostgreSQL, full auth, and complete DevOps",
        category=PresetCategory.STARTER,
        database="postgresql",
        auth=("email", "oauth"),
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
        docker=True,
        cicd="github-actions",
        deploy_target="vercel",
        pbs_level="full",
        beads_integration=True,
        claude_code_hooks=True,
        mcp_servers=("filesystem", "github"),
        pwa=False,
        analytics="vercel",
        email="resend",
        error_tracking="sentry",
        feature_flags=False,
    ),
    PresetConfig(
        name="ecommerce",
        description="E-commerce platform with Stripe integration and full testing",
        category=PresetCategory.SPECIALIZED,
        database="postgresql",
        auth=("email", "oauth", "magic-links"),
        ui_style="nova",
        base_color="slate",
        accent_color="green",
        font="inter",
        icons="heroicons",
        border_radius="0.75",
        testing=("playwright", "puppeteer"),
        unit_testing=True,
        example_tests=True,
        docker=True,
        cicd="github-actions",
        deploy_target="vercel",
        pbs_level="full",
        beads_integration=True,
        claude_code_hooks=True,
        mcp_servers=("filesystem", "github", "postgres"),
        pwa=True,
        analytics="vercel",
        email="resend",
        error_tracking="sentry",
        feature_flags=True,
    ),
    PresetConfig(
        name="blog",
        description="Publishing platform with Turso and optimized for content",
        category=PresetCategory.SPECIALIZED,
        database="turso",
        auth=("email",),
        component_library="base-ui",
        ui_style="maia",
        base_color="zinc",
        accent_color="orange",
        font="figtree",
        icons="hugeicons",
        border_radius="default",
        menu_accent="subtle",
        testing=("playwright",),
        unit_testing=True,
        example_tests=True,
        docker=False,
        cicd="vercel",
        deploy_target="vercel",
        pbs_level="docs",
        beads_integration=False,
        claude_code_hooks=True,
        mcp_servers=("filesystem",),
        pwa=False,
        analytics="vercel",
        email="resend",
        error_tracking="none",
        feature_flags=False,
    ),
    PresetConfig(
        name="devtool",
        description="Developer tools with GitHub auth and testing focus",
        category=PresetCategory.SPECIALIZED,
        database="postgresql",
        auth=("github",),
        component_library="base-ui",
        ui_style="maia",
        base_color="zinc",
        accent_color="green",
        font="figtree",
        icons="hugeicons",
        border_radius="default",
        menu_accent="subtle",
        testing=("vitest",),
        unit_testing=True,
        example_tests=True,
        docker=False,
        cicd="github-actions",
        deploy_target="vercel",
        pbs_level="docs",
        beads_integration=True,
        claude_code_hooks=True,
        mcp_servers=("filesystem", "github"),
        pwa=False,
        analytics="none",
        email="none",
        error_tracking="none",
        feature_flags=False,
    ),
    PresetConfig(
        name="portfolio",
        description="Personal portfolio site with minimal setup",
        category=PresetCategory.MINIMAL,
        database="sqlite",
        auth=(),
        component_library="base-ui",
        ui_style="maia",
        base_color="zinc",
        accent_color="violet",
        font="figtree",
        icons="hugeicons",
        border_radius="default",
        menu_accent="subtle",
        testing=(),
        unit_testing=True,
        example_tests=True,
        docker=False,
        cicd="vercel",
        deploy_target="vercel",
        pbs_level="minimal",
        beads_integration=True,
        claude_code_hooks=True,
        mcp_servers=("filesystem",),
        pwa=False,
        analytics="vercel",
        email="none",
        error_tracking="none",
        feature_flags=False,
    ),
    PresetConfig(
        name="minimal",
        description="Minimal setup for simple applications",
        category=PresetCategory.MINIMAL,
        database="sqlite",
        auth=("email",),
        component_library="base-ui",
        ui_style="maia",
        base_color="zinc",
        accent_color="blue",
        font="figtree",
        icons="hugeicons",
        border_radius="default",
        menu_accent="subtle",
        testing=(),
        unit_testing=True,
        example_tests=False,
        docker=False,
        cicd="none",
        deploy_target="vercel",
        pbs_level="none",
        beads_integration=False,
        claude_code_hooks=False,
        mcp_servers=(),
        pwa=False,
        analytics="none",
        email="none",
        error_tracking="none",
        feature_flags=False,
    ),
)

PRESETS: Mapping[str, PresetConfig] = MappingProxyType({p.name: p for p in _PRESETS})


def get_preset(name: str) -> PresetConfig:
    """Return the preset called *name* (case-insensitive).

    Raises:
        UnknownPresetError: If no such preset exists.
    """
    preset = PRESETS.get(name.strip().lower())
    if preset is None:
        raise UnknownPresetError(name, PRESETS.keys())
    return preset


def find_preset(name: str) -> PresetConfig | None:
    return PRESETS.get(name.strip().lower())


def preset_names() -> list[str]:
    return list(PRESETS)


def list_presets() -> list[dict[str, str]]:
    """Name, description and category of every preset, in registry order."""
    return [
        {"name": p.name, "description": p.description, "category": p.category.value}
        for p in PRESETS.values()
    ]


def presets_in_category(category: PresetCategory | str) -> list[str]:
    """Names of the presets in *category*."""
    wanted = PresetCategory(category)
    return [p.name for p in PRESETS.values() if p.category is wanted]
