"""Shared pytest fixtures for the create-karetech-stack test suite.

Provides reusable fixtures for:
- Temporary output directories
- Resolved configurations built from the defaults, with overrides
- Offline tool settings
- Mocked tool probes (no real subprocesses)
- Scripted prompters for the wizard
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Sequence
from unittest.mock import AsyncMock, patch

import pytest

from karetech_stack.config import Settings
from karetech_stack.resolver import build_sources, resolve, resolve_identity
from karetech_stack.schema import PartialConfig, ProjectConfig, ProjectIdentity
from karetech_stack.utils import ProbeResult, ProbeStatus


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_output_dir(tmp_path: Path) -> Path:
    """Empty parent directory for generated projects (auto-cleanup)."""
    output_dir = tmp_path / "output"
    output_dir.mkdir()
    yield output_dir


# ---------------------------------------------------------------------------
# Settings & configurations
# ---------------------------------------------------------------------------

@pytest.fixture
def offline_settings() -> Settings:
    """Settings that never touch the network."""
    return Settings(offline=True, probe_timeout=1)


@pytest.fixture
def identity() -> ProjectIdentity:
    return ProjectIdentity(
        project_name="acme-portal",
        description="Customer portal for Acme support teams",
        author="Jane Developer",
    )


@pytest.fixture
def make_config(identity: ProjectIdentity) -> Callable[..., ProjectConfig]:
    """Factory: a resolved ``ProjectConfig`` from the defaults plus overrides.

    Usage::

        def test_something(make_config):
            config = make_config(database="sqlite", docker=True)
    """

    def factory(**overrides: Any) -> ProjectConfig:
        preset = overrides.pop("preset", None)
        cli = PartialConfig(**overrides) if overrides else None
        resolution = resolve(resolve_identity(identity), build_sources(cli=cli), preset)
        return resolution.config

    return factory


@pytest.fixture
def default_config(make_config) -> ProjectConfig:
    """The configuration every field of which comes from the defaults."""
    return make_config()


# ---------------------------------------------------------------------------
# Probes
# ---------------------------------------------------------------------------

def make_probe(
    tool: str,
    status: ProbeStatus = ProbeStatus.AVAILABLE,
    version: str | None = "1.0.0",
    output: str = "",
) -> ProbeResult:
    return ProbeResult(
        tool=tool,
        status=status,
        version=version if status is ProbeStatus.AVAILABLE else None,
        output=output or (version or ""),
    )


@pytest.fixture
def probe_factory() -> Callable[..., ProbeResult]:
    return make_probe


@pytest.fixture
def mock_probes():
    """Patch every ``probe_tool`` import with a mapping-driven fake.

    Usage::

        def test_env(mock_probes):
            mock_probes["bun"] = make_probe("bun", version="1.1.0")

    Tools not in the mapping are reported unavailable.
    """
    results: dict[str, ProbeResult] = {}

    async def fake_probe(tool: str, args: Sequence[str] = ("--version",), **kwargs: Any) -> ProbeResult:
        key = f"{tool} {' '.join(args)}" if tuple(args) != ("--version",) else tool
        if key in results:
            return results[key]
        return results.get(tool) or make_probe(tool, ProbeStatus.UNAVAILABLE)

    fake = AsyncMock(side_effect=fake_probe)
    with (
        patch("karetech_stack.environment.probe_tool", fake),
        patch("karetech_stack.scaffolder.generator.probe_tool", fake),
        patch("karetech_stack.utils.probe_tool", fake),
        patch("karetech_stack.cli.probe_tool", fake),
    ):
        yield results


# ---------------------------------------------------------------------------
# Wizard
# ---------------------------------------------------------------------------

class ScriptedPrompter:
    """A ``Prompter`` that answers from a dict keyed by prompt message.

    Prompts without a scripted answer take their default. A list answer to
    a text prompt is consumed one item per call, to script re-prompts.
    Every prompt message is recorded in ``asked``.
    """

    def __init__(self, answers: dict[str, Any] | None = None) -> None:
        self.answers = dict(answers or {})
        self.asked: list[str] = []

    def _answer(self, message: str, default: Any) -> Any:
        self.asked.append(message)
        return self.answers.get(message, default)

    def text(self, message: str, default: str | None = None) -> str:
        value = self._answer(message, default)
        if isinstance(value, list):
            value = value.pop(0)
        return value or ""

    def confirm(self, message: str, default: bool = True) -> bool:
        return bool(self._answer(message, default))

    def select(self, message: str, choices: Sequence[str], default: str | None = None) -> str:
        value = self._answer(message, default)
        assert value in choices, f"{value!r} not in {choices!r}"
        return value

    def multiselect(self, message: str, choices: Sequence[str], default: Sequence[str] = ()) -> list[str]:
        value = self._answer(message, list(default))
        assert all(v in choices for v in value)
        return list(value)


@pytest.fixture
def scripted_prompter() -> Callable[..., ScriptedPrompter]:
    return ScriptedPrompter
