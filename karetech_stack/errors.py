"""Exceptions raised by create-karetech-stack.

Validators never raise; they return findings. These exceptions mark the
points where a run must stop: an unknown preset, an unreadable config file,
a resolved configuration that still carries errors, or a generation step
that cannot proceed.
"""

from __future__ import annotations

from typing import Iterable

from .schema import Finding, errors_only


class KaretechError(Exception):
    """Base class for every fatal error the CLI reports."""

    def __init__(self, message: str, findings: Iterable[Finding] = ()) -> None:
        self.findings: list[Finding] = list(findings)
        super().__init__(message)


class UnknownPresetError(KaretechError):
    def __init__(self, name: str, available: Iterable[str]) -> None:
        self.name = name
        self.available = sorted(available)
        super().__init__(
            f"Unknown preset '{name}'. Available presets: {', '.join(self.available)}"
        )


class ConfigFileError(KaretechError):
    """Raised when a configuration file is missing, unparsable or invalid."""

    def __init__(self, path: str, message: str, findings: Iterable[Finding] = ()) -> None:
        self.path = path
        super().__init__(f"{path}: {message}", findings)


class ConfigResolutionError(KaretechError):
    """Raised when the resolved configuration has error-severity findings."""

    def __init__(self, findings: Iterable[Finding]) -> None:
        findings = list(findings)
        count = len(errors_only(findings))
        super().__init__(f"Configuration has {count} error(s)", findings)


class GenerationError(KaretechError):
    """Raised when project generation cannot continue."""


class SettingsError(KaretechError):
    """Raised when a ``KARETECH_*`` environment variable holds an unusable value."""
