"""Runtime settings for create-karetech-stack.

Settings control how the tool itself behaves (network lookups, timeouts,
template location), not what it generates. They come from defaults and
``KARETECH_*`` environment variables and are passed explicitly to the parts
that need them.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable

from pydantic import BaseModel, Field, ValidationError

from . import __version__
from .errors import SettingsError


class Settings(BaseModel):
    """Typed tool settings.

    Instances are created once by the CLI entry point (usually via
    :meth:`from_env`) and handed to the resolver, validators and generator.
    """

    cli_version: str = Field(default=__version__)
    npm_registry: str = Field(default="https://registry.npmjs.org")
    network_timeout: float = Field(
        default=5.0, gt=0, description="Per-request timeout for registry lookups in seconds"
    )
    command_timeout: int = Field(
        default=300, ge=5, description="Timeout for post-generation commands in seconds"
    )
    probe_timeout: int = Field(
        default=5, ge=1, description="Timeout for tool version probes in seconds"
    )
    offline: bool = Field(default=False, description="Skip every network-dependent check")
    templates_dir: Path | None = Field(
        default=None, description="Override for the packaged template directory"
    )

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            KARETECH_NPM_REGISTRY, KARETECH_NETWORK_TIMEOUT,
            KARETECH_COMMAND_TIMEOUT, KARETECH_OFFLINE, KARETECH_TEMPLATES_DIR.

        Raises:
            SettingsError: If a variable cannot be converted or is out of range.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("KARETECH_NPM_REGISTRY"):
            kwargs["npm_registry"] = os.environ["KARETECH_NPM_REGISTRY"].rstrip("/")
        if os.environ.get("KARETECH_NETWORK_TIMEOUT"):
            kwargs["network_timeout"] = _env_number("KARETECH_NETWORK_TIMEOUT", float)
        if os.environ.get("KARETECH_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = _env_number("KARETECH_COMMAND_TIMEOUT", int)
        if os.environ.get("KARETECH_OFFLINE"):
            kwargs["offline"] = os.environ["KARETECH_OFFLINE"].lower() in ("1", "true", "yes")
        if os.environ.get("KARETECH_TEMPLATES_DIR"):
            kwargs["templates_dir"] = Path(os.environ["KARETECH_TEMPLATES_DIR"])

        try:
            return cls(**kwargs)
        except ValidationError as exc:
            problems = "; ".join(
                f"{_ENV_VARS.get(str(err['loc'][0]), err['loc'][0])}: {err['msg']}"
                for err in exc.errors()
            )
            raise SettingsError(f"Invalid environment settings ({problems})") from exc


_ENV_VARS = {
    "npm_registry": "KARETECH_NPM_REGISTRY",
    "network_timeout": "KARETECH_NETWORK_TIMEOUT",
    "command_timeout": "KARETECH_COMMAND_TIMEOUT",
    "offline": "KARETECH_OFFLINE",
    "templates_dir": "KARETECH_TEMPLATES_DIR",
}


def _env_number(name: str, convert: Callable[[str], Any]) -> Any:
    raw = os.environ[name]
    try:
        return convert(raw)
    except ValueError:
        kind = "an integer" if convert is int else "a number"
        raise SettingsError(f"{name} must be {kind}, got '{raw}'") from None
