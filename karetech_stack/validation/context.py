"""Environment facts for project-name validation.

The directory check and the npm registry lookup are the only side effects
validation needs. Both are gathered here, before the validators run, and a
failed registry lookup degrades to "unknown" instead of raising.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

import httpx

from ..config import Settings
from .fields import ValidationContext


async def lookup_npm_package(
    name: str,
    registry: str = "https://registry.npmjs.org",
    timeout: float = 5.0,
) -> tuple[bool | None, str | None]:
    """Ask the npm registry whether *name* is already published.

    Returns:
        ``(True, None)`` if the package exists, ``(False, None)`` if the
        registry answered 404, and ``(None, reason)`` for anything else.
    """
    url = f"{registry.rstrip('/')}/{quote(name, safe='@')}"
    try:
        async with httpx.AsyncClient(timeout=httpx.Timeout(timeout, connect=min(timeout, 3.0))) as client:
            response = await client.get(url, headers={"Accept": "application/json"})
    except httpx.TimeoutException:
        return None, f"npm registry lookup timed out after {timeout}s; name availability unknown"
    except httpx.HTTPError as exc:
        return None, f"Could not reach the npm registry ({exc.__class__.__name__}); name availability unknown"

    if response.status_code == 200:
        return True, None
    if response.status_code == 404:
        return False, None
    return None, f"npm registry returned HTTP {response.status_code}; name availability unknown"


async def gather_validation_context(
    project_name: str | None,
    settings: Settings | None = None,
    cwd: str | Path | None = None,
) -> ValidationContext:
    """Collect directory and npm facts for *project_name*."""
    settings = settings or Settings()
    base = Path(cwd) if cwd is not None else Path.cwd()

    if not project_name:
        return ValidationContext()

    directory_exists = (base / project_name).exists()

    if settings.offline:
        exists, note = None, "Offline mode: npm name availability was not checked"
    else:
        exists, note = await lookup_npm_package(
            project_name, settings.npm_registry, settings.network_timeout
        )

    return ValidationContext(
        directory_exists=directory_exists,
        npm_package_exists=exists,
        npm_note=note,
    )
