"""Docker file generation.

Renders the ``devops/docker`` templates (``Dockerfile``,
``docker-compose.yml``, ``.dockerignore``) into the project root. The
compose file adds a database service only for PostgreSQL projects.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .templates import TemplateRenderer


class DockerGenerator:
    """Generates container files for the project."""

    # Template name -> (label, output file name)
    _FILES: dict[str, tuple[str, str]] = {
        "devops/docker/Dockerfile.j2": ("image", "Dockerfile"),
        "devops/docker/docker-compose.yml.j2": ("compose", "docker-compose.yml"),
        "devops/docker/dot-dockerignore.j2": ("ignore", ".dockerignore"),
    }

    def __init__(self, renderer: TemplateRenderer) -> None:
        self.renderer = renderer

    def templates(self, context: dict[str, Any]) -> list[str]:
        """Templates ``generate_all`` renders for *context*."""
        return list(self._FILES) if context.get("docker") else []

    async def generate_all(
        self,
        output_dir: Path,
        context: dict[str, Any],
    ) -> dict[str, Path]:
        """Generate every Docker file in *output_dir*.

        Args:
            output_dir: Project root directory.
            context: Template rendering context.

        Returns:
            Mapping of label to written path, e.g. ``{"compose": Path(...)}``.
            Empty when the context has ``docker`` disabled.
        """
        if not context.get("docker"):
            return {}

        result: dict[str, Path] = {}
        for template_name, (label, output_name) in self._FILES.items():
            result[label] = await self.renderer.render_to_file(
                template_name, output_dir / output_name, context
            )
        return result
