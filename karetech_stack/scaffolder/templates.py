"""Jinja2 rendering of the packaged template layers.

Every directory under ``karetech_stack/scaffolder/templates/`` is a layer
(``base``, ``themes``, ``database/postgresql``, ``auth/github``, ...). The
generator picks the layers a configuration needs and renders each of them
onto the same project root, so two layers never ship the same output path.

Template files end in ``.j2``. Path segments starting with ``dot-`` become
dotfiles in the output (``dot-github/workflows/ci.yml.j2`` is written as
``.github/workflows/ci.yml``); the package itself holds no hidden files.
"""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Any, Callable, Iterable, NamedTuple

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound, select_autoescape

from ..errors import GenerationError

PACKAGED_TEMPLATES = Path(__file__).parent / "templates"

TEMPLATE_SUFFIX = ".j2"
DOTFILE_MARKER = "dot-"


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

def slugify(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower().strip()).strip("-")


def pascal_case(value: str) -> str:
    """``acme-portal`` / ``acme_portal`` / ``acme portal`` -> ``AcmePortal``."""
    return "".join(word.capitalize() for word in re.split(r"[-_\s]+", value) if word)


def camel_case(value: str) -> str:
    pascal = pascal_case(value)
    return pascal[:1].lower() + pascal[1:]


def env_name(value: str) -> str:
    """``acme-portal`` -> ``ACME_PORTAL``, for env vars and database names."""
    return re.sub(r"[^A-Za-z0-9]+", "_", value).strip("_").upper()


FILTERS: dict[str, Callable[[str], str]] = {
    "slugify": slugify,
    "pascal_case": pascal_case,
    "camel_case": camel_case,
    "env_name": env_name,
}


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

class LayerFile(NamedTuple):
    """One template of a layer and the project-relative path it renders to."""

    template: str
    output: str


def output_relpath(template_relpath: str) -> str:
    """Project-relative output path for a layer-relative template path."""
    if template_relpath.endswith(TEMPLATE_SUFFIX):
        template_relpath = template_relpath[: -len(TEMPLATE_SUFFIX)]
    return "/".join(
        "." + segment[len(DOTFILE_MARKER):] if segment.startswith(DOTFILE_MARKER) else segment
        for segment in template_relpath.split("/")
    )


def _write_text(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


# ---------------------------------------------------------------------------
# Renderer
# ---------------------------------------------------------------------------

class TemplateRenderer:
    """Renders template layers into a project directory.

    The Jinja2 environment uses ``StrictUndefined``: a template that names a
    context key the generator did not provide raises ``UndefinedError``
    rather than writing an empty string into the project.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        self.template_dir = Path(template_dir) if template_dir is not None else PACKAGED_TEMPLATES
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([], default_for_string=False),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters.update(FILTERS)

    # -- Layers ------------------------------------------------------------

    def has_layer(self, layer: str) -> bool:
        return (self.template_dir / layer).is_dir()

    def has_template(self, template_path: str) -> bool:
        return (self.template_dir / template_path).is_file()

    def layer_files(self, layer: str, skip_patterns: Iterable[str] = ()) -> list[LayerFile]:
        """Templates of *layer* in path order, minus any matching *skip_patterns*."""
        root = self.template_dir / layer
        skip = tuple(skip_patterns)
        files: list[LayerFile] = []
        for path in sorted(root.rglob(f"*{TEMPLATE_SUFFIX}")):
            rel = path.relative_to(root).as_posix()
            if any(pattern in rel for pattern in skip):
                continue
            files.append(LayerFile(template=f"{layer}/{rel}", output=output_relpath(rel)))
        return files

    def list_templates(self, prefix: str = "") -> list[str]:
        """Template paths (relative to the template root) under *prefix*."""
        root = self.template_dir / prefix if prefix else self.template_dir
        if not root.is_dir():
            return []
        return sorted(
            path.relative_to(self.template_dir).as_posix()
            for path in root.rglob(f"*{TEMPLATE_SUFFIX}")
        )

    # -- Rendering ---------------------------------------------------------

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render one template.

        Raises:
            GenerationError: If the template does not exist under the template root.
        """
        try:
            template = self.env.get_template(template_path)
        except TemplateNotFound as exc:
            raise GenerationError(
                f"Template file not found: {exc.name} (template root {self.template_dir})"
            ) from exc
        return template.render(**context)

    async def render_to_file(
        self,
        template_path: str,
        output_path: str | Path,
        context: dict[str, Any],
    ) -> Path:
        """Render one template to *output_path*, creating parent directories."""
        out = Path(output_path)
        await asyncio.to_thread(_write_text, out, self.render(template_path, context))
        return out

    async def render_tree(
        self,
        layer: str,
        output_dir: str | Path,
        context: dict[str, Any],
        *,
        skip_patterns: list[str] | None = None,
        required: bool = False,
    ) -> list[Path]:
        """Render every template of *layer* onto *output_dir*.

        ``base/src/main.tsx.j2`` is written to ``<output_dir>/src/main.tsx``
        and ``base/dot-gitignore.j2`` to ``<output_dir>/.gitignore``.

        Args:
            layer: Layer directory inside the template root.
            output_dir: Project root the layer is rendered onto.
            context: Template context from ``build_context``.
            skip_patterns: Layer-relative paths containing any of these
                substrings are not rendered.
            required: A missing layer is an error instead of a no-op.

        Raises:
            GenerationError: If *required* and the layer does not exist.
        """
        if not self.has_layer(layer):
            if required:
                raise GenerationError(f"Template directory not found: {self.template_dir / layer}")
            return []

        root = Path(output_dir)
        return [
            await self.render_to_file(item.template, root / item.output, context)
            for item in self.layer_files(layer, skip_patterns or ())
        ]
