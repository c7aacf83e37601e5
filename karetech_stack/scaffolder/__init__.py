"""create-karetech-stack scaffolder -- renders a project from a resolved config.

This module takes a validated ``ProjectConfig`` and renders a starter project
(React + TanStack Router + Hono + oRPC, plus the selected database, auth,
testing, DevOps and PBS layers).

Quick usage::

    from karetech_stack.scaffolder import ProjectGenerator

    generator = ProjectGenerator(resolution.config)
    result = await generator.generate("/tmp/output")
    steps = await generator.run_post_steps(result.project_root)
"""

from karetech_stack.scaffolder.dependencies import build_package_json, resolve_dependencies
from karetech_stack.scaffolder.generator import (
    GenerationResult,
    ProjectGenerator,
    StepResult,
    build_context,
)
from karetech_stack.scaffolder.templates import TemplateRenderer

__all__ = [
    "GenerationResult",
    "ProjectGenerator",
    "StepResult",
    "TemplateRenderer",
    "build_context",
    "build_package_json",
    "resolve_dependencies",
]
