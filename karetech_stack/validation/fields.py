"""Field and cross-field validators.

Every validator is a pure function returning a list of :class:`Finding`
objects in a fixed order; none of them raise. Stack validators accept either
a complete ``ProjectConfig`` or any partial configuration (``PartialConfig``
or ``PresetConfig``) and skip a rule when one of its inputs is unset, so the
same rules serve live resolution and the preset self-consistency check.

The only environment facts the project-name rules need (whether a
directory of that name exists, whether the npm name is taken) are gathered
beforehand into a :class:`ValidationContext`.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel

from ..mcp import MCP_SERVERS
from ..schema import (
    AnalyticsProvider,
    AuthProvider,
    CiCdPlatform,
    DatabaseType,
    DeployTarget,
    EmailProvider,
    ErrorTrackingProvider,
    Finding,
    McpServer,
    PbsLevel,
    TestingFramework,
    error,
    info,
    warning,
)


class ValidationContext(BaseModel):
    """Environment facts used by the project-name rules.

    ``npm_package_exists`` is ``None`` when the registry was not consulted
    or could not be reached; ``npm_note`` then explains why.
    """

    directory_exists: bool = False
    npm_package_exists: bool | None = None
    npm_note: str | None = None


# ---------------------------------------------------------------------------
# Project identity
# ---------------------------------------------------------------------------

RESERVED_NAMES: frozenset[str] = frozenset({
    # Filesystem / tooling directories
    "node_modules", "dist", "build", ".git", ".next", ".nuxt", ".vite",
    "public", "src", "lib", "app", "pages", "components", "utils", "types",
    "config", "server", "client", "api", "test", "tests", "__tests__",
    "docs", "doc", "documentation", "readme", "license", "changelog",
    # Package managers and runtimes
    "package", "yarn", "npm", "pnpm", "bun", "node", "deno",
    # Frameworks and build tools
    "react", "next", "vue", "svelte", "angular", "typescript", "javascript",
    "vite", "webpack", "rollup", "turbo", "turborepo", "nx", "lerna", "rush",
    # Stack components
    "better-t-stack", "hono", "drizzle", "tanstack", "orpc", "better-auth",
    "shadcn", "karetech-stack", "create-karetech-stack",
    # Windows device names
    "con", "prn", "aux", "nul",
    *(f"com{i}" for i in range(1, 10)),
    *(f"lpt{i}" for i in range(1, 10)),
})

GENERIC_NAME_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^test$|^temp$|^tmp$",
        r"^my-?app$",
        r"^hello-?world$",
        r"^untitled",
        r"^new-?project$",
        r"^app\d*$",
        r"^project\d*$",
    )
)

PLACEHOLDER_DESCRIPTIONS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^(a|an|my|the)?\s*(awesome|amazing|great|cool|new|simple)?\s*"
        r"(app|application|project|website|tool)\.?$",
        r"^todo:?\s",
        r"^placeholder",
        r"^description",
    )
)

PLACEHOLDER_AUTHOR = re.compile(r"^(your name|author|user|test|placeholder)$", re.IGNORECASE)

_NAME_CHARS = re.compile(r"^[a-z0-9-]+$")


def suggest_project_name(name: str) -> str:
    """Closest valid spelling of *name* (lowercase, hyphen-separated)."""
    slug = re.sub(r"[^a-z0-9]+", "-", name.strip().lower())
    return re.sub(r"-+", "-", slug).strip("-")


def validate_project_name(name: str | None, context: ValidationContext | None = None) -> list[Finding]:
    """Validate a project name.

    Environment-dependent rules only run when a *context* is given.
    """
    field = "projectName"
    if not name or not name.strip():
        return [error(field, "Project name is required")]

    findings: list[Finding] = []
    if len(name) < 2:
        findings.append(error(field, "Project name must be at least 2 characters"))
    if len(name) > 50:
        findings.append(error(field, "Project name must be less than 50 characters"))
    if not _NAME_CHARS.match(name):
        suggestion = suggest_project_name(name)
        findings.append(error(
            field,
            "Use lowercase letters, numbers, and hyphens only",
            f"Try '{suggestion}'" if suggestion else None,
        ))
    if name.startswith("-") or name.endswith("-"):
        findings.append(error(field, "Project name cannot start or end with a hyphen"))
    if "--" in name:
        findings.append(error(field, "Project name cannot contain consecutive hyphens"))
    if name.lower() in RESERVED_NAMES:
        findings.append(error(field, f'"{name}" is a reserved name, please choose another'))

    if context is not None and context.directory_exists:
        findings.append(error(
            field,
            f'Directory "{name}" already exists in current location',
            "Choose another name or remove the existing directory",
        ))

    for pattern in GENERIC_NAME_PATTERNS:
        if pattern.search(name):
            findings.append(warning(
                field, f'"{name}" is a generic name, consider something more specific'
            ))
            break

    if context is not None:
        if context.npm_package_exists:
            findings.append(warning(
                field, f'Package "{name}" already exists on npm, consider a different name'
            ))
        elif context.npm_package_exists is None and context.npm_note:
            findings.append(info(field, context.npm_note))

    return findings


def validate_description(description: str | None) -> list[Finding]:
    field = "description"
    text = (description or "").strip()
    if not text:
        return [error(field, "Project description is required")]

    findings: list[Finding] = []
    if len(text) < 3:
        findings.append(error(field, "Description must be at least 3 characters"))
    if len(text) > 200:
        findings.append(error(field, "Description must be less than 200 characters"))
    if any(p.search(text) for p in PLACEHOLDER_DESCRIPTIONS):
        findings.append(warning(field, "Please provide a more specific description"))
    return findings


def validate_author(author: str | None) -> list[Finding]:
    field = "author"
    text = (author or "").strip()
    if not text:
        return [error(field, "Author name is required")]

    findings: list[Finding] = []
    if len(text) < 2:
        findings.append(error(field, "Author name must be at least 2 characters"))
    if len(text) > 50:
        findings.append(error(field, "Author name must be less than 50 characters"))
    if PLACEHOLDER_AUTHOR.match(text):
        findings.append(warning(field, "Please provide your actual name"))
    return findings


# ---------------------------------------------------------------------------
# Stack rules
# ---------------------------------------------------------------------------


def _get(config: Any, name: str) -> Any:
    return getattr(config, name, None)


def _has(config: Any, name: str, member: Any) -> bool:
    values = _get(config, name)
    return values is not None and member in values


def validate_database(config: Any) -> list[Finding]:
    findings: list[Finding] = []
    database = _get(config, "database")
    auth = _get(config, "auth")

    if database is DatabaseType.POSTGRESQL and auth is not None and not auth:
        findings.append(warning(
            "database",
            "PostgreSQL typically requires authentication setup",
            "Consider adding email or OAuth authentication",
        ))
    if database is DatabaseType.SQLITE and _has(config, "testing", TestingFramework.PLAYWRIGHT):
        findings.append(warning(
            "database",
            "SQLite may have limitations with E2E testing scenarios",
            "Consider Turso or PostgreSQL for E2E testing",
        ))
    return findings


def validate_auth(config: Any) -> list[Finding]:
    findings: list[Finding] = []
    auth = _get(config, "auth")
    if auth is None:
        return findings

    if AuthProvider.MAGIC_LINKS in auth and _get(config, "email") is EmailProvider.NONE:
        findings.append(error(
            "auth",
            "Magic links require an email service configuration",
            "Select an email provider with --email (resend, sendgrid or nodemailer)",
        ))
    if AuthProvider.OAUTH in auth and AuthProvider.EMAIL not in auth:
        findings.append(warning(
            "auth",
            "Consider including email auth as OAuth fallback",
            "Add 'email' to --auth",
        ))
    cicd = _get(config, "cicd")
    if AuthProvider.GITHUB in auth and cicd is not None and cicd is not CiCdPlatform.GITHUB_ACTIONS:
        findings.append(warning(
            "auth",
            "GitHub auth works best with GitHub Actions CI/CD",
            "Use --cicd github-actions",
        ))
    return findings


def validate_testing(config: Any) -> list[Finding]:
    findings: list[Finding] = []
    testing = _get(config, "testing")
    if testing is None:
        return findings

    if TestingFramework.PLAYWRIGHT in testing and TestingFramework.PUPPETEER in testing:
        findings.append(warning(
            "testing",
            "Both Playwright and Puppeteer provide similar functionality",
            "Consider using only Playwright",
        ))

    has_e2e = TestingFramework.PLAYWRIGHT in testing or TestingFramework.PUPPETEER in testing
    if (
        has_e2e
        and _get(config, "database") is DatabaseType.POSTGRESQL
        and _get(config, "docker") is False
    ):
        findings.append(warning(
            "testing",
            "E2E testing with PostgreSQL is easier with Docker",
            "Enable --docker for a disposable test database",
        ))

    if not testing and _get(config, "unit_testing") is False:
        findings.append(warning(
            "testing",
            "Consider adding at least unit testing for code quality",
        ))
    return findings


def validate_devops(config: Any) -> list[Finding]:
    findings: list[Finding] = []
    if _get(config, "docker") is not True:
        return findings

    if _get(config, "deploy_target") is DeployTarget.VERCEL:
        findings.append(warning(
            "docker",
            "Docker containers are not needed for Vercel deployment",
            "Docker is still useful for local development databases",
        ))
    if _get(config, "cicd") is CiCdPlatform.NONE:
        findings.append(warning(
            "cicd",
            "Docker containers benefit from automated CI/CD pipelines",
            "Use --cicd github-actions",
        ))
    return findings


def validate_ai_workflow(config: Any) -> list[Finding]:
    """PBS level, Beads and Claude Code hook dependencies."""
    findings: list[Finding] = []
    pbs = _get(config, "pbs_level")
    beads = _get(config, "beads_integration")
    hooks = _get(config, "claude_code_hooks")
    mcp = _get(config, "mcp_servers")
    filesystem_missing = mcp is not None and McpServer.FILESYSTEM not in mcp

    if pbs is PbsLevel.FULL:
        if beads is False:
            findings.append(error(
                "beadsIntegration",
                "Full PBS level requires Beads integration",
                "Enable --beads or choose a lower --pbs level",
            ))
        if hooks is False:
            findings.append(error(
                "claudeCodeHooks",
                "Full PBS level requires Claude Code hooks",
                "Enable --claude-hooks or choose a lower --pbs level",
            ))
        if filesystem_missing:
            findings.append(error(
                "mcpServers",
                "Full PBS level requires the filesystem MCP server",
                "Add 'filesystem' to --mcp",
            ))

    if beads is True and pbs is PbsLevel.NONE:
        findings.append(error(
            "pbsLevel",
            "Beads integration requires a PBS level other than none",
            "Use --pbs minimal or disable --beads",
        ))

    if hooks is True:
        if filesystem_missing and pbs is not PbsLevel.FULL:
            findings.append(error(
                "mcpServers",
                "Claude Code hooks require the filesystem MCP server",
                "Add 'filesystem' to --mcp",
            ))
        if pbs is PbsLevel.NONE:
            findings.append(warning(
                "pbsLevel",
                "Claude Code hooks are most useful with PBS documentation",
                "Use --pbs minimal or higher",
            ))

    if beads is True:
        if mcp is not None and McpServer.GITHUB not in mcp:
            findings.append(warning(
                "mcpServers",
                "Beads integration works best with the GitHub MCP server",
                "Add 'github' to --mcp",
            ))
        if _get(config, "cicd") is CiCdPlatform.NONE:
            findings.append(warning(
                "cicd",
                "Beads integration benefits from CI/CD automation",
            ))

    if pbs in (PbsLevel.FULL, PbsLevel.DOCS):
        if _get(config, "testing") == () and _get(config, "unit_testing") is False:
            findings.append(info(
                "testing",
                "PBS documentation pairs well with automated testing",
            ))
        if _get(config, "cicd") is CiCdPlatform.NONE:
            findings.append(info(
                "cicd",
                "PBS workflows benefit from CI/CD for automated status updates",
            ))
    return findings


def validate_mcp_servers(config: Any) -> list[Finding]:
    findings: list[Finding] = []
    mcp = _get(config, "mcp_servers")
    if not mcp:
        return findings

    database = _get(config, "database")
    for server in mcp:
        meta = MCP_SERVERS[server]
        if not meta.is_database_server or database is None:
            continue
        if database not in meta.supported_databases:
            supported = " or ".join(db.value for db in meta.supported_databases)
            findings.append(error(
                "mcpServers",
                f"The {meta.name} MCP server requires a {supported} database, "
                f"but database is {database.value}",
                f"Remove '{server.value}' from --mcp or change --database",
            ))

    testing = _get(config, "testing")
    if McpServer.PLAYWRIGHT in mcp and testing is not None and TestingFramework.PLAYWRIGHT not in testing:
        findings.append(warning(
            "mcpServers",
            "The Playwright MCP server is most useful with Playwright testing",
            "Add 'playwright' to --testing",
        ))
    return findings


def validate_preset_expectations(config: Any, preset: str | None) -> list[Finding]:
    """Production-oriented presets should keep monitoring enabled."""
    findings: list[Finding] = []
    if preset not in ("saas", "ecommerce"):
        return findings
    if _get(config, "error_tracking") is ErrorTrackingProvider.NONE:
        findings.append(warning(
            "errorTracking",
            f"Production {preset} applications benefit from error tracking",
            "Use --error-tracking sentry",
        ))
    if _get(config, "analytics") is AnalyticsProvider.NONE:
        findings.append(info(
            "analytics",
            f"Analytics help measure {preset} product usage",
        ))
    return findings


STACK_VALIDATORS = (
    validate_database,
    validate_auth,
    validate_testing,
    validate_devops,
    validate_ai_workflow,
    validate_mcp_servers,
)


def validate_stack(config: Any) -> list[Finding]:
    """Run every stack rule over a complete or partial configuration."""
    findings: list[Finding] = []
    for validator in STACK_VALIDATORS:
        findings.extend(validator(config))
    return findings


def validate_config(config: Any, context: ValidationContext | None = None) -> list[Finding]:
    """Validate identity and stack of a configuration.

    Identity rules run for whichever identity fields the object carries, so
    a ``ProjectConfig`` gets all of them and a preset gets none.
    """
    findings: list[Finding] = []
    if hasattr(config, "project_name"):
        findings.extend(validate_project_name(config.project_name, context))
        findings.extend(validate_description(config.description))
        findings.extend(validate_author(config.author))
    findings.extend(validate_stack(config))
    findings.extend(validate_preset_expectations(config, _get(config, "preset")))
    return findings
