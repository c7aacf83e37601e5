"""Configuration schema for generated KareTech projects.

Defines the closed enumerations every configuration field draws from, the
fully-resolved ``ProjectConfig``, the all-optional ``PartialConfig`` used by
each configuration source, and the ``Finding`` type returned by validators.

Attribute names are snake_case; every model serialises with camelCase
aliases (``projectName``, ``mcpServers``, ...) so exported files and
diagnostics use the same field names as the generated project's tooling.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class DatabaseType(str, Enum):
    POSTGRESQL = "postgresql"
    TURSO = "turso"
    SQLITE = "sqlite"
    NONE = "none"


class AuthProvider(str, Enum):
    EMAIL = "email"
    OAUTH = "oauth"
    MAGIC_LINKS = "magic-links"
    GITHUB = "github"


class ApiStyle(str, Enum):
    ORPC = "orpc"


class ComponentLibrary(str, Enum):
    RADIX = "radix"
    BASE_UI = "base-ui"


class UiStyle(str, Enum):
    VEGA = "vega"
    NOVA = "nova"
    MAIA = "maia"
    LYRA = "lyra"
    MIRA = "mira"
    DEFAULT = "default"


class BaseColor(str, Enum):
    SLATE = "slate"
    GRAY = "gray"
    ZINC = "zinc"
    NEUTRAL = "neutral"
    STONE = "stone"


class AccentColor(str, Enum):
    RED = "red"
    ORANGE = "orange"
    YELLOW = "yellow"
    GREEN = "green"
    BLUE = "blue"
    PURPLE = "purple"
    PINK = "pink"
    VIOLET = "violet"


class FontFamily(str, Enum):
    INTER = "inter"
    GEIST = "geist"
    CRIMSON = "crimson"
    MONO = "mono"
    FIGTREE = "figtree"


class IconLibrary(str, Enum):
    LUCIDE = "lucide"
    HEROICONS = "heroicons"
    PHOSPHOR = "phosphor"
    HUGEICONS = "hugeicons"


class BorderRadius(str, Enum):
    NONE = "0"
    SMALL = "0.25"
    MEDIUM = "0.5"
    LARGE = "0.75"
    FULL = "1"
    DEFAULT = "default"


class MenuAccent(str, Enum):
    BOLD = "bold"
    SUBTLE = "subtle"


class TestingFramework(str, Enum):
    __test__ = False

    PLAYWRIGHT = "playwright"
    PUPPETEER = "puppeteer"
    VITEST = "vitest"


class CiCdPlatform(str, Enum):
    GITHUB_ACTIONS = "github-actions"
    VERCEL = "vercel"
    NONE = "none"


class DeployTarget(str, Enum):
    VERCEL = "vercel"
    NETLIFY = "netlify"
    DOCKER = "docker"
    MANUAL = "manual"


class PbsLevel(str, Enum):
    FULL = "full"
    DOCS = "docs"
    MINIMAL = "minimal"
    NONE = "none"


class McpServer(str, Enum):
    FILESYSTEM = "filesystem"
    GITHUB = "github"
    POSTGRES = "postgres"
    TURSO = "turso"
    SQLITE = "sqlite"
    PLAYWRIGHT = "playwright"
    MEMORY = "memory"
    FETCH = "fetch"
    SENTRY = "sentry"


class AnalyticsProvider(str, Enum):
    VERCEL = "vercel"
    GOOGLE = "google"
    UMAMI = "umami"
    NONE = "none"


class EmailProvider(str, Enum):
    RESEND = "resend"
    SENDGRID = "sendgrid"
    NODEMAILER = "nodemailer"
    NONE = "none"


class ErrorTrackingProvider(str, Enum):
    SENTRY = "sentry"
    BUGSNAG = "bugsnag"
    ROLLBAR = "rollbar"
    NONE = "none"


class PresetCategory(str, Enum):
    STARTER = "starter"
    SPECIALIZED = "specialized"
    MINIMAL = "minimal"


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


# ---------------------------------------------------------------------------
# Field table
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldSpec:
    """Describes one stack field: its enum (if any) and whether it is a list.

    Boolean fields have ``choices = None``.
    """

    name: str
    label: str
    choices: type[Enum] | None = None
    multiple: bool = False

    @property
    def alias(self) -> str:
        return to_camel(self.name)

    @property
    def is_flag(self) -> bool:
        return self.choices is None

    def allowed_values(self) -> list[str]:
        if self.choices is None:
            return ["true", "false"]
        return [member.value for member in self.choices]


STACK_FIELDS: tuple[FieldSpec, ...] = (
    FieldSpec("database", "Database", DatabaseType),
    FieldSpec("auth", "Authentication", AuthProvider, multiple=True),
    FieldSpec("api_style", "API style", ApiStyle),
    FieldSpec("component_library", "Component library", ComponentLibrary),
    FieldSpec("ui_style", "UI style", UiStyle),
    FieldSpec("base_color", "Base color", BaseColor),
    FieldSpec("accent_color", "Accent color", AccentColor),
    FieldSpec("font", "Font", FontFamily),
    FieldSpec("icons", "Icons", IconLibrary),
    FieldSpec("border_radius", "Border radius", BorderRadius),
    FieldSpec("menu_accent", "Menu accent", MenuAccent),
    FieldSpec("testing", "E2E testing", TestingFramework, multiple=True),
    FieldSpec("unit_testing", "Unit testing"),
    FieldSpec("example_tests", "Example tests"),
    FieldSpec("docker", "Docker"),
    FieldSpec("cicd", "CI/CD", CiCdPlatform),
    FieldSpec("deploy_target", "Deploy target", DeployTarget),
    FieldSpec("pbs_level", "PBS level", PbsLevel),
    FieldSpec("beads_integration", "Beads integration"),
    FieldSpec("claude_code_hooks", "Claude Code hooks"),
    FieldSpec("mcp_servers", "MCP servers", McpServer, multiple=True),
    FieldSpec("pwa", "PWA"),
    FieldSpec("analytics", "Analytics", AnalyticsProvider),
    FieldSpec("email", "Email", EmailProvider),
    FieldSpec("error_tracking", "Error tracking", ErrorTrackingProvider),
    FieldSpec("feature_flags", "Feature flags"),
)

STACK_FIELD_NAMES: tuple[str, ...] = tuple(spec.name for spec in STACK_FIELDS)
IDENTITY_FIELD_NAMES: tuple[str, ...] = ("project_name", "description", "author")

_SPECS_BY_KEY: dict[str, FieldSpec] = {
    **{spec.name: spec for spec in STACK_FIELDS},
    **{spec.alias: spec for spec in STACK_FIELDS},
}


def field_spec(key: str) -> FieldSpec | None:
    """Look up a stack field by snake_case name or camelCase alias."""
    return _SPECS_BY_KEY.get(key)


def alias_of(name: str) -> str:
    """camelCase name used in findings and exported files."""
    return to_camel(name)


# ---------------------------------------------------------------------------
# Findings
# ---------------------------------------------------------------------------


class Finding(BaseModel):
    """A single validation result attached to one configuration field."""

    model_config = ConfigDict(frozen=True)

    field: str
    message: str
    severity: Severity = Severity.ERROR
    suggestion: str | None = None

    def __str__(self) -> str:
        return f"[{self.severity.value}] {self.field}: {self.message}"


def error(field: str, message: str, suggestion: str | None = None) -> Finding:
    return Finding(field=field, message=message, severity=Severity.ERROR, suggestion=suggestion)


def warning(field: str, message: str, suggestion: str | None = None) -> Finding:
    return Finding(field=field, message=message, severity=Severity.WARNING, suggestion=suggestion)


def info(field: str, message: str, suggestion: str | None = None) -> Finding:
    return Finding(field=field, message=message, severity=Severity.INFO, suggestion=suggestion)


def errors_only(findings: Iterable[Finding]) -> list[Finding]:
    return [f for f in findings if f.severity is Severity.ERROR]


def has_errors(findings: Iterable[Finding]) -> bool:
    return any(f.severity is Severity.ERROR for f in findings)


# ---------------------------------------------------------------------------
# Configuration models
# ---------------------------------------------------------------------------

_MODEL_CONFIG = ConfigDict(
    frozen=True,
    populate_by_name=True,
    alias_generator=to_camel,
    extra="forbid",
)


class PartialConfig(BaseModel):
    """One configuration source: every stack field is optional.

    ``None`` means "this source has no opinion"; an empty tuple for a list
    field is a definite choice of "nothing".
    """

    model_config = _MODEL_CONFIG

    database: DatabaseType | None = None
    auth: tuple[AuthProvider, ...] | None = None
    api_style: ApiStyle | None = None
    component_library: ComponentLibrary | None = None
    ui_style: UiStyle | None = None
    base_color: BaseColor | None = None
    accent_color: AccentColor | None = None
    font: FontFamily | None = None
    icons: IconLibrary | None = None
    border_radius: BorderRadius | None = None
    menu_accent: MenuAccent | None = None
    testing: tuple[TestingFramework, ...] | None = None
    unit_testing: bool | None = None
    example_tests: bool | None = None
    docker: bool | None = None
    cicd: CiCdPlatform | None = None
    deploy_target: DeployTarget | None = None
    pbs_level: PbsLevel | None = None
    beads_integration: bool | None = None
    claude_code_hooks: bool | None = None
    mcp_servers: tuple[McpServer, ...] | None = None
    pwa: bool | None = None
    analytics: AnalyticsProvider | None = None
    email: EmailProvider | None = None
    error_tracking: ErrorTrackingProvider | None = None
    feature_flags: bool | None = None

    def defined(self) -> dict[str, Any]:
        """Return the stack fields this source sets, keyed by attribute name."""
        return {
            name: getattr(self, name)
            for name in STACK_FIELD_NAMES
            if getattr(self, name) is not None
        }

    def is_empty(self) -> bool:
        return not self.defined()


class PresetConfig(PartialConfig):
    """A named, read-only partial configuration from the preset registry."""

    name: str
    description: str
    category: PresetCategory

    def stack(self) -> PartialConfig:
        """The preset's configuration values without its registry metadata."""
        return PartialConfig(**self.defined())


class ProjectIdentity(BaseModel):
    """Identity fields, resolved outside the stack precedence chain."""

    model_config = _MODEL_CONFIG

    project_name: str | None = None
    description: str | None = None
    author: str | None = None


class ProjectConfig(BaseModel):
    """The canonical, fully-resolved configuration for one generated project.

    Instances are built once per run by the resolver and are immutable
    afterwards.
    """

    model_config = _MODEL_CONFIG

    project_name: str
    description: str
    author: str
    preset: str | None = None

    database: DatabaseType
    auth: tuple[AuthProvider, ...]
    api_style: ApiStyle
    component_library: ComponentLibrary
    ui_style: UiStyle
    base_color: BaseColor
    accent_color: AccentColor
    font: FontFamily
    icons: IconLibrary
    border_radius: BorderRadius
    menu_accent: MenuAccent
    testing: tuple[TestingFramework, ...]
    unit_testing: bool
    example_tests: bool
    docker: bool
    cicd: CiCdPlatform
    deploy_target: DeployTarget
    pbs_level: PbsLevel
    beads_integration: bool
    claude_code_hooks: bool
    mcp_servers: tuple[McpServer, ...]
    pwa: bool
    analytics: AnalyticsProvider
    email: EmailProvider
    error_tracking: ErrorTrackingProvider
    feature_flags: bool

    def identity(self) -> ProjectIdentity:
        return ProjectIdentity(
            project_name=self.project_name,
            description=self.description,
            author=self.author,
        )

    def stack(self) -> PartialConfig:
        """Stack fields as a ``PartialConfig`` (every field set)."""
        return PartialConfig(**{name: getattr(self, name) for name in STACK_FIELD_NAMES})

    def to_document(self) -> dict[str, Any]:
        """camelCase, JSON-compatible mapping used for export and display."""
        return self.model_dump(mode="json", by_alias=True)
