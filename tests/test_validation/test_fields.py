"""Tests for field and cross-field validators (karetech_stack.validation.fields).

Covers:
- Project name rules, with and without environment context
- Description and author rules
- Database, auth, testing and DevOps warnings
- AI workflow invariants (PBS level, Beads, Claude hooks, MCP servers)
- Database-specific MCP server matching
- Preset expectations for production presets
- Partial configurations skip rules with missing inputs
- Idempotence of validate_config
"""

from __future__ import annotations

import pytest

from karetech_stack.schema import PartialConfig, Severity
from karetech_stack.validation.fields import (
    ValidationContext,
    suggest_project_name,
    validate_ai_workflow,
    validate_auth,
    validate_author,
    validate_config,
    validate_database,
    validate_description,
    validate_devops,
    validate_mcp_servers,
    validate_preset_expectations,
    validate_project_name,
    validate_stack,
    validate_testing,
)

pytestmark = pytest.mark.unit


def _by_severity(findings, severity):
    return [f for f in findings if f.severity is severity]


def _messages(findings):
    return [f.message for f in findings]


# ---------------------------------------------------------------------------
# Project name
# ---------------------------------------------------------------------------


class TestProjectName:
    def test_valid_name(self):
        assert validate_project_name("acme-portal") == []

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_required(self, name):
        findings = validate_project_name(name)
        assert _messages(findings) == ["Project name is required"]
        assert findings[0].field == "projectName"

    def test_too_short(self):
        assert "Project name must be at least 2 characters" in _messages(validate_project_name("a"))

    def test_too_long(self):
        assert "Project name must be less than 50 characters" in _messages(validate_project_name("a" * 51))

    def test_invalid_characters_suggest_slug(self):
        findings = validate_project_name("My App")
        bad = [f for f in findings if f.message == "Use lowercase letters, numbers, and hyphens only"]
        assert bad and bad[0].suggestion == "Try 'my-app'"

    @pytest.mark.parametrize("name", ["-acme", "acme-"])
    def test_edge_hyphens(self, name):
        assert "Project name cannot start or end with a hyphen" in _messages(validate_project_name(name))

    def test_double_hyphen(self):
        assert "Project name cannot contain consecutive hyphens" in _messages(validate_project_name("acme--portal"))

    @pytest.mark.parametrize("name", ["react", "node_modules", "con"])
    def test_reserved(self, name):
        findings = validate_project_name(name)
        assert any("is a reserved name" in f.message for f in _by_severity(findings, Severity.ERROR))

    def test_reserved_is_case_insensitive(self):
        findings = validate_project_name("React")
        assert any("reserved" in f.message for f in findings)

    @pytest.mark.parametrize("name", ["test", "my-app", "hello-world", "untitled-3", "app2", "project"])
    def test_generic_names_warn(self, name):
        findings = validate_project_name(name)
        generic = [f for f in findings if "generic name" in f.message]
        assert len(generic) == 1
        assert generic[0].severity is Severity.WARNING

    def test_existing_directory_is_error(self):
        context = ValidationContext(directory_exists=True)
        findings = validate_project_name("acme-portal", context)
        assert _by_severity(findings, Severity.ERROR)[0].message == (
            'Directory "acme-portal" already exists in current location'
        )

    def test_directory_not_checked_without_context(self):
        assert validate_project_name("acme-portal") == []

    def test_npm_taken_is_warning(self):
        context = ValidationContext(npm_package_exists=True)
        findings = validate_project_name("acme-portal", context)
        assert [f.severity for f in findings] == [Severity.WARNING]
        assert "already exists on npm" in findings[0].message

    def test_npm_unknown_is_info(self):
        context = ValidationContext(npm_package_exists=None, npm_note="lookup timed out")
        findings = validate_project_name("acme-portal", context)
        assert [(f.severity, f.message) for f in findings] == [(Severity.INFO, "lookup timed out")]

    def test_npm_free_adds_nothing(self):
        assert validate_project_name("acme-portal", ValidationContext(npm_package_exists=False)) == []

    def test_suggest_project_name(self):
        assert suggest_project_name("  Hello__World!! ") == "hello-world"


# ---------------------------------------------------------------------------
# Description / author
# ---------------------------------------------------------------------------


class TestDescriptionAndAuthor:
    def test_description_required(self):
        assert _messages(validate_description("")) == ["Project description is required"]

    def test_description_bounds(self):
        assert "Description must be at least 3 characters" in _messages(validate_description("ab"))
        assert "Description must be less than 200 characters" in _messages(validate_description("x" * 201))

    @pytest.mark.parametrize("text", ["My awesome app", "An application", "TODO: write this", "placeholder"])
    def test_description_placeholder_warns(self, text):
        findings = validate_description(text)
        assert _by_severity(findings, Severity.WARNING)

    def test_specific_description_passes(self):
        assert validate_description("Customer portal for Acme support teams") == []

    def test_author_required(self):
        assert _messages(validate_author(None)) == ["Author name is required"]

    def test_author_bounds(self):
        assert "Author name must be at least 2 characters" in _messages(validate_author("J"))
        assert "Author name must be less than 50 characters" in _messages(validate_author("J" * 51))

    @pytest.mark.parametrize("name", ["Your Name", "author", "test"])
    def test_author_placeholder_warns(self, name):
        assert _messages(validate_author(name)) == ["Please provide your actual name"]


# ---------------------------------------------------------------------------
# Stack rules
# ---------------------------------------------------------------------------


class TestStackRules:
    def test_postgres_without_auth_warns(self):
        findings = validate_database(PartialConfig(database="postgresql", auth=()))
        assert [f.field for f in findings] == ["database"]

    def test_sqlite_with_playwright_warns(self):
        findings = validate_database(PartialConfig(database="sqlite", testing=["playwright"]))
        assert "SQLite" in findings[0].message

    def test_magic_links_without_email_is_error(self):
        findings = validate_auth(PartialConfig(auth=["email", "magic-links"], email="none"))
        errors = _by_severity(findings, Severity.ERROR)
        assert [(f.field, f.message) for f in errors] == [
            ("auth", "Magic links require an email service configuration"),
        ]

    def test_magic_links_with_email_provider_ok(self):
        assert validate_auth(PartialConfig(auth=["email", "magic-links"], email="resend")) == []

    def test_oauth_without_email_warns(self):
        findings = validate_auth(PartialConfig(auth=["oauth"]))
        assert _messages(findings) == ["Consider including email auth as OAuth fallback"]

    def test_github_auth_without_actions_warns(self):
        findings = validate_auth(PartialConfig(auth=["email", "github"], cicd="vercel"))
        assert _messages(findings) == ["GitHub auth works best with GitHub Actions CI/CD"]

    def test_both_e2e_frameworks_warn(self):
        findings = validate_testing(PartialConfig(testing=["playwright", "puppeteer"]))
        assert "Both Playwright and Puppeteer" in findings[0].message

    def test_e2e_postgres_without_docker_warns(self):
        findings = validate_testing(PartialConfig(testing=["playwright"], database="postgresql", docker=False))
        assert _messages(findings) == ["E2E testing with PostgreSQL is easier with Docker"]

    def test_no_testing_warns(self):
        findings = validate_testing(PartialConfig(testing=[], unit_testing=False))
        assert _messages(findings) == ["Consider adding at least unit testing for code quality"]

    def test_docker_with_vercel_and_no_ci(self):
        findings = validate_devops(PartialConfig(docker=True, deploy_target="vercel", cicd="none"))
        assert [f.field for f in findings] == ["docker", "cicd"]
        assert all(f.severity is Severity.WARNING for f in findings)

    def test_devops_quiet_without_docker(self):
        assert validate_devops(PartialConfig(docker=False, deploy_target="vercel", cicd="none")) == []


class TestAiWorkflow:
    def test_full_pbs_requires_beads_hooks_filesystem(self):
        config = PartialConfig(
            pbs_level="full",
            beads_integration=False,
            claude_code_hooks=False,
            mcp_servers=["github"],
        )
        errors = _by_severity(validate_ai_workflow(config), Severity.ERROR)
        assert [f.field for f in errors] == ["beadsIntegration", "claudeCodeHooks", "mcpServers"]

    def test_full_pbs_satisfied(self):
        config = PartialConfig(
            pbs_level="full",
            beads_integration=True,
            claude_code_hooks=True,
            mcp_servers=["filesystem", "github"],
            cicd="github-actions",
            testing=["playwright"],
        )
        assert validate_ai_workflow(config) == []

    def test_beads_requires_pbs(self):
        findings = validate_ai_workflow(PartialConfig(beads_integration=True, pbs_level="none"))
        assert any(f.field == "pbsLevel" and f.severity is Severity.ERROR for f in findings)

    def test_hooks_require_filesystem(self):
        config = PartialConfig(claude_code_hooks=True, pbs_level="docs", mcp_servers=["github"])
        errors = _by_severity(validate_ai_workflow(config), Severity.ERROR)
        assert _messages(errors) == ["Claude Code hooks require the filesystem MCP server"]

    def test_full_pbs_reports_filesystem_once(self):
        config = PartialConfig(
            pbs_level="full", beads_integration=True, claude_code_hooks=True, mcp_servers=["github"],
        )
        errors = _by_severity(validate_ai_workflow(config), Severity.ERROR)
        assert len(errors) == 1

    def test_hooks_without_pbs_warn(self):
        config = PartialConfig(claude_code_hooks=True, pbs_level="none", mcp_servers=["filesystem"])
        findings = validate_ai_workflow(config)
        assert [(f.field, f.severity) for f in findings] == [("pbsLevel", Severity.WARNING)]

    def test_beads_without_github_server_warns(self):
        config = PartialConfig(beads_integration=True, pbs_level="minimal", mcp_servers=["filesystem"])
        findings = validate_ai_workflow(config)
        assert _messages(findings) == ["Beads integration works best with the GitHub MCP server"]

    def test_docs_pbs_info(self):
        config = PartialConfig(pbs_level="docs", testing=[], unit_testing=False, cicd="none")
        findings = validate_ai_workflow(config)
        assert [f.severity for f in findings] == [Severity.INFO, Severity.INFO]


class TestMcpServers:
    def test_postgres_server_requires_postgresql(self):
        findings = validate_mcp_servers(PartialConfig(mcp_servers=["filesystem", "postgres"], database="sqlite"))
        assert len(findings) == 1
        assert findings[0].severity is Severity.ERROR
        assert "postgresql" in findings[0].message

    def test_turso_server_accepts_sqlite(self):
        assert validate_mcp_servers(PartialConfig(mcp_servers=["turso"], database="sqlite")) == []

    def test_matching_server_ok(self):
        assert validate_mcp_servers(PartialConfig(mcp_servers=["postgres"], database="postgresql")) == []

    def test_playwright_server_without_playwright_testing(self):
        findings = validate_mcp_servers(PartialConfig(mcp_servers=["playwright"], testing=["vitest"]))
        assert [f.severity for f in findings] == [Severity.WARNING]


class TestPresetExpectations:
    def test_saas_without_error_tracking(self):
        findings = validate_preset_expectations(
            PartialConfig(error_tracking="none", analytics="none"), "saas"
        )
        assert [(f.field, f.severity) for f in findings] == [
            ("errorTracking", Severity.WARNING),
            ("analytics", Severity.INFO),
        ]

    def test_other_presets_ignored(self):
        assert validate_preset_expectations(PartialConfig(error_tracking="none"), "blog") == []
        assert validate_preset_expectations(PartialConfig(error_tracking="none"), None) == []


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


class TestValidateConfig:
    def test_partial_config_skips_missing_inputs(self):
        assert validate_stack(PartialConfig()) == []

    def test_defaults_have_no_errors(self, default_config):
        findings = validate_config(default_config)
        assert not _by_severity(findings, Severity.ERROR)

    def test_idempotent(self, make_config):
        config = make_config(auth=["magic-links"], database="sqlite", mcp_servers=["postgres"])
        assert validate_config(config) == validate_config(config)

    def test_identity_rules_included(self, make_config):
        config = make_config().model_copy(update={"project_name": "React"})
        fields = {f.field for f in validate_config(config)}
        assert "projectName" in fields

    def test_preset_expectations_use_config_preset(self, make_config):
        config = make_config(preset="saas", error_tracking="none")
        assert any(f.field == "errorTracking" for f in validate_config(config))
