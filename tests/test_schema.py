"""Unit tests for the configuration schema (karetech_stack.schema).

Tests cover:
- Field table (order, aliases, flags, allowed values)
- field_spec lookup by snake_case and camelCase
- Finding helpers and severity filters
- PartialConfig: defined(), is_empty(), immutability, alias population
- PresetConfig.stack() drops registry metadata
- ProjectConfig: required fields, enum rejection, to_document()
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from karetech_stack.schema import (
    IDENTITY_FIELD_NAMES,
    STACK_FIELD_NAMES,
    STACK_FIELDS,
    AuthProvider,
    BorderRadius,
    DatabaseType,
    Finding,
    PartialConfig,
    PresetCategory,
    PresetConfig,
    ProjectConfig,
    Severity,
    alias_of,
    error,
    errors_only,
    field_spec,
    has_errors,
    info,
    warning,
)


# ---------------------------------------------------------------------------
# Field table
# ---------------------------------------------------------------------------


class TestFieldTable:
    @pytest.mark.unit
    def test_field_names_are_unique(self):
        assert len(STACK_FIELD_NAMES) == len(set(STACK_FIELD_NAMES))

    @pytest.mark.unit
    def test_every_partial_field_is_in_table(self):
        assert set(PartialConfig.model_fields) == set(STACK_FIELD_NAMES)

    @pytest.mark.unit
    def test_project_config_covers_identity_and_stack(self):
        expected = set(STACK_FIELD_NAMES) | set(IDENTITY_FIELD_NAMES) | {"preset"}
        assert set(ProjectConfig.model_fields) == expected

    @pytest.mark.unit
    def test_list_fields(self):
        multiple = {spec.name for spec in STACK_FIELDS if spec.multiple}
        assert multiple == {"auth", "testing", "mcp_servers"}

    @pytest.mark.unit
    def test_flag_fields_allow_true_false(self):
        spec = field_spec("docker")
        assert spec.is_flag
        assert spec.allowed_values() == ["true", "false"]

    @pytest.mark.unit
    def test_lookup_by_alias(self):
        assert field_spec("mcpServers") is field_spec("mcp_servers")
        assert field_spec("mcpServers").alias == "mcpServers"

    @pytest.mark.unit
    def test_unknown_key(self):
        assert field_spec("frontend") is None

    @pytest.mark.unit
    def test_alias_of(self):
        assert alias_of("project_name") == "projectName"
        assert alias_of("database") == "database"

    @pytest.mark.unit
    def test_border_radius_values(self):
        assert field_spec("border_radius").allowed_values() == [m.value for m in BorderRadius]
        assert "0.75" in field_spec("borderRadius").allowed_values()


# ---------------------------------------------------------------------------
# Findings
# ---------------------------------------------------------------------------


class TestFindings:
    @pytest.mark.unit
    def test_helpers_set_severity(self):
        assert error("a", "m").severity is Severity.ERROR
        assert warning("a", "m").severity is Severity.WARNING
        assert info("a", "m").severity is Severity.INFO

    @pytest.mark.unit
    def test_str(self):
        assert str(error("database", "bad")) == "[error] database: bad"

    @pytest.mark.unit
    def test_filters(self):
        findings = [warning("a", "w"), error("b", "e"), info("c", "i")]
        assert errors_only(findings) == [error("b", "e")]
        assert has_errors(findings)
        assert not has_errors(findings[:1])

    @pytest.mark.unit
    def test_frozen(self):
        finding = Finding(field="a", message="m")
        with pytest.raises(ValidationError):
            finding.message = "changed"


# ---------------------------------------------------------------------------
# PartialConfig / PresetConfig
# ---------------------------------------------------------------------------


class TestPartialConfig:
    @pytest.mark.unit
    def test_empty(self):
        assert PartialConfig().is_empty()
        assert PartialConfig().defined() == {}

    @pytest.mark.unit
    def test_defined_keeps_empty_lists(self):
        partial = PartialConfig(auth=(), docker=False)
        assert partial.defined() == {"auth": (), "docker": False}
        assert not partial.is_empty()

    @pytest.mark.unit
    def test_accepts_camel_case_aliases(self):
        partial = PartialConfig(**{"mcpServers": ["filesystem"], "pbsLevel": "docs"})
        assert partial.mcp_servers == ("filesystem",)
        assert partial.pbs_level.value == "docs"

    @pytest.mark.unit
    def test_coerces_enum_values(self):
        partial = PartialConfig(database="turso", auth=["email", "magic-links"])
        assert partial.database is DatabaseType.TURSO
        assert partial.auth == (AuthProvider.EMAIL, AuthProvider.MAGIC_LINKS)

    @pytest.mark.unit
    def test_rejects_unknown_field(self):
        with pytest.raises(ValidationError):
            PartialConfig(frontend="next")

    @pytest.mark.unit
    def test_rejects_bad_enum(self):
        with pytest.raises(ValidationError):
            PartialConfig(database="invalid-database")

    @pytest.mark.unit
    def test_frozen(self):
        partial = PartialConfig(database="sqlite")
        with pytest.raises(ValidationError):
            partial.database = "turso"

    @pytest.mark.unit
    def test_preset_stack_drops_metadata(self):
        preset = PresetConfig(
            name="demo",
            description="Demo preset",
            category=PresetCategory.MINIMAL,
            database="sqlite",
        )
        stack = preset.stack()
        assert type(stack) is PartialConfig
        assert stack.defined() == {"database": DatabaseType.SQLITE}


# ---------------------------------------------------------------------------
# ProjectConfig
# ---------------------------------------------------------------------------


class TestProjectConfig:
    @pytest.mark.unit
    def test_missing_stack_field_rejected(self, default_config):
        values = default_config.model_dump()
        values.pop("mcp_servers")
        with pytest.raises(ValidationError):
            ProjectConfig(**values)

    @pytest.mark.unit
    def test_to_document_uses_aliases_and_plain_values(self, default_config):
        document = default_config.to_document()
        assert document["projectName"] == "acme-portal"
        assert document["mcpServers"] == ["filesystem", "github"]
        assert document["borderRadius"] == "default"
        assert "project_name" not in document

    @pytest.mark.unit
    def test_identity_and_stack(self, default_config):
        assert default_config.identity().author == "Jane Developer"
        stack = default_config.stack()
        assert set(stack.defined()) == set(STACK_FIELD_NAMES)
