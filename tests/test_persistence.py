"""Unit tests for config export/import (karetech_stack.persistence).

Tests cover:
- Format detection and default file names
- dump_config for JSON and YAML
- export_config writes the file
- import_config round trip (same config, same findings)
- Fatal import errors: missing file, parse error, non-mapping, bad values
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml

from karetech_stack.errors import ConfigFileError
from karetech_stack.persistence import (
    ConfigFormat,
    default_config_path,
    dump_config,
    export_config,
    format_for_path,
    import_config,
    parse_config_text,
)
from karetech_stack.resolver import build_sources, resolve, resolve_identity, validate_resolution


def _reimport(config, path: Path):
    """Export, import, and resolve the imported file as the only source."""
    export_config(config, path)
    checked = import_config(path)
    identity = resolve_identity(checked.identity)
    return resolve(identity, build_sources(config_file=checked.config), checked.preset)


# ---------------------------------------------------------------------------
# Formats
# ---------------------------------------------------------------------------


class TestFormats:
    @pytest.mark.unit
    @pytest.mark.parametrize("name,expected", [
        ("config.yaml", ConfigFormat.YAML),
        ("config.YML", ConfigFormat.YAML),
        ("config.json", ConfigFormat.JSON),
        ("config", ConfigFormat.JSON),
    ])
    def test_format_for_path(self, name, expected):
        assert format_for_path(name) is expected

    @pytest.mark.unit
    def test_default_config_path(self):
        assert default_config_path("acme-portal") == Path("acme-portal.karetech-config.json")
        assert default_config_path("acme-portal", "yaml") == Path("acme-portal.karetech-config.yaml")


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


class TestExport:
    @pytest.mark.unit
    def test_dump_json(self, default_config):
        document = json.loads(dump_config(default_config))
        assert document["projectName"] == "acme-portal"
        assert document["mcpServers"] == ["filesystem", "github"]
        assert document["preset"] is None

    @pytest.mark.unit
    def test_dump_yaml_has_header_and_string_radius(self, make_config):
        text = dump_config(make_config(border_radius="0.75"), ConfigFormat.YAML)
        assert text.startswith("# create-karetech-stack")
        document = yaml.safe_load(text)
        assert document["borderRadius"] == "0.75"
        assert document["docker"] is False

    @pytest.mark.unit
    def test_export_infers_format(self, default_config, tmp_path: Path):
        path = export_config(default_config, tmp_path / "nested" / "acme.yml")
        assert path.exists()
        assert yaml.safe_load(path.read_text())["author"] == "Jane Developer"

    @pytest.mark.unit
    def test_export_default_path(self, default_config, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        path = export_config(default_config, fmt="yaml")
        assert path == Path("acme-portal.karetech-config.yaml")
        assert (tmp_path / path).is_file()


# ---------------------------------------------------------------------------
# Import
# ---------------------------------------------------------------------------


class TestImport:
    @pytest.mark.unit
    @pytest.mark.parametrize("filename", ["acme.json", "acme.yaml"])
    def test_round_trip(self, make_config, tmp_path: Path, filename):
        config = make_config(preset="blog", auth=["email", "magic-links"], border_radius="0")
        resolution = _reimport(config, tmp_path / filename)
        assert resolution.config == config
        assert validate_resolution(resolution) == validate_resolution(resolve(
            config.identity(), build_sources(cli=config.stack()), config.preset
        ))

    @pytest.mark.unit
    def test_imported_values_come_from_config_file(self, default_config, tmp_path: Path):
        resolution = _reimport(default_config, tmp_path / "acme.json")
        assert {s.value for s in resolution.provenance.values()} == {"config-file"}

    @pytest.mark.unit
    def test_partial_file(self, tmp_path: Path):
        path = tmp_path / "partial.yaml"
        path.write_text("preset: SaaS\ndatabase: turso\nmcpServers: [filesystem]\nborderRadius: 0.5\n")
        checked = import_config(path)
        assert checked.preset == "saas"
        assert checked.config.defined() == {
            "database": checked.config.database,
            "border_radius": checked.config.border_radius,
            "mcp_servers": checked.config.mcp_servers,
        }
        assert checked.config.border_radius.value == "0.5"

    @pytest.mark.unit
    def test_invalid_database_rejected(self, tmp_path: Path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"database": "invalid-database", "docker": True}))
        with pytest.raises(ConfigFileError) as exc_info:
            import_config(path)
        findings = exc_info.value.findings
        assert [f.field for f in findings] == ["database"]
        assert "Expected one of: postgresql, turso, sqlite, none" in findings[0].message

    @pytest.mark.unit
    def test_every_problem_reported(self, tmp_path: Path):
        path = tmp_path / "bad.yaml"
        path.write_text("databse: sqlite\nauth: [email, passkeys]\ndocker: maybe\n")
        with pytest.raises(ConfigFileError) as exc_info:
            import_config(path)
        findings = exc_info.value.findings
        assert [f.field for f in findings] == ["databse", "auth", "docker"]
        assert findings[0].suggestion == "Did you mean 'database'?"

    @pytest.mark.unit
    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ConfigFileError, match="Configuration file not found"):
            import_config(tmp_path / "missing.json")

    @pytest.mark.unit
    def test_unparsable(self, tmp_path: Path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ConfigFileError, match="Could not parse configuration"):
            import_config(path)

    @pytest.mark.unit
    def test_non_mapping(self):
        with pytest.raises(ConfigFileError, match="must be a mapping"):
            parse_config_text("- saas\n- blog\n", "yaml")
