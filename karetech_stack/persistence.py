"""Export and import of resolved configurations.

A configuration is saved as a flat camelCase mapping, in JSON or YAML, so a
project can be regenerated later with ``--config``. Import rejects anything
the schema check does not accept: unparsable files, unknown keys and
out-of-enum values are all fatal and reported together.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from . import __version__
from .errors import ConfigFileError
from .schema import ProjectConfig
from .validation.schema_check import CheckedInput, check_config_mapping


class ConfigFormat(str, Enum):
    JSON = "json"
    YAML = "yaml"


def format_for_path(path: str | Path) -> ConfigFormat:
    """``.yaml``/``.yml`` files are YAML; everything else is JSON."""
    suffix = Path(path).suffix.lower()
    return ConfigFormat.YAML if suffix in (".yaml", ".yml") else ConfigFormat.JSON


def default_config_path(project_name: str, fmt: ConfigFormat | str = ConfigFormat.JSON) -> Path:
    return Path(f"{project_name}.karetech-config.{ConfigFormat(fmt).value}")


def dump_config(config: ProjectConfig, fmt: ConfigFormat | str = ConfigFormat.JSON) -> str:
    """Serialise *config* to text in the requested format."""
    document = config.to_document()
    if ConfigFormat(fmt) is ConfigFormat.YAML:
        header = (
            f"# create-karetech-stack {__version__} configuration for {config.project_name}\n"
            f"# Re-use with: create-karetech-stack --config <this file>\n"
        )
        body = yaml.safe_dump(document, sort_keys=False, default_flow_style=False, allow_unicode=True)
        return header + body
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def export_config(
    config: ProjectConfig,
    path: str | Path | None = None,
    fmt: ConfigFormat | str | None = None,
) -> Path:
    """Write *config* to *path* and return the path written.

    When *fmt* is omitted it is inferred from *path*; when *path* is
    omitted it defaults to ``<project-name>.karetech-config.<ext>``.
    """
    if fmt is None:
        fmt = format_for_path(path) if path is not None else ConfigFormat.JSON
    target = Path(path) if path is not None else default_config_path(config.project_name, fmt)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(dump_config(config, fmt), encoding="utf-8")
    return target


def parse_config_text(text: str, fmt: ConfigFormat | str, source: str = "<config>") -> dict[str, Any]:
    """Parse text into a mapping.

    Raises:
        ConfigFileError: If the text does not parse or is not a mapping.
    """
    try:
        if ConfigFormat(fmt) is ConfigFormat.YAML:
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigFileError(source, f"Could not parse configuration: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigFileError(source, "Configuration must be a mapping of field names to values")
    return data


def import_config(path: str | Path) -> CheckedInput:
    """Load and schema-check a configuration file.

    Returns:
        The identity, partial configuration and preset name the file sets.

    Raises:
        ConfigFileError: If the file is missing, unparsable, or contains
            unknown fields or invalid values. ``findings`` lists each one.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise ConfigFileError(str(file_path), "Configuration file not found")

    data = parse_config_text(
        file_path.read_text(encoding="utf-8"), format_for_path(file_path), str(file_path)
    )
    checked = check_config_mapping(data)
    if checked.findings:
        raise ConfigFileError(str(file_path), "Invalid configuration", checked.findings)
    return checked
