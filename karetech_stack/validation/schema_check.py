"""Schema check for raw configuration input.

Config files and command-line flags arrive as plain mappings of strings,
lists and booleans. :func:`check_config_mapping` verifies every key and
value against the closed enumerations in :mod:`karetech_stack.schema`,
reports every problem as an error finding, and builds a ``PartialConfig``
from the values that passed.
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..schema import (
    BorderRadius,
    FieldSpec,
    Finding,
    PartialConfig,
    ProjectIdentity,
    STACK_FIELDS,
    alias_of,
    error,
    field_spec,
)

_IDENTITY_KEYS: dict[str, str] = {
    "projectName": "project_name",
    "project_name": "project_name",
    "name": "project_name",
    "description": "description",
    "author": "author",
}

_KNOWN_KEYS: list[str] = [
    *_IDENTITY_KEYS,
    "preset",
    *(spec.alias for spec in STACK_FIELDS),
]


@dataclass
class CheckedInput:
    """Result of checking one raw mapping."""

    identity: ProjectIdentity
    config: PartialConfig
    preset: str | None = None
    findings: list[Finding] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.findings


def _expected(spec: FieldSpec) -> str:
    return ", ".join(spec.allowed_values())


def _normalise_scalar(spec: FieldSpec, value: Any) -> Any:
    """YAML and JSON may give numbers for the border radius; accept them."""
    if spec.choices is BorderRadius and isinstance(value, (int, float)) and not isinstance(value, bool):
        text = repr(float(value))
        return text[:-2] if text.endswith(".0") else text
    return value


def _check_choice(spec: FieldSpec, value: Any, findings: list[Finding]) -> Any:
    value = _normalise_scalar(spec, value)
    allowed = spec.allowed_values()
    if isinstance(value, str) and value.strip().lower() in allowed:
        return value.strip().lower()
    findings.append(error(
        spec.alias,
        f"Invalid value '{value}'. Expected one of: {_expected(spec)}",
    ))
    return None


def _check_multiple(spec: FieldSpec, value: Any, findings: list[Finding]) -> tuple[str, ...] | None:
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",") if part.strip()]
        if [item.lower() for item in items] == ["none"]:
            items = []
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        findings.append(error(spec.alias, f"Expected a list of values from: {_expected(spec)}"))
        return None

    allowed = spec.allowed_values()
    accepted: list[str] = []
    bad = False
    for item in items:
        text = item.strip().lower() if isinstance(item, str) else None
        if text not in allowed:
            findings.append(error(
                spec.alias,
                f"Invalid value '{item}'. Expected any of: {_expected(spec)}",
            ))
            bad = True
        elif text not in accepted:
            accepted.append(text)
    return None if bad else tuple(accepted)


def _check_flag(spec: FieldSpec, value: Any, findings: list[Finding]) -> bool | None:
    if isinstance(value, bool):
        return value
    findings.append(error(spec.alias, f"Expected true or false, got '{value}'"))
    return None


def check_config_mapping(data: Mapping[str, Any]) -> CheckedInput:
    """Check a raw mapping (camelCase or snake_case keys).

    ``None`` values are treated as absent. The returned ``CheckedInput``
    holds only the values that passed; ``findings`` lists every rejected key
    or value.
    """
    findings: list[Finding] = []
    identity: dict[str, str] = {}
    stack: dict[str, Any] = {}
    preset: str | None = None

    for key, value in data.items():
        if value is None:
            continue

        if key in _IDENTITY_KEYS:
            attr = _IDENTITY_KEYS[key]
            if isinstance(value, str):
                identity[attr] = value
            else:
                findings.append(error(alias_of(attr), "Expected a string"))
            continue

        if key == "preset":
            if isinstance(value, str) and value.strip():
                preset = value.strip().lower()
            else:
                findings.append(error("preset", "Expected a preset name"))
            continue

        spec = field_spec(key)
        if spec is None:
            close = difflib.get_close_matches(key, _KNOWN_KEYS, n=1)
            findings.append(error(
                key,
                "Unknown configuration field",
                f"Did you mean '{close[0]}'?" if close else None,
            ))
            continue

        if spec.multiple:
            checked = _check_multiple(spec, value, findings)
        elif spec.is_flag:
            checked = _check_flag(spec, value, findings)
        else:
            checked = _check_choice(spec, value, findings)
        if checked is not None:
            stack[spec.name] = checked

    return CheckedInput(
        identity=ProjectIdentity(**identity),
        config=PartialConfig(**stack),
        preset=preset,
        findings=findings,
    )
