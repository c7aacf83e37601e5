"""Validation rules for project configurations.

Quick usage::

    from karetech_stack.validation import validate_config

    findings = validate_config(config)
    errors = [f for f in findings if f.severity == "error"]
"""

from karetech_stack.validation.context import gather_validation_context, lookup_npm_package
from karetech_stack.validation.fields import ValidationContext, validate_config, validate_stack
from karetech_stack.validation.presets import check_all_presets, check_preset, tracking_report
from karetech_stack.validation.schema_check import CheckedInput, check_config_mapping

__all__ = [
    "CheckedInput",
    "ValidationContext",
    "check_all_presets",
    "check_config_mapping",
    "check_preset",
    "gather_validation_context",
    "lookup_npm_package",
    "tracking_report",
    "validate_config",
    "validate_stack",
]
