"""
Option validation for synthetic CDM generation.

Demonstrates:
- Schema-driven validation of raw option dicts
- Collecting all errors rather than failing on the first one
- Failing before any store is created
"""

from __future__ import annotations

import math
from typing import Any

import jsonschema

from omop_synth.schemas.cdm import SYNTHETIC_CDM_OPTIONS_SCHEMA

MULTIPLIER_OPTIONS = (
    "avg_visits_per_patient",
    "avg_conditions_per_patient",
    "avg_drugs_per_patient",
)


class InvalidArgumentError(ValueError):
    """Generation options rejected before any work started."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))


def validate_against_schema(data: dict[str, Any], schema: dict[str, Any]) -> list[str]:
    """
    Validate a dict against a JSON schema.
    Returns a list of error messages (empty list = valid).
    """
    validator = jsonschema.Draft7Validator(schema)
    errors = []
    for error in validator.iter_errors(data):
        location = ".".join(str(part) for part in error.path)
        errors.append(f"{location}: {error.message}" if location else error.message)
    return errors


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_generation_options(options: dict[str, Any]) -> None:
    """Raise InvalidArgumentError listing every problem with the options."""
    errors: list[str] = []

    n_patients = options.get("n_patients")
    if not _is_int(n_patients) or n_patients <= 0:
        errors.append("n_patients must be a positive integer")

    start_year, end_year = options.get("start_year"), options.get("end_year")
    if _is_int(start_year) and _is_int(end_year) and start_year >= end_year:
        errors.append("start_year must be less than end_year")

    # NaN and infinity are JSON-schema "number"s but give no row count
    for name in MULTIPLIER_OPTIONS:
        value = options.get(name)
        if not isinstance(value, float):
            continue
        if not math.isfinite(value):
            errors.append(f"{name} must be a finite number")
        elif _is_int(n_patients) and not math.isfinite(n_patients * value):
            errors.append(f"{name} gives too many rows for {n_patients} patients")

    errors.extend(
        message
        for message in validate_against_schema(options, SYNTHETIC_CDM_OPTIONS_SCHEMA)
        if not message.startswith("n_patients:")
    )

    if errors:
        raise InvalidArgumentError(errors)
