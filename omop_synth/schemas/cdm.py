"""
JSON schema for synthetic CDM generation options.

Demonstrates:
- JSON Schema as the contract for loosely-typed option dicts (HTTP bodies,
  config files, keyword arguments)
- Structural checks only – range rules with fixed error wording live in
  services.validation
"""

SYNTHETIC_CDM_OPTIONS_SCHEMA: dict = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Synthetic OMOP CDM generation options",
    "type": "object",
    "properties": {
        "n_patients": {
            "type": "integer",
            "description": "Number of persons to generate (must be > 0).",
        },
        "seed": {
            "type": "integer",
            "description": "Seed for the single pseudo-random generator.",
        },
        "start_year": {
            "type": "integer",
            "description": "Earliest year of birth.",
        },
        "end_year": {
            "type": "integer",
            "description": "Latest year of birth (must exceed start_year).",
        },
        "avg_visits_per_patient": {"type": "number"},
        "avg_conditions_per_patient": {"type": "number"},
        "avg_drugs_per_patient": {"type": "number"},
        "verbose": {"type": "boolean"},
    },
    "additionalProperties": False,
}
