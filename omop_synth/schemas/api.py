"""Pydantic models for generation options and exploration results."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


# ---------------------------------------------------------------------------
# Synthetic generation
# ---------------------------------------------------------------------------

class SyntheticCDMConfig(BaseModel):
    """Options for one synthetic CDM generation call."""
    model_config = ConfigDict(extra="forbid")

    n_patients: int = 1000
    seed: int = 123
    start_year: int = 1920
    end_year: int = 2005
    avg_visits_per_patient: float = 3
    avg_conditions_per_patient: float = 2
    avg_drugs_per_patient: float = 4
    verbose: bool = True


# ---------------------------------------------------------------------------
# Exploration
# ---------------------------------------------------------------------------

class GenderCount(BaseModel):
    gender_concept_id: int | None
    concept_name: str
    count: int


class AgeStatistics(BaseModel):
    min_age: int | None = None
    max_age: int | None = None
    mean_age: float | None = None
    median_age: float | None = None


class CDMSummary(BaseModel):
    total_persons: int
    total_visits: int
    total_conditions: int
    total_drugs: int
    gender_distribution: list[GenderCount]
    age_statistics: AgeStatistics
    reference_year: int


# ---------------------------------------------------------------------------
# Catalogs
# ---------------------------------------------------------------------------

class DatasetInfo(BaseModel):
    dataset_name: str
    description: str


class ConceptResponse(BaseModel):
    concept_id: int
    concept_name: str
    domain_id: str
    vocabulary_id: str
    concept_class_id: str
    concept_code: str


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

class HealthResponse(BaseModel):
    status: str = "healthy"
    environment: str
