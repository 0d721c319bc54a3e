"""
FastAPI routes – the HTTP surface over generation and exploration.

Each request builds its own in-memory store and closes it before
responding; nothing is shared between requests.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException

from omop_synth.config import settings
from omop_synth.etl.synthetic import generate_synthetic_cdm
from omop_synth.schemas.api import (
    CDMSummary,
    ConceptResponse,
    DatasetInfo,
    HealthResponse,
    SyntheticCDMConfig,
)
from omop_synth.services.exploration import explore_cdm
from omop_synth.services.providers import get_available_datasets
from omop_synth.services.validation import MULTIPLIER_OPTIONS, InvalidArgumentError
from omop_synth.services.vocabulary import concepts_for_domain, domains

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@router.get("/health", response_model=HealthResponse)
def health_check():
    return HealthResponse(status="healthy", environment=settings.ENVIRONMENT)


# ---------------------------------------------------------------------------
# Synthetic CDM
# ---------------------------------------------------------------------------

@router.post("/synthetic/summary", response_model=CDMSummary)
def synthetic_summary(config: SyntheticCDMConfig):
    """Generate a synthetic CDM, summarise it, and discard it."""
    if config.n_patients > settings.MAX_API_PATIENTS:
        raise HTTPException(
            status_code=422,
            detail=f"n_patients must not exceed {settings.MAX_API_PATIENTS}",
        )
    # NaN compares False here and is rejected by the generator's validation
    for name in MULTIPLIER_OPTIONS:
        if config.n_patients * getattr(config, name) > settings.MAX_API_ROWS:
            raise HTTPException(
                status_code=422,
                detail=f"{name} must not yield more than {settings.MAX_API_ROWS} rows",
            )

    try:
        db = generate_synthetic_cdm(config)
    except InvalidArgumentError as exc:
        raise HTTPException(status_code=422, detail=exc.errors) from exc

    with db:
        summary = explore_cdm(db)
    logger.info(
        "Generated synthetic CDM: %d persons, %d visits",
        summary.total_persons,
        summary.total_visits,
    )
    return summary


# ---------------------------------------------------------------------------
# Catalogs
# ---------------------------------------------------------------------------

@router.get("/datasets", response_model=list[DatasetInfo])
def list_datasets():
    return get_available_datasets()


@router.get("/concepts", response_model=list[ConceptResponse])
def list_concepts(domain: str | None = None):
    """Sample vocabulary concepts, optionally for one domain."""
    if domain is None:
        selected = [c for d in domains() for c in concepts_for_domain(d)]
    elif domain in domains():
        selected = concepts_for_domain(domain)
    else:
        raise HTTPException(status_code=404, detail=f"Unknown domain: {domain}")
    return [ConceptResponse(**concept._asdict()) for concept in selected]
