"""
Summary statistics over a CDM store.

Demonstrates:
- Count and grouped-aggregate queries against the CDM record types
- Input validation before touching the database
- Human-readable report through logging, structured result for callers
"""

from __future__ import annotations

import logging
import statistics
from typing import Any, Iterable

from sqlalchemy import func, select

from omop_synth.config import settings
from omop_synth.models.cdm import ConditionOccurrence, DrugExposure, Person, VisitOccurrence
from omop_synth.models.database import CDMDatabase
from omop_synth.schemas.api import AgeStatistics, CDMSummary, GenderCount
from omop_synth.services.vocabulary import concept_name

logger = logging.getLogger(__name__)

EXPLORATION_TABLES = ("person", "visit_occurrence", "condition_occurrence", "drug_exposure")

GENDER_LABELS = {8532: "Female", 8507: "Male"}


class CDMValidationError(ValueError):
    """The store is missing tables an operation needs."""


def validate_cdm(db: Any, required_tables: Iterable[str] = ("person",)) -> None:
    if not isinstance(db, CDMDatabase):
        raise TypeError("cdm must be a CDMDatabase handle")

    present = set(db.table_names())
    missing = [name for name in required_tables if name not in present]
    if missing:
        raise CDMValidationError(
            "Required tables missing from CDM: " + ", ".join(missing)
        )


def _age_statistics(ages: list[int]) -> AgeStatistics:
    if not ages:
        return AgeStatistics()
    return AgeStatistics(
        min_age=min(ages),
        max_age=max(ages),
        mean_age=statistics.fmean(ages),
        median_age=float(statistics.median(ages)),
    )


def explore_cdm(
    db: CDMDatabase,
    *,
    reference_year: int | None = None,
    verbose: bool = False,
) -> CDMSummary:
    """
    Basic counts, gender distribution and age statistics for a CDM store.
    Ages are reference_year - year_of_birth.
    """
    validate_cdm(db, EXPLORATION_TABLES)
    if reference_year is None:
        reference_year = settings.REFERENCE_YEAR

    with db.connect() as conn:
        totals = {
            model.__tablename__: conn.execute(
                select(func.count()).select_from(model)
            ).scalar_one()
            for model in (Person, VisitOccurrence, ConditionOccurrence, DrugExposure)
        }
        gender_rows = conn.execute(
            select(Person.gender_concept_id, func.count())
            .group_by(Person.gender_concept_id)
            .order_by(Person.gender_concept_id)
        ).all()
        years = conn.execute(select(Person.year_of_birth)).scalars().all()

    summary = CDMSummary(
        total_persons=totals["person"],
        total_visits=totals["visit_occurrence"],
        total_conditions=totals["condition_occurrence"],
        total_drugs=totals["drug_exposure"],
        gender_distribution=[
            GenderCount(
                gender_concept_id=gender_id,
                concept_name=concept_name(gender_id) if gender_id is not None else "Unknown",
                count=count,
            )
            for gender_id, count in gender_rows
        ],
        age_statistics=_age_statistics(
            [reference_year - year for year in years if year is not None]
        ),
        reference_year=reference_year,
    )

    if verbose:
        _log_report(summary)
    return summary


def _log_report(summary: CDMSummary) -> None:
    logger.info("=== CDM Exploration ===")
    logger.info("Total persons: %d", summary.total_persons)
    logger.info("Total visits: %d", summary.total_visits)
    logger.info("Total conditions: %d", summary.total_conditions)
    logger.info("Total drug exposures: %d", summary.total_drugs)
    for row in summary.gender_distribution:
        logger.info("Gender %s (%s): %d", row.gender_concept_id, row.concept_name, row.count)
    ages = summary.age_statistics
    logger.info(
        "Age (reference year %d): min=%s max=%s mean=%s median=%s",
        summary.reference_year,
        ages.min_age,
        ages.max_age,
        ages.mean_age,
        ages.median_age,
    )


def person_demographics(
    db: CDMDatabase, *, reference_year: int | None = None
) -> list[dict[str, Any]]:
    """Age and gender label per person – the input for an age/gender histogram."""
    validate_cdm(db, ("person",))
    if reference_year is None:
        reference_year = settings.REFERENCE_YEAR

    with db.connect() as conn:
        rows = conn.execute(
            select(Person.person_id, Person.gender_concept_id, Person.year_of_birth)
            .order_by(Person.person_id)
        ).all()

    return [
        {
            "person_id": person_id,
            "age": reference_year - year if year is not None else None,
            "gender": GENDER_LABELS.get(gender_id, "Other"),
        }
        for person_id, gender_id, year in rows
    ]
