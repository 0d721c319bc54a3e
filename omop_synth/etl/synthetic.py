"""
Synthetic OMOP CDM generator.

Builds five related CDM tables – person, observation_period,
visit_occurrence, condition_occurrence, drug_exposure – and loads them into
a fresh in-memory store.

Demonstrates:
- A linear Validate -> Generate -> Load pipeline on the DAG runner
- Reproducible generation from a single seeded random generator
- Referential integrity on person_id by construction

Values are drawn independently at random; there are no clinical
correlations. visit_occurrence_id on condition and drug rows is drawn
independently of their person_id, so a condition may point at another
person's visit. Callers relying on person-consistent visits must not use
that column as a join key.
"""

from __future__ import annotations

import logging
import random
from datetime import date, datetime, timedelta
from typing import Any

from sqlalchemy import insert

from omop_synth.config import settings
from omop_synth.etl.dag import DAG
from omop_synth.models.cdm import CDM_TABLES
from omop_synth.models.database import Base, CDMDatabase, create_store_engine
from omop_synth.schemas.api import SyntheticCDMConfig
from omop_synth.services.validation import validate_generation_options
from omop_synth.services.vocabulary import get_concept

logger = logging.getLogger(__name__)

GENDER_CONCEPT_IDS = (8507, 8532)
RACE_CONCEPT_IDS = (8515, 8516, 8527, 8557)
ETHNICITY_CONCEPT_IDS = (38003563, 38003564)
VISIT_CONCEPT_IDS = (9201, 9202, 9203, 262)
CONDITION_CONCEPT_IDS = (201820, 141932, 372906, 4329847)
DRUG_CONCEPT_IDS = (1125315, 1154343, 907013, 974166)

PERIOD_TYPE_CONCEPT_ID = 44814724  # Period covering healthcare encounters
VISIT_TYPE_CONCEPT_ID = 44818517  # Visit derived from encounter on claim
CONDITION_TYPE_CONCEPT_ID = 32020  # EHR encounter diagnosis
DRUG_TYPE_CONCEPT_ID = 38000177  # Prescription written
ORAL_ROUTE_CONCEPT_ID = 4132161

LOCATION_IDS = (1, 100)
PROVIDER_IDS = (1, 50)
CARE_SITE_IDS = (1, 20)

EVENT_EPOCH = date(2010, 1, 1)
EVENT_WINDOW_DAYS = 365 * 13
OBSERVATION_START_OFFSET_DAYS = 365
OBSERVATION_END_DATE = date(2023, 12, 31)


def _row_count(n_patients: int, per_patient: float) -> int:
    # round() is half-to-even; non-positive multipliers give no rows
    return max(0, round(n_patients * per_patient))


def _event_dates(rng: random.Random) -> tuple[date, datetime, date, datetime]:
    """Start/end dates and datetimes in the event window, drawn independently."""
    epoch_dt = datetime.combine(EVENT_EPOCH, datetime.min.time())
    window_seconds = EVENT_WINDOW_DAYS * 24 * 3600
    start_date = EVENT_EPOCH + timedelta(days=rng.randint(0, EVENT_WINDOW_DAYS))
    start_dt = epoch_dt + timedelta(seconds=rng.randint(0, window_seconds))
    end_date = EVENT_EPOCH + timedelta(days=rng.randint(0, EVENT_WINDOW_DAYS))
    end_dt = epoch_dt + timedelta(seconds=rng.randint(0, window_seconds))
    return start_date, start_dt, end_date, end_dt


def _progress(context: dict[str, Any], message: str, *args: Any) -> None:
    if context.get("verbose"):
        logger.info(message, *args)


# ---------------------------------------------------------------------------
# Table builders (pure apart from consuming the shared generator)
# ---------------------------------------------------------------------------


def build_person_rows(
    rng: random.Random, n_patients: int, start_year: int, end_year: int
) -> list[dict[str, Any]]:
    rows = []
    for person_id in range(1, n_patients + 1):
        gender = rng.choice(GENDER_CONCEPT_IDS)
        year = rng.randint(start_year, end_year)
        month = rng.randint(1, 12)
        day = rng.randint(1, 28)  # valid in every month
        race = rng.choice(RACE_CONCEPT_IDS)
        ethnicity = rng.choice(ETHNICITY_CONCEPT_IDS)
        rows.append(
            {
                "person_id": person_id,
                "gender_concept_id": gender,
                "year_of_birth": year,
                "month_of_birth": month,
                "day_of_birth": day,
                "birth_datetime": datetime(year, month, day),
                "race_concept_id": race,
                "ethnicity_concept_id": ethnicity,
                "location_id": rng.randint(*LOCATION_IDS),
                "provider_id": rng.randint(*PROVIDER_IDS),
                "care_site_id": rng.randint(*CARE_SITE_IDS),
                "person_source_value": f"P{person_id:06d}",
                "gender_source_value": get_concept(gender).concept_code,
                "gender_source_concept_id": 0,
                "race_source_value": get_concept(race).concept_code,
                "race_source_concept_id": 0,
                "ethnicity_source_value": get_concept(ethnicity).concept_code,
                "ethnicity_source_concept_id": 0,
            }
        )
    return rows


def build_observation_period_rows(rng: random.Random, n_patients: int) -> list[dict[str, Any]]:
    return [
        {
            "observation_period_id": person_id,
            "person_id": person_id,
            "observation_period_start_date": EVENT_EPOCH
            + timedelta(days=rng.randint(0, OBSERVATION_START_OFFSET_DAYS)),
            "observation_period_end_date": OBSERVATION_END_DATE,
            "period_type_concept_id": PERIOD_TYPE_CONCEPT_ID,
        }
        for person_id in range(1, n_patients + 1)
    ]


def build_visit_occurrence_rows(
    rng: random.Random, n_visits: int, n_patients: int
) -> list[dict[str, Any]]:
    rows = []
    for visit_id in range(1, n_visits + 1):
        person_id = rng.randint(1, n_patients)
        concept_id = rng.choice(VISIT_CONCEPT_IDS)
        start_date, start_dt, end_date, end_dt = _event_dates(rng)
        rows.append(
            {
                "visit_occurrence_id": visit_id,
                "person_id": person_id,
                "visit_concept_id": concept_id,
                "visit_start_date": start_date,
                "visit_start_datetime": start_dt,
                "visit_end_date": end_date,
                "visit_end_datetime": end_dt,
                "visit_type_concept_id": VISIT_TYPE_CONCEPT_ID,
                "provider_id": rng.randint(*PROVIDER_IDS),
                "care_site_id": rng.randint(*CARE_SITE_IDS),
                "visit_source_value": f"V{visit_id:08d}",
                "visit_source_concept_id": 0,
                "admitted_from_concept_id": 0,
                "admitted_from_source_value": "",
                "discharged_to_concept_id": 0,
                "discharged_to_source_value": "",
                "preceding_visit_occurrence_id": None,
            }
        )
    return rows


def build_condition_occurrence_rows(
    rng: random.Random, n_conditions: int, n_patients: int, n_visits: int
) -> list[dict[str, Any]]:
    rows = []
    for condition_id in range(1, n_conditions + 1):
        person_id = rng.randint(1, n_patients)
        concept_id = rng.choice(CONDITION_CONCEPT_IDS)
        start_date, start_dt, end_date, end_dt = _event_dates(rng)
        provider_id = rng.randint(*PROVIDER_IDS)
        visit_id = rng.randint(1, n_visits) if n_visits else None
        rows.append(
            {
                "condition_occurrence_id": condition_id,
                "person_id": person_id,
                "condition_concept_id": concept_id,
                "condition_start_date": start_date,
                "condition_start_datetime": start_dt,
                "condition_end_date": end_date,
                "condition_end_datetime": end_dt,
                "condition_type_concept_id": CONDITION_TYPE_CONCEPT_ID,
                "condition_status_concept_id": 0,
                "stop_reason": "",
                "provider_id": provider_id,
                "visit_occurrence_id": visit_id,
                "visit_detail_id": None,
                "condition_source_value": f"C{condition_id:06d}",
                "condition_source_concept_id": 0,
                "condition_status_source_value": "",
            }
        )
    return rows


def build_drug_exposure_rows(
    rng: random.Random, n_drugs: int, n_patients: int, n_visits: int
) -> list[dict[str, Any]]:
    rows = []
    for exposure_id in range(1, n_drugs + 1):
        person_id = rng.randint(1, n_patients)
        concept_id = rng.choice(DRUG_CONCEPT_IDS)
        start_date, start_dt, end_date, end_dt = _event_dates(rng)
        refills = rng.randint(0, 5)
        quantity = rng.randint(30, 90)
        days_supply = rng.randint(30, 90)
        provider_id = rng.randint(*PROVIDER_IDS)
        visit_id = rng.randint(1, n_visits) if n_visits else None
        rows.append(
            {
                "drug_exposure_id": exposure_id,
                "person_id": person_id,
                "drug_concept_id": concept_id,
                "drug_exposure_start_date": start_date,
                "drug_exposure_start_datetime": start_dt,
                "drug_exposure_end_date": end_date,
                "drug_exposure_end_datetime": end_dt,
                "verbatim_end_date": None,
                "drug_type_concept_id": DRUG_TYPE_CONCEPT_ID,
                "stop_reason": "",
                "refills": refills,
                "quantity": quantity,
                "days_supply": days_supply,
                "sig": "Take as directed",
                "route_concept_id": ORAL_ROUTE_CONCEPT_ID,
                "lot_number": "",
                "provider_id": provider_id,
                "visit_occurrence_id": visit_id,
                "visit_detail_id": None,
                "drug_source_value": f"D{exposure_id:06d}",
                "drug_source_concept_id": 0,
                "route_source_value": "Oral",
                "dose_unit_source_value": "mg",
            }
        )
    return rows


# ---------------------------------------------------------------------------
# Pipeline steps (each receives and returns a context dict)
# ---------------------------------------------------------------------------


def validate(context: dict[str, Any]) -> dict[str, Any]:
    """Reject bad options and fix the random generator and row counts."""
    options = context["options"]
    validate_generation_options(options)

    n_patients = options["n_patients"]
    rng = context.get("rng") or random.Random(options["seed"])
    _progress(options, "Creating synthetic OMOP CDM data for %d patients", n_patients)
    return {
        "rng": rng,
        "verbose": options["verbose"],
        "n_patients": n_patients,
        "n_visits": _row_count(n_patients, options["avg_visits_per_patient"]),
        "n_conditions": _row_count(n_patients, options["avg_conditions_per_patient"]),
        "n_drugs": _row_count(n_patients, options["avg_drugs_per_patient"]),
    }


def generate_person(context: dict[str, Any]) -> dict[str, Any]:
    _progress(context, "Creating person table...")
    options = context["options"]
    rows = build_person_rows(
        context["rng"], context["n_patients"], options["start_year"], options["end_year"]
    )
    return {"person": rows}


def generate_observation_period(context: dict[str, Any]) -> dict[str, Any]:
    _progress(context, "Creating observation_period table...")
    return {
        "observation_period": build_observation_period_rows(
            context["rng"], context["n_patients"]
        )
    }


def generate_visit_occurrence(context: dict[str, Any]) -> dict[str, Any]:
    _progress(context, "Creating visit_occurrence table (%d visits)...", context["n_visits"])
    return {
        "visit_occurrence": build_visit_occurrence_rows(
            context["rng"], context["n_visits"], context["n_patients"]
        )
    }


def generate_condition_occurrence(context: dict[str, Any]) -> dict[str, Any]:
    _progress(
        context,
        "Creating condition_occurrence table (%d conditions)...",
        context["n_conditions"],
    )
    return {
        "condition_occurrence": build_condition_occurrence_rows(
            context["rng"], context["n_conditions"], context["n_patients"], context["n_visits"]
        )
    }


def generate_drug_exposure(context: dict[str, Any]) -> dict[str, Any]:
    _progress(context, "Creating drug_exposure table (%d exposures)...", context["n_drugs"])
    return {
        "drug_exposure": build_drug_exposure_rows(
            context["rng"], context["n_drugs"], context["n_patients"], context["n_visits"]
        )
    }


def load(context: dict[str, Any]) -> dict[str, Any]:
    """
    Write every table into a fresh store, replacing any existing copy.

    Each table is committed on its own; a failure part-way leaves earlier
    tables written. The half-built store is disposed and the storage error
    re-raised unchanged.
    """
    _progress(context, "Writing tables to database...")
    engine = create_store_engine(context.get("store_url"))
    database = CDMDatabase(engine)
    tables = [model.__table__ for model in CDM_TABLES.values()]
    try:
        Base.metadata.drop_all(engine, tables=tables)
        Base.metadata.create_all(engine, tables=tables)
        for name, model in CDM_TABLES.items():
            rows = context[name]
            if not rows:
                continue
            with engine.begin() as conn:
                conn.execute(insert(model.__table__), rows)
    except Exception:
        database.close()
        raise

    _progress(context, "Synthetic OMOP CDM tables created successfully!")
    _progress(context, "Available tables: %s", ", ".join(database.table_names()))
    return {"database": database}


# ---------------------------------------------------------------------------
# Pipeline factory and entry point
# ---------------------------------------------------------------------------


def build_synthetic_cdm_pipeline() -> DAG:
    """Construct the synthetic CDM DAG."""
    dag = DAG("synthetic_cdm")
    dag.add_task("validate", validate)
    dag.add_task("person", generate_person, depends_on=["validate"])
    dag.add_task("observation_period", generate_observation_period, depends_on=["person"])
    dag.add_task("visit_occurrence", generate_visit_occurrence, depends_on=["observation_period"])
    dag.add_task(
        "condition_occurrence", generate_condition_occurrence, depends_on=["visit_occurrence"]
    )
    dag.add_task("drug_exposure", generate_drug_exposure, depends_on=["condition_occurrence"])
    dag.add_task("load", load, depends_on=["drug_exposure"])
    return dag


def _merge_options(
    config: SyntheticCDMConfig | dict[str, Any] | None, overrides: dict[str, Any]
) -> dict[str, Any]:
    if isinstance(config, SyntheticCDMConfig):
        options = config.model_dump()
    else:
        options = SyntheticCDMConfig().model_dump()
        options.update(config or {})
    options.update(overrides)
    return options


def generate_synthetic_cdm(
    config: SyntheticCDMConfig | dict[str, Any] | None = None,
    *,
    rng: random.Random | None = None,
    store_url: str | None = None,
    **options: Any,
) -> CDMDatabase:
    """
    Generate a synthetic CDM and return a handle to the populated store.

    Options come from ``config`` (a SyntheticCDMConfig or plain dict) with
    keyword overrides on top; unset options take SyntheticCDMConfig
    defaults. A ``random.Random(seed)`` is created per call unless an
    independent ``rng`` is supplied, in which case ``seed`` is not used.

    Raises InvalidArgumentError before any store exists for bad options.
    Storage errors from SQLAlchemy propagate unchanged. The caller owns the
    returned handle and should close it.
    """
    context = {
        "options": _merge_options(config, options),
        "rng": rng,
        "store_url": store_url or settings.CDM_DATABASE_URL,
    }
    pipeline = build_synthetic_cdm_pipeline()
    pipeline.run(context, raise_on_failure=True)
    return pipeline.tasks["load"].result["database"]
