"""Tests for CDM exploration helpers."""

import pytest
from sqlalchemy import text

from omop_synth.etl.synthetic import generate_synthetic_cdm
from omop_synth.models.database import CDMDatabase, create_store_engine
from omop_synth.services.exploration import (
    CDMValidationError,
    explore_cdm,
    person_demographics,
    validate_cdm,
)


@pytest.fixture
def cdm():
    db = generate_synthetic_cdm(
        n_patients=60, seed=11, start_year=1950, end_year=2000, verbose=False
    )
    yield db
    db.close()


def test_explore_counts_match_tables(cdm):
    summary = explore_cdm(cdm)

    assert summary.total_persons == 60
    assert summary.total_visits == cdm.count("visit_occurrence")
    assert summary.total_conditions == cdm.count("condition_occurrence")
    assert summary.total_drugs == cdm.count("drug_exposure")


def test_gender_distribution_sums_to_persons(cdm):
    summary = explore_cdm(cdm)

    assert sum(row.count for row in summary.gender_distribution) == 60
    ids = [row.gender_concept_id for row in summary.gender_distribution]
    assert ids == sorted(ids)
    assert set(ids) <= {8507, 8532}
    names = {row.gender_concept_id: row.concept_name for row in summary.gender_distribution}
    assert names.get(8507, "Male") == "Male"
    assert names.get(8532, "Female") == "Female"


def test_age_statistics_use_reference_year(cdm):
    summary = explore_cdm(cdm, reference_year=2024)
    ages = summary.age_statistics

    assert summary.reference_year == 2024
    assert 24 <= ages.min_age <= ages.median_age <= ages.max_age <= 74
    assert ages.min_age <= ages.mean_age <= ages.max_age

    shifted = explore_cdm(cdm, reference_year=2034).age_statistics
    assert shifted.min_age == ages.min_age + 10
    assert shifted.max_age == ages.max_age + 10


def test_explicit_zero_reference_year_is_used(cdm):
    summary = explore_cdm(cdm, reference_year=0)

    assert summary.reference_year == 0
    assert -2000 <= summary.age_statistics.min_age <= summary.age_statistics.max_age <= -1950
    assert all(
        -2000 <= row["age"] <= -1950 for row in person_demographics(cdm, reference_year=0)
    )


def test_verbose_report_logged(cdm, caplog):
    caplog.set_level("INFO", logger="omop_synth.services.exploration")
    explore_cdm(cdm, verbose=True)
    assert "CDM Exploration" in caplog.text
    assert "Total persons: 60" in caplog.text


def test_person_demographics(cdm):
    rows = person_demographics(cdm, reference_year=2024)

    assert [row["person_id"] for row in rows] == list(range(1, 61))
    assert {row["gender"] for row in rows} <= {"Male", "Female"}
    assert all(24 <= row["age"] <= 74 for row in rows)


def test_rejects_non_handle():
    with pytest.raises(TypeError, match="cdm must be a CDMDatabase handle"):
        explore_cdm("not_a_cdm")
    with pytest.raises(TypeError, match="cdm must be a CDMDatabase handle"):
        person_demographics("not_a_cdm")


def test_missing_tables_reported():
    with CDMDatabase(create_store_engine("sqlite://")) as empty:
        with pytest.raises(CDMValidationError, match="person, visit_occurrence"):
            explore_cdm(empty)


def test_validate_cdm_passes_for_generated_store(cdm):
    validate_cdm(cdm, ["person", "drug_exposure"])


def test_empty_person_table_gives_empty_age_statistics(cdm):
    with cdm.engine.begin() as conn:
        conn.execute(text("DELETE FROM person"))

    summary = explore_cdm(cdm)
    assert summary.total_persons == 0
    assert summary.gender_distribution == []
    assert summary.age_statistics.min_age is None
    assert summary.age_statistics.median_age is None
