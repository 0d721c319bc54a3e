"""Tests for the CDM store handle."""

import pytest

from omop_synth.etl.synthetic import generate_synthetic_cdm


def test_query_returns_row_dicts():
    with generate_synthetic_cdm(n_patients=4, verbose=False) as db:
        rows = db.query(
            "SELECT person_id FROM person WHERE person_id <= :limit ORDER BY person_id",
            {"limit": 2},
        )
        assert rows == [{"person_id": 1}, {"person_id": 2}]


def test_has_tables():
    with generate_synthetic_cdm(n_patients=2, verbose=False) as db:
        assert db.has_tables(["person", "drug_exposure"])
        assert not db.has_tables(["person", "measurement"])


def test_unknown_table_rejected():
    with generate_synthetic_cdm(n_patients=2, verbose=False) as db:
        with pytest.raises(ValueError, match="Unknown CDM table: measurement"):
            db.count("measurement")
        with pytest.raises(ValueError, match="Unknown CDM table"):
            db.read_table("measurement")


def test_close_is_idempotent():
    db = generate_synthetic_cdm(n_patients=2, verbose=False)
    assert not db.closed
    db.close()
    db.close()
    assert db.closed


def test_each_call_gets_its_own_store():
    with generate_synthetic_cdm(n_patients=3, verbose=False) as first, \
            generate_synthetic_cdm(n_patients=5, verbose=False) as second:
        assert first.count("person") == 3
        assert second.count("person") == 5
