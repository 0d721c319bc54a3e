"""Tests for the HTTP surface."""

from fastapi.testclient import TestClient

from omop_synth.config import settings
from omop_synth.main import app

client = TestClient(app)


def test_health():
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "environment": settings.ENVIRONMENT}


def test_synthetic_summary():
    response = client.post(
        "/api/v1/synthetic/summary",
        json={"n_patients": 20, "seed": 1, "verbose": False},
    )
    assert response.status_code == 200

    body = response.json()
    assert body["total_persons"] == 20
    assert body["total_visits"] == 60
    assert body["total_conditions"] == 40
    assert body["total_drugs"] == 80
    assert sum(row["count"] for row in body["gender_distribution"]) == 20


def test_synthetic_summary_is_reproducible():
    payload = {"n_patients": 15, "seed": 3, "verbose": False}
    first = client.post("/api/v1/synthetic/summary", json=payload).json()
    second = client.post("/api/v1/synthetic/summary", json=payload).json()
    assert first == second


def test_synthetic_summary_rejects_invalid_options():
    response = client.post(
        "/api/v1/synthetic/summary",
        json={"n_patients": 0, "start_year": 2000, "end_year": 1990},
    )
    assert response.status_code == 422
    assert response.json()["detail"] == [
        "n_patients must be a positive integer",
        "start_year must be less than end_year",
    ]


def test_synthetic_summary_rejects_unknown_fields():
    response = client.post("/api/v1/synthetic/summary", json={"patients": 10})
    assert response.status_code == 422


def test_synthetic_summary_caps_patient_count():
    response = client.post(
        "/api/v1/synthetic/summary",
        json={"n_patients": settings.MAX_API_PATIENTS + 1},
    )
    assert response.status_code == 422


def test_datasets():
    response = client.get("/api/v1/datasets")
    assert response.status_code == 200
    assert "GiBleed" in [d["dataset_name"] for d in response.json()]


def test_concepts_by_domain():
    response = client.get("/api/v1/concepts", params={"domain": "Gender"})
    assert response.status_code == 200
    assert [c["concept_id"] for c in response.json()] == [8507, 8532]


def test_all_concepts():
    response = client.get("/api/v1/concepts")
    assert response.status_code == 200
    assert len(response.json()) == 25


def test_unknown_concept_domain():
    response = client.get("/api/v1/concepts", params={"domain": "Device"})
    assert response.status_code == 404


def test_synthetic_summary_rejects_nan_multiplier():
    # JSON encoders refuse NaN, so send the body as raw text
    response = client.post(
        "/api/v1/synthetic/summary",
        content='{"n_patients": 10, "avg_visits_per_patient": NaN}',
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 422
    assert response.json()["detail"] == ["avg_visits_per_patient must be a finite number"]


def test_synthetic_summary_caps_derived_row_count():
    response = client.post(
        "/api/v1/synthetic/summary",
        json={"n_patients": 10, "avg_visits_per_patient": 1e9},
    )
    assert response.status_code == 422
    assert "avg_visits_per_patient must not yield more than" in response.json()["detail"]
