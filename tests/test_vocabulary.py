"""Tests for the sample concept lookup."""

import pytest

from omop_synth.etl.synthetic import (
    CONDITION_CONCEPT_IDS,
    DRUG_CONCEPT_IDS,
    ETHNICITY_CONCEPT_IDS,
    GENDER_CONCEPT_IDS,
    RACE_CONCEPT_IDS,
    VISIT_CONCEPT_IDS,
)
from omop_synth.services.vocabulary import (
    SAMPLE_CONCEPTS,
    concept_ids,
    concept_name,
    concepts_for_domain,
    domains,
    get_concept,
)


def test_concept_ids_unique():
    ids = [c.concept_id for c in SAMPLE_CONCEPTS]
    assert len(ids) == len(set(ids))


def test_lookup_by_id():
    assert get_concept(8532).concept_name == "Female"
    assert concept_name(1125315) == "Metformin"
    assert concept_name(1, default="n/a") == "n/a"
    with pytest.raises(KeyError):
        get_concept(1)


def test_domains():
    assert domains() == [
        "Condition",
        "Drug",
        "Ethnicity",
        "Gender",
        "Measurement",
        "Race",
        "Visit",
    ]
    assert concept_ids("Gender") == (8507, 8532)
    assert [c.concept_code for c in concepts_for_domain("Visit")] == ["IP", "OP", "ER", "EI"]
    assert concepts_for_domain("Device") == []


@pytest.mark.parametrize(
    "domain,generated",
    [
        ("Gender", GENDER_CONCEPT_IDS),
        ("Race", RACE_CONCEPT_IDS),
        ("Ethnicity", ETHNICITY_CONCEPT_IDS),
        ("Visit", VISIT_CONCEPT_IDS),
        ("Condition", CONDITION_CONCEPT_IDS),
        ("Drug", DRUG_CONCEPT_IDS),
    ],
)
def test_generated_codes_are_known_concepts(domain, generated):
    assert set(generated) <= set(concept_ids(domain))
