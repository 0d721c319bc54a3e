"""
Illustrative OMOP concept lookup.

A small, fixed subset of the OMOP Standardized Vocabularies: enough to
label the codes the synthetic generator emits. Not a vocabulary service.
"""

from __future__ import annotations

from typing import NamedTuple


class Concept(NamedTuple):
    concept_id: int
    concept_name: str
    domain_id: str
    vocabulary_id: str
    concept_class_id: str
    concept_code: str


SAMPLE_CONCEPTS: tuple[Concept, ...] = (
    # Gender
    Concept(8507, "Male", "Gender", "Gender", "Gender", "M"),
    Concept(8532, "Female", "Gender", "Gender", "Gender", "F"),
    # Race
    Concept(8515, "Asian", "Race", "Race", "Race", "Asian"),
    Concept(8516, "Black or African American", "Race", "Race", "Race", "Black"),
    Concept(8527, "White", "Race", "Race", "Race", "White"),
    Concept(8557, "Native Hawaiian or Other Pacific Islander", "Race", "Race", "Race", "Pacific Islander"),
    # Ethnicity
    Concept(38003563, "Hispanic or Latino", "Ethnicity", "Ethnicity", "Ethnicity", "Hispanic"),
    Concept(38003564, "Not Hispanic or Latino", "Ethnicity", "Ethnicity", "Ethnicity", "Not Hispanic"),
    # Conditions
    Concept(201820, "Diabetes mellitus", "Condition", "SNOMED", "Clinical Finding", "73211009"),
    Concept(141932, "Hypertensive disorder", "Condition", "SNOMED", "Clinical Finding", "38341003"),
    Concept(372906, "Hyperlipidemia", "Condition", "SNOMED", "Clinical Finding", "55822004"),
    Concept(4329847, "Myocardial infarction", "Condition", "SNOMED", "Clinical Finding", "22298006"),
    Concept(313217, "Atrial fibrillation", "Condition", "SNOMED", "Clinical Finding", "49436004"),
    Concept(314866, "Heart failure", "Condition", "SNOMED", "Clinical Finding", "84114007"),
    # Drugs
    Concept(1125315, "Metformin", "Drug", "RxNorm", "Ingredient", "6809"),
    Concept(1154343, "Atorvastatin", "Drug", "RxNorm", "Ingredient", "83367"),
    Concept(907013, "Lisinopril", "Drug", "RxNorm", "Ingredient", "29046"),
    Concept(974166, "Amlodipine", "Drug", "RxNorm", "Ingredient", "17767"),
    # Visits
    Concept(9201, "Inpatient Visit", "Visit", "Visit", "Visit", "IP"),
    Concept(9202, "Outpatient Visit", "Visit", "Visit", "Visit", "OP"),
    Concept(9203, "Emergency Room Visit", "Visit", "Visit", "Visit", "ER"),
    Concept(262, "Emergency Room and Inpatient Visit", "Visit", "Visit", "Visit", "EI"),
    # Measurements
    Concept(3025315, "Hemoglobin", "Measurement", "LOINC", "Lab Test", "718-7"),
    Concept(3012888, "Body weight", "Measurement", "LOINC", "Clinical Observation", "29463-7"),
    Concept(3004249, "Blood pressure", "Measurement", "LOINC", "Clinical Observation", "85354-9"),
)

_BY_ID: dict[int, Concept] = {c.concept_id: c for c in SAMPLE_CONCEPTS}


def get_concept(concept_id: int) -> Concept:
    """Raises KeyError for ids outside the sample table."""
    return _BY_ID[concept_id]


def concept_name(concept_id: int, default: str = "Unknown") -> str:
    concept = _BY_ID.get(concept_id)
    return concept.concept_name if concept else default


def concepts_for_domain(domain_id: str) -> list[Concept]:
    return [c for c in SAMPLE_CONCEPTS if c.domain_id == domain_id]


def concept_ids(domain_id: str) -> tuple[int, ...]:
    return tuple(c.concept_id for c in concepts_for_domain(domain_id))


def domains() -> list[str]:
    return sorted({c.domain_id for c in SAMPLE_CONCEPTS})
