"""
OMOP CDM record types for the synthetic store.

Demonstrates:
- One declarative model per CDM table with a fixed column list
- Column names and types follow OMOP CDM v5.4 for the five generated tables
- Person foreign keys on the child tables

Only person_id is declared as a foreign key. visit_occurrence_id on
conditions and drug exposures is a plain integer column: the generator
draws it independently of person_id, so it is not guaranteed to point at
a visit of the same person.
"""

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, String

from omop_synth.models.database import Base


# ---------------------------------------------------------------------------
# Person – one row per synthetic patient
# ---------------------------------------------------------------------------
class Person(Base):
    __tablename__ = "person"

    person_id = Column(Integer, primary_key=True, autoincrement=False)
    gender_concept_id = Column(Integer, nullable=False)
    year_of_birth = Column(Integer, nullable=False)
    month_of_birth = Column(Integer)
    day_of_birth = Column(Integer)
    birth_datetime = Column(DateTime)
    race_concept_id = Column(Integer, nullable=False)
    ethnicity_concept_id = Column(Integer, nullable=False)
    location_id = Column(Integer)
    provider_id = Column(Integer)
    care_site_id = Column(Integer)
    person_source_value = Column(String(50))
    gender_source_value = Column(String(50))
    gender_source_concept_id = Column(Integer)
    race_source_value = Column(String(50))
    race_source_concept_id = Column(Integer)
    ethnicity_source_value = Column(String(50))
    ethnicity_source_concept_id = Column(Integer)


# ---------------------------------------------------------------------------
# Observation Period – exactly one per person
# ---------------------------------------------------------------------------
class ObservationPeriod(Base):
    __tablename__ = "observation_period"

    observation_period_id = Column(Integer, primary_key=True, autoincrement=False)
    person_id = Column(Integer, ForeignKey("person.person_id"), nullable=False)
    observation_period_start_date = Column(Date, nullable=False)
    observation_period_end_date = Column(Date, nullable=False)
    period_type_concept_id = Column(Integer, nullable=False)


# ---------------------------------------------------------------------------
# Visit Occurrence
# ---------------------------------------------------------------------------
class VisitOccurrence(Base):
    __tablename__ = "visit_occurrence"

    visit_occurrence_id = Column(Integer, primary_key=True, autoincrement=False)
    person_id = Column(Integer, ForeignKey("person.person_id"), nullable=False)
    visit_concept_id = Column(Integer, nullable=False)
    visit_start_date = Column(Date, nullable=False)
    visit_start_datetime = Column(DateTime)
    visit_end_date = Column(Date, nullable=False)
    visit_end_datetime = Column(DateTime)
    visit_type_concept_id = Column(Integer, nullable=False)
    provider_id = Column(Integer)
    care_site_id = Column(Integer)
    visit_source_value = Column(String(50))
    visit_source_concept_id = Column(Integer)
    admitted_from_concept_id = Column(Integer)
    admitted_from_source_value = Column(String(50))
    discharged_to_concept_id = Column(Integer)
    discharged_to_source_value = Column(String(50))
    preceding_visit_occurrence_id = Column(Integer)


# ---------------------------------------------------------------------------
# Condition Occurrence
# ---------------------------------------------------------------------------
class ConditionOccurrence(Base):
    __tablename__ = "condition_occurrence"

    condition_occurrence_id = Column(Integer, primary_key=True, autoincrement=False)
    person_id = Column(Integer, ForeignKey("person.person_id"), nullable=False)
    condition_concept_id = Column(Integer, nullable=False)
    condition_start_date = Column(Date, nullable=False)
    condition_start_datetime = Column(DateTime)
    condition_end_date = Column(Date)
    condition_end_datetime = Column(DateTime)
    condition_type_concept_id = Column(Integer, nullable=False)
    condition_status_concept_id = Column(Integer)
    stop_reason = Column(String(20))
    provider_id = Column(Integer)
    visit_occurrence_id = Column(Integer)
    visit_detail_id = Column(Integer)
    condition_source_value = Column(String(50))
    condition_source_concept_id = Column(Integer)
    condition_status_source_value = Column(String(50))


# ---------------------------------------------------------------------------
# Drug Exposure
# ---------------------------------------------------------------------------
class DrugExposure(Base):
    __tablename__ = "drug_exposure"

    drug_exposure_id = Column(Integer, primary_key=True, autoincrement=False)
    person_id = Column(Integer, ForeignKey("person.person_id"), nullable=False)
    drug_concept_id = Column(Integer, nullable=False)
    drug_exposure_start_date = Column(Date, nullable=False)
    drug_exposure_start_datetime = Column(DateTime)
    drug_exposure_end_date = Column(Date, nullable=False)
    drug_exposure_end_datetime = Column(DateTime)
    verbatim_end_date = Column(Date)
    drug_type_concept_id = Column(Integer, nullable=False)
    stop_reason = Column(String(20))
    refills = Column(Integer)
    quantity = Column(Integer)
    days_supply = Column(Integer)
    sig = Column(String)
    route_concept_id = Column(Integer)
    lot_number = Column(String(50))
    provider_id = Column(Integer)
    visit_occurrence_id = Column(Integer)
    visit_detail_id = Column(Integer)
    drug_source_value = Column(String(50))
    drug_source_concept_id = Column(Integer)
    route_source_value = Column(String(50))
    dose_unit_source_value = Column(String(50))


# Generation and write order; parents before children.
CDM_TABLES = {
    "person": Person,
    "observation_period": ObservationPeriod,
    "visit_occurrence": VisitOccurrence,
    "condition_occurrence": ConditionOccurrence,
    "drug_exposure": DrugExposure,
}
