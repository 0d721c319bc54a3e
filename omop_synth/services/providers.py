"""
Catalog of external OMOP CDM datasets and an injectable provider hook.

The package does not download or connect to external datasets itself.
A provider (e.g. a wrapper around an Eunomia/CDMConnector client) is
passed in by the caller; this module validates the request and delegates.
"""

from __future__ import annotations

import logging
from typing import Any, Protocol

from omop_synth.config import settings
from omop_synth.schemas.api import DatasetInfo
from omop_synth.services.validation import InvalidArgumentError

logger = logging.getLogger(__name__)

AVAILABLE_DATASETS: dict[str, str] = {
    "GiBleed": "Default small dataset for testing",
    "synthea-allergies-10k": "Synthea allergies data (10k patients)",
    "synthea-anemia-10k": "Synthea anemia data (10k patients)",
    "synthea-breast_cancer-10k": "Synthea breast cancer data (10k patients)",
    "synthea-contraceptives-10k": "Synthea contraceptives data (10k patients)",
    "synthea-covid19-10k": "Synthea COVID-19 data (10k patients)",
    "synthea-covid19-200k": "Synthea COVID-19 data (200k patients)",
    "synthea-dermatitis-10k": "Synthea dermatitis data (10k patients)",
    "synthea-heart-10k": "Synthea heart disease data (10k patients)",
    "synthea-hiv-10k": "Synthea HIV data (10k patients)",
    "synthea-lung_cancer-10k": "Synthea lung cancer data (10k patients)",
    "synthea-medications-10k": "Synthea medications data (10k patients)",
    "synthea-metabolic_syndrome-10k": "Synthea metabolic syndrome data (10k patients)",
    "synthea-opioid_addiction-10k": "Synthea opioid addiction data (10k patients)",
    "synthea-rheumatoid_arthritis-10k": "Synthea rheumatoid arthritis data (10k patients)",
    "synthea-snf-10k": "Synthea skilled nursing facility data (10k patients)",
    "synthea-surgery-10k": "Synthea surgery data (10k patients)",
    "synthea-total_joint_replacement-10k": "Synthea joint replacement data (10k patients)",
    "synpuf-1k": "CMS Synthetic Public Use Files (1k patients)",
}

SUPPORTED_CDM_VERSIONS = ("5.3", "5.4")


class ProviderNotConfiguredError(RuntimeError):
    """No CDM provider was supplied."""


class ProviderError(RuntimeError):
    """The provider failed to produce a CDM."""


class CDMProvider(Protocol):
    def connect(
        self, dataset_name: str, cdm_version: str, data_folder: str | None
    ) -> Any: ...


def get_available_datasets() -> list[DatasetInfo]:
    return [
        DatasetInfo(dataset_name=name, description=description)
        for name, description in AVAILABLE_DATASETS.items()
    ]


def connect_dataset(
    provider: CDMProvider | None,
    dataset_name: str = "GiBleed",
    cdm_version: str = "5.3",
    *,
    data_folder: str | None = None,
    verbose: bool = True,
) -> Any:
    """
    Validate a dataset request and hand it to the provider.

    data_folder defaults to settings.EUNOMIA_DATA_FOLDER. Returns whatever
    the provider's connect() returns.
    """
    if provider is None:
        raise ProviderNotConfiguredError(
            "No CDM provider configured; pass a provider implementing connect()"
        )
    if dataset_name not in AVAILABLE_DATASETS:
        raise InvalidArgumentError(
            ["Invalid dataset_name. Available options: " + ", ".join(AVAILABLE_DATASETS)]
        )
    if cdm_version not in SUPPORTED_CDM_VERSIONS:
        raise InvalidArgumentError(["cdm_version must be '5.3' or '5.4'"])

    if verbose:
        logger.info("Setting up OMOP CDM with dataset: %s (CDM %s)", dataset_name, cdm_version)

    if data_folder is None:
        data_folder = settings.EUNOMIA_DATA_FOLDER

    try:
        return provider.connect(dataset_name, cdm_version, data_folder)
    except Exception as exc:
        raise ProviderError(f"Failed to setup CDM: {exc}") from exc
