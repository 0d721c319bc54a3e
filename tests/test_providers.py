"""Tests for the external dataset catalog and provider hook."""

import pytest

from omop_synth.config import settings
from omop_synth.services.providers import (
    ProviderError,
    ProviderNotConfiguredError,
    connect_dataset,
    get_available_datasets,
)
from omop_synth.services.validation import InvalidArgumentError


class RecordingProvider:
    def __init__(self):
        self.calls = []

    def connect(self, dataset_name, cdm_version, data_folder):
        self.calls.append((dataset_name, cdm_version, data_folder))
        return {"dataset": dataset_name, "version": cdm_version}


class FailingProvider:
    def connect(self, dataset_name, cdm_version, data_folder):
        raise ConnectionError("download refused")


def test_catalog_lists_datasets():
    datasets = get_available_datasets()
    names = [d.dataset_name for d in datasets]

    assert len(datasets) == 19
    assert "GiBleed" in names
    assert all(d.description for d in datasets)


def test_connect_delegates_to_provider():
    provider = RecordingProvider()
    result = connect_dataset(provider, "synpuf-1k", "5.4", verbose=False)

    assert result == {"dataset": "synpuf-1k", "version": "5.4"}
    assert provider.calls == [("synpuf-1k", "5.4", settings.EUNOMIA_DATA_FOLDER)]


def test_default_dataset_and_version():
    provider = RecordingProvider()
    connect_dataset(provider, verbose=False)
    assert provider.calls == [("GiBleed", "5.3", settings.EUNOMIA_DATA_FOLDER)]


def test_missing_provider_is_configuration_error():
    with pytest.raises(ProviderNotConfiguredError):
        connect_dataset(None)


def test_invalid_dataset_rejected_before_provider_called():
    provider = RecordingProvider()
    with pytest.raises(InvalidArgumentError, match="Invalid dataset_name"):
        connect_dataset(provider, "invalid_dataset")
    assert provider.calls == []


def test_invalid_cdm_version_rejected():
    with pytest.raises(InvalidArgumentError, match="cdm_version must be"):
        connect_dataset(RecordingProvider(), "GiBleed", "invalid_version")


def test_provider_failure_wrapped():
    with pytest.raises(ProviderError, match="Failed to setup CDM: download refused") as excinfo:
        connect_dataset(FailingProvider(), verbose=False)
    assert isinstance(excinfo.value.__cause__, ConnectionError)


def test_data_folder_defaults_to_setting(monkeypatch):
    monkeypatch.setattr(settings, "EUNOMIA_DATA_FOLDER", "/var/cache/eunomia")
    provider = RecordingProvider()
    connect_dataset(provider, verbose=False)
    assert provider.calls == [("GiBleed", "5.3", "/var/cache/eunomia")]


def test_explicit_data_folder_wins(monkeypatch):
    monkeypatch.setattr(settings, "EUNOMIA_DATA_FOLDER", "/var/cache/eunomia")
    provider = RecordingProvider()
    connect_dataset(provider, "synpuf-1k", data_folder="/tmp/cdm", verbose=False)
    assert provider.calls == [("synpuf-1k", "5.3", "/tmp/cdm")]
