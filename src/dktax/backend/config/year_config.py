"""Configuration loader wrapping the shared schema models."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Sequence

import yaml
from pydantic import ValidationError

from .schema import (
    BracketSchedule,
    BracketTax,
    ConfigurationError,
    EarnedIncomeCredit,
    MunicipalityDataset,
    MunicipalityTaxRate,
    SalaryDefaults,
    TaxYear,
    TaxYearConfig,
    TaxYearManifest,
    TaxYearManifestEntry,
    ThresholdEarnedIncomeCredit,
    UnsupportedTaxYearError,
)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
MANIFEST_FILE = CONFIG_DIRECTORY / "manifest.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


def load_data_file(filename: str) -> dict[str, Any]:
    """Read a YAML mapping from the configuration data directory."""

    path = CONFIG_DIRECTORY / filename
    if not path.exists():
        raise FileNotFoundError(f"Configuration data file missing: {filename}")
    return _load_yaml(path)


@lru_cache(maxsize=1)
def load_manifest() -> TaxYearManifest:
    """Load and cache the configuration manifest."""

    if not MANIFEST_FILE.exists():
        raise FileNotFoundError("Configuration manifest not found")

    raw_manifest = _load_yaml(MANIFEST_FILE)

    try:
        manifest = TaxYearManifest.model_validate(raw_manifest)
    except ValidationError as error:
        raise ConfigurationError(f"Manifest validation failed: {error}") from error

    declared = set(manifest.supported_years)
    supported = {member.value for member in TaxYear}
    if declared != supported:
        raise ConfigurationError(
            "Manifest years "
            f"{sorted(declared)} do not match the supported tax years {sorted(supported)}"
        )

    return manifest


def _manifest_entry(year: TaxYear) -> TaxYearManifestEntry:
    try:
        return load_manifest().get_entry(int(year))
    except KeyError as exc:  # pragma: no cover - guarded by load_manifest
        raise FileNotFoundError(f"Configuration for year {year} not declared in manifest") from exc


@lru_cache(maxsize=8)
def load_year_configuration(year: TaxYear) -> TaxYearConfig:
    """Load configuration for the specified tax year from disk."""

    manifest_entry = _manifest_entry(year)
    config_file = CONFIG_DIRECTORY / manifest_entry.resolved_filename
    if not config_file.exists():
        raise FileNotFoundError(
            f"Configuration file for year {int(year)} missing: {config_file.name}"
        )

    raw_config = _load_yaml(config_file)
    raw_config.setdefault("year", int(year))

    try:
        configuration = TaxYearConfig.model_validate(raw_config)
    except ValidationError as error:
        raise ConfigurationError(
            f"Configuration validation failed for {int(year)}: {error}"
        ) from error

    if configuration.year != int(year):
        raise ConfigurationError(
            f"Configuration year mismatch: expected {int(year)}, found {configuration.year}"
        )

    return configuration


@lru_cache(maxsize=1)
def tax_year_table() -> Mapping[TaxYear, TaxYearConfig]:
    """Return the read-only ``TaxYear -> TaxYearConfig`` table.

    Every member of :class:`TaxYear` has exactly one entry; the table is built
    once per process and never extended afterwards.
    """

    return MappingProxyType({year: load_year_configuration(year) for year in TaxYear})


def get_tax_year_config(year: TaxYear) -> TaxYearConfig:
    """Return the rule set for ``year``.

    Callers holding a raw integer must coerce it with
    :meth:`TaxYear.from_value`, which raises :class:`UnsupportedTaxYearError`
    for years without a rule set.
    """

    return tax_year_table()[year]


def available_years() -> Sequence[int]:
    """Return the tax years declared in the manifest."""

    return load_manifest().supported_years


def clear_caches() -> None:
    """Drop cached configuration so the next lookup re-reads the data files."""

    load_manifest.cache_clear()
    load_year_configuration.cache_clear()
    tax_year_table.cache_clear()


__all__ = [
    "BracketSchedule",
    "BracketTax",
    "CONFIG_DIRECTORY",
    "ConfigurationError",
    "EarnedIncomeCredit",
    "MANIFEST_FILE",
    "MunicipalityDataset",
    "MunicipalityTaxRate",
    "SalaryDefaults",
    "TaxYear",
    "TaxYearConfig",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "ThresholdEarnedIncomeCredit",
    "UnsupportedTaxYearError",
    "available_years",
    "clear_caches",
    "get_tax_year_config",
    "load_data_file",
    "load_manifest",
    "load_year_configuration",
    "tax_year_table",
]
