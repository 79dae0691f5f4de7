"""Municipality tax rate lookup and fallback resolution."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from pydantic import ValidationError

from . import year_config
from .schema import (
    ConfigurationError,
    MunicipalityDataset,
    MunicipalityTaxRate,
    TaxYear,
    TaxYearConfig,
)

AVERAGE_MUNICIPALITY = "average"


@dataclass(frozen=True)
class ResolvedTaxRates:
    """Municipal and church rates ready to feed into the pipeline."""

    municipal_tax_rate: float
    church_tax_rate: float
    municipality: MunicipalityTaxRate | None = None

    @property
    def uses_default_rate(self) -> bool:
        return self.municipality is None


@lru_cache(maxsize=8)
def load_municipality_dataset(year: TaxYear) -> MunicipalityDataset:
    """Load and cache the municipality dataset declared for ``year``."""

    entry = year_config.load_manifest().get_entry(int(year))
    raw_dataset = year_config.load_data_file(entry.resolved_municipalities_filename)
    raw_dataset.setdefault("year", int(year))

    try:
        dataset = MunicipalityDataset.model_validate(raw_dataset)
    except ValidationError as error:
        raise ConfigurationError(
            f"Municipality dataset validation failed for {int(year)}: {error}"
        ) from error

    if dataset.year != int(year):
        raise ConfigurationError(
            f"Municipality dataset year mismatch: expected {int(year)}, found {dataset.year}"
        )
    return dataset


def _coerce_municipality_id(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text or text.lower() == AVERAGE_MUNICIPALITY:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def find_municipality(
    municipality_id: Any, year: TaxYear = TaxYear.Y2026
) -> MunicipalityTaxRate | None:
    """Return the municipality for ``municipality_id`` or ``None`` when absent.

    The ``"average"`` selection, blanks and unknown identifiers all resolve to
    ``None``.
    """

    resolved_id = _coerce_municipality_id(municipality_id)
    if resolved_id is None:
        return None
    return load_municipality_dataset(year).get(resolved_id)


def resolve_tax_rates(municipality_id: Any, config: TaxYearConfig) -> ResolvedTaxRates:
    """Resolve the municipal/church rate pair for a selection.

    Unknown selections fall back to the year's default municipal rate with no
    church tax; the dataset carries no population-average church rate.
    """

    municipality = find_municipality(municipality_id, TaxYear.from_value(config.year))
    if municipality is None:
        return ResolvedTaxRates(
            municipal_tax_rate=config.default_municipal_tax_rate,
            church_tax_rate=0.0,
        )
    return ResolvedTaxRates(
        municipal_tax_rate=municipality.municipal_tax_rate,
        church_tax_rate=municipality.church_tax_rate,
        municipality=municipality,
    )


__all__ = [
    "AVERAGE_MUNICIPALITY",
    "ResolvedTaxRates",
    "find_municipality",
    "load_municipality_dataset",
    "resolve_tax_rates",
]
