"""Unit tests for municipality lookup and rate fallback."""

from __future__ import annotations

import pytest

from dktax.backend.config.municipalities import (
    find_municipality,
    load_municipality_dataset,
    resolve_tax_rates,
)
from dktax.backend.config.year_config import TaxYear, TaxYearConfig


def test_dataset_loads_for_supported_year() -> None:
    dataset = load_municipality_dataset(TaxYear.Y2026)

    assert dataset.year == 2026
    assert len(dataset.municipalities) > 0
    ids = [entry.id for entry in dataset.municipalities]
    assert len(ids) == len(set(ids))


def test_find_municipality_by_numeric_or_string_id() -> None:
    by_int = find_municipality(101)
    by_str = find_municipality(" 101 ")

    assert by_int is not None
    assert by_int == by_str
    assert by_int.name == "København"
    assert by_int.municipal_tax_rate == pytest.approx(0.235)
    assert by_int.church_tax_rate == pytest.approx(0.008)


@pytest.mark.parametrize("selection", ["average", "AVERAGE", "", "   ", None, "9999", "abc", True])
def test_unknown_selections_have_no_municipality(selection: object) -> None:
    assert find_municipality(selection) is None


@pytest.mark.parametrize("selection", ["average", None, "", "9999"])
def test_fallback_uses_default_rate_without_church_tax(
    config_2026: TaxYearConfig, selection: object
) -> None:
    rates = resolve_tax_rates(selection, config_2026)

    assert rates.uses_default_rate is True
    assert rates.municipality is None
    assert rates.municipal_tax_rate == pytest.approx(0.25)
    assert rates.church_tax_rate == 0


def test_known_municipality_supplies_both_rates(config_2026: TaxYearConfig) -> None:
    rates = resolve_tax_rates("751", config_2026)

    assert rates.uses_default_rate is False
    assert rates.municipality is not None
    assert rates.municipality.name == "Aarhus"
    assert rates.municipal_tax_rate == pytest.approx(0.2452)
    assert rates.church_tax_rate == pytest.approx(0.0074)
