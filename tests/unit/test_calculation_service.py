"""Unit tests for the calculation service orchestration."""

from __future__ import annotations

import logging

import pytest

from dktax.backend.app.models import SalaryCalculationRequest
from dktax.backend.app.services.calculation_service import (
    build_pipeline_inputs,
    calculate_salary,
    to_display_amount,
)
from dktax.backend.config.municipalities import resolve_tax_rates
from dktax.backend.config.year_config import TaxYearConfig

COPENHAGEN_PAYLOAD = {
    "year": 2026,
    "gross_amount": 45_000,
    "gross_period": "monthly",
    "municipality_id": "101",
    "church_member": True,
}


def _line_items(result: dict) -> dict[str, dict]:
    return {item["id"]: item for item in result["line_items"]}


def test_copenhagen_church_member_breakdown() -> None:
    result = calculate_salary(COPENHAGEN_PAYLOAD)
    breakdown = result["breakdown"]

    assert breakdown["gross_annual"] == 540_000
    assert breakdown["atp_annual"] == 1_188
    assert breakdown["am_base_annual"] == 538_812
    assert breakdown["am_bidrag_annual"] == 43_105
    assert breakdown["personal_income_after_am_annual"] == 495_707
    assert breakdown["beskaeftigelsesfradrag_annual"] == 63_203
    assert breakdown["jobfradrag_annual"] == 3_100
    assert breakdown["taxable_income_annual"] == 375_304
    assert breakdown["municipal_tax_annual"] == 88_196
    assert breakdown["church_tax_annual"] == 3_002
    assert breakdown["bundskat_annual"] == 45_074
    assert breakdown["total_tax_annual"] == 179_377
    assert breakdown["net_annual"] == 359_435
    assert breakdown["net_monthly"] == 29_953

    assert result["display"] == {
        "period": "monthly",
        "gross": 45_000,
        "total_tax": 14_948,
        "net": 29_953,
    }
    assert result["municipality"]["name"] == "København"
    assert result["municipality"]["uses_default_rate"] is False
    assert result["meta"] == {"year": 2026, "locale": "en", "currency": "DKK"}


def test_line_items_are_ordered_and_signed() -> None:
    result = calculate_salary(COPENHAGEN_PAYLOAD)
    ids = [item["id"] for item in result["line_items"]]

    assert ids == [
        "gross",
        "employee_pension",
        "atp",
        "am_base",
        "am_bidrag",
        "personal_income_after_am",
        "personfradrag",
        "beskaeftigelsesfradrag",
        "jobfradrag",
        "other_deductions",
        "taxable_income",
        "municipal_tax",
        "church_tax",
        "bundskat",
        "mellemskat",
        "topskat",
        "toptopskat",
        "total_tax",
        "net",
    ]

    items = _line_items(result)
    assert items["gross"]["amount"] == 540_000
    assert items["gross"]["display_amount"] == 45_000
    assert items["am_bidrag"]["amount"] == -43_105
    assert items["atp"]["display_amount"] == -99
    assert items["total_tax"]["amount"] == -179_377
    assert items["net"]["display_amount"] == 29_953
    assert items["municipal_tax"]["label"] == "Municipal tax"
    assert items["municipal_tax"]["note"] == "rate: 23.50%"
    assert items["church_tax"]["note"] == "rate: 0.80%"


def test_annual_period_displays_annual_amounts() -> None:
    result = calculate_salary({**COPENHAGEN_PAYLOAD, "gross_amount": 540_000, "gross_period": "annual"})

    assert result["display"]["gross"] == 540_000
    assert result["display"]["net"] == result["breakdown"]["net_annual"]
    for item in result["line_items"]:
        assert item["display_amount"] == item["amount"]


def test_unknown_municipality_falls_back_to_default_rate() -> None:
    result = calculate_salary(
        {"year": 2026, "gross_amount": 30_000, "municipality_id": "nowhere", "church_member": True}
    )

    assert result["municipality"]["id"] == "average"
    assert result["municipality"]["uses_default_rate"] is True
    assert result["municipality"]["municipal_tax_rate"] == pytest.approx(0.25)
    assert result["breakdown"]["church_tax_annual"] == 0
    items = _line_items(result)
    assert items["church_tax"]["note"] == "0% (no municipality selected)"
    assert "fallback" in items["municipal_tax"]["note"]


def test_atp_is_skipped_below_eligibility_threshold() -> None:
    result = calculate_salary({"year": 2026, "gross_amount": 2_000, "gross_period": "monthly"})

    assert result["breakdown"]["atp_annual"] == 0
    assert _line_items(result)["atp"]["note"] == "0 DKK (gross/mo < 2,340)"


def test_supplied_atp_overrides_eligibility_rule() -> None:
    result = calculate_salary(
        {"year": 2026, "gross_amount": 2_000, "gross_period": "monthly", "atp_annual": 600}
    )

    assert result["breakdown"]["atp_annual"] == 600


def test_pension_rate_defaults_from_configuration(config_2026: TaxYearConfig) -> None:
    request = SalaryCalculationRequest.model_validate({"gross_amount": 40_000})
    rates = resolve_tax_rates(request.municipality_id, config_2026)

    inputs = build_pipeline_inputs(request, config_2026, rates)

    assert inputs.employee_pension_rate == config_2026.salary_defaults.employee_pension_rate
    assert inputs.atp_annual == 1_188
    assert inputs.municipal_tax_rate == pytest.approx(0.25)
    assert inputs.church_member is False


def test_danish_locale_translates_labels() -> None:
    result = calculate_salary({**COPENHAGEN_PAYLOAD, "locale": "da-DK"})

    items = _line_items(result)
    assert result["meta"]["locale"] == "da"
    assert items["municipal_tax"]["label"] == "Kommuneskat"
    assert items["net"]["label"] == "Nettoløn (år)"


def test_unsupported_year_is_a_value_error() -> None:
    with pytest.raises(ValueError, match="unsupported tax year"):
        calculate_salary({"year": 2019, "gross_amount": 1})


def test_unknown_fields_are_rejected() -> None:
    with pytest.raises(ValueError, match="Invalid calculation payload"):
        calculate_salary({"gross_amount": 1, "salary": 2})


def test_non_mapping_payload_is_rejected() -> None:
    with pytest.raises(ValueError, match="mapping"):
        calculate_salary(["not", "a", "mapping"])  # type: ignore[arg-type]


def test_empty_payload_uses_defaults() -> None:
    result = calculate_salary({})

    assert result["breakdown"]["gross_annual"] == 0
    assert result["breakdown"]["net_annual"] == 0
    assert result["display"]["period"] == "monthly"
    assert result["meta"]["year"] == 2026


@pytest.mark.parametrize(
    ("amount", "period", "expected"),
    [
        (1_200, "annual", 1_200),
        (1_200, "monthly", 100),
        (-1_200, "monthly", -100),
        (18, "monthly", 2),
        (-18, "monthly", -2),
        (0, "monthly", 0),
    ],
)
def test_to_display_amount(amount: int, period: str, expected: int) -> None:
    assert to_display_amount(amount, period) == expected  # type: ignore[arg-type]


def test_profiling_logs_section_timings(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv("DKTAX_PROFILE_CALCULATIONS", "1")

    with caplog.at_level(logging.DEBUG, logger="dktax.backend.app.services.calculation_service"):
        calculate_salary(COPENHAGEN_PAYLOAD)

    assert any("calculate_salary timings" in record.message for record in caplog.records)
