"""Orchestrate request validation, rate resolution and the salary pipeline.

The service owns everything the pipeline deliberately leaves to its caller:
resolving the municipality to a rate pair, deciding ATP eligibility, picking
up year defaults, and presenting the breakdown as labelled line items in the
period the gross amount was entered in.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from time import perf_counter
from typing import Any

from pydantic import ValidationError

from dktax.backend.app.localization import Translator, get_translator
from dktax.backend.app.models import (
    CalculationResponse,
    DisplayAmounts,
    GrossPeriod,
    LineItem,
    MunicipalitySelection,
    ResponseMeta,
    SalaryAfterTaxBreakdown,
    SalaryAfterTaxInputs,
    SalaryCalculationRequest,
    format_validation_error,
)
from dktax.backend.config.municipalities import (
    AVERAGE_MUNICIPALITY,
    ResolvedTaxRates,
    resolve_tax_rates,
)
from dktax.backend.config.year_config import TaxYearConfig, get_tax_year_config

from .calculators import (
    MONTHS_PER_YEAR,
    calculate_atp_annual,
    calculate_salary_after_tax,
    format_currency,
    format_percentage,
    round_currency,
)

_LOGGER = logging.getLogger(__name__)


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("DKTAX_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _validate_request(
    payload: Mapping[str, Any] | SalaryCalculationRequest,
) -> SalaryCalculationRequest:
    if isinstance(payload, SalaryCalculationRequest):
        return payload
    if not isinstance(payload, Mapping):
        raise ValueError("Payload must be a mapping")
    try:
        return SalaryCalculationRequest.model_validate(payload)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc)) from exc


def build_pipeline_inputs(
    request: SalaryCalculationRequest,
    config: TaxYearConfig,
    rates: ResolvedTaxRates,
) -> SalaryAfterTaxInputs:
    """Fill in year defaults and caller-side decisions for the pipeline."""

    defaults = config.salary_defaults
    pension_rate = (
        request.employee_pension_rate
        if request.employee_pension_rate is not None
        else defaults.employee_pension_rate
    )
    if request.atp_annual is not None:
        atp_annual = request.atp_annual
    else:
        atp_annual = calculate_atp_annual(
            request.gross_amount, request.gross_period, defaults
        )

    return SalaryAfterTaxInputs(
        year=request.year,
        gross_amount=request.gross_amount,
        gross_period=request.gross_period,
        employee_pension_rate=pension_rate,
        atp_annual=atp_annual,
        other_deductions_annual=request.other_deductions_annual,
        municipal_tax_rate=rates.municipal_tax_rate,
        church_tax_rate=rates.church_tax_rate,
        church_member=request.church_member,
    )


def to_display_amount(amount: int, period: GrossPeriod) -> int:
    """Express a signed annual amount in ``period``."""

    if period == "annual":
        return amount
    monthly = round_currency(abs(amount) / MONTHS_PER_YEAR)
    return -monthly if amount < 0 else monthly


def _atp_note(
    request: SalaryCalculationRequest, config: TaxYearConfig, translator: Translator
) -> str:
    if request.atp_annual is not None:
        return translator("note.atp_supplied")

    defaults = config.salary_defaults
    threshold = format_currency(defaults.atp_eligibility_gross_monthly_threshold)
    if calculate_atp_annual(request.gross_amount, request.gross_period, defaults) > 0:
        return translator.format(
            "note.atp_eligible",
            monthly=format_currency(defaults.atp_monthly_amount),
            threshold=threshold,
        )
    return translator.format("note.atp_not_eligible", threshold=threshold)


def _church_note(
    request: SalaryCalculationRequest, rates: ResolvedTaxRates, translator: Translator
) -> str:
    if not request.church_member:
        return translator("note.church_tax_disabled")
    if rates.uses_default_rate:
        return translator("note.church_tax_no_municipality")
    return translator.format("note.church_tax", rate=format_percentage(rates.church_tax_rate))


def build_line_items(
    breakdown: SalaryAfterTaxBreakdown,
    request: SalaryCalculationRequest,
    config: TaxYearConfig,
    rates: ResolvedTaxRates,
    translator: Translator,
) -> list[LineItem]:
    """Render ``breakdown`` as ordered, signed and labelled rows.

    Subtotals (AM base, personal income, taxable income, net) are positive;
    amounts taken off them are negative.
    """

    municipal_key = (
        "note.municipal_tax_default" if rates.uses_default_rate else "note.municipal_tax"
    )
    brackets = dict(config.brackets.ordered())

    def bracket_note(name: str) -> str:
        bracket = brackets[name]
        return translator.format(
            "note.bracket",
            rate=format_percentage(bracket.rate),
            threshold=format_currency(bracket.threshold),
        )

    rows: list[tuple[str, int, str | None]] = [
        ("gross", breakdown.gross_annual, translator("note.gross")),
        (
            "employee_pension",
            -breakdown.employee_pension_annual,
            translator("note.employee_pension"),
        ),
        ("atp", -breakdown.atp_annual, _atp_note(request, config, translator)),
        ("am_base", breakdown.am_base_annual, translator("note.am_base")),
        (
            "am_bidrag",
            -breakdown.am_bidrag_annual,
            translator.format("note.am_bidrag", rate=format_percentage(config.am_bidrag_rate)),
        ),
        (
            "personal_income_after_am",
            breakdown.personal_income_after_am_annual,
            translator("note.personal_income_after_am"),
        ),
        (
            "personfradrag",
            -breakdown.personfradrag_annual,
            translator.format(
                "note.personfradrag", amount=format_currency(config.personfradrag)
            ),
        ),
        (
            "beskaeftigelsesfradrag",
            -breakdown.beskaeftigelsesfradrag_annual,
            translator.format(
                "note.beskaeftigelsesfradrag",
                rate=format_percentage(config.beskaeftigelsesfradrag.rate),
                cap=format_currency(config.beskaeftigelsesfradrag.max_amount),
            ),
        ),
        (
            "jobfradrag",
            -breakdown.jobfradrag_annual,
            translator.format(
                "note.jobfradrag",
                rate=format_percentage(config.jobfradrag.rate),
                threshold=format_currency(config.jobfradrag.income_threshold),
                cap=format_currency(config.jobfradrag.max_amount),
            ),
        ),
        (
            "other_deductions",
            -breakdown.other_deductions_annual,
            translator("note.other_deductions"),
        ),
        (
            "taxable_income",
            breakdown.taxable_income_annual,
            translator("note.taxable_income"),
        ),
        (
            "municipal_tax",
            -breakdown.municipal_tax_annual,
            translator.format(municipal_key, rate=format_percentage(rates.municipal_tax_rate)),
        ),
        ("church_tax", -breakdown.church_tax_annual, _church_note(request, rates, translator)),
        (
            "bundskat",
            -breakdown.bundskat_annual,
            translator.format("note.bundskat", rate=format_percentage(config.bundskat_rate)),
        ),
        ("mellemskat", -breakdown.mellemskat_annual, bracket_note("mellemskat")),
        ("topskat", -breakdown.topskat_annual, bracket_note("topskat")),
        ("toptopskat", -breakdown.toptopskat_annual, bracket_note("toptopskat")),
        ("total_tax", -breakdown.total_tax_annual, translator("note.total_tax")),
        ("net", breakdown.net_annual, translator("note.net")),
    ]

    period = request.gross_period
    items: list[LineItem] = []
    for line_id, amount, note in rows:
        if line_id == "net" and period == "monthly":
            display_amount = breakdown.net_monthly
        else:
            display_amount = to_display_amount(amount, period)
        items.append(
            LineItem(
                id=line_id,
                label=translator(f"line.{line_id}"),
                amount=amount,
                display_amount=display_amount,
                note=note,
            )
        )
    return items


def build_display_amounts(
    breakdown: SalaryAfterTaxBreakdown, period: GrossPeriod
) -> DisplayAmounts:
    """Headline figures for the period the gross amount was entered in."""

    if period == "annual":
        return DisplayAmounts(
            period=period,
            gross=breakdown.gross_annual,
            total_tax=breakdown.total_tax_annual,
            net=breakdown.net_annual,
        )
    return DisplayAmounts(
        period=period,
        gross=breakdown.gross_monthly,
        total_tax=to_display_amount(breakdown.total_tax_annual, period),
        net=breakdown.net_monthly,
    )


def _municipality_selection(
    rates: ResolvedTaxRates, translator: Translator
) -> MunicipalitySelection:
    if rates.municipality is None:
        return MunicipalitySelection(
            id=AVERAGE_MUNICIPALITY,
            name=translator("municipality.average"),
            municipal_tax_rate=rates.municipal_tax_rate,
            church_tax_rate=rates.church_tax_rate,
            uses_default_rate=True,
        )
    return MunicipalitySelection(
        id=str(rates.municipality.id),
        name=rates.municipality.name,
        municipal_tax_rate=rates.municipal_tax_rate,
        church_tax_rate=rates.church_tax_rate,
        uses_default_rate=False,
    )


def calculate_salary(
    payload: Mapping[str, Any] | SalaryCalculationRequest,
) -> dict[str, Any]:
    """Compute the salary-after-tax response for the provided payload."""

    request_model = _validate_request(payload)

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    config = get_tax_year_config(request_model.year)
    translator = get_translator(request_model.locale)

    with _profile_section("resolve_rates", timings):
        rates = resolve_tax_rates(request_model.municipality_id, config)
    if rates.uses_default_rate and request_model.municipality_id != AVERAGE_MUNICIPALITY:
        _LOGGER.debug(
            "Unknown municipality %r; using default rate %.4f",
            request_model.municipality_id,
            config.default_municipal_tax_rate,
        )

    with _profile_section("pipeline", timings):
        inputs = build_pipeline_inputs(request_model, config, rates)
        breakdown = calculate_salary_after_tax(inputs, config)

    with _profile_section("presentation", timings):
        response = CalculationResponse(
            breakdown=breakdown,
            line_items=build_line_items(breakdown, request_model, config, rates, translator),
            display=build_display_amounts(breakdown, request_model.gross_period),
            municipality=_municipality_selection(rates, translator),
            meta=ResponseMeta(year=int(request_model.year), locale=translator.locale),
        )

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
        _LOGGER.debug(
            "calculate_salary timings (ms): %s",
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )

    return response.model_dump(mode="json")


__all__ = [
    "build_display_amounts",
    "build_line_items",
    "build_pipeline_inputs",
    "calculate_salary",
    "to_display_amount",
]
