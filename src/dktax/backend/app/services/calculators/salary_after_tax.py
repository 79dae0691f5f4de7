"""Salary-after-tax pipeline for Danish employment income.

The calculation runs in a fixed order:

1. annualise the gross amount;
2. take employee pension and ATP off the top (the AM base);
3. levy AM-bidrag on the AM base, leaving personal income after AM;
4. apply the post-AM deductions as an ordered chain of stages, each capped by
   the income still left after the previous stage, to reach taxable income;
5. levy municipal, church and bundskat on taxable income;
6. levy the three bracket taxes on personal income after AM.

Every line item is rounded to the nearest krone as soon as it is computed and
only rounded values feed later steps, so the totals are exact sums of the
displayed lines. Nothing in this module raises for well-typed input: negative
and non-finite values are clamped to zero wherever they could enter the
arithmetic.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from dktax.backend.app.models import (
    BreakdownAssumptions,
    GrossPeriod,
    SalaryAfterTaxBreakdown,
    SalaryAfterTaxInputs,
)
from dktax.backend.config.schema import BracketTax, TaxYearConfig

from .utils import clamp_non_negative, round_currency

MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class DeductionStage:
    """A post-AM deduction with its uncapped (nominal) amount."""

    name: str
    nominal: int


@dataclass(frozen=True)
class AppliedDeduction:
    """Result of running a :class:`DeductionStage` against remaining income."""

    name: str
    nominal: int
    applied: int
    remaining: int


def annualise(amount: float, period: GrossPeriod) -> float:
    """Convert an entered gross amount to an annual figure."""

    safe = clamp_non_negative(amount)
    if period == "monthly":
        return safe * MONTHS_PER_YEAR
    return safe


def cumulative_bracket_tax(personal_income_after_am: float, bracket: BracketTax) -> float:
    """Tax owed for one bracket, measured from that bracket's own threshold.

    Brackets are independent: a higher bracket does not subtract the lower
    ones. This stacking is intentional and must not be rewritten as marginal
    slices.
    """

    return clamp_non_negative(personal_income_after_am - bracket.threshold) * bracket.rate


def post_am_deduction_stages(
    personal_income_after_am: int,
    inputs: SalaryAfterTaxInputs,
    config: TaxYearConfig,
) -> tuple[DeductionStage, ...]:
    """Build the post-AM deductions in the order they draw on income.

    The order decides which deduction is truncated first when income runs
    out, so it must match ``DEDUCTION_ORDER``.
    """

    stages = (
        DeductionStage("personfradrag", round_currency(config.personfradrag)),
        DeductionStage(
            "beskaeftigelsesfradrag",
            round_currency(
                config.beskaeftigelsesfradrag.nominal_amount(personal_income_after_am)
            ),
        ),
        DeductionStage(
            "jobfradrag",
            round_currency(config.jobfradrag.nominal_amount(personal_income_after_am)),
        ),
        DeductionStage("other", round_currency(inputs.other_deductions_annual)),
    )
    return stages


def apply_deduction_stages(
    income: int, stages: Sequence[DeductionStage]
) -> tuple[int, tuple[AppliedDeduction, ...]]:
    """Run ``stages`` in order against ``income``.

    Each stage applies ``min(nominal, remaining)``, so a deduction is truncated
    rather than pushing the remaining income below zero. Returns the income
    left after the last stage together with what each stage applied.
    """

    remaining = max(income, 0)
    applied: list[AppliedDeduction] = []
    for stage in stages:
        amount = min(max(stage.nominal, 0), remaining)
        remaining -= amount
        applied.append(
            AppliedDeduction(
                name=stage.name,
                nominal=stage.nominal,
                applied=amount,
                remaining=remaining,
            )
        )
    return remaining, tuple(applied)


def marginal_tax_rate(
    personal_income_after_am: float,
    municipal_tax_rate: float,
    church_tax_rate: float,
    config: TaxYearConfig,
) -> float:
    """Approximate marginal rate: flat rates plus every bracket already crossed."""

    bracket_rate = sum(
        bracket.rate
        for _, bracket in config.brackets.ordered()
        if personal_income_after_am > bracket.threshold
    )
    return (
        config.am_bidrag_rate
        + municipal_tax_rate
        + church_tax_rate
        + config.bundskat_rate
        + bracket_rate
    )


def calculate_salary_after_tax(
    inputs: SalaryAfterTaxInputs, config: TaxYearConfig
) -> SalaryAfterTaxBreakdown:
    """Compute the itemised annual breakdown for ``inputs`` under ``config``."""

    gross_annual = round_currency(annualise(inputs.gross_amount, inputs.gross_period))

    # Pension and ATP come off gross before AM; together they never exceed it.
    pension_rate = clamp_non_negative(inputs.employee_pension_rate)
    employee_pension = min(round_currency(gross_annual * pension_rate), gross_annual)
    atp = min(round_currency(inputs.atp_annual), gross_annual - employee_pension)

    am_base = gross_annual - employee_pension - atp
    am_bidrag = round_currency(am_base * config.am_bidrag_rate)
    personal_income = max(am_base - am_bidrag, 0)

    taxable_income, deductions = apply_deduction_stages(
        personal_income, post_am_deduction_stages(personal_income, inputs, config)
    )
    applied = {entry.name: entry.applied for entry in deductions}

    municipal_rate = clamp_non_negative(inputs.municipal_tax_rate)
    church_rate = clamp_non_negative(inputs.church_tax_rate) if inputs.church_member else 0.0

    municipal_tax = round_currency(taxable_income * municipal_rate)
    church_tax = round_currency(taxable_income * church_rate)
    bundskat = round_currency(taxable_income * config.bundskat_rate)

    # Thresholds compare against personal income after AM, not taxable income.
    bracket_taxes = {
        name: round_currency(cumulative_bracket_tax(personal_income, bracket))
        for name, bracket in config.brackets.ordered()
    }

    total_tax = (
        am_bidrag
        + municipal_tax
        + church_tax
        + bundskat
        + bracket_taxes["mellemskat"]
        + bracket_taxes["topskat"]
        + bracket_taxes["toptopskat"]
    )
    net_annual = max(gross_annual - employee_pension - atp - total_tax, 0)

    if gross_annual > 0:
        effective_rate = total_tax / gross_annual
        marginal_rate = marginal_tax_rate(personal_income, municipal_rate, church_rate, config)
    else:
        effective_rate = 0.0
        marginal_rate = 0.0

    return SalaryAfterTaxBreakdown(
        year=inputs.year,
        gross_annual=gross_annual,
        gross_monthly=round_currency(gross_annual / MONTHS_PER_YEAR),
        employee_pension_annual=employee_pension,
        atp_annual=atp,
        am_base_annual=am_base,
        am_bidrag_annual=am_bidrag,
        personal_income_after_am_annual=personal_income,
        personfradrag_annual=applied["personfradrag"],
        beskaeftigelsesfradrag_annual=applied["beskaeftigelsesfradrag"],
        jobfradrag_annual=applied["jobfradrag"],
        other_deductions_annual=applied["other"],
        taxable_income_annual=taxable_income,
        municipal_tax_annual=municipal_tax,
        church_tax_annual=church_tax,
        bundskat_annual=bundskat,
        mellemskat_annual=bracket_taxes["mellemskat"],
        topskat_annual=bracket_taxes["topskat"],
        toptopskat_annual=bracket_taxes["toptopskat"],
        total_tax_annual=total_tax,
        net_annual=net_annual,
        net_monthly=round_currency(net_annual / MONTHS_PER_YEAR),
        effective_tax_rate=effective_rate,
        marginal_tax_rate=marginal_rate,
        assumptions=BreakdownAssumptions(),
    )


__all__ = [
    "AppliedDeduction",
    "DeductionStage",
    "MONTHS_PER_YEAR",
    "annualise",
    "apply_deduction_stages",
    "calculate_salary_after_tax",
    "cumulative_bracket_tax",
    "marginal_tax_rate",
    "post_am_deduction_stages",
]
