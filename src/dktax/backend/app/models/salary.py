"""Value objects flowing in and out of the salary-after-tax pipeline."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from dktax.backend.config.schema import TaxYear

GrossPeriod = Literal["monthly", "annual"]

DEDUCTION_ORDER: tuple[str, ...] = (
    "personfradrag",
    "beskaeftigelsesfradrag",
    "jobfradrag",
    "other",
)


class SalaryAfterTaxInputs(BaseModel):
    """Inputs for a single pipeline run.

    Numeric fields deliberately accept negative and non-finite values; the
    pipeline clamps them to zero at the point of use.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    year: TaxYear
    gross_amount: float
    gross_period: GrossPeriod = "annual"
    employee_pension_rate: float = 0.0
    atp_annual: float = 0.0
    other_deductions_annual: float = 0.0
    municipal_tax_rate: float
    church_tax_rate: float = 0.0
    church_member: bool = False


class BreakdownAssumptions(BaseModel):
    """Modelling choices in force for a breakdown, read by consumers at runtime."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    rounding: Literal["nearest-dkk-each-line-item"] = "nearest-dkk-each-line-item"
    thresholds_based_on: Literal["personal-income-after-am"] = "personal-income-after-am"
    # Bracket taxes stack: each is charged from its own threshold and summed.
    bracket_taxes_are_cumulative: bool = True
    deductions_capped_sequentially: bool = True
    deduction_order: tuple[str, ...] = Field(default=DEDUCTION_ORDER)


class SalaryAfterTaxBreakdown(BaseModel):
    """Fully itemised, already-rounded annual tax breakdown.

    Currency amounts are whole kroner; rates are fractions.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    year: TaxYear

    gross_annual: int
    gross_monthly: int

    employee_pension_annual: int
    atp_annual: int

    am_base_annual: int
    am_bidrag_annual: int

    personal_income_after_am_annual: int

    personfradrag_annual: int
    beskaeftigelsesfradrag_annual: int
    jobfradrag_annual: int
    other_deductions_annual: int

    taxable_income_annual: int

    municipal_tax_annual: int
    church_tax_annual: int
    bundskat_annual: int
    mellemskat_annual: int
    topskat_annual: int
    toptopskat_annual: int

    total_tax_annual: int
    net_annual: int
    net_monthly: int

    effective_tax_rate: float
    marginal_tax_rate: float

    assumptions: BreakdownAssumptions = Field(default_factory=BreakdownAssumptions)

    @property
    def tax_lines(self) -> tuple[int, ...]:
        """Individual tax line items whose sum is ``total_tax_annual``."""

        return (
            self.am_bidrag_annual,
            self.municipal_tax_annual,
            self.church_tax_annual,
            self.bundskat_annual,
            self.mellemskat_annual,
            self.topskat_annual,
            self.toptopskat_annual,
        )

    @property
    def deductions_applied_annual(self) -> int:
        return (
            self.personfradrag_annual
            + self.beskaeftigelsesfradrag_annual
            + self.jobfradrag_annual
            + self.other_deductions_annual
        )


__all__ = [
    "DEDUCTION_ORDER",
    "BreakdownAssumptions",
    "GrossPeriod",
    "SalaryAfterTaxBreakdown",
    "SalaryAfterTaxInputs",
]
