"""Domain-specific calculation helpers."""

from .contributions import calculate_atp_annual, gross_monthly_equivalent
from .salary_after_tax import (
    AppliedDeduction,
    DeductionStage,
    MONTHS_PER_YEAR,
    annualise,
    apply_deduction_stages,
    calculate_salary_after_tax,
    cumulative_bracket_tax,
    marginal_tax_rate,
    post_am_deduction_stages,
)
from .utils import (
    clamp_non_negative,
    format_currency,
    format_percentage,
    round_currency,
)

__all__ = [
    "AppliedDeduction",
    "DeductionStage",
    "MONTHS_PER_YEAR",
    "annualise",
    "apply_deduction_stages",
    "calculate_atp_annual",
    "calculate_salary_after_tax",
    "clamp_non_negative",
    "cumulative_bracket_tax",
    "format_currency",
    "format_percentage",
    "gross_monthly_equivalent",
    "marginal_tax_rate",
    "post_am_deduction_stages",
    "round_currency",
]
