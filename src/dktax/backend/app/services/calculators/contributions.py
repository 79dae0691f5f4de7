"""Caller-side helpers for contributions the pipeline takes as given."""

from __future__ import annotations

from dktax.backend.app.models import GrossPeriod
from dktax.backend.config.schema import SalaryDefaults

from .salary_after_tax import MONTHS_PER_YEAR
from .utils import clamp_non_negative


def gross_monthly_equivalent(amount: float, period: GrossPeriod) -> float:
    """Express an entered gross amount per month."""

    safe = clamp_non_negative(amount)
    return safe if period == "monthly" else safe / MONTHS_PER_YEAR


def calculate_atp_annual(amount: float, period: GrossPeriod, defaults: SalaryDefaults) -> float:
    """Return the employee ATP share for a year of salary.

    ATP is only owed above a monthly working-hours limit. Hours are not
    collected, so eligibility is approximated by the monthly gross salary.
    """

    monthly_gross = gross_monthly_equivalent(amount, period)
    if monthly_gross < defaults.atp_eligibility_gross_monthly_threshold:
        return 0.0
    return defaults.atp_monthly_amount * MONTHS_PER_YEAR
