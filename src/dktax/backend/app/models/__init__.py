"""Typed inputs and results shared across the calculation services.

The pipeline consumes a frozen :class:`SalaryAfterTaxInputs` and produces a
frozen :class:`SalaryAfterTaxBreakdown`. Both are plain value objects: the
pipeline keeps no reference to either after it returns, and callers must not
mutate a breakdown once rendered. The request/response shapes of the HTTP
surface live in :mod:`.api`.
"""

from __future__ import annotations

from .api import (
    CalculationResponse,
    DisplayAmounts,
    LineItem,
    MunicipalitySelection,
    ResponseMeta,
    SalaryCalculationRequest,
    format_validation_error,
)
from .salary import (
    DEDUCTION_ORDER,
    BreakdownAssumptions,
    GrossPeriod,
    SalaryAfterTaxBreakdown,
    SalaryAfterTaxInputs,
)

__all__ = [
    "DEDUCTION_ORDER",
    "BreakdownAssumptions",
    "CalculationResponse",
    "DisplayAmounts",
    "GrossPeriod",
    "LineItem",
    "MunicipalitySelection",
    "ResponseMeta",
    "SalaryAfterTaxBreakdown",
    "SalaryAfterTaxInputs",
    "SalaryCalculationRequest",
    "format_validation_error",
]
