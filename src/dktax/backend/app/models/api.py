"""Pydantic models describing the public API surface."""

from __future__ import annotations

from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
)

from dktax.backend.config.schema import TaxYear

from .salary import GrossPeriod, SalaryAfterTaxBreakdown

__all__ = [
    "SalaryCalculationRequest",
    "LineItem",
    "DisplayAmounts",
    "MunicipalitySelection",
    "ResponseMeta",
    "CalculationResponse",
    "format_validation_error",
]


class SalaryCalculationRequest(BaseModel):
    """Payload accepted by the salary-after-tax endpoint.

    Only structure is validated here. Out-of-range numbers (negative amounts,
    pension rates above 100%) are passed through and clamped by the pipeline.
    """

    model_config = ConfigDict(extra="forbid")

    year: TaxYear = TaxYear.Y2026
    locale: str = Field(default="en")
    gross_amount: float = 0.0
    gross_period: GrossPeriod = "monthly"
    employee_pension_rate: float | None = None
    atp_annual: float | None = None
    other_deductions_annual: float = 0.0
    municipality_id: str = "average"
    church_member: bool = False

    @field_validator("locale", mode="before")
    @classmethod
    def _normalise_locale(cls, value: Any) -> str:
        if value is None:
            return "en"
        text = str(value).strip()
        return text or "en"

    @field_validator("gross_period", mode="before")
    @classmethod
    def _normalise_period(cls, value: Any) -> Any:
        if value is None:
            return "monthly"
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("municipality_id", mode="before")
    @classmethod
    def _normalise_municipality(cls, value: Any) -> str:
        if value is None or isinstance(value, bool):
            return "average"
        text = str(value).strip()
        return text or "average"


class LineItem(BaseModel):
    """Signed, labelled row of the annual breakdown."""

    model_config = ConfigDict(extra="forbid")

    id: str
    label: str
    amount: int
    display_amount: int
    note: str | None = None


class DisplayAmounts(BaseModel):
    """Headline figures expressed in the period the gross was entered in."""

    model_config = ConfigDict(extra="forbid")

    period: GrossPeriod
    gross: int
    total_tax: int
    net: int


class MunicipalitySelection(BaseModel):
    """Municipality rates that were actually applied."""

    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    municipal_tax_rate: float
    church_tax_rate: float
    uses_default_rate: bool


class ResponseMeta(BaseModel):
    """Metadata returned alongside the calculation output."""

    model_config = ConfigDict(extra="forbid")

    year: int
    locale: str
    currency: str = "DKK"


class CalculationResponse(BaseModel):
    """Full response payload produced by the calculation service."""

    model_config = ConfigDict(extra="forbid")

    breakdown: SalaryAfterTaxBreakdown
    line_items: list[LineItem]
    display: DisplayAmounts
    municipality: MunicipalitySelection
    meta: ResponseMeta


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if location == "year" or location.startswith("year."):
            supported = ", ".join(str(member.value) for member in TaxYear)
            message = f"unsupported tax year (supported: {supported})"
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid calculation payload: {details}"
