"""Pydantic models describing the tax year configuration schema."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class UnsupportedTaxYearError(ConfigurationError):
    """Raised when a caller asks for a tax year with no rule set."""


class TaxYear(IntEnum):
    """Closed set of tax years with a published rule set.

    Adding a year means adding a member here *and* a data file listed in the
    manifest; the loader refuses to start when the two disagree.
    """

    Y2026 = 2026

    @classmethod
    def from_value(cls, value: Any) -> TaxYear:
        if isinstance(value, cls):
            return value
        try:
            return cls(int(value))
        except (TypeError, ValueError) as exc:
            supported = ", ".join(str(member.value) for member in cls)
            raise UnsupportedTaxYearError(
                f"Unsupported tax year {value!r} (supported: {supported})"
            ) from exc


def _require_fraction(value: float, label: str) -> None:
    if value < 0 or value > 1:
        raise ConfigurationError(f"{label} must be a fraction between 0 and 1")


def _require_non_negative(value: float, label: str) -> None:
    if value < 0:
        raise ConfigurationError(f"{label} must be non-negative")


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class EarnedIncomeCredit(ImmutableModel):
    """Percentage-of-income deduction capped at a yearly maximum."""

    rate: float
    max_amount: float

    @model_validator(mode="after")
    def _validate_values(self) -> EarnedIncomeCredit:
        _require_fraction(self.rate, "Earned income credit rate")
        _require_non_negative(self.max_amount, "Earned income credit max_amount")
        return self

    def nominal_amount(self, income: float) -> float:
        raw = max(income, 0.0) * self.rate
        return min(raw, self.max_amount)


class ThresholdEarnedIncomeCredit(EarnedIncomeCredit):
    """Earned income credit that only accrues above an income threshold."""

    income_threshold: float

    @model_validator(mode="after")
    def _validate_threshold(self) -> ThresholdEarnedIncomeCredit:
        _require_non_negative(self.income_threshold, "Earned income credit income_threshold")
        return self

    def nominal_amount(self, income: float) -> float:
        above = max(income - self.income_threshold, 0.0)
        return min(above * self.rate, self.max_amount)


class BracketTax(ImmutableModel):
    """Rate charged on personal income above ``threshold``.

    Each bracket is measured from its own threshold; brackets are *not*
    marginal slices of one another (see :class:`BracketSchedule`).
    """

    threshold: float
    rate: float

    @model_validator(mode="after")
    def _validate_values(self) -> BracketTax:
        _require_non_negative(self.threshold, "Bracket threshold")
        _require_fraction(self.rate, "Bracket rate")
        return self


class BracketSchedule(ImmutableModel):
    """The three progressive bracket taxes levied on top of bundskat.

    The brackets stack cumulatively: a taxpayer above all three thresholds
    pays every bracket in full, each computed from its own threshold. Do not
    convert this into conventional marginal-slice arithmetic.
    """

    mellemskat: BracketTax
    topskat: BracketTax
    toptopskat: BracketTax

    def ordered(self) -> tuple[tuple[str, BracketTax], ...]:
        return (
            ("mellemskat", self.mellemskat),
            ("topskat", self.topskat),
            ("toptopskat", self.toptopskat),
        )


class SalaryDefaults(ImmutableModel):
    """Caller-side defaults used when a request omits optional inputs."""

    atp_monthly_amount: float = 0.0
    atp_eligibility_gross_monthly_threshold: float = 0.0
    employee_pension_rate: float = 0.0

    @model_validator(mode="after")
    def _validate_values(self) -> SalaryDefaults:
        _require_non_negative(self.atp_monthly_amount, "ATP monthly amount")
        _require_non_negative(
            self.atp_eligibility_gross_monthly_threshold, "ATP eligibility threshold"
        )
        _require_fraction(self.employee_pension_rate, "Default employee pension rate")
        return self


class TaxYearConfig(ImmutableModel):
    """Complete, immutable rule set for a single tax year."""

    year: int
    am_bidrag_rate: float
    bundskat_rate: float
    personfradrag: float
    beskaeftigelsesfradrag: EarnedIncomeCredit
    jobfradrag: ThresholdEarnedIncomeCredit
    brackets: BracketSchedule
    default_municipal_tax_rate: float
    salary_defaults: SalaryDefaults = Field(default_factory=SalaryDefaults)
    meta: Mapping[str, Any] = Field(default_factory=dict)

    @field_validator("meta", mode="before")
    @classmethod
    def _default_meta(cls, value: Any) -> Mapping[str, Any]:
        if value is None:
            return {}
        if isinstance(value, Mapping):
            return value
        raise ConfigurationError("'meta' must be a mapping when provided")

    @model_validator(mode="after")
    def _validate_values(self) -> TaxYearConfig:
        _require_fraction(self.am_bidrag_rate, "am_bidrag_rate")
        _require_fraction(self.bundskat_rate, "bundskat_rate")
        _require_fraction(self.default_municipal_tax_rate, "default_municipal_tax_rate")
        _require_non_negative(self.personfradrag, "personfradrag")
        return self


class MunicipalityTaxRate(ImmutableModel):
    """Published municipal and church tax percentages for one municipality."""

    id: int
    name: str
    municipal_tax_pct: float
    church_tax_pct: float

    @model_validator(mode="after")
    def _validate_values(self) -> MunicipalityTaxRate:
        if not self.name.strip():
            raise ConfigurationError(f"Municipality {self.id} requires a name")
        _require_non_negative(self.municipal_tax_pct, "municipal_tax_pct")
        _require_non_negative(self.church_tax_pct, "church_tax_pct")
        return self

    @computed_field
    @property
    def municipal_tax_rate(self) -> float:
        return self.municipal_tax_pct / 100

    @computed_field
    @property
    def church_tax_rate(self) -> float:
        return self.church_tax_pct / 100


class MunicipalityDataset(ImmutableModel):
    """Read-only municipality reference data for a tax year."""

    year: int
    municipalities: Sequence[MunicipalityTaxRate]
    source: str | None = None

    @field_validator("municipalities", mode="after")
    @classmethod
    def _freeze_entries(
        cls, value: Sequence[MunicipalityTaxRate]
    ) -> tuple[MunicipalityTaxRate, ...]:
        return tuple(value)

    @model_validator(mode="after")
    def _validate_ids(self) -> MunicipalityDataset:
        if not self.municipalities:
            raise ConfigurationError("Municipality datasets require at least one entry")
        seen: set[int] = set()
        for entry in self.municipalities:
            if entry.id in seen:
                raise ConfigurationError(
                    f"Duplicate municipality id {entry.id} in dataset for {self.year}"
                )
            seen.add(entry.id)
        return self

    def get(self, municipality_id: int) -> MunicipalityTaxRate | None:
        for entry in self.municipalities:
            if entry.id == municipality_id:
                return entry
        return None


class TaxYearManifestEntry(ImmutableModel):
    """Entry describing a supported tax year in the manifest."""

    year: int
    filename: str | None = None
    municipalities: str | None = None
    status: str = "active"
    notes_url: str | None = None

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.year}.yaml"

    @computed_field
    @property
    def resolved_municipalities_filename(self) -> str:
        return self.municipalities or f"municipalities_{self.year}.yaml"


class TaxYearManifest(ImmutableModel):
    """Manifest describing the available tax year configuration files."""

    years: Sequence[TaxYearManifestEntry]

    @model_validator(mode="after")
    def _validate_years(self) -> TaxYearManifest:
        seen: set[int] = set()
        for entry in self.years:
            if entry.year in seen:
                raise ConfigurationError(
                    f"Duplicate year {entry.year} declared in the configuration manifest"
                )
            seen.add(entry.year)
        return self

    def get_entry(self, year: int) -> TaxYearManifestEntry:
        for entry in self.years:
            if entry.year == year:
                return entry
        raise KeyError(year)

    @computed_field
    @property
    def supported_years(self) -> tuple[int, ...]:
        return tuple(sorted(entry.year for entry in self.years))


__all__ = [
    "BracketSchedule",
    "BracketTax",
    "ConfigurationError",
    "EarnedIncomeCredit",
    "ImmutableModel",
    "MunicipalityDataset",
    "MunicipalityTaxRate",
    "SalaryDefaults",
    "TaxYear",
    "TaxYearConfig",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "ThresholdEarnedIncomeCredit",
    "UnsupportedTaxYearError",
    "ValidationError",
]
