"""Advisory checks over the tax year data files.

The pydantic schema rejects data that cannot be loaded at all; this module
looks for data that loads fine but would produce surprising results.
"""

from __future__ import annotations

import argparse
from collections import Counter
from typing import Sequence

from .municipalities import load_municipality_dataset
from .schema import (
    BracketSchedule,
    ConfigurationError,
    MunicipalityDataset,
    TaxYear,
    TaxYearConfig,
)
from .year_config import available_years, get_tax_year_config


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_bracket_order(brackets: BracketSchedule) -> list[str]:
    errors: list[str] = []
    ordered = brackets.ordered()
    for (lower_name, lower), (upper_name, upper) in zip(ordered, ordered[1:]):
        if upper.threshold <= lower.threshold:
            errors.append(
                _format_scope(
                    "brackets",
                    f"{upper_name} threshold {upper.threshold:g} must exceed "
                    f"{lower_name} threshold {lower.threshold:g}",
                )
            )
    return errors


def _validate_jobfradrag(config: TaxYearConfig) -> list[str]:
    first_name, first_bracket = config.brackets.ordered()[0]
    if config.jobfradrag.income_threshold > first_bracket.threshold:
        return [
            _format_scope(
                "jobfradrag",
                f"income threshold {config.jobfradrag.income_threshold:g} lies above "
                f"the {first_name} threshold {first_bracket.threshold:g}",
            )
        ]
    return []


def _validate_municipality_names(dataset: MunicipalityDataset) -> list[str]:
    errors: list[str] = []
    names = Counter(entry.name.strip().casefold() for entry in dataset.municipalities)
    for entry in dataset.municipalities:
        if not entry.name.strip():
            errors.append(_format_scope("municipalities", f"id {entry.id} has a blank name"))
    duplicates = sorted(name for name, count in names.items() if name and count > 1)
    if duplicates:
        errors.append(
            _format_scope("municipalities", f"duplicate municipality names: {duplicates}")
        )
    return errors


def top_marginal_rate(config: TaxYearConfig, dataset: MunicipalityDataset | None) -> float:
    """Combined rate on the last krone for the most expensive municipality."""

    if dataset is not None and dataset.municipalities:
        municipal = max(entry.municipal_tax_rate for entry in dataset.municipalities)
        church = max(entry.church_tax_rate for entry in dataset.municipalities)
    else:
        municipal = config.default_municipal_tax_rate
        church = 0.0
    municipal = max(municipal, config.default_municipal_tax_rate)
    brackets = sum(bracket.rate for _, bracket in config.brackets.ordered())
    return config.am_bidrag_rate + municipal + church + config.bundskat_rate + brackets


def _validate_top_rate(config: TaxYearConfig, dataset: MunicipalityDataset | None) -> list[str]:
    rate = top_marginal_rate(config, dataset)
    if rate >= 1:
        return [
            _format_scope(
                "rates",
                f"combined top marginal rate {rate:.2%} would let a raise reduce net pay",
            )
        ]
    return []


def validate_year_configuration(
    config: TaxYearConfig, dataset: MunicipalityDataset | None = None
) -> list[str]:
    """Return a list of advisory issues for ``config`` and its municipalities."""

    errors: list[str] = []
    errors.extend(_validate_bracket_order(config.brackets))
    errors.extend(_validate_jobfradrag(config))
    if dataset is not None:
        errors.extend(_validate_municipality_names(dataset))
    errors.extend(_validate_top_rate(config, dataset))
    return errors


def validate_all_years(years: Sequence[int] | None = None) -> dict[int, list[str]]:
    """Validate the requested (or all configured) years, keyed by year."""

    targets = years or available_years()
    results: dict[int, list[str]] = {}
    for year in targets:
        tax_year = TaxYear.from_value(year)
        results[int(tax_year)] = validate_year_configuration(
            get_tax_year_config(tax_year), load_municipality_dataset(tax_year)
        )
    return results


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate configured tax years and report advisory issues."
    )
    parser.add_argument(
        "years",
        nargs="*",
        type=int,
        help="Specific years to validate (defaults to all configured years)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    years = args.years or available_years()

    exit_code = 0
    for year in years:
        try:
            tax_year = TaxYear.from_value(year)
            config = get_tax_year_config(tax_year)
            dataset = load_municipality_dataset(tax_year)
        except (ConfigurationError, FileNotFoundError) as error:
            print(f"[{year}] failed to load configuration: {error}")
            exit_code = 1
            continue

        issues = validate_year_configuration(config, dataset)
        if issues:
            exit_code = 1
            print(f"[{year}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{year}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
