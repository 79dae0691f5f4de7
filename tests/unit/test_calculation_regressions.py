"""Regression coverage ensuring calculator outputs stay stable."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from dktax.backend.app.services.calculation_service import calculate_salary

_DATA_PATH = Path(__file__).resolve().parents[1] / "data" / "regression_scenarios.json"


@pytest.mark.parametrize(
    "scenario",
    json.loads(_DATA_PATH.read_text("utf-8")),
    ids=lambda item: item["name"],
)
def test_calculate_salary_matches_regression_scenario(scenario: dict[str, object]) -> None:
    """Known payloads keep producing the recorded breakdowns."""

    result = calculate_salary(scenario["payload"])
    expectations = scenario["expectations"]

    for section in ("breakdown", "display"):
        for key, value in expectations.get(section, {}).items():
            assert result[section][key] == pytest.approx(value), f"{section}.{key}"
