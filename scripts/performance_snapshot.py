#!/usr/bin/env python3
"""Time the salary pipeline and the full calculation service."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from time import perf_counter
from typing import Any, Callable

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from dktax.backend.app.models import SalaryAfterTaxInputs  # noqa: E402
from dktax.backend.app.services.calculation_service import calculate_salary  # noqa: E402
from dktax.backend.app.services.calculators import calculate_salary_after_tax  # noqa: E402
from dktax.backend.config.year_config import TaxYear, get_tax_year_config  # noqa: E402

SAMPLE_PAYLOAD = {
    "year": 2026,
    "locale": "da",
    "gross_amount": 45000,
    "gross_period": "monthly",
    "employee_pension_rate": 0.04,
    "municipality_id": "101",
    "church_member": True,
}


def _time(iterations: int, call: Callable[[], Any]) -> dict[str, float]:
    call()  # warm caches
    start = perf_counter()
    for _ in range(iterations):
        call()
    elapsed = perf_counter() - start
    return {
        "iterations": iterations,
        "total_ms": elapsed * 1000,
        "average_ms": (elapsed / iterations) * 1000,
    }


def measure_pipeline(iterations: int) -> dict[str, float]:
    config = get_tax_year_config(TaxYear.Y2026)
    inputs = SalaryAfterTaxInputs(
        year=TaxYear.Y2026,
        gross_amount=540000,
        employee_pension_rate=0.04,
        atp_annual=1188,
        municipal_tax_rate=0.235,
        church_tax_rate=0.008,
        church_member=True,
    )
    return _time(iterations, lambda: calculate_salary_after_tax(inputs, config))


def measure_service(iterations: int) -> dict[str, float]:
    return _time(iterations, lambda: calculate_salary(dict(SAMPLE_PAYLOAD)))


def main() -> None:
    iterations = int(os.getenv("DKTAX_PROFILE_ITERATIONS", "500"))
    report = {
        "pipeline": measure_pipeline(iterations),
        "service": measure_service(iterations),
    }
    print(json.dumps(report, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
