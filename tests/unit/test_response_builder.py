"""Unit tests for response serialisation helpers."""

from __future__ import annotations

from flask import Flask

from dktax.backend.app.services.calculation_service import calculate_salary
from dktax.backend.services.response_builder import build_calculation_response


def test_build_calculation_response_returns_json(app: Flask) -> None:
    payload = calculate_salary({"gross_amount": 30_000})

    with app.app_context():
        response, status = build_calculation_response(payload)

    assert status == 200
    assert response.mimetype == "application/json"
    assert response.get_json()["breakdown"]["gross_annual"] == 360_000
