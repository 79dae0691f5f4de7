"""REST endpoint for salary-after-tax calculations."""

from __future__ import annotations

from typing import Any

from flask import Blueprint, request

from dktax.backend.app.services.calculation_service import calculate_salary
from dktax.backend.services.request_parser import parse_calculation_payload
from dktax.backend.services.response_builder import build_calculation_response

blueprint = Blueprint("calculations", __name__, url_prefix="/api/v1")


@blueprint.post("/salary-after-tax")
def create_salary_calculation() -> tuple[Any, int]:
    """Run the salary pipeline for the submitted JSON payload."""

    payload = parse_calculation_payload(request)
    result = calculate_salary(payload)

    return build_calculation_response(result)
