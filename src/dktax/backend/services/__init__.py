"""Service-layer helpers for the dktax backend."""

from dktax.backend.app.services.calculation_service import calculate_salary
from .request_parser import parse_calculation_payload
from .response_builder import build_calculation_response

__all__ = [
    "calculate_salary",
    "parse_calculation_payload",
    "build_calculation_response",
]
