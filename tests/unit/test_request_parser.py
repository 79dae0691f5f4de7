"""Unit tests for calculation request parsing helpers."""

from __future__ import annotations

import pytest
from flask import Flask, request
from werkzeug.exceptions import BadRequest

from dktax.backend.services.request_parser import parse_calculation_payload

ENDPOINT = "/api/v1/salary-after-tax"


def test_parse_payload_uses_accept_language(app: Flask) -> None:
    with app.test_request_context(
        ENDPOINT,
        method="POST",
        json={"gross_amount": 40_000},
        headers={"Accept-Language": "da-DK,da;q=0.9,en;q=0.8"},
    ):
        payload = parse_calculation_payload(request)

    assert payload["locale"] == "da"


def test_parse_payload_prefers_query_over_header(app: Flask) -> None:
    with app.test_request_context(
        f"{ENDPOINT}?locale=en",
        method="POST",
        json={"gross_amount": 40_000},
        headers={"Accept-Language": "da"},
    ):
        payload = parse_calculation_payload(request)

    assert payload["locale"] == "en"


def test_parse_payload_preserves_explicit_locale(app: Flask) -> None:
    with app.test_request_context(
        f"{ENDPOINT}?locale=en",
        method="POST",
        json={"gross_amount": 40_000, "locale": "da_DK"},
    ):
        payload = parse_calculation_payload(request)

    assert payload["locale"] == "da"


def test_parse_payload_leaves_locale_unset_without_hints(app: Flask) -> None:
    with app.test_request_context(ENDPOINT, method="POST", json={"gross_amount": 1}):
        payload = parse_calculation_payload(request)

    assert "locale" not in payload


def test_parse_payload_rejects_non_object(app: Flask) -> None:
    with app.test_request_context(ENDPOINT, method="POST", json=["not", "an", "object"]):
        with pytest.raises(BadRequest):
            parse_calculation_payload(request)


def test_parse_payload_rejects_invalid_json(app: Flask) -> None:
    with app.test_request_context(
        ENDPOINT, method="POST", data="{not json", content_type="application/json"
    ):
        with pytest.raises(BadRequest):
            parse_calculation_payload(request)
