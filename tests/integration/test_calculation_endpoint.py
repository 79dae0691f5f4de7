"""Integration tests for the salary-after-tax endpoint."""

from http import HTTPStatus

from flask.testing import FlaskClient

ENDPOINT = "/api/v1/salary-after-tax"


def test_salary_after_tax_endpoint_returns_breakdown(client: FlaskClient) -> None:
    response = client.post(
        ENDPOINT,
        json={
            "year": 2026,
            "gross_amount": 45_000,
            "gross_period": "monthly",
            "municipality_id": "101",
            "church_member": True,
        },
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["breakdown"]["total_tax_annual"] == 179_377
    assert payload["breakdown"]["net_monthly"] == 29_953
    assert payload["breakdown"]["assumptions"]["deduction_order"] == [
        "personfradrag",
        "beskaeftigelsesfradrag",
        "jobfradrag",
        "other",
    ]
    assert payload["display"]["net"] == 29_953
    assert len(payload["line_items"]) == 19


def test_endpoint_honours_accept_language(client: FlaskClient) -> None:
    response = client.post(
        ENDPOINT,
        json={"gross_amount": 30_000},
        headers={"Accept-Language": "da-DK,da;q=0.9"},
    )

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["meta"]["locale"] == "da"
    labels = {item["id"]: item["label"] for item in payload["line_items"]}
    assert labels["total_tax"] == "Skat i alt"


def test_unsupported_year_is_a_bad_request(client: FlaskClient) -> None:
    response = client.post(ENDPOINT, json={"year": 2024, "gross_amount": 30_000})

    assert response.status_code == HTTPStatus.BAD_REQUEST
    payload = response.get_json()
    assert payload["error"] == "validation_error"
    assert payload["status"] == 400
    assert "unsupported tax year" in payload["message"]


def test_invalid_gross_period_is_rejected(client: FlaskClient) -> None:
    response = client.post(ENDPOINT, json={"gross_amount": 1, "gross_period": "weekly"})

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert "gross_period" in response.get_json()["message"]


def test_non_json_body_is_rejected(client: FlaskClient) -> None:
    response = client.post(ENDPOINT, data="gross=1", content_type="text/plain")

    assert response.status_code == HTTPStatus.BAD_REQUEST
    payload = response.get_json()
    assert payload["error"] == "bad_request"
    assert payload["message"] == "Request body must be valid JSON"


def test_json_array_body_is_rejected(client: FlaskClient) -> None:
    response = client.post(ENDPOINT, json=[1, 2, 3])

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["message"] == "Request JSON must be an object"


def test_get_is_not_allowed(client: FlaskClient) -> None:
    response = client.get(ENDPOINT)

    assert response.status_code == HTTPStatus.METHOD_NOT_ALLOWED
