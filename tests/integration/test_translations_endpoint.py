"""Integration tests for the translations API."""

from __future__ import annotations

from flask.testing import FlaskClient


def test_translations_endpoint_returns_default_catalogue(client: FlaskClient) -> None:
    response = client.get("/api/v1/translations/")

    assert response.status_code == 200
    payload = response.get_json()
    assert payload["locale"] == "en"
    assert payload["available_locales"] == ["da", "en"]
    assert payload["messages"]["line.net"] == "Net salary (year)"


def test_translations_endpoint_accepts_locale_query(client: FlaskClient) -> None:
    payload = client.get("/api/v1/translations/?locale=da").get_json()

    assert payload["locale"] == "da"
    assert payload["messages"]["line.net"] == "Nettoløn (år)"


def test_translations_endpoint_accepts_locale_slug(client: FlaskClient) -> None:
    payload = client.get("/api/v1/translations/da-DK").get_json()

    assert payload["locale"] == "da"
    assert payload["fallback"]["messages"]["line.net"] == "Net salary (year)"


def test_unknown_locale_falls_back_to_english(client: FlaskClient) -> None:
    payload = client.get("/api/v1/translations/xx").get_json()

    assert payload["locale"] == "en"
