"""Expose the year rule sets and municipality data to front-end consumers.

The form that collects salary inputs needs the municipality list and the
year's headline rates; serving them from here keeps the YAML files the single
source of truth.
"""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify, request

from dktax.backend.app.http import not_found
from dktax.backend.app.localization import get_translator
from dktax.backend.config.municipalities import (
    AVERAGE_MUNICIPALITY,
    load_municipality_dataset,
)
from dktax.backend.config.year_config import (
    TaxYear,
    TaxYearConfig,
    UnsupportedTaxYearError,
    get_tax_year_config,
    load_manifest,
)
from dktax.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the configuration manifest."""

    supported_years = list(load_manifest().supported_years)
    default_year = supported_years[-1] if supported_years else None
    return {
        "version": get_project_version(),
        "supported_years": supported_years,
        "default_year": default_year,
    }


def _serialise_year(config: TaxYearConfig) -> dict[str, Any]:
    entry = load_manifest().get_entry(config.year)
    payload = config.model_dump(mode="json")
    payload["brackets"] = [
        {"id": name, "threshold": bracket.threshold, "rate": bracket.rate}
        for name, bracket in config.brackets.ordered()
    ]
    payload["status"] = entry.status
    if entry.notes_url:
        payload["notes_url"] = entry.notes_url
    return payload


@blueprint.get("/meta")
def get_application_metadata() -> tuple[Any, int]:
    """Expose lightweight application metadata such as the version identifier."""

    return jsonify(get_configuration_metadata()), 200


@blueprint.get("/years")
def list_years() -> tuple[Any, int]:
    """Return every configured year with its full rule set."""

    metadata = get_configuration_metadata()
    payload = {
        "years": [_serialise_year(get_tax_year_config(year)) for year in TaxYear],
        "default_year": metadata["default_year"],
        "supported_years": metadata["supported_years"],
    }
    return jsonify(payload), 200


@blueprint.get("/<int:year>/municipalities")
def list_municipalities(year: int) -> tuple[Any, int]:
    """List selectable municipalities, led by the default-rate option."""

    try:
        tax_year = TaxYear.from_value(year)
    except UnsupportedTaxYearError as exc:
        return not_found(str(exc)).to_response()

    translator = get_translator(request.args.get("locale"))
    config = get_tax_year_config(tax_year)
    dataset = load_municipality_dataset(tax_year)

    municipalities: list[dict[str, Any]] = [
        {
            "id": AVERAGE_MUNICIPALITY,
            "name": translator("municipality.average"),
            "municipal_tax_rate": config.default_municipal_tax_rate,
            "church_tax_rate": 0.0,
            "uses_default_rate": True,
        }
    ]
    for entry in sorted(dataset.municipalities, key=lambda item: item.name):
        municipalities.append(
            {
                "id": str(entry.id),
                "name": entry.name,
                "municipal_tax_rate": entry.municipal_tax_rate,
                "church_tax_rate": entry.church_tax_rate,
                "uses_default_rate": False,
            }
        )

    payload = {
        "year": int(tax_year),
        "locale": translator.locale,
        "source": dataset.source,
        "municipalities": municipalities,
    }
    return jsonify(payload), 200
