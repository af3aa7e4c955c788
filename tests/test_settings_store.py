import json

import pytest
from pydantic import ValidationError as PydanticValidationError

from seo_forecaster import DEFAULT_SETTINGS, Settings
from seo_forecaster.settings_store import (
    SETTINGS_ENV_VAR,
    clear_settings,
    load_settings,
    save_settings,
    settings_from_dict,
    settings_path,
)


def test_documented_defaults():
    assert DEFAULT_SETTINGS == Settings(
        category="BBQ & Outdoor Cooking",
        projection_period=6,
        currency="GBP (£)",
        conversion_rate=3.0,
        investment=5000,
        average_order_value=250,
        ctr_model="Default",
    )


def test_missing_file_gives_defaults(tmp_path):
    assert load_settings(tmp_path / "nope.json") == DEFAULT_SETTINGS


def test_save_then_load(tmp_path):
    path = tmp_path / "settings.json"
    settings = Settings(category="Fashion & Apparel", projection_period=9, currency="EUR (€)",
                        conversion_rate=1.5, investment=12000, average_order_value=80, ctr_model="Custom")
    save_settings(settings, path)
    assert load_settings(path) == settings


def test_camel_case_keys_are_understood(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({
        "category": "Christmas & Seasonal", "projectionPeriod": 3, "currency": "USD ($)",
        "conversionRate": 2.5, "investment": 900, "averageOrderValue": 40, "ctrModel": "Informational",
        "theme": "dark",
    }), encoding="utf-8")
    loaded = load_settings(path)
    assert loaded.projection_period == 3
    assert loaded.conversion_rate == 2.5
    assert loaded.average_order_value == 40
    assert loaded.ctr_model == "Informational"


@pytest.mark.parametrize("content", ["{not json", "[1, 2]", '{"projectionPeriod": 6.5}', '{"investment": "lots"}'])
def test_unusable_file_gives_defaults(tmp_path, content):
    path = tmp_path / "settings.json"
    path.write_text(content, encoding="utf-8")
    assert load_settings(path) == DEFAULT_SETTINGS


@pytest.mark.parametrize("data", [
    {"investment": float("nan")},
    {"investment": float("inf")},
    {"conversionRate": float("nan")},
    {"averageOrderValue": float("-inf")},
    {"projectionPeriod": 13},
    {"projectionPeriod": 0},
    {"conversionRate": 150},
    {"investment": 0},
])
def test_out_of_range_values_are_rejected(tmp_path, data):
    with pytest.raises(PydanticValidationError):
        settings_from_dict(data)

    path = tmp_path / "settings.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    assert load_settings(path) == DEFAULT_SETTINGS


def test_snake_case_keys_are_accepted():
    loaded = settings_from_dict({"projection_period": 2, "average_order_value": 75, "ctr_model": "Custom"})
    assert loaded == DEFAULT_SETTINGS.with_changes(projection_period=2, average_order_value=75.0, ctr_model="Custom")


def test_saved_file_uses_camel_case_keys(tmp_path):
    path = save_settings(DEFAULT_SETTINGS, tmp_path / "settings.json")
    assert set(json.loads(path.read_text(encoding="utf-8"))) == {
        "category", "projectionPeriod", "currency", "conversionRate",
        "investment", "averageOrderValue", "ctrModel",
    }


def test_partial_dict_fills_defaults():
    assert settings_from_dict({"investment": 100}) == DEFAULT_SETTINGS.with_changes(investment=100.0)


def test_env_var_selects_path(tmp_path, monkeypatch):
    path = tmp_path / "custom.json"
    monkeypatch.setenv(SETTINGS_ENV_VAR, str(path))
    assert settings_path() == path

    save_settings(DEFAULT_SETTINGS.with_changes(projection_period=4))
    assert load_settings().projection_period == 4
    clear_settings()
    assert not path.exists()
    assert load_settings() == DEFAULT_SETTINGS


def test_currency_symbol():
    assert Settings(currency="GBP (£)").currency_symbol == "£"
    assert Settings(currency="USD ($)").currency_symbol == "$"
    assert Settings(currency="CHF").currency_symbol == "CHF"
