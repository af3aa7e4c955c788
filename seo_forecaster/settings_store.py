import json
import logging
import os
from dataclasses import asdict
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .models import DEFAULT_SETTINGS, MAX_PROJECTION_PERIOD, MIN_PROJECTION_PERIOD, Settings

logger = logging.getLogger(__name__)

SETTINGS_ENV_VAR = "SEO_FORECASTER_SETTINGS"
DEFAULT_SETTINGS_FILE = "seo_settings.json"


class SettingsFile(BaseModel):
    """
    On-disk shape of the settings. Keys are camelCase (the format the tool has
    always saved); snake_case field names are accepted too. Unknown keys are ignored.
    """
    model_config = ConfigDict(populate_by_name=True, allow_inf_nan=False)

    category: str = DEFAULT_SETTINGS.category
    projection_period: int = Field(
        DEFAULT_SETTINGS.projection_period, alias="projectionPeriod",
        ge=MIN_PROJECTION_PERIOD, le=MAX_PROJECTION_PERIOD,
    )
    currency: str = DEFAULT_SETTINGS.currency
    conversion_rate: float = Field(DEFAULT_SETTINGS.conversion_rate, alias="conversionRate", ge=0, le=100)
    investment: float = Field(DEFAULT_SETTINGS.investment, gt=0)
    average_order_value: float = Field(DEFAULT_SETTINGS.average_order_value, alias="averageOrderValue", ge=0)
    ctr_model: str = Field(DEFAULT_SETTINGS.ctr_model, alias="ctrModel")

    def to_settings(self) -> Settings:
        return Settings(**self.model_dump())


def settings_path() -> Path:
    return Path(os.environ.get(SETTINGS_ENV_VAR, DEFAULT_SETTINGS_FILE))


def settings_from_dict(data: dict) -> Settings:
    """Validated Settings from a JSON-like dict; raises pydantic.ValidationError on bad values."""
    return SettingsFile.model_validate(data).to_settings()


def load_settings(path: Optional[Path] = None) -> Settings:
    """Saved settings, or the documented defaults if the file is absent or unusable."""
    path = Path(path) if path else settings_path()
    if not path.exists():
        return DEFAULT_SETTINGS
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return settings_from_dict(data)
    except ValidationError as e:
        logger.warning("Invalid settings in %s, using defaults: %s", path, e.errors(include_url=False))
        return DEFAULT_SETTINGS
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable settings file %s: %s", path, e)
        return DEFAULT_SETTINGS


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    path = Path(path) if path else settings_path()
    # written as entered; out-of-range values fall back to defaults on the next load
    payload = {SettingsFile.model_fields[name].alias or name: value for name, value in asdict(settings).items()}
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.debug("Saved settings to %s", path)
    return path


def clear_settings(path: Optional[Path] = None) -> None:
    path = Path(path) if path else settings_path()
    if path.exists():
        path.unlink()
        logger.info("Removed saved settings %s", path)
