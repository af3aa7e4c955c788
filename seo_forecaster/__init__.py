"""Keyword-level SEO traffic, conversion and revenue forecasting."""

from .ctr import CTR_MODEL_OPTIONS, CTR_MODELS, CUSTOM_MODEL, CTRModel, get_ctr, resolve_ctr_model
from .engine import aggregate_month, break_even_month, forecast, validate_keywords
from .errors import ForecastError, KeywordImportError, MalformedKeywordError, ValidationError
from .models import (
    CURRENCY_OPTIONS,
    DEFAULT_KEYWORDS,
    DEFAULT_SETTINGS,
    Keyword,
    KeywordContribution,
    Projection,
    SensitivityPoint,
    Settings,
)
from .seasonality import CATEGORY_OPTIONS, get_seasonality_multiplier
from .sensitivity import SWEEP_VARIABLES, default_sweep_range, sweep
from .trajectory import position_at_month
