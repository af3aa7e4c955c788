import calendar
import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .ctr import CTRModel, get_ctr
from .errors import MalformedKeywordError, ValidationError
from .models import (
    MAX_PROJECTION_PERIOD,
    MIN_PROJECTION_PERIOD,
    RANGE_WIDTH,
    Keyword,
    KeywordContribution,
    Projection,
    Settings,
)
from .seasonality import get_seasonality_multiplier
from .trajectory import position_at_month

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MonthlyTotals:
    traffic: float
    conversions: float
    revenue: float
    breakdown: Tuple[KeywordContribution, ...]


# ===============================
# Helpers
# ===============================
def round_half_up(x: float) -> int:
    """Nearest integer, halves rounded up (2.5 -> 3, -2.5 -> -2)."""
    return int(math.floor(x + 0.5))


def month_label(month: int) -> str:
    """Short month name for forecast month N; month 1 is always January."""
    return calendar.month_abbr[(month - 1) % 12 + 1]


def bands(value: float, width: float = RANGE_WIDTH) -> Tuple[float, float]:
    return value * (1 - width), value * (1 + width)


def validate_projection_period(settings: Settings) -> int:
    period = settings.projection_period
    if isinstance(period, bool) or not isinstance(period, int) \
            or not MIN_PROJECTION_PERIOD <= period <= MAX_PROJECTION_PERIOD:
        raise ValidationError(
            f"Projection period must be between {MIN_PROJECTION_PERIOD} and {MAX_PROJECTION_PERIOD} months."
        )
    return period


def _positive(value) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def check_keyword(keyword: Keyword) -> None:
    """Raise MalformedKeywordError unless the record is usable for forecasting."""
    problems = []
    if not keyword.text or not str(keyword.text).strip():
        problems.append("empty keyword text")
    if not _positive(keyword.search_volume):
        problems.append("search volume must be positive")
    if not _positive(keyword.position):
        problems.append("position must be positive")
    elif keyword.position > 100:
        problems.append("position must be at most 100")
    if not _positive(keyword.target_position):
        problems.append("target position must be positive")
    elif keyword.target_position > 100:
        problems.append("target position must be at most 100")
    if keyword.difficulty is None or not 0 <= keyword.difficulty <= 100:
        problems.append("difficulty must be between 0 and 100")
    if problems:
        raise MalformedKeywordError(f"Invalid keyword data: {keyword!r} ({'; '.join(problems)})", keyword)


def validate_keywords(keywords: Sequence[Keyword]) -> None:
    if not keywords:
        raise MalformedKeywordError("No keywords to forecast.")
    for kw in keywords:
        check_keyword(kw)


# ===============================
# Core calculations
# ===============================
def aggregate_month(
    keywords: Sequence[Keyword],
    settings: Settings,
    ctr_model: CTRModel,
    month: int,
    conversion_rate: Optional[float] = None,
    average_order_value: Optional[float] = None,
) -> MonthlyTotals:
    """
    Traffic, conversions and revenue across all keywords for one forecast month.

    Per keyword:
      traffic     = search volume × CTR(position this month) × seasonality(month, category)
      conversions = traffic × conversion rate / 100
      revenue     = conversions × average order value
    Nothing is rounded here. `conversion_rate` / `average_order_value` override the
    settings values (used by the what-if sweep).
    """
    cvr = settings.conversion_rate if conversion_rate is None else conversion_rate
    aov = settings.average_order_value if average_order_value is None else average_order_value
    horizon = settings.projection_period
    seasonality = get_seasonality_multiplier(month, settings.category)

    traffic_total = conversions_total = revenue_total = 0.0
    breakdown = []
    for kw in keywords:
        check_keyword(kw)
        position = position_at_month(kw, month, horizon)
        ctr = get_ctr(position, ctr_model)
        traffic = kw.search_volume * ctr * seasonality
        conversions = traffic * (cvr / 100)
        revenue = conversions * aov

        traffic_total += traffic
        conversions_total += conversions
        revenue_total += revenue
        breakdown.append(KeywordContribution(kw.text, traffic, conversions, revenue))

    return MonthlyTotals(traffic_total, conversions_total, revenue_total, tuple(breakdown))


def forecast(keywords: Sequence[Keyword], settings: Settings, ctr_model: CTRModel) -> List[Projection]:
    """
    Month-by-month projections for the settings' horizon.

    ROI is cumulative: (revenue to date - investment) / investment × 100.
    Ranges are ±10% of the unrounded monthly totals.
    """
    period = validate_projection_period(settings)
    if not settings.investment or settings.investment <= 0:
        raise ValidationError("Investment must be a positive amount.")
    keywords = tuple(keywords)
    validate_keywords(keywords)

    projections = []
    total_traffic = total_conversions = total_revenue = 0.0
    for month in range(1, period + 1):
        totals = aggregate_month(keywords, settings, ctr_model, month)
        total_traffic += totals.traffic
        total_conversions += totals.conversions
        total_revenue += totals.revenue

        traffic_lo, traffic_hi = bands(totals.traffic)
        conv_lo, conv_hi = bands(totals.conversions)
        rev_lo, rev_hi = bands(totals.revenue)
        roi = (total_revenue - settings.investment) / settings.investment * 100

        projections.append(Projection(
            month=month_label(month),
            traffic=round_half_up(totals.traffic),
            conversions=round_half_up(totals.conversions),
            revenue=f"{totals.revenue:.2f}",
            roi=f"{roi:.1f}",
            traffic_range=(round_half_up(traffic_lo), round_half_up(traffic_hi)),
            conversions_range=(round_half_up(conv_lo), round_half_up(conv_hi)),
            revenue_range=(round(rev_lo, 2), round(rev_hi, 2)),
            keyword_breakdown=totals.breakdown,
            cumulative_revenue=total_revenue,
        ))

    logger.info(
        "Forecast built: %d keywords, %d months, traffic=%.0f conversions=%.1f revenue=%.2f",
        len(keywords), period, total_traffic, total_conversions, total_revenue,
    )
    return projections


def break_even_month(projections: Sequence[Projection], investment: float) -> Optional[str]:
    """Label of the first month whose cumulative revenue covers the investment, else None."""
    for proj in projections:
        if proj.cumulative_revenue >= investment:
            return proj.month
    return None
