import logging
from typing import List, Sequence, Tuple

from .ctr import CTRModel
from .engine import aggregate_month, round_half_up, validate_keywords, validate_projection_period
from .errors import ValidationError
from .models import Keyword, SensitivityPoint, Settings

logger = logging.getLogger(__name__)

SWEEP_VARIABLES = {
    "conversion_rate": "Conversion Rate (%)",
    "average_order_value": "Average Order Value",
}
SWEEP_POINTS = 5


def default_sweep_range(settings: Settings, variable: str) -> Tuple[float, float]:
    if variable == "conversion_rate":
        return settings.conversion_rate - 1, settings.conversion_rate + 1
    if variable == "average_order_value":
        return settings.average_order_value * 0.8, settings.average_order_value * 1.2
    raise ValidationError(f"Unknown sweep variable: {variable}")


def sweep(
    keywords: Sequence[Keyword],
    settings: Settings,
    ctr_model: CTRModel,
    variable: str,
    range_start: float,
    range_end: float,
) -> List[SensitivityPoint]:
    """
    What-if totals over the whole horizon for 5 evenly spaced values of one
    monetization parameter; the other parameter keeps its settings value.

    A reversed range (end < start) yields no points, before the keywords and
    horizon are validated.
    """
    if variable not in SWEEP_VARIABLES:
        raise ValidationError(f"Unknown sweep variable: {variable}")
    if range_end < range_start:
        logger.debug("Sweep range %s..%s is reversed; no points produced", range_start, range_end)
        return []

    period = validate_projection_period(settings)
    keywords = tuple(keywords)
    validate_keywords(keywords)

    step = (range_end - range_start) / (SWEEP_POINTS - 1)
    points = []
    for i in range(SWEEP_POINTS):
        value = range_start + step * i
        override = {variable: value}
        traffic = conversions = revenue = 0.0
        for month in range(1, period + 1):
            totals = aggregate_month(keywords, settings, ctr_model, month, **override)
            traffic += totals.traffic
            conversions += totals.conversions
            revenue += totals.revenue
        points.append(SensitivityPoint(
            value=round(value, 2),
            traffic=round_half_up(traffic),
            conversions=round_half_up(conversions),
            revenue=round(revenue, 2),
        ))
    return points
