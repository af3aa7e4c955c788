SEASONALITY = {
    "BBQ & Outdoor Cooking": {1: 0.8, 2: 0.9, 3: 1.0, 4: 1.1, 5: 1.2, 6: 1.3, 7: 1.3, 8: 1.2, 9: 1.1, 10: 1.0, 11: 0.9, 12: 0.8},
    "Christmas & Seasonal": {1: 0.8, 2: 0.7, 3: 0.6, 4: 0.5, 5: 0.5, 6: 0.6, 7: 0.7, 8: 0.8, 9: 0.9, 10: 1.0, 11: 1.2, 12: 1.5},
    "Fashion & Apparel": {1: 1.0, 2: 1.1, 3: 1.0, 4: 0.9, 5: 1.0, 6: 1.1, 7: 1.0, 8: 1.0, 9: 1.1, 10: 1.2, 11: 1.3, 12: 1.2},
}
CATEGORY_OPTIONS = list(SEASONALITY.keys())
NEUTRAL_MULTIPLIER = 1.0


def get_seasonality_multiplier(month: int, category: str) -> float:
    """Demand multiplier for a calendar month; unknown category or month is neutral (1.0)."""
    return SEASONALITY.get(category, {}).get(month) or NEUTRAL_MULTIPLIER
