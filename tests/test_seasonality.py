import pytest

from seo_forecaster.seasonality import CATEGORY_OPTIONS, get_seasonality_multiplier


def test_bbq_january():
    assert get_seasonality_multiplier(1, "BBQ & Outdoor Cooking") == 0.8


def test_christmas_peaks_in_december():
    assert get_seasonality_multiplier(12, "Christmas & Seasonal") == 1.5


@pytest.mark.parametrize("month", range(1, 13))
def test_unknown_category_is_neutral(month):
    assert get_seasonality_multiplier(month, "Unknown Category") == 1.0


@pytest.mark.parametrize("month", [0, 13, -1])
def test_unknown_month_is_neutral(month):
    assert get_seasonality_multiplier(month, "Fashion & Apparel") == 1.0


def test_every_builtin_category_covers_the_year():
    for category in CATEGORY_OPTIONS:
        values = [get_seasonality_multiplier(m, category) for m in range(1, 13)]
        assert all(0.5 <= v <= 1.5 for v in values)
