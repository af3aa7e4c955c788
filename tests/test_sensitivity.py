import pytest

from seo_forecaster import DEFAULT_KEYWORDS, Keyword, MalformedKeywordError, ValidationError, aggregate_month
from seo_forecaster.engine import round_half_up
from seo_forecaster.sensitivity import default_sweep_range, sweep


@pytest.fixture
def six_months(bbq_settings):
    return bbq_settings.with_changes(projection_period=6)


def _horizon_totals(settings, model, **override):
    months = [aggregate_month(DEFAULT_KEYWORDS, settings, model, m, **override)
              for m in range(1, settings.projection_period + 1)]
    return sum(t.traffic for t in months), sum(t.conversions for t in months), sum(t.revenue for t in months)


def test_conversion_rate_sweep_has_five_even_points(six_months, default_model):
    points = sweep(DEFAULT_KEYWORDS, six_months, default_model, "conversion_rate", 2, 4)
    assert [p.value for p in points] == [2.0, 2.5, 3.0, 3.5, 4.0]

    traffic, conversions, revenue = _horizon_totals(six_months, default_model)
    middle = points[2]
    assert middle.traffic == round_half_up(traffic)
    assert middle.conversions == round_half_up(conversions)
    assert middle.revenue == pytest.approx(revenue, abs=0.01)

    # traffic does not depend on the conversion rate; conversions grow with it
    assert len({p.traffic for p in points}) == 1
    assert [p.revenue for p in points] == sorted(p.revenue for p in points)


def test_order_value_sweep_keeps_conversions(six_months, default_model):
    points = sweep(DEFAULT_KEYWORDS, six_months, default_model, "average_order_value", 100, 500)
    assert [p.value for p in points] == [100.0, 200.0, 300.0, 400.0, 500.0]
    assert len({p.conversions for p in points}) == 1

    _, conversions, _ = _horizon_totals(six_months, default_model)
    assert points[0].revenue == pytest.approx(conversions * 100, abs=0.01)
    assert points[-1].revenue == pytest.approx(conversions * 500, abs=0.01)


@pytest.mark.parametrize("start,end", [(0, 0), (3, 3), (0.1, 0.7), (1, 100)])
def test_any_forward_range_gives_five_points(start, end, six_months, default_model):
    points = sweep(DEFAULT_KEYWORDS, six_months, default_model, "conversion_rate", start, end)
    assert len(points) == 5
    assert points[0].value == pytest.approx(start)
    assert points[-1].value == pytest.approx(end)


def test_reversed_range_is_empty(six_months, default_model):
    assert sweep(DEFAULT_KEYWORDS, six_months, default_model, "conversion_rate", 4, 2) == []


def test_reversed_range_is_empty_even_with_bad_inputs(six_months, default_model):
    broken = [Keyword("broken", 0, 5, 2, 10)]
    assert sweep(broken, six_months, default_model, "conversion_rate", 4, 2) == []
    assert sweep(DEFAULT_KEYWORDS, six_months.with_changes(projection_period=13), default_model,
                 "average_order_value", 300, 200) == []


def test_unknown_variable(six_months, default_model):
    with pytest.raises(ValidationError):
        sweep(DEFAULT_KEYWORDS, six_months, default_model, "investment", 1, 2)


def test_sweep_rejects_malformed_keywords(six_months, default_model):
    with pytest.raises(MalformedKeywordError):
        sweep([Keyword("broken", 0, 5, 2, 10)], six_months, default_model, "conversion_rate", 1, 2)


def test_sweep_validates_period(six_months, default_model):
    with pytest.raises(ValidationError):
        sweep(DEFAULT_KEYWORDS, six_months.with_changes(projection_period=13), default_model, "conversion_rate", 1, 2)


def test_default_sweep_range(six_months):
    assert default_sweep_range(six_months, "conversion_rate") == (2, 4)
    assert default_sweep_range(six_months, "average_order_value") == pytest.approx((200, 300))
