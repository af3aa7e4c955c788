import pytest

from seo_forecaster import Keyword
from seo_forecaster.trajectory import position_at_month


def test_first_month_is_starting_position(gas_bbq):
    assert position_at_month(gas_bbq, 1, 6) == 8


def test_linear_improvement_slowed_by_difficulty(gas_bbq):
    # gap 5 over 6 months, halved by difficulty 50
    assert position_at_month(gas_bbq, 2, 6) == pytest.approx(8 - 5 / 12)
    assert position_at_month(gas_bbq, 6, 6) == pytest.approx(8 - 25 / 12)


def test_position_never_increases(gas_bbq):
    for horizon in range(1, 13):
        positions = [position_at_month(gas_bbq, m, horizon) for m in range(1, horizon + 1)]
        assert all(a >= b for a, b in zip(positions, positions[1:]))
        assert positions[0] == gas_bbq.position


def test_zero_difficulty_never_passes_target():
    kw = Keyword("easy", 1000, 10, 4, 0)
    assert position_at_month(kw, 12, 12) == pytest.approx(10 - 6 * 11 / 12)
    assert position_at_month(kw, 20, 12) == 4


def test_max_difficulty_freezes_position():
    kw = Keyword("hard", 1000, 15, 1, 100)
    assert all(position_at_month(kw, m, 12) == 15 for m in range(1, 13))


def test_already_at_target_stays_put():
    kw = Keyword("done", 1000, 3, 3, 40)
    assert all(position_at_month(kw, m, 6) == 3 for m in range(1, 7))


def test_target_worse_than_current_jumps_to_target_at_month_one():
    # Current behaviour: the clamp lifts the keyword straight to the (worse) target.
    kw = Keyword("slipping", 1000, 5, 9, 50)
    assert position_at_month(kw, 1, 6) == 9
    assert all(position_at_month(kw, m, 6) == 9 for m in range(1, 7))
