from .models import Keyword


def position_at_month(keyword: Keyword, month: int, horizon: int) -> float:
    """
    Expected ranking of `keyword` in `month` (1-based) of a `horizon`-month forecast.

    The gap to target is spread evenly over the horizon and slowed by difficulty
    (difficulty 100 never moves). The result never crosses target_position.
    """
    raw_delta = (keyword.position - keyword.target_position) / horizon
    difficulty_factor = 1 - keyword.difficulty / 100
    adjusted_delta = raw_delta * difficulty_factor
    return max(keyword.target_position, keyword.position - adjusted_delta * (month - 1))
