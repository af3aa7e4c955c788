from dataclasses import dataclass, field, replace
from typing import Tuple

# ===============================
# Constants & Defaults
# ===============================
CURRENCY_OPTIONS = ["GBP (£)", "USD ($)", "EUR (€)"]
MIN_PROJECTION_PERIOD = 1
MAX_PROJECTION_PERIOD = 12
RANGE_WIDTH = 0.10  # ±10% band around monthly point estimates


@dataclass(frozen=True)
class Keyword:
    text: str
    search_volume: int
    position: float
    target_position: float
    difficulty: int

    def to_dict(self) -> dict:
        return {
            "keyword": self.text,
            "searchVolume": self.search_volume,
            "position": self.position,
            "targetPosition": self.target_position,
            "difficulty": self.difficulty,
        }


@dataclass(frozen=True)
class Settings:
    category: str = "BBQ & Outdoor Cooking"
    projection_period: int = 6
    currency: str = "GBP (£)"
    conversion_rate: float = 3.0
    investment: float = 5000
    average_order_value: float = 250
    ctr_model: str = "Default"

    def with_changes(self, **changes) -> "Settings":
        return replace(self, **changes)

    @property
    def currency_symbol(self) -> str:
        """'GBP (£)' -> '£'. Labels without a bracketed symbol are returned unchanged."""
        label = self.currency.strip()
        if "(" in label and label.endswith(")"):
            return label[label.index("(") + 1:-1]
        return label


DEFAULT_SETTINGS = Settings()

DEFAULT_KEYWORDS = (
    Keyword("gas bbq", 8000, 8, 3, 50),
    Keyword("charcoal bbq/orange bbq", 6500, 12, 5, 60),
    Keyword("bbq grill", 5000, 9, 4, 55),
)


@dataclass(frozen=True)
class KeywordContribution:
    keyword: str
    traffic: float
    conversions: float
    revenue: float


@dataclass(frozen=True)
class Projection:
    month: str
    traffic: int
    conversions: int
    revenue: str
    roi: str
    traffic_range: Tuple[int, int]
    conversions_range: Tuple[int, int]
    revenue_range: Tuple[float, float]
    keyword_breakdown: Tuple[KeywordContribution, ...] = field(default_factory=tuple)
    cumulative_revenue: float = 0.0


@dataclass(frozen=True)
class SensitivityPoint:
    value: float
    traffic: int
    conversions: int
    revenue: float
