import pytest

from seo_forecaster import CTRModel, Keyword, Settings


@pytest.fixture
def gas_bbq() -> Keyword:
    return Keyword("gas bbq", 8000, 8, 3, 50)


@pytest.fixture
def bbq_settings() -> Settings:
    return Settings(
        category="BBQ & Outdoor Cooking",
        projection_period=1,
        currency="GBP (£)",
        conversion_rate=3,
        investment=5000,
        average_order_value=250,
        ctr_model="Default",
    )


@pytest.fixture
def default_model() -> CTRModel:
    return CTRModel.builtin("Default")
