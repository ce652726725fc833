import pytest

from price_analyzer.schemas.analysis import (
    HistoricalRecord,
    MarketPosition,
    PriceTrend,
    ProductIdentity,
    SimilarProduct,
)
from price_analyzer.services.local_analysis import NO_DATA_MESSAGE, analyze_locally, compute_metrics

PRODUCT = ProductIdentity(product_name="Ceramic Tiles", hsn_code="690410", market="AUSTRALIA")


def history(*prices):
    return [HistoricalRecord(year=str(2024 - i), price=price) for i, price in enumerate(prices)]


def test_rising_prices(records):
    metrics = compute_metrics(records)

    assert metrics.trend == PriceTrend.INCREASING
    assert metrics.recent_change == pytest.approx(20.0)
    assert metrics.position == MarketPosition.AT_MAXIMUM
    assert (metrics.min_price, metrics.max_price) == (100.0, 120.0)
    assert metrics.current_year == "2024"


def test_falling_prices():
    metrics = compute_metrics(history(100.0, 120.0))

    assert metrics.trend == PriceTrend.DECREASING
    assert metrics.recent_change == pytest.approx(-16.67, abs=0.01)
    assert metrics.position == MarketPosition.AT_MINIMUM


def test_small_change_is_stable():
    metrics = compute_metrics(history(101.0, 100.0))

    assert metrics.trend == PriceTrend.STABLE


@pytest.mark.parametrize(
    "prices, position",
    [
        ((115.0, 100.0, 120.0), MarketPosition.ABOVE_MIDRANGE),
        ((105.0, 100.0, 120.0), MarketPosition.BELOW_MIDRANGE),
    ],
)
def test_position_between_extremes(prices, position):
    assert compute_metrics(history(*prices)).position == position


def test_single_record():
    metrics = compute_metrics(history(100.0))

    assert metrics.trend == PriceTrend.STABLE
    assert metrics.recent_change == 0.0
    assert metrics.data_points == 1


def test_no_records():
    assert compute_metrics([]) is None
    assert analyze_locally(PRODUCT, []) == NO_DATA_MESSAGE
    assert NO_DATA_MESSAGE == "No historical data available for analysis."


def test_report_contents(records):
    similar = [SimilarProduct(hsn_code="690490", product_name="Floor Tiles", similarity=72.5)]

    report = analyze_locally(PRODUCT, records, similar)

    assert "CURRENT SELLING PRICE: $120.00 USD (2024)" in report
    assert "- Recent Trend: INCREASING" in report
    assert "- Recent Change: +20.0%" in report
    assert "- Historical Range: $100.00 - $120.00 USD" in report
    assert "At HIGHEST historical price" in report
    assert "- Floor Tiles (690490) - 72.5% similar" in report
    assert "Prices trending UP - Consider timing" in report
    assert report.endswith("Analysis based on 2 data points")


def test_report_without_similar_products():
    report = analyze_locally(PRODUCT, history(100.0))

    assert "No similar products found" in report
    assert "Recent Change" not in report
    assert "Stable pricing - Predictable conditions" in report
