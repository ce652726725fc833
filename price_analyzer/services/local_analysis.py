"""Deterministic price analysis that runs without any network call."""

from typing import List, Optional

from price_analyzer.schemas.analysis import (
    HistoricalRecord,
    LocalMetrics,
    MarketPosition,
    PriceTrend,
    ProductIdentity,
    SimilarProduct,
)

NO_DATA_MESSAGE = "No historical data available for analysis."

# Percent change beyond which a trend is no longer considered stable
TREND_THRESHOLD = 2.0

POSITION_TEXT = {
    MarketPosition.AT_MAXIMUM: "At HIGHEST historical price",
    MarketPosition.AT_MINIMUM: "At LOWEST historical price",
    MarketPosition.ABOVE_MIDRANGE: "Above historical average",
    MarketPosition.BELOW_MIDRANGE: "Below historical average",
}

RECOMMENDATION_TEXT = {
    PriceTrend.INCREASING: "Prices trending UP - Consider timing",
    PriceTrend.DECREASING: "Prices trending DOWN - Good opportunity",
    PriceTrend.STABLE: "Stable pricing - Predictable conditions",
}


def compute_metrics(records: List[HistoricalRecord]) -> Optional[LocalMetrics]:
    """Derive price statistics from newest-first records. None when there are none."""
    if not records:
        return None

    prices = [record.price for record in records]
    current = prices[0]
    previous = prices[1] if len(prices) > 1 else prices[0]
    lowest = min(prices)
    highest = max(prices)

    recent_change = 0.0
    trend = PriceTrend.STABLE
    if len(prices) > 1:
        recent_change = (current - previous) / previous * 100
        if recent_change > TREND_THRESHOLD:
            trend = PriceTrend.INCREASING
        elif recent_change < -TREND_THRESHOLD:
            trend = PriceTrend.DECREASING

    if current == highest:
        position = MarketPosition.AT_MAXIMUM
    elif current == lowest:
        position = MarketPosition.AT_MINIMUM
    elif current > (lowest + highest) / 2:
        position = MarketPosition.ABOVE_MIDRANGE
    else:
        position = MarketPosition.BELOW_MIDRANGE

    return LocalMetrics(
        current_price=current,
        previous_price=previous,
        current_year=records[0].year,
        recent_change=recent_change,
        trend=trend,
        min_price=lowest,
        max_price=highest,
        position=position,
        data_points=len(records),
    )


def render_report(
    product: ProductIdentity,
    metrics: LocalMetrics,
    currency: str = "USD",
    similar_products: Optional[List[SimilarProduct]] = None,
) -> str:
    lines = [
        "ENHANCED PRICE ANALYSIS",
        "",
        f"Product: {product.product_name}",
        f"HSN Code: {product.hsn_code}",
        f"Market: {product.market}",
        "",
        f"CURRENT SELLING PRICE: ${metrics.current_price:.2f} {currency} ({metrics.current_year})",
        "",
        "KEY METRICS:",
        f"- Current Price: ${metrics.current_price:.2f} {currency}",
        f"- Recent Trend: {metrics.trend.value.upper()}",
    ]
    if metrics.data_points > 1:
        sign = "+" if metrics.recent_change > 0 else ""
        lines.append(f"- Recent Change: {sign}{metrics.recent_change:.1f}%")
    lines += [
        f"- Historical Range: ${metrics.min_price:.2f} - ${metrics.max_price:.2f} {currency}",
        "",
        "MARKET POSITION:",
        POSITION_TEXT[metrics.position],
        "",
    ]

    if similar_products:
        lines.append("SIMILAR PRODUCTS FOUND:")
        lines += [f"- {p.product_name} ({p.hsn_code}) - {p.similarity:.1f}% similar" for p in similar_products]
    else:
        lines.append("No similar products found")

    lines += [
        "",
        "RECOMMENDATION:",
        RECOMMENDATION_TEXT[metrics.trend],
        "",
        f"Analysis based on {metrics.data_points} data points",
    ]
    return "\n".join(lines)


def analyze_locally(
    product: ProductIdentity,
    records: List[HistoricalRecord],
    similar_products: Optional[List[SimilarProduct]] = None,
) -> str:
    """Build the local report, or the fixed no-data message for an empty history."""
    metrics = compute_metrics(records)
    if metrics is None:
        return NO_DATA_MESSAGE
    return render_report(product, metrics, records[0].currency, similar_products)
