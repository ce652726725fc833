"""Canonical text rendering and analysis context assembly."""

from typing import List, Optional

from price_analyzer.schemas.analysis import (
    AnalysisContext,
    HistoricalRecord,
    ProductIdentity,
    SimilarHistoricalRecord,
    SimilarityResults,
    SimilarProduct,
)


def render_records(records: List[HistoricalRecord], separator: str = "\n", with_currency: bool = True) -> str:
    return separator.join(record.render(with_currency=with_currency) for record in records)


def render_document_text(product_name: str, hsn_code: str, market: str, records: List[HistoricalRecord]) -> str:
    """Render a product history in the form used for both storage and queries."""
    return (
        f"Product: {product_name}\n"
        f"HSN: {hsn_code}\n"
        f"Market: {market}\n"
        f"Historical Data:\n{render_records(records)}"
    )


def render_similar_products(products: List[SimilarProduct]) -> str:
    if not products:
        return "No similar products found"
    return "\n".join(f"- {p.product_name} (HSN: {p.hsn_code}) - Similarity: {p.similarity:.1f}%" for p in products)


def render_similar_historical(items: List[SimilarHistoricalRecord]) -> str:
    if not items:
        return "No similar historical data found"
    lines = []
    for item in items:
        history = render_records(item.historical_data, separator=", ")
        lines.append(
            f"- {item.product_name} (HSN: {item.hsn_code}) - Similarity: {item.similarity:.1f}%\n  Prices: {history}"
        )
    return "\n".join(lines)


def build_context(
    product: ProductIdentity,
    records: List[HistoricalRecord],
    similar: Optional[SimilarityResults] = None,
) -> AnalysisContext:
    """Merge a product's history with whatever the similarity search returned."""
    similar = similar or SimilarityResults()
    return AnalysisContext(
        product=product,
        historical_data=list(records),
        similar_products=list(similar.similar_products),
        similar_historical_data=list(similar.similar_historical_data),
    )
