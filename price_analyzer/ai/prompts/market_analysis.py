# flake8: noqa: E501

"""Market analysis and price prediction prompts."""

from typing import Optional

from price_analyzer.ai.prompts.base import Prompt, PromptConfig
from price_analyzer.schemas.analysis import AnalysisContext
from price_analyzer.services.context import render_records, render_similar_historical, render_similar_products


class MarketAnalysisPrompt(Prompt):
    """Long-form, multi-section market report."""

    def __init__(self, model: Optional[str] = None, temperature: float = 0.3, max_tokens: int = 2000):
        system_prompt = (
            "You are a professional market analyst with expertise in international trade, pricing trends, "
            "and market forecasting. Provide actionable insights with confidence levels."
        )

        template = """You are an expert market analyst specializing in international trade and pricing. Analyze the following data:

PRODUCT DETAILS:
- Product: {product_name}
- HSN Code: {hsn_code}
- Destination Market: {market}

HISTORICAL PRICE DATA:
{historical_data}

SIMILAR PRODUCTS:
{similar_products}

SIMILAR HISTORICAL DATA:
{similar_historical_data}

Provide a comprehensive analysis including:
1. CURRENT SELLING PRICE: Most recent market price with confidence level
2. PRICE TREND ANALYSIS: Direction, percentage changes, volatility patterns
3. MARKET INSIGHTS: Market positioning, demand factors, competition
4. SIMILAR PRODUCTS ANALYSIS: How similar products perform, cross-selling opportunities
5. HISTORICAL COMPARISON: Compare with similar historical data patterns
6. FUTURE OUTLOOK: 6-12 month predictions with risk assessment
7. BUSINESS RECOMMENDATIONS: Optimal timing, pricing strategies, market entry advice

Format professionally with clear sections and actionable insights."""

        super().__init__(
            template=template,
            system_prompt=system_prompt,
            config=PromptConfig(model=model, temperature=temperature, max_tokens=max_tokens),
        )

    def variables(self, context: AnalysisContext) -> dict:
        return {
            "product_name": context.product.product_name,
            "hsn_code": context.product.hsn_code,
            "market": context.product.market,
            "historical_data": render_records(context.historical_data),
            "similar_products": render_similar_products(context.similar_products),
            "similar_historical_data": render_similar_historical(context.similar_historical_data),
        }


class MarketPredictionPrompt(Prompt):
    """Short one-year prediction with a confidence label. Sent without a system message."""

    def __init__(self, model: Optional[str] = None, temperature: float = 0.2, max_tokens: int = 400):
        template = """Based on historical data for {product_name} in {market}: {historical_data}

{similar_context}

Provide a concise market prediction:
1. Predicted price for next year
2. Confidence level (High/Medium/Low)
3. Key influencing factors
4. Similar product opportunities
5. One-line recommendation

Keep under 250 words, business-focused."""

        super().__init__(
            template=template,
            system_prompt=None,
            config=PromptConfig(model=model, temperature=temperature, max_tokens=max_tokens),
        )

    def variables(self, context: AnalysisContext) -> dict:
        similar_context = ""
        if context.similar_products:
            similar_context = "Similar products: " + ", ".join(p.product_name for p in context.similar_products)
        return {
            "product_name": context.product.product_name,
            "market": context.product.market,
            "historical_data": render_records(context.historical_data, separator=", ", with_currency=False),
            "similar_context": similar_context,
        }
