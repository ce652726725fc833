"""End-to-end price analysis for one product and market."""

import logging
from typing import Dict, List

from price_analyzer.schemas.analysis import (
    AnalysisMode,
    AnalysisRequest,
    PriceAnalysisResult,
    ProductIdentity,
    SimilarityResults,
    StepStatus,
)
from price_analyzer.services import connections
from price_analyzer.services.container import ServiceContainer
from price_analyzer.services.context import build_context
from price_analyzer.utils.errors import InvalidRequestError

logger = logging.getLogger(__name__)

ANALYSIS_HEADER = "AI-POWERED ENHANCED ANALYSIS"
PREDICTION_HEADER = "MARKET PREDICTION"


def normalize_request(request: AnalysisRequest) -> ProductIdentity:
    """Trim inputs and upper-case the market.

    Raises:
        InvalidRequestError: If any field is blank
    """
    product_name = request.product_name.strip()
    hsn_code = request.hsn_code.strip()
    market = request.market.strip().upper()

    missing = [
        name
        for name, value in (("product_name", product_name), ("hsn_code", hsn_code), ("market", market))
        if not value
    ]
    if missing:
        raise InvalidRequestError("Please fill in all fields before analyzing", {"missing": missing})

    return ProductIdentity(product_name=product_name, hsn_code=hsn_code, market=market)


async def analyze_product(services: ServiceContainer, request: AnalysisRequest) -> PriceAnalysisResult:
    """Historical fetch, similarity search, then local or remote analysis.

    Raises:
        InvalidRequestError: Blank input
        CodeNotFound, MarketNotFound, NoValidRecords: No usable history; MarketNotFound
            and NoValidRecords carry the available markets
        DocumentStoreError: The historical lookup failed
        AnalysisServiceError: The remote analysis call failed
    """
    product = normalize_request(request)
    steps: Dict[str, StepStatus] = {}
    logger.info(f"Analyzing {product.product_name} ({product.hsn_code}) for {product.market}")

    records = await services.historical.fetch_historical_data(product.hsn_code, product.market)
    steps["historical"] = StepStatus.OK

    similar = SimilarityResults()
    if request.use_embeddings:
        search = await services.similarity.search(
            product.product_name,
            product.hsn_code,
            product.market,
            records,
            limit=request.limit or services.default_limit,
        )
        similar = search.results
        if search.found and not similar.is_empty:
            steps["similarity"] = StepStatus.OK
        else:
            steps["similarity"] = StepStatus.RECOVERABLE_EMPTY
        logger.debug(f"Similarity source: {search.source.value}")
    else:
        steps["similarity"] = StepStatus.SKIPPED

    context = build_context(product, records, similar)
    mode = AnalysisMode.REMOTE if request.use_ai else AnalysisMode.LOCAL
    report = await services.dispatcher.analyze(context, mode)
    steps["analysis"] = StepStatus.OK
    steps["prediction"] = report.prediction_status

    if mode == AnalysisMode.REMOTE:
        report.analysis = f"{ANALYSIS_HEADER}\n\n{report.analysis}"
        if report.prediction_status == StepStatus.OK:
            report.prediction = f"{PREDICTION_HEADER}\n\n{report.prediction}"

    logger.info(f"Analysis of {product.hsn_code}/{product.market} finished in {mode.value} mode")
    return PriceAnalysisResult(
        product=product,
        historical_data=records,
        similar_products=similar.similar_products,
        similar_historical_data=similar.similar_historical_data,
        report=report,
        steps=steps,
    )


async def list_markets(services: ServiceContainer, hsn_code: str) -> List[str]:
    """Markets with data for ``hsn_code``, empty when the lookup fails."""
    return await services.historical.list_available_markets(hsn_code.strip())


async def check_connections(services: ServiceContainer) -> Dict[str, bool]:
    """Probe every external service. Raises ConnectionCheckError on the first failure."""
    return await connections.test_connections(
        services.analysis_provider,
        services.document_repository,
        services.embeddings,
        model=services.analysis_model,
    )
