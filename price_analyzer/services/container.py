"""Service objects built once at startup and shared by every request."""

import logging
from dataclasses import dataclass
from typing import Optional

from price_analyzer.ai.prompts.market_analysis import MarketAnalysisPrompt, MarketPredictionPrompt
from price_analyzer.ai.providers.base import BaseProvider
from price_analyzer.ai.providers.factory import create_provider
from price_analyzer.config import PROVIDER_TYPE, Settings, settings
from price_analyzer.services.analysis import AnalysisDispatcher
from price_analyzer.services.documents import DocumentStore
from price_analyzer.services.embeddings import EmbeddingClient
from price_analyzer.services.historical import HistoricalDataAccessor
from price_analyzer.services.repositories import (
    BeanieDocumentRepository,
    BeanieMarketPriceRepository,
    DocumentRepository,
    MarketPriceRepository,
)
from price_analyzer.services.similarity import SimilaritySearchEngine

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    analysis_provider: BaseProvider
    embeddings: EmbeddingClient
    document_repository: DocumentRepository
    historical: HistoricalDataAccessor
    documents: DocumentStore
    similarity: SimilaritySearchEngine
    dispatcher: AnalysisDispatcher
    default_limit: int = 5
    analysis_model: Optional[str] = None

    @classmethod
    def assemble(
        cls,
        analysis_provider: BaseProvider,
        embedding_provider: BaseProvider,
        document_repository: DocumentRepository,
        market_price_repository: MarketPriceRepository,
        config: Settings = settings,
    ) -> "ServiceContainer":
        """Wire services around already-created providers and repositories."""
        embeddings = EmbeddingClient(
            embedding_provider,
            dimensions=config.embedding.dimensions,
            max_attempts=config.embedding.max_attempts,
            backoff_base=config.embedding.backoff_base,
            probe_text=config.embedding.probe_text,
        )
        documents = DocumentStore(document_repository, embeddings)
        similarity = SimilaritySearchEngine(
            document_repository,
            documents,
            embeddings,
            match_threshold=config.search.match_threshold,
            product_min_score=config.search.similar_product_min_score,
            fallback_min_score=config.search.fallback_min_score,
            fallback_scan_limit=config.search.fallback_scan_limit,
        )
        dispatcher = AnalysisDispatcher(
            analysis_provider,
            analysis_prompt=MarketAnalysisPrompt(
                model=config.ai.analysis_model,
                temperature=config.ai.analysis_temperature,
                max_tokens=config.ai.analysis_max_tokens,
            ),
            prediction_prompt=MarketPredictionPrompt(
                model=config.ai.analysis_model,
                temperature=config.ai.prediction_temperature,
                max_tokens=config.ai.prediction_max_tokens,
            ),
        )
        return cls(
            analysis_provider=analysis_provider,
            embeddings=embeddings,
            document_repository=document_repository,
            historical=HistoricalDataAccessor(market_price_repository, window=config.search.history_window),
            documents=documents,
            similarity=similarity,
            dispatcher=dispatcher,
            default_limit=config.search.default_limit,
            analysis_model=config.ai.analysis_model,
        )


def build_services(config: Settings = settings) -> ServiceContainer:
    """Create providers and MongoDB repositories from settings.

    Raises:
        ConfigurationError: If a configured provider has no credentials
    """
    analysis_provider = create_provider(config.ai.analysis_provider, model=config.ai.analysis_model, config=config)

    embedding_model = config.embedding.model if config.ai.embedding_provider == PROVIDER_TYPE.HUGGINGFACE else None
    embedding_provider = create_provider(config.ai.embedding_provider, model=embedding_model, config=config)

    logger.info(
        f"Services configured: analysis={config.ai.analysis_provider.value}, "
        f"embeddings={config.ai.embedding_provider.value}"
    )
    return ServiceContainer.assemble(
        analysis_provider,
        embedding_provider,
        BeanieDocumentRepository(index_name=config.database.vector_index),
        BeanieMarketPriceRepository(),
        config=config,
    )
