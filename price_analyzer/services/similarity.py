"""Similarity search over stored product documents.

The primary path is a nearest-neighbor query on embeddings. When that query
fails or comes back empty, a keyword-overlap scan over the same documents is
used instead. Callers only ever see a (possibly empty) pair of lists; the
reason a search came back empty is kept in ``SimilaritySearch`` for logging.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from price_analyzer.schemas.analysis import (
    HistoricalRecord,
    SimilarHistoricalRecord,
    SimilarityResults,
    SimilarProduct,
)
from price_analyzer.schemas.documents import DocumentType, StoredDocument
from price_analyzer.services.context import render_document_text
from price_analyzer.services.documents import DocumentStore
from price_analyzer.services.embeddings import EmbeddingClient
from price_analyzer.services.repositories import DocumentRepository

logger = logging.getLogger(__name__)


class SearchSource(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"
    UNAVAILABLE = "unavailable"


@dataclass
class SimilaritySearch:
    """Outcome of one search, before it is collapsed for the caller."""

    source: SearchSource
    results: SimilarityResults = field(default_factory=SimilarityResults)
    error: Optional[BaseException] = None

    @property
    def found(self) -> bool:
        return self.source != SearchSource.UNAVAILABLE


def clamp_score(score: float) -> float:
    return max(0.0, min(100.0, score))


def tokenize(text: str) -> List[str]:
    """Lowercase whitespace tokens longer than two characters."""
    return [word for word in text.lower().split() if len(word) > 2]


def keyword_similarity(query_tokens: List[str], candidate_tokens: List[str]) -> float:
    """Share of query tokens that overlap some candidate token, scaled to 0-100."""
    if not query_tokens:
        return 0.0
    matches = sum(
        1
        for query_word in query_tokens
        if any(query_word in doc_word or doc_word in query_word for doc_word in candidate_tokens)
    )
    return clamp_score(matches / len(query_tokens) * 100)


class SimilaritySearchEngine:
    """Finds stored products similar to the one being analyzed."""

    def __init__(
        self,
        repository: DocumentRepository,
        documents: DocumentStore,
        embeddings: EmbeddingClient,
        match_threshold: float = 0.3,
        product_min_score: float = 50.0,
        fallback_min_score: float = 20.0,
        fallback_scan_limit: int = 100,
    ):
        self.repository = repository
        self.documents = documents
        self.embeddings = embeddings
        self.match_threshold = match_threshold
        self.product_min_score = product_min_score
        self.fallback_min_score = fallback_min_score
        self.fallback_scan_limit = fallback_scan_limit
        self.logger = logging.getLogger(__name__)

    async def find_similar(
        self,
        product_name: str,
        hsn_code: str,
        market: str,
        records: List[HistoricalRecord],
        limit: int = 5,
    ) -> SimilarityResults:
        """Similar products and their histories. Empty when the search is unavailable."""
        search = await self.search(product_name, hsn_code, market, records, limit)
        return search.results

    async def search(
        self,
        product_name: str,
        hsn_code: str,
        market: str,
        records: List[HistoricalRecord],
        limit: int = 5,
    ) -> SimilaritySearch:
        key = (hsn_code, market)
        query = render_document_text(product_name, hsn_code, market, records)

        try:
            # Store the current product so later searches can find it
            await self.documents.upsert_document(product_name, hsn_code, market, records)
            query_embedding = await self.embeddings.embed(query)
        except Exception as e:
            self.logger.error(f"Similarity search unavailable for {hsn_code}/{market}: {e}", exc_info=True)
            return SimilaritySearch(SearchSource.UNAVAILABLE, error=e)

        try:
            candidates = await self.repository.vector_search(query_embedding, self.match_threshold, limit * 2)
            candidates = [c for c in candidates if c.key != key]
        except Exception as e:
            self.logger.warning(f"Nearest-neighbor query failed, using keyword search: {e}")
            return await self._fallback(query, key, limit, primary_error=e)

        if not candidates:
            self.logger.info(f"Nearest-neighbor query empty for {hsn_code}/{market}, using keyword search")
            return await self._fallback(query, key, limit)

        results = self._collect_primary(candidates, limit)
        self.logger.info(
            f"Primary search for {hsn_code}/{market}: {len(results.similar_products)} products, "
            f"{len(results.similar_historical_data)} histories"
        )
        return SimilaritySearch(SearchSource.PRIMARY, results)

    def _collect_primary(self, candidates: List[StoredDocument], limit: int) -> SimilarityResults:
        products: List[SimilarProduct] = []
        histories: List[SimilarHistoricalRecord] = []

        for candidate in candidates:
            score = clamp_score((candidate.similarity or 0.0) * 100)

            if candidate.metadata.type == DocumentType.PRODUCT_WITH_HISTORY and score >= self.product_min_score:
                products.append(self._to_product(candidate, score))

            history = self._to_history(candidate, score)
            if history is not None:
                histories.append(history)

        return SimilarityResults(similar_products=products[:limit], similar_historical_data=histories[:limit])

    async def _fallback(
        self,
        query: str,
        key: Tuple[str, str],
        limit: int,
        primary_error: Optional[BaseException] = None,
    ) -> SimilaritySearch:
        try:
            documents = await self.repository.list_by_type(
                DocumentType.PRODUCT_WITH_HISTORY, exclude_key=key, limit=self.fallback_scan_limit
            )
        except Exception as e:
            self.logger.error(f"Keyword search failed: {e}", exc_info=True)
            return SimilaritySearch(SearchSource.UNAVAILABLE, error=e)

        query_tokens = tokenize(query)
        scored: List[Tuple[float, StoredDocument]] = []
        for document in documents:
            if document.key == key:
                continue
            candidate_tokens = tokenize(document.content) + tokenize(document.metadata.name)
            score = keyword_similarity(query_tokens, candidate_tokens)
            if score > self.fallback_min_score:
                scored.append((score, document))

        scored.sort(key=lambda item: item[0], reverse=True)
        scored = scored[:limit]

        products = [self._to_product(document, score) for score, document in scored]
        histories = [h for h in (self._to_history(document, score) for score, document in scored) if h is not None]

        self.logger.info(f"Keyword search matched {len(products)} of {len(documents)} documents")
        return SimilaritySearch(
            SearchSource.FALLBACK,
            SimilarityResults(similar_products=products, similar_historical_data=histories),
            error=primary_error,
        )

    @staticmethod
    def _to_product(document: StoredDocument, score: float) -> SimilarProduct:
        return SimilarProduct(
            hsn_code=document.hsn_code,
            product_name=document.product_name,
            similarity=score,
            markets=[document.market],
        )

    @staticmethod
    def _to_history(document: StoredDocument, score: float) -> Optional[SimilarHistoricalRecord]:
        if not document.metadata.years or not document.metadata.prices:
            return None
        records = document.metadata.historical_records()
        if not records:
            return None
        return SimilarHistoricalRecord(
            hsn_code=document.hsn_code,
            product_name=document.product_name,
            similarity=score,
            markets=[document.market],
            historical_data=records,
        )
