import itertools
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

from price_analyzer.ai.providers.base import BaseProvider
from price_analyzer.config import Settings
from price_analyzer.schemas.analysis import HistoricalRecord
from price_analyzer.schemas.documents import DocumentMetadata, DocumentType, StoredDocument
from price_analyzer.services.container import ServiceContainer
from price_analyzer.services.embeddings import EmbeddingClient
from price_analyzer.services.repositories import DocumentRepository, MarketPriceRepository

DIMENSIONS = 384


class FakeEmbeddingProvider(BaseProvider):
    """Returns constant vectors; raises queued errors first."""

    def __init__(self, dimensions: int = DIMENSIONS, failures: Optional[List[Exception]] = None):
        super().__init__(default_model="fake-embedder")
        self.dimensions = dimensions
        self.failures = list(failures or [])
        self.calls: List[str] = []
        self.provider = "fake"

    async def generate_text(self, messages, model=None, temperature=1.0, max_tokens=None) -> str:
        raise NotImplementedError

    async def get_embeddings(self, text: List[str]) -> List[List[float]]:
        self.calls.extend(text)
        if self.failures:
            raise self.failures.pop(0)
        return [[0.1] * self.dimensions for _ in text]

    def get_dimensions(self) -> int:
        return self.dimensions


class FakeTextProvider(BaseProvider):
    """Returns queued responses; a queued exception is raised instead."""

    def __init__(self, responses: Optional[List[Any]] = None):
        super().__init__(default_model="fake-llm")
        self.responses = list(responses or [])
        self.requests: List[Dict[str, Any]] = []
        self.provider = "fake"

    async def generate_text(self, messages, model=None, temperature=1.0, max_tokens=None) -> str:
        self.requests.append(
            {"messages": messages, "model": model, "temperature": temperature, "max_tokens": max_tokens}
        )
        response = self.responses.pop(0) if self.responses else "ok"
        if isinstance(response, Exception):
            raise response
        return response

    async def get_embeddings(self, text: List[str]) -> List[List[float]]:
        raise NotImplementedError

    def get_dimensions(self) -> int:
        raise NotImplementedError


class InMemoryDocumentRepository(DocumentRepository):
    """Dict-backed document store.

    ``search_results`` is what the nearest-neighbor query returns; set
    ``search_error`` or ``scan_error`` to make either path fail.
    """

    def __init__(self):
        self.documents: Dict[str, StoredDocument] = {}
        self.embeddings: Dict[str, List[float]] = {}
        self.search_results: List[StoredDocument] = []
        self.search_error: Optional[Exception] = None
        self.scan_error: Optional[Exception] = None
        self.lookup_error: Optional[Exception] = None
        self.search_calls: List[Dict[str, Any]] = []
        self.scan_calls = 0
        self._ids = itertools.count(1)

    async def find_by_key(self, hsn_code, market):
        if self.lookup_error:
            raise self.lookup_error
        for document in self.documents.values():
            if document.key == (hsn_code, market):
                return document.model_copy(deep=True)
        return None

    async def insert(self, content, embedding, hsn_code, market, metadata, created_at):
        document_id = str(next(self._ids))
        document = StoredDocument(
            id=document_id,
            content=content,
            hsn_code=hsn_code,
            market=market,
            metadata=metadata.model_copy(deep=True),
            created_at=created_at,
        )
        self.documents[document_id] = document
        self.embeddings[document_id] = embedding
        return document

    async def update(self, document_id, content, embedding, metadata, updated_at):
        document = self.documents[document_id]
        self.documents[document_id] = document.model_copy(
            update={"content": content, "metadata": metadata.model_copy(deep=True), "updated_at": updated_at}
        )
        self.embeddings[document_id] = embedding

    async def vector_search(self, embedding, threshold, count):
        self.search_calls.append({"threshold": threshold, "count": count})
        if self.search_error:
            raise self.search_error
        return [doc for doc in self.search_results if (doc.similarity or 0) >= threshold][:count]

    async def list_by_type(self, doc_type, exclude_key, limit):
        self.scan_calls += 1
        if self.scan_error:
            raise self.scan_error
        matches = [
            doc
            for doc in self.documents.values()
            if doc.metadata.type == doc_type and doc.key != exclude_key
        ]
        return matches[:limit]

    async def ping(self):
        if self.lookup_error:
            raise self.lookup_error
        return True


class InMemoryMarketPriceRepository(MarketPriceRepository):
    def __init__(self, rows: Optional[Dict[int, Dict[str, Any]]] = None, error: Optional[Exception] = None):
        self.rows = rows or {}
        self.error = error

    async def get_row(self, hsn_code: int):
        if self.error:
            raise self.error
        row = self.rows.get(hsn_code)
        return dict(row) if row is not None else None


def make_document(
    hsn_code: str,
    market: str,
    name: str,
    prices: Dict[str, float],
    similarity: Optional[float] = None,
    doc_type: Optional[DocumentType] = DocumentType.PRODUCT_WITH_HISTORY,
    content: Optional[str] = None,
) -> StoredDocument:
    years = sorted(prices, reverse=True)
    metadata = DocumentMetadata(
        hsn_code=hsn_code,
        name=name,
        market=market,
        type=doc_type,
        years=years,
        prices=prices,
        currencies={year: "USD" for year in years},
    )
    return StoredDocument(
        id=f"{hsn_code}-{market}",
        content=content if content is not None else f"Product: {name}\nHSN: {hsn_code}\nMarket: {market}",
        hsn_code=hsn_code,
        market=market,
        metadata=metadata,
        similarity=similarity,
    )


class SteppingClock:
    """Clock that advances one second per call."""

    def __init__(self, start: Optional[datetime] = None):
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        current = self.now
        self.now = current + timedelta(seconds=1)
        return current


async def no_sleep(seconds: float) -> None:
    return None


@pytest.fixture
def records() -> List[HistoricalRecord]:
    return [
        HistoricalRecord(year="2024", price=120.0),
        HistoricalRecord(year="2023", price=100.0),
    ]


@pytest.fixture
def embedding_provider() -> FakeEmbeddingProvider:
    return FakeEmbeddingProvider()


@pytest.fixture
def sleeps() -> List[float]:
    return []


@pytest.fixture
def embedding_client(embedding_provider, sleeps) -> EmbeddingClient:
    async def record_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    return EmbeddingClient(embedding_provider, dimensions=DIMENSIONS, sleep=record_sleep)


@pytest.fixture
def document_repository() -> InMemoryDocumentRepository:
    return InMemoryDocumentRepository()


@pytest.fixture
def market_rows() -> Dict[int, Dict[str, Any]]:
    return {
        690410: {
            "id": "row-1",
            "hsn_code": 690410,
            "AUSTRALIA": '{"2019": 80.5, "2020-2021": "95", "2022": 0, "2023": 100, "2024": 120}',
            "GERMANY": {"2023": 140.0, "2024": 150.0},
            "JAPAN": None,
            "created_at": "2024-01-01T00:00:00Z",
            "updated_at": None,
        }
    }


@pytest.fixture
def market_repository(market_rows) -> InMemoryMarketPriceRepository:
    return InMemoryMarketPriceRepository(market_rows)


@pytest.fixture
def text_provider() -> FakeTextProvider:
    return FakeTextProvider()


@pytest.fixture
def services(text_provider, embedding_provider, document_repository, market_repository) -> ServiceContainer:
    container = ServiceContainer.assemble(
        text_provider,
        embedding_provider,
        document_repository,
        market_repository,
        config=Settings(),
    )
    container.embeddings._sleep = no_sleep
    return container


