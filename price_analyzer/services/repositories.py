"""Data access for the document store and the historical-price table."""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from beanie import PydanticObjectId
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from price_analyzer.config import settings
from price_analyzer.schemas.documents import DocumentMetadata, DocumentType, ProductDocument, StoredDocument
from price_analyzer.schemas.market_prices import MarketPriceRow
from price_analyzer.utils.errors import DocumentStoreError

logger = logging.getLogger(__name__)


def to_stored_document(raw: Dict[str, Any]) -> Optional[StoredDocument]:
    """Validate a raw store row, returning None for rows that do not fit the schema."""
    data = dict(raw)
    if "_id" in data:
        data["id"] = str(data.pop("_id"))
    elif data.get("id") is not None:
        data["id"] = str(data["id"])
    data.pop("embedding", None)
    try:
        return StoredDocument.model_validate(data)
    except ValidationError as e:
        logger.warning(f"Skipping non-conforming document {data.get('id')}: {e.error_count()} errors")
        return None


def vector_search_pipeline(
    index_name: str, embedding: List[float], threshold: float, count: int
) -> List[Dict[str, Any]]:
    """Atlas aggregation ranking documents by cosine similarity to ``embedding``.

    Atlas reports cosine scores normalized to (1 + cos) / 2; they are mapped
    back to plain cosine before the threshold is applied.
    """
    return [
        {
            "$vectorSearch": {
                "index": index_name,
                "path": "embedding",
                "queryVector": embedding,
                "numCandidates": count * 4,
                "limit": count,
            }
        },
        {"$addFields": {"similarity": {"$subtract": [{"$multiply": [2, {"$meta": "vectorSearchScore"}]}, 1]}}},
        {"$project": {"embedding": 0}},
        {"$match": {"similarity": {"$gte": threshold}}},
    ]


class DocumentRepository(ABC):
    """Point lookup, insert, update and nearest-neighbor search over documents."""

    @abstractmethod
    async def find_by_key(self, hsn_code: str, market: str) -> Optional[StoredDocument]:
        """Return the document for (hsn_code, market) or None when absent."""

    @abstractmethod
    async def insert(
        self,
        content: str,
        embedding: List[float],
        hsn_code: str,
        market: str,
        metadata: DocumentMetadata,
        created_at: datetime,
    ) -> StoredDocument:
        """Insert a new document."""

    @abstractmethod
    async def update(
        self,
        document_id: str,
        content: str,
        embedding: List[float],
        metadata: DocumentMetadata,
        updated_at: datetime,
    ) -> None:
        """Overwrite content, embedding and metadata of an existing document."""

    @abstractmethod
    async def vector_search(self, embedding: List[float], threshold: float, count: int) -> List[StoredDocument]:
        """Rank stored documents by similarity to ``embedding``, best first."""

    @abstractmethod
    async def list_by_type(
        self, doc_type: DocumentType, exclude_key: Optional[Tuple[str, str]], limit: int
    ) -> List[StoredDocument]:
        """Scan documents of one type, skipping ``exclude_key``."""

    @abstractmethod
    async def ping(self) -> bool:
        """Run a trivial query against the store."""


class MarketPriceRepository(ABC):
    """Access to the wide historical-price table."""

    @abstractmethod
    async def get_row(self, hsn_code: int) -> Optional[Dict[str, Any]]:
        """Return the row for ``hsn_code`` as a plain dict, or None."""


class BeanieDocumentRepository(DocumentRepository):
    """MongoDB Atlas implementation backed by Beanie."""

    def __init__(self, index_name: str = settings.database.vector_index):
        self.logger = logging.getLogger(__name__)
        self.index_name = index_name

    async def find_by_key(self, hsn_code: str, market: str) -> Optional[StoredDocument]:
        try:
            document = await ProductDocument.find_one(
                ProductDocument.hsn_code == hsn_code,
                ProductDocument.market == market,
            )
        except PyMongoError as e:
            raise DocumentStoreError(f"Error checking existing document: {e}") from e
        if document is None:
            return None
        return to_stored_document(document.model_dump())

    async def insert(self, content, embedding, hsn_code, market, metadata, created_at) -> StoredDocument:
        document = ProductDocument(
            content=content,
            embedding=embedding,
            hsn_code=hsn_code,
            market=market,
            metadata=metadata,
            created_at=created_at,
        )
        try:
            await document.insert()
        except PyMongoError as e:
            raise DocumentStoreError(f"Error inserting document: {e}", {"hsn_code": hsn_code, "market": market}) from e
        self.logger.debug(f"Inserted document {document.id} for {hsn_code}/{market}")
        return StoredDocument(
            id=str(document.id),
            content=content,
            hsn_code=hsn_code,
            market=market,
            metadata=metadata,
            created_at=created_at,
        )

    async def update(self, document_id, content, embedding, metadata, updated_at) -> None:
        try:
            document = await ProductDocument.get(PydanticObjectId(document_id))
            if document is None:
                raise DocumentStoreError(f"Document {document_id} disappeared before update")
            await document.set(
                {
                    ProductDocument.content: content,
                    ProductDocument.embedding: embedding,
                    ProductDocument.metadata: metadata,
                    ProductDocument.updated_at: updated_at,
                }
            )
        except PyMongoError as e:
            raise DocumentStoreError(f"Error updating document {document_id}: {e}") from e
        self.logger.debug(f"Updated document {document_id}")

    async def vector_search(self, embedding: List[float], threshold: float, count: int) -> List[StoredDocument]:
        pipeline = vector_search_pipeline(self.index_name, embedding, threshold, count)
        try:
            results = await ProductDocument.aggregate(pipeline).to_list()
        except PyMongoError as e:
            raise DocumentStoreError(f"Nearest-neighbor query failed: {e}") from e

        documents = [to_stored_document(raw) for raw in results]
        return [doc for doc in documents if doc is not None]

    async def list_by_type(self, doc_type, exclude_key, limit) -> List[StoredDocument]:
        query: Dict[str, Any] = {"metadata.type": doc_type.value}
        if exclude_key:
            hsn_code, market = exclude_key
            query["$nor"] = [{"hsn_code": hsn_code, "market": market}]
        try:
            results = await ProductDocument.find(query).limit(limit).to_list()
        except PyMongoError as e:
            raise DocumentStoreError(f"Document scan failed: {e}") from e

        documents = [to_stored_document(doc.model_dump()) for doc in results]
        return [doc for doc in documents if doc is not None]

    async def ping(self) -> bool:
        try:
            await ProductDocument.find_all().limit(1).to_list()
        except PyMongoError as e:
            raise DocumentStoreError(f"Document store query failed: {e}") from e
        return True


class BeanieMarketPriceRepository(MarketPriceRepository):
    """MongoDB implementation of the historical-price table."""

    async def get_row(self, hsn_code: int) -> Optional[Dict[str, Any]]:
        try:
            row = await MarketPriceRow.find_one(MarketPriceRow.hsn_code == hsn_code)
        except PyMongoError as e:
            raise DocumentStoreError(f"Database error: {e}", {"hsn_code": hsn_code}) from e
        if row is None:
            return None
        return row.model_dump()
