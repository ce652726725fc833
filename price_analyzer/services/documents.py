"""Document store adapter: one embedded document per (HSN code, market)."""

import logging
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from price_analyzer.schemas.analysis import HistoricalRecord
from price_analyzer.schemas.documents import DocumentMetadata, StoredDocument, utcnow
from price_analyzer.services.context import render_document_text
from price_analyzer.services.embeddings import EmbeddingClient
from price_analyzer.services.repositories import DocumentRepository
from price_analyzer.utils.errors import DocumentStoreError, PriceAnalyzerError

logger = logging.getLogger(__name__)


class DocumentStore:
    """Persists product histories as searchable embedded documents."""

    def __init__(
        self,
        repository: DocumentRepository,
        embeddings: EmbeddingClient,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repository = repository
        self.embeddings = embeddings
        self.clock = clock
        self.logger = logging.getLogger(__name__)

    async def upsert_document(
        self,
        product_name: str,
        hsn_code: str,
        market: str,
        records: List[HistoricalRecord],
    ) -> Optional[StoredDocument]:
        """Create or refresh the document for (hsn_code, market).

        Returns None without touching the store when ``records`` is empty.

        Raises:
            EmbeddingUnavailable: If the text could not be embedded
            DocumentStoreError: If the lookup or the write failed
        """
        if not records:
            self.logger.debug(f"No records for {hsn_code}/{market}, skipping document upsert")
            return None

        content = render_document_text(product_name, hsn_code, market, records)
        embedding = await self.embeddings.embed(content)
        metadata = DocumentMetadata.from_records(product_name, hsn_code, market, records)

        try:
            existing = await self.repository.find_by_key(hsn_code, market)
            now = self.clock()

            if existing is not None and existing.id is not None:
                previous = existing.updated_at or existing.created_at
                if previous is not None and now <= previous:
                    now = previous + timedelta(microseconds=1)
                metadata.created_at = existing.metadata.created_at or existing.created_at
                metadata.updated_at = now
                await self.repository.update(existing.id, content, embedding, metadata, now)
                self.logger.info(f"Updated document for {hsn_code}/{market}")
                return existing.model_copy(
                    update={"content": content, "metadata": metadata, "updated_at": now}
                )

            metadata.created_at = now
            stored = await self.repository.insert(content, embedding, hsn_code, market, metadata, now)
            self.logger.info(f"Created document for {hsn_code}/{market}")
            return stored

        except PriceAnalyzerError:
            raise
        except Exception as e:
            raise DocumentStoreError(
                f"Error updating record for {hsn_code}/{market}: {e}", {"hsn_code": hsn_code, "market": market}
            ) from e
