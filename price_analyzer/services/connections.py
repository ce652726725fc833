"""Connectivity self-test for every external service."""

import logging
from typing import Awaitable, Callable, Dict, List, Optional

from price_analyzer.ai.providers.base import BaseProvider
from price_analyzer.services.embeddings import EmbeddingClient
from price_analyzer.services.repositories import DocumentRepository
from price_analyzer.utils.errors import ConnectionCheckError

logger = logging.getLogger(__name__)

GENERATIVE = "generative"
DOCUMENT_STORE = "document_store"
VECTOR_SEARCH = "vector_search"
EMBEDDINGS = "embeddings"


async def _probe(name: str, check: Callable[[], Awaitable[object]]) -> bool:
    try:
        await check()
    except Exception as e:
        logger.error(f"Connection probe '{name}' failed: {e}")
        raise ConnectionCheckError(name, e) from e
    logger.debug(f"Connection probe '{name}' succeeded")
    return True


async def test_connections(
    provider: BaseProvider,
    repository: DocumentRepository,
    embeddings: EmbeddingClient,
    model: Optional[str] = None,
) -> Dict[str, bool]:
    """Probe each service in turn.

    Returns:
        Map of service name to True

    Raises:
        ConnectionCheckError: On the first probe that fails, naming the probe
    """
    results = {GENERATIVE: False, DOCUMENT_STORE: False, VECTOR_SEARCH: False, EMBEDDINGS: False}

    results[GENERATIVE] = await _probe(
        GENERATIVE,
        lambda: provider.generate_text([{"role": "user", "content": "Hello"}], model=model, max_tokens=5),
    )

    results[DOCUMENT_STORE] = await _probe(DOCUMENT_STORE, repository.ping)

    # The search probe reuses the vector from the embedding probe
    query_vector: List[float] = []

    async def embed_query() -> None:
        query_vector.extend(await embeddings.embed("test query"))

    results[EMBEDDINGS] = await _probe(EMBEDDINGS, embed_query)

    results[VECTOR_SEARCH] = await _probe(
        VECTOR_SEARCH, lambda: repository.vector_search(query_vector, 0.0, 1)
    )

    return results
