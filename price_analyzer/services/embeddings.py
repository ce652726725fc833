"""Embedding client with dimension validation and retry with backoff."""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from price_analyzer.ai.providers.base import BaseProvider
from price_analyzer.utils.errors import ConfigurationError, EmbeddingUnavailable, ProviderError

logger = logging.getLogger(__name__)


class EmbeddingClient:
    """Wraps an embedding provider.

    The first call embeds a probe string and checks that the model returns
    vectors of the configured size. A mismatch is a configuration problem:
    it is raised immediately, never retried, and remembered until
    ``initialize()`` is called again explicitly.
    """

    def __init__(
        self,
        provider: BaseProvider,
        dimensions: int,
        max_attempts: int = 3,
        backoff_base: float = 2.0,
        probe_text: str = "test",
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.provider = provider
        self.dimensions = dimensions
        self.max_attempts = max_attempts
        self.backoff_base = backoff_base
        self.probe_text = probe_text
        self._sleep = sleep
        self.logger = logging.getLogger(__name__)
        self._lock = asyncio.Lock()
        self._ready = False
        self._failure: Optional[ConfigurationError] = None

    @property
    def ready(self) -> bool:
        return self._ready

    async def initialize(self) -> None:
        """Validate the model's output size, clearing any remembered failure."""
        async with self._lock:
            self._failure = None
            self._ready = False
            await self._probe()

    async def _ensure_initialized(self) -> None:
        if self._ready:
            return
        async with self._lock:
            if self._ready:
                return
            if self._failure is not None:
                raise self._failure
            await self._probe()

    async def _probe(self) -> None:
        vector = await self._embed_once(self.probe_text, validate=False)
        if len(vector) != self.dimensions:
            self._failure = ConfigurationError(
                f"Model generates {len(vector)} dimensions, expected {self.dimensions}",
                {"expected": self.dimensions, "actual": len(vector)},
            )
            raise self._failure
        self._ready = True
        self.logger.info(f"Embedding model validated with {self.dimensions} dimensions")

    async def _embed_once(self, text: str, validate: bool = True) -> List[float]:
        vectors = await self.provider.get_embeddings([text])
        if not vectors:
            raise ProviderError("Empty embedding response")
        vector = vectors[0]
        if validate and len(vector) != self.dimensions:
            raise ProviderError(f"Generated embedding has {len(vector)} dimensions, expected {self.dimensions}")
        return vector

    async def embed(self, text: str) -> List[float]:
        """Embed ``text``, retrying transient provider failures.

        Raises:
            ValueError: If ``text`` is empty
            ConfigurationError: If the model's output size is wrong
            EmbeddingUnavailable: After ``max_attempts`` failed attempts
        """
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        last_error: Optional[BaseException] = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                await self._ensure_initialized()
                return await self._embed_once(text)
            except ProviderError as e:
                last_error = e
                if attempt == self.max_attempts:
                    break
                wait_time = self.backoff_base**attempt
                self.logger.warning(
                    f"Embedding attempt {attempt}/{self.max_attempts} failed: {e}. Retrying in {wait_time}s"
                )
                await self._sleep(wait_time)

        error = EmbeddingUnavailable(self.max_attempts, last_error)
        error.log()
        raise error from last_error
