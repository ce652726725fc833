"""Hugging Face inference provider for sentence embeddings."""

import logging
from typing import Any, Dict, List, Optional

import httpx

from price_analyzer.ai.providers.base import BaseProvider
from price_analyzer.utils.errors import ProviderError, RateLimitError

INFERENCE_URL = "https://router.huggingface.co/hf-inference/models/{model}/pipeline/feature-extraction"


class HuggingFaceProvider(BaseProvider):
    """Embeddings through the Hugging Face feature-extraction endpoint."""

    def __init__(
        self,
        api_key: str,
        default_model: Optional[str] = None,
        dimensions: int = 384,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the Hugging Face provider.

        Args:
            api_key: Hugging Face access token
            default_model: Sentence embedding model id
            dimensions: Declared output size of the model
            timeout: Request timeout in seconds
            client: Optional preconfigured httpx client
        """
        super().__init__(default_model=default_model or "sentence-transformers/all-MiniLM-L6-v2")
        self.api_key = api_key
        self.timeout = timeout
        self._dimensions = dimensions
        self.client = client
        self.logger = logging.getLogger(__name__)
        self.provider = "huggingface"

    async def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure httpx client exists."""
        if self.client is None:
            self.client = httpx.AsyncClient(timeout=self.timeout)
        return self.client

    async def generate_text(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 1.0,
        max_tokens: Optional[int] = None,
    ) -> str:
        raise NotImplementedError("Text generation is not configured for Hugging Face")

    async def get_embeddings(self, text: List[str]) -> List[List[float]]:
        """Embed each text with the configured sentence-transformers model."""
        texts = [text] if isinstance(text, str) else list(text)
        client = await self._ensure_client()
        url = INFERENCE_URL.format(model=self.default_model)

        try:
            response = await client.post(
                url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={"inputs": texts},
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 429:
                retry_after = float(e.response.headers.get("retry-after", "60"))
                raise RateLimitError(self.provider, retry_after=retry_after) from e
            raise ProviderError(f"HTTP error: {str(e)}") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"Hugging Face error: {str(e)}") from e

        try:
            payload = response.json()
        except ValueError as e:
            raise ProviderError(f"Hugging Face returned a non-JSON body: {e}") from e

        return self._parse_vectors(payload, len(texts))

    def _parse_vectors(self, payload: Any, expected: int) -> List[List[float]]:
        if not isinstance(payload, list) or not payload:
            raise ProviderError(f"Unexpected embedding payload: {str(payload)[:200]}")

        # A single pooled vector comes back flat
        if all(isinstance(v, (int, float)) for v in payload):
            payload = [payload]

        if len(payload) != expected:
            raise ProviderError(f"Expected {expected} embeddings, got {len(payload)}")

        try:
            return [[float(v) for v in vector] for vector in payload]
        except (TypeError, ValueError) as e:
            raise ProviderError(f"Embedding payload is not numeric: {e}") from e

    def get_dimensions(self) -> int:
        return self._dimensions

    async def aclose(self) -> None:
        if self.client is not None:
            await self.client.aclose()
            self.client = None
