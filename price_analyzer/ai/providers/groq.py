"""Groq AI provider implementation."""

import logging
from typing import Dict, List, Optional

from groq import APIStatusError, AsyncGroq
from groq.types.chat import ChatCompletion

from price_analyzer.ai.providers.base import BaseProvider
from price_analyzer.utils.errors import ProviderError, RateLimitError


class GroqProvider(BaseProvider):
    """Groq AI implementation."""

    def __init__(self, api_key: str, default_model: Optional[str] = None, timeout: float = 30.0):
        """Initialize the Groq provider.

        Args:
            api_key: Groq API key
            default_model: The default model to use for text generation.
            timeout: Request timeout in seconds
        """
        super().__init__(default_model=default_model)
        # Retries are decided by callers, not by the SDK
        self.client = AsyncGroq(api_key=api_key, max_retries=0, timeout=timeout)
        self.model = default_model or "llama-3.3-70b-versatile"
        self.logger = logging.getLogger(__name__)
        self.provider = "groq"

    async def generate_text(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Generate text from the model."""
        try:
            response: ChatCompletion = await self.client.chat.completions.create(
                model=model or self.model,
                messages=messages,  # type: ignore[arg-type]
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except APIStatusError as e:
            if e.status_code == 429:
                retry_after = float(e.response.headers.get("retry-after", "60"))
                raise RateLimitError(self.provider, retry_after=retry_after) from e
            raise ProviderError(f"HTTP error: {str(e)}") from e
        except Exception as e:
            raise ProviderError(f"Groq error: {str(e)}") from e

        if not response.choices or not response.choices[0].message.content:
            raise ProviderError("Empty response from model")

        return response.choices[0].message.content

    async def get_embeddings(self, text: List[str]) -> List[List[float]]:
        """Groq does not serve embedding models."""
        raise NotImplementedError("Groq does not support embeddings")

    def get_dimensions(self) -> int:
        raise NotImplementedError("Groq does not support embeddings")
