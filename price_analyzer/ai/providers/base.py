"""Base classes for AI providers."""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional


class BaseProvider(ABC):
    """Base class for AI providers."""

    def __init__(self, default_model: Optional[str] = None):
        """Initialize the provider.

        Args:
            default_model: The default model to use for text generation. If None, uses the configured default.
        """
        self.logger = logging.getLogger(__name__)
        self._default_model = default_model
        self.provider = "base"

    @property
    def default_model(self) -> Optional[str]:
        """Get the default model for this provider."""
        return self._default_model

    @abstractmethod
    async def generate_text(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 1.0,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Generate a chat completion.

        Args:
            messages: Chat messages with ``role`` and ``content`` keys
            model: Model identifier, defaults to the provider's default model
            temperature: Sampling temperature
            max_tokens: Maximum tokens to generate

        Returns:
            Generated text

        Raises:
            ProviderError: If generation fails
            RateLimitError: If rate limit is exceeded
        """
        pass

    @abstractmethod
    async def get_embeddings(self, text: List[str]) -> List[List[float]]:
        """Get embeddings for a list of texts.

        Args:
            text: Text strings to embed

        Returns:
            One embedding vector per input text.

        Raises:
            ProviderError: If embeddings generation fails
            RateLimitError: If rate limit is exceeded
        """
        pass

    @abstractmethod
    def get_dimensions(self) -> int:
        """Get the dimensionality of the embeddings vectors.

        Returns:
            The number of dimensions in the embeddings vectors.
        """
        pass
