"""Google AI provider implementation."""

import asyncio
import logging
from functools import partial
from typing import Dict, List, Optional

import google.generativeai as genai
from google.api_core import exceptions

from price_analyzer.ai.providers.base import BaseProvider
from price_analyzer.utils.errors import ProviderError, RateLimitError

EMBEDDING_MODEL = "models/text-embedding-004"


class GoogleAIProvider(BaseProvider):
    """Provider for Google's Generative AI API (including Gemini)."""

    def __init__(self, api_key: str, default_model: Optional[str] = None, dimensions: int = 384):
        """Initialize the Google AI provider.

        Args:
            api_key: Google AI Studio key
            default_model: The default model to use for text generation.
            dimensions: Requested embedding output size
        """
        super().__init__(default_model=default_model or "gemini-1.5-flash")
        genai.configure(api_key=api_key)
        self._dimensions = dimensions
        self.logger = logging.getLogger(__name__)
        self.provider = "google"

    async def generate_text(
        self,
        messages: List[Dict[str, str]],
        model: Optional[str] = None,
        temperature: float = 0.7,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Generate text from the model, mapping the system message to a system instruction."""
        system_prompt = "\n".join(m["content"] for m in messages if m["role"] == "system") or None
        user_prompt = "\n\n".join(m["content"] for m in messages if m["role"] != "system")

        generate_config = genai.types.GenerationConfig(temperature=temperature, max_output_tokens=max_tokens)
        try:
            model_instance = genai.GenerativeModel(
                model_name=model or self.default_model,
                generation_config=generate_config,
                system_instruction=system_prompt,
            )
            response = await model_instance.generate_content_async(user_prompt)
        except exceptions.ResourceExhausted as e:
            # Google's API returns 429 as ResourceExhausted
            raise RateLimitError(self.provider, retry_after=60.0) from e
        except Exception as e:
            raise ProviderError(f"Google error: {str(e)}") from e

        if not response.text:
            raise ProviderError("Empty response from model")

        return response.text

    async def get_embeddings(self, text: List[str]) -> List[List[float]]:
        """Get embeddings using Google's embedding model."""
        texts = [text] if isinstance(text, str) else text
        loop = asyncio.get_running_loop()

        embeddings = []
        for item in texts:
            try:
                result = await loop.run_in_executor(
                    None,
                    partial(
                        genai.embed_content,
                        model=EMBEDDING_MODEL,
                        content=" ".join(item.split()),
                        task_type="retrieval_document",
                        output_dimensionality=self._dimensions,
                    ),
                )
            except exceptions.ResourceExhausted as e:
                raise RateLimitError(self.provider, retry_after=60.0) from e
            except Exception as e:
                raise ProviderError(f"Google error: {str(e)}") from e

            if not result or "embedding" not in result:
                raise ProviderError("No embedding returned from model")
            embeddings.append(list(result["embedding"]))

        return embeddings

    def get_dimensions(self) -> int:
        return self._dimensions
