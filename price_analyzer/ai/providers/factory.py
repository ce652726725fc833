"""AI provider factory for creating provider instances."""

import logging
from typing import Optional

from price_analyzer.ai.providers.base import BaseProvider
from price_analyzer.ai.providers.google import GoogleAIProvider
from price_analyzer.ai.providers.groq import GroqProvider
from price_analyzer.ai.providers.huggingface import HuggingFaceProvider
from price_analyzer.config import PROVIDER_TYPE, Settings, settings
from price_analyzer.utils.errors import ConfigurationError


def _require_key(name: str, value: str) -> str:
    if not value:
        raise ConfigurationError(f"Missing {name} environment variable", {"variable": name})
    return value


def create_provider(
    provider_type: PROVIDER_TYPE,
    model: Optional[str] = None,
    config: Settings = settings,
) -> BaseProvider:
    """Create a provider instance based on the specified type.

    Args:
        provider_type: The type of provider to create.
        model: The default model to use for the provider.
        config: Settings to read credentials from

    Returns:
        An instance of the specified provider type

    Raises:
        ConfigurationError: If the provider's credentials are missing
        ValueError: If the specified provider type is not supported
    """
    logger = logging.getLogger(__name__)
    logger.debug(f"Creating provider: {provider_type}")

    if provider_type == PROVIDER_TYPE.GROQ:
        return GroqProvider(
            api_key=_require_key("GROQ_API_KEY", config.ai.groq_api_key.get_secret_value()),
            default_model=model,
            timeout=config.ai.request_timeout,
        )
    elif provider_type == PROVIDER_TYPE.HUGGINGFACE:
        return HuggingFaceProvider(
            api_key=_require_key("HUGGINGFACE_API_KEY", config.ai.huggingface_api_key.get_secret_value()),
            default_model=model,
            dimensions=config.embedding.dimensions,
            timeout=config.ai.request_timeout,
        )
    elif provider_type == PROVIDER_TYPE.GOOGLE:
        return GoogleAIProvider(
            api_key=_require_key("GOOGLE_API_KEY", config.ai.google_api_key.get_secret_value()),
            default_model=model,
            dimensions=config.embedding.dimensions,
        )

    raise ValueError(f"Unsupported provider type: {provider_type}")
