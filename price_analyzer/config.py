"""Application-wide configuration settings."""

from enum import Enum
from pathlib import Path
from typing import Dict

from dotenv import load_dotenv
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables
load_dotenv(override=True)

# Base paths
BASE_DIR = Path(__file__).parent
LOGS_DIR = BASE_DIR / "logs"


class PROVIDER_TYPE(Enum):
    GOOGLE = "google"
    GROQ = "groq"
    HUGGINGFACE = "huggingface"


class APISettings(BaseSettings):
    """API-related settings."""

    api_key: SecretStr = Field(default=SecretStr(""), validation_alias="API_KEY")
    cors_origins: list[str] = Field(default=["*"])
    environment: str = Field(default="development", validation_alias="ENVIRONMENT")

    model_config = SettingsConfigDict(env_file=".env", extra="allow")


class DatabaseSettings(BaseSettings):
    """Database-related settings."""

    uri: str = Field(default="mongodb://localhost:27017", validation_alias="MONGODB_URI")
    database_name: str = Field(default="price_analyzer", validation_alias="MONGODB_DATABASE")
    documents_collection: str = Field(default="documents")
    market_prices_collection: str = Field(default="market_prices")
    vector_index: str = Field(default="embedding_index", validation_alias="VECTOR_INDEX_NAME")

    model_config = SettingsConfigDict(env_file=".env", extra="allow")


class AISettings(BaseSettings):
    """AI-related settings."""

    google_api_key: SecretStr = Field(default=SecretStr(""), validation_alias="GOOGLE_API_KEY")
    groq_api_key: SecretStr = Field(default=SecretStr(""), validation_alias="GROQ_API_KEY")
    huggingface_api_key: SecretStr = Field(default=SecretStr(""), validation_alias="HUGGINGFACE_API_KEY")

    analysis_provider: PROVIDER_TYPE = Field(default=PROVIDER_TYPE.GROQ, validation_alias="AI_ANALYSIS_PROVIDER")
    embedding_provider: PROVIDER_TYPE = Field(
        default=PROVIDER_TYPE.HUGGINGFACE, validation_alias="AI_EMBEDDING_PROVIDER"
    )
    analysis_model: str = Field(default="llama-3.3-70b-versatile", validation_alias="AI_ANALYSIS_MODEL")

    analysis_temperature: float = Field(default=0.3)
    analysis_max_tokens: int = Field(default=2000)
    prediction_temperature: float = Field(default=0.2)
    prediction_max_tokens: int = Field(default=400)
    request_timeout: float = Field(default=30.0, validation_alias="AI_REQUEST_TIMEOUT")

    model_config = SettingsConfigDict(env_file=".env", extra="allow")


class EmbeddingSettings(BaseSettings):
    """Embedding model settings."""

    model: str = Field(default="sentence-transformers/all-MiniLM-L6-v2", validation_alias="EMBEDDING_MODEL")
    dimensions: int = Field(default=384, validation_alias="EMBEDDING_DIMENSIONS")
    max_attempts: int = Field(default=3)
    backoff_base: float = Field(default=2.0)  # seconds, raised to the attempt number
    probe_text: str = Field(default="test")

    model_config = SettingsConfigDict(env_file=".env", extra="allow")


class SearchSettings(BaseSettings):
    """Similarity search settings."""

    match_threshold: float = Field(default=0.3)
    similar_product_min_score: float = Field(default=50.0)
    fallback_min_score: float = Field(default=20.0)
    fallback_scan_limit: int = Field(default=100)
    default_limit: int = Field(default=5)
    history_window: int = Field(default=5)

    model_config = SettingsConfigDict(env_file=".env", extra="allow")


class LoggingSettings(BaseSettings):
    """Logging-related settings."""

    log_level: str = Field(default="INFO")
    file_log_level: str = Field(default="DEBUG")
    backup_count: int = Field(default=9)
    format: str = Field(default="%(name)s - %(levelname)s - %(message)s")
    file_format: str = Field(default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    noisy_loggers: Dict[str, str] = Field(
        default={
            "urllib3": "WARNING",
            "uvicorn": "WARNING",
            "httpx": "WARNING",
            "httpcore": "WARNING",
            "groq": "WARNING",
            "pymongo": "WARNING",
            "pymongo.topology": "WARNING",
            "pymongo.server": "WARNING",
            "pymongo.connection": "WARNING",
            "pymongo.monitoring": "WARNING",
            "watchfiles": "WARNING",
        }
    )

    model_config = SettingsConfigDict(env_file=".env", extra="allow")


class Settings(BaseSettings):
    """Global settings container."""

    api: APISettings = Field(default_factory=APISettings)
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    ai: AISettings = Field(default_factory=AISettings)
    embedding: EmbeddingSettings = Field(default_factory=EmbeddingSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(env_file=".env", extra="allow")


# Create global settings instance
settings = Settings()
