"""Database connection and initialization."""

import logging
from typing import Optional

from beanie import init_beanie
from motor.motor_asyncio import AsyncIOMotorClient

from price_analyzer.config import settings
from price_analyzer.schemas.documents import ProductDocument
from price_analyzer.schemas.market_prices import MarketPriceRow

logger = logging.getLogger(__name__)

_client: Optional[AsyncIOMotorClient] = None


async def init_db() -> AsyncIOMotorClient:
    """Initialize the database connection and document models. Runs once per process."""
    global _client
    if _client is not None:
        return _client

    logger.info(f"Connecting to MongoDB database: {settings.database.database_name}")
    client = AsyncIOMotorClient(settings.database.uri, tz_aware=True)

    try:
        await init_beanie(
            database=client[settings.database.database_name],
            document_models=[ProductDocument, MarketPriceRow],
        )
        logger.info("Database initialization successful")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}")
        client.close()
        raise

    _client = client
    return client


async def close_db() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None
