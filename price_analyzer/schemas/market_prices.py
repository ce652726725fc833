"""Schema for the wide historical-price table."""

from beanie import Document, Indexed
from pydantic import ConfigDict

from price_analyzer.config import settings

# Columns that identify or timestamp a row and never hold market data
RESERVED_COLUMNS = frozenset({"_id", "id", "revision_id", "hsn_code", "created_at", "updated_at"})


class MarketPriceRow(Document):
    """Historical prices for one HSN code, one extra field per market.

    Each market value is a year -> price mapping, either as a JSON string or
    as an embedded object.
    """

    hsn_code: Indexed(int, unique=True)  # type: ignore

    model_config = ConfigDict(extra="allow")

    class Settings:
        name = settings.database.market_prices_collection
