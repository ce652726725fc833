"""Historical price lookups from the wide per-market table."""

import json
import logging
import math
import re
from typing import Any, Dict, List

from price_analyzer.schemas.analysis import HistoricalRecord
from price_analyzer.schemas.market_prices import RESERVED_COLUMNS
from price_analyzer.services.repositories import MarketPriceRepository
from price_analyzer.utils.errors import CodeNotFound, DocumentStoreError, MarketNotFound, NoValidRecords

logger = logging.getLogger(__name__)

_LEADING_YEAR = re.compile(r"^\s*(\d+)")


def _year_key(year: str) -> int:
    """Leading numeric token of a year label, so "2020-2021" sorts as 2020."""
    match = _LEADING_YEAR.match(year)
    return int(match.group(1)) if match else -1


def _to_price(value: Any) -> float:
    if isinstance(value, bool):
        return math.nan
    try:
        price = float(value)
    except (TypeError, ValueError):
        return math.nan
    return price


def parse_market_data(raw: Any, window: int = 5, currency: str = "USD") -> List[HistoricalRecord]:
    """Turn a market cell (JSON text or mapping) into newest-first records.

    Non-numeric and non-positive prices are dropped and only the ``window``
    most recent years are kept.

    Raises:
        ValueError: If the cell is neither a mapping nor JSON text of one
    """
    if isinstance(raw, str):
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValueError(f"Failed to parse market data: {e}") from e
    else:
        parsed = raw

    if not isinstance(parsed, dict):
        raise ValueError(f"Invalid market data format: {type(parsed).__name__}")

    records = []
    for year, value in parsed.items():
        price = _to_price(value)
        if math.isnan(price) or math.isinf(price) or price <= 0:
            continue
        records.append(HistoricalRecord(year=str(year), price=price, currency=currency))

    records.sort(key=lambda record: _year_key(record.year), reverse=True)
    return records[:window]


def available_markets(row: Dict[str, Any]) -> List[str]:
    """Markets with a non-null value in ``row``."""
    return [key for key, value in row.items() if key not in RESERVED_COLUMNS and value is not None]


class HistoricalDataAccessor:
    """Resolves an HSN code and market to price history."""

    def __init__(self, repository: MarketPriceRepository, window: int = 5):
        self.repository = repository
        self.window = window
        self.logger = logging.getLogger(__name__)

    async def _get_row(self, hsn_code: str) -> Dict[str, Any]:
        try:
            code = int(hsn_code.strip())
        except ValueError as e:
            raise CodeNotFound(hsn_code) from e

        row = await self.repository.get_row(code)
        if not row:
            raise CodeNotFound(hsn_code)
        return row

    async def fetch_historical_data(self, hsn_code: str, market: str) -> List[HistoricalRecord]:
        """Get up to ``window`` records for the market, newest first.

        Raises:
            CodeNotFound: No row for the code
            MarketNotFound: The row has no data for the market
            NoValidRecords: The market cell had no usable price
            DocumentStoreError: The lookup itself failed
        """
        row = await self._get_row(hsn_code)

        market_data = row.get(market)
        if market in RESERVED_COLUMNS or market_data is None:
            markets = available_markets(row)
            self.logger.info(f"No data for {hsn_code}/{market}; available: {markets}")
            raise MarketNotFound(hsn_code, market, markets)

        others = [name for name in available_markets(row) if name != market]
        try:
            records = parse_market_data(market_data, window=self.window)
        except ValueError as e:
            self.logger.warning(f"Unparseable market data for {hsn_code}/{market}: {e}")
            raise NoValidRecords(hsn_code, market, others) from e

        if not records:
            raise NoValidRecords(hsn_code, market, others)

        self.logger.debug(f"Loaded {len(records)} records for {hsn_code}/{market}")
        return records

    async def list_available_markets(self, hsn_code: str) -> List[str]:
        """Markets that have data for the code. Empty on any lookup failure."""
        try:
            row = await self._get_row(hsn_code)
        except (CodeNotFound, DocumentStoreError) as e:
            self.logger.debug(f"Could not list markets for {hsn_code}: {e}")
            return []
        return available_markets(row)
