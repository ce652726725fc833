"""Schema for embedded product documents."""

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from beanie import Document
from pydantic import BaseModel, Field, model_validator
from pymongo import ASCENDING, IndexModel

from price_analyzer.config import settings
from price_analyzer.schemas.analysis import HistoricalRecord


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DocumentType(str, Enum):
    PRODUCT_WITH_HISTORY = "product_with_history"


class DocumentMetadata(BaseModel):
    """Structured metadata stored alongside each document.

    Year keys are always a subset of the price map so history can be rebuilt
    without parsing the free text content.
    """

    hsn_code: str
    name: str
    market: str
    type: Optional[DocumentType] = None
    description: Optional[str] = None
    years: List[str] = Field(default_factory=list)
    prices: Dict[str, float] = Field(default_factory=dict)
    currencies: Dict[str, str] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _years_subset_of_prices(self) -> "DocumentMetadata":
        self.years = [year for year in self.years if year in self.prices]
        return self

    @classmethod
    def from_records(
        cls, product_name: str, hsn_code: str, market: str, records: List[HistoricalRecord]
    ) -> "DocumentMetadata":
        return cls(
            hsn_code=hsn_code,
            name=product_name,
            market=market,
            type=DocumentType.PRODUCT_WITH_HISTORY,
            description=f"Historical prices for {product_name} in {market}",
            years=[r.year for r in records],
            prices={r.year: r.price for r in records},
            currencies={r.year: r.currency for r in records},
        )

    def historical_records(self) -> List[HistoricalRecord]:
        """Rebuild the ordered history, dropping non-positive prices."""
        records = []
        for year in self.years:
            price = self.prices.get(year, 0)
            if price > 0:
                records.append(HistoricalRecord(year=year, price=price, currency=self.currencies.get(year, "USD")))
        return records


class StoredDocument(BaseModel):
    """Validated view of a stored document, as returned by lookups and searches."""

    id: Optional[str] = None
    content: str = ""
    hsn_code: str
    market: str
    metadata: DocumentMetadata
    similarity: Optional[float] = None  # Raw nearest-neighbor score in [0, 1]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def key(self) -> tuple:
        return (self.hsn_code, self.market)

    @property
    def product_name(self) -> str:
        if self.metadata.name:
            return self.metadata.name
        first_line = self.content.split("\n")[0] if self.content else ""
        return first_line.replace("Product: ", "") or "Unknown Product"


class ProductDocument(Document):
    """One embedded (product, market) history. At most one per key."""

    content: str
    embedding: List[float]
    hsn_code: str
    market: str
    metadata: DocumentMetadata
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: Optional[datetime] = None

    class Settings:
        name = settings.database.documents_collection
        indexes = [
            IndexModel([("hsn_code", ASCENDING), ("market", ASCENDING)], name="hsn_market_unique", unique=True),
            IndexModel([("metadata.type", ASCENDING)], name="metadata_type"),
        ]
