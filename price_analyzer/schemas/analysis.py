"""Schemas for historical prices, similar products and analysis results."""

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class HistoricalRecord(BaseModel):
    """One year of price history for a product in a market."""

    year: str  # May encode a range, e.g. "2020-2021"
    price: float = Field(gt=0)
    currency: str = "USD"

    def render(self, with_currency: bool = True) -> str:
        """Render the record as ``year: $price CUR``."""
        text = f"{self.year}: ${self.price:.2f}"
        return f"{text} {self.currency}" if with_currency else text


class SimilarProduct(BaseModel):
    """A stored product found close to the one being analyzed."""

    hsn_code: str
    product_name: str
    similarity: float = Field(ge=0, le=100)
    markets: List[str] = Field(default_factory=list)

    @field_validator("similarity", mode="before")
    @classmethod
    def clamp_similarity(cls, value: float) -> float:
        return max(0.0, min(100.0, float(value)))


class SimilarHistoricalRecord(SimilarProduct):
    """A similar product together with its own price history."""

    historical_data: List[HistoricalRecord] = Field(default_factory=list)


class SimilarityResults(BaseModel):
    """Pair of lists returned by the similarity search."""

    similar_products: List[SimilarProduct] = Field(default_factory=list)
    similar_historical_data: List[SimilarHistoricalRecord] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.similar_products and not self.similar_historical_data


class ProductIdentity(BaseModel):
    """The product a request is about."""

    product_name: str
    hsn_code: str
    market: str


class AnalysisContext(BaseModel):
    """Everything the analyzers need for one request."""

    product: ProductIdentity
    historical_data: List[HistoricalRecord] = Field(default_factory=list)
    similar_products: List[SimilarProduct] = Field(default_factory=list)
    similar_historical_data: List[SimilarHistoricalRecord] = Field(default_factory=list)


class AnalysisMode(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"


class StepStatus(str, Enum):
    """Outcome of one pipeline step."""

    OK = "ok"
    RECOVERABLE_EMPTY = "recoverable_empty"
    FATAL = "fatal"
    SKIPPED = "skipped"


class PriceTrend(str, Enum):
    INCREASING = "increasing"
    DECREASING = "decreasing"
    STABLE = "stable"


class MarketPosition(str, Enum):
    AT_MAXIMUM = "at_maximum"
    AT_MINIMUM = "at_minimum"
    ABOVE_MIDRANGE = "above_midrange"
    BELOW_MIDRANGE = "below_midrange"


class LocalMetrics(BaseModel):
    """Statistics derived by the local analyzer."""

    current_price: float
    previous_price: float
    current_year: str
    recent_change: float
    trend: PriceTrend
    min_price: float
    max_price: float
    position: MarketPosition
    data_points: int


class AnalysisRequest(BaseModel):
    """Input of a single price analysis."""

    product_name: str
    hsn_code: str
    market: str
    use_ai: bool = True
    use_embeddings: bool = True
    limit: Optional[int] = Field(default=None, ge=1, le=50)


class AnalysisReport(BaseModel):
    """Analysis text plus the prediction outcome."""

    mode: AnalysisMode
    analysis: str
    prediction: Optional[str] = None
    prediction_status: StepStatus = StepStatus.SKIPPED
    metrics: Optional[LocalMetrics] = None


class PriceAnalysisResult(BaseModel):
    """Full response of the analysis pipeline."""

    product: ProductIdentity
    historical_data: List[HistoricalRecord] = Field(default_factory=list)
    similar_products: List[SimilarProduct] = Field(default_factory=list)
    similar_historical_data: List[SimilarHistoricalRecord] = Field(default_factory=list)
    report: AnalysisReport
    steps: Dict[str, StepStatus] = Field(default_factory=dict)
