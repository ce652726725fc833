"""Standardized error handling for the application."""

import logging
from typing import Any, Dict, List, Optional

# Configure logger
logger = logging.getLogger(__name__)

# Caller-facing categories
NO_DATA = "no_data"
UNAVAILABLE = "unavailable"
MISCONFIGURED = "misconfigured"


class PriceAnalyzerError(Exception):
    """Base exception class for all application errors."""

    category: str = UNAVAILABLE

    def __init__(
        self,
        message: str = "An error occurred",
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the error.

        Args:
            message: Human-readable error message
            status_code: HTTP status code
            details: Additional error details
        """
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error to a dictionary for API responses.

        Returns:
            Dict containing error details
        """
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "category": self.category,
            "status_code": self.status_code,
            "details": self.details,
        }

    def log(self, level: int = logging.ERROR) -> None:
        """Log the error with appropriate level and context.

        Args:
            level: Logging level to use
        """
        log_context = {
            "error_type": self.__class__.__name__,
            "status_code": self.status_code,
            "cause": repr(self.__cause__) if self.__cause__ else None,
            **self.details,
        }
        logger.log(level, f"{self.message}", extra=log_context)


class ConfigurationError(PriceAnalyzerError):
    """Missing credentials or an embedding model that does not match the configured size."""

    category = MISCONFIGURED

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, status_code=500, details=details)


class InvalidRequestError(PriceAnalyzerError):
    """The caller supplied incomplete input."""

    category = NO_DATA

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, status_code=400, details=details)


# Historical lookup errors
class HistoricalLookupError(PriceAnalyzerError):
    """Base class for historical price lookup failures."""

    category = NO_DATA


class CodeNotFound(HistoricalLookupError):
    """No historical-price row exists for the classification code."""

    def __init__(self, hsn_code: str):
        super().__init__(
            message=f"No data found for HSN code: {hsn_code}",
            status_code=404,
            details={"hsn_code": hsn_code},
        )


class MarketNotFound(HistoricalLookupError):
    """The row exists but has no data for the requested market."""

    def __init__(self, hsn_code: str, market: str, available_markets: List[str]):
        if available_markets:
            message = f"No data found for market: {market}. Available markets: {', '.join(available_markets)}"
        else:
            message = f"No data available for any market with HSN code: {hsn_code}"
        super().__init__(
            message=message,
            status_code=404,
            details={"hsn_code": hsn_code, "market": market, "available_markets": available_markets},
        )
        self.available_markets = available_markets


class NoValidRecords(HistoricalLookupError):
    """The market column exists but holds no usable price."""

    def __init__(self, hsn_code: str, market: str, available_markets: Optional[List[str]] = None):
        available_markets = available_markets or []
        message = f"No valid historical data found for {market} with HSN code: {hsn_code}"
        if available_markets:
            message += f". Available markets: {', '.join(available_markets)}"
        super().__init__(
            message=message,
            status_code=404,
            details={"hsn_code": hsn_code, "market": market, "available_markets": available_markets},
        )
        self.available_markets = available_markets


# Service errors
class EmbeddingUnavailable(PriceAnalyzerError):
    """The embedding service kept failing after all retries."""

    def __init__(self, attempts: int, last_error: Optional[BaseException] = None):
        super().__init__(
            message=f"Failed to generate embedding after {attempts} attempts: {last_error}",
            status_code=503,
            details={"attempts": attempts},
        )
        self.last_error = last_error


class DocumentStoreError(PriceAnalyzerError):
    """A read or write against the document store failed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, status_code=503, details=details)


class AnalysisServiceError(PriceAnalyzerError):
    """The remote market analysis call failed."""

    def __init__(self, message: str = "Failed to analyze with the generative service"):
        super().__init__(message=message, status_code=502)


class PredictionUnavailable(PriceAnalyzerError):
    """The remote prediction call failed."""

    def __init__(self, message: str = "Failed to generate prediction"):
        super().__init__(message=message, status_code=502)


class ConnectionCheckError(PriceAnalyzerError):
    """A connectivity probe failed."""

    def __init__(self, probe: str, cause: BaseException):
        super().__init__(
            message=f"{probe} connection failed: {cause}",
            status_code=503,
            details={"probe": probe},
        )
        self.probe = probe


# AI Provider Errors
class ProviderError(PriceAnalyzerError):
    """Base class for AI provider errors."""

    pass


class RateLimitError(ProviderError):
    """Provider rate limit exceeded."""

    retry_after: float = 0

    def __init__(self, provider: str, retry_after: Optional[float] = None):
        """Initialize rate limit error.

        Args:
            provider: Name of the AI provider
            retry_after: Seconds to wait before retrying
        """
        message = f"Rate limit exceeded for provider {provider}"
        details = {"provider": provider, "retry_after": retry_after or 0}
        self.retry_after = retry_after or 0

        super().__init__(message=message, status_code=429, details=details)
