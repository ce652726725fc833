"""Schema package exports."""

from .analysis import (AnalysisContext, AnalysisRequest, HistoricalRecord,
                       PriceAnalysisResult, SimilarHistoricalRecord,
                       SimilarProduct)
from .documents import DocumentMetadata, DocumentType, StoredDocument
