"""Domain entities for internal representation.

These are pure dataclasses used internally by services and repositories.
They are NOT used for API contracts - use DTOs from the dto package for that.
"""

from .analysis import AnalysisResult, ContextualMeaning, RelatedWord, overall_confidence
from .cache_entry import CacheEntryEntity
from .embedding_record import EmbeddingRecordEntity, EmbeddingResultEntity
from .semantic_match import SemanticMatchEntity

__all__ = [
    "AnalysisResult",
    "CacheEntryEntity",
    "ContextualMeaning",
    "EmbeddingRecordEntity",
    "EmbeddingResultEntity",
    "RelatedWord",
    "SemanticMatchEntity",
    "overall_confidence",
]
