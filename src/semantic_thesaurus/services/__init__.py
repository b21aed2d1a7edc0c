"""Service layer for business logic.

This layer contains the core business logic and orchestration.
Services depend on protocols (interfaces), not concrete implementations,
making them testable and flexible.

Architecture:
    Handler -> Service -> Repository
    (HTTP)  -> (Business) -> (Data Access)

Usage:
    ```python
    from semantic_thesaurus.services import AnalysisService

    analysis = AnalysisService.create(client=client, cache=cache)
    result = await analysis.analyze("brilliant", context="academic performance")
    ```
"""

from .analysis_service import AnalysisService
from .cache_keys import CacheKeyPolicy
from .embedding_service import EmbeddingJob, EmbeddingProviderFactory, EmbeddingService
from .search_service import SemanticSearchService
from .similarity import (
    BruteForceSimilarityBackend,
    NativeSimilarityBackend,
    SimilaritySearchEngine,
    cosine_similarity,
)

__all__ = [
    "AnalysisService",
    "BruteForceSimilarityBackend",
    "CacheKeyPolicy",
    "EmbeddingJob",
    "EmbeddingProviderFactory",
    "EmbeddingService",
    "NativeSimilarityBackend",
    "SemanticSearchService",
    "SimilaritySearchEngine",
    "cosine_similarity",
]
