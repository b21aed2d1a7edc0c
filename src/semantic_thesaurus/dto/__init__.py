"""Data Transfer Objects for API contracts.

These Pydantic models define the external API contract.
They are used for request/response validation and serialization.

Internal domain logic should use entities from the entities package.
"""

from .requests import (
    AnalyzeRequest,
    BatchAnalyzeRequest,
    ClearCacheRequest,
    ContextRequest,
    LoadModelRequest,
    SemanticSearchRequest,
    StoreEmbeddingRequest,
)
from .responses import (
    AnalysisResponse,
    BatchAnalyzeResponse,
    CacheClearResponse,
    CacheStatsItem,
    ContextResponse,
    ContextualMeaningItem,
    DefinitionResponse,
    EmbeddingStoreResponse,
    HealthCheckResponse,
    ModelLoadResponse,
    ProviderInfoItem,
    ProvidersResponse,
    RelatedWordItem,
    RelatedWordsResponse,
    SemanticMatchItem,
    SemanticSearchResponse,
    SimilarKeysResponse,
    StatsResponse,
)

__all__ = [
    "AnalyzeRequest",
    "BatchAnalyzeRequest",
    "ClearCacheRequest",
    "ContextRequest",
    "LoadModelRequest",
    "SemanticSearchRequest",
    "StoreEmbeddingRequest",
    "AnalysisResponse",
    "BatchAnalyzeResponse",
    "CacheClearResponse",
    "CacheStatsItem",
    "ContextResponse",
    "ContextualMeaningItem",
    "DefinitionResponse",
    "EmbeddingStoreResponse",
    "HealthCheckResponse",
    "ModelLoadResponse",
    "ProviderInfoItem",
    "ProvidersResponse",
    "RelatedWordItem",
    "RelatedWordsResponse",
    "SemanticMatchItem",
    "SemanticSearchResponse",
    "SimilarKeysResponse",
    "StatsResponse",
]
