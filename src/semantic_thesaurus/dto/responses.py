"""Response DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class RelatedWordItem(BaseModel):
    """Single synonym or antonym."""

    word: str = Field(..., description="The related word")
    confidence: float = Field(..., description="Model confidence", ge=0.0, le=1.0)
    context: str | None = Field(None, description="Context the word was found for")
    similarity: float | None = Field(None, description="Embedding similarity, when computed")


class ContextualMeaningItem(BaseModel):
    """Meaning of a word inside one context."""

    context: str
    meaning: str
    domain: str | None = None
    sentiment: float | None = Field(None, ge=-1.0, le=1.0)
    examples: list[str] = Field(default_factory=list)


class AnalysisResponse(BaseModel):
    """Response DTO for a word analysis."""

    word: str = Field(..., description="The analyzed word")
    definition: str = Field(..., description="One-line definition (empty if that lookup failed)")
    part_of_speech: str = Field(..., description="Part of speech or 'unknown'")
    synonyms: list[RelatedWordItem] = Field(default_factory=list)
    antonyms: list[RelatedWordItem] = Field(default_factory=list)
    contexts: list[ContextualMeaningItem] = Field(default_factory=list)
    confidence: float = Field(
        ...,
        description="Average confidence over synonyms and antonyms",
        ge=0.0,
        le=1.0,
    )
    degraded: bool = Field(False, description="True when some sub-lookups failed")


class BatchAnalyzeResponse(BaseModel):
    """Response DTO for batch analysis."""

    results: list[AnalysisResponse] = Field(default_factory=list)
    total: int = Field(..., ge=0)
    successful: int = Field(..., ge=0)
    failed: int = Field(..., ge=0)


class RelatedWordsResponse(BaseModel):
    """Response DTO for synonym and antonym lookups."""

    word: str
    context: str | None = None
    words: list[RelatedWordItem] = Field(default_factory=list)


class ContextResponse(BaseModel):
    """Response DTO for contextual meaning analysis."""

    word: str
    context: str
    meanings: list[ContextualMeaningItem] = Field(default_factory=list)


class DefinitionResponse(BaseModel):
    """Response DTO for a definition lookup."""

    word: str
    part_of_speech: str
    definition: str


class SemanticMatchItem(BaseModel):
    """Single semantic search hit."""

    word: str = Field(..., description="The matched subject")
    similarity: float = Field(..., description="Cosine similarity to the query")
    definition: str | None = None
    part_of_speech: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)


class SemanticSearchResponse(BaseModel):
    """Response DTO for semantic word search."""

    query: str
    results: list[SemanticMatchItem] = Field(
        default_factory=list,
        description="Matches sorted by similarity, closest first",
    )
    count: int = Field(..., ge=0)
    lookup_time_ms: float = Field(..., description="Time taken for the search in milliseconds")


class EmbeddingStoreResponse(BaseModel):
    """Response DTO for storing an embedding."""

    success: bool = Field(..., description="Whether the operation succeeded")
    subject_id: str
    model: str = Field(..., description="Model the vector is stored under")
    dimension: int = Field(..., ge=0)


class ModelLoadResponse(BaseModel):
    """Response DTO for loading a local word-vector file."""

    success: bool
    provider: str
    path: str
    vocabulary_size: int = Field(..., ge=0)
    dimension: int = Field(..., ge=0)
    message: str


class ProviderInfoItem(BaseModel):
    """Availability of one embedding provider."""

    available: bool
    models: list[str] = Field(default_factory=list)
    dimension: int
    loaded: bool | None = None


class ProvidersResponse(BaseModel):
    """Response DTO for the provider listing."""

    default_provider: str
    providers: dict[str, ProviderInfoItem]


class CacheStatsItem(BaseModel):
    """In-process cache statistics."""

    live_key_count: int = Field(..., ge=0)
    hits: int = Field(..., ge=0)
    misses: int = Field(..., ge=0)
    hit_rate: float = Field(..., ge=0.0, le=1.0)
    approx_size_bytes: int = Field(..., ge=0)
    max_keys: int | None = None
    default_ttl: float | None = None


class StatsResponse(BaseModel):
    """Response DTO for service statistics."""

    cache: CacheStatsItem
    embeddings: dict[str, Any] = Field(default_factory=dict)
    system: dict[str, Any] = Field(default_factory=dict)


class CacheClearResponse(BaseModel):
    """Response DTO for cache invalidation."""

    success: bool
    deleted_count: int = Field(..., ge=0)
    pattern: str | None = None
    message: str


class SimilarKeysResponse(BaseModel):
    """Response DTO for approximate cache key lookup."""

    key: str
    threshold: float
    matches: list[str] = Field(default_factory=list)


class HealthCheckResponse(BaseModel):
    """Response DTO for health check."""

    status: str = Field(..., description="Health status: 'healthy' or 'degraded'")
    cache_keys: int = Field(..., description="Live entries in the in-process cache")
    ollama: bool = Field(..., description="Whether the model server is reachable")
    redis: bool = Field(..., description="Whether the embedding store is reachable")
    native_search: bool = Field(..., description="Whether the vector index answers")
