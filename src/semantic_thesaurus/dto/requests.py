"""Request DTOs for API endpoints."""

from typing import Any

from pydantic import BaseModel, Field


class AnalyzeRequest(BaseModel):
    """Request DTO for a full word analysis.

    The handler will convert this to internal calls to the service layer.
    """

    word: str = Field(..., description="The word to analyze", min_length=1, max_length=100)
    context: str | None = Field(
        None,
        description="Optional sentence or topic the word is used in",
        max_length=1000,
    )
    include_embeddings: bool = Field(
        False,
        description="Also embed '<word>: <definition>' and store it for semantic search",
    )


class BatchAnalyzeRequest(BaseModel):
    """Request DTO for analyzing several words at once."""

    words: list[str] = Field(..., description="Words to analyze", min_length=1)
    context: str | None = Field(None, description="Context shared by every word", max_length=1000)


class SemanticSearchRequest(BaseModel):
    """Request DTO for semantic word search."""

    query: str = Field(..., description="Free text to search for", min_length=1, max_length=500)
    limit: int | None = Field(None, description="Maximum number of results", ge=1, le=100)
    threshold: float | None = Field(
        None,
        description="Minimum cosine similarity (0-1, higher = more strict)",
        ge=0.0,
        le=1.0,
    )
    provider: str | None = Field(None, description="Embedding provider: 'ollama' or 'word2vec'")
    model: str | None = Field(None, description="Provider model override")


class ContextRequest(BaseModel):
    """Request DTO for contextual meaning analysis."""

    word: str = Field(..., description="The word to explain", min_length=1, max_length=100)
    context: str = Field(..., description="The context to explain it in", min_length=1, max_length=1000)


class StoreEmbeddingRequest(BaseModel):
    """Request DTO for storing an embedding."""

    subject_id: str = Field(..., description="Identifier the vector is stored under", min_length=1)
    text: str = Field(..., description="Text to embed", min_length=1)
    provider: str | None = Field(None, description="Embedding provider")
    model: str | None = Field(None, description="Provider model override")
    metadata: dict[str, Any] | None = Field(
        default_factory=dict,
        description="Optional metadata (definition, part of speech, etc.)",
    )


class LoadModelRequest(BaseModel):
    """Request DTO for loading a local word-vector file."""

    path: str = Field(..., description="Path to a word2vec .txt/.vec/.bin file", min_length=1)


class ClearCacheRequest(BaseModel):
    """Request DTO for clearing cache entries."""

    pattern: str | None = Field(
        None,
        description="Regular expression over cache keys (if null, clears all)",
    )
