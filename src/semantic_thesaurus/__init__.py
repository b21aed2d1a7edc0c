"""Semantic Thesaurus - AI word analysis with cached model lookups and vector search.

This package provides a layered architecture for an AI thesaurus:

Layers:
    - protocols: Interface contracts (CacheStore, LanguageModelClient, EmbeddingProvider, ...)
    - repositories: Data access implementations (TTL cache, Ollama, Redis, word2vec table)
    - services: Business logic (analysis, embeddings, similarity search)
    - handlers: HTTP endpoint handlers
    - dto: Data transfer objects (API contracts)
    - entities: Domain models (internal)

Usage:
    ```python
    from semantic_thesaurus.repositories import OllamaClient, TTLCacheStore
    from semantic_thesaurus.services import AnalysisService

    analysis = AnalysisService.create(client=OllamaClient.create(), cache=TTLCacheStore.create())
    result = await analysis.analyze("brilliant")
    ```

For HTTP API:
    ```python
    from semantic_thesaurus.api.app import app
    ```
"""

from semantic_thesaurus.config import get_redis_client, settings
from semantic_thesaurus.entities import AnalysisResult, EmbeddingRecordEntity, SemanticMatchEntity
from semantic_thesaurus.errors import ThesaurusError
from semantic_thesaurus.handlers import ThesaurusHandler
from semantic_thesaurus.protocols import CacheStore, EmbeddingProvider, LanguageModelClient, VectorStore
from semantic_thesaurus.repositories import (
    LocalVectorTableProvider,
    OllamaClient,
    RedisVectorRepository,
    RemoteEmbeddingProvider,
    TTLCacheStore,
)
from semantic_thesaurus.services import AnalysisService, EmbeddingService, SemanticSearchService

__all__ = [
    # Configuration
    "settings",
    "get_redis_client",
    # Protocols (interfaces)
    "CacheStore",
    "EmbeddingProvider",
    "LanguageModelClient",
    "VectorStore",
    # Services (business logic)
    "AnalysisService",
    "EmbeddingService",
    "SemanticSearchService",
    # Handlers (HTTP)
    "ThesaurusHandler",
    # Repositories (data access)
    "LocalVectorTableProvider",
    "OllamaClient",
    "RedisVectorRepository",
    "RemoteEmbeddingProvider",
    "TTLCacheStore",
    # Entities (domain models)
    "AnalysisResult",
    "EmbeddingRecordEntity",
    "SemanticMatchEntity",
    # Errors
    "ThesaurusError",
]
