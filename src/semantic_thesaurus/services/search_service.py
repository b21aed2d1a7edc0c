"""Semantic word search over stored embeddings."""

import logging

from semantic_thesaurus.config import settings
from semantic_thesaurus.entities import SemanticMatchEntity
from semantic_thesaurus.errors import InvalidInput
from semantic_thesaurus.protocols import CacheStore
from semantic_thesaurus.services.cache_keys import CacheKeyPolicy
from semantic_thesaurus.services.embedding_service import EmbeddingService
from semantic_thesaurus.services.similarity import SimilaritySearchEngine

logger = logging.getLogger(__name__)


class SemanticSearchService:
    """Embeds a query and ranks stored words by cosine similarity.

    Ranked results are cached under
    ``semantic_search:{query}:{limit}:{threshold}:{provider}:{model}`` for
    ``ttl_semantic_search`` seconds, shorter than the embedding TTL since
    they depend on the whole stored corpus.
    """

    def __init__(
        self,
        embeddings: EmbeddingService,
        engine: SimilaritySearchEngine,
        cache: CacheStore,
        keys: CacheKeyPolicy | None = None,
        ttl: int | None = None,
    ) -> None:
        self._embeddings = embeddings
        self._engine = engine
        self._cache = cache
        self._keys = keys or CacheKeyPolicy()
        self._ttl = ttl or settings.ttl_semantic_search

    async def search(
        self,
        query: str,
        limit: int | None = None,
        threshold: float | None = None,
        provider: str | None = None,
        model: str | None = None,
    ) -> list[SemanticMatchEntity]:
        """Find stored words similar to ``query``.

        Args:
            query: Free text to embed
            limit: Maximum results. Defaults to settings.semantic_search_limit.
            threshold: Minimum similarity in [0, 1]. Defaults to settings.
            provider: Embedding provider name. Defaults to the factory default.
            model: Provider model override

        Returns:
            Matches ordered by descending similarity

        Raises:
            InvalidInput: If the query is blank or limit/threshold are out of range
            SearchBackendUnavailable: If no similarity backend could run
        """
        if not query or not query.strip():
            raise InvalidInput("Query is required")
        limit = settings.semantic_search_limit if limit is None else limit
        threshold = settings.semantic_search_threshold if threshold is None else threshold
        if limit < 1:
            raise InvalidInput("Limit must be at least 1")
        if not 0 <= threshold <= 1:
            raise InvalidInput("Threshold must be between 0 and 1")

        provider_name = provider or self._embeddings.providers.default_provider
        cache_key = self._keys.semantic_search(query, limit, threshold, provider_name, model)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Cache hit for semantic search: %s", query)
            return cached

        embedding = await self._embeddings.generate(query, provider_name, model)
        matches = await self._engine.search(embedding.vector, embedding.model, limit, threshold)

        self._cache.set(cache_key, matches, self._ttl)
        logger.info(
            "Semantic search for %r returned %d matches via %s",
            query,
            len(matches),
            self._engine.last_backend,
        )
        return matches
