"""Model-server embedding provider.

Delegates to the language model client's embed endpoint and caches each
vector under ``embedding:{model}:{text}`` so repeated texts never hit the
server twice within the embedding TTL. Concurrent requests for the same
text share one server call.
"""

import logging

from semantic_thesaurus.config import settings
from semantic_thesaurus.entities import EmbeddingResultEntity
from semantic_thesaurus.protocols import CacheStore, LanguageModelClient
from semantic_thesaurus.repositories.ollama_client import OllamaClient
from semantic_thesaurus.services.cache_keys import CacheKeyPolicy
from semantic_thesaurus.services.in_flight import InFlightCalls

logger = logging.getLogger(__name__)

DEFAULT_DIMENSION = 768


class RemoteEmbeddingProvider:
    """Remote implementation of the EmbeddingProvider protocol.

    This class satisfies the EmbeddingProvider protocol through structural
    typing - no explicit inheritance needed. Transport failures surface as
    ProviderUnavailable from the client; they are never swallowed here.
    """

    PROVIDER = "ollama"

    def __init__(
        self,
        client: LanguageModelClient,
        cache: CacheStore,
        model_name: str | None = None,
        ttl: int | None = None,
        keys: CacheKeyPolicy | None = None,
    ) -> None:
        """Initialize the remote embedding provider.

        Args:
            client: Model server client (required).
            cache: Cache for computed vectors (required).
            model_name: Embedding model. Defaults to settings.ollama_embedding_model.
            ttl: Cache TTL for vectors. Defaults to settings.ttl_embedding.
            keys: Key policy. Defaults to a fresh CacheKeyPolicy.
        """
        self._client = client
        self._cache = cache
        self._model_name = model_name or settings.ollama_embedding_model
        self._ttl = ttl or settings.ttl_embedding
        self._keys = keys or CacheKeyPolicy()
        self._inflight = InFlightCalls()
        self._dimension: int | None = OllamaClient.MODEL_DIMENSIONS.get(self._model_name)

    @property
    def name(self) -> str:
        return self.PROVIDER

    @property
    def model_name(self) -> str:
        return self._model_name

    @property
    def dimension(self) -> int:
        """Get the embedding vector dimension.

        Note:
            For unknown models, returns 768 until the first vector is produced.
        """
        return self._dimension or DEFAULT_DIMENSION

    async def generate_embedding(self, text: str) -> EmbeddingResultEntity:
        cache_key = self._keys.embedding(self._model_name, text)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Cache hit for embedding: %s...", text[:50])
            return cached

        return await self._inflight.run(cache_key, lambda: self._embed(cache_key, text))

    async def _embed(self, cache_key: str, text: str) -> EmbeddingResultEntity:
        result = await self._client.embed(text, self._model_name)
        self._dimension = result.dimension
        self._cache.set(cache_key, result, self._ttl)
        return result

    async def is_available(self) -> bool:
        return await self._client.is_available()
