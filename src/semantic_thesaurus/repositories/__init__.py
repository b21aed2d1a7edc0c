"""Repository layer for data access.

This layer wraps external dependencies (Ollama, Redis, word-vector files)
and the in-process cache behind protocol-based interfaces. This enables:
- Easy swapping of implementations (Redis -> PostgreSQL, Ollama -> OpenAI, etc.)
- Unit testing with fake implementations
- Clear separation of concerns

The repositories are protocol-based (structural typing), not inheritance-based.
Any class implementing the required methods will satisfy the protocol.
"""

from .memory_cache_store import TTLCacheStore
from .ollama_client import OllamaClient
from .redis_vector_repository import RedisVectorRepository
from .remote_embedding_provider import RemoteEmbeddingProvider
from .vector_table_provider import LocalVectorTableProvider

__all__ = [
    "LocalVectorTableProvider",
    "OllamaClient",
    "RedisVectorRepository",
    "RemoteEmbeddingProvider",
    "TTLCacheStore",
]
