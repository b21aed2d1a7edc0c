"""Protocol interfaces for swappable implementations.

This package contains protocol definitions using structural typing.
Protocols enable:
- Easy swapping of implementations (Redis -> PostgreSQL, Ollama -> OpenAI, etc.)
- Unit testing with fake implementations
- Clear separation of concerns
"""

from .cache_store import CacheStore
from .embedding_provider import EmbeddingProvider, LoadableEmbeddingProvider
from .language_model import GenerationOptions, LanguageModelClient
from .similarity_backend import SimilarityBackend
from .vector_store import VectorStore

__all__ = [
    "CacheStore",
    "EmbeddingProvider",
    "GenerationOptions",
    "LanguageModelClient",
    "LoadableEmbeddingProvider",
    "SimilarityBackend",
    "VectorStore",
]
