"""Embedding provider protocol.

Defines the interface for any backend that turns text into a vector.

Implementations:
- RemoteEmbeddingProvider: delegates to a model server (Ollama)
- LocalVectorTableProvider: looks words up in a loaded word2vec table
"""

from typing import Protocol, runtime_checkable

from semantic_thesaurus.entities import EmbeddingResultEntity


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Protocol for embedding generation services.

    Similar to Go's interface pattern - any type that implements these
    methods satisfies the protocol, no explicit inheritance needed.
    """

    @property
    def name(self) -> str:
        """Return the provider key used for selection (e.g. "ollama")."""
        ...

    @property
    def model_name(self) -> str:
        """Return the identifier of the model producing the vectors."""
        ...

    @property
    def dimension(self) -> int:
        """Return the dimension of the embedding vectors."""
        ...

    async def generate_embedding(self, text: str) -> EmbeddingResultEntity:
        """Generate an embedding for ``text``.

        Raises:
            ProviderUnavailable: The backend could not be reached
            ModelNotLoaded: A local provider was used before loading
        """
        ...

    async def is_available(self) -> bool:
        """Report the current loaded/reachable state, not configuration intent."""
        ...


@runtime_checkable
class LoadableEmbeddingProvider(EmbeddingProvider, Protocol):
    """An EmbeddingProvider whose vectors come from a file loaded at runtime."""

    @property
    def is_loaded(self) -> bool: ...

    def load_model(self, path: str) -> int:
        """Load vectors from ``path`` and return the vocabulary size."""
        ...
