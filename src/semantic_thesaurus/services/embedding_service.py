"""Embedding provider selection and embedding persistence."""

import asyncio
import logging
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from semantic_thesaurus.entities import EmbeddingRecordEntity, EmbeddingResultEntity
from semantic_thesaurus.errors import (
    DimensionMismatch,
    InvalidInput,
    ProviderUnavailable,
    StoreUnavailable,
    UnsupportedProvider,
)
from semantic_thesaurus.protocols import EmbeddingProvider, LoadableEmbeddingProvider, VectorStore

logger = logging.getLogger(__name__)

ProviderBuilder = Callable[[str | None], EmbeddingProvider]

BATCH_SIZE = 10
MAX_MODEL_INSTANCES = 16


class EmbeddingProviderFactory:
    """Resolves ``(provider, model)`` pairs to EmbeddingProvider instances.

    A builder is registered per provider name. The default-model instance of
    each provider lives for the life of the factory. Instances for explicit
    model names are kept in a small LRU of ``max_model_instances`` entries,
    so arbitrary model names from requests cannot grow the registry.

    Example:
        ```python
        factory = EmbeddingProviderFactory(default_provider="ollama")
        factory.register("ollama", lambda model: RemoteEmbeddingProvider(client, cache, model))
        provider = factory.get("ollama", "mxbai-embed-large")
        ```
    """

    def __init__(self, default_provider: str = "ollama", max_model_instances: int = MAX_MODEL_INSTANCES) -> None:
        self._default_provider = default_provider
        self._max_model_instances = max_model_instances
        self._builders: dict[str, ProviderBuilder] = {}
        self._defaults: dict[str, EmbeddingProvider] = {}
        self._by_model: OrderedDict[tuple[str, str], EmbeddingProvider] = OrderedDict()

    @property
    def default_provider(self) -> str:
        return self._default_provider

    def register(self, name: str, builder: ProviderBuilder) -> None:
        self._builders[name] = builder

    def names(self) -> list[str]:
        return list(self._builders)

    def get(self, provider: str | None = None, model: str | None = None) -> EmbeddingProvider:
        """Return the provider instance for ``(provider, model)``.

        Raises:
            UnsupportedProvider: If no builder is registered under ``provider``
        """
        name = provider or self._default_provider
        builder = self._builders.get(name)
        if builder is None:
            raise UnsupportedProvider(
                f"Unsupported embedding provider: {name!r} (available: {', '.join(self._builders)})"
            )

        if model is None:
            if name not in self._defaults:
                self._defaults[name] = builder(None)
            return self._defaults[name]

        key = (name, model)
        instance = self._by_model.get(key)
        if instance is None:
            instance = builder(model)
            self._by_model[key] = instance
            while len(self._by_model) > self._max_model_instances:
                evicted, _ = self._by_model.popitem(last=False)
                logger.debug("Dropped embedding provider instance %s", evicted)
        else:
            self._by_model.move_to_end(key)
        return instance

    def instance_count(self) -> int:
        return len(self._defaults) + len(self._by_model)


@dataclass(frozen=True)
class EmbeddingJob:
    """One text to embed and store under ``subject_id``."""

    subject_id: str
    text: str
    metadata: dict[str, Any] = field(default_factory=dict)


class EmbeddingService:
    """Generates embeddings through the selected provider and persists them.

    Depends only on protocols: the provider factory hands out
    EmbeddingProvider instances and the store is any VectorStore.
    """

    def __init__(self, providers: EmbeddingProviderFactory, store: VectorStore) -> None:
        """Initialize the embedding service.

        Args:
            providers: Provider registry (required).
            store: Vector persistence backend (required).
        """
        self._providers = providers
        self._store = store

    @property
    def providers(self) -> EmbeddingProviderFactory:
        return self._providers

    async def generate(
        self,
        text: str,
        provider: str | None = None,
        model: str | None = None,
    ) -> EmbeddingResultEntity:
        """Embed ``text`` without storing it.

        Raises:
            InvalidInput: If ``text`` is blank
            UnsupportedProvider: If the provider is unknown
            ProviderUnavailable: If the remote backend fails
            ModelNotLoaded: If the local table has not been loaded
        """
        if not text or not text.strip():
            raise InvalidInput("Text is required")
        return await self._providers.get(provider, model).generate_embedding(text)

    async def generate_and_store(
        self,
        subject_id: str,
        text: str,
        provider: str | None = None,
        model: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> EmbeddingRecordEntity:
        """Embed ``text`` and upsert it as the vector for (subject_id, model).

        Raises:
            InvalidInput: If ``subject_id`` is blank
            DimensionMismatch: If the model already stores vectors of another size
            StoreUnavailable: If the store cannot be reached
        """
        if not subject_id or not subject_id.strip():
            raise InvalidInput("Subject id is required")

        result = await self.generate(text, provider, model)
        record = EmbeddingRecordEntity(
            subject_id=subject_id,
            model=result.model,
            vector=result.vector,
            metadata=metadata or {},
        )
        await asyncio.to_thread(self._store.upsert, record)
        logger.debug("Stored %d-dim embedding for %s under %s", result.dimension, subject_id, result.model)
        return record

    async def batch_generate(
        self,
        jobs: list[EmbeddingJob],
        provider: str | None = None,
        model: str | None = None,
    ) -> dict[str, int]:
        """Embed and store ``jobs`` in concurrent batches of ten.

        A failing job is counted and logged; it never aborts the batch.

        Returns:
            ``{"stored": n, "failed": m}``
        """
        stored = failed = 0
        for start in range(0, len(jobs), BATCH_SIZE):
            batch = jobs[start : start + BATCH_SIZE]
            logger.info("Embedding batch %d (%d items)", start // BATCH_SIZE + 1, len(batch))
            results = await asyncio.gather(
                *(
                    self.generate_and_store(job.subject_id, job.text, provider, model, job.metadata)
                    for job in batch
                ),
                return_exceptions=True,
            )
            for job, result in zip(batch, results):
                if isinstance(result, BaseException):
                    if not isinstance(result, Exception):
                        raise result
                    failed += 1
                    logger.warning("Failed to embed %s: %s", job.subject_id, result)
                else:
                    stored += 1

        logger.info("Batch embedding finished: %d stored, %d failed", stored, failed)
        return {"stored": stored, "failed": failed}

    async def load_local_model(self, path: str, provider: str = "word2vec") -> dict[str, Any]:
        """Load a vector file into a file-backed provider.

        Raises:
            UnsupportedProvider: If ``provider`` cannot load files
            InvalidInput: If the file is missing, malformed or has the wrong dimension
        """
        if not path or not path.strip():
            raise InvalidInput("Model path is required")

        target = self._providers.get(provider)
        if not isinstance(target, LoadableEmbeddingProvider):
            raise UnsupportedProvider(f"Provider {provider!r} does not load model files")

        try:
            count = await asyncio.to_thread(target.load_model, path)
        except (OSError, ValueError, DimensionMismatch) as e:
            logger.error("Failed to load vector model from %s: %s", path, e)
            raise InvalidInput(f"Could not load vector model from {Path(path).name}: {e}") from e

        return {"provider": provider, "path": path, "vocabulary_size": count, "dimension": target.dimension}

    async def is_available(self, provider: str) -> bool:
        """Current reachability or loaded state of ``provider``.

        Raises:
            UnsupportedProvider: If the provider is unknown
        """
        target = self._providers.get(provider)
        try:
            return await target.is_available()
        except ProviderUnavailable:
            return False

    async def get_provider_info(self) -> dict[str, dict[str, Any]]:
        info = {}
        for name in self._providers.names():
            target = self._providers.get(name)
            available = await self.is_available(name)
            entry: dict[str, Any] = {
                "available": available,
                "models": [target.model_name] if available else [],
                "dimension": target.dimension,
            }
            if isinstance(target, LoadableEmbeddingProvider):
                entry["loaded"] = target.is_loaded
            info[name] = entry
        return info

    async def get_embedding_stats(self) -> dict[str, Any]:
        """Total and per-model embedding counts.

        Raises:
            StoreUnavailable: If the store cannot be reached
        """
        try:
            counts = await asyncio.to_thread(self._store.count_by_model)
        except StoreUnavailable:
            logger.warning("Embedding store unavailable while collecting stats")
            raise
        return {"total_embeddings": sum(counts.values()), "model_distribution": counts}
