"""Dependency injection configuration for FastAPI app.

Uses FastAPI's app.state pattern for storing service instances.

Pattern:
    - Services built once into a ServiceContainer during lifespan
    - Dependency functions retrieve from request.app.state
    - Clean separation, no global mutable state
"""

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from semantic_thesaurus.config import configure_logging, settings
from semantic_thesaurus.errors import ThesaurusError
from semantic_thesaurus.handlers import ThesaurusHandler
from semantic_thesaurus.protocols import LanguageModelClient, VectorStore
from semantic_thesaurus.repositories import (
    LocalVectorTableProvider,
    OllamaClient,
    RedisVectorRepository,
    RemoteEmbeddingProvider,
    TTLCacheStore,
)
from semantic_thesaurus.services import (
    AnalysisService,
    CacheKeyPolicy,
    EmbeddingProviderFactory,
    EmbeddingService,
    SemanticSearchService,
    SimilaritySearchEngine,
)

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Every long-lived collaborator of the API, wired once at startup."""

    cache: TTLCacheStore
    client: LanguageModelClient
    store: VectorStore
    local_provider: LocalVectorTableProvider
    providers: EmbeddingProviderFactory
    embeddings: EmbeddingService
    engine: SimilaritySearchEngine
    analysis: AnalysisService
    search: SemanticSearchService
    handler: ThesaurusHandler

    @classmethod
    def assemble(
        cls,
        cache: TTLCacheStore,
        client: LanguageModelClient,
        store: VectorStore,
        local_provider: LocalVectorTableProvider | None = None,
    ) -> "ServiceContainer":
        """Wire services around the given infrastructure.

        Args:
            cache: Shared in-process cache (required).
            client: Language model client (required).
            store: Embedding store (required).
            local_provider: Word-vector provider. Defaults to an unloaded one.
        """
        keys = CacheKeyPolicy()
        local_provider = local_provider or LocalVectorTableProvider.create()

        def remote(model: str | None) -> RemoteEmbeddingProvider:
            return RemoteEmbeddingProvider(client=client, cache=cache, model_name=model, keys=keys)

        def local(model: str | None) -> LocalVectorTableProvider:
            if model and model != local_provider.model_name:
                logger.debug("Ignoring model %r for the word2vec provider", model)
            return local_provider

        providers = EmbeddingProviderFactory(default_provider=RemoteEmbeddingProvider.PROVIDER)
        providers.register(RemoteEmbeddingProvider.PROVIDER, remote)
        providers.register(LocalVectorTableProvider.PROVIDER, local)

        embeddings = EmbeddingService(providers=providers, store=store)
        engine = SimilaritySearchEngine.create(store=store)
        analysis = AnalysisService.create(client=client, cache=cache, keys=keys)
        search = SemanticSearchService(embeddings=embeddings, engine=engine, cache=cache, keys=keys)
        handler = ThesaurusHandler(
            analysis=analysis,
            embeddings=embeddings,
            search=search,
            cache=cache,
            store=store,
            client=client,
        )
        return cls(
            cache=cache,
            client=client,
            store=store,
            local_provider=local_provider,
            providers=providers,
            embeddings=embeddings,
            engine=engine,
            analysis=analysis,
            search=search,
            handler=handler,
        )

    @classmethod
    def create(cls) -> "ServiceContainer":
        """Factory method building the production stack from settings."""
        return cls.assemble(
            cache=TTLCacheStore.create(),
            client=OllamaClient.create(),
            store=RedisVectorRepository.create(),
        )


def get_container(request: Request) -> ServiceContainer:
    """Dependency injection for the ServiceContainer from app.state.

    Raises:
        RuntimeError: If the container is not initialized
    """
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("ServiceContainer not initialized. Check lifespan setup.")
    return container


def get_handler(request: Request) -> ThesaurusHandler:
    """Dependency injection for ThesaurusHandler from app.state."""
    return get_container(request).handler


async def sweep_periodically(cache: TTLCacheStore, period: float) -> None:
    """Reclaim expired cache entries every ``period`` seconds until cancelled."""
    while True:
        await asyncio.sleep(period)
        removed = cache.sweep_expired()
        if removed:
            logger.debug("Swept %d expired cache entries", removed)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI app.

    Uses a container already placed on app.state (tests inject one) or
    builds the production stack, optionally auto-loads the local word-vector
    file, and runs the periodic cache sweep.

    Cleanup:
        Stops the sweep and closes clients this lifespan created
    """
    container = getattr(app.state, "container", None)
    owned = container is None
    if owned:
        configure_logging()
        container = ServiceContainer.create()
        app.state.container = container

    logger.info("Starting AI Thesaurus API...")
    logger.info("Language model: %s at %s", settings.ollama_model, settings.ollama_base_url)
    logger.info("Embedding model: %s", settings.ollama_embedding_model)

    if owned and settings.local_vector_model_path:
        try:
            await container.embeddings.load_local_model(settings.local_vector_model_path)
        except ThesaurusError as e:
            logger.warning("Word vectors not loaded at startup: %s", e)

    sweeper = asyncio.create_task(sweep_periodically(container.cache, settings.cache_check_period))

    yield

    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper

    if owned:
        if isinstance(container.client, OllamaClient):
            await container.client.close()
        del app.state.container
    logger.info("AI Thesaurus API shut down")


# Type aliases for cleaner dependency injection
HandlerDep = Annotated[ThesaurusHandler, Depends(get_handler)]
ContainerDep = Annotated[ServiceContainer, Depends(get_container)]
