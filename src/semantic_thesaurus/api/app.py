from typing import Any

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware

from semantic_thesaurus.api.dependencies import HandlerDep, ServiceContainer, lifespan
from semantic_thesaurus.config import settings
from semantic_thesaurus.dto import (
    AnalysisResponse,
    AnalyzeRequest,
    BatchAnalyzeRequest,
    BatchAnalyzeResponse,
    CacheClearResponse,
    ClearCacheRequest,
    ContextRequest,
    ContextResponse,
    DefinitionResponse,
    EmbeddingStoreResponse,
    HealthCheckResponse,
    LoadModelRequest,
    ModelLoadResponse,
    ProvidersResponse,
    RelatedWordsResponse,
    SemanticSearchRequest,
    SemanticSearchResponse,
    SimilarKeysResponse,
    StatsResponse,
    StoreEmbeddingRequest,
)

API_NAME = "AI Thesaurus API"
API_VERSION = "0.1.0"
API_DESCRIPTION = "Synonyms, antonyms, definitions and semantic word search backed by a local language model"


def create_app(container: ServiceContainer | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        container: Pre-built services. When None the lifespan builds the
            production stack from settings.
    """
    app = FastAPI(
        title=API_NAME,
        description=API_DESCRIPTION,
        version=API_VERSION,
        lifespan=lifespan,
    )
    if container is not None:
        app.state.container = container

    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root() -> dict[str, Any]:
        """Root endpoint with API information."""
        return {
            "name": API_NAME,
            "version": API_VERSION,
            "description": API_DESCRIPTION,
            "endpoints": {
                "analyze": "/api/analyze",
                "batch": "/api/batch/analyze",
                "search": "/api/search/semantic",
                "synonyms": "/api/synonyms/{word}",
                "antonyms": "/api/antonyms/{word}",
                "context": "/api/context",
                "definition": "/api/definition/{word}",
                "embeddings": "/api/embeddings",
                "stats": "/api/stats",
                "health": "/health",
                "docs": "/docs",
            },
        }

    @app.get("/health", response_model=HealthCheckResponse)
    async def health(handler: HandlerDep) -> HealthCheckResponse:
        """Health check endpoint."""
        return await handler.health_check()

    @app.post("/api/analyze", response_model=AnalysisResponse)
    async def analyze(request: AnalyzeRequest, handler: HandlerDep) -> AnalysisResponse:
        """Analyze a word: definition, synonyms, antonyms and contextual meanings."""
        return await handler.analyze(request)

    @app.post("/api/batch/analyze", response_model=BatchAnalyzeResponse)
    async def batch_analyze(request: BatchAnalyzeRequest, handler: HandlerDep) -> BatchAnalyzeResponse:
        """Analyze several words concurrently."""
        return await handler.batch_analyze(request)

    @app.post("/api/search/semantic", response_model=SemanticSearchResponse)
    async def semantic_search(request: SemanticSearchRequest, handler: HandlerDep) -> SemanticSearchResponse:
        """Find stored words whose embeddings are close to the query."""
        return await handler.semantic_search(request)

    @app.get("/api/synonyms/{word}", response_model=RelatedWordsResponse)
    async def synonyms(
        word: str,
        handler: HandlerDep,
        context: str | None = None,
        limit: int | None = Query(None, ge=1, le=50),
    ) -> RelatedWordsResponse:
        return await handler.synonyms(word, context, limit)

    @app.get("/api/antonyms/{word}", response_model=RelatedWordsResponse)
    async def antonyms(
        word: str,
        handler: HandlerDep,
        context: str | None = None,
        limit: int | None = Query(None, ge=1, le=50),
    ) -> RelatedWordsResponse:
        return await handler.antonyms(word, context, limit)

    @app.post("/api/context", response_model=ContextResponse)
    async def context(request: ContextRequest, handler: HandlerDep) -> ContextResponse:
        return await handler.context(request)

    @app.get("/api/definition/{word}", response_model=DefinitionResponse)
    async def definition(
        word: str,
        handler: HandlerDep,
        part_of_speech: str | None = None,
    ) -> DefinitionResponse:
        return await handler.definition(word, part_of_speech)

    @app.post("/api/embeddings", response_model=EmbeddingStoreResponse)
    async def store_embedding(request: StoreEmbeddingRequest, handler: HandlerDep) -> EmbeddingStoreResponse:
        """Embed a text and store it under a subject id (upsert)."""
        return await handler.store_embedding(request)

    @app.post("/api/embeddings/load", response_model=ModelLoadResponse)
    async def load_model(request: LoadModelRequest, handler: HandlerDep) -> ModelLoadResponse:
        """Load a word2vec file into the local provider."""
        return await handler.load_model(request)

    @app.get("/api/embeddings/providers", response_model=ProvidersResponse)
    async def providers(handler: HandlerDep) -> ProvidersResponse:
        return await handler.providers()

    @app.get("/api/stats", response_model=StatsResponse)
    async def stats(handler: HandlerDep) -> StatsResponse:
        """Cache, embedding and process statistics."""
        return await handler.get_stats()

    @app.post("/api/cache/clear", response_model=CacheClearResponse)
    async def clear_cache(handler: HandlerDep, request: ClearCacheRequest | None = None) -> CacheClearResponse:
        """Delete cache entries matching a pattern, or everything."""
        return await handler.clear_cache(request or ClearCacheRequest())

    @app.get("/api/cache/similar", response_model=SimilarKeysResponse)
    async def similar_keys(
        handler: HandlerDep,
        key: str = Query(..., min_length=1),
        threshold: float | None = Query(None, ge=0.0, le=1.0),
    ) -> SimilarKeysResponse:
        """Approximate cache key lookup, for diagnostics."""
        return await handler.similar_keys(key, threshold)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "semantic_thesaurus.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
    )
