"""HTTP handlers for thesaurus operations.

Handlers convert between DTOs (API contracts) and service calls.
They handle HTTP concerns like status codes, validation, and error handling.
"""

import asyncio
import logging
import os
import platform
import time
from datetime import datetime, timezone

from fastapi import HTTPException, status

from semantic_thesaurus.config import settings
from semantic_thesaurus.dto import (
    AnalysisResponse,
    AnalyzeRequest,
    BatchAnalyzeRequest,
    BatchAnalyzeResponse,
    CacheClearResponse,
    CacheStatsItem,
    ClearCacheRequest,
    ContextRequest,
    ContextResponse,
    ContextualMeaningItem,
    DefinitionResponse,
    EmbeddingStoreResponse,
    HealthCheckResponse,
    LoadModelRequest,
    ModelLoadResponse,
    ProviderInfoItem,
    ProvidersResponse,
    RelatedWordItem,
    RelatedWordsResponse,
    SemanticMatchItem,
    SemanticSearchRequest,
    SemanticSearchResponse,
    SimilarKeysResponse,
    StatsResponse,
    StoreEmbeddingRequest,
)
from semantic_thesaurus.entities import AnalysisResult, ContextualMeaning, RelatedWord, SemanticMatchEntity
from semantic_thesaurus.errors import (
    AnalysisFailed,
    DimensionMismatch,
    InvalidInput,
    ModelNotLoaded,
    ProviderUnavailable,
    StoreUnavailable,
    ThesaurusError,
)
from semantic_thesaurus.protocols import CacheStore, LanguageModelClient, VectorStore
from semantic_thesaurus.services import (
    AnalysisService,
    CacheKeyPolicy,
    EmbeddingService,
    SemanticSearchService,
)
from semantic_thesaurus.services.response_parser import extract_part_of_speech

logger = logging.getLogger(__name__)

ERROR_STATUS: list[tuple[type[Exception], int]] = [
    (InvalidInput, status.HTTP_400_BAD_REQUEST),
    (ModelNotLoaded, status.HTTP_409_CONFLICT),
    (DimensionMismatch, status.HTTP_409_CONFLICT),
    (AnalysisFailed, status.HTTP_502_BAD_GATEWAY),
    (ProviderUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
    (StoreUnavailable, status.HTTP_503_SERVICE_UNAVAILABLE),
]


def to_http_error(error: Exception, action: str) -> HTTPException:
    """Translate a service error into an HTTPException.

    Known thesaurus errors keep their message; anything else becomes a
    generic 500 so internals never leak to the client.
    """
    for error_type, status_code in ERROR_STATUS:
        if isinstance(error, error_type):
            if status_code >= 500:
                logger.error("%s: %s", action, error)
            else:
                logger.info("%s: %s", action, error)
            return HTTPException(status_code=status_code, detail=f"{action}: {error}")

    logger.exception("%s: unexpected error", action, exc_info=error)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"{action}: internal error",
    )


def _related_item(word: RelatedWord) -> RelatedWordItem:
    return RelatedWordItem(
        word=word.word,
        confidence=word.confidence,
        context=word.context,
        similarity=word.similarity,
    )


def _meaning_item(meaning: ContextualMeaning) -> ContextualMeaningItem:
    return ContextualMeaningItem(
        context=meaning.context,
        meaning=meaning.meaning,
        domain=meaning.domain,
        sentiment=meaning.sentiment,
        examples=list(meaning.examples),
    )


def _analysis_response(result: AnalysisResult) -> AnalysisResponse:
    return AnalysisResponse(
        word=result.word,
        definition=result.definition,
        part_of_speech=result.part_of_speech,
        synonyms=[_related_item(w) for w in result.synonyms],
        antonyms=[_related_item(w) for w in result.antonyms],
        contexts=[_meaning_item(m) for m in result.contexts],
        confidence=result.confidence,
        degraded=result.degraded,
    )


def _match_item(match: SemanticMatchEntity) -> SemanticMatchItem:
    return SemanticMatchItem(
        word=match.subject_id,
        similarity=match.similarity,
        definition=match.metadata.get("definition"),
        part_of_speech=match.metadata.get("part_of_speech"),
        metadata=match.metadata,
    )


class ThesaurusHandler:
    """HTTP handlers for thesaurus operations.

    This handler delegates business logic to the services and handles
    HTTP-specific concerns like:
    - Converting entities to DTOs
    - Setting appropriate status codes
    - Error handling and responses
    """

    def __init__(
        self,
        analysis: AnalysisService,
        embeddings: EmbeddingService,
        search: SemanticSearchService,
        cache: CacheStore,
        store: VectorStore,
        client: LanguageModelClient,
    ) -> None:
        """Initialize the thesaurus handler.

        Args:
            analysis: Word analysis service (required).
            embeddings: Embedding generation and persistence (required).
            search: Semantic search service (required).
            cache: The shared cache store, for stats and invalidation (required).
            store: The embedding store, for health checks (required).
            client: The language model client, for health checks (required).
        """
        self._analysis = analysis
        self._embeddings = embeddings
        self._search = search
        self._cache = cache
        self._store = store
        self._client = client
        self._started = time.monotonic()

    async def analyze(self, request: AnalyzeRequest) -> AnalysisResponse:
        """Handle POST /api/analyze requests.

        Raises:
            HTTPException: 400 for a blank word, 502 if every lookup failed
        """
        try:
            result = await self._analysis.analyze(request.word, request.context)
        except Exception as e:
            raise to_http_error(e, "Failed to analyze word") from e

        if request.include_embeddings and result.definition:
            try:
                await self._embeddings.generate_and_store(
                    subject_id=result.word.lower(),
                    text=f"{result.word}: {result.definition}",
                    metadata={
                        "definition": result.definition,
                        "part_of_speech": result.part_of_speech,
                    },
                )
            except ThesaurusError as e:
                logger.warning("Could not store embedding for %r: %s", result.word, e)

        return _analysis_response(result)

    async def batch_analyze(self, request: BatchAnalyzeRequest) -> BatchAnalyzeResponse:
        """Handle POST /api/batch/analyze requests."""
        try:
            results, failed = await self._analysis.analyze_batch(request.words, request.context)
        except Exception as e:
            raise to_http_error(e, "Failed to analyze batch") from e

        return BatchAnalyzeResponse(
            results=[_analysis_response(r) for r in results],
            total=len(request.words),
            successful=len(results),
            failed=failed,
        )

    async def semantic_search(self, request: SemanticSearchRequest) -> SemanticSearchResponse:
        """Handle POST /api/search/semantic requests."""
        try:
            start_time = time.time()
            matches = await self._search.search(
                query=request.query,
                limit=request.limit,
                threshold=request.threshold,
                provider=request.provider,
                model=request.model,
            )
            lookup_time_ms = (time.time() - start_time) * 1000
        except Exception as e:
            raise to_http_error(e, "Failed to perform semantic search") from e

        return SemanticSearchResponse(
            query=request.query,
            results=[_match_item(m) for m in matches],
            count=len(matches),
            lookup_time_ms=lookup_time_ms,
        )

    async def synonyms(self, word: str, context: str | None, limit: int | None) -> RelatedWordsResponse:
        """Handle GET /api/synonyms/{word} requests."""
        try:
            words = await self._analysis.find_synonyms(word, context, limit)
        except Exception as e:
            raise to_http_error(e, "Failed to find synonyms") from e
        return RelatedWordsResponse(word=word, context=context, words=[_related_item(w) for w in words])

    async def antonyms(self, word: str, context: str | None, limit: int | None) -> RelatedWordsResponse:
        """Handle GET /api/antonyms/{word} requests."""
        try:
            words = await self._analysis.find_antonyms(word, context, limit)
        except Exception as e:
            raise to_http_error(e, "Failed to find antonyms") from e
        return RelatedWordsResponse(word=word, context=context, words=[_related_item(w) for w in words])

    async def context(self, request: ContextRequest) -> ContextResponse:
        """Handle POST /api/context requests."""
        try:
            meanings = await self._analysis.analyze_context(request.word, request.context)
        except Exception as e:
            raise to_http_error(e, "Failed to analyze context") from e
        return ContextResponse(
            word=request.word,
            context=request.context,
            meanings=[_meaning_item(m) for m in meanings],
        )

    async def definition(self, word: str, part_of_speech: str | None) -> DefinitionResponse:
        """Handle GET /api/definition/{word} requests."""
        try:
            definition = await self._analysis.get_definition(word, part_of_speech)
        except Exception as e:
            raise to_http_error(e, "Failed to get definition") from e

        return DefinitionResponse(
            word=word,
            part_of_speech=part_of_speech or extract_part_of_speech(definition),
            definition=definition,
        )

    async def store_embedding(self, request: StoreEmbeddingRequest) -> EmbeddingStoreResponse:
        """Handle POST /api/embeddings requests."""
        try:
            record = await self._embeddings.generate_and_store(
                subject_id=request.subject_id,
                text=request.text,
                provider=request.provider,
                model=request.model,
                metadata=request.metadata,
            )
        except Exception as e:
            raise to_http_error(e, "Failed to store embedding") from e

        return EmbeddingStoreResponse(
            success=True,
            subject_id=record.subject_id,
            model=record.model,
            dimension=record.dimension,
        )

    async def load_model(self, request: LoadModelRequest) -> ModelLoadResponse:
        """Handle POST /api/embeddings/load requests."""
        try:
            info = await self._embeddings.load_local_model(request.path)
        except Exception as e:
            raise to_http_error(e, "Failed to load vector model") from e

        return ModelLoadResponse(
            success=True,
            provider=info["provider"],
            path=info["path"],
            vocabulary_size=info["vocabulary_size"],
            dimension=info["dimension"],
            message=f"Loaded {info['vocabulary_size']} word vectors",
        )

    async def providers(self) -> ProvidersResponse:
        """Handle GET /api/embeddings/providers requests."""
        try:
            info = await self._embeddings.get_provider_info()
        except Exception as e:
            raise to_http_error(e, "Failed to list providers") from e

        return ProvidersResponse(
            default_provider=self._embeddings.providers.default_provider,
            providers={name: ProviderInfoItem(**entry) for name, entry in info.items()},
        )

    async def get_stats(self) -> StatsResponse:
        """Handle GET /api/stats requests.

        An unreachable embedding store is reported in the payload rather than
        failing the whole request.
        """
        try:
            cache_stats = self._cache.stats()
        except Exception as e:
            raise to_http_error(e, "Failed to get stats") from e

        try:
            embeddings = await self._embeddings.get_embedding_stats()
            embeddings["available"] = True
        except StoreUnavailable as e:
            embeddings = {"available": False, "error": str(e)}

        return StatsResponse(
            cache=CacheStatsItem(**cache_stats),
            embeddings=embeddings,
            system={
                "uptime_seconds": round(time.monotonic() - self._started, 1),
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "pid": os.getpid(),
                "python_version": platform.python_version(),
                "language_model": settings.ollama_model,
            },
        )

    async def clear_cache(self, request: ClearCacheRequest) -> CacheClearResponse:
        """Handle POST /api/cache/clear requests."""
        try:
            if request.pattern:
                count = self._cache.delete_matching(request.pattern)
                message = f"Cleared {count} entries matching pattern"
            else:
                count = len(self._cache.keys())
                self._cache.flush()
                message = "Cache cleared successfully"
        except Exception as e:
            raise to_http_error(e, "Failed to clear cache") from e

        logger.info("%s (%d entries)", message, count)
        return CacheClearResponse(success=True, deleted_count=count, pattern=request.pattern, message=message)

    async def similar_keys(self, key: str, threshold: float | None) -> SimilarKeysResponse:
        """Handle GET /api/cache/similar requests."""
        threshold = settings.semantic_cache_threshold if threshold is None else threshold
        try:
            matches = CacheKeyPolicy.find_similar_keys(self._cache, key, threshold)
        except Exception as e:
            raise to_http_error(e, "Failed to search cache keys") from e
        return SimilarKeysResponse(key=key, threshold=threshold, matches=matches)

    async def health_check(self) -> HealthCheckResponse:
        """Handle GET /health requests."""
        ollama, redis_ok, native = await asyncio.gather(
            self._client.is_available(),
            asyncio.to_thread(self._store.health_check),
            asyncio.to_thread(self._store.supports_native_search),
        )
        return HealthCheckResponse(
            status="healthy" if ollama and redis_ok else "degraded",
            cache_keys=len(self._cache.keys()),
            ollama=ollama,
            redis=redis_ok,
            native_search=native,
        )
