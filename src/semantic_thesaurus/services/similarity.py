"""Vector similarity search.

Two SimilarityBackend implementations rank stored vectors for a query:

- ``NativeSimilarityBackend`` hands the query to the vector store's own
  nearest-neighbour operator.
- ``BruteForceSimilarityBackend`` loads at most ``fallback_scan_cap`` records
  for the model and scores each with :func:`cosine_similarity`. Records past
  the cap are not considered.

``SimilaritySearchEngine`` probes the native backend first and falls back
to the scan when the probe fails or the native query errors out.
"""

import asyncio
import logging
import math
from collections.abc import Sequence

import numpy as np

from semantic_thesaurus.config import settings
from semantic_thesaurus.entities import SemanticMatchEntity
from semantic_thesaurus.errors import DimensionMismatch, SearchBackendUnavailable, StoreUnavailable
from semantic_thesaurus.protocols import SimilarityBackend, VectorStore

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """``dot(a, b) / (|a| * |b|)``, 0.0 when either vector has zero norm.

    Raises:
        DimensionMismatch: If the vectors differ in length
    """
    if len(a) != len(b):
        raise DimensionMismatch(len(a), len(b))

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm_product = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm_product == 0.0 or not math.isfinite(norm_product):
        return 0.0
    return max(-1.0, min(1.0, float(np.dot(va, vb)) / norm_product))


def _rank(matches: list[SemanticMatchEntity], limit: int) -> list[SemanticMatchEntity]:
    matches.sort(key=lambda m: (-m.similarity, m.subject_id))
    return matches[:limit]


class NativeSimilarityBackend:
    """Delegates ranking and thresholding to the store's vector index."""

    name = "native"

    def __init__(self, store: VectorStore) -> None:
        self._store = store

    async def is_available(self) -> bool:
        return await asyncio.to_thread(self._store.supports_native_search)

    async def search(
        self,
        vector: list[float],
        model: str,
        limit: int,
        threshold: float,
    ) -> list[SemanticMatchEntity]:
        matches = await asyncio.to_thread(self._store.query_nearest, vector, model, limit, threshold)
        return _rank([m for m in matches if m.similarity >= threshold], limit)


class BruteForceSimilarityBackend:
    """Scores every stored vector of a model in process.

    Only needs the store's listing operation, so it keeps working when the
    vector index is gone.
    """

    name = "brute_force"

    def __init__(self, store: VectorStore, scan_cap: int | None = None) -> None:
        self._store = store
        self._scan_cap = scan_cap or settings.fallback_scan_cap

    @property
    def scan_cap(self) -> int:
        return self._scan_cap

    async def is_available(self) -> bool:
        return await asyncio.to_thread(self._store.health_check)

    async def search(
        self,
        vector: list[float],
        model: str,
        limit: int,
        threshold: float,
    ) -> list[SemanticMatchEntity]:
        records = await asyncio.to_thread(self._store.list_all, model, self._scan_cap)
        if len(records) >= self._scan_cap:
            logger.warning("Brute-force scan for %s hit the cap of %d records", model, self._scan_cap)

        matches = []
        skipped = 0
        for record in records:
            try:
                similarity = cosine_similarity(vector, record.vector)
            except DimensionMismatch:
                skipped += 1
                continue
            if similarity >= threshold:
                matches.append(
                    SemanticMatchEntity(
                        subject_id=record.subject_id,
                        similarity=similarity,
                        metadata=record.metadata,
                    )
                )

        if skipped:
            logger.warning("Skipped %d stored vectors with a different dimension", skipped)
        return _rank(matches, limit)


class SimilaritySearchEngine:
    """Chooses between a preferred and a fallback SimilarityBackend.

    Example:
        ```python
        engine = SimilaritySearchEngine.create(store=RedisVectorRepository.create())
        matches = await engine.search(vector, model="nomic-embed-text", limit=5, threshold=0.7)
        ```
    """

    def __init__(self, native: SimilarityBackend, fallback: SimilarityBackend) -> None:
        """Initialize the engine.

        Args:
            native: Backend tried first when its probe succeeds.
            fallback: Backend used when the native one is down or fails.
        """
        self._native = native
        self._fallback = fallback
        self._last_backend: str | None = None

    @classmethod
    def create(cls, store: VectorStore, scan_cap: int | None = None) -> "SimilaritySearchEngine":
        """Factory method wiring both backends to the same store."""
        return cls(
            native=NativeSimilarityBackend(store),
            fallback=BruteForceSimilarityBackend(store, scan_cap=scan_cap),
        )

    @property
    def last_backend(self) -> str | None:
        """Name of the backend that answered the most recent search."""
        return self._last_backend

    async def search(
        self,
        vector: list[float],
        model: str,
        limit: int,
        threshold: float,
    ) -> list[SemanticMatchEntity]:
        """Top ``limit`` stored vectors with similarity >= ``threshold``.

        Zero queries and non-positive thresholds always use the fallback.

        Raises:
            SearchBackendUnavailable: If neither backend could run
        """
        use_native = any(vector) and threshold > 0 and await self._probe(self._native)

        if use_native:
            try:
                matches = await self._native.search(vector, model, limit, threshold)
                self._last_backend = self._native.name
                return matches
            except StoreUnavailable as e:
                logger.warning("Native similarity search failed, falling back to scan: %s", e)

        try:
            matches = await self._fallback.search(vector, model, limit, threshold)
        except StoreUnavailable as e:
            raise SearchBackendUnavailable(f"No similarity backend could run: {e}") from e
        self._last_backend = self._fallback.name
        return matches

    async def backend_status(self) -> dict[str, bool]:
        return {
            self._native.name: await self._probe(self._native),
            self._fallback.name: await self._probe(self._fallback),
        }

    @staticmethod
    async def _probe(backend: SimilarityBackend) -> bool:
        try:
            return await backend.is_available()
        except StoreUnavailable as e:
            logger.warning("Similarity backend %s probe failed: %s", backend.name, e)
            return False
