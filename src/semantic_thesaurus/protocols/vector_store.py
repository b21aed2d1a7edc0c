"""Vector persistence protocol.

The persistent store keeps one embedding per (subject_id, model) and serves
both similarity execution strategies: a native nearest-neighbour query and
a capped full listing for the in-process scan.
"""

from typing import Protocol, runtime_checkable

from semantic_thesaurus.entities import EmbeddingRecordEntity, SemanticMatchEntity


@runtime_checkable
class VectorStore(Protocol):
    """Protocol for embedding storage backends."""

    def upsert(self, record: EmbeddingRecordEntity) -> str:
        """Insert or overwrite the embedding for (subject_id, model).

        Returns:
            The storage key of the record

        Raises:
            DimensionMismatch: The vector length differs from the model's dimension
        """
        ...

    def query_nearest(
        self,
        vector: list[float],
        model: str,
        limit: int,
        similarity_threshold: float,
    ) -> list[SemanticMatchEntity]:
        """Native nearest-neighbour search, ranked by descending similarity.

        May raise any backend error; callers fall back to ``list_all``.
        """
        ...

    def list_all(self, model: str, cap: int) -> list[EmbeddingRecordEntity]:
        """Return up to ``cap`` stored records for ``model``."""
        ...

    def supports_native_search(self) -> bool:
        """Probe whether ``query_nearest`` can currently run."""
        ...

    def count_by_model(self) -> dict[str, int]:
        """Count stored records per model."""
        ...

    def health_check(self) -> bool:
        """Check whether the store is reachable."""
        ...
