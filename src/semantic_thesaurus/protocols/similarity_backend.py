"""Similarity backend protocol.

A backend ranks stored vectors against a query vector. Two implementations
exist (native operator, brute-force scan); the search engine chooses between
them through ``is_available`` instead of catching errors blindly.
"""

from typing import Protocol, runtime_checkable

from semantic_thesaurus.entities import SemanticMatchEntity


@runtime_checkable
class SimilarityBackend(Protocol):
    """Protocol for similarity search strategies."""

    @property
    def name(self) -> str:
        """Short strategy name for logs and stats."""
        ...

    async def is_available(self) -> bool:
        """Health probe for this strategy."""
        ...

    async def search(
        self,
        vector: list[float],
        model: str,
        limit: int,
        threshold: float,
    ) -> list[SemanticMatchEntity]:
        """Return at most ``limit`` matches with similarity >= ``threshold``,
        sorted by descending similarity."""
        ...
