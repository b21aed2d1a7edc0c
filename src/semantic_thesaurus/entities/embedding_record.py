"""Embedding domain entities."""

from dataclasses import dataclass, field
from typing import Any

from semantic_thesaurus.errors import DimensionMismatch


@dataclass(frozen=True)
class EmbeddingResultEntity:
    """A freshly generated embedding.

    Attributes:
        vector: The embedding values
        dimension: ``len(vector)``
        model: Identifier of the provider+model that produced the vector
    """

    vector: list[float]
    dimension: int
    model: str

    @property
    def is_zero(self) -> bool:
        return not any(self.vector)


@dataclass(frozen=True)
class EmbeddingRecordEntity:
    """A persisted embedding, unique per (subject_id, model).

    Attributes:
        subject_id: Identifier of the owning word or text
        model: Provider+model identifier; storage partitions on it
        vector: The embedding values
        metadata: Display data stored alongside (definition, part of speech)
    """

    subject_id: str
    model: str
    vector: list[float]
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def dimension(self) -> int:
        return len(self.vector)

    def check_dimension(self, expected: int) -> None:
        if self.dimension != expected:
            raise DimensionMismatch(
                expected,
                self.dimension,
                f"Embedding for '{self.subject_id}' under model '{self.model}' has "
                f"dimension {self.dimension}, model declares {expected}",
            )
