"""Semantic search match entity."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class SemanticMatchEntity:
    """A single result of a vector similarity search.

    Attributes:
        subject_id: The matched subject (usually the word)
        similarity: Cosine similarity to the query, higher is closer
        metadata: Data stored with the embedding (definition, part_of_speech, ...)
    """

    subject_id: str
    similarity: float
    metadata: dict[str, Any] = field(default_factory=dict)
