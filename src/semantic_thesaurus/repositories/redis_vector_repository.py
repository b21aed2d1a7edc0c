"""Redis implementation of VectorStore.

Embeddings live in Redis hashes keyed ``{prefix}:{model}:{subject_id}``,
so writing the same (subject, model) pair again overwrites it (upsert).
The model segment is percent-encoded, so distinct model names always get
distinct key prefixes and glob characters in a name never widen a SCAN.
Each model gets its own Redis Stack HNSW index, because an index has a
fixed vector dimension.

Native search uses the COSINE metric. Redis reports cosine *distance*
``1 - cos(a, b)`` in [0, 2], so ``similarity = 1 - distance`` holds exactly
and a similarity threshold ``t`` is a distance threshold ``1 - t``. That
conversion is only valid for COSINE; the constructor refuses other metrics.

The fallback listing only uses SCAN + HGETALL and works on plain Redis
without the search module.
"""

import json
import logging
import time
from itertools import islice
from typing import Any
from urllib.parse import quote

import numpy as np
import redis
from redisvl.exceptions import RedisVLError
from redisvl.index import SearchIndex
from redisvl.query import VectorRangeQuery

from semantic_thesaurus.config import get_redis_client, settings
from semantic_thesaurus.entities import EmbeddingRecordEntity, SemanticMatchEntity
from semantic_thesaurus.errors import StoreUnavailable

logger = logging.getLogger(__name__)

SUPPORTED_METRICS = {"COSINE"}

BACKEND_ERRORS = (redis.RedisError, RedisVLError)


def _as_str(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _model_segment(model: str) -> str:
    return quote(model, safe="")


class RedisVectorRepository:
    """Redis implementation using one HNSW vector index per model.

    This class satisfies the VectorStore protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(
        self,
        redis_client: redis.Redis | None = None,
        index_prefix: str | None = None,
        distance_metric: str = "COSINE",
    ) -> None:
        """Initialize the Redis vector repository.

        Args:
            redis_client: Redis client instance. If None, creates default.
            index_prefix: Key/index prefix. Defaults to settings.vector_index_prefix.
            distance_metric: Native distance metric; only COSINE is supported.

        Raises:
            ValueError: If the metric has no exact similarity conversion
        """
        if distance_metric.upper() not in SUPPORTED_METRICS:
            raise ValueError(
                f"Distance metric {distance_metric!r} has no bounded similarity "
                f"conversion; supported: {sorted(SUPPORTED_METRICS)}"
            )
        self._client = redis_client or get_redis_client()
        self._prefix = index_prefix or settings.vector_index_prefix
        self._metric = distance_metric.upper()
        self._indexes: dict[str, SearchIndex] = {}
        self._dimensions: dict[str, int] = {}

    @classmethod
    def create(cls, index_prefix: str | None = None) -> "RedisVectorRepository":
        """Factory method to create RedisVectorRepository with defaults.

        Args:
            index_prefix: Key prefix. If None, uses settings.

        Returns:
            Configured RedisVectorRepository
        """
        return cls(index_prefix=index_prefix)

    @property
    def _dimensions_key(self) -> str:
        return f"{self._prefix}:__dimensions__"

    def _key_prefix(self, model: str) -> str:
        return f"{self._prefix}:{_model_segment(model)}:"

    def _key(self, model: str, subject_id: str) -> str:
        return f"{self._key_prefix(model)}{subject_id}"

    def declared_dimension(self, model: str) -> int | None:
        """Dimension fixed by the first vector stored for ``model``."""
        if model not in self._dimensions:
            raw = self._client.hget(self._dimensions_key, model)
            if raw is None:
                return None
            self._dimensions[model] = int(raw)
        return self._dimensions[model]

    def _ensure_index(self, model: str, dimension: int) -> SearchIndex:
        """Ensure the Redis vector index for ``model`` exists."""
        if model in self._indexes:
            return self._indexes[model]

        index_schema = {
            "index": {
                "name": f"{self._prefix}_{_model_segment(model)}",
                "prefix": self._key_prefix(model),
                "storage_type": "hash",
            },
            "fields": [
                {"name": "subject_id", "type": "tag"},
                {"name": "model", "type": "tag"},
                {
                    "name": "vector",
                    "type": "vector",
                    "attrs": {
                        "dims": dimension,
                        "algorithm": "HNSW",
                        "metric": self._metric,
                        "datatype": "float32",
                    },
                },
                {"name": "updated_at", "type": "numeric"},
                {"name": "metadata", "type": "text"},
            ],
        }

        index = SearchIndex.from_dict(index_schema, redis_client=self._client)
        if not index.exists():
            index.create(overwrite=False)
            logger.info("Created vector index for model %s (dim %d)", model, dimension)
        self._indexes[model] = index
        return index

    def upsert(self, record: EmbeddingRecordEntity) -> str:
        """Store or overwrite the embedding for (subject_id, model).

        Args:
            record: The embedding to persist

        Returns:
            The storage key for the record

        Raises:
            DimensionMismatch: If the vector differs from the model's dimension
            StoreUnavailable: If Redis cannot be reached
        """
        try:
            declared = self.declared_dimension(record.model)
            if declared is None:
                self._client.hsetnx(self._dimensions_key, record.model, record.dimension)
                declared = self.declared_dimension(record.model) or record.dimension
            record.check_dimension(declared)

            key = self._key(record.model, record.subject_id)
            pipe = self._client.pipeline()
            pipe.hset(
                key,
                mapping={
                    "subject_id": record.subject_id,
                    "model": record.model,
                    "vector": np.asarray(record.vector, dtype=np.float32).tobytes(),
                    "dimension": record.dimension,
                    "updated_at": str(time.time()),
                    "metadata": json.dumps(record.metadata or {}),
                },
            )
            pipe.execute()
        except redis.RedisError as e:
            raise StoreUnavailable(f"Failed to store embedding: {e}") from e

        try:
            self._ensure_index(record.model, declared)
        except BACKEND_ERRORS as e:
            # Plain Redis without the search module: records stay reachable via list_all.
            logger.debug("Vector index unavailable for %s: %s", record.model, e)

        return key

    def query_nearest(
        self,
        vector: list[float],
        model: str,
        limit: int,
        similarity_threshold: float,
    ) -> list[SemanticMatchEntity]:
        """Rank stored vectors with the Redis vector range query.

        Raises:
            StoreUnavailable: If Redis or its search module fails
        """
        try:
            declared = self.declared_dimension(model)
            if declared is None:
                return []
            if declared != len(vector):
                logger.warning(
                    "Query dimension %d does not match model %s (dim %d)",
                    len(vector),
                    model,
                    declared,
                )
                return []

            query = VectorRangeQuery(
                vector=vector,
                vector_field_name="vector",
                return_fields=["subject_id", "metadata"],
                distance_threshold=1.0 - similarity_threshold,
                num_results=limit,
            )
            results = self._ensure_index(model, declared).query(query)
        except BACKEND_ERRORS as e:
            raise StoreUnavailable(f"Native vector search failed: {e}") from e

        matches = []
        for result in results:
            distance = float(result.get("vector_distance", 2.0))
            if np.isnan(distance):
                continue
            similarity = 1.0 - distance
            if similarity < similarity_threshold:
                continue
            matches.append(
                SemanticMatchEntity(
                    subject_id=_as_str(result["subject_id"]),
                    similarity=similarity,
                    metadata=self._parse_metadata(result.get("metadata")),
                )
            )

        matches.sort(key=lambda m: (-m.similarity, m.subject_id))
        return matches[:limit]

    def list_all(self, model: str, cap: int) -> list[EmbeddingRecordEntity]:
        """Load up to ``cap`` records for ``model`` with SCAN.

        Raises:
            StoreUnavailable: If Redis cannot be reached
        """
        try:
            keys = list(islice(self._client.scan_iter(match=f"{self._key_prefix(model)}*", count=500), cap))
            pipe = self._client.pipeline()
            for key in keys:
                pipe.hgetall(key)
            rows = pipe.execute() if keys else []
        except redis.RedisError as e:
            raise StoreUnavailable(f"Failed to list embeddings: {e}") from e

        records = []
        for row in rows:
            if not row:
                continue  # deleted between SCAN and HGETALL
            fields = {_as_str(k): v for k, v in row.items()}
            records.append(
                EmbeddingRecordEntity(
                    subject_id=_as_str(fields["subject_id"]),
                    model=_as_str(fields.get("model", model)),
                    vector=np.frombuffer(fields["vector"], dtype=np.float32).tolist(),
                    metadata=self._parse_metadata(fields.get("metadata")),
                )
            )
        return records

    def supports_native_search(self) -> bool:
        """Check whether the Redis search module answers."""
        try:
            self._client.execute_command("FT._LIST")
            return True
        except redis.RedisError:
            return False

    def count_by_model(self) -> dict[str, int]:
        """Count stored records per model.

        Raises:
            StoreUnavailable: If Redis cannot be reached
        """
        try:
            models = [_as_str(m) for m in self._client.hkeys(self._dimensions_key)]
            return {
                model: sum(1 for _ in self._client.scan_iter(match=f"{self._key_prefix(model)}*"))
                for model in models
            }
        except redis.RedisError as e:
            raise StoreUnavailable(f"Failed to count embeddings: {e}") from e

    def health_check(self) -> bool:
        """Check if Redis is accessible.

        Returns:
            True if healthy, False otherwise
        """
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False

    @staticmethod
    def _parse_metadata(raw: Any) -> dict[str, Any]:
        if raw is None:
            return {}
        try:
            parsed = json.loads(_as_str(raw))
        except json.JSONDecodeError:
            return {"raw": _as_str(raw)}
        return parsed if isinstance(parsed, dict) else {"raw": parsed}
