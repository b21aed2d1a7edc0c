"""Shared fakes for the thesaurus tests.

Ollama and Redis are replaced by in-memory objects that satisfy the same
protocols, and the cache runs on a manual clock so TTL tests never sleep.
"""

import asyncio

import numpy as np
import pytest

from semantic_thesaurus.entities import EmbeddingRecordEntity, EmbeddingResultEntity, SemanticMatchEntity
from semantic_thesaurus.errors import ProviderUnavailable, StoreUnavailable
from semantic_thesaurus.repositories import TTLCacheStore


class FakeClock:
    """Manually advanced time source."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def prompt_kind(prompt: str) -> str:
    if "List synonyms" in prompt:
        return "synonyms"
    if "List antonyms" in prompt:
        return "antonyms"
    if "Explain what the word" in prompt:
        return "context"
    return "definition"


class FakeLanguageModelClient:
    """Answers prompts from a per-kind script.

    ``failing`` holds prompt kinds ("synonyms", "antonyms", "definition",
    "context") that raise ProviderUnavailable; ``failing_words`` fails every
    prompt mentioning one of the words. A non-zero ``delay`` makes every
    call yield to the event loop first, so concurrent callers overlap.
    """

    def __init__(self, responses=None, failing=(), failing_words=(), vectors=None):
        self.responses = responses or {}
        self.failing = set(failing)
        self.failing_words = set(failing_words)
        self.vectors = vectors or {}
        self.calls: list[tuple[str, dict | None]] = []
        self.embed_calls: list[tuple[str, str | None]] = []
        self.available = True
        self.delay = 0.0

    async def generate(self, prompt, options=None):
        self.calls.append((prompt, options))
        if self.delay:
            await asyncio.sleep(self.delay)
        kind = prompt_kind(prompt)
        if kind in self.failing or any(f'"{w}"' in prompt for w in self.failing_words):
            raise ProviderUnavailable(f"{kind} lookup unavailable")
        return self.responses.get(kind, "")

    async def embed(self, text, model=None):
        self.embed_calls.append((text, model))
        if self.delay:
            await asyncio.sleep(self.delay)
        if text in self.failing_words:
            raise ProviderUnavailable("embedding backend down")
        vector = self.vectors.get(text, [1.0, 0.0, 0.0])
        return EmbeddingResultEntity(vector=list(vector), dimension=len(vector), model=model or "fake-embed")

    async def is_available(self):
        return self.available


class InMemoryVectorStore:
    """VectorStore fake with a switchable native operator.

    ``query_nearest`` mimics a COSINE vector index: it thresholds on
    distance ``1 - t`` and reports ``1 - distance`` as similarity.
    """

    def __init__(self, native: bool = True) -> None:
        self.records: dict[tuple[str, str], EmbeddingRecordEntity] = {}
        self.native = native
        self.native_fails = False
        self.down = False

    def upsert(self, record):
        self._check_up()
        for (model, _), existing in self.records.items():
            if model == record.model:
                record.check_dimension(existing.dimension)
                break
        self.records[(record.model, record.subject_id)] = record
        return f"{record.model}:{record.subject_id}"

    def query_nearest(self, vector, model, limit, similarity_threshold):
        self._check_up()
        if self.native_fails:
            raise StoreUnavailable("vector index crashed")
        query = np.asarray(vector, dtype=np.float64)
        matches = []
        for (record_model, subject_id), record in self.records.items():
            if record_model != model or record.dimension != len(vector):
                continue
            stored = np.asarray(record.vector, dtype=np.float64)
            distance = 1.0 - float(query @ stored) / float(np.linalg.norm(query) * np.linalg.norm(stored))
            if distance <= 1.0 - similarity_threshold:
                matches.append(SemanticMatchEntity(subject_id, 1.0 - distance, record.metadata))
        matches.sort(key=lambda m: (-m.similarity, m.subject_id))
        return matches[:limit]

    def list_all(self, model, cap):
        self._check_up()
        return [r for (m, _), r in self.records.items() if m == model][:cap]

    def supports_native_search(self):
        return self.native and not self.down

    def count_by_model(self):
        self._check_up()
        counts: dict[str, int] = {}
        for model, _ in self.records:
            counts[model] = counts.get(model, 0) + 1
        return counts

    def health_check(self):
        return not self.down

    def add(self, subject_id, vector, model="fake-embed", **metadata):
        self.records[(model, subject_id)] = EmbeddingRecordEntity(
            subject_id=subject_id, model=model, vector=list(vector), metadata=metadata
        )

    def _check_up(self):
        if self.down:
            raise StoreUnavailable("redis is down")


SYNONYMS_JSON = '[{"word": "clever", "confidence": 0.9}, {"word": "bright", "confidence": 0.7}]'
ANTONYMS_JSON = '[{"word": "dull", "confidence": 0.8}]'
CONTEXT_JSON = (
    '[{"context": "academic performance", "meaning": "exceptionally intelligent", '
    '"domain": "education", "sentiment": 0.8, "examples": ["a brilliant student"]}]'
)
DEFINITION_TEXT = "Definition: adjective - exceptionally clever or talented.\nSecond line."


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCacheStore(default_ttl=300, max_keys=100, clock=clock)


@pytest.fixture
def llm():
    return FakeLanguageModelClient(
        responses={
            "synonyms": SYNONYMS_JSON,
            "antonyms": ANTONYMS_JSON,
            "context": CONTEXT_JSON,
            "definition": DEFINITION_TEXT,
        }
    )


@pytest.fixture
def store():
    return InMemoryVectorStore()
