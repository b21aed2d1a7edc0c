"""
Tests for cosine similarity and the native/brute-force search engine.
"""

import math

import pytest

from semantic_thesaurus.errors import DimensionMismatch, SearchBackendUnavailable
from semantic_thesaurus.protocols import SimilarityBackend, VectorStore
from semantic_thesaurus.services.similarity import (
    BruteForceSimilarityBackend,
    NativeSimilarityBackend,
    SimilaritySearchEngine,
    cosine_similarity,
)

# Query and corpus with a hand-computed ranking:
#   happy  cos = 1.0
#   glad   cos = 0.8 / sqrt(0.8**2 + 0.6**2) = 0.8
#   merry  cos = 0.6
#   sad    cos = 0.0
#   angry  cos = -1.0
QUERY = [1.0, 0.0]
CORPUS = {
    "happy": [2.0, 0.0],
    "glad": [0.8, 0.6],
    "merry": [0.6, 0.8],
    "sad": [0.0, 1.0],
    "angry": [-1.0, 0.0],
}
EXPECTED = [("happy", 1.0), ("glad", 0.8), ("merry", 0.6)]


@pytest.fixture
def corpus_store(store):
    for word, vector in CORPUS.items():
        store.add(word, vector, definition=f"definition of {word}")
    return store


def test_cosine_bounds_and_symmetry():
    a, b = [1.0, 2.0, 3.0], [-2.0, 0.5, 4.0]

    assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))
    assert cosine_similarity(a, a) == pytest.approx(1.0)
    assert -1.0 <= cosine_similarity(a, b) <= 1.0
    assert cosine_similarity([1.0, 0.0], [-1.0, 0.0]) == pytest.approx(-1.0)
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)


def test_cosine_zero_vector_is_zero():
    assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
    assert cosine_similarity([1.0, 2.0], [0.0, 0.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [0.0, 0.0]) == 0.0


def test_cosine_dimension_mismatch():
    with pytest.raises(DimensionMismatch):
        cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0])


def test_backends_satisfy_protocols(store):
    assert isinstance(store, VectorStore)
    assert isinstance(NativeSimilarityBackend(store), SimilarityBackend)
    assert isinstance(BruteForceSimilarityBackend(store), SimilarityBackend)


@pytest.mark.asyncio
async def test_brute_force_matches_fixture(corpus_store):
    backend = BruteForceSimilarityBackend(corpus_store, scan_cap=100)

    matches = await backend.search(QUERY, "fake-embed", limit=10, threshold=0.5)

    assert [(m.subject_id, round(m.similarity, 6)) for m in matches] == EXPECTED
    assert matches[0].metadata == {"definition": "definition of happy"}


@pytest.mark.asyncio
async def test_native_and_fallback_rankings_agree(corpus_store):
    engine = SimilaritySearchEngine.create(corpus_store, scan_cap=100)

    native = await engine.search(QUERY, "fake-embed", limit=3, threshold=0.5)
    assert engine.last_backend == "native"

    corpus_store.native = False
    fallback = await engine.search(QUERY, "fake-embed", limit=3, threshold=0.5)
    assert engine.last_backend == "brute_force"

    assert [m.subject_id for m in native] == [m.subject_id for m in fallback] == [w for w, _ in EXPECTED]
    for n, f in zip(native, fallback):
        assert n.similarity == pytest.approx(f.similarity, abs=1e-9)


@pytest.mark.asyncio
async def test_limit_truncates(corpus_store):
    engine = SimilaritySearchEngine.create(corpus_store)
    matches = await engine.search(QUERY, "fake-embed", limit=2, threshold=0.0)
    assert [m.subject_id for m in matches] == ["happy", "glad"]


@pytest.mark.asyncio
async def test_native_error_falls_back(corpus_store):
    corpus_store.native_fails = True
    engine = SimilaritySearchEngine.create(corpus_store)

    matches = await engine.search(QUERY, "fake-embed", limit=3, threshold=0.5)

    assert engine.last_backend == "brute_force"
    assert [m.subject_id for m in matches] == ["happy", "glad", "merry"]


@pytest.mark.asyncio
async def test_both_backends_down(corpus_store):
    corpus_store.down = True
    engine = SimilaritySearchEngine.create(corpus_store)

    with pytest.raises(SearchBackendUnavailable):
        await engine.search(QUERY, "fake-embed", limit=3, threshold=0.5)


@pytest.mark.asyncio
async def test_zero_query_uses_fallback(corpus_store):
    engine = SimilaritySearchEngine.create(corpus_store)

    matches = await engine.search([0.0, 0.0], "fake-embed", limit=10, threshold=0.5)

    assert matches == []
    assert engine.last_backend == "brute_force"


@pytest.mark.asyncio
async def test_brute_force_skips_other_dimensions(corpus_store):
    corpus_store.add("odd", [1.0, 0.0, 0.0])
    backend = BruteForceSimilarityBackend(corpus_store)

    matches = await backend.search(QUERY, "fake-embed", limit=10, threshold=0.5)

    assert "odd" not in [m.subject_id for m in matches]
    assert len(matches) == 3


@pytest.mark.asyncio
async def test_brute_force_respects_scan_cap(corpus_store):
    backend = BruteForceSimilarityBackend(corpus_store, scan_cap=2)

    matches = await backend.search(QUERY, "fake-embed", limit=10, threshold=-1.0)

    assert len(matches) == 2


@pytest.mark.asyncio
async def test_unknown_model_has_no_matches(corpus_store):
    engine = SimilaritySearchEngine.create(corpus_store)
    assert await engine.search(QUERY, "other-model", limit=5, threshold=0.1) == []


@pytest.mark.asyncio
async def test_backend_status(corpus_store):
    corpus_store.native = False
    engine = SimilaritySearchEngine.create(corpus_store)
    assert await engine.backend_status() == {"native": False, "brute_force": True}


def test_glad_fixture_value():
    assert cosine_similarity(QUERY, CORPUS["glad"]) == pytest.approx(0.8 / math.hypot(0.8, 0.6))
