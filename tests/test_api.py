"""
Tests for the thesaurus API.
"""

import pytest
from fastapi.testclient import TestClient

from semantic_thesaurus.api.app import create_app
from semantic_thesaurus.api.dependencies import ServiceContainer
from semantic_thesaurus.repositories import LocalVectorTableProvider

from conftest import FakeLanguageModelClient


@pytest.fixture
def container(cache, llm, store):
    return ServiceContainer.assemble(
        cache=cache,
        client=llm,
        store=store,
        local_provider=LocalVectorTableProvider(dimension=3),
    )


@pytest.fixture
def client(container):
    """Create a test client around in-memory services."""
    with TestClient(create_app(container)) as test_client:
        yield test_client


def test_root(client):
    """Test root endpoint."""
    response = client.get("/")
    assert response.status_code == 200
    data = response.json()
    assert data["name"] == "AI Thesaurus API"
    assert "analyze" in data["endpoints"]


def test_health(client, store):
    """Test health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {
        "status": "healthy",
        "cache_keys": 0,
        "ollama": True,
        "redis": True,
        "native_search": True,
    }

    store.down = True
    assert client.get("/health").json()["status"] == "degraded"


def test_analyze(client):
    """Test full word analysis."""
    response = client.post("/api/analyze", json={"word": "brilliant", "context": "academic performance"})
    assert response.status_code == 200
    data = response.json()
    assert data["word"] == "brilliant"
    assert data["part_of_speech"] == "adjective"
    assert [s["word"] for s in data["synonyms"]] == ["clever", "bright"]
    assert [a["word"] for a in data["antonyms"]] == ["dull"]
    assert data["contexts"][0]["meaning"] == "exceptionally intelligent"
    assert data["confidence"] == 0.8
    assert data["degraded"] is False


def test_analyze_stores_embedding(client, store):
    """Test analysis with embedding storage."""
    response = client.post("/api/analyze", json={"word": "brilliant", "include_embeddings": True})
    assert response.status_code == 200

    record = store.records[("nomic-embed-text", "brilliant")]
    assert record.metadata["part_of_speech"] == "adjective"


def test_analyze_blank_word(client):
    """Test whitespace-only word."""
    response = client.post("/api/analyze", json={"word": "   "})
    assert response.status_code == 400


def test_analyze_schema_errors(client):
    """Test missing or oversized fields."""
    assert client.post("/api/analyze", json={}).status_code == 422
    assert client.post("/api/analyze", json={"word": "w" * 101}).status_code == 422


def test_analyze_all_lookups_fail(cache, store):
    """Test analysis when the model server is down."""
    llm = FakeLanguageModelClient(failing={"synonyms", "antonyms", "definition", "context"})
    container = ServiceContainer.assemble(cache=cache, client=llm, store=store)

    with TestClient(create_app(container)) as client:
        response = client.post("/api/analyze", json={"word": "brilliant"})

    assert response.status_code == 502


def test_synonyms_model_down(cache, store):
    """Test a single lookup when the model server is down."""
    llm = FakeLanguageModelClient(failing={"synonyms"})
    container = ServiceContainer.assemble(cache=cache, client=llm, store=store)

    with TestClient(create_app(container)) as client:
        response = client.get("/api/synonyms/happy")

    assert response.status_code == 503


def test_batch_analyze(client):
    """Test batch analysis."""
    response = client.post("/api/batch/analyze", json={"words": ["brilliant", "clever"]})
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["successful"] == 2
    assert data["failed"] == 0


def test_synonyms_and_antonyms(client):
    """Test synonym and antonym endpoints."""
    response = client.get("/api/synonyms/brilliant", params={"context": "school", "limit": 1})
    assert response.status_code == 200
    data = response.json()
    assert data["context"] == "school"
    assert [w["word"] for w in data["words"]] == ["clever"]

    response = client.get("/api/antonyms/brilliant")
    assert response.status_code == 200
    assert [w["word"] for w in response.json()["words"]] == ["dull"]


def test_context(client):
    """Test contextual meaning endpoint."""
    response = client.post("/api/context", json={"word": "brilliant", "context": "academic performance"})
    assert response.status_code == 200
    assert response.json()["meanings"][0]["domain"] == "education"


def test_definition(client):
    """Test definition endpoint."""
    response = client.get("/api/definition/brilliant")
    assert response.status_code == 200
    data = response.json()
    assert data["definition"] == "adjective - exceptionally clever or talented."
    assert data["part_of_speech"] == "adjective"


def test_store_embedding(client, store):
    """Test embedding storage endpoint."""
    response = client.post(
        "/api/embeddings",
        json={"subject_id": "happy", "text": "happy: feeling joy", "metadata": {"definition": "feeling joy"}},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["dimension"] == 3
    assert ("nomic-embed-text", "happy") in store.records


def test_store_embedding_unknown_provider(client):
    """Test embedding storage with an unknown provider."""
    response = client.post("/api/embeddings", json={"subject_id": "happy", "text": "happy", "provider": "openai"})
    assert response.status_code == 400


def test_semantic_search(client, store):
    """Test semantic search over stored embeddings."""
    store.add("glad", [1.0, 0.0, 0.0], model="nomic-embed-text", definition="pleased")
    store.add("sad", [0.0, 1.0, 0.0], model="nomic-embed-text")

    response = client.post("/api/search/semantic", json={"query": "happy", "threshold": 0.5})
    assert response.status_code == 200
    data = response.json()
    assert data["count"] == 1
    assert data["results"][0]["word"] == "glad"
    assert data["results"][0]["definition"] == "pleased"


def test_semantic_search_invalid_threshold(client):
    """Test out-of-range threshold."""
    response = client.post("/api/search/semantic", json={"query": "happy", "threshold": 1.5})
    assert response.status_code == 422


def test_word_vector_search_requires_load(client, store, tmp_path):
    """Test word2vec search before and after loading a model file."""
    request = {"query": "happy", "threshold": 0.5, "provider": "word2vec"}
    assert client.post("/api/search/semantic", json=request).status_code == 409

    path = tmp_path / "vectors.txt"
    path.write_text("2 3\nhappy 1 0 0\nsad 0 1 0\n", encoding="utf-8")
    response = client.post("/api/embeddings/load", json={"path": str(path)})
    assert response.status_code == 200
    assert response.json()["vocabulary_size"] == 2

    store.add("glad", [0.9, 0.1, 0.0], model="word2vec")
    response = client.post("/api/search/semantic", json=request)
    assert response.status_code == 200
    assert [r["word"] for r in response.json()["results"]] == ["glad"]


def test_load_missing_model_file(client, tmp_path):
    """Test loading a vector file that does not exist."""
    response = client.post("/api/embeddings/load", json={"path": str(tmp_path / "missing.bin")})
    assert response.status_code == 400


def test_providers(client):
    """Test provider listing endpoint."""
    response = client.get("/api/embeddings/providers")
    assert response.status_code == 200
    data = response.json()
    assert data["default_provider"] == "ollama"
    assert data["providers"]["ollama"]["available"] is True
    assert data["providers"]["word2vec"]["loaded"] is False


def test_get_stats(client, store):
    """Test stats endpoint."""
    client.get("/api/synonyms/brilliant")
    client.get("/api/synonyms/brilliant")

    response = client.get("/api/stats")
    assert response.status_code == 200
    data = response.json()
    assert data["cache"]["hits"] >= 1
    assert data["cache"]["live_key_count"] == 1
    assert data["embeddings"]["available"] is True
    assert "uptime_seconds" in data["system"]

    store.down = True
    data = client.get("/api/stats").json()
    assert data["embeddings"]["available"] is False


def test_clear_cache_by_pattern(client, cache):
    """Test pattern invalidation."""
    client.get("/api/synonyms/brilliant")
    client.get("/api/antonyms/brilliant")

    response = client.post("/api/cache/clear", json={"pattern": "^synonyms:"})
    assert response.status_code == 200
    assert response.json()["deleted_count"] == 1
    assert cache.keys() == ["antonyms:brilliant:noctx"]


def test_clear_whole_cache(client, cache):
    """Test full cache flush."""
    client.get("/api/synonyms/brilliant")

    response = client.post("/api/cache/clear")
    assert response.status_code == 200
    assert response.json()["deleted_count"] == 1
    assert cache.keys() == []


def test_similar_keys(client):
    """Test approximate cache key lookup."""
    client.get("/api/synonyms/happy")

    response = client.get("/api/cache/similar", params={"key": "synonyms:hapy:noctx", "threshold": 0.8})
    assert response.status_code == 200
    assert response.json()["matches"] == ["synonyms:happy:noctx"]
