"""
Tests for the Redis vector repository against an in-memory Redis stand-in.
"""

import fnmatch

import pytest
import redis

from semantic_thesaurus.entities import EmbeddingRecordEntity
from semantic_thesaurus.errors import DimensionMismatch, StoreUnavailable
from semantic_thesaurus.protocols import VectorStore
from semantic_thesaurus.repositories import redis_vector_repository
from semantic_thesaurus.repositories.redis_vector_repository import RedisVectorRepository


def _raw(value) -> bytes:
    if isinstance(value, bytes):
        return value
    return str(value).encode("utf-8")


def _name(value) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


class StubRedis:
    """Hash commands, SCAN and pipelines with bytes replies, like decode_responses=False."""

    def __init__(self, search_module: bool = True) -> None:
        self.hashes: dict[str, dict[bytes, bytes]] = {}
        self.search_module = search_module
        self.down = False

    def _check(self) -> None:
        if self.down:
            raise redis.ConnectionError("Connection refused")

    def hget(self, name, key):
        self._check()
        return self.hashes.get(_name(name), {}).get(_raw(key))

    def hsetnx(self, name, key, value):
        self._check()
        fields = self.hashes.setdefault(_name(name), {})
        if _raw(key) in fields:
            return 0
        fields[_raw(key)] = _raw(value)
        return 1

    def hset(self, name, mapping):
        self._check()
        self.hashes.setdefault(_name(name), {}).update({_raw(k): _raw(v) for k, v in mapping.items()})
        return len(mapping)

    def hgetall(self, name):
        self._check()
        return dict(self.hashes.get(_name(name), {}))

    def hkeys(self, name):
        self._check()
        return list(self.hashes.get(_name(name), {}))

    def scan_iter(self, match="*", count=None):
        self._check()
        for name in list(self.hashes):
            if fnmatch.fnmatchcase(name, match):
                yield name.encode("utf-8")

    def pipeline(self):
        return StubPipeline(self)

    def ping(self):
        self._check()
        return True

    def execute_command(self, *args):
        self._check()
        if not self.search_module:
            raise redis.ResponseError(f"unknown command '{args[0]}'")
        return []


class StubPipeline:
    def __init__(self, client: StubRedis) -> None:
        self._client = client
        self._ops = []

    def hset(self, name, mapping):
        self._ops.append(lambda: self._client.hset(name, mapping=mapping))

    def hgetall(self, name):
        self._ops.append(lambda: self._client.hgetall(name))

    def execute(self):
        self._client._check()
        results = [op() for op in self._ops]
        self._ops = []
        return results


class StubSearchIndex:
    def __init__(self, schema, factory) -> None:
        self.schema = schema
        self.factory = factory
        self.created = False

    def exists(self):
        if not self.factory.client.search_module:
            raise redis.ResponseError("unknown command 'FT.INFO'")
        return self.created

    def create(self, overwrite=False):
        self.created = True

    def query(self, query):
        if self.factory.error is not None:
            raise self.factory.error
        self.factory.queries.append(query)
        return list(self.factory.rows)


class StubSearchIndexFactory:
    """Stands in for ``SearchIndex``; every index answers with ``rows``."""

    def __init__(self, client: StubRedis) -> None:
        self.client = client
        self.indexes: list[StubSearchIndex] = []
        self.queries: list[dict] = []
        self.rows: list[dict] = []
        self.error: Exception | None = None

    def from_dict(self, schema, redis_client=None):
        index = StubSearchIndex(schema, self)
        self.indexes.append(index)
        return index


@pytest.fixture
def client():
    return StubRedis()


@pytest.fixture
def search_index(monkeypatch, client):
    factory = StubSearchIndexFactory(client)
    monkeypatch.setattr(redis_vector_repository, "SearchIndex", factory)
    monkeypatch.setattr(redis_vector_repository, "VectorRangeQuery", lambda **kwargs: kwargs)
    return factory


@pytest.fixture
def repository(client, search_index):
    return RedisVectorRepository(redis_client=client, index_prefix="emb")


def record(subject_id, vector, model="nomic-embed-text", **metadata):
    return EmbeddingRecordEntity(subject_id=subject_id, model=model, vector=list(vector), metadata=metadata)


# --- Construction ---


def test_satisfies_protocol(repository):
    assert isinstance(repository, VectorStore)


def test_rejects_metric_without_similarity_conversion(client):
    with pytest.raises(ValueError, match="L2"):
        RedisVectorRepository(redis_client=client, distance_metric="L2")


# --- Upsert ---


def test_upsert_writes_hash_and_index(repository, client, search_index):
    key = repository.upsert(record("happy", [0.5, 0.25, -1.0], definition="feeling joy"))

    assert key == "emb:nomic-embed-text:happy"
    fields = client.hashes[key]
    assert fields[b"subject_id"] == b"happy"
    assert fields[b"dimension"] == b"3"
    assert client.hashes["emb:__dimensions__"] == {b"nomic-embed-text": b"3"}

    [index] = search_index.indexes
    assert index.created
    assert index.schema["index"]["prefix"] == "emb:nomic-embed-text:"
    assert index.schema["fields"][2]["attrs"]["dims"] == 3
    assert index.schema["fields"][2]["attrs"]["metric"] == "COSINE"


def test_upsert_overwrites_same_subject(repository, client):
    repository.upsert(record("happy", [1.0, 0.0, 0.0]))
    repository.upsert(record("happy", [0.0, 1.0, 0.0]))

    [stored] = repository.list_all("nomic-embed-text", cap=10)
    assert stored.vector == [0.0, 1.0, 0.0]
    assert len([k for k in client.hashes if k.startswith("emb:nomic-embed-text:")]) == 1


def test_upsert_rejects_second_dimension(repository):
    repository.upsert(record("happy", [1.0, 0.0, 0.0]))

    with pytest.raises(DimensionMismatch):
        repository.upsert(record("sad", [1.0, 0.0]))


def test_dimension_declared_by_another_writer_wins(repository, client):
    client.hsetnx("emb:__dimensions__", "nomic-embed-text", 2)

    with pytest.raises(DimensionMismatch):
        repository.upsert(record("happy", [1.0, 0.0, 0.0]))


def test_upsert_without_search_module(search_index):
    client = StubRedis(search_module=False)
    search_index.client = client
    repository = RedisVectorRepository(redis_client=client, index_prefix="emb")

    repository.upsert(record("happy", [1.0, 0.0, 0.0]))

    assert not repository.supports_native_search()
    assert [r.subject_id for r in repository.list_all("nomic-embed-text", cap=10)] == ["happy"]


def test_upsert_store_down(repository, client):
    client.down = True

    with pytest.raises(StoreUnavailable):
        repository.upsert(record("happy", [1.0, 0.0, 0.0]))


# --- Native query ---


def test_query_converts_threshold_and_distances(repository, search_index):
    repository.upsert(record("glad", [1.0, 0.0, 0.0]))
    search_index.rows = [
        {"subject_id": "glad", "metadata": '{"definition": "pleased"}', "vector_distance": "0.2"},
        {"subject_id": "meh", "metadata": "{}", "vector_distance": "0.5"},
        {"subject_id": "joyful", "metadata": "{}", "vector_distance": "0.1"},
        {"subject_id": "broken", "metadata": "{}", "vector_distance": "nan"},
    ]

    matches = repository.query_nearest([1.0, 0.0, 0.0], "nomic-embed-text", limit=5, similarity_threshold=0.7)

    [query] = search_index.queries
    assert query["distance_threshold"] == pytest.approx(0.3)
    assert query["num_results"] == 5
    assert [m.subject_id for m in matches] == ["joyful", "glad"]
    assert matches[0].similarity == pytest.approx(0.9)
    assert matches[1].similarity == pytest.approx(0.8)
    assert matches[1].metadata == {"definition": "pleased"}


def test_query_applies_limit(repository, search_index):
    repository.upsert(record("glad", [1.0, 0.0, 0.0]))
    search_index.rows = [
        {"subject_id": f"w{i}", "metadata": "{}", "vector_distance": str(i / 100)} for i in range(5)
    ]

    matches = repository.query_nearest([1.0, 0.0, 0.0], "nomic-embed-text", limit=2, similarity_threshold=0.5)

    assert [m.subject_id for m in matches] == ["w0", "w1"]


def test_query_unknown_model_or_dimension(repository, search_index):
    assert repository.query_nearest([1.0, 0.0, 0.0], "nomic-embed-text", 5, 0.5) == []

    repository.upsert(record("glad", [1.0, 0.0, 0.0]))
    assert repository.query_nearest([1.0, 0.0], "nomic-embed-text", 5, 0.5) == []
    assert search_index.queries == []


def test_query_backend_failure(repository, search_index):
    repository.upsert(record("glad", [1.0, 0.0, 0.0]))
    search_index.error = redis.ConnectionError("Connection reset")

    with pytest.raises(StoreUnavailable):
        repository.query_nearest([1.0, 0.0, 0.0], "nomic-embed-text", 5, 0.5)


def test_unparseable_metadata_is_kept_raw(repository, search_index):
    repository.upsert(record("glad", [1.0, 0.0, 0.0]))
    search_index.rows = [{"subject_id": "glad", "metadata": "not json", "vector_distance": "0"}]

    [match] = repository.query_nearest([1.0, 0.0, 0.0], "nomic-embed-text", 5, 0.5)

    assert match.metadata == {"raw": "not json"}


# --- Listing and counting ---


def test_list_all_round_trips_records(repository):
    repository.upsert(record("happy", [0.5, 0.25, -1.0], definition="feeling joy"))

    [stored] = repository.list_all("nomic-embed-text", cap=10)

    assert stored.subject_id == "happy"
    assert stored.model == "nomic-embed-text"
    assert stored.vector == [0.5, 0.25, -1.0]
    assert stored.metadata == {"definition": "feeling joy"}


def test_list_all_respects_cap(repository):
    for i in range(5):
        repository.upsert(record(f"w{i}", [1.0, 0.0, 0.0]))

    assert len(repository.list_all("nomic-embed-text", cap=2)) == 2


def test_similar_model_names_stay_apart(repository):
    repository.upsert(record("colon", [1.0, 0.0, 0.0], model="a:b"))
    repository.upsert(record("underscore", [1.0, 0.0], model="a_b"))
    repository.upsert(record("star", [1.0], model="a*"))

    assert [r.subject_id for r in repository.list_all("a_b", cap=10)] == ["underscore"]
    assert [r.subject_id for r in repository.list_all("a:b", cap=10)] == ["colon"]
    assert [r.subject_id for r in repository.list_all("a*", cap=10)] == ["star"]
    assert repository.count_by_model() == {"a:b": 1, "a_b": 1, "a*": 1}


def test_count_by_model(repository):
    repository.upsert(record("happy", [1.0, 0.0, 0.0]))
    repository.upsert(record("glad", [1.0, 0.0, 0.0]))
    repository.upsert(record("sad", [1.0, 0.0], model="word2vec"))

    assert repository.count_by_model() == {"nomic-embed-text": 2, "word2vec": 1}


def test_store_down(repository, client):
    client.down = True

    assert not repository.health_check()
    assert not repository.supports_native_search()
    with pytest.raises(StoreUnavailable):
        repository.list_all("nomic-embed-text", cap=10)
    with pytest.raises(StoreUnavailable):
        repository.count_by_model()
