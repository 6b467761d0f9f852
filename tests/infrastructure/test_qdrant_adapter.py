"""Qdrant adapter against a fake qdrant_client module.

Why: Verhindert Regressions beim Mapping auf die qdrant-client API, ohne Docker.
"""

import sys
from types import SimpleNamespace

import pytest

from topic_rag.domain.errors import VectorStoreError
from topic_rag.infrastructure.vectorstore.qdrant_adapter import (
    QdrantConfig,
    QdrantVectorStoreAdapter,
)


class _Distance:
    COSINE = "Cosine"
    EUCLID = "Euclid"
    DOT = "Dot"


class _VectorParams:
    def __init__(self, size, distance):
        self.size = size
        self.distance = distance


class _PointStruct:
    def __init__(self, id, vector, payload):
        self.id = id
        self.vector = vector
        self.payload = payload


class _FakeClient:
    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.collections: dict[str, dict] = {}
        self.upserts: list[tuple[str, list, bool]] = []
        self.down = False
        self.fail_create = False

    def _check(self):
        if self.down:
            raise ConnectionError("connection refused")

    def collection_exists(self, name):
        self._check()
        return name in self.collections

    def get_collection(self, name):
        c = self.collections[name]
        params = SimpleNamespace(vectors=_VectorParams(c["size"], c["distance"]))
        return SimpleNamespace(config=SimpleNamespace(params=params), points_count=len(c["points"]))

    def create_collection(self, collection_name, vectors_config):
        self._check()
        if self.fail_create:
            raise RuntimeError("409 already exists")
        self.collections[collection_name] = {
            "size": vectors_config.size,
            "distance": vectors_config.distance,
            "points": [],
        }

    def get_collections(self):
        self._check()
        return SimpleNamespace(collections=[SimpleNamespace(name=n) for n in self.collections])

    def upsert(self, collection_name, points, wait):
        self._check()
        self.upserts.append((collection_name, points, wait))
        self.collections[collection_name]["points"].extend(points)

    def query_points(self, collection_name, query, limit, with_payload, with_vectors):
        self._check()
        pts = self.collections[collection_name]["points"][:limit]
        return SimpleNamespace(
            points=[
                SimpleNamespace(id=p.id, payload=p.payload, score=1.0 - i * 0.1)
                for i, p in enumerate(pts)
            ]
        )

    def count(self, collection_name, exact):
        self._check()
        return SimpleNamespace(count=len(self.collections[collection_name]["points"]))


@pytest.fixture
def adapter(monkeypatch):
    client_mod = type(sys)("qdrant_client")
    client_mod.QdrantClient = _FakeClient
    models_mod = type(sys)("qdrant_client.models")
    models_mod.Distance = _Distance
    models_mod.VectorParams = _VectorParams
    models_mod.PointStruct = _PointStruct
    monkeypatch.setitem(sys.modules, "qdrant_client", client_mod)
    monkeypatch.setitem(sys.modules, "qdrant_client.models", models_mod)
    return QdrantVectorStoreAdapter(QdrantConfig(url="http://qdrant:6333", timeout_s=5))


def test_client_receives_connection_settings(adapter):
    assert adapter._client.kwargs == {
        "url": "http://qdrant:6333",
        "api_key": None,
        "timeout": 5,
        "prefer_grpc": False,
    }


def test_ensure_collection_creates_once(adapter):
    assert adapter.ensure_collection("pentesting_docs", dim=768).value is True
    assert adapter.ensure_collection("pentesting_docs", dim=768).value is False
    assert adapter._client.collections["pentesting_docs"]["distance"] == "Cosine"
    assert adapter.list_collections().value == ["pentesting_docs"]


def test_ensure_collection_rejects_dimension_conflict(adapter):
    adapter.ensure_collection("docs", dim=384)
    r = adapter.ensure_collection("docs", dim=768)
    assert isinstance(r.error, VectorStoreError)
    assert "384 != 768" in str(r.error)


def test_ensure_collection_tolerates_lost_creation_race(adapter):
    client = adapter._client
    client.fail_create = True
    original = client.collection_exists
    calls = {"n": 0}

    def exists(name):
        calls["n"] += 1
        if calls["n"] == 2:
            client.collections[name] = {"size": 768, "distance": "Cosine", "points": []}
        return original(name)

    client.collection_exists = exists
    assert adapter.ensure_collection("docs", dim=768).value is False


def test_upsert_search_count_round_trip(adapter):
    adapter.ensure_collection("docs", dim=3)
    r = adapter.upsert(
        "docs",
        ["id-1", "id-2"],
        [(1.0, 0.0, 0.0), (0.0, 1.0, 0.0)],
        [{"text": "alpha", "filename": "a.pdf"}, {"text": "beta", "filename": "b.pdf"}],
    )
    assert r.ok
    name, points, wait = adapter._client.upserts[0]
    assert (name, len(points), wait) == ("docs", 2, True)
    assert points[0].vector == [1.0, 0.0, 0.0]

    hits = adapter.search("docs", (1.0, 0.0, 0.0), top_k=5).value
    assert [h.id for h in hits] == ["id-1", "id-2"]
    assert hits[0].text == "alpha"
    assert hits[0].metadata["filename"] == "a.pdf"
    assert hits[0].score == pytest.approx(1.0)

    assert adapter.count("docs").value == 2


def test_upsert_length_mismatch(adapter):
    r = adapter.upsert("docs", ["a"], [], [{}])
    assert isinstance(r.error, VectorStoreError)


def test_backend_errors_become_vector_store_errors(adapter):
    adapter._client.down = True
    for r in (
        adapter.ensure_collection("docs", dim=3),
        adapter.list_collections(),
        adapter.search("docs", (1.0,), top_k=1),
        adapter.count("docs"),
    ):
        assert not r.ok
        assert isinstance(r.error, VectorStoreError)
        assert "connection refused" in str(r.error)
