"""Tests for the composition root (wiring only, no backend calls)."""

import sys

from topic_rag.application.ports.embedding_port import EmbeddingPort
from topic_rag.config.composition import (
    build_chunker,
    build_container,
    build_embedding,
    build_extractors,
    build_llm,
    wire_container,
)
from topic_rag.config.settings import AppSettings
from topic_rag.infrastructure.llm.openai_compat_adapter import OpenAICompatAdapter
from topic_rag.infrastructure.vectorstore.qdrant_adapter import QdrantVectorStoreAdapter


class _FakeQdrantClient:
    def __init__(self, **kwargs):
        self.kwargs = kwargs


def test_adapters_follow_settings(monkeypatch):
    monkeypatch.setenv("EMBEDDING_MODEL", "intfloat/multilingual-e5-base")
    monkeypatch.setenv("LLM_MODEL", "llama3")
    monkeypatch.setenv("LLM_TIMEOUT_S", "30")
    monkeypatch.setenv("CHUNK_WINDOW_TOKENS", "200")
    monkeypatch.setenv("CHUNK_OVERLAP_TOKENS", "50")
    settings = AppSettings()

    embedding = build_embedding(settings)
    assert isinstance(embedding, EmbeddingPort)
    assert embedding.model_id == "intfloat/multilingual-e5-base"

    llm = build_llm(settings)
    assert isinstance(llm, OpenAICompatAdapter)
    assert (llm.model, llm.timeout_s) == ("llama3", 30.0)

    chunker = build_chunker(settings)
    assert (chunker.params.window_tokens, chunker.params.overlap_tokens) == (200, 50)

    assert set(build_extractors()) == {"pdf", "markdown"}


def test_build_container_wires_one_store_for_data_and_admin(monkeypatch, tmp_path):
    topics = tmp_path / "topics.yaml"
    topics.write_text("topics:\n  a:\n    collection-name: a_docs\n", encoding="utf-8")
    monkeypatch.setenv("TOPICS_FILE", str(topics))
    monkeypatch.setenv("QDRANT_URL", "http://qdrant:6333")
    monkeypatch.setenv("CROSS_TOPIC_TIMEOUT_S", "7")
    mod = type(sys)("qdrant_client")
    mod.QdrantClient = _FakeQdrantClient
    monkeypatch.setitem(sys.modules, "qdrant_client", mod)

    c = build_container()

    assert c.catalog.ids() == ["a"]
    assert isinstance(c.admin, QdrantVectorStoreAdapter)
    assert c.admin._client.kwargs["url"] == "http://qdrant:6333"
    assert c.query_cross_topic.topic_timeout_s == 7.0
    assert c.query_cross_topic.top_k == 3
    assert c.ingest.index_cache is c.index_cache
    assert c.query_topic.index_cache is c.index_cache


def test_wire_container_accepts_fakes(catalog, store, embedding, llm, clock):
    c = wire_container(AppSettings(), catalog, store, store, embedding, llm, clock)
    assert c.initialize_collections.execute() == {
        "pentesting": "ready",
        "cloud": "ready",
        "forensics": "ready",
    }
