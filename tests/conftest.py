"""Shared in-memory fakes for the ports.

Fakes are plain classes; the fixtures only hand out fresh instances.
"""

from __future__ import annotations

import threading
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

import pytest

from topic_rag.application.ports.clock_port import ClockPort
from topic_rag.application.ports.llm_port import ChatMessage, LLMResponse
from topic_rag.domain.catalog import TopicCatalog
from topic_rag.domain.errors import DomainError, EmbeddingError, GenerationError, VectorStoreError
from topic_rag.domain.models import RetrievedChunk, Topic
from topic_rag.domain.types import Result, Vector

FIXED_NOW = datetime(2024, 5, 17, 12, 30, 0, tzinfo=UTC)


class InMemoryVectorStore:
    """Store + admin port; every query vector scores every point by dot product."""

    def __init__(self) -> None:
        self.collections: dict[str, list[tuple[str, Vector, dict[str, Any]]]] = {}
        self.ensure_calls: list[str] = []
        self.fail_ensure: set[str] = set()
        self.fail_search: set[str] = set()
        self.fail_count: set[str] = set()
        self.fail_upsert = False
        self.fail_list = False
        self.ensure_delay = threading.Event()
        self.ensure_delay.set()
        self._lock = threading.Lock()

    def ensure_collection(
        self, name: str, dim: int, metric: str = "cosine"
    ) -> Result[bool, DomainError]:
        self.ensure_delay.wait(timeout=5)
        with self._lock:
            self.ensure_calls.append(name)
            if name in self.fail_ensure:
                return Result.failure(VectorStoreError(f"cannot create {name}"))
            if name in self.collections:
                return Result.success(False)
            self.collections[name] = []
            return Result.success(True)

    def list_collections(self) -> Result[list[str], DomainError]:
        if self.fail_list:
            return Result.failure(VectorStoreError("connection refused"))
        return Result.success(sorted(self.collections))

    def upsert(
        self,
        collection: str,
        ids: Sequence[str],
        vectors: Sequence[Vector],
        payloads: Sequence[dict[str, Any]],
    ) -> Result[None, DomainError]:
        if self.fail_upsert:
            return Result.failure(VectorStoreError("upsert rejected"))
        points = self.collections.setdefault(collection, [])
        points.extend(zip(ids, vectors, payloads))
        return Result.success(None)

    def search(
        self, collection: str, vector: Vector, top_k: int
    ) -> Result[list[RetrievedChunk], DomainError]:
        if collection in self.fail_search:
            return Result.failure(VectorStoreError(f"search failed in {collection}"))
        scored = [
            (sum(a * b for a, b in zip(vec, vector)), pid, payload)
            for pid, vec, payload in self.collections.get(collection, [])
        ]
        scored.sort(key=lambda s: -s[0])
        return Result.success(
            [
                RetrievedChunk(id=pid, text=payload["text"], metadata=payload, score=score)
                for score, pid, payload in scored[:top_k]
            ]
        )

    def count(self, collection: str) -> Result[int, DomainError]:
        if collection in self.fail_count:
            return Result.failure(VectorStoreError(f"count failed for {collection}"))
        return Result.success(len(self.collections.get(collection, [])))

    def seed(self, collection: str, payloads: Sequence[dict[str, Any]]) -> None:
        """Insert hits that all score equally, so search returns them in insertion order."""
        points = self.collections.setdefault(collection, [])
        for p in payloads:
            points.append((f"{collection}-{len(points)}", (1.0, 1.0, 1.0, 1.0), dict(p)))


class FakeEmbedding:
    def __init__(self, dim: int = 4) -> None:
        self.dim = dim
        self.passages: list[str] = []
        self.queries: list[str] = []
        self.fail = False

    def embed_texts(self, texts: Sequence[str]) -> Result[list[Vector], DomainError]:
        if self.fail:
            return Result.failure(EmbeddingError("model unavailable"))
        self.passages.extend(texts)
        return Result.success([(1.0,) * self.dim for _ in texts])

    def embed_query(self, text: str) -> Result[Vector, DomainError]:
        if self.fail:
            return Result.failure(EmbeddingError("model unavailable"))
        self.queries.append(text)
        return Result.success((1.0,) * self.dim)


class FakeLLM:
    def __init__(self, answer: str = "Generated answer.") -> None:
        self.answer = answer
        self.prompts: list[str] = []
        self.fail = False

    def chat(
        self, messages: Sequence[ChatMessage], temperature: float = 0.2, max_tokens: int = 1024
    ) -> LLMResponse:
        if self.fail:
            raise GenerationError("LLM communication failed: timeout")
        self.prompts.append(messages[-1].content)
        return LLMResponse(text=self.answer)

    def generate(self, prompt: str, system: str | None = None) -> str:
        return self.chat([ChatMessage(role="user", content=prompt)]).text


class FixedClock(ClockPort):
    def __init__(self, now: datetime = FIXED_NOW) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now


@pytest.fixture
def catalog() -> TopicCatalog:
    return TopicCatalog(
        [
            Topic("pentesting", "pentesting_docs", "Penetration testing"),
            Topic("cloud", "cloud_docs", "Cloud security"),
            Topic("forensics", "forensics_docs", "Digital forensics"),
        ]
    )


@pytest.fixture
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def embedding() -> FakeEmbedding:
    return FakeEmbedding()


@pytest.fixture
def llm() -> FakeLLM:
    return FakeLLM()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()
