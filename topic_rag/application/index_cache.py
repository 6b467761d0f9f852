"""Per-topic vector index handles, created at most once per topic.

Why: every ingestion and query for a topic must share one handle, and the
collection-creation call must not run twice when the first requests for a
new topic arrive concurrently.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any

from topic_rag.application.ports.vector_store_admin_port import VectorStoreAdminPort
from topic_rag.application.ports.vector_store_port import VectorStorePort
from topic_rag.domain.catalog import TopicCatalog
from topic_rag.domain.errors import DomainError, IndexCreationError
from topic_rag.domain.models import RetrievedChunk
from topic_rag.domain.types import Result, Vector

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IndexHandle:
    """Reference to one topic's collection in the vector backend."""

    topic: str
    collection: str
    store: VectorStorePort

    def add(
        self,
        ids: Sequence[str],
        vectors: Sequence[Vector],
        payloads: Sequence[dict[str, Any]],
    ) -> Result[None, DomainError]:
        return self.store.upsert(self.collection, ids, vectors, payloads)

    def query(self, vector: Vector, top_k: int) -> Result[list[RetrievedChunk], DomainError]:
        return self.store.search(self.collection, vector, top_k)


class IndexCache:
    """Concurrency-safe topic -> IndexHandle registry.

    The lock only guards the map. A caller that finds no entry installs a
    pending Future under the lock and performs the backend call after
    releasing it; callers arriving meanwhile wait on that Future. A failed
    creation removes its Future so the next call tries again.
    """

    def __init__(
        self,
        catalog: TopicCatalog,
        store: VectorStorePort,
        admin: VectorStoreAdminPort,
        dim: int = 768,
        metric: str = "cosine",
    ) -> None:
        self._catalog = catalog
        self._store = store
        self._admin = admin
        self._dim = dim
        self._metric = metric
        self._lock = threading.Lock()
        self._entries: dict[str, Future[IndexHandle]] = {}

    def get_or_create(self, topic: str) -> IndexHandle:
        """Return the topic's handle, creating its collection on first use.

        Raises:
            UnknownTopicError: topic is not configured
            IndexCreationError: backend unreachable or collection conflict
        """
        collection = self._catalog.collection_name(topic)

        with self._lock:
            entry = self._entries.get(topic)
            owner = entry is None
            if owner:
                entry = Future()
                self._entries[topic] = entry

        assert entry is not None
        if not owner:
            logger.debug("Waiting for / reusing vector index handle for topic '%s'", topic)
            return entry.result()

        try:
            handle = self._create(topic, collection)
        except BaseException as ex:
            with self._lock:
                self._entries.pop(topic, None)
            entry.set_exception(ex)
            raise
        entry.set_result(handle)
        return handle

    def _create(self, topic: str, collection: str) -> IndexHandle:
        try:
            r = self._admin.ensure_collection(collection, dim=self._dim, metric=self._metric)
        except DomainError as ex:
            r = Result.failure(ex)
        if not r.ok:
            logger.error(
                "Failed to create vector index for topic '%s' (collection '%s'): %s",
                topic,
                collection,
                r.error,
            )
            raise IndexCreationError(
                f"Failed to create vector index for topic '{topic}' "
                f"(collection '{collection}'): {r.error}"
            ) from r.error
        if r.value:
            logger.info("Created collection '%s' for topic '%s'", collection, topic)
        else:
            logger.info("Collection '%s' for topic '%s' already exists", collection, topic)
        return IndexHandle(topic=topic, collection=collection, store=self._store)

    def cached_topics(self) -> list[str]:
        with self._lock:
            return [t for t, f in self._entries.items() if f.done() and f.exception() is None]

    def stats(self) -> dict[str, dict[str, Any]]:
        """Live per-topic vector counts; a failing topic only affects its own entry."""
        stats: dict[str, dict[str, Any]] = {}
        for t in self._catalog.all():
            entry: dict[str, Any] = {"collection": t.collection_name, "description": t.description}
            try:
                r = self._store.count(t.collection_name)
            except DomainError as ex:
                r = Result.failure(ex)
            if r.ok:
                entry.update(status="active", vectorCount=r.value)
                logger.debug("Collection '%s' has %s vectors", t.collection_name, r.value)
            else:
                logger.warning(
                    "Failed to get vector count for collection '%s': %s", t.collection_name, r.error
                )
                entry.update(status="error", error=str(r.error))
            stats[t.id] = entry
        return stats
