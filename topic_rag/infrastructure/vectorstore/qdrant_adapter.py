"""Qdrant vector store adapter.

Why: One Qdrant collection per topic; the adapter encapsulates all
qdrant-client types and only returns domain errors.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from importlib import import_module
from typing import Any

from topic_rag.application.ports import VectorStoreAdminPort, VectorStorePort
from topic_rag.domain.errors import DomainError, VectorStoreError
from topic_rag.domain.models import RetrievedChunk
from topic_rag.domain.types import Result, Vector

logger = logging.getLogger(__name__)


@dataclass
class QdrantConfig:
    """Configuration for Qdrant client connection."""

    url: str
    api_key: str | None = None
    prefer_grpc: bool = False
    timeout_s: int = 30


class QdrantVectorStoreAdapter(VectorStorePort, VectorStoreAdminPort):
    """Qdrant adapter implementing both the store and the admin port.

    Why: Encapsulates the qdrant-client library and converts its exceptions
         (connection errors, timeouts, unexpected responses) to VectorStoreError.
    """

    def __init__(self, cfg: QdrantConfig) -> None:
        """Initialize Qdrant adapter with configuration.

        Raises:
            VectorStoreError: If qdrant-client initialization fails
        """
        self._cfg = cfg
        self._client = self._init_client(cfg)

    def _init_client(self, cfg: QdrantConfig) -> Any:
        try:
            qdrant_client = import_module("qdrant_client")
            return qdrant_client.QdrantClient(
                url=cfg.url,
                api_key=cfg.api_key,
                timeout=cfg.timeout_s,
                prefer_grpc=cfg.prefer_grpc,
            )
        except Exception as ex:
            raise VectorStoreError(f"Qdrant init failed: {ex}") from ex

    def ensure_collection(
        self, name: str, dim: int, metric: str = "cosine"
    ) -> Result[bool, DomainError]:
        """Create the collection unless it exists; verify size and distance if it does.

        Returns:
            Result with True if created, False if it already existed
        """
        try:
            models = import_module("qdrant_client.models")
            metric_map = {
                "cosine": models.Distance.COSINE,
                "euclid": models.Distance.EUCLID,
                "dot": models.Distance.DOT,
            }
            distance = metric_map.get(metric.lower())
            if distance is None:
                return Result.failure(VectorStoreError(f"Unknown distance metric: {metric}"))

            if self._client.collection_exists(name):
                conflict = self._config_conflict(name, dim, distance)
                if conflict:
                    return Result.failure(VectorStoreError(conflict))
                return Result.success(False)

            try:
                self._client.create_collection(
                    collection_name=name,
                    vectors_config=models.VectorParams(size=dim, distance=distance),
                )
            except Exception:
                # Lost a creation race against another process: fine if it now exists.
                if self._client.collection_exists(name):
                    return Result.success(False)
                raise
            return Result.success(True)

        except Exception as ex:
            return Result.failure(VectorStoreError(f"ensure_collection '{name}': {ex}"))

    def _config_conflict(self, name: str, dim: int, distance: Any) -> str | None:
        info = self._client.get_collection(name)
        params = info.config.params.vectors
        size = getattr(params, "size", None)
        if size is not None and size != dim:
            return f"Collection '{name}' exists with wrong dimension: {size} != {dim}"
        existing = getattr(params, "distance", None)
        if existing is not None and existing != distance:
            return f"Collection '{name}' exists with distance {existing}, expected {distance}"
        return None

    def list_collections(self) -> Result[list[str], DomainError]:
        try:
            return Result.success([c.name for c in self._client.get_collections().collections])
        except Exception as ex:
            return Result.failure(VectorStoreError(f"list_collections: {ex}"))

    def upsert(
        self,
        collection: str,
        ids: Sequence[str],
        vectors: Sequence[Vector],
        payloads: Sequence[dict[str, Any]],
    ) -> Result[None, DomainError]:
        """Upsert all points in one request and wait for it to be applied."""
        if not (len(ids) == len(vectors) == len(payloads)):
            return Result.failure(
                VectorStoreError(
                    f"upsert: length mismatch ids={len(ids)} "
                    f"vectors={len(vectors)} payloads={len(payloads)}"
                )
            )
        try:
            models = import_module("qdrant_client.models")

            points = [
                models.PointStruct(id=pid, vector=list(vec), payload=payload)
                for pid, vec, payload in zip(ids, vectors, payloads)
            ]
            self._client.upsert(collection_name=collection, points=points, wait=True)
            return Result.success(None)

        except Exception as ex:
            return Result.failure(VectorStoreError(f"upsert into '{collection}': {ex}"))

    def search(
        self, collection: str, vector: Vector, top_k: int
    ) -> Result[list[RetrievedChunk], DomainError]:
        """Similarity search; hits come back in descending score order."""
        try:
            response = self._client.query_points(
                collection_name=collection,
                query=list(vector),
                limit=top_k,
                with_payload=True,
                with_vectors=False,
            )
            hits = [
                RetrievedChunk(
                    id=str(p.id),
                    text=str((p.payload or {}).get("text", "")),
                    metadata=dict(p.payload or {}),
                    score=float(p.score) if p.score is not None else None,
                )
                for p in response.points
            ]
            return Result.success(hits)

        except Exception as ex:
            return Result.failure(VectorStoreError(f"search in '{collection}': {ex}"))

    def count(self, collection: str) -> Result[int, DomainError]:
        try:
            result = self._client.count(collection_name=collection, exact=True)
            return Result.success(int(result.count))
        except Exception as ex:
            return Result.failure(VectorStoreError(f"count '{collection}': {ex}"))
