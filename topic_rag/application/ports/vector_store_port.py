from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from topic_rag.domain.errors import DomainError

# Import domain model and re-export for convenience
from topic_rag.domain.models import RetrievedChunk
from topic_rag.domain.types import Result, Vector

__all__ = ["RetrievedChunk", "VectorStorePort"]


@runtime_checkable
class VectorStorePort(Protocol):
    """Port for per-collection vector CRUD and similarity search."""

    def upsert(
        self,
        collection: str,
        ids: Sequence[str],
        vectors: Sequence[Vector],
        payloads: Sequence[dict[str, Any]],
    ) -> Result[None, DomainError]:
        """Upsert all points in one batch; either all are written or an error is returned."""
        ...

    def search(
        self, collection: str, vector: Vector, top_k: int
    ) -> Result[list[RetrievedChunk], DomainError]:
        """Return up to top_k hits in descending similarity order."""
        ...

    def count(self, collection: str) -> Result[int, DomainError]:
        """Return the number of stored points in the collection."""
        ...
