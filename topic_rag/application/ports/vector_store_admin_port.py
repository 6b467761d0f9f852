"""Vector store admin port (collection lifecycle)."""

from typing import Protocol, runtime_checkable

from topic_rag.domain.errors import DomainError
from topic_rag.domain.types import Result


@runtime_checkable
class VectorStoreAdminPort(Protocol):
    """Port for vector store admin operations."""

    def ensure_collection(
        self, name: str, dim: int, metric: str = "cosine"
    ) -> Result[bool, DomainError]:
        """Create the collection if missing.

        Returns True when it was created, False when it already existed with
        a matching configuration, or an error (unreachable, dimension conflict).
        """
        ...

    def list_collections(self) -> Result[list[str], DomainError]:
        """Names of all collections in the backend."""
        ...
