from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from topic_rag.domain.errors import DomainError
from topic_rag.domain.types import Result, Vector


@runtime_checkable
class EmbeddingPort(Protocol):
    """Port for text embedding operations."""

    def embed_texts(self, texts: Sequence[str]) -> Result[list[Vector], DomainError]:
        """Embed document passages (one vector per text, same order)."""
        ...

    def embed_query(self, text: str) -> Result[Vector, DomainError]:
        """Embed a single search question."""
        ...
