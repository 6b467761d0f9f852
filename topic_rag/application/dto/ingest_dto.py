from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from topic_rag.domain.models import DocumentType


@dataclass(frozen=True)
class IngestDocumentRequest:
    topic: str
    data: bytes  # raw upload
    filename: str
    document_type: DocumentType = "pdf"


@dataclass(frozen=True)
class DocumentSummary:
    """Upload response; title/author fall back to filename/"Unknown" here only."""

    id: str
    filename: str
    title: str
    author: str
    publishing_year: int | None
    type: str
    topic: str
    chunks_count: int
    uploaded_at: int  # epoch millis
    status: str = "indexed"

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "filename": self.filename,
            "title": self.title,
            "author": self.author,
            "publishingYear": self.publishing_year,
            "type": self.type,
            "topic": self.topic,
            "chunksCount": self.chunks_count,
            "status": self.status,
            "uploadedAt": self.uploaded_at,
        }
