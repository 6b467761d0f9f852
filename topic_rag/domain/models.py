# topic_rag/domain/models.py
# Domain models must be pure (no I/O, no external libs)
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal

DocumentType = Literal["pdf", "markdown"]

DEFAULT_AUTHOR = "Unknown"


@dataclass(frozen=True)
class Topic:
    """An isolated knowledge domain backed by its own vector collection."""

    id: str
    collection_name: str
    description: str = ""


@dataclass(frozen=True)
class SourceDocument:
    """
    One uploaded document, alive only for the duration of an ingestion call.

    - doc_id:             UUID assigned at upload
    - extracted_text:     full text returned by the extractor
    - extracted_metadata: flat string map (title, author, publishingYear, ...)
    """

    doc_id: str
    filename: str
    document_type: DocumentType
    topic: str
    uploaded_at: datetime
    extracted_text: str
    extracted_metadata: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Chunk:
    """
    Immutable stored unit: one window of a document's text plus routing tags.

    Optional fields are None when the extractor did not provide them and are
    then left out of the stored payload entirely. page (1-based) is set for PDF
    chunks, section (0-based, counting every rule-delimited part) for Markdown.
    """

    text: str
    chunk_index: int
    doc_id: str
    filename: str
    topic: str
    document_type: DocumentType
    uploaded_at: datetime
    title: str | None = None
    author: str | None = None
    publishing_year: int | None = None
    page: int | None = None
    section: int | None = None

    @property
    def uploaded_at_ms(self) -> int:
        return int(self.uploaded_at.timestamp() * 1000)

    @property
    def uploaded_at_iso(self) -> str:
        return self.uploaded_at.isoformat()

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "text": self.text,
            "docId": self.doc_id,
            "filename": self.filename,
            "topic": self.topic,
            "documentType": self.document_type,
            "chunkIndex": self.chunk_index,
            "uploadedAt": self.uploaded_at_ms,
            "uploadedAtISO": self.uploaded_at_iso,
        }
        if self.title is not None:
            payload["title"] = self.title
        if self.author is not None:
            payload["author"] = self.author
        if self.publishing_year is not None:
            payload["publishingYear"] = self.publishing_year
        if self.page is not None:
            payload["page"] = self.page
        if self.section is not None:
            payload["section"] = self.section
        return payload


@dataclass(frozen=True)
class RetrievedChunk:
    """One similarity-search hit, in backend rank order."""

    id: str
    text: str
    metadata: Mapping[str, Any]
    score: float | None = None


@dataclass(frozen=True)
class SourceReference:
    """Citation entry returned with a single-topic answer."""

    filename: str
    title: str
    author: str
    publishing_year: int | None
    type: str

    @classmethod
    def from_metadata(cls, metadata: Mapping[str, Any]) -> SourceReference:
        filename = str(metadata.get("filename") or "unknown")
        return cls(
            filename=filename,
            title=str(metadata.get("title") or filename),
            author=str(metadata.get("author") or DEFAULT_AUTHOR),
            publishing_year=parse_year(metadata.get("publishingYear")),
            type=str(metadata.get("documentType") or "unknown"),
        )


def parse_year(value: Any) -> int | None:
    """Return a four-digit year as int, or None for anything else."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value if 1000 <= value <= 9999 else None
    if isinstance(value, str) and len(value.strip()) == 4 and value.strip().isdigit():
        return int(value.strip())
    return None
