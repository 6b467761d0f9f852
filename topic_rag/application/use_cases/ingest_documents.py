from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass

from ...domain.catalog import TopicCatalog
from ...domain.errors import DomainError, EmbeddingError, ExtractionError, VectorStoreError
from ...domain.models import DocumentType, SourceDocument
from ...domain.services.chunking import ChunkingEngine, split_markdown_sections
from ...domain.services.enrichment import (
    enrich_chunks,
    resolved_author,
    resolved_title,
    resolved_year,
)
from ...domain.types import Result
from ..dto.ingest_dto import DocumentSummary, IngestDocumentRequest
from ..index_cache import IndexCache
from ..ports.clock_port import ClockPort
from ..ports.document_extractor_port import DocumentExtractorPort
from ..ports.embedding_port import EmbeddingPort

logger = logging.getLogger(__name__)

# Stable namespace so a (doc_id, chunk_index) pair always maps to the same point id.
_POINT_NAMESPACE = uuid.UUID("6f1c9a52-3d0b-4c55-9a8e-2b7f4e1d0c33")


def point_id(doc_id: str, chunk_index: int) -> str:
    return str(uuid.uuid5(_POINT_NAMESPACE, f"{doc_id}::chunk::{chunk_index}"))


@dataclass
class IngestDocuments:
    catalog: TopicCatalog
    extractors: Mapping[DocumentType, DocumentExtractorPort]
    chunker: ChunkingEngine
    embedding: EmbeddingPort
    index_cache: IndexCache
    clock: ClockPort

    def execute(self, req: IngestDocumentRequest) -> Result[DocumentSummary, DomainError]:
        try:
            return Result.success(self._ingest(req))
        except DomainError as ex:
            if ex.retryable:
                logger.error(
                    "Ingestion of '%s' into topic '%s' failed: %s", req.filename, req.topic, ex
                )
            else:
                logger.warning(
                    "Rejected '%s' for topic '%s': %s", req.filename, req.topic, ex
                )
            return Result.failure(ex)

    def _ingest(self, req: IngestDocumentRequest) -> DocumentSummary:
        # 1) Topic + Eingabe prüfen
        self.catalog.get(req.topic)
        extractor = self.extractors.get(req.document_type)
        if extractor is None:
            raise ExtractionError(f"Unsupported document type: {req.document_type}")
        if not req.data:
            raise ExtractionError(f"File '{req.filename}' is empty")

        logger.info(
            "Uploading %s '%s' to topic '%s'", req.document_type, req.filename, req.topic
        )

        # 2) Text + Metadaten extrahieren
        extracted = extractor.extract(req.data, req.filename)
        if not extracted.text.strip():
            raise ExtractionError(f"No extractable text in '{req.filename}'")

        doc = SourceDocument(
            doc_id=str(uuid.uuid4()),
            filename=req.filename,
            document_type=req.document_type,
            topic=req.topic,
            uploaded_at=self.clock.now(),
            extracted_text=extracted.text,
            extracted_metadata=dict(extracted.metadata),
        )
        logger.info("Extracted metadata for '%s': %s", doc.filename, dict(doc.extracted_metadata))

        # 3) Chunken (pure Domain): PDF seitenweise, Markdown an '---' geteilt
        if req.document_type == "markdown":
            segments = split_markdown_sections(doc.extracted_text, keep_empty=True)
        else:
            segments = list(extracted.segments) or [doc.extracted_text]
        windows = self.chunker.split_segments(segments)
        chunks = enrich_chunks(doc, windows)
        if not chunks:
            raise ExtractionError(f"No extractable text in '{req.filename}'")

        # 4) Embeddings
        r_vecs = self.embedding.embed_texts([c.text for c in chunks])
        if not r_vecs.ok:
            assert r_vecs.error is not None
            raise r_vecs.error
        assert r_vecs.value is not None
        if len(r_vecs.value) != len(chunks):
            raise EmbeddingError(
                f"embedding returned {len(r_vecs.value)} vectors for {len(chunks)} chunks"
            )

        # 5) Persistenz: ein Batch pro Dokument
        handle = self.index_cache.get_or_create(req.topic)
        r_add = handle.add(
            ids=[point_id(doc.doc_id, c.chunk_index) for c in chunks],
            vectors=r_vecs.value,
            payloads=[c.to_payload() for c in chunks],
        )
        if not r_add.ok:
            raise VectorStoreError(
                f"Storing {len(chunks)} chunks in collection '{handle.collection}' "
                f"failed: {r_add.error}"
            ) from r_add.error

        logger.info("Stored %d chunks in topic '%s'", len(chunks), req.topic)

        return DocumentSummary(
            id=doc.doc_id,
            filename=doc.filename,
            title=resolved_title(doc),
            author=resolved_author(doc),
            publishing_year=resolved_year(doc),
            type=doc.document_type,
            topic=doc.topic,
            chunks_count=len(chunks),
            uploaded_at=chunks[0].uploaded_at_ms,
        )
