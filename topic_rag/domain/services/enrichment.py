from __future__ import annotations

from collections.abc import Mapping, Sequence

from ..models import DEFAULT_AUTHOR, Chunk, SourceDocument, parse_year
from .chunking import TextChunk


def _present(metadata: Mapping[str, str], key: str) -> str | None:
    value = metadata.get(key)
    if value is None or not str(value).strip():
        return None
    return str(value).strip()


def enrich_chunks(document: SourceDocument, text_chunks: Sequence[TextChunk]) -> list[Chunk]:
    """Attach document and chunk tags to every window.

    chunk_index is reassigned 0..n-1 in emission order. title, author and
    publishing_year are set only when the extractor delivered them. The window's
    segment becomes the page number of a PDF chunk or the section of a Markdown one.
    """
    meta = document.extracted_metadata
    title = _present(meta, "title")
    author = _present(meta, "author")
    year = parse_year(_present(meta, "publishingYear"))

    return [
        Chunk(
            text=tc.text,
            chunk_index=i,
            doc_id=document.doc_id,
            filename=document.filename,
            topic=document.topic,
            document_type=document.document_type,
            uploaded_at=document.uploaded_at,
            title=title,
            author=author,
            publishing_year=year,
            page=tc.segment + 1 if document.document_type == "pdf" else None,
            section=tc.segment if document.document_type == "markdown" else None,
        )
        for i, tc in enumerate(text_chunks)
    ]


def resolved_title(document: SourceDocument) -> str:
    return _present(document.extracted_metadata, "title") or document.filename


def resolved_author(document: SourceDocument) -> str:
    return _present(document.extracted_metadata, "author") or DEFAULT_AUTHOR


def resolved_year(document: SourceDocument) -> int | None:
    return parse_year(_present(document.extracted_metadata, "publishingYear"))
