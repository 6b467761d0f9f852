from __future__ import annotations

import argparse
from pathlib import Path

from topic_rag.application.dto.ingest_dto import IngestDocumentRequest
from topic_rag.config.composition import Container
from topic_rag.domain.models import DocumentType

_SUFFIX_TYPES: dict[str, DocumentType] = {".pdf": "pdf", ".md": "markdown", ".markdown": "markdown"}


def guess_type(path: Path) -> DocumentType | None:
    return _SUFFIX_TYPES.get(path.suffix.lower())


def cmd_ingest(args: argparse.Namespace, container: Container) -> int:
    path = Path(args.path)
    doc_type = args.type or guess_type(path)
    if doc_type is None:
        print(f"✗ Cannot tell document type of '{path.name}'; pass --type pdf|markdown")
        return 1
    try:
        data = path.read_bytes()
    except OSError as ex:
        print(f"✗ Cannot read {path}: {ex}")
        return 1

    req = IngestDocumentRequest(
        topic=args.topic, data=data, filename=path.name, document_type=doc_type
    )
    result = container.ingest.execute(req)
    if not result.ok or result.value is None:
        print(f"✗ {type(result.error).__name__}: {result.error}")
        return 1

    s = result.value
    print(f"✓ Indexed '{s.filename}' into topic '{s.topic}': {s.chunks_count} chunks")
    print(f"  id={s.id} title={s.title!r} author={s.author!r} year={s.publishing_year}")
    return 0
