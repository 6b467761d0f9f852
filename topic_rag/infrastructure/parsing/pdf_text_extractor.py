from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass
from typing import Any

from topic_rag.application.ports.document_extractor_port import (
    DocumentExtractorPort,
    ExtractedDocument,
)
from topic_rag.domain.errors import ExtractionError

logger = logging.getLogger(__name__)

_PDF_MAGIC = b"%PDF-"
_YEAR_RE = re.compile(r"(?<!\d)((?:19|20)\d{2})")

# Docinfo keys checked for an explicit publishing year, before the creation date.
_YEAR_FIELDS = ("/PublishingYear", "/Year", "/Date")


def extract_year(value: Any) -> str | None:
    """First plausible 4-digit year (19xx/20xx) in a metadata value."""
    if value is None:
        return None
    m = _YEAR_RE.search(str(value))
    return m.group(1) if m else None


def _clean(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


@dataclass
class PDFTextExtractorAdapter(DocumentExtractorPort):
    """Per-page text plus docinfo metadata (title, author, year)."""

    page_separator: str = "\n\n"

    def extract(self, data: bytes, filename: str) -> ExtractedDocument:
        if not data.lstrip()[:5].startswith(_PDF_MAGIC):
            raise ExtractionError(f"'{filename}' is not a PDF file")

        try:
            from pypdf import PdfReader  # lazy import to avoid hard dependency in tests
        except ImportError as ex:  # pragma: no cover
            raise ExtractionError("pypdf is not installed") from ex

        try:
            reader = PdfReader(io.BytesIO(data))
            pages = [(p.extract_text() or "").strip() for p in reader.pages]
            text = self.page_separator.join(pages).strip()
        except Exception as ex:  # noqa: BLE001
            raise ExtractionError(f"PDF parse failed for '{filename}': {ex}") from ex

        metadata = self._metadata(reader, filename)
        metadata["pageCount"] = str(len(pages))
        return ExtractedDocument(text=text, metadata=metadata, segments=tuple(pages))

    def _metadata(self, reader: Any, filename: str) -> dict[str, str]:
        # Broken docinfo never fails the upload; the text is what matters.
        out: dict[str, str] = {}
        try:
            info = reader.metadata
        except Exception as ex:  # noqa: BLE001
            logger.warning("Could not read PDF metadata of '%s': %s", filename, ex)
            return out
        if info is None:
            return out

        title = _clean(info.title)
        if title:
            out["title"] = title
        author = _clean(info.author)
        if author:
            out["author"] = author

        year = None
        for key in _YEAR_FIELDS:
            year = extract_year(info.get(key))
            if year:
                break
        if year is None:
            try:
                created = info.creation_date
            except Exception:  # noqa: BLE001
                # pypdf raises on malformed date strings; fall back to the raw value.
                created = info.get("/CreationDate")
            year = extract_year(created.year if hasattr(created, "year") else created)
        if year:
            out["publishingYear"] = year

        return out


@dataclass
class MarkdownTextExtractorAdapter(DocumentExtractorPort):
    """UTF-8 Markdown; no metadata beyond what enrichment derives from the filename."""

    def extract(self, data: bytes, filename: str) -> ExtractedDocument:
        try:
            text = data.decode("utf-8-sig")
        except UnicodeDecodeError as ex:
            raise ExtractionError(f"'{filename}' is not valid UTF-8 text") from ex
        return ExtractedDocument(text=text.strip(), metadata={})
