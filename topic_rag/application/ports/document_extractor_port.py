from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class ExtractedDocument:
    """Full text plus flat string metadata (title, author, publishingYear, ...).

    segments holds one text per page for paged formats, empty pages included;
    empty for formats without pages.
    """

    text: str
    metadata: Mapping[str, str] = field(default_factory=dict)
    segments: tuple[str, ...] = ()


class DocumentExtractorPort(Protocol):
    def extract(self, data: bytes, filename: str) -> ExtractedDocument:
        """Raise ExtractionError when the bytes cannot be read as this document type."""
        ...
