from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime


class ClockPort(ABC):
    """Source of upload timestamps.

    Ingestion stamps every chunk with the upload time; tests inject a fixed
    clock so payloads are reproducible.
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time as a timezone-aware UTC datetime."""
        ...
