# topic_rag/application/dto/query_dto.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

from topic_rag.domain.models import RetrievedChunk, SourceReference


@dataclass(frozen=True)
class QueryRequest:
    """
    DTO for querying one topic's knowledge base.

    - topic:    topic id from the catalog
    - question: user question (non-empty)
    - top_k:    chunks to retrieve; values <= 0 fall back to the default (5)
    """

    topic: str
    question: str
    top_k: int = 5


@dataclass(frozen=True)
class CrossTopicQueryRequest:
    """DTO for one question fanned out over several topics."""

    topics: list[str]
    question: str


@dataclass(frozen=True)
class TopicOutcome:
    """What happened to one topic during a cross-topic fan-out."""

    topic: str
    status: Literal["success", "skipped", "error"]
    chunks: list[RetrievedChunk] = field(default_factory=list)
    reason: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


@dataclass(frozen=True)
class QueryResult:
    """Generated answer plus retrieval bookkeeping.

    Single-topic results set topic and sources; cross-topic results set
    topics (the ones that contributed) and skipped_topics instead.
    """

    query: str
    answer: str
    source_count: int
    topic: str | None = None
    topics: list[str] | None = None
    sources: list[SourceReference] | None = None
    skipped_topics: list[str] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"query": self.query}
        if self.topic is not None:
            out["topic"] = self.topic
        if self.topics is not None:
            out["topics"] = list(self.topics)
        out["answer"] = self.answer
        out["sourceCount"] = self.source_count
        if self.sources is not None:
            out["sources"] = [
                {
                    "filename": s.filename,
                    "title": s.title,
                    "author": s.author,
                    "publishingYear": s.publishing_year,
                    "type": s.type,
                }
                for s in self.sources
            ]
        if self.skipped_topics is not None:
            out["skippedTopics"] = list(self.skipped_topics)
        return out
