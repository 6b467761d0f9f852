# topic_rag/application/use_cases/query_topic.py
from __future__ import annotations

import logging

from topic_rag.application.dto.query_dto import QueryRequest, QueryResult
from topic_rag.application.index_cache import IndexCache
from topic_rag.application.ports.embedding_port import EmbeddingPort
from topic_rag.application.ports.llm_port import LLMPort
from topic_rag.domain.catalog import TopicCatalog
from topic_rag.domain.errors import (
    DomainError,
    GenerationError,
    RetrievalError,
    ValidationError,
)
from topic_rag.domain.services.prompting import (
    build_topic_context,
    build_topic_prompt,
    dedupe_sources,
)
from topic_rag.domain.types import Result

logger = logging.getLogger(__name__)

DEFAULT_TOP_K = 5


class QueryTopic:
    """
    Grounded question answering against one topic's index.
    Uses only ports; expected failures come back as Result.failure.
    """

    def __init__(
        self,
        catalog: TopicCatalog,
        index_cache: IndexCache,
        embedding: EmbeddingPort,
        llm: LLMPort,
        default_top_k: int = DEFAULT_TOP_K,
    ) -> None:
        self.catalog = catalog
        self.index_cache = index_cache
        self.embedding = embedding
        self.llm = llm
        self.default_top_k = default_top_k

    def execute(self, req: QueryRequest) -> Result[QueryResult, DomainError]:
        try:
            return Result.success(self._answer(req))
        except DomainError as ex:
            if ex.retryable:
                logger.error("RAG query failed for topic '%s': %s", req.topic, ex)
            return Result.failure(ex)

    def _answer(self, req: QueryRequest) -> QueryResult:
        # 1) Validate
        topic = self.catalog.get(req.topic)
        if not req.question or not req.question.strip():
            raise ValidationError("query must not be empty")
        top_k = req.top_k if req.top_k > 0 else self.default_top_k

        logger.info("RAG query for topic '%s': %s", topic.id, req.question)

        # 2) Embed query
        r_vec = self.embedding.embed_query(req.question)
        if not r_vec.ok:
            raise RetrievalError(f"embedding failed: {r_vec.error}") from r_vec.error
        assert r_vec.value is not None

        # 3) Retrieve from the topic's collection
        handle = self.index_cache.get_or_create(topic.id)
        r_hits = handle.query(r_vec.value, top_k)
        if not r_hits.ok:
            raise RetrievalError(
                f"vector search in collection '{handle.collection}' failed: {r_hits.error}"
            ) from r_hits.error
        hits = r_hits.value or []
        logger.info("Found %d relevant chunks in topic '%s'", len(hits), topic.id)

        # 4) Context (rank order) + deduplicated sources (first seen wins)
        context = build_topic_context(hits)
        sources = dedupe_sources(hits)
        prompt = build_topic_prompt(topic, context, req.question)

        # 5) Generate
        try:
            answer = self.llm.generate(prompt)
        except DomainError as ex:
            raise GenerationError(f"generation failed for topic '{topic.id}': {ex}") from ex

        return QueryResult(
            query=req.question,
            topic=topic.id,
            answer=answer,
            source_count=len(hits),
            sources=sources,
        )
