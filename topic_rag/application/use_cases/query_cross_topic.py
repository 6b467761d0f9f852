"""Cross-topic query: one question, several topic indexes, one synthesized answer.

Why: Each topic is retrieved independently and in parallel; a topic that is
unknown, failing or slow only costs its own contribution. The outcome of
every topic is recorded explicitly and the answer is built from the
successful ones. The query fails only when none succeeded.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, wait

from topic_rag.application.dto.query_dto import CrossTopicQueryRequest, QueryResult, TopicOutcome
from topic_rag.application.index_cache import IndexCache
from topic_rag.application.ports.embedding_port import EmbeddingPort
from topic_rag.application.ports.llm_port import LLMPort
from topic_rag.domain.catalog import TopicCatalog
from topic_rag.domain.errors import (
    DomainError,
    GenerationError,
    NoTopicsSucceededError,
    RetrievalError,
    ValidationError,
)
from topic_rag.domain.services.prompting import build_cross_topic_context, build_cross_topic_prompt
from topic_rag.domain.types import Result, Vector

logger = logging.getLogger(__name__)

CROSS_TOPIC_TOP_K = 3


class QueryCrossTopic:
    """Fan-out retrieval with per-topic outcomes and a synthesis prompt."""

    def __init__(
        self,
        catalog: TopicCatalog,
        index_cache: IndexCache,
        embedding: EmbeddingPort,
        llm: LLMPort,
        top_k: int = CROSS_TOPIC_TOP_K,
        max_workers: int = 8,
        topic_timeout_s: float = 60.0,
    ) -> None:
        self.catalog = catalog
        self.index_cache = index_cache
        self.embedding = embedding
        self.llm = llm
        self.top_k = top_k
        self.max_workers = max_workers
        self.topic_timeout_s = topic_timeout_s

    def execute(self, req: CrossTopicQueryRequest) -> Result[QueryResult, DomainError]:
        try:
            return Result.success(self._answer(req))
        except DomainError as ex:
            logger.error("Cross-topic query across %s failed: %s", req.topics, ex)
            return Result.failure(ex)

    def _answer(self, req: CrossTopicQueryRequest) -> QueryResult:
        if not req.question or not req.question.strip():
            raise ValidationError("query must not be empty")
        topics = list(dict.fromkeys(t.strip() for t in req.topics if t and t.strip()))
        if not topics:
            raise ValidationError("at least one topic is required")

        logger.info("Cross-topic RAG query across %s: %s", topics, req.question)

        r_vec = self.embedding.embed_query(req.question)
        if not r_vec.ok:
            raise RetrievalError(f"embedding failed: {r_vec.error}") from r_vec.error
        assert r_vec.value is not None

        outcomes = self.retrieve_all(topics, r_vec.value)
        succeeded = [o for o in outcomes if o.succeeded]
        failed = [o for o in outcomes if not o.succeeded]
        if not succeeded:
            raise NoTopicsSucceededError({o.topic: o.reason or o.status for o in failed})

        context = build_cross_topic_context([(o.topic, o.chunks) for o in succeeded])
        topic_ids = [o.topic for o in succeeded]
        prompt = build_cross_topic_prompt(topic_ids, context, req.question)

        try:
            answer = self.llm.generate(prompt)
        except DomainError as ex:
            raise GenerationError(f"cross-topic generation failed: {ex}") from ex

        return QueryResult(
            query=req.question,
            topics=topic_ids,
            answer=answer,
            source_count=sum(len(o.chunks) for o in succeeded),
            skipped_topics=[o.topic for o in failed],
        )

    def retrieve_all(self, topics: list[str], vector: Vector) -> list[TopicOutcome]:
        """Run one retrieval per topic in parallel; outcomes keep the request order."""
        pending: dict[str, Future[TopicOutcome]] = {}
        outcomes: dict[str, TopicOutcome] = {}

        for t in topics:
            if not self.catalog.has_topic(t):
                outcomes[t] = TopicOutcome(topic=t, status="skipped", reason="unknown topic")

        runnable = [t for t in topics if t not in outcomes]
        if runnable:
            pool = ThreadPoolExecutor(
                max_workers=min(self.max_workers, len(runnable)),
                thread_name_prefix="cross-topic",
            )
            try:
                for t in runnable:
                    pending[t] = pool.submit(self.retrieve_one, t, vector)
                wait(pending.values(), timeout=self.topic_timeout_s)
            finally:
                # Do not block on stragglers; their results are discarded.
                pool.shutdown(wait=False, cancel_futures=True)

            for t, fut in pending.items():
                if fut.done() and not fut.cancelled():
                    ex = fut.exception()
                    if ex is None:
                        outcomes[t] = fut.result()
                    else:
                        logger.error("Unexpected failure retrieving topic '%s'", t, exc_info=ex)
                        outcomes[t] = TopicOutcome(topic=t, status="error", reason=repr(ex))
                else:
                    outcomes[t] = TopicOutcome(
                        topic=t,
                        status="error",
                        reason=f"timed out after {self.topic_timeout_s:g}s",
                    )

        ordered = [outcomes[t] for t in topics]
        for o in ordered:
            if o.succeeded:
                logger.info("Found %d chunks in topic '%s'", len(o.chunks), o.topic)
            else:
                logger.warning("Topic '%s' %s, skipping: %s", o.topic, o.status, o.reason)
        return ordered

    def retrieve_one(self, topic: str, vector: Vector) -> TopicOutcome:
        try:
            handle = self.index_cache.get_or_create(topic)
            r = handle.query(vector, self.top_k)
        except DomainError as ex:
            return TopicOutcome(topic=topic, status="error", reason=str(ex))
        if not r.ok:
            return TopicOutcome(topic=topic, status="error", reason=str(r.error))
        return TopicOutcome(topic=topic, status="success", chunks=list(r.value or []))
