"""CLI query handlers (single topic and cross-topic).

Interface layer is thin: parse args, call the use case, format the Result.
"""

from __future__ import annotations

import argparse

from topic_rag.application.dto.query_dto import CrossTopicQueryRequest, QueryRequest, QueryResult
from topic_rag.config.composition import Container
from topic_rag.domain.errors import DomainError


def _print_error(err: DomainError | None) -> None:
    err_name = type(err).__name__
    print(f"\n[ERROR] {err_name}: {err}")
    if err is not None and err.retryable:
        print("  → Backend problem; retrying later may help")


def _print_answer(res: QueryResult) -> None:
    print("\n" + "=" * 80)
    print("ANSWER:")
    print("=" * 80)
    print(res.answer)
    print("\n" + "=" * 80)
    print(f"SOURCES ({res.source_count} chunks):")
    print("=" * 80)
    for i, s in enumerate(res.sources or [], 1):
        year = f", {s.publishing_year}" if s.publishing_year else ""
        print(f"[{i}] {s.filename} - {s.title} ({s.author}{year})")
    if res.topics is not None:
        print(f"Topics used: {', '.join(res.topics) or '-'}")
    if res.skipped_topics:
        print(f"Topics skipped: {', '.join(res.skipped_topics)}")


def cmd_query(args: argparse.Namespace, container: Container) -> int:
    req = QueryRequest(topic=args.topic, question=args.question, top_k=args.k)
    result = container.query_topic.execute(req)
    if result.ok and result.value is not None:
        _print_answer(result.value)
        return 0
    _print_error(result.error)
    return 1


def cmd_cross(args: argparse.Namespace, container: Container) -> int:
    topics = [t.strip() for t in args.topics.split(",") if t.strip()]
    result = container.query_cross_topic.execute(
        CrossTopicQueryRequest(topics=topics, question=args.question)
    )
    if result.ok and result.value is not None:
        _print_answer(result.value)
        return 0
    _print_error(result.error)
    return 1
