"""Context assembly and prompt construction for grounded answers.

Pure string building over retrieved chunks; rank order of the input is kept
everywhere.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..models import DEFAULT_AUTHOR, RetrievedChunk, SourceReference, Topic

TOPIC_PROMPT_TEMPLATE = """You are an expert assistant specializing in: {description}

Answer questions about {topic} based ONLY on the provided documents.

CONTEXT FROM DOCUMENTS:
{context}

USER QUESTION: {question}

INSTRUCTIONS:
- Answer based ONLY on the provided context
- If the answer is not in the context, say so
- When citing information, include the document title, author, and year if available
- Be concise and clear
- Focus on {topic}-specific insights
"""

CROSS_TOPIC_PROMPT_TEMPLATE = """You are an expert assistant with knowledge across multiple domains: {topics}

Answer the following question by synthesizing insights from multiple knowledge domains.
Each context passage is labelled with the domain it comes from.

CONTEXT:
{context}

QUESTION: {question}

Synthesize the answer across topics and explain how the different domains relate to the question.
If the context does not contain the answer, say so.
"""


def format_source_block(hit: RetrievedChunk) -> str:
    ref = SourceReference.from_metadata(hit.metadata)
    header = f"--- Source: {ref.filename}"
    if ref.title != ref.filename:
        header += f" (Title: {ref.title})"
    if ref.author != DEFAULT_AUTHOR:
        header += f" | Author: {ref.author}"
    if ref.publishing_year is not None:
        header += f" | Year: {ref.publishing_year}"
    return f"{header} ---\n{hit.text}\n\n"


def dedupe_sources(hits: Sequence[RetrievedChunk]) -> list[SourceReference]:
    """One reference per filename; the first hit for a filename wins."""
    seen: dict[str, SourceReference] = {}
    for hit in hits:
        ref = SourceReference.from_metadata(hit.metadata)
        if ref.filename not in seen:
            seen[ref.filename] = ref
    return list(seen.values())


def build_topic_context(hits: Sequence[RetrievedChunk]) -> str:
    return "".join(format_source_block(h) for h in hits)


def build_topic_prompt(topic: Topic, context: str, question: str) -> str:
    return TOPIC_PROMPT_TEMPLATE.format(
        description=topic.description or topic.id,
        topic=topic.id,
        context=context,
        question=question,
    )


def format_cross_topic_block(hit: RetrievedChunk, topic: str) -> str:
    label = str(hit.metadata.get("topic") or topic).upper()
    filename = hit.metadata.get("filename") or "unknown"
    return f"[{label}] {filename}:\n{hit.text}\n\n"


def build_cross_topic_context(groups: Sequence[tuple[str, Sequence[RetrievedChunk]]]) -> str:
    """groups: (topic, hits) pairs in the order the topics were requested."""
    return "".join(format_cross_topic_block(h, topic) for topic, hits in groups for h in hits)


def build_cross_topic_prompt(topics: Sequence[str], context: str, question: str) -> str:
    return CROSS_TOPIC_PROMPT_TEMPLATE.format(
        topics=", ".join(topics), context=context, question=question
    )
