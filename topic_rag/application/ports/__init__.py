"""Application ports package.

Re-exports every port so use cases can import from one place.
"""

from topic_rag.application.ports.clock_port import ClockPort
from topic_rag.application.ports.document_extractor_port import (
    DocumentExtractorPort,
    ExtractedDocument,
)
from topic_rag.application.ports.embedding_port import EmbeddingPort
from topic_rag.application.ports.llm_port import ChatMessage, LLMPort, LLMResponse
from topic_rag.application.ports.vector_store_admin_port import VectorStoreAdminPort
from topic_rag.application.ports.vector_store_port import RetrievedChunk, VectorStorePort

__all__ = [
    "ClockPort",
    "DocumentExtractorPort",
    "ExtractedDocument",
    "EmbeddingPort",
    "LLMPort",
    "ChatMessage",
    "LLMResponse",
    "RetrievedChunk",
    "VectorStorePort",
    "VectorStoreAdminPort",
]
