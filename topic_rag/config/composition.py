from __future__ import annotations

from dataclasses import dataclass

from topic_rag.application.index_cache import IndexCache
from topic_rag.application.ports.clock_port import ClockPort
from topic_rag.application.ports.document_extractor_port import DocumentExtractorPort
from topic_rag.application.ports.embedding_port import EmbeddingPort
from topic_rag.application.ports.llm_port import LLMPort
from topic_rag.application.ports.vector_store_admin_port import VectorStoreAdminPort
from topic_rag.application.ports.vector_store_port import VectorStorePort
from topic_rag.application.use_cases.ingest_documents import IngestDocuments
from topic_rag.application.use_cases.initialize_collections import InitializeCollections
from topic_rag.application.use_cases.query_cross_topic import QueryCrossTopic
from topic_rag.application.use_cases.query_topic import QueryTopic
from topic_rag.config.settings import AppSettings
from topic_rag.config.topics import load_topic_catalog
from topic_rag.domain.catalog import TopicCatalog
from topic_rag.domain.models import DocumentType
from topic_rag.domain.services.chunking import ChunkingEngine, ChunkingParams
from topic_rag.infrastructure.embeddings.e5_hf_adapter import E5HFEmbeddingAdapter
from topic_rag.infrastructure.llm.openai_compat_adapter import OpenAICompatAdapter
from topic_rag.infrastructure.parsing.pdf_text_extractor import (
    MarkdownTextExtractorAdapter,
    PDFTextExtractorAdapter,
)
from topic_rag.infrastructure.time.system_clock import SystemClock
from topic_rag.infrastructure.vectorstore.qdrant_adapter import (
    QdrantConfig,
    QdrantVectorStoreAdapter,
)


def build_catalog(settings: AppSettings) -> TopicCatalog:
    return load_topic_catalog(settings.topics_file)


def build_embedding(settings: AppSettings) -> EmbeddingPort:
    return E5HFEmbeddingAdapter(
        model_id=settings.embedding_model,
        device=settings.embedding_device,
        batch_size=settings.embedding_batch_size,
        expected_dim=settings.vector_dim,
    )


def build_vector_store(settings: AppSettings) -> QdrantVectorStoreAdapter:
    """One Qdrant client serves both the data and the admin port."""
    return QdrantVectorStoreAdapter(
        QdrantConfig(
            url=settings.qdrant_url,
            api_key=settings.qdrant_api_key or None,
            prefer_grpc=settings.qdrant_prefer_grpc,
            timeout_s=settings.qdrant_timeout_s,
        )
    )


def build_llm(settings: AppSettings) -> LLMPort:
    return OpenAICompatAdapter(
        base_url=settings.llm_base_url,
        api_key=settings.llm_api_key,
        model=settings.llm_model,
        timeout_s=settings.llm_timeout_s,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )


def build_extractors() -> dict[DocumentType, DocumentExtractorPort]:
    return {"pdf": PDFTextExtractorAdapter(), "markdown": MarkdownTextExtractorAdapter()}


def build_chunker(settings: AppSettings) -> ChunkingEngine:
    return ChunkingEngine(
        ChunkingParams(
            window_tokens=settings.chunk_window_tokens,
            overlap_tokens=settings.chunk_overlap_tokens,
        )
    )


def build_clock() -> ClockPort:
    """Build clock adapter for time operations.

    Note:
        Tests should inject a fixed clock instead.
    """
    return SystemClock()


@dataclass
class Container:
    """Everything the HTTP app and the CLI need, wired once per process."""

    settings: AppSettings
    catalog: TopicCatalog
    admin: VectorStoreAdminPort
    index_cache: IndexCache
    ingest: IngestDocuments
    query_topic: QueryTopic
    query_cross_topic: QueryCrossTopic
    initialize_collections: InitializeCollections


def wire_container(
    settings: AppSettings,
    catalog: TopicCatalog,
    store: VectorStorePort,
    admin: VectorStoreAdminPort,
    embedding: EmbeddingPort,
    llm: LLMPort,
    clock: ClockPort,
    extractors: dict[DocumentType, DocumentExtractorPort] | None = None,
) -> Container:
    """Assemble use cases from already-built adapters (tests pass fakes here)."""
    index_cache = IndexCache(
        catalog, store, admin, dim=settings.vector_dim, metric=settings.vector_metric
    )
    return Container(
        settings=settings,
        catalog=catalog,
        admin=admin,
        index_cache=index_cache,
        ingest=IngestDocuments(
            catalog=catalog,
            extractors=extractors if extractors is not None else build_extractors(),
            chunker=build_chunker(settings),
            embedding=embedding,
            index_cache=index_cache,
            clock=clock,
        ),
        query_topic=QueryTopic(
            catalog, index_cache, embedding, llm, default_top_k=settings.query_default_top_k
        ),
        query_cross_topic=QueryCrossTopic(
            catalog,
            index_cache,
            embedding,
            llm,
            top_k=settings.cross_topic_top_k,
            max_workers=settings.cross_topic_max_workers,
            topic_timeout_s=settings.cross_topic_timeout_s,
        ),
        initialize_collections=InitializeCollections(catalog, index_cache),
    )


def build_container(settings: AppSettings | None = None) -> Container:
    settings = settings or AppSettings()
    store = build_vector_store(settings)
    return wire_container(
        settings=settings,
        catalog=build_catalog(settings),
        store=store,
        admin=store,
        embedding=build_embedding(settings),
        llm=build_llm(settings),
        clock=build_clock(),
    )
