"""HTTP API for topic-scoped upload and query.

Why: Konsumierbare API ohne Business-Logik; pure Delegation an die Use Cases.
Endpoints are sync `def`s so blocking model/DB calls run on the threadpool.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

try:
    from fastapi import Depends, FastAPI, File, HTTPException, Query, Request, UploadFile
    from fastapi.middleware.cors import CORSMiddleware
    from pydantic import BaseModel, ConfigDict, Field
except ImportError as err:
    raise ImportError("FastAPI not installed. Install with: pip install topic-rag") from err

from topic_rag.application.dto.ingest_dto import IngestDocumentRequest
from topic_rag.application.dto.query_dto import CrossTopicQueryRequest, QueryRequest
from topic_rag.config.composition import Container, build_container
from topic_rag.config.logging_setup import configure_logging
from topic_rag.config.settings import AppSettings
from topic_rag.domain.errors import DomainError
from topic_rag.domain.models import DocumentType

logger = logging.getLogger(__name__)


class QueryBody(BaseModel):
    """Request body for single- and cross-topic queries."""

    model_config = ConfigDict(populate_by_name=True)

    query: str
    top_k: int | None = Field(default=None, alias="topK")


def _fail(error: DomainError | None) -> HTTPException:
    if error is None:
        return HTTPException(status_code=500, detail="unknown error")
    return HTTPException(status_code=error.http_status, detail=str(error))


def get_container(request: Request) -> Container:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return container


def create_app(container: Container | None = None) -> FastAPI:
    """Build the app; without an injected container one is wired on startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if app.state.container is None:
            settings = AppSettings()
            configure_logging(settings.log_level)
            app.state.container = build_container(settings)
        app.state.container.initialize_collections.execute()
        yield

    app = FastAPI(title="Topic RAG API", version="1.0.0", lifespan=lifespan)
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/topics")
    def list_topics(c: Container = Depends(get_container)) -> dict[str, Any]:
        return {
            t.id: {"collectionName": t.collection_name, "description": t.description}
            for t in c.catalog.all()
        }

    @app.get("/topics/stats")
    def topic_stats(c: Container = Depends(get_container)) -> dict[str, Any]:
        return c.index_cache.stats()

    def _upload(c: Container, topic: str, file: UploadFile, document_type: DocumentType) -> dict:
        data = file.file.read()
        req = IngestDocumentRequest(
            topic=topic,
            data=data,
            filename=file.filename or f"upload.{'pdf' if document_type == 'pdf' else 'md'}",
            document_type=document_type,
        )
        result = c.ingest.execute(req)
        if not result.ok or result.value is None:
            raise _fail(result.error)
        return result.value.to_dict()

    @app.post("/topics/{topic}/documents/upload/pdf")
    def upload_pdf(
        topic: str, file: UploadFile = File(...), c: Container = Depends(get_container)
    ) -> dict[str, Any]:
        return _upload(c, topic, file, "pdf")

    @app.post("/topics/{topic}/documents/upload/markdown")
    def upload_markdown(
        topic: str, file: UploadFile = File(...), c: Container = Depends(get_container)
    ) -> dict[str, Any]:
        return _upload(c, topic, file, "markdown")

    @app.post("/topics/{topic}/query")
    def query_topic(
        topic: str, body: QueryBody, c: Container = Depends(get_container)
    ) -> dict[str, Any]:
        req = QueryRequest(
            topic=topic,
            question=body.query,
            top_k=body.top_k or c.settings.query_default_top_k,
        )
        result = c.query_topic.execute(req)
        if not result.ok or result.value is None:
            raise _fail(result.error)
        return result.value.to_dict()

    @app.post("/query/cross")
    def query_cross(
        body: QueryBody,
        topics: list[str] = Query(..., description="Comma-separated or repeated topic ids"),
        c: Container = Depends(get_container),
    ) -> dict[str, Any]:
        ids = [t.strip() for raw in topics for t in raw.split(",") if t.strip()]
        result = c.query_cross_topic.execute(CrossTopicQueryRequest(topics=ids, question=body.query))
        if not result.ok or result.value is None:
            raise _fail(result.error)
        return result.value.to_dict()

    @app.get("/health")
    def health(c: Container = Depends(get_container)) -> dict[str, Any]:
        body: dict[str, Any] = {
            "status": "UP",
            "timestamp": int(time.time() * 1000),
            "topics_configured": len(c.catalog),
            "topics": c.catalog.ids(),
        }
        r = c.admin.list_collections()
        if r.ok:
            body.update(database_status="CONNECTED", collections=c.index_cache.stats())
        else:
            logger.warning("Health check could not reach the vector store: %s", r.error)
            body.update(database_status="DISCONNECTED", error=str(r.error))
        return body

    return app


app = create_app()
