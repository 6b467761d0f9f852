"""Startup contract: every configured topic gets its collection.

Why: collections are created up front (768-d, cosine) so the first upload or
query for a topic does not pay for it. Going through the IndexCache means
the handles are warm afterwards and a failed topic can simply be retried
on first use.
"""

from __future__ import annotations

import logging

from topic_rag.application.index_cache import IndexCache
from topic_rag.domain.catalog import TopicCatalog
from topic_rag.domain.errors import DomainError

logger = logging.getLogger(__name__)


class InitializeCollections:
    def __init__(self, catalog: TopicCatalog, index_cache: IndexCache) -> None:
        self.catalog = catalog
        self.index_cache = index_cache

    def execute(self) -> dict[str, str]:
        logger.info("Initializing collections for %d topics...", len(self.catalog))
        status: dict[str, str] = {}
        for topic in self.catalog.all():
            try:
                self.index_cache.get_or_create(topic.id)
                status[topic.id] = "ready"
            except DomainError as ex:
                logger.error(
                    "Failed to initialize collection '%s' for topic '%s': %s",
                    topic.collection_name,
                    topic.id,
                    ex,
                )
                status[topic.id] = f"failed: {ex}"
        logger.info("Collection initialization complete")
        return status
