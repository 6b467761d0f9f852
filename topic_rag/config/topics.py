"""Topic catalog loading from a YAML file."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from topic_rag.domain.catalog import TopicCatalog
from topic_rag.domain.errors import ValidationError
from topic_rag.domain.models import Topic

logger = logging.getLogger(__name__)

_COLLECTION_KEYS = ("collection-name", "collection_name", "collectionName")


def parse_topics(data: Any) -> TopicCatalog:
    """Build a catalog from the parsed YAML document.

    Expected shape::

        topics:
          pentesting:
            collection-name: pentesting_docs
            description: Penetration testing and security
    """
    if not isinstance(data, dict) or not isinstance(data.get("topics"), dict):
        raise ValidationError("topics file must contain a 'topics' mapping")

    topics: list[Topic] = []
    for topic_id, entry in data["topics"].items():
        entry = entry or {}
        if not isinstance(entry, dict):
            raise ValidationError(f"topic '{topic_id}' must be a mapping")
        collection = next((entry[k] for k in _COLLECTION_KEYS if entry.get(k)), None)
        if not collection:
            raise ValidationError(f"topic '{topic_id}' has no collection-name")
        topics.append(
            Topic(
                id=str(topic_id),
                collection_name=str(collection),
                description=str(entry.get("description") or ""),
            )
        )
    return TopicCatalog(topics)


def load_topic_catalog(path: str | Path) -> TopicCatalog:
    p = Path(path)
    if not p.is_file():
        raise ValidationError(f"topics file not found: {p}")
    with open(p, encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as ex:
            raise ValidationError(f"invalid topics file {p}: {ex}") from ex
    catalog = parse_topics(data)
    logger.info("Loaded %d topics from %s: %s", len(catalog), p, ", ".join(catalog.ids()))
    return catalog
