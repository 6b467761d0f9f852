from __future__ import annotations

from collections.abc import Iterable

from .errors import UnknownTopicError, ValidationError
from .models import Topic


class TopicCatalog:
    """Read-only registry of configured topics, in configuration order."""

    def __init__(self, topics: Iterable[Topic]) -> None:
        by_id: dict[str, Topic] = {}
        collections: dict[str, str] = {}
        for t in topics:
            if not t.id or not t.collection_name:
                raise ValidationError("topic id and collection name must not be empty")
            if t.id in by_id:
                raise ValidationError(f"duplicate topic id: {t.id}")
            owner = collections.get(t.collection_name)
            if owner is not None:
                raise ValidationError(
                    f"topics '{owner}' and '{t.id}' share collection '{t.collection_name}'"
                )
            by_id[t.id] = t
            collections[t.collection_name] = t.id
        self._topics = by_id

    def has_topic(self, topic_id: str) -> bool:
        return topic_id in self._topics

    def get(self, topic_id: str) -> Topic:
        try:
            return self._topics[topic_id]
        except KeyError:
            raise UnknownTopicError(topic_id) from None

    def collection_name(self, topic_id: str) -> str:
        return self.get(topic_id).collection_name

    def all(self) -> list[Topic]:
        return list(self._topics.values())

    def ids(self) -> list[str]:
        return list(self._topics)

    def __len__(self) -> int:
        return len(self._topics)
