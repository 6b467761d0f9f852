"""Tests for domain errors: retry hints and HTTP status mapping."""

import pytest

from topic_rag.domain.errors import (
    DomainError,
    EmbeddingError,
    ExtractionError,
    GenerationError,
    IndexCreationError,
    NoTopicsSucceededError,
    RetrievalError,
    UnknownTopicError,
    ValidationError,
    VectorStoreError,
)


@pytest.mark.parametrize(
    "err, status, retryable",
    [
        (ValidationError("bad"), 400, False),
        (UnknownTopicError("x"), 404, False),
        (ExtractionError("broken pdf"), 422, False),
        (IndexCreationError("down"), 503, True),
        (EmbeddingError("down"), 503, True),
        (VectorStoreError("down"), 503, True),
        (RetrievalError("down"), 502, True),
        (GenerationError("down"), 502, True),
        (NoTopicsSucceededError(), 502, True),
    ],
)
def test_error_status_and_retry_hint(err, status, retryable):
    assert isinstance(err, DomainError)
    assert err.http_status == status
    assert err.retryable is retryable


def test_unknown_topic_error_names_the_topic():
    err = UnknownTopicError("quantum")
    assert err.topic == "quantum"
    assert str(err) == "Unknown topic: quantum"


def test_no_topics_succeeded_lists_reasons():
    err = NoTopicsSucceededError({"a": "unknown topic", "b": "timed out after 60s"})
    assert err.reasons == {"a": "unknown topic", "b": "timed out after 60s"}
    assert "a: unknown topic" in str(err)
    assert "b: timed out after 60s" in str(err)
