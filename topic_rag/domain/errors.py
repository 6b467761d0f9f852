"""Domain errors (typed).

Why: Unified error family for the application layer, without infra leaks.
Each error knows whether a retry may succeed and which HTTP status the
interface layer should map it to.
"""


class DomainError(Exception):
    """Base class for domain-specific errors."""

    retryable: bool = False
    http_status: int = 500


class ValidationError(DomainError):
    """Invalid input/domain state."""

    http_status = 400


class UnknownTopicError(DomainError):
    """Topic id is not present in the topic catalog."""

    http_status = 404

    def __init__(self, topic: str) -> None:
        super().__init__(f"Unknown topic: {topic}")
        self.topic = topic


class ExtractionError(DomainError):
    """Uploaded file is malformed, empty or of an unsupported type."""

    http_status = 422


class IndexCreationError(DomainError):
    """Vector index for a topic could not be created or verified."""

    retryable = True
    http_status = 503


# Infrastructure-mapped errors
class EmbeddingError(DomainError):
    """Embedding backend failed or is misconfigured."""

    retryable = True
    http_status = 503


class VectorStoreError(DomainError):
    """Vector store backend failed or is misconfigured."""

    retryable = True
    http_status = 503


class RetrievalError(DomainError):
    """Similarity query failed (after infra errors were mapped)."""

    retryable = True
    http_status = 502


class GenerationError(DomainError):
    """Text-generation backend failed or timed out."""

    retryable = True
    http_status = 502


class NoTopicsSucceededError(DomainError):
    """Cross-topic query where every requested topic was skipped or failed."""

    retryable = True
    http_status = 502

    def __init__(self, reasons: dict[str, str] | None = None) -> None:
        self.reasons = dict(reasons or {})
        detail = "; ".join(f"{topic}: {reason}" for topic, reason in self.reasons.items())
        super().__init__(f"no topics succeeded ({detail})" if detail else "no topics succeeded")
