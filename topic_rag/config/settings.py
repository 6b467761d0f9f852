"""Application settings with environment-driven configuration.

Why: Einzige Stelle mit Env; alle anderen Schichten bekommen Werte per
     Dependency Injection.
"""

import os
from dataclasses import dataclass, field


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class AppSettings:
    """Application settings loaded from environment variables.

    This is the ONLY place where environment variables are read.
    All other layers receive settings via dependency injection.
    """

    # ===== Vector Store Configuration =====
    qdrant_url: str = field(
        default_factory=lambda: os.getenv("QDRANT_URL", "http://localhost:6333")
    )
    qdrant_api_key: str = field(default_factory=lambda: os.getenv("QDRANT_API_KEY", ""))
    qdrant_prefer_grpc: bool = field(default_factory=lambda: _flag("QDRANT_PREFER_GRPC"))
    qdrant_timeout_s: int = field(default_factory=lambda: int(os.getenv("QDRANT_TIMEOUT_S", "30")))

    # Every topic collection shares these
    vector_dim: int = field(default_factory=lambda: int(os.getenv("VECTOR_DIM", "768")))
    vector_metric: str = field(
        default_factory=lambda: os.getenv("VECTOR_METRIC", "cosine").lower()
    )
    # Supported: "cosine" | "dot" | "euclid"

    # ===== Embedding Configuration =====
    embedding_model: str = field(
        default_factory=lambda: os.getenv("EMBEDDING_MODEL", "intfloat/multilingual-e5-base")
    )
    embedding_device: str = field(default_factory=lambda: os.getenv("EMBEDDING_DEVICE", "cpu"))
    # Supported: "cpu" | "cuda" | "mps"

    embedding_batch_size: int = field(
        default_factory=lambda: int(os.getenv("EMBEDDING_BATCH_SIZE", "32"))
    )

    # ===== LLM Configuration =====
    llm_base_url: str = field(
        default_factory=lambda: os.getenv("LLM_BASE_URL", "http://localhost:8000/v1")
    )
    llm_api_key: str = field(default_factory=lambda: os.getenv("LLM_API_KEY", "EMPTY"))
    llm_model: str = field(
        default_factory=lambda: os.getenv("LLM_MODEL", "meta-llama/Meta-Llama-3.1-8B-Instruct")
    )
    llm_timeout_s: float = field(
        default_factory=lambda: float(os.getenv("LLM_TIMEOUT_S", "120"))
    )
    llm_temperature: float = field(
        default_factory=lambda: float(os.getenv("LLM_TEMPERATURE", "0.2"))
    )
    llm_max_tokens: int = field(default_factory=lambda: int(os.getenv("LLM_MAX_TOKENS", "1024")))

    # ===== Topics =====
    topics_file: str = field(default_factory=lambda: os.getenv("TOPICS_FILE", "topics.yaml"))

    # ===== Chunking =====
    chunk_window_tokens: int = field(
        default_factory=lambda: int(os.getenv("CHUNK_WINDOW_TOKENS", "800"))
    )
    chunk_overlap_tokens: int = field(
        default_factory=lambda: int(os.getenv("CHUNK_OVERLAP_TOKENS", "400"))
    )

    # ===== Query Configuration =====
    query_default_top_k: int = field(
        default_factory=lambda: int(os.getenv("QUERY_DEFAULT_TOP_K", "5"))
    )
    cross_topic_top_k: int = field(
        default_factory=lambda: int(os.getenv("CROSS_TOPIC_TOP_K", "3"))
    )
    cross_topic_max_workers: int = field(
        default_factory=lambda: int(os.getenv("CROSS_TOPIC_MAX_WORKERS", "8"))
    )
    cross_topic_timeout_s: float = field(
        default_factory=lambda: float(os.getenv("CROSS_TOPIC_TIMEOUT_S", "60"))
    )
    # Per-topic wait; a slow topic is skipped, not awaited

    # ===== Logging =====
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
