"""E5 HuggingFace embedding adapter.

Why: Every topic collection is 768-d cosine, so one multilingual E5 base
model serves ingest and queries alike. Passages and queries get the E5
instruction prefixes the model was trained with.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from importlib import import_module
from typing import Any

from topic_rag.application.ports.embedding_port import EmbeddingPort
from topic_rag.domain.errors import DomainError, EmbeddingError
from topic_rag.domain.types import Result, Vector

logger = logging.getLogger(__name__)

DEFAULT_MODEL_ID = "intfloat/multilingual-e5-base"


def _prefix_e5_passage(text: str) -> str:
    return f"passage: {text}"


def _prefix_e5_query(text: str) -> str:
    return f"query: {text}"


class E5HFEmbeddingAdapter(EmbeddingPort):
    """E5 embedding adapter backed by sentence-transformers.

    Features:
    - Lazy model loading, once per process (thread-safe)
    - Batched encoding (configurable batch size)
    - Automatic E5 instruction prefixing
    - L2 normalization for cosine similarity
    - Dimension check against the configured collection size
    """

    def __init__(
        self,
        model_id: str = DEFAULT_MODEL_ID,
        device: str = "cpu",
        batch_size: int = 32,
        expected_dim: int | None = 768,
    ) -> None:
        """Initialize E5 embedding adapter.

        Args:
            model_id: HuggingFace model ID
            device: Device for inference ("cuda", "cpu", "mps")
            batch_size: Batch size handed to SentenceTransformer.encode
            expected_dim: Reject vectors of any other size (None disables the check)
        """
        self._model_id = model_id
        self._device = device
        self._bs = batch_size
        self._expected_dim = expected_dim
        self._model: Any = None
        self._lock = threading.Lock()

    @property
    def model_id(self) -> str:
        return self._model_id

    def _get_model(self) -> Any:
        """Load the SentenceTransformer on first use.

        Raises:
            EmbeddingError: If model loading fails
        """
        with self._lock:
            if self._model is None:
                try:
                    st_module = import_module("sentence_transformers")
                    logger.info("Loading embedding model %s on %s", self._model_id, self._device)
                    self._model = st_module.SentenceTransformer(self._model_id, device=self._device)
                except Exception as ex:
                    raise EmbeddingError(f"load failed: {ex}") from ex
            return self._model

    def _check_dim(self, vec: Vector) -> None:
        if self._expected_dim is not None and len(vec) != self._expected_dim:
            raise EmbeddingError(
                f"model {self._model_id} produced {len(vec)}-d vectors, "
                f"expected {self._expected_dim}"
            )

    def embed_texts(self, texts: Sequence[str]) -> Result[list[Vector], DomainError]:
        """Embed passages for storage.

        Pipeline:
        1. Prefix texts with E5 passage instruction
        2. Batch encode (batch_size texts per forward pass)
        3. L2 normalize embeddings for cosine similarity
        4. Convert to tuples (domain Vector type)
        """
        if not texts:
            return Result.success([])
        try:
            model = self._get_model()
            prefixed = [_prefix_e5_passage(t) for t in texts]
            embeddings = model.encode(
                prefixed,
                batch_size=self._bs,
                normalize_embeddings=True,
                show_progress_bar=False,
                convert_to_numpy=True,
            )
            vectors: list[Vector] = [tuple(float(x) for x in emb.tolist()) for emb in embeddings]
            for v in vectors:
                self._check_dim(v)
            return Result.success(vectors)

        except EmbeddingError as ex:
            return Result.failure(ex)
        except Exception as ex:
            return Result.failure(EmbeddingError(f"embed failed: {ex}"))

    def embed_query(self, text: str) -> Result[Vector, DomainError]:
        """Embed single query text with E5 query instruction."""
        try:
            model = self._get_model()
            embedding = model.encode(
                _prefix_e5_query(text),
                normalize_embeddings=True,
                show_progress_bar=False,
                convert_to_numpy=True,
            )
            vector: Vector = tuple(float(x) for x in embedding.tolist())
            self._check_dim(vector)
            return Result.success(vector)

        except EmbeddingError as ex:
            return Result.failure(ex)
        except Exception as ex:
            return Result.failure(EmbeddingError(f"embed failed: {ex}"))
