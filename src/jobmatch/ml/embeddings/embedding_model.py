"""
Embedding model wrapper for generating text embeddings.

Uses sentence-transformers library for generating semantic embeddings
from job and query text. Encoding runs in a worker thread so async
callers (the vector stores) can await it.
"""

import asyncio
import threading
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, runtime_checkable

import numpy as np

from jobmatch.utils.config import get_settings
from jobmatch.utils.exceptions import RequestTimeoutError
from jobmatch.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class EmbeddingResult:
    """Vector produced for a single text."""

    vector: list[float]
    dimension: int


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors, in [-1, 1].

    Returns 0 when either vector is empty, the dimensions differ, or
    either vector has zero norm.
    """
    if len(a) == 0 or len(b) == 0:
        return 0.0
    if len(a) != len(b):
        logger.warning(f"Embedding dimensions mismatch ({len(a)} vs {len(b)}), returning 0")
        return 0.0

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0
    # Clip to valid range (numerical precision issues)
    return float(np.clip(np.dot(va, vb) / norm, -1.0, 1.0))


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Anything that can turn text into a vector."""

    async def embed(self, text: str) -> EmbeddingResult:
        ...

    def cosine_similarity(self, a: Sequence[float], b: Sequence[float]) -> float:
        ...


class EmbeddingModel:
    """
    Wrapper for sentence-transformers embedding models.

    Provides a unified interface for generating text embeddings
    with support for batching, device selection and bounded
    concurrency for async callers.
    """

    def __init__(
        self,
        model_name: Optional[str] = None,
        device: Optional[str] = None,
        max_concurrency: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the embedding model.

        Args:
            model_name: Name of the sentence-transformers model to use.
                       Defaults to config setting.
            device: Device to run model on ('cpu', 'cuda', 'mps').
                   Defaults to config setting.
            max_concurrency: Maximum embedding requests in flight.
            timeout: Seconds to wait for a single embedding.
        """
        settings = get_settings()
        self.model_name = model_name or settings.ml.embedding_model
        self.device = device or settings.ml.device
        self.dimension = settings.ml.embedding_dimension
        self.batch_size = settings.ml.batch_size
        self.max_text_length = settings.ml.max_text_length
        self.timeout = timeout or settings.ml.timeout

        self.max_concurrency = max_concurrency or settings.ml.max_concurrency
        # Acquired inside the worker thread; a timed-out call holds its slot
        # until its encode returns
        self._slots = threading.BoundedSemaphore(self.max_concurrency)
        self._model = None
        self._initialized = False

    def _load_model(self) -> None:
        """Lazy load the embedding model."""
        if self._initialized:
            return

        try:
            from sentence_transformers import SentenceTransformer

            logger.info(f"Loading embedding model: {self.model_name}")
            self._model = SentenceTransformer(
                self.model_name,
                device=self.device,
            )
            self._initialized = True
            logger.info(f"Embedding model loaded on device: {self.device}")

        except ImportError:
            logger.error(
                "sentence-transformers not installed. "
                "Install with: pip install sentence-transformers"
            )
            raise
        except Exception as e:
            logger.error(f"Failed to load embedding model: {e}")
            raise

    @property
    def model(self):
        """Get the underlying sentence-transformer model."""
        if not self._initialized:
            self._load_model()
        return self._model

    def encode(
        self,
        texts: str | list[str],
        normalize: bool = True,
    ) -> np.ndarray:
        """
        Generate embeddings for text(s).

        Texts longer than the configured limit are truncated.

        Args:
            texts: Single text string or list of texts to encode.
            normalize: Whether to L2-normalize embeddings (for cosine similarity).

        Returns:
            numpy array of shape (n_texts, embedding_dim) or (embedding_dim,)
            for single text input.
        """
        single_input = isinstance(texts, str)
        if single_input:
            texts = [texts]

        texts = [t[: self.max_text_length] for t in texts]

        embeddings = self.model.encode(
            texts,
            batch_size=self.batch_size,
            show_progress_bar=False,
            normalize_embeddings=normalize,
            convert_to_numpy=True,
        )

        if single_input:
            return embeddings[0]

        return embeddings

    def _encode_bounded(self, text: str) -> np.ndarray:
        with self._slots:
            return self.encode(text)

    async def embed(self, text: str) -> EmbeddingResult:
        """
        Embed one text without blocking the event loop.

        At most ``max_concurrency`` encodes run at once. The timeout covers
        waiting for a slot as well as encoding.

        Raises:
            RequestTimeoutError: If encoding takes longer than the timeout.
        """
        try:
            vector = await asyncio.wait_for(
                asyncio.to_thread(self._encode_bounded, text),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise RequestTimeoutError(
                f"Embedding request exceeded {self.timeout}s",
                timeout=self.timeout,
                service="embedding",
                cause=e,
            ) from e

        values = [float(x) for x in vector]
        return EmbeddingResult(vector=values, dimension=len(values))

    def cosine_similarity(self, a: Sequence[float], b: Sequence[float]) -> float:
        """Cosine similarity between two embeddings."""
        return cosine_similarity(a, b)


# Singleton instance
_embedding_model: Optional[EmbeddingModel] = None


def get_embedding_model() -> EmbeddingModel:
    """Get the embedding model singleton instance."""
    global _embedding_model
    if _embedding_model is None:
        _embedding_model = EmbeddingModel()
    return _embedding_model
