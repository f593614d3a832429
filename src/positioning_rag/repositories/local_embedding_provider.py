"""Local sentence-transformers embedding provider.

Runs an embedding model in-process, no API calls required. Useful for
development against a reference library that was embedded with the same
local model. Encoding is CPU-bound, so it is dispatched to a worker thread.
"""

import asyncio
import logging
import time

import numpy as np
from sentence_transformers import SentenceTransformer

from positioning_rag.config import settings
from positioning_rag.errors import EmbeddingFailure

logger = logging.getLogger(__name__)


class LocalEmbeddingProvider:
    """Local sentence-transformers implementation of EmbeddingProvider.

    This class satisfies the EmbeddingProvider protocol through structural
    typing - no explicit inheritance needed.
    """

    def __init__(self, model_name: str | None = None) -> None:
        """Initialize the local embedding provider.

        Args:
            model_name: Name of the sentence-transformers model.
                       Defaults to settings.embedding_model.
        """
        self._model_name = model_name or settings.embedding_model
        self._model: SentenceTransformer | None = None
        self._dimension: int | None = None

    @classmethod
    def create(cls, model_name: str | None = None) -> "LocalEmbeddingProvider":
        """Factory method to create LocalEmbeddingProvider with defaults."""
        return cls(model_name=model_name)

    @property
    def model(self) -> SentenceTransformer:
        """Lazy-load the embedding model."""
        if self._model is None:
            logger.info("Loading embedding model: %s", self._model_name)
            start_time = time.time()
            self._model = SentenceTransformer(self._model_name)
            logger.info("Model loaded in %.2fs", time.time() - start_time)
        return self._model

    @property
    def dimension(self) -> int:
        """Get the embedding vector dimension."""
        if self._dimension is None:
            self._dimension = self.model.get_sentence_embedding_dimension()
        return self._dimension

    @property
    def model_name(self) -> str:
        return self._model_name

    def _encode_sync(self, text: str) -> list[float]:
        embedding = self.model.encode(
            text,
            show_progress_bar=False,
            normalize_embeddings=True,
        )
        if isinstance(embedding, np.ndarray):
            if embedding.ndim == 1:
                return embedding.tolist()
            return embedding[0].tolist()
        return list(embedding)

    async def encode(self, text: str) -> list[float]:
        """Generate embedding vector for a single text.

        Raises:
            EmbeddingFailure: If the model cannot be loaded or fails to encode
        """
        try:
            return await asyncio.to_thread(self._encode_sync, text)
        except (OSError, RuntimeError, ValueError) as e:
            raise EmbeddingFailure(f"Local embedding failed: {e}") from e

    async def is_available(self) -> bool:
        """Check if the model can be loaded."""
        try:
            await asyncio.to_thread(lambda: self.model)
            return True
        except (OSError, RuntimeError, ValueError):
            return False
