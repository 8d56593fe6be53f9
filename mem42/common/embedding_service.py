"""
Embedding Service

Turns engrams and retrieval queries into vectors. The default mode calls the
hosted Gemini embedding model; "femb" runs fastembed on-device.
"""

import logging
from typing import List, Optional

import numpy as np

from .errors import ExternalAPIFailure

logger = logging.getLogger("mem42.common.embedding_service")


class EmbeddingService:
    """
    Embedding service for Mem42.

    Modes:
    - google: hosted Gemini embeddings (768-dim text-embedding-004)
    - femb: on-device fastembed model
    """

    def __init__(
        self,
        mode: str = "google",
        model: str = "models/text-embedding-004",
        api_key: Optional[str] = None,
    ):
        self._mode = (mode or "google").lower()
        self._model = model
        self._adapter = None
        self._init_adapter(api_key)

    def _init_adapter(self, api_key: Optional[str]) -> None:
        """Initialize the underlying embedding backend"""
        if self._mode == "google":
            if not api_key:
                logger.info("Google API key not provided, embedding service unavailable")
                return
            try:
                import google.generativeai as genai

                genai.configure(api_key=api_key)
                self._adapter = genai
            except ImportError:
                logger.warning("google-generativeai package not installed")
            return

        if self._mode == "femb":
            try:
                from fastembed import TextEmbedding

                self._adapter = TextEmbedding(model_name=self._model)
            except ImportError:
                logger.warning("fastembed package not installed")
            except Exception as e:
                logger.warning("Failed to load fastembed model %s: %s", self._model, e)
            return

        logger.warning("Unsupported embedding mode: %s", self._mode)

    @property
    def is_available(self) -> bool:
        """Check if embedding service is available"""
        return self._adapter is not None

    @property
    def mode(self) -> str:
        return self._mode

    def embed(self, texts: List[str]) -> List[List[float]]:
        """
        Generate embeddings for a list of texts.

        Args:
            texts: List of strings to embed

        Returns:
            List of embedding vectors, one per text
        """
        if not self._adapter:
            raise RuntimeError("Embedding service is not available")

        if not texts:
            return []

        try:
            if self._mode == "google":
                response = self._adapter.embed_content(model=self._model, content=texts)
                embeddings = response["embedding"]
            else:
                embeddings = list(self._adapter.embed(texts))
        except Exception as e:
            raise ExternalAPIFailure(
                f"{self._mode} embedding failed: {e}", provider=self._mode
            ) from e

        # Ensure consistent return type
        return [
            vec.tolist() if isinstance(vec, np.ndarray) else list(vec)
            for vec in embeddings
        ]

    def embed_single(self, text: str) -> List[float]:
        """
        Generate embedding for a single text.

        Args:
            text: String to embed

        Returns:
            Embedding vector
        """
        if not text:
            raise ValueError("Cannot embed empty text")

        embeddings = self.embed([text])
        return embeddings[0]


def create_embedding_service(embedding_config, llm_config) -> EmbeddingService:
    """Build the embedding service described by the config sections."""
    return EmbeddingService(
        mode=embedding_config.mode,
        model=embedding_config.model,
        api_key=llm_config.google_api_key or None,
    )
