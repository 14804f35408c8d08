"""Embedding service using SentenceTransformer for semantic similarity.

The model is loaded lazily on first use and shared by every caller in the
process. Loading and inference run in worker threads so the event loop keeps
serving other requests while a batch is being embedded.
"""

import asyncio
import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from embedder.config import settings
from embedder.services.pooling import sentence_vector
from embedder.services.single_flight import SingleFlight

logger = logging.getLogger(__name__)

SERVICE_NAME = "SentenceTransformers Embeddings"
DIMENSION_PROBE_TEXT = "test"


class EmbeddingServiceError(Exception):
    """Base class for embedding service failures."""


class InitializationError(EmbeddingServiceError):
    """Raised when the embedding model fails to load. Safe to retry."""


class InvalidInputError(EmbeddingServiceError):
    """Raised when there is nothing valid to embed."""


class EmbeddingGenerationError(EmbeddingServiceError):
    """Raised when inference fails for one of the input texts."""

    def __init__(self, message: str, text: str, index: int, batch: int):
        self.text = text
        self.index = index
        self.batch = batch
        super().__init__(message)


class ServiceState(Enum):
    """Model lifecycle states."""

    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


def load_sentence_transformer(model_name: str) -> Any:
    """Load a SentenceTransformer using the configured cache and fetch policy."""
    from sentence_transformers import SentenceTransformer

    return SentenceTransformer(
        model_name,
        device=settings.embedding_device,
        cache_folder=settings.models_cache_dir,
        local_files_only=not settings.allow_remote_models,
    )


class EmbeddingService:
    """Lazily loaded, batched wrapper around one embedding model."""

    def __init__(
        self,
        model_name: str | None = None,
        batch_size: int | None = None,
        model_loader: Callable[[str], Any] | None = None,
    ):
        self.model_name = model_name or settings.embedding_model
        self.batch_size = batch_size if batch_size is not None else settings.embedding_batch_size
        self.model: Any = None
        self._model_loader = model_loader or load_sentence_transformer
        self._cached_dimension: int | None = None
        self._init_flight = SingleFlight(name="model-load")
        self._dimension_flight = SingleFlight(name="dimension-probe")

    @property
    def batch_size(self) -> int:
        """Texts per batch, which is also the number of concurrent encodes."""
        return self._batch_size

    @batch_size.setter
    def batch_size(self, value: int) -> None:
        if value < 1:
            raise ValueError(f"batch_size must be at least 1, got {value}")
        self._batch_size = value

    @property
    def state(self) -> ServiceState:
        """Current lifecycle state of the model."""
        if self.model is not None:
            return ServiceState.READY
        if self._init_flight.in_flight:
            return ServiceState.INITIALIZING
        return ServiceState.UNINITIALIZED

    @property
    def is_initialized(self) -> bool:
        return self.model is not None

    async def initialize(self) -> None:
        """
        Load the model once.

        Concurrent callers share a single load. If it fails, every waiter
        gets the same InitializationError and the next call tries again.
        """
        if self.model is not None:
            return
        await self._init_flight.run(self._initialize_model)

    async def _initialize_model(self) -> None:
        logger.info(f"Initializing embedding model: {self.model_name}")
        try:
            model = await asyncio.to_thread(self._model_loader, self.model_name)
        except Exception as e:
            logger.error(f"Error initializing embedding model {self.model_name}: {e}")
            raise InitializationError(f"Failed to initialize embedding model: {e}") from e

        self.model = model
        logger.info(f"Embedding model {self.model_name} initialized successfully")

    async def embed_documents(self, texts: str | Sequence[str]) -> list[list[float]]:
        """
        Generate embeddings for one text or a sequence of texts.

        A bare string is embedded as a single document, even when empty.

        Returns:
            One unit-length vector per input text, in input order

        Raises:
            InvalidInputError: If the sequence is empty
            InitializationError: If the model cannot be loaded
            EmbeddingGenerationError: If any text fails to embed
        """
        if isinstance(texts, str):
            texts = [texts]
        return await self.embed_many(texts)

    async def embed_many(self, texts: Sequence[str]) -> list[list[float]]:
        """
        Embed a non-empty sequence of texts batch by batch.

        Batches run one after another. Texts inside a batch are encoded on a
        thread pool sized to the batch, so at most ``batch_size`` encodes run
        at once. The first failing batch stops the call.
        """
        text_list = list(texts)
        if not text_list:
            raise InvalidInputError("No texts provided for embedding")
        for index, text in enumerate(text_list):
            if not isinstance(text, str):
                raise InvalidInputError(
                    f"Text at index {index} must be a string, got {type(text).__name__}"
                )

        await self.initialize()

        logger.info(f"Generating embeddings for {len(text_list)} texts")
        embeddings: list[list[float]] = []
        executor = ThreadPoolExecutor(
            max_workers=min(self.batch_size, len(text_list)),
            thread_name_prefix="embedding",
        )
        loop = asyncio.get_running_loop()

        try:
            for batch_number, start in enumerate(range(0, len(text_list), self.batch_size)):
                batch = text_list[start : start + self.batch_size]
                logger.debug(f"Embedding batch {batch_number} ({len(batch)} texts)")

                results = await asyncio.gather(
                    *(loop.run_in_executor(executor, self._encode, text) for text in batch),
                    return_exceptions=True,
                )

                for offset, result in enumerate(results):
                    if isinstance(result, BaseException):
                        text = batch[offset]
                        logger.error(f"Error embedding text {text[:50]!r}: {result}")
                        raise EmbeddingGenerationError(
                            f"Failed to embed text at index {start + offset}: {result}",
                            text=text,
                            index=start + offset,
                            batch=batch_number,
                        ) from result

                embeddings.extend(results)
        finally:
            # Don't block the event loop on encodes still running after a cancel
            executor.shutdown(wait=False)

        logger.info(f"Generated {len(embeddings)} embeddings successfully")
        return embeddings

    def _encode(self, text: str) -> list[float]:
        """Run the model on one text and pool its token embeddings."""
        token_embeddings = self.model.encode(
            text,
            output_value="token_embeddings",
            show_progress_bar=False,
        )
        return sentence_vector(token_embeddings)

    async def embed_query(self, text: str) -> list[float]:
        """Generate the embedding for a single query text."""
        embeddings = await self.embed_documents([text])
        return embeddings[0]

    async def get_embedding_dimension(self) -> int:
        """Return the vector length, probing the model only the first time."""
        await self.initialize()
        if self._cached_dimension is None:
            await self._dimension_flight.run(self._probe_dimension)
        return self._cached_dimension

    async def _probe_dimension(self) -> None:
        if self._cached_dimension is not None:
            return
        probe = await self.embed_query(DIMENSION_PROBE_TEXT)
        self._cached_dimension = len(probe)
        logger.info(f"Embedding dimension for {self.model_name}: {self._cached_dimension}")

    async def health_check(self) -> dict:
        """Report service health. Never raises."""
        try:
            await self.initialize()
            dimension = await self.get_embedding_dimension()
            return {
                "status": "healthy",
                "model": self.model_name,
                "dimension": dimension,
                "initialized": self.is_initialized,
                "timestamp": _now(),
            }
        except Exception as e:
            logger.warning(f"Embedding service health check failed: {e}")
            return {
                "status": "unhealthy",
                "error": str(e) or type(e).__name__,
                "timestamp": _now(),
            }

    async def get_service_info(self) -> dict:
        """Describe the service for monitoring. Never raises."""
        try:
            health = await self.health_check()
            return {
                "name": SERVICE_NAME,
                "model": self.model_name,
                "status": health["status"],
                "dimension": health.get("dimension"),
                "backend": "local",
                "cost": "free",
                "rate_limit": "none",
            }
        except Exception as e:
            logger.exception(f"Unexpected error building service info: {e}")
            return {
                "name": SERVICE_NAME,
                "model": self.model_name,
                "status": "error",
                "error": str(e) or type(e).__name__,
            }


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# Global singleton instance
embedding_service = EmbeddingService()
