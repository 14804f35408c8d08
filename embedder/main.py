"""FastAPI application entry point with lifespan management."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from embedder.api.routes import router
from embedder.config import settings
from embedder.services.embedding import InitializationError, embedding_service

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown."""
    # Startup
    logger.info("Starting embedding service...")

    if settings.warmup_on_startup:
        try:
            await embedding_service.initialize()
            logger.info("Embedding model warmed up")
        except InitializationError as e:
            # The next request retries the load
            logger.error(f"Embedding model warm-up failed: {e}")

    logger.info("Embedding service started")

    yield

    # Shutdown
    logger.info("Embedding service stopped")


app = FastAPI(
    title="Embedding Service API",
    description="Local sentence embeddings with lazy model loading and batching",
    version="1.0.0",
    lifespan=lifespan,
)

# Include API routes
app.include_router(router)
