"""API routes for the embedding service."""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from fastapi import APIRouter, HTTPException, Response

from embedder.api.schemas import (
    EmbedRequest,
    EmbedResponse,
    ErrorResponse,
    HealthResponse,
    QueryEmbedRequest,
    QueryEmbedResponse,
    ServiceInfoResponse,
)
from embedder.config import settings
from embedder.services.embedding import (
    EmbeddingGenerationError,
    InitializationError,
    InvalidInputError,
    embedding_service,
)

logger = logging.getLogger(__name__)

router = APIRouter()

T = TypeVar("T")

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid input"},
    408: {"model": ErrorResponse, "description": "Request timed out"},
    500: {"model": ErrorResponse, "description": "Embedding generation failed"},
    503: {"model": ErrorResponse, "description": "Embedding model unavailable"},
}


async def _with_deadline(operation: Awaitable[T]) -> T:
    """Await an embedding operation, translating failures into HTTP errors."""
    try:
        return await asyncio.wait_for(operation, timeout=settings.request_timeout_seconds)
    except asyncio.TimeoutError:
        logger.error(
            f"Embedding request exceeded {settings.request_timeout_seconds}s deadline"
        )
        raise HTTPException(
            status_code=408,
            detail="Request timeout - embedding is taking longer than expected. Please try again.",
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except InitializationError as e:
        logger.error(f"Embedding model unavailable: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    except EmbeddingGenerationError as e:
        logger.error(f"Embedding generation error: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/api/embeddings", response_model=EmbedResponse, responses=ERROR_RESPONSES)
async def embed_documents(request: EmbedRequest) -> EmbedResponse:
    """Embed one text or a list of texts, preserving input order."""
    try:
        embeddings = await _with_deadline(embedding_service.embed_documents(request.texts))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Unexpected error embedding documents: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    return EmbedResponse(
        embeddings=embeddings,
        model=embedding_service.model_name,
        dimension=len(embeddings[0]),
        count=len(embeddings),
    )


@router.post(
    "/api/embeddings/query",
    response_model=QueryEmbedResponse,
    responses=ERROR_RESPONSES,
)
async def embed_query(request: QueryEmbedRequest) -> QueryEmbedResponse:
    """Embed a single query text."""
    try:
        embedding = await _with_deadline(embedding_service.embed_query(request.text))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Unexpected error embedding query: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")

    return QueryEmbedResponse(
        embedding=embedding,
        model=embedding_service.model_name,
        dimension=len(embedding),
    )


@router.get("/api/embeddings/info", response_model=ServiceInfoResponse)
async def service_info() -> ServiceInfoResponse:
    """Describe the embedding service and its current status."""
    info = await embedding_service.get_service_info()
    return ServiceInfoResponse(**info)


@router.get("/health", response_model=HealthResponse)
async def health(response: Response) -> HealthResponse:
    """Health check endpoint. Answers 503 while the model cannot be served."""
    result = await embedding_service.health_check()
    if result["status"] != "healthy":
        response.status_code = 503
    return HealthResponse(**result)
