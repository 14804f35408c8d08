"""Pydantic models for API request/response validation."""

from pydantic import BaseModel, Field


class EmbedRequest(BaseModel):
    """Request body for the document embedding endpoint."""

    texts: str | list[str] = Field(
        ...,
        description="A single text or a non-empty list of texts to embed",
    )


class QueryEmbedRequest(BaseModel):
    """Request body for the query embedding endpoint."""

    text: str = Field(..., description="The query text to embed")


class EmbedResponse(BaseModel):
    """Embeddings for a batch of documents."""

    embeddings: list[list[float]]
    model: str = Field(..., description="Model identifier used for the embeddings")
    dimension: int = Field(..., description="Length of every embedding vector")
    count: int = Field(..., description="Number of embeddings returned")


class QueryEmbedResponse(BaseModel):
    """Embedding for a single query."""

    embedding: list[float]
    model: str
    dimension: int


class ErrorResponse(BaseModel):
    """Error response body."""

    error: str = Field(..., description="Error message")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description='Either "healthy" or "unhealthy"')
    model: str | None = None
    dimension: int | None = None
    initialized: bool | None = None
    error: str | None = None
    timestamp: str


class ServiceInfoResponse(BaseModel):
    """Descriptive metadata about the embedding service."""

    name: str
    model: str
    status: str
    dimension: int | None = None
    backend: str | None = None
    cost: str | None = None
    rate_limit: str | None = None
    error: str | None = None
