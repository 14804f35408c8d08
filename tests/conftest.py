"""Pytest fixtures for embedding service tests."""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from tests.fakes import FakeLoader, FakeModel


@pytest.fixture
def fake_model():
    """Deterministic fake embedding model."""
    return FakeModel()


@pytest.fixture
def fake_loader(fake_model):
    """Loader returning the fake model."""
    return FakeLoader(model=fake_model)


@pytest.fixture
def service(fake_loader):
    """Fresh embedding service backed by the fake model."""
    from embedder.services.embedding import EmbeddingService

    return EmbeddingService(model_name="fake-model", batch_size=8, model_loader=fake_loader)


@pytest.fixture
def mock_embedding_service():
    """Mock embedding service for API tests."""
    with patch("embedder.api.routes.embedding_service") as mock:
        mock.model_name = "fake-model"
        mock.embed_documents = AsyncMock(return_value=[[1.0, 0.0], [0.0, 1.0]])
        mock.embed_query = AsyncMock(return_value=[0.6, 0.8])
        mock.health_check = AsyncMock(
            return_value={
                "status": "healthy",
                "model": "fake-model",
                "dimension": 2,
                "initialized": True,
                "timestamp": "2024-01-01T00:00:00+00:00",
            }
        )
        mock.get_service_info = AsyncMock(
            return_value={
                "name": "SentenceTransformers Embeddings",
                "model": "fake-model",
                "status": "healthy",
                "dimension": 2,
                "backend": "local",
                "cost": "free",
                "rate_limit": "none",
            }
        )
        mock.initialize = AsyncMock()
        yield mock


@pytest.fixture
async def client(mock_embedding_service):
    """Async HTTP client for testing FastAPI endpoints."""
    with patch("embedder.main.embedding_service", mock_embedding_service):
        from embedder.main import app
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as c:
            yield c
