"""Integration tests that load the real embedding model.

Deselected by default. Run with: pytest -m integration tests/test_integration.py -v

Prerequisites:
- Network access to download the model, or a copy in MODELS_CACHE_DIR
"""

import asyncio
from unittest.mock import patch

import numpy as np
import pytest
from httpx import ASGITransport, AsyncClient

from embedder.config import settings
from embedder.services.embedding import EmbeddingService, load_sentence_transformer

pytestmark = pytest.mark.integration


def cosine(a: list[float], b: list[float]) -> float:
    """Cosine similarity between two vectors."""
    a_arr, b_arr = np.asarray(a), np.asarray(b)
    return float(np.dot(a_arr, b_arr) / (np.linalg.norm(a_arr) * np.linalg.norm(b_arr)))


@pytest.fixture(scope="module")
def real_model():
    """Load the configured model once, skipping the module if unavailable."""
    try:
        return load_sentence_transformer(settings.embedding_model)
    except Exception as e:
        pytest.skip(f"Embedding model not available: {e}")


@pytest.fixture
def real_service(real_model):
    """Service backed by the already loaded real model."""
    return EmbeddingService(model_loader=lambda model_name: real_model)


class TestEmbeddingIntegration:
    """Test embedding service with the real model."""

    @pytest.mark.asyncio
    async def test_real_embedding_dimension(self, real_service):
        """Test that MiniLM produces 384-dimensional vectors."""
        dimension = await real_service.get_embedding_dimension()
        embedding = await real_service.embed_query("What is the capital of France?")

        assert dimension == 384
        assert len(embedding) == dimension

    @pytest.mark.asyncio
    async def test_real_embeddings_normalized(self, real_service):
        """Test that real embeddings have unit length."""
        embeddings = await real_service.embed_documents(
            [f"sentence number {i} about embeddings" for i in range(10)]
        )

        for embedding in embeddings:
            assert abs(np.linalg.norm(embedding) - 1.0) < 1e-3

    @pytest.mark.asyncio
    async def test_real_semantic_similarity(self, real_service):
        """Test that paraphrases are closer than unrelated sentences."""
        cat_sat, cat_sitting, stocks = await real_service.embed_documents(
            ["the cat sat", "a cat is sitting", "stock market crashed today"]
        )

        assert cosine(cat_sat, cat_sitting) > cosine(cat_sat, stocks)

    @pytest.mark.asyncio
    async def test_batched_matches_single(self, real_service):
        """Test that batching does not change individual embeddings."""
        texts = [f"document {i}: the quick brown fox" for i in range(12)]

        batched = await real_service.embed_documents(texts)
        single = [await real_service.embed_query(text) for text in texts]

        for a, b in zip(batched, single):
            assert a == pytest.approx(b, abs=1e-5)

    @pytest.mark.asyncio
    async def test_concurrent_first_use_loads_once(self, real_model):
        """Test that concurrent first callers share one model load."""
        loads = []

        def loader(model_name):
            loads.append(model_name)
            return real_model

        service = EmbeddingService(model_loader=loader)

        results = await asyncio.gather(
            *(service.embed_query(f"query {i}") for i in range(4))
        )

        assert len(results) == 4
        assert len(loads) == 1
        assert service.is_initialized

    @pytest.mark.asyncio
    async def test_real_health_check(self, real_service):
        """Test the health record with a real model."""
        health = await real_service.health_check()

        assert health["status"] == "healthy"
        assert health["model"] == settings.embedding_model
        assert health["dimension"] == 384


class TestAPIIntegration:
    """Test the HTTP surface against the real model."""

    @pytest.mark.asyncio
    async def test_embed_endpoint(self, real_service):
        """Test the embedding endpoint end to end."""
        from embedder.main import app

        with patch("embedder.api.routes.embedding_service", real_service):
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.post(
                    "/api/embeddings",
                    json={"texts": ["the cat sat", "a cat is sitting"]},
                )

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 2
        assert data["dimension"] == 384
