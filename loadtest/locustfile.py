"""Load testing script for the embedding service API using Locust.

Run with: locust -f loadtest/locustfile.py --host=http://localhost:8000

Or headless mode:
    locust -f loadtest/locustfile.py --host=http://localhost:8000 \
           --headless -u 10 -r 2 -t 60s
"""

import random

from locust import HttpUser, between, task

DOCUMENTS = [
    "The quarterly report shows revenue growth across all regions.",
    "Python is a popular programming language for data science.",
    "The mitochondria is the powerhouse of the cell.",
    "Photosynthesis converts light energy into chemical energy.",
    "The contract terminates thirty days after written notice.",
    "Machine learning models require representative training data.",
    "The speed of light in a vacuum is constant.",
    "Invoices must be paid within the agreed payment terms.",
    "The cat sat on the mat next to the window.",
    "Stock markets fell sharply after the announcement.",
]

QUERIES = [
    "What does the contract say about termination?",
    "How do plants make energy?",
    "Which language is used for data science?",
    "When are invoices due?",
    "Where did the cat sit?",
]


class EmbeddingUser(HttpUser):
    """Simulated client embedding documents and queries."""

    wait_time = between(0.5, 2.0)  # Wait 0.5-2 seconds between requests

    @task(10)
    def embed_query(self):
        """Embed a single query."""
        self.client.post(
            "/api/embeddings/query",
            json={"text": random.choice(QUERIES)},
            name="/api/embeddings/query",
        )

    @task(5)
    def embed_small_batch(self):
        """Embed fewer documents than one batch."""
        self.client.post(
            "/api/embeddings",
            json={"texts": random.sample(DOCUMENTS, 3)},
            name="/api/embeddings (small)",
        )

    @task(2)
    def embed_large_batch(self):
        """Embed enough documents to span several batches."""
        texts = [random.choice(DOCUMENTS) for _ in range(20)]
        self.client.post(
            "/api/embeddings",
            json={"texts": texts},
            name="/api/embeddings (large)",
        )

    @task(1)
    def check_info(self):
        """Check service info."""
        self.client.get("/api/embeddings/info", name="/api/embeddings/info")

    @task(1)
    def check_health(self):
        """Check health endpoint."""
        self.client.get("/health", name="/health")


class HeavyLoadUser(HttpUser):
    """User that generates heavy load with rapid requests."""

    wait_time = between(0.1, 0.5)  # Very short wait times

    @task
    def rapid_embeddings(self):
        """Rapid-fire document batches to stress inference."""
        self.client.post(
            "/api/embeddings",
            json={"texts": random.sample(DOCUMENTS, 8)},
            name="/api/embeddings (rapid)",
        )
