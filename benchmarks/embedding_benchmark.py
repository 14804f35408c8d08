"""Benchmark embedding models and batch sizes through EmbeddingService.

Run with: python benchmarks/embedding_benchmark.py

This script compares different SentenceTransformer models on:
- Speed (embeddings per second) at several batch sizes
- Quality (semantic similarity separation)
"""

import asyncio
import time
from dataclasses import dataclass

import numpy as np

from embedder.services.embedding import EmbeddingService

# Test sentences for semantic similarity
SIMILAR_PAIRS = [
    ("the cat sat", "a cat is sitting"),
    ("How do I learn Python?", "What's the best way to learn Python programming?"),
    ("What is machine learning?", "Explain ML to me"),
    ("The invoice is overdue", "This bill has not been paid on time"),
]

DISSIMILAR_PAIRS = [
    ("the cat sat", "stock market crashed today"),
    ("What is Python?", "What's the weather today?"),
    ("Who invented the telephone?", "What is quantum physics?"),
    ("The invoice is overdue", "How do I bake a cake?"),
]

BATCH_SIZES = [1, 8, 32]


@dataclass
class BenchmarkResult:
    """Results from benchmarking an embedding model."""

    model_name: str
    dimension: int
    load_time_s: float
    throughput: dict[int, float]  # batch size -> embeddings per second
    avg_similar_distance: float
    avg_dissimilar_distance: float
    separation_ratio: float  # dissimilar / similar (higher is better)


def cosine_distance(a: list[float], b: list[float]) -> float:
    """Cosine distance for unit-length vectors."""
    return float(1 - np.dot(a, b))


async def benchmark_model(model_name: str, num_iterations: int = 5) -> BenchmarkResult:
    """Benchmark a single embedding model."""
    print(f"\nBenchmarking: {model_name}")
    print("-" * 50)

    service = EmbeddingService(model_name=model_name)

    load_start = time.time()
    await service.initialize()
    load_time = time.time() - load_start
    print(f"  Model load time: {load_time:.2f}s")

    dimension = await service.get_embedding_dimension()
    print(f"  Embedding dimension: {dimension}")

    all_texts = [q for pair in SIMILAR_PAIRS + DISSIMILAR_PAIRS for q in pair]

    throughput = {}
    for batch_size in BATCH_SIZES:
        service.batch_size = batch_size
        await service.embed_documents(all_texts)  # warmup

        times = []
        for _ in range(num_iterations):
            start = time.time()
            await service.embed_documents(all_texts)
            times.append(time.time() - start)

        throughput[batch_size] = len(all_texts) / float(np.mean(times))
        print(f"  Batch size {batch_size:>3}: {throughput[batch_size]:.0f} embeddings/sec")

    async def avg_distance(pairs):
        distances = []
        for q1, q2 in pairs:
            emb1, emb2 = await service.embed_documents([q1, q2])
            distances.append(cosine_distance(emb1, emb2))
        return float(np.mean(distances))

    avg_similar = await avg_distance(SIMILAR_PAIRS)
    avg_dissimilar = await avg_distance(DISSIMILAR_PAIRS)
    print(f"  Avg similar pair distance: {avg_similar:.4f}")
    print(f"  Avg dissimilar pair distance: {avg_dissimilar:.4f}")

    separation_ratio = avg_dissimilar / avg_similar if avg_similar > 0 else 0
    print(f"  Separation ratio: {separation_ratio:.2f}x (higher is better)")

    return BenchmarkResult(
        model_name=model_name,
        dimension=dimension,
        load_time_s=load_time,
        throughput=throughput,
        avg_similar_distance=avg_similar,
        avg_dissimilar_distance=avg_dissimilar,
        separation_ratio=separation_ratio,
    )


async def main():
    """Run benchmarks on multiple models."""
    print("=" * 60)
    print("EMBEDDING MODEL BENCHMARK")
    print("=" * 60)

    models = [
        "sentence-transformers/all-MiniLM-L6-v2",  # 384 dim, default
        "sentence-transformers/all-MiniLM-L12-v2",  # 384 dim, slightly better quality
        "sentence-transformers/all-mpnet-base-v2",  # 768 dim, best quality, slower
    ]

    results = []
    for model_name in models:
        try:
            results.append(await benchmark_model(model_name))
        except Exception as e:
            print(f"  Error: {e}")

    if not results:
        print("\nNo model could be benchmarked.")
        return

    print("\n" + "=" * 60)
    print("SUMMARY")
    print("=" * 60)
    header = "".join(f"{'bs=' + str(b):<10}" for b in BATCH_SIZES)
    print(f"{'Model':<42} {'Dim':<6} {header}{'Sep.Ratio':<10}")
    print("-" * (60 + 10 * len(BATCH_SIZES)))

    for r in sorted(results, key=lambda x: x.throughput[BATCH_SIZES[-1]], reverse=True):
        rates = "".join(f"{r.throughput[b]:<10.0f}" for b in BATCH_SIZES)
        print(f"{r.model_name:<42} {r.dimension:<6} {rates}{r.separation_ratio:<10.2f}")


if __name__ == "__main__":
    asyncio.run(main())
