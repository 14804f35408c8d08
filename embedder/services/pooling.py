"""Pooling helpers that turn token embeddings into sentence vectors."""

import numpy as np

_EPSILON = 1e-12


def to_array(token_embeddings) -> np.ndarray:
    """Convert a torch tensor or array-like into a float32 numpy array."""
    if hasattr(token_embeddings, "detach"):
        token_embeddings = token_embeddings.detach().cpu().float().numpy()
    return np.asarray(token_embeddings, dtype=np.float32)


def mean_pool(token_embeddings: np.ndarray) -> np.ndarray:
    """Average per-token vectors of shape (tokens, dim) into one (dim,) vector."""
    if token_embeddings.ndim == 1:
        return token_embeddings
    if token_embeddings.shape[0] == 0:
        raise ValueError("Cannot pool an empty token sequence")
    return token_embeddings.mean(axis=0)


def l2_normalize(vector: np.ndarray) -> np.ndarray:
    """Rescale a vector to unit Euclidean length."""
    norm = np.linalg.norm(vector)
    return vector / max(norm, _EPSILON)


def sentence_vector(token_embeddings) -> list[float]:
    """Mean-pool then normalize model output into a plain list of floats."""
    pooled = mean_pool(to_array(token_embeddings))
    return l2_normalize(pooled).astype(np.float32).tolist()
