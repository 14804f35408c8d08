"""Fake model and loader so unit tests never download weights."""

import hashlib
import threading
import time

import numpy as np

FAKE_DIMENSION = 16


class FakeModel:
    """Stand-in for SentenceTransformer returning deterministic token embeddings."""

    def __init__(
        self,
        dimension: int = FAKE_DIMENSION,
        fail_on: set[str] | None = None,
        delay: float = 0.0,
    ):
        self.dimension = dimension
        self.fail_on = fail_on or set()
        self.delay = delay
        self.calls: list[str] = []
        self.active = 0
        self.peak_active = 0
        self._lock = threading.Lock()

    def encode(self, text, output_value="sentence_embedding", show_progress_bar=False):
        with self._lock:
            self.calls.append(text)
            self.active += 1
            self.peak_active = max(self.peak_active, self.active)
        try:
            if self.delay:
                time.sleep(self.delay)
            return self._token_embeddings(text)
        finally:
            with self._lock:
                self.active -= 1

    def _token_embeddings(self, text):
        if text in self.fail_on:
            raise RuntimeError(f"inference failed for {text!r}")
        seed = int.from_bytes(hashlib.md5(text.encode("utf-8")).digest()[:4], "little")
        rng = np.random.default_rng(seed)
        num_tokens = len(text.split()) + 2
        return rng.normal(size=(num_tokens, self.dimension)).astype(np.float32)


class FakeLoader:
    """Model loader that counts how often it is invoked."""

    def __init__(self, model=None, error: Exception | None = None, delay: float = 0.05):
        self.model = model or FakeModel()
        self.error = error
        self.delay = delay
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self, model_name: str):
        with self._lock:
            self.calls += 1
        time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.model
