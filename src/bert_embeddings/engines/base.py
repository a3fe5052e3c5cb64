"""Inference engine interface.

The only thing embedding code knows about the tensor runtime:
- infer(input_ids, attention_mask, dim) -> float array (batch, seq_len, dim)
- save(path) / load(path) for persisting the artifact next to our metadata

Engines must be safe to share for concurrent read-only `infer` calls and are
never mutated after being attached to a model.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
import numpy as np

class InferenceEngine(ABC):
    kind: str = "engine"

    @abstractmethod
    def infer(self, input_ids: np.ndarray, attention_mask: np.ndarray, dim: int) -> np.ndarray:
        """Run one padded batch.

        Args:
            input_ids: int64 array (batch, seq_len)
            attention_mask: int64 array (batch, seq_len), 1 = real position, 0 = padding
            dim: expected embedding dimension

        Returns:
            float array of shape (batch, seq_len, dim)
        """
        raise NotImplementedError

    @abstractmethod
    def save(self, path: str) -> None:
        """Write the engine artifact into directory `path`."""
        raise NotImplementedError

    @classmethod
    def load(cls, path: str) -> "InferenceEngine":
        raise NotImplementedError(f"{cls.__name__} cannot be loaded from disk")
