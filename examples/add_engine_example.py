"""Example: Adding a new inference engine without modifying engines/registry.py.

Saved models record their engine kind in metadata.json; registering a loader
under that kind is all BertEmbeddingsModel.load() needs.
"""

import os
import numpy as np

from bert_embeddings.engines.base import InferenceEngine
from bert_embeddings.engines.registry import register_engine, list_engines

# Example: engine that returns random vectors (useful for wiring tests)
class RandomEngine(InferenceEngine):
    kind = "random"

    def __init__(self, seed: int = 0):
        self.seed = seed

    def infer(self, input_ids: np.ndarray, attention_mask: np.ndarray, dim: int) -> np.ndarray:
        rng = np.random.default_rng(self.seed)
        out = rng.standard_normal((*input_ids.shape, dim)).astype(np.float32)
        return out * attention_mask[..., None]

    def save(self, path: str) -> None:
        os.makedirs(path, exist_ok=True)
        with open(os.path.join(path, "seed.txt"), "w", encoding="utf-8") as f:
            f.write(str(self.seed))

    @classmethod
    def load(cls, path: str) -> "RandomEngine":
        with open(os.path.join(path, "seed.txt"), "r", encoding="utf-8") as f:
            return cls(int(f.read().strip()))

# Register it
register_engine("random", RandomEngine.load)

# Verify registration
print("Registered engines:")
for kind, engine_type in list_engines().items():
    print(f"  {kind}: {engine_type}")

# Now models saved with a RandomEngine load back with it:
# model = BertEmbeddingsModel(vocabulary=vocab, engine=RandomEngine(42))
# model.save("models/random_bert")
# BertEmbeddingsModel.load("models/random_bert").engine  -> RandomEngine
