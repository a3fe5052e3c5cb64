"""Embeddings configuration.

One frozen dataclass, validated at construction. `max_sentence_length`
counts every piece fed to the engine, including the [CLS] and [SEP] markers.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict

@dataclass(frozen=True)
class EmbeddingsConfig:
    max_sentence_length: int = 256
    batch_size: int = 5
    dim: int = 768
    lowercase: bool = True

    def __post_init__(self) -> None:
        for name in ("max_sentence_length", "batch_size", "dim"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, int):
                raise ValueError(f"{name} must be an int, got {v!r}")
            if v <= 0:
                raise ValueError(f"{name} must be positive, got {v}")
        if self.max_sentence_length <= 2:
            raise ValueError(
                f"max_sentence_length={self.max_sentence_length} leaves no room for content "
                f"besides the two boundary markers"
            )
        if not isinstance(self.lowercase, bool):
            raise ValueError(f"lowercase must be a bool, got {self.lowercase!r}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "EmbeddingsConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(d) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}. Known: {sorted(known)}")
        return cls(**d)

    def replace(self, **changes: Any) -> "EmbeddingsConfig":
        return replace(self, **changes)
