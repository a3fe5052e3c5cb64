"""
Shared test fixtures.

Provides: a stub inference engine (no tensor runtime), small vocabularies,
configs and a ready-to-use model.
"""

import json
import os
from typing import List, Tuple

import numpy as np
import pytest

from bert_embeddings.embeddings.config import EmbeddingsConfig
from bert_embeddings.embeddings.model import BertEmbeddingsModel
from bert_embeddings.engines.base import InferenceEngine
from bert_embeddings.engines.registry import register_engine, unregister_engine

DIM = 4


class StubEngine(InferenceEngine):
    """Returns float(piece_id) in every dimension, 0 at padding positions."""

    kind = "stub"

    def __init__(self, tag: str = "stub"):
        self.tag = tag
        self.calls: List[Tuple[np.ndarray, np.ndarray, int]] = []

    def infer(self, input_ids, attention_mask, dim):
        self.calls.append((input_ids.copy(), attention_mask.copy(), dim))
        vals = (input_ids * attention_mask).astype(np.float32)
        return np.repeat(vals[:, :, None], dim, axis=2)

    def save(self, path):
        os.makedirs(path, exist_ok=True)
        with open(os.path.join(path, "stub.json"), "w", encoding="utf-8") as f:
            json.dump({"tag": self.tag}, f)

    @classmethod
    def load(cls, path):
        with open(os.path.join(path, "stub.json"), "r", encoding="utf-8") as f:
            return cls(json.load(f)["tag"])


@pytest.fixture
def stub_engine():
    return StubEngine()


@pytest.fixture
def registered_stub():
    """Register the stub engine kind for save/load tests."""
    register_engine(StubEngine.kind, StubEngine.load)
    yield StubEngine
    unregister_engine(StubEngine.kind)


@pytest.fixture
def vocab():
    return {"[CLS]": 0, "[SEP]": 1, "hello": 2, "world": 3, "[UNK]": 4}


@pytest.fixture
def rich_vocab(vocab):
    v = dict(vocab)
    v.update({"un": 5, "##aff": 6, "##able": 7, "unable": 8, ",": 9, "!": 10})
    return v


@pytest.fixture
def config():
    return EmbeddingsConfig(max_sentence_length=10, batch_size=2, dim=DIM)


@pytest.fixture
def model(config, vocab, stub_engine):
    return BertEmbeddingsModel(config=config, vocabulary=vocab, engine=stub_engine)
