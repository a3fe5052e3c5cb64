"""Embedding orchestration, configuration and the model container."""

from .bert import PAD_ID, BertEmbeddings, pad_batch
from .config import EmbeddingsConfig
from .model import BertEmbeddingsModel

__all__ = ["PAD_ID", "BertEmbeddings", "BertEmbeddingsModel", "EmbeddingsConfig", "pad_batch"]
