from .base import BatchStage
from .bert_embeddings import BertEmbeddingsStage

__all__ = ["BatchStage", "BertEmbeddingsStage"]
