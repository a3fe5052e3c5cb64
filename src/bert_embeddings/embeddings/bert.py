"""Embedding orchestrator.

Turns wordpiece-tokenized sentences into engine batches and maps the
returned vectors back onto the pieces:

1) [CLS] + piece ids + [SEP], truncated to max_sentence_length
2) group into batches of batch_size sentences
3) pad ids to the longest sequence in the batch, mask marks real positions
4) one engine.infer call per batch
5) drop boundary + padding positions, one vector per retained piece

Truncation policy: extra content pieces are dropped, the sentence is kept and
a warning is logged. A long sentence never fails the batch.
"""

from __future__ import annotations
import logging
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ..engines.base import InferenceEngine
from ..pipeline.context import (
    TokenPieceEmbeddings,
    WordpieceEmbeddingsSentence,
    WordpieceTokenizedSentence,
)
from .config import EmbeddingsConfig

log = logging.getLogger("bert_embeddings.embeddings")

PAD_ID = 0

def pad_batch(sequences: Sequence[Sequence[int]], pad_id: int = PAD_ID) -> Tuple[np.ndarray, np.ndarray]:
    """Pad id sequences to a common length.

    Returns (ids, mask), both int64 of shape (len(sequences), longest).
    """
    max_len = max((len(s) for s in sequences), default=0)
    ids = np.full((len(sequences), max_len), pad_id, dtype=np.int64)
    mask = np.zeros((len(sequences), max_len), dtype=np.int64)
    for row, seq in enumerate(sequences):
        ids[row, :len(seq)] = seq
        mask[row, :len(seq)] = 1
    return ids, mask

class BertEmbeddings:
    def __init__(
        self,
        engine: Optional[InferenceEngine],
        sentence_start_id: int,
        sentence_end_id: int,
        config: EmbeddingsConfig,
    ):
        if engine is None:
            raise RuntimeError("Inference engine must be set before usage. Use method set_engine() for it.")
        self.engine = engine
        self.sentence_start_id = sentence_start_id
        self.sentence_end_id = sentence_end_id
        self.config = config

    @property
    def max_content_pieces(self) -> int:
        return self.config.max_sentence_length - 2

    def encode(self, sentence: WordpieceTokenizedSentence) -> List[int]:
        ids = [p.piece_id for p in sentence.tokens]
        if len(ids) > self.max_content_pieces:
            log.warning(
                f"Sentence {sentence.sentence_index} has {len(ids)} pieces; "
                f"truncating to {self.max_content_pieces} (max_sentence_length={self.config.max_sentence_length})"
            )
            ids = ids[:self.max_content_pieces]
        return [self.sentence_start_id] + ids + [self.sentence_end_id]

    def calculate_embeddings(self, sentences: Sequence[WordpieceTokenizedSentence]) -> List[WordpieceEmbeddingsSentence]:
        out: List[WordpieceEmbeddingsSentence] = []
        bs = self.config.batch_size
        for b in range(0, len(sentences), bs):
            batch = sentences[b:b + bs]
            out.extend(self._run_batch(batch))
        return out

    def _run_batch(self, batch: Sequence[WordpieceTokenizedSentence]) -> List[WordpieceEmbeddingsSentence]:
        encoded = [self.encode(s) for s in batch]
        ids, mask = pad_batch(encoded)
        vectors = np.asarray(self.engine.infer(ids, mask, self.config.dim))

        expected = (len(batch), ids.shape[1], self.config.dim)
        if vectors.shape != expected:
            raise ValueError(f"Engine returned shape {vectors.shape}, expected {expected}")

        results = []
        for row, (sentence, seq) in enumerate(zip(batch, encoded)):
            kept = len(seq) - 2
            token_vectors = vectors[row, 1:kept + 1]
            pieces = [
                TokenPieceEmbeddings.from_piece(piece, vec.astype(np.float32).tolist())
                for piece, vec in zip(sentence.tokens[:kept], token_vectors)
            ]
            results.append(WordpieceEmbeddingsSentence(tokens=pieces, sentence_index=sentence.sentence_index))
        return results
