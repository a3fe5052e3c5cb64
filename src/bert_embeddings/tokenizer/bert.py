"""Full BERT tokenization: BasicTokenizer, then WordpieceEncoder per token."""

from __future__ import annotations
from typing import Dict, List, Sequence

from ..pipeline.context import Sentence, WordpieceTokenizedSentence
from .basic import BasicTokenizer
from .wordpiece import WordpieceEncoder

class BertWordpieceTokenizer:
    def __init__(self, vocabulary: Dict[str, int], lowercase: bool = True):
        self.basic = BasicTokenizer(lowercase)
        self.encoder = WordpieceEncoder(vocabulary)

    def tokenize(self, sentences: Sequence[Sentence]) -> List[WordpieceTokenizedSentence]:
        out = []
        for s in sentences:
            pieces = []
            for token in self.basic.tokenize(s):
                pieces.extend(self.encoder.encode(token))
            out.append(WordpieceTokenizedSentence(tokens=pieces, sentence_index=s.index))
        return out
