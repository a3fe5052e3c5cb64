"""Greedy longest-match-first wordpiece encoder.

For every start position the longest vocabulary entry wins; pieces after the
first are looked up with the `##` continuation prefix. If some position has
no match at all, the whole token collapses into a single unknown piece.
"""

from __future__ import annotations
from typing import Dict, List

from ..pipeline.context import IndexedToken, TokenPiece
from .vocab import UNK_TOKEN

class WordpieceEncoder:
    def __init__(self, vocabulary: Dict[str, int], unk_token: str = UNK_TOKEN, part_prefix: str = "##"):
        if unk_token not in vocabulary:
            raise ValueError(f"Vocabulary must contain the unknown token {unk_token!r}")
        self.vocabulary = vocabulary
        self.unk_token = unk_token
        self.unk_id = vocabulary[unk_token]
        self.part_prefix = part_prefix

    def encode(self, token: IndexedToken) -> List[TokenPiece]:
        text = token.token
        pieces: List[TokenPiece] = []
        start = 0
        while start < len(text):
            end = len(text)
            found = None
            while end > start:
                candidate = text[start:end]
                if start > 0:
                    candidate = self.part_prefix + candidate
                piece_id = self.vocabulary.get(candidate)
                if piece_id is not None:
                    found = (candidate, piece_id)
                    break
                end -= 1
            if found is None:
                return [TokenPiece(self.unk_token, text, self.unk_id, True, token.begin, token.end)]
            pieces.append(TokenPiece(found[0], text, found[1], start == 0, token.begin, token.end))
            start = end
        return pieces
