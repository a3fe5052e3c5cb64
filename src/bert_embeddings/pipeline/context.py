"""Core data model.

Sentences come in from the host pipeline, are split into IndexedTokens,
expanded into TokenPieces and finally carry one embedding vector per piece.

All offsets are absolute character positions in the source document and
`end` is inclusive, the same convention Annotation uses. A TokenPiece keeps
the offsets of the token it came from, not of the piece itself.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

@dataclass(frozen=True)
class Sentence:
    content: str
    start: int
    end: int
    index: int = 0

@dataclass(frozen=True)
class IndexedToken:
    token: str
    begin: int
    end: int

@dataclass(frozen=True)
class TokenPiece:
    wordpiece: str
    token: str          # originating word (normalized)
    piece_id: int
    is_word_start: bool
    begin: int
    end: int

@dataclass
class WordpieceTokenizedSentence:
    tokens: List[TokenPiece] = field(default_factory=list)
    sentence_index: int = 0

@dataclass(frozen=True)
class TokenPieceEmbeddings:
    wordpiece: str
    token: str
    piece_id: int
    is_word_start: bool
    begin: int
    end: int
    embeddings: List[float]

    @classmethod
    def from_piece(cls, piece: TokenPiece, embeddings: List[float]) -> "TokenPieceEmbeddings":
        return cls(
            wordpiece=piece.wordpiece,
            token=piece.token,
            piece_id=piece.piece_id,
            is_word_start=piece.is_word_start,
            begin=piece.begin,
            end=piece.end,
            embeddings=embeddings,
        )

@dataclass
class WordpieceEmbeddingsSentence:
    tokens: List[TokenPieceEmbeddings] = field(default_factory=list)
    sentence_index: int = 0
