"""Annotations exchanged with the host pipeline.

The host hands us DOCUMENT annotations (one per already-split sentence) and
gets back WORD_EMBEDDINGS annotations, one per retained token.

Packing policy: a token that expanded into several wordpieces keeps only the
vector of its first piece. Later pieces are dropped.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence

from .pipeline.context import Sentence, WordpieceEmbeddingsSentence

class AnnotatorType:
    DOCUMENT = "document"
    WORD_EMBEDDINGS = "word_embeddings"

@dataclass
class Annotation:
    annotator_type: str
    begin: int
    end: int
    result: str
    metadata: Dict[str, str] = field(default_factory=dict)
    embeddings: List[float] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "annotator_type": self.annotator_type,
            "begin": self.begin,
            "end": self.end,
            "result": self.result,
            "metadata": dict(self.metadata),
            "embeddings": list(self.embeddings),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Annotation":
        return cls(
            annotator_type=d["annotator_type"],
            begin=int(d["begin"]),
            end=int(d["end"]),
            result=d.get("result", "") or "",
            metadata=dict(d.get("metadata") or {}),
            embeddings=list(d.get("embeddings") or []),
        )

def document_annotation(text: str, begin: int = 0, **metadata: str) -> Annotation:
    """Wrap a sentence string as a DOCUMENT annotation."""
    return Annotation(
        annotator_type=AnnotatorType.DOCUMENT,
        begin=begin,
        end=begin + len(text) - 1,
        result=text,
        metadata={k: str(v) for k, v in metadata.items()},
    )

def unpack_sentences(annotations: Sequence[Annotation]) -> List[Sentence]:
    """DOCUMENT annotations -> Sentences, indexed in input order."""
    docs = [a for a in annotations if a.annotator_type == AnnotatorType.DOCUMENT]
    return [
        Sentence(content=a.result, start=a.begin, end=a.end, index=i)
        for i, a in enumerate(docs)
    ]

def pack_embeddings(sentences: Sequence[WordpieceEmbeddingsSentence]) -> List[Annotation]:
    out: List[Annotation] = []
    for sentence in sentences:
        for piece in sentence.tokens:
            if not piece.is_word_start:
                continue
            out.append(Annotation(
                annotator_type=AnnotatorType.WORD_EMBEDDINGS,
                begin=piece.begin,
                end=piece.end,
                result=piece.token,
                metadata={
                    "sentence": str(sentence.sentence_index),
                    "token": piece.token,
                    "wordpiece": piece.wordpiece,
                    "pieceId": str(piece.piece_id),
                    "isWordStart": "true",
                },
                embeddings=list(piece.embeddings),
            ))
    return out
