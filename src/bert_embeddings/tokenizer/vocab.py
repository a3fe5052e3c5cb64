"""Vocabulary loading.

A vocabulary file is plain UTF-8 text, one sub-word per line; the id of an
entry is its zero-based line index. If a line repeats, the later index wins.
"""

from __future__ import annotations
from typing import Dict, Iterable, List, Tuple

CLS_TOKEN = "[CLS]"
SEP_TOKEN = "[SEP]"
UNK_TOKEN = "[UNK]"
REQUIRED_TOKENS: Tuple[str, ...] = (CLS_TOKEN, SEP_TOKEN, UNK_TOKEN)

def vocab_from_lines(lines: Iterable[str]) -> Dict[str, int]:
    return {line.rstrip("\r\n"): i for i, line in enumerate(lines)}

def load_vocab(path: str) -> Dict[str, int]:
    with open(path, "r", encoding="utf-8") as f:
        return vocab_from_lines(f)

def missing_tokens(vocabulary: Dict[str, int], required: Iterable[str] = REQUIRED_TOKENS) -> List[str]:
    return [t for t in required if t not in vocabulary]
