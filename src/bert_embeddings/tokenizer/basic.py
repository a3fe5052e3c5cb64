"""Basic (pre-wordpiece) tokenizer.

Splits a sentence on whitespace, emits punctuation and CJK ideographs as
single-character tokens and drops control characters. Normalization
(lowercasing + accent stripping) is applied per token after splitting so the
offsets still refer to the original text.
"""

from __future__ import annotations
import unicodedata
from typing import List

from ..pipeline.context import IndexedToken, Sentence

def is_whitespace(ch: str) -> bool:
    if ch in (" ", "\t", "\n", "\r"):
        return True
    return unicodedata.category(ch) == "Zs"

def is_control(ch: str) -> bool:
    if ch in ("\t", "\n", "\r"):
        return False
    return unicodedata.category(ch) in ("Cc", "Cf")

def is_punctuation(ch: str) -> bool:
    cp = ord(ch)
    # ASCII symbols are treated as punctuation even where Unicode disagrees ("$", "^", "`")
    if 33 <= cp <= 47 or 58 <= cp <= 64 or 91 <= cp <= 96 or 123 <= cp <= 126:
        return True
    return unicodedata.category(ch).startswith("P")

def is_chinese_char(ch: str) -> bool:
    cp = ord(ch)
    return (
        0x4E00 <= cp <= 0x9FFF
        or 0x3400 <= cp <= 0x4DBF
        or 0x20000 <= cp <= 0x2A6DF
        or 0x2A700 <= cp <= 0x2B73F
        or 0x2B740 <= cp <= 0x2B81F
        or 0x2B820 <= cp <= 0x2CEAF
        or 0xF900 <= cp <= 0xFAFF
        or 0x2F800 <= cp <= 0x2FA1F
    )

def _is_filtered(ch: str) -> bool:
    return ord(ch) == 0 or ord(ch) == 0xFFFD or is_control(ch)

def strip_accents(text: str) -> str:
    nfd = unicodedata.normalize("NFD", text)
    return "".join(c for c in nfd if unicodedata.category(c) != "Mn")

class BasicTokenizer:
    def __init__(self, lowercase: bool = True):
        self.lowercase = bool(lowercase)

    def normalize(self, text: str) -> str:
        if not self.lowercase:
            return text
        return strip_accents(text.lower())

    def tokenize(self, sentence: Sentence) -> List[IndexedToken]:
        tokens: List[IndexedToken] = []
        buf: List[str] = []
        buf_start = 0

        def flush() -> None:
            if buf:
                text = "".join(buf)
                tokens.append(IndexedToken(text, buf_start, buf_start + len(text) - 1))
                buf.clear()

        for i, ch in enumerate(sentence.content):
            pos = sentence.start + i
            if _is_filtered(ch):
                # dropped chars still break the span so offsets stay contiguous
                flush()
            elif is_whitespace(ch):
                flush()
            elif is_punctuation(ch) or is_chinese_char(ch):
                flush()
                tokens.append(IndexedToken(ch, pos, pos))
            else:
                if not buf:
                    buf_start = pos
                buf.append(ch)
        flush()

        out = []
        for t in tokens:
            norm = self.normalize(t.token)
            if norm:
                out.append(IndexedToken(norm, t.begin, t.end))
        return out
