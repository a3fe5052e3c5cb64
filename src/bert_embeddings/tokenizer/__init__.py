"""Tokenization: basic splitting, wordpiece encoding, vocabulary files."""

from .basic import BasicTokenizer
from .bert import BertWordpieceTokenizer
from .vocab import CLS_TOKEN, SEP_TOKEN, UNK_TOKEN, load_vocab
from .wordpiece import WordpieceEncoder

__all__ = [
    "BasicTokenizer",
    "BertWordpieceTokenizer",
    "CLS_TOKEN",
    "SEP_TOKEN",
    "UNK_TOKEN",
    "WordpieceEncoder",
    "load_vocab",
]
