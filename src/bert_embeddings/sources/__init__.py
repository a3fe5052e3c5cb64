from .base import InputSpec, RawSentence
from .local import LocalFileSource

__all__ = ["InputSpec", "LocalFileSource", "RawSentence"]
