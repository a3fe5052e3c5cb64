"""Input source interface.

Sentence splitting happens upstream: every record a source yields is one
sentence. Sources expose a `stream()` generator of RawSentence.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

@dataclass
class RawSentence:
    raw_id: Optional[str]
    text: str

@dataclass
class InputSpec:
    path: Union[str, List[str]]   # file, directory, glob, or list of those
    format: str = "jsonl"         # jsonl | parquet | txt
    text_field: str = "text"
    id_field: Optional[str] = "id"

class InputSource(ABC):
    """Base interface for all input sources."""

    @abstractmethod
    def stream(self) -> Iterable[RawSentence]:
        raise NotImplementedError
