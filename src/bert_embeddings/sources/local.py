"""Local files source.

Supported formats:
- jsonl: one JSON object per line with at least `text_field`
- parquet: rows with at least `text_field`
- txt: one sentence per line, ids are `<file stem>_<line>`

`path` may be a single file, a list of files, a directory (recursive) or a
glob pattern.
"""

from __future__ import annotations
import glob
import json
import logging
import os
from pathlib import Path
from typing import Iterable, List, Union

import pyarrow.parquet as pq

from .base import InputSource, InputSpec, RawSentence

log = logging.getLogger("bert_embeddings.sources.local")

_EXTENSIONS = {"jsonl": ".jsonl", "parquet": ".parquet", "txt": ".txt"}

class LocalFileSource(InputSource):
    def __init__(self, spec: InputSpec):
        if spec.format not in _EXTENSIONS:
            raise ValueError(f"Unknown input format: {spec.format}. Available: {list(_EXTENSIONS)}")
        self.spec = spec
        self.files = self._resolve_files(spec.path)

    def _resolve_files(self, path: Union[str, List[str]]) -> List[str]:
        ext = _EXTENSIONS[self.spec.format]
        if isinstance(path, list):
            files: List[str] = []
            for item in path:
                files.extend(self._resolve_files(item))
            return files

        p = Path(path)
        if any(c in path for c in "*?["):
            return sorted(f for f in glob.glob(path, recursive=True) if os.path.isfile(f) and f.endswith(ext))
        if p.is_dir():
            return sorted(str(f) for f in p.rglob(f"*{ext}") if f.is_file())
        # Single file; a missing one is reported in stream()
        return [str(p)]

    def stream(self) -> Iterable[RawSentence]:
        for file_path in self.files:
            if not os.path.exists(file_path):
                log.warning(f"File not found: {file_path}, skipping")
                continue
            if self.spec.format == "jsonl":
                yield from self._stream_jsonl(file_path)
            elif self.spec.format == "parquet":
                yield from self._stream_parquet(file_path)
            else:
                yield from self._stream_txt(file_path)

    def _row_id(self, row: dict):
        if self.spec.id_field and row.get(self.spec.id_field) is not None:
            return str(row[self.spec.id_field])
        return None

    def _stream_jsonl(self, file_path: str) -> Iterable[RawSentence]:
        with open(file_path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    ex = json.loads(line)
                except json.JSONDecodeError as e:
                    log.warning(f"Invalid JSON in {file_path}:{line_num}: {e}")
                    continue
                yield RawSentence(
                    raw_id=self._row_id(ex) or f"{Path(file_path).stem}_{line_num}",
                    text=ex.get(self.spec.text_field, "") or "",
                )

    def _stream_parquet(self, file_path: str) -> Iterable[RawSentence]:
        pf = pq.ParquetFile(file_path)
        n = 0
        for batch in pf.iter_batches():
            for row in batch.to_pylist():
                n += 1
                yield RawSentence(
                    raw_id=self._row_id(row) or f"{Path(file_path).stem}_{n}",
                    text=row.get(self.spec.text_field, "") or "",
                )

    def _stream_txt(self, file_path: str) -> Iterable[RawSentence]:
        with open(file_path, "r", encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                text = line.rstrip("\r\n")
                if not text.strip():
                    continue
                yield RawSentence(raw_id=f"{Path(file_path).stem}_{line_num}", text=text)
