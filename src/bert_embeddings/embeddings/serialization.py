"""Saved-model layout.

<path>/
  metadata.json              class, uid, params, vocabulary fingerprint, engine kind
  fields/vocabulary.parquet  token (string), id (int64)
  bert_engine/               engine artifact, written by InferenceEngine.save()

metadata.json is written last (tmp file + rename), so a directory without it
is an incomplete save.
"""

from __future__ import annotations
from typing import Any, Dict
import json
import os

import pyarrow as pa
import pyarrow.parquet as pq

METADATA_FILE = "metadata.json"
VOCABULARY_FILE = os.path.join("fields", "vocabulary.parquet")
ENGINE_DIR = "bert_engine"

def vocabulary_schema() -> pa.Schema:
    return pa.schema([
        ("token", pa.string()),
        ("id", pa.int64()),
    ], metadata={"schema_version": "v1"})

def write_vocabulary(path: str, vocabulary: Dict[str, int]) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    items = sorted(vocabulary.items(), key=lambda kv: kv[1])
    table = pa.Table.from_pydict(
        {"token": [t for t, _ in items], "id": [i for _, i in items]},
        schema=vocabulary_schema(),
    )
    pq.write_table(table, path, compression="zstd")

def read_vocabulary(path: str) -> Dict[str, int]:
    table = pq.read_table(path, columns=["token", "id"])
    return dict(zip(table.column("token").to_pylist(), table.column("id").to_pylist()))

def write_metadata(path: str, metadata: Dict[str, Any]) -> None:
    tmp = path + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(metadata, f, indent=2, ensure_ascii=False)
    os.replace(tmp, path)

def read_metadata(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)
