"""Parquet / JSONL writers.

- embeddings shards: one row per output token annotation
- rejections.jsonl: append-only, rows that produced no output and why
- a run manifest at the end
"""

from __future__ import annotations
from typing import Any, Dict, List
import json
import logging
import os

import pyarrow as pa
import pyarrow.parquet as pq

log = logging.getLogger("bert_embeddings.storage.writer")

def embeddings_schema() -> pa.Schema:
    return pa.schema([
        ("doc_id", pa.string()),
        ("token_index", pa.int32()),
        ("token", pa.string()),
        ("wordpiece", pa.string()),
        ("piece_id", pa.int64()),
        ("begin", pa.int64()),
        ("end", pa.int64()),
        ("embedding", pa.list_(pa.float32())),
    ], metadata={"schema_version": "v1"})

def write_embeddings_shard(path: str, rows: List[Dict[str, Any]]) -> str:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    try:
        table = pa.Table.from_pylist(rows, schema=embeddings_schema())
    except (pa.ArrowInvalid, pa.ArrowTypeError) as e:
        log.error(f"Error creating embeddings table for {path}: {e}")
        raise
    pq.write_table(table, path, compression="zstd")
    return path

def append_jsonl(path: str, rows: List[Dict[str, Any]]) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        for r in rows:
            f.write(json.dumps(r, ensure_ascii=False) + "\n")

def write_manifest(path: str, manifest: Dict[str, Any]) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2, ensure_ascii=False)
