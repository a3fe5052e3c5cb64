"""Ray Data pipeline runner.

Pipeline:
ray.data.read_* (input) ->
  map_batches(select doc_id/text) ->
  map_batches(EmbedBatch actor pool) ->
write_parquet(out_dir/embeddings)

Each actor builds the model once in its constructor and reuses it for every
batch it receives; the engine is shared read-only within the actor.

Rejected rows are logged by the actors, not written to rejections.jsonl.
"""

from __future__ import annotations
from typing import Any, Dict, Optional
import logging
import os
import time

import pyarrow as pa
import ray
import ray.data

from ..run_id import resolve_out_dir, resolve_run_id
from ..stages.bert_embeddings import BertEmbeddingsStage
from ..storage.writer import write_manifest
from ..utils.hashing import sha256_hex
from .build import input_schema, make_model

log = logging.getLogger("bert_embeddings.ray_data")

class EmbedBatch:
    """Callable class for `map_batches`; one instance per Ray actor."""

    def __init__(self, cfg: Dict[str, Any]):
        model = make_model(cfg)
        model.get_model()
        self.stage = BertEmbeddingsStage(model)

    def __call__(self, batch: pa.Table) -> pa.Table:
        out, rejected = self.stage.run_batch(batch)
        if rejected:
            reasons: Dict[str, int] = {}
            for r in rejected:
                reasons[r["reason_code"]] = reasons.get(r["reason_code"], 0) + 1
            log.warning(f"[ray.data] rejected={len(rejected)} reasons={reasons}")
        return out

def select_columns(batch: pa.Table, text_field: str = "text", id_field: Optional[str] = "id") -> pa.Table:
    texts = [t or "" for t in batch.column(text_field).to_pylist()]
    if id_field and id_field in batch.column_names:
        ids = [str(i) if i is not None else sha256_hex(t) for i, t in zip(batch.column(id_field).to_pylist(), texts)]
    else:
        ids = [sha256_hex(t) for t in texts]
    return pa.Table.from_pydict({"doc_id": ids, "text": texts}, schema=input_schema())

def read_input(inp: Dict[str, Any]) -> ray.data.Dataset:
    fmt = inp.get("format", "jsonl")
    path = inp["path"]
    if fmt == "parquet":
        return ray.data.read_parquet(path)
    if fmt == "jsonl":
        return ray.data.read_json(path)
    if fmt == "txt":
        # read_text yields a single "text" column, one row per line
        return ray.data.read_text(path, drop_empty_lines=True)
    raise ValueError(f"Unknown input format: {fmt}. Available: ['jsonl', 'parquet', 'txt']")

def build_ray_data(cfg: Dict[str, Any], ray_cfg: Dict[str, Any]) -> Dict[str, Any]:
    run_id = resolve_run_id(cfg)
    out_dir = resolve_out_dir(cfg, run_id)
    execution = cfg.get("execution") or {}
    rows_per_batch = int(execution.get("batch_size", 64))
    concurrency = int(execution.get("concurrency", 1))
    num_gpus = float(execution.get("num_gpus_per_actor", 0))
    start_time_ms = int(time.time() * 1000)

    addr = ray_cfg.get("ray", {}).get("address", "auto")
    ray.init(address=addr, ignore_reinit_error=True)

    inp = cfg["input"]
    text_field = inp.get("text_field", "text")
    id_field = inp.get("id_field", "id") if inp.get("format", "jsonl") != "txt" else None

    ds = read_input(inp)
    ds = ds.map_batches(
        select_columns,
        fn_kwargs={"text_field": text_field, "id_field": id_field},
        batch_format="pyarrow",
    )
    ds = ds.map_batches(
        EmbedBatch,
        fn_constructor_kwargs={"cfg": cfg},
        batch_size=rows_per_batch,
        batch_format="pyarrow",
        concurrency=concurrency,
        num_gpus=num_gpus,
    )

    out_path = os.path.join(out_dir, "embeddings")
    log.info(f"[ray.data] run_id={run_id} actors={concurrency} batch_size={rows_per_batch} out={out_path}")
    ds.write_parquet(out_path)

    manifest = {
        "run_id": run_id,
        "execution_mode": "ray_data",
        "start_time_ms": start_time_ms,
        "end_time_ms": int(time.time() * 1000),
        "outputs": {"embeddings_dir": out_path},
    }
    write_manifest(os.path.join(out_dir, "manifests", f"{run_id}.json"), manifest)
    return manifest
