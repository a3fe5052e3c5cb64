"""Pipeline build runners (local).

Local runner:
- simple and deterministic, the reference implementation
- reads sentences from local files in fixed-size row batches
- runs the BertEmbeddingsStage per batch
- writes Parquet embedding shards + rejection log + run manifest

For cluster runs see ray_data_build.py; both share make_model().
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, Iterator, List
import logging
import os
import time

import pyarrow as pa
from tqdm import tqdm

from ..embeddings.model import BertEmbeddingsModel
from ..pretrained.downloader import PUBLIC_LOC, ResourceDownloader
from ..run_id import resolve_out_dir, resolve_run_id
from ..sources.base import InputSpec, RawSentence
from ..sources.local import LocalFileSource
from ..stages.bert_embeddings import BertEmbeddingsStage
from ..storage.base import get_storage_backend
from ..storage.writer import append_jsonl, write_embeddings_shard, write_manifest
from ..utils.hashing import sha256_hex

log = logging.getLogger("bert_embeddings.build")

CONFIG_KEYS = ("max_sentence_length", "batch_size", "dim", "lowercase")

def input_schema() -> pa.Schema:
    return pa.schema([("doc_id", pa.string()), ("text", pa.string())])

def make_model(cfg: Dict[str, Any]) -> BertEmbeddingsModel:
    """Build the model described by the `model` section of a build config.

    model.format:
    - saved: directory written by BertEmbeddingsModel.save()
    - folder: exported engine artifact + vocab.txt
    - pretrained: fetched by name through a ResourceDownloader over `storage`

    Config keys (max_sentence_length, batch_size, dim, lowercase) in the
    model section override the loaded values.
    """
    m = cfg.get("model") or {}
    fmt = m.get("format", "saved")
    if fmt == "saved":
        model = BertEmbeddingsModel.load(m["path"])
    elif fmt == "folder":
        model = BertEmbeddingsModel.load_from_folder(m["path"], engine_kind=m.get("engine", "torch_bert"))
    elif fmt == "pretrained":
        downloader = ResourceDownloader(
            storage=get_storage_backend(cfg.get("storage")),
            cache_dir=m.get("cache_dir"),
            public_loc=m.get("remote_loc", PUBLIC_LOC),
        )
        model = BertEmbeddingsModel.pretrained(m.get("name", "bert_uncased_base"), lang=m.get("lang"), downloader=downloader)
    else:
        raise ValueError(f"Unknown model format: {fmt}. Expected one of: saved, folder, pretrained")

    overrides = {k: m[k] for k in CONFIG_KEYS if k in m}
    if overrides:
        model.replace_config(**overrides)
    return model

def iter_row_batches(sentences: Iterable[RawSentence], rows_per_batch: int) -> Iterator[List[Dict[str, Any]]]:
    buf: List[Dict[str, Any]] = []
    for s in sentences:
        buf.append({"doc_id": s.raw_id or sha256_hex(s.text), "text": s.text})
        if len(buf) >= rows_per_batch:
            yield buf
            buf = []
    if buf:
        yield buf

def build_local(cfg: Dict[str, Any]) -> Dict[str, Any]:
    run_id = resolve_run_id(cfg)
    out_dir = resolve_out_dir(cfg, run_id)
    execution = cfg.get("execution") or {}
    rows_per_batch = int(execution.get("batch_size", 64))
    shard_rows = int((cfg.get("output") or {}).get("shard_rows", 50_000))
    log_every = int(execution.get("log_every_batches", 100))
    start_time_ms = int(time.time() * 1000)

    model = make_model(cfg)
    # fail fast on a missing engine or vocabulary before reading any input
    model.get_model()
    stage = BertEmbeddingsStage(model)
    src = LocalFileSource(InputSpec(**cfg["input"]))
    log.info(f"Starting run_id={run_id} model={model.uid} files={len(src.files)} out_dir={out_dir}")

    rejections_path = os.path.join(out_dir, "rejections", "rejections.jsonl")
    shard: List[Dict[str, Any]] = []
    shard_idx = 0
    shard_paths: List[str] = []
    total_in = total_rows = total_rejected = 0

    def flush_shard() -> None:
        nonlocal shard_idx
        path = os.path.join(out_dir, "embeddings", f"shard_{shard_idx:06d}.parquet")
        shard_paths.append(write_embeddings_shard(path, shard))
        shard.clear()
        shard_idx += 1

    pbar = tqdm(unit="sent", desc="embed")
    for n, rows in enumerate(iter_row_batches(src.stream(), rows_per_batch), start=1):
        total_in += len(rows)
        pbar.update(len(rows))
        try:
            out, rejected = stage.run_batch(pa.Table.from_pylist(rows, schema=input_schema()))
        except Exception as e:
            # Hard error handling: reject the batch but continue.
            log.exception(f"Unhandled error in batch {n}: {e}")
            rejected = [{
                "doc_id": r["doc_id"],
                "stage": "runtime_error",
                "decision": "reject",
                "reason_code": "RUNTIME_ERROR",
                "reason_detail": str(e),
                "ts_ms": int(time.time() * 1000),
            } for r in rows]
            out = None

        if rejected:
            total_rejected += len(rejected)
            append_jsonl(rejections_path, rejected)
        if out is not None:
            total_rows += out.num_rows
            shard.extend(out.to_pylist())
            if len(shard) >= shard_rows:
                flush_shard()
        if n % log_every == 0:
            log.info(f"processed={total_in} token_rows={total_rows} rejected={total_rejected}")
    pbar.close()

    if shard:
        flush_shard()

    manifest = {
        "run_id": run_id,
        "model_uid": model.uid,
        "config": model.config.to_dict(),
        "start_time_ms": start_time_ms,
        "end_time_ms": int(time.time() * 1000),
        "total_input_sentences": total_in,
        "total_token_rows": total_rows,
        "total_rejected": total_rejected,
        "outputs": {
            "shards": shard_paths,
            "rejections": rejections_path,
        },
    }
    manifest_path = os.path.join(out_dir, "manifests", f"{run_id}.json")
    write_manifest(manifest_path, manifest)
    log.info(f"Build complete: sentences={total_in} token_rows={total_rows} rejected={total_rejected} manifest={manifest_path}")
    return manifest
