"""BERT embeddings stage.

Input rows: `doc_id`, `text` (one already-split sentence per row).
Output rows: one per token annotation, see storage.writer.embeddings_schema().

All rows of a batch go through a single `annotate` call, so the model's own
batching (batch_size sentences per engine call) applies across rows.
"""

from __future__ import annotations
import time
from typing import Any, Dict, List, Tuple

import pyarrow as pa

from ..annotations import document_annotation
from ..embeddings.model import BertEmbeddingsModel
from ..storage.writer import embeddings_schema
from ..utils.hashing import sha256_hex
from .base import BatchStage

class BertEmbeddingsStage(BatchStage):
    name = "bert_embeddings"

    def __init__(self, model: BertEmbeddingsModel):
        self.model = model

    def run_batch(self, batch: pa.Table) -> Tuple[pa.Table, List[Dict[str, Any]]]:
        rows = batch.to_pylist()
        annotations = []
        doc_ids: List[str] = []
        rejected: List[Dict[str, Any]] = []

        for r in rows:
            text = r.get("text") or ""
            doc_id = r.get("doc_id") or sha256_hex(text)
            if not text.strip():
                rejected.append(_rejection(doc_id, "EMPTY_TEXT", "no text to embed"))
                continue
            annotations.append(document_annotation(text))
            doc_ids.append(doc_id)

        out_rows: List[Dict[str, Any]] = []
        produced = set()
        token_counter: Dict[int, int] = {}
        for a in self.model.annotate(annotations):
            sent = int(a.metadata["sentence"])
            idx = token_counter.get(sent, 0)
            token_counter[sent] = idx + 1
            produced.add(sent)
            out_rows.append({
                "doc_id": doc_ids[sent],
                "token_index": idx,
                "token": a.result,
                "wordpiece": a.metadata.get("wordpiece", a.result),
                "piece_id": int(a.metadata["pieceId"]),
                "begin": a.begin,
                "end": a.end,
                "embedding": a.embeddings,
            })

        for i, doc_id in enumerate(doc_ids):
            if i not in produced:
                rejected.append(_rejection(doc_id, "NO_TOKENS", "text produced no tokens"))

        return pa.Table.from_pylist(out_rows, schema=embeddings_schema()), rejected

def _rejection(doc_id: str, reason_code: str, reason_detail: str) -> Dict[str, Any]:
    return {
        "doc_id": doc_id,
        "stage": BertEmbeddingsStage.name,
        "decision": "reject",
        "reason_code": reason_code,
        "reason_detail": reason_detail,
        "ts_ms": int(time.time() * 1000),
    }
