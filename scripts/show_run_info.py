"""Show information about a completed embedding run.

Usage:
    python scripts/show_run_info.py [output_dir]
"""

from __future__ import annotations
import glob
import json
import os
import sys

import pyarrow.parquet as pq

def show_run_info(out_dir: str) -> None:
    print(f"\n{'='*60}")
    print(f"Run Information: {out_dir}")
    print(f"{'='*60}\n")

    manifest_files = sorted(glob.glob(os.path.join(out_dir, "manifests", "*.json")))
    if manifest_files:
        with open(manifest_files[-1], "r", encoding="utf-8") as f:
            manifest = json.load(f)
        print("Run Summary:")
        print("-" * 60)
        print(f"  Run ID: {manifest.get('run_id')}")
        print(f"  Model: {manifest.get('model_uid', 'N/A')}")
        print(f"  Config: {manifest.get('config', {})}")
        print(f"  Sentences: {manifest.get('total_input_sentences', 0):,}")
        print(f"  Token rows: {manifest.get('total_token_rows', 0):,}")
        print(f"  Rejected: {manifest.get('total_rejected', 0):,}")
        print()
    else:
        print("No manifest found (run incomplete?)\n")

    shards = sorted(glob.glob(os.path.join(out_dir, "embeddings", "*.parquet")))
    if not shards:
        print("No embedding shards found.")
        return

    total_size = sum(os.path.getsize(f) for f in shards)
    print("Embedding Shards:")
    print("-" * 60)
    print(f"  Shards: {len(shards)}")
    print(f"  Total Size: {total_size / 1024 / 1024:.2f} MB")

    # One example vector
    table = pq.read_table(shards[0])
    if table.num_rows:
        row = table.slice(0, 1).to_pylist()[0]
        vec = row["embedding"] or []
        print(f"\n  First token: {row['token']!r} (doc_id={row['doc_id']})")
        print(f"  Embedding length: {len(vec)}")
        print(f"  First 5 dims: {vec[:5]}")

if __name__ == "__main__":
    show_run_info(sys.argv[1] if len(sys.argv) > 1 else "storage")
