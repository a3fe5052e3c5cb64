"""CLI entrypoint.

Commands:
- `bert-embeddings embed --config configs/embed.yaml [--ray-config configs/ray.yaml]`
- `bert-embeddings import-folder --folder <export dir> --out <saved model dir> [--engine torch_bert]`
- `bert-embeddings inspect --path <saved model dir>`

Execution modes (config: execution.mode):
- local: reference implementation, Parquet shards + rejections + manifest
- ray_data: Ray Data pipeline (read_* -> map_batches actor pool -> write_parquet)
"""

from __future__ import annotations
import argparse
import json
import os

from .configs.loader import load_yaml
from .logging_ import setup_logging

def _import_folder(args: argparse.Namespace) -> None:
    from .embeddings.model import BertEmbeddingsModel
    model = BertEmbeddingsModel.load_from_folder(args.folder, engine_kind=args.engine)
    model.save(args.out, overwrite=args.overwrite)
    print(f"Saved {model.uid} to {args.out}")

def _inspect(args: argparse.Namespace) -> None:
    from .embeddings.serialization import METADATA_FILE, read_metadata
    meta = read_metadata(os.path.join(args.path, METADATA_FILE))
    print(json.dumps(meta, indent=2, ensure_ascii=False))

def main() -> None:
    p = argparse.ArgumentParser(prog="bert-embeddings")
    sub = p.add_subparsers(dest="cmd", required=True)

    pe = sub.add_parser("embed")
    pe.add_argument("--config", required=True)
    pe.add_argument("--ray-config", default="configs/ray.yaml")

    pi = sub.add_parser("import-folder")
    pi.add_argument("--folder", required=True, help="Directory with the engine artifact and vocab.txt")
    pi.add_argument("--out", required=True, help="Target saved-model directory")
    pi.add_argument("--engine", default="torch_bert")
    pi.add_argument("--overwrite", action="store_true")

    ps = sub.add_parser("inspect")
    ps.add_argument("--path", required=True)

    args = p.parse_args()

    if args.cmd == "import-folder":
        _import_folder(args)
        return

    if args.cmd == "inspect":
        _inspect(args)
        return

    cfg = load_yaml(args.config)
    from .run_id import resolve_run_id, resolve_out_dir
    run_id = resolve_run_id(cfg)
    cfg.setdefault("run", {})["run_id"] = run_id
    out_dir = resolve_out_dir(cfg, run_id)
    setup_logging(out_dir=out_dir, run_id=run_id)

    mode = cfg.get("execution", {}).get("mode", "local").lower()
    if mode == "ray_data":
        from .pipeline.ray_data_build import build_ray_data
        build_ray_data(cfg, load_yaml(args.ray_config))
    else:
        from .pipeline.build import build_local
        build_local(cfg)

if __name__ == "__main__":
    main()
