"""Run ID resolution: explicit or auto-generated from a UTC timestamp."""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict


def generate_run_id(prefix: str = "embed") -> str:
    ts = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return f"{prefix}_{ts}" if prefix else ts


def resolve_run_id(cfg: Dict[str, Any]) -> str:
    """Return run_id: explicit run.run_id, or auto-generated."""
    run = cfg.get("run") or {}
    explicit = run.get("run_id")
    if explicit is not None and str(explicit).strip():
        return str(explicit).strip()
    return generate_run_id(str(run.get("run_id_prefix", "embed")))


def resolve_out_dir(cfg: Dict[str, Any], run_id: str) -> str:
    """Return out_dir with {run_id} placeholder replaced by the resolved run_id."""
    run = cfg.get("run") or {}
    out_dir = run.get("out_dir") or "storage"
    if "{run_id}" in out_dir:
        return out_dir.replace("{run_id}", run_id)
    return out_dir
