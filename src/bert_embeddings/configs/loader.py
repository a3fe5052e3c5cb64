"""YAML config loading.

Build configs are YAML so runs can be reviewed and versioned next to the
models they use.
"""

from __future__ import annotations
from typing import Any, Dict
import yaml

def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}
