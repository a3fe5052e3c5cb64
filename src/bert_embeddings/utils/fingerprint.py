import json, hashlib
from typing import Any, Dict

def stable_fingerprint(obj: Any) -> str:
    blob = json.dumps(obj, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    return hashlib.sha256(blob.encode("utf-8")).hexdigest()

def vocabulary_fingerprint(vocabulary: Dict[str, int]) -> str:
    # ids, not insertion order, define a vocabulary
    return stable_fingerprint(sorted(vocabulary.items(), key=lambda kv: (kv[1], kv[0])))
