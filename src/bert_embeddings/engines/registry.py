"""Engine registry.

Saved models record the `kind` of their engine; loading looks the kind up here.

Adding a new engine:
1) implement an InferenceEngine subclass
2) register a loader under a new kind with register_engine() (dynamic)
   or add it to the static table below
"""

from __future__ import annotations
from typing import Callable, Dict

from .base import InferenceEngine

EngineLoader = Callable[[str], InferenceEngine]

# Lazy import for the torch engine (optional dependency)
def _load_torch_bert(path: str) -> InferenceEngine:
    try:
        from .torch_bert import TorchBertEngine
    except ImportError as e:
        raise ImportError(
            f"PyTorch engine not available. "
            f"Install with: pip install 'bert-embeddings[torch]'. "
            f"Original error: {e}"
        )
    return TorchBertEngine.load(path)

_STATIC_REGISTRY: Dict[str, EngineLoader] = {
    "torch_bert": _load_torch_bert,
}

_DYNAMIC_REGISTRY: Dict[str, EngineLoader] = {}

def register_engine(kind: str, loader: EngineLoader) -> None:
    """Register an engine loader for `kind`.

    Example:
        from bert_embeddings.engines.registry import register_engine
        register_engine("onnx_bert", OnnxBertEngine.load)
    """
    if kind in _STATIC_REGISTRY:
        raise ValueError(f"Engine kind '{kind}' is already registered statically. Use a different name.")
    _DYNAMIC_REGISTRY[kind] = loader

def unregister_engine(kind: str) -> None:
    """Unregister a dynamically registered engine."""
    if kind in _DYNAMIC_REGISTRY:
        del _DYNAMIC_REGISTRY[kind]

def list_engines() -> Dict[str, str]:
    all_engines = {}
    for kind in _STATIC_REGISTRY:
        all_engines[kind] = "static"
    for kind in _DYNAMIC_REGISTRY:
        all_engines[kind] = "dynamic"
    return all_engines

def load_engine(kind: str, path: str) -> InferenceEngine:
    if kind in _STATIC_REGISTRY:
        return _STATIC_REGISTRY[kind](path)
    if kind in _DYNAMIC_REGISTRY:
        return _DYNAMIC_REGISTRY[kind](path)
    available = list(_STATIC_REGISTRY.keys()) + list(_DYNAMIC_REGISTRY.keys())
    raise ValueError(
        f"Unknown engine kind: {kind}. "
        f"Available: {available}. "
        f"Register dynamically with register_engine()"
    )
