"""Inference engines (tensor runtime adapters)."""

from .base import InferenceEngine
from .registry import list_engines, load_engine, register_engine, unregister_engine

__all__ = ["InferenceEngine", "list_engines", "load_engine", "register_engine", "unregister_engine"]
