"""PyTorch / HuggingFace BERT engine.

Wraps `transformers.BertModel` and returns `last_hidden_state` for every
position. The artifact directory is whatever `save_pretrained` writes
(config.json + weights), so exports from `transformers` load directly.
"""

from __future__ import annotations
import logging
from typing import Optional

import numpy as np
import torch
from transformers import BertModel

from .base import InferenceEngine

log = logging.getLogger("bert_embeddings.engines.torch_bert")

class TorchBertEngine(InferenceEngine):
    kind = "torch_bert"

    def __init__(self, model: BertModel, device: Optional[str] = None):
        self.device = torch.device(device or ("cuda" if torch.cuda.is_available() else "cpu"))
        self.model = model.to(self.device).eval()

    @classmethod
    def load(cls, path: str, device: Optional[str] = None) -> "TorchBertEngine":
        log.info(f"Loading BertModel from {path}")
        return cls(BertModel.from_pretrained(path), device=device)

    @property
    def hidden_size(self) -> int:
        return int(self.model.config.hidden_size)

    def infer(self, input_ids: np.ndarray, attention_mask: np.ndarray, dim: int) -> np.ndarray:
        if dim != self.hidden_size:
            raise ValueError(f"Requested dim={dim} but model hidden_size={self.hidden_size}")
        with torch.no_grad():
            ids = torch.as_tensor(input_ids, dtype=torch.long, device=self.device)
            mask = torch.as_tensor(attention_mask, dtype=torch.long, device=self.device)
            outputs = self.model(input_ids=ids, attention_mask=mask)
            return outputs.last_hidden_state.float().cpu().numpy()

    def save(self, path: str) -> None:
        self.model.save_pretrained(path)
