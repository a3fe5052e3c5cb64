"""Stage plugin interface (batch-oriented).

Batch stages operate on Arrow Tables so the same code runs inside the local
runner and inside Ray Data `map_batches`.

Batch stages must:
- accept an Arrow Table of input rows
- return (output_table, rejected_rows)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Tuple
import pyarrow as pa

class BatchStage(ABC):
    name: str = "batch_stage"

    @abstractmethod
    def run_batch(self, batch: pa.Table) -> Tuple[pa.Table, List[Dict[str, Any]]]:
        raise NotImplementedError
