"""Logging utilities.

We use Python's standard `logging` module with a single line-oriented format.

- Logs go to: `<log_dir>/<run_id>.log`
- Also prints concise progress to stdout.
"""

from __future__ import annotations
import logging
import os
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

def setup_logging(out_dir: str, run_id: str, log_dir: Optional[str] = None, level: int = logging.INFO) -> str:
    """
    Setup logging configuration.

    Args:
        out_dir: Output directory of the run
        run_id: Run identifier
        log_dir: Log directory (if None, uses out_dir/logs)
        level: Root log level

    Returns:
        Path of the log file
    """
    if log_dir is None:
        log_dir = os.path.join(out_dir, "logs")

    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, f"{run_id}.log")

    root = logging.getLogger()
    root.setLevel(level)

    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    # File
    fh = logging.FileHandler(log_path, encoding="utf-8")
    fh.setFormatter(fmt)
    root.addHandler(fh)

    # Console
    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    root.addHandler(ch)
    return log_path
