"""Pretrained model downloader.

Published models are saved-model directories (see embeddings/serialization.py)
stored under `<remote_loc>/<name>[_<lang>]` on a StorageBackend. They are
copied once into a local cache directory and loaded from there. The cache may
be shared by concurrent processes (e.g. Ray actors on one node).

The downloader is passed in explicitly; there is no process-wide instance.
"""

from __future__ import annotations
from typing import Optional
import logging
import os
import shutil
import tempfile

from ..embeddings.serialization import METADATA_FILE
from ..storage.base import LocalStorageBackend, StorageBackend

log = logging.getLogger("bert_embeddings.pretrained")

PUBLIC_LOC = "public/models"
CACHE_ENV = "BERT_EMBEDDINGS_CACHE"

def default_cache_dir() -> str:
    return os.environ.get(CACHE_ENV) or os.path.join(os.path.expanduser("~"), "cache_pretrained")

class ResourceDownloader:
    def __init__(
        self,
        storage: Optional[StorageBackend] = None,
        cache_dir: Optional[str] = None,
        public_loc: str = PUBLIC_LOC,
    ):
        self.storage = storage or LocalStorageBackend()
        self.cache_dir = cache_dir or default_cache_dir()
        self.public_loc = public_loc

    @staticmethod
    def resource_name(name: str, lang: Optional[str] = None) -> str:
        return f"{name}_{lang}" if lang else name

    def download(self, name: str, lang: Optional[str] = None, remote_loc: Optional[str] = None) -> str:
        """Return a local directory holding the saved model, fetching it if needed.

        Several processes may share one cache directory. Each copies into its
        own staging directory and moves the result into place; whoever moves
        first wins and the others use that copy.
        """
        resource = self.resource_name(name, lang)
        local = os.path.join(self.cache_dir, resource)
        if self._is_complete(local):
            log.info(f"Using cached {resource} at {local}")
            return local

        remote = self.storage.join(remote_loc or self.public_loc, resource)
        if not self.storage.exists(self.storage.join(remote, METADATA_FILE)):
            raise FileNotFoundError(f"Pretrained resource {resource} not found at {remote}")

        os.makedirs(self.cache_dir, exist_ok=True)
        staging = tempfile.mkdtemp(prefix=f"{resource}.", suffix=".partial", dir=self.cache_dir)
        try:
            copied = os.path.join(staging, resource)
            n = self.storage.download_dir(remote, copied)
            if self._is_complete(local):
                log.info(f"{resource} was cached concurrently at {local}, discarding own copy")
                return local
            if os.path.exists(local):
                # no metadata.json: leftover of an interrupted copy
                shutil.rmtree(local, ignore_errors=True)
            try:
                os.replace(copied, local)
            except OSError:
                if self._is_complete(local):
                    log.info(f"{resource} was cached concurrently at {local}, discarding own copy")
                    return local
                raise
        finally:
            shutil.rmtree(staging, ignore_errors=True)
        log.info(f"Downloaded {resource} ({n} files) from {remote} to {local}")
        return local

    @staticmethod
    def _is_complete(local: str) -> bool:
        return os.path.isfile(os.path.join(local, METADATA_FILE))
