"""Storage backends for published models.

A published model is a directory tree (see embeddings/serialization.py). The
downloader only needs to probe for a file and copy a whole tree down to a
local directory, so that is all a backend provides:

- join(*parts)        -> backend path
- exists(path)        -> bool, for a single file
- download_dir(path, local_dir) -> number of files copied
"""

from __future__ import annotations
import os
import shutil
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, Optional


class StorageBackend(ABC):
    """Read-only view of the location models are published to."""

    @abstractmethod
    def join(self, *parts: str) -> str:
        raise NotImplementedError()

    @abstractmethod
    def exists(self, path: str) -> bool:
        raise NotImplementedError()

    @abstractmethod
    def download_dir(self, path: str, local_dir: str) -> int:
        """Copy every file below `path` into `local_dir`, keeping relative layout.

        `local_dir` must not exist yet. Returns the number of files copied.
        """
        raise NotImplementedError()


class LocalStorageBackend(StorageBackend):
    """Models published on a local or mounted filesystem."""

    def join(self, *parts: str) -> str:
        return os.path.join(*parts) if parts else ""

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def download_dir(self, path: str, local_dir: str) -> int:
        if not os.path.isdir(path):
            raise FileNotFoundError(f"Directory {path} not found")
        shutil.copytree(path, local_dir)
        return sum(len(files) for _, _, files in os.walk(local_dir))


class S3StorageBackend(StorageBackend):
    """Models published under `s3://<bucket>/<prefix>/`."""

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        region: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        aws_access_key_id: Optional[str] = None,
        aws_secret_access_key: Optional[str] = None,
        aws_session_token: Optional[str] = None,
    ):
        try:
            import boto3
        except ImportError as exc:
            raise ImportError("boto3 required for S3 storage backend. Install with: pip install 'bert-embeddings[s3]'") from exc

        client_kwargs: Dict[str, Any] = {
            "region_name": region,
            "endpoint_url": endpoint_url,
            "aws_access_key_id": aws_access_key_id,
            "aws_secret_access_key": aws_secret_access_key,
            "aws_session_token": aws_session_token,
        }
        self.bucket = bucket
        self.prefix = prefix.strip("/")
        self.s3_client = boto3.client("s3", **{k: v for k, v in client_kwargs.items() if v})

    def _key(self, path: str) -> str:
        key = path.replace("\\", "/").strip("/")
        if self.prefix and not key.startswith(self.prefix + "/"):
            key = f"{self.prefix}/{key}" if key else self.prefix
        return key

    def join(self, *parts: str) -> str:
        return "/".join(p.strip("/") for p in parts if p)

    def exists(self, path: str) -> bool:
        if not path:
            return False
        from botocore.exceptions import ClientError
        try:
            self.s3_client.head_object(Bucket=self.bucket, Key=self._key(path))
            return True
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("404", "NoSuchKey"):
                return False
            raise

    def _iter_objects(self, key_prefix: str) -> Iterator[str]:
        paginator = self.s3_client.get_paginator("list_objects_v2")
        for page in paginator.paginate(Bucket=self.bucket, Prefix=key_prefix):
            for obj in page.get("Contents", []):
                yield obj["Key"]

    def download_dir(self, path: str, local_dir: str) -> int:
        key_prefix = self._key(path) + "/"
        count = 0
        for key in self._iter_objects(key_prefix):
            rel = key[len(key_prefix):]
            if not rel or rel.endswith("/"):
                continue
            target = os.path.join(local_dir, *rel.split("/"))
            os.makedirs(os.path.dirname(target), exist_ok=True)
            self.s3_client.download_file(self.bucket, key, target)
            count += 1
        if count == 0:
            raise FileNotFoundError(f"No objects under s3://{self.bucket}/{key_prefix}")
        return count


def get_storage_backend(storage_config: Optional[Dict[str, Any]]) -> StorageBackend:
    """Build the backend described by the `storage` config section (default: local)."""
    storage_type = (storage_config or {}).get("type", "local").lower()
    if storage_type == "local":
        return LocalStorageBackend()
    if storage_type == "s3":
        bucket = storage_config.get("bucket")
        if not bucket:
            raise ValueError("S3 storage requires a 'bucket' value")
        return S3StorageBackend(
            bucket=bucket,
            prefix=storage_config.get("prefix", ""),
            region=storage_config.get("region"),
            endpoint_url=storage_config.get("endpoint_url"),
            aws_access_key_id=storage_config.get("aws_access_key_id"),
            aws_secret_access_key=storage_config.get("aws_secret_access_key"),
            aws_session_token=storage_config.get("aws_session_token"),
        )
    raise ValueError(f"Unknown storage type: {storage_type}")
