"""Storage backends used to fetch published models (local directory or S3)."""

from .base import LocalStorageBackend, S3StorageBackend, StorageBackend, get_storage_backend

__all__ = ["LocalStorageBackend", "S3StorageBackend", "StorageBackend", "get_storage_backend"]
