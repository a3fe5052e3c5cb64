from .downloader import PUBLIC_LOC, ResourceDownloader

__all__ = ["PUBLIC_LOC", "ResourceDownloader"]
