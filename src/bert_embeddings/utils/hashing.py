"""Hashing utilities.

Rows without an explicit id get a stable one: hex SHA-256 of the text.
"""

import hashlib

def sha256_hex(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8", errors="ignore")).hexdigest()
