"""SHA-256 hashing for deterministic node identifiers"""

import hashlib


def sha256(content: str) -> str:
    """Return hex-encoded SHA-256 hash of content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def short_id(*parts: str, length: int = 24) -> str:
    """Return a stable id derived from parts; equal inputs give equal ids."""
    return sha256("\x1f".join(parts))[:length]
