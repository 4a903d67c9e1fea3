"""Content key generation — hash of the compressed bytes plus format suffix."""

from __future__ import annotations

import hashlib
import re

_KEY_PATTERN = re.compile(r"^[0-9a-f]{64}\.[a-z0-9]{1,8}$")


def hash_content(data: bytes) -> str:
    """SHA-256 hex digest of artifact bytes."""
    return hashlib.sha256(data).hexdigest()


def content_key(data: bytes, extension: str) -> str:
    """Derive the storage key ``<hex-digest>.<ext>`` for artifact bytes.

    Identical bytes always map to the same key, so two source URLs that
    compress to the same output share one stored object.
    """
    ext = extension.lower().lstrip(".")
    return f"{hash_content(data)}.{ext}"


def is_valid_content_key(key: str) -> bool:
    return bool(_KEY_PATTERN.match(key))
