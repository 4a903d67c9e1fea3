"""Filesystem content store keyed by content hash."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from kevimage.cache.keys import is_valid_content_key
from kevimage.errors.exceptions import StorageWriteError

logger = logging.getLogger(__name__)


class ContentNotFound(LookupError):
    """No object is stored under the requested key."""


class ContentStore:
    """Durable byte storage, one file per content key under ``root``.

    Writes are atomic: bytes land in a temp file in the same directory, are
    fsynced, then renamed into place. A reader never sees a partial object.
    """

    def __init__(self, root: Path) -> None:
        self._root = Path(root)
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def write(self, key: str, data: bytes) -> bool:
        """Store ``data`` under ``key``. Returns False if the object already existed."""
        path = self._path(key)
        tmp_name = None
        try:
            if path.exists():
                logger.debug("Content %s already stored, skipping write", key)
                return False
            with tempfile.NamedTemporaryFile(
                dir=self._root, prefix=".tmp-", suffix=".part", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(data)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as e:
            raise StorageWriteError(
                f"Failed to write {key}: {e}", content_key=key
            ) from e
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

        logger.debug("Stored %s (%d bytes)", key, len(data))
        return True

    def read(self, key: str) -> bytes:
        path = self._path(key)
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise ContentNotFound(key) from e

    def exists(self, key: str) -> bool:
        return self._path(key).is_file()

    def delete(self, key: str) -> bool:
        """Remove a stored object. Maintenance only; the cache itself never deletes."""
        path = self._path(key)
        if not path.exists():
            return False
        path.unlink()
        return True

    def keys(self) -> list[str]:
        return sorted(
            p.name for p in self._root.iterdir()
            if p.is_file() and is_valid_content_key(p.name)
        )

    @property
    def size_bytes(self) -> int:
        return sum(
            p.stat().st_size for p in self._root.iterdir()
            if p.is_file() and is_valid_content_key(p.name)
        )

    def _path(self, key: str) -> Path:
        if not is_valid_content_key(key):
            raise ValueError(f"Invalid content key: {key!r}")
        return self._root / key
