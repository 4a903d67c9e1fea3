"""In-memory metadata index for ephemeral runs and tests."""

from __future__ import annotations

import threading

from kevimage.errors.exceptions import DuplicateRecordError
from kevimage.types import ImageRecord, IndexSummary


class MemoryIndex:
    """Dict-backed index with the same uniqueness rules as SqliteIndex."""

    def __init__(self) -> None:
        self._by_url: dict[str, ImageRecord] = {}
        self._lock = threading.Lock()

    def find_by_url(self, source_url: str) -> ImageRecord | None:
        with self._lock:
            return self._by_url.get(source_url)

    def find_by_key(self, content_key: str) -> list[ImageRecord]:
        with self._lock:
            return [r for r in self._by_url.values() if r.content_key == content_key]

    def insert(self, record: ImageRecord) -> None:
        with self._lock:
            if record.source_url in self._by_url:
                raise DuplicateRecordError(
                    f"Record already exists for {record.source_url}",
                    source_url=record.source_url,
                )
            self._by_url[record.source_url] = record

    def records(self) -> list[ImageRecord]:
        with self._lock:
            return sorted(self._by_url.values(), key=lambda r: r.created_at)

    def summary(self) -> IndexSummary:
        with self._lock:
            records = list(self._by_url.values())
        return IndexSummary(
            entries=len(records),
            distinct_content_keys=len({r.content_key for r in records}),
            original_bytes=sum(r.original_size for r in records),
            compressed_bytes=sum(r.compressed_size for r in records),
        )

    def close(self) -> None:
        pass

    def __len__(self) -> int:
        return len(self._by_url)
