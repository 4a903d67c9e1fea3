"""Metadata index backed by SQLite."""

from __future__ import annotations

import logging
import sqlite3
import threading
from pathlib import Path
from typing import Protocol

from kevimage.errors.exceptions import DuplicateRecordError
from kevimage.types import ImageRecord, IndexSummary

logger = logging.getLogger(__name__)

_DEFAULT_DB_PATH = Path.home() / ".kevimage" / "index.db"


class MetadataIndex(Protocol):
    """Query contract the cache relies on. ``source_url`` is unique."""

    def find_by_url(self, source_url: str) -> ImageRecord | None: ...

    def find_by_key(self, content_key: str) -> list[ImageRecord]: ...

    def insert(self, record: ImageRecord) -> None: ...

    def records(self) -> list[ImageRecord]: ...

    def summary(self) -> IndexSummary: ...

    def close(self) -> None: ...


class SqliteIndex:
    """SQLite-backed persistent index of image records.

    ``content_key`` is indexed but not unique: distinct URLs whose output is
    byte-identical share one stored object.
    """

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = db_path or _DEFAULT_DB_PATH
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        # Calls arrive from asyncio.to_thread workers
        self._conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._create_table()

    def find_by_url(self, source_url: str) -> ImageRecord | None:
        with self._lock:
            row = self._conn.execute(
                "SELECT * FROM images WHERE source_url = ?", (source_url,)
            ).fetchone()
        return self._row_to_record(row) if row is not None else None

    def find_by_key(self, content_key: str) -> list[ImageRecord]:
        with self._lock:
            rows = self._conn.execute(
                "SELECT * FROM images WHERE content_key = ? ORDER BY created_at",
                (content_key,),
            ).fetchall()
        return [self._row_to_record(r) for r in rows]

    def insert(self, record: ImageRecord) -> None:
        try:
            with self._lock:
                self._conn.execute(
                    """INSERT INTO images
                       (source_url, content_key, original_size, compressed_size,
                        mime_type, created_at)
                       VALUES (?, ?, ?, ?, ?, ?)""",
                    (
                        record.source_url, record.content_key, record.original_size,
                        record.compressed_size, record.mime_type, record.created_at,
                    ),
                )
                self._conn.commit()
        except sqlite3.IntegrityError as e:
            raise DuplicateRecordError(
                f"Record already exists for {record.source_url}",
                source_url=record.source_url,
            ) from e

    def records(self) -> list[ImageRecord]:
        with self._lock:
            rows = self._conn.execute("SELECT * FROM images ORDER BY created_at").fetchall()
        return [self._row_to_record(r) for r in rows]

    def summary(self) -> IndexSummary:
        with self._lock:
            row = self._conn.execute(
                """SELECT COUNT(*), COUNT(DISTINCT content_key),
                          COALESCE(SUM(original_size), 0),
                          COALESCE(SUM(compressed_size), 0)
                   FROM images"""
            ).fetchone()
        return IndexSummary(
            entries=row[0],
            distinct_content_keys=row[1],
            original_bytes=row[2],
            compressed_bytes=row[3],
        )

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    def _create_table(self) -> None:
        with self._lock:
            self._conn.execute("""
                CREATE TABLE IF NOT EXISTS images (
                    source_url TEXT NOT NULL UNIQUE,
                    content_key TEXT NOT NULL,
                    original_size INTEGER NOT NULL,
                    compressed_size INTEGER NOT NULL,
                    mime_type TEXT NOT NULL,
                    created_at REAL NOT NULL
                )
            """)
            self._conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_images_content_key ON images (content_key)"
            )
            self._conn.commit()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> ImageRecord:
        return ImageRecord(
            source_url=row["source_url"],
            content_key=row["content_key"],
            original_size=row["original_size"],
            compressed_size=row["compressed_size"],
            mime_type=row["mime_type"],
            created_at=row["created_at"],
        )
