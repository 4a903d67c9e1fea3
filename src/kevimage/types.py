"""Shared Pydantic models for kevimage."""

from __future__ import annotations

import time
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# ── Enums ──


class CacheStatus(StrEnum):
    HIT = "HIT"
    MISS = "MISS"


# ── Persisted entities ──


class ImageRecord(BaseModel):
    """One cached compression result. Append-only once indexed."""

    model_config = ConfigDict(frozen=True)

    source_url: str
    content_key: str
    original_size: int = Field(ge=0)
    compressed_size: int = Field(ge=0)
    mime_type: str
    created_at: float = Field(default_factory=time.time)


class Artifact(BaseModel):
    """Compressed bytes plus what a caller needs to serve them."""

    model_config = ConfigDict(frozen=True)

    data: bytes
    mime_type: str
    record: ImageRecord
    cache_status: CacheStatus = CacheStatus.HIT

    @property
    def size_bytes(self) -> int:
        return len(self.data)


# ── Statistics ──


class IndexSummary(BaseModel):
    """Aggregate view over the metadata index."""

    entries: int = 0
    distinct_content_keys: int = 0
    original_bytes: int = 0
    compressed_bytes: int = 0

    @property
    def savings_ratio(self) -> float:
        if self.original_bytes <= 0:
            return 0.0
        return 1.0 - self.compressed_bytes / self.original_bytes


class CoordinatorStats(BaseModel):
    """Counters kept by the cache coordinator for the life of the process."""

    hits: int = 0
    misses: int = 0
    productions: int = 0
    joined: int = 0
    failures: int = 0
    races: int = 0
    in_flight: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0
