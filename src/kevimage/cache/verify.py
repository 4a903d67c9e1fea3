"""Consistency check between the metadata index and the content store."""

from __future__ import annotations

from pydantic import BaseModel, Field

from kevimage.cache.index import MetadataIndex
from kevimage.cache.store import ContentStore
from kevimage.types import ImageRecord


class VerifyReport(BaseModel):
    checked: int = 0
    corrupt: list[ImageRecord] = Field(default_factory=list)
    orphans: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.corrupt


def verify_cache(store: ContentStore, index: MetadataIndex) -> VerifyReport:
    """Find records whose bytes are missing and stored objects nothing references.

    Orphans are harmless (a crash between the store and index writes leaves
    one); corrupt records break the durability promise of the index.
    """
    records = index.records()
    stored = set(store.keys())
    referenced = {r.content_key for r in records}
    return VerifyReport(
        checked=len(records),
        corrupt=[r for r in records if r.content_key not in stored],
        orphans=sorted(stored - referenced),
    )
