"""Fetch-and-compress pipeline — produces one ImageRecord per cache miss."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from kevimage.cache.index import MetadataIndex
from kevimage.cache.keys import content_key
from kevimage.cache.store import ContentStore
from kevimage.errors.exceptions import DuplicateRecordError, RaceDetectedError
from kevimage.pipeline.compressor import DEFAULT_QUALITY
from kevimage.types import ImageRecord

logger = logging.getLogger(__name__)


class Fetcher(Protocol):
    async def fetch(self, url: str) -> bytes: ...


class Compressor(Protocol):
    mime_type: str
    extension: str

    def compress(self, data: bytes, quality: int) -> bytes: ...


class ImagePipeline:
    """Runs fetch → compress → hash → store → index for one source URL.

    Only the coordinator calls ``produce``, once per in-flight ticket. The
    store write always completes before the index insert, so an index entry
    never points at bytes that were not durably written.
    """

    def __init__(
        self,
        store: ContentStore,
        index: MetadataIndex,
        fetcher: Fetcher,
        compressor: Compressor,
        quality: int = DEFAULT_QUALITY,
    ) -> None:
        self._store = store
        self._index = index
        self._fetcher = fetcher
        self._compressor = compressor
        self._quality = quality
        self.races = 0

    async def produce(self, source_url: str) -> ImageRecord:
        # A previous ticket may have finished between the caller's miss and now
        existing = await asyncio.to_thread(self._index.find_by_url, source_url)
        if existing is not None:
            logger.debug("Record for %s appeared before production, reusing", source_url)
            return existing

        raw = await self._fetcher.fetch(source_url)
        compressed = await asyncio.to_thread(self._compressor.compress, raw, self._quality)

        key = content_key(compressed, self._compressor.extension)
        written = await asyncio.to_thread(self._store.write, key, compressed)
        if not written:
            logger.info("Content %s already stored, sharing it with %s", key, source_url)

        record = ImageRecord(
            source_url=source_url,
            content_key=key,
            original_size=len(raw),
            compressed_size=len(compressed),
            mime_type=self._compressor.mime_type,
        )
        try:
            await asyncio.to_thread(self._index.insert, record)
        except DuplicateRecordError:
            return await self._recover_from_race(source_url)

        logger.info(
            "Indexed %s as %s (%d -> %d bytes)",
            source_url, key, record.original_size, record.compressed_size,
        )
        return record

    async def _recover_from_race(self, source_url: str) -> ImageRecord:
        self.races += 1
        logger.warning(
            "Race detected: %s was indexed by another writer; serving the existing record",
            source_url,
        )
        winner = await asyncio.to_thread(self._index.find_by_url, source_url)
        if winner is None:
            raise RaceDetectedError(
                f"Index rejected {source_url} as a duplicate but holds no record for it",
                source_url=source_url,
            )
        return winner
