"""Cache coordinator — resolves a source URL to a compressed artifact."""

from __future__ import annotations

import asyncio
import logging

from kevimage.cache.index import MetadataIndex
from kevimage.cache.store import ContentNotFound, ContentStore
from kevimage.concurrency.tickets import TicketTable
from kevimage.errors.exceptions import CorruptCacheEntryError, KevimageError, ValidationError
from kevimage.pipeline.producer import ImagePipeline
from kevimage.types import Artifact, CacheStatus, CoordinatorStats, ImageRecord

logger = logging.getLogger(__name__)


class CacheCoordinator:
    """Request-facing cache protocol.

    Hit: the indexed record's bytes are read from the content store.
    Miss: the pipeline runs at most once per in-flight URL; concurrent
    callers for the same URL join the running ticket and all observe the
    same artifact or the same error.
    """

    def __init__(
        self,
        store: ContentStore,
        index: MetadataIndex,
        pipeline: ImagePipeline,
    ) -> None:
        self._store = store
        self._index = index
        self._pipeline = pipeline
        self._tickets: TicketTable[Artifact] = TicketTable()
        self._stats = CoordinatorStats()

    async def resolve(self, source_url: str) -> Artifact:
        if not source_url:
            raise ValidationError("source url must be a non-empty string")

        record = await asyncio.to_thread(self._index.find_by_url, source_url)
        if record is not None:
            self._stats.hits += 1
            logger.info("Cache HIT for %s", source_url)
            return await self._load(record, CacheStatus.HIT)

        self._stats.misses += 1
        ticket, started = await self._tickets.join_or_start(
            source_url, lambda: self._produce(source_url)
        )
        if started:
            logger.info("Cache MISS for %s, producing", source_url)
        else:
            self._stats.joined += 1
            logger.debug("Joining in-flight production for %s", source_url)
        return await ticket.wait()

    def stats(self) -> CoordinatorStats:
        return self._stats.model_copy(
            update={"races": self._pipeline.races, "in_flight": len(self._tickets)}
        )

    def is_in_flight(self, source_url: str) -> bool:
        return source_url in self._tickets

    async def close(self) -> None:
        """Let in-flight productions finish so their records are not lost."""
        await self._tickets.wait_all()

    async def _produce(self, source_url: str) -> Artifact:
        self._stats.productions += 1
        try:
            record = await self._pipeline.produce(source_url)
            return await self._load(record, CacheStatus.MISS)
        except KevimageError as e:
            self._stats.failures += 1
            logger.warning("Production failed for %s [%s]: %s", source_url, e.error_kind, e)
            raise
        except Exception:
            self._stats.failures += 1
            logger.exception("Unexpected error producing %s", source_url)
            raise

    async def _load(self, record: ImageRecord, status: CacheStatus) -> Artifact:
        try:
            data = await asyncio.to_thread(self._store.read, record.content_key)
        except (ContentNotFound, ValueError, OSError) as e:
            # Missing file, unreadable file, or a key this store cannot address
            logger.error(
                "Corrupt cache entry: %s -> %s cannot be read (%s)",
                record.source_url, record.content_key, e,
            )
            raise CorruptCacheEntryError(
                f"Cached content {record.content_key} for {record.source_url} is unreadable",
                source_url=record.source_url,
                content_key=record.content_key,
            ) from e
        return Artifact(data=data, mime_type=record.mime_type, record=record, cache_status=status)
