"""Top-level entry points: Kevimage service handle and compress_url()."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from kevimage.cache.index import MetadataIndex, SqliteIndex
from kevimage.cache.store import ContentStore
from kevimage.config.schema import ServiceConfig, load_service_config
from kevimage.coordinator import CacheCoordinator
from kevimage.pipeline.compressor import JpegCompressor
from kevimage.pipeline.fetcher import ImageFetcher
from kevimage.pipeline.producer import Compressor, Fetcher, ImagePipeline
from kevimage.types import Artifact, CoordinatorStats, IndexSummary

logger = logging.getLogger(__name__)


class Kevimage:
    """Service handle owning the storage collaborators and the coordinator.

    Create one at startup and ``close()`` it at shutdown. Any collaborator
    not passed explicitly is built from ``config``.
    """

    def __init__(
        self,
        config: ServiceConfig | None = None,
        store: ContentStore | None = None,
        index: MetadataIndex | None = None,
        fetcher: Fetcher | None = None,
        compressor: Compressor | None = None,
    ) -> None:
        self._config = config if config is not None else ServiceConfig()
        self._store = store if store is not None else ContentStore(self._config.cache_dir)
        self._index = index if index is not None else SqliteIndex(self._config.index_path)
        self._owns_fetcher = fetcher is None
        self._fetcher = fetcher if fetcher is not None else ImageFetcher(
            timeout=self._config.fetch_timeout,
            max_download_mb=self._config.max_download_mb,
            user_agent=self._config.user_agent,
        )
        self._compressor = compressor if compressor is not None else JpegCompressor()
        self._pipeline = ImagePipeline(
            self._store,
            self._index,
            self._fetcher,
            self._compressor,
            quality=self._config.quality,
        )
        self._coordinator = CacheCoordinator(self._store, self._index, self._pipeline)
        self._closed = False

    @property
    def config(self) -> ServiceConfig:
        return self._config

    @property
    def store(self) -> ContentStore:
        return self._store

    @property
    def index(self) -> MetadataIndex:
        return self._index

    @property
    def coordinator(self) -> CacheCoordinator:
        return self._coordinator

    async def resolve(self, source_url: str) -> Artifact:
        return await self._coordinator.resolve(source_url)

    def stats(self) -> CoordinatorStats:
        return self._coordinator.stats()

    def summary(self) -> IndexSummary:
        return self._index.summary()

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._coordinator.close()
        if self._owns_fetcher and isinstance(self._fetcher, ImageFetcher):
            await self._fetcher.close()
        self._index.close()
        logger.debug("Kevimage service closed")

    async def __aenter__(self) -> Kevimage:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


# ── Module-level convenience functions ──


def compress_url(source_url: str, **overrides: Any) -> Artifact:
    """Resolve one URL through the cache (sync wrapper)."""
    config = load_service_config(**overrides)

    async def _run() -> Artifact:
        async with Kevimage(config) as service:
            return await service.resolve(source_url)

    return asyncio.run(_run())
