"""FastAPI boundary: /compress, /ping, /stats."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Query, Request, Response
from fastapi.responses import JSONResponse

from kevimage import __version__
from kevimage.config.schema import ServiceConfig
from kevimage.core import Kevimage
from kevimage.errors.exceptions import KevimageError
from kevimage.utils.url import validate_source_url

logger = logging.getLogger(__name__)


def create_app(
    service: Kevimage | None = None,
    config: ServiceConfig | None = None,
) -> FastAPI:
    """Build the HTTP app. The service is opened at startup and closed at shutdown."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        svc = service if service is not None else Kevimage(config)
        app.state.service = svc
        logger.info("Serving cache from %s", svc.store.root)
        try:
            yield
        finally:
            logger.info("Releasing resources...")
            await svc.close()

    app = FastAPI(
        title="kevimage",
        description="URL-addressed image compression cache",
        version=__version__,
        lifespan=lifespan,
    )

    @app.exception_handler(KevimageError)
    async def handle_kevimage_error(request: Request, exc: KevimageError) -> JSONResponse:
        if exc.http_status >= 500:
            logger.error("%s %s failed [%s]: %s", request.method, request.url.path,
                         exc.error_kind, exc.message)
        return JSONResponse(status_code=exc.http_status, content=exc.to_dict())

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s", request.url.path)
        return JSONResponse(
            status_code=500,
            content={"error": "internal_error", "message": "Unable to process the image."},
        )

    @app.get("/ping")
    async def ping() -> dict[str, str]:
        logger.debug("Ping received")
        return {
            "message": "pong",
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/compress")
    async def compress(request: Request, url: str | None = Query(default=None)) -> Response:
        source_url = validate_source_url(url)
        svc: Kevimage = request.app.state.service
        artifact = await svc.resolve(source_url)
        return Response(
            content=artifact.data,
            media_type=artifact.mime_type,
            headers={
                "X-Cache": artifact.cache_status.value,
                "X-Original-Size": str(artifact.record.original_size),
                "X-Compressed-Size": str(artifact.record.compressed_size),
            },
        )

    @app.get("/stats")
    async def stats(request: Request) -> dict:
        svc: Kevimage = request.app.state.service
        coordinator = svc.stats()
        summary = await asyncio.to_thread(svc.summary)
        return {
            "coordinator": {**coordinator.model_dump(), "hit_rate": coordinator.hit_rate},
            "index": {**summary.model_dump(), "savings_ratio": summary.savings_ratio},
        }

    return app
