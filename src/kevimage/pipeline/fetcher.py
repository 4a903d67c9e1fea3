"""Async image fetcher over httpx."""

from __future__ import annotations

import logging

import httpx

from kevimage.errors.exceptions import FetchFailedError

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 30.0
_DEFAULT_MAX_DOWNLOAD_MB = 50.0
_DEFAULT_USER_AGENT = "kevimage/0.1"
_ALLOWED_SCHEMES = {"http", "https"}


class ImageFetcher:
    """Downloads source images. Failures surface as FetchFailedError, never retried."""

    def __init__(
        self,
        timeout: float = _DEFAULT_TIMEOUT,
        max_download_mb: float = _DEFAULT_MAX_DOWNLOAD_MB,
        user_agent: str = _DEFAULT_USER_AGENT,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._max_bytes = int(max_download_mb * 1024 * 1024)
        self._client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": user_agent},
            transport=transport,
        )

    async def fetch(self, url: str) -> bytes:
        """Download ``url`` and return the raw body."""
        scheme = url.split(":", 1)[0].lower() if ":" in url else ""
        if scheme not in _ALLOWED_SCHEMES:
            raise FetchFailedError(f"Unsupported URL scheme for {url}", url=url)
        try:
            async with self._client.stream("GET", url) as response:
                if not response.is_success:
                    raise FetchFailedError(
                        f"Upstream returned HTTP {response.status_code} for {url}",
                        url=url,
                        upstream_status=response.status_code,
                    )
                data = await self._read_capped(response, url)
        except httpx.TimeoutException as e:
            raise FetchFailedError(f"Timed out fetching {url}", url=url) from e
        except httpx.HTTPError as e:
            raise FetchFailedError(f"Could not fetch {url}: {e}", url=url) from e

        if not data:
            raise FetchFailedError(f"Empty response body from {url}", url=url)
        logger.debug("Fetched %s (%d bytes)", url, len(data))
        return data

    async def close(self) -> None:
        await self._client.aclose()

    async def _read_capped(self, response: httpx.Response, url: str) -> bytes:
        declared = response.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > self._max_bytes:
            raise FetchFailedError(
                f"Source image too large ({declared} bytes, max {self._max_bytes})",
                url=url,
            )
        buf = bytearray()
        async for chunk in response.aiter_bytes():
            buf.extend(chunk)
            if len(buf) > self._max_bytes:
                raise FetchFailedError(
                    f"Source image exceeds {self._max_bytes} bytes",
                    url=url,
                )
        return bytes(buf)
