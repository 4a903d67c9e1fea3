import asyncio
import io

import pytest
from PIL import Image

from kevimage.cache.memory import MemoryIndex
from kevimage.cache.store import ContentStore
from kevimage.config import sources
from kevimage.config.schema import ServiceConfig
from kevimage.core import Kevimage
from kevimage.errors.exceptions import FetchFailedError

_ENV_KEYS = [
    "PORT",
    "KEVIMAGE_PORT",
    "KEVIMAGE_HOST",
    "KEVIMAGE_CACHE_DIR",
    "KEVIMAGE_INDEX_PATH",
    "KEVIMAGE_QUALITY",
    "KEVIMAGE_FETCH_TIMEOUT",
    "KEVIMAGE_MAX_DOWNLOAD_MB",
    "KEVIMAGE_USER_AGENT",
    "KEVIMAGE_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    """Keep the host environment and config files out of config resolution."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr(sources, "_GLOBAL_CONFIG_PATH", tmp_path / "no-global-config.yaml")
    monkeypatch.chdir(tmp_path)


class FakeFetcher:
    """Returns canned bytes per URL and counts calls.

    With a ``gate``, every fetch blocks until the event is set.
    """

    def __init__(self, payloads=None, failures=None, gate=None):
        self.payloads = payloads or {}
        self.failures = failures or {}
        self.gate = gate
        self.calls: list[str] = []
        self.started = asyncio.Event()

    async def fetch(self, url):
        self.calls.append(url)
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if url in self.failures:
            raise self.failures[url]
        return self.payloads.get(url, f"raw:{url}".encode())


class FakeCompressor:
    """Deterministic stand-in for JPEG transcoding."""

    mime_type = "image/jpeg"
    extension = "jpg"

    def __init__(self):
        self.calls = 0

    def compress(self, data, quality=80):
        self.calls += 1
        return b"jpeg|" + data


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def compressor():
    return FakeCompressor()


@pytest.fixture
def store(tmp_path):
    return ContentStore(tmp_path / "cache")


@pytest.fixture
def index():
    return MemoryIndex()


@pytest.fixture
def service_config(tmp_path):
    return ServiceConfig(cache_dir=tmp_path / "cache", index_path=tmp_path / "index.db")


@pytest.fixture
def make_service(service_config, store, index, compressor):
    def _make(fetcher=None, index_override=None):
        return Kevimage(
            service_config,
            store=store,
            index=index_override if index_override is not None else index,
            fetcher=fetcher if fetcher is not None else FakeFetcher(),
            compressor=compressor,
        )

    return _make


@pytest.fixture
def fetch_failure():
    def _make(url, status=404):
        return FetchFailedError(f"Upstream returned HTTP {status}", url=url, upstream_status=status)

    return _make


@pytest.fixture
def sample_png_bytes():
    """Small RGBA PNG with a gradient so JPEG output is non-trivial."""
    img = Image.new("RGBA", (32, 24))
    for x in range(32):
        for y in range(24):
            img.putpixel((x, y), (x * 8, y * 10, 128, 255 if x % 2 else 100))
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def make_fetcher():
    return FakeFetcher
