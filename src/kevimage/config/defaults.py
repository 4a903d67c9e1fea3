"""Package-level default configuration values."""

from __future__ import annotations

from pathlib import Path

# Server
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 4000

# Storage
DEFAULT_HOME = Path.home() / ".kevimage"
DEFAULT_CACHE_DIR = DEFAULT_HOME / "cache"
DEFAULT_INDEX_PATH = DEFAULT_HOME / "index.db"

# Transcoding
DEFAULT_QUALITY = 80

# Fetching
DEFAULT_FETCH_TIMEOUT = 30.0
DEFAULT_MAX_DOWNLOAD_MB = 50.0
DEFAULT_USER_AGENT = "kevimage/0.1"

# Log level
DEFAULT_LOG_LEVEL = "WARNING"

