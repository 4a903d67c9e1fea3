"""Cache storage — content-addressed byte store plus metadata index."""

from kevimage.cache.index import MetadataIndex, SqliteIndex
from kevimage.cache.keys import content_key, hash_content, is_valid_content_key
from kevimage.cache.memory import MemoryIndex
from kevimage.cache.store import ContentNotFound, ContentStore
from kevimage.cache.verify import VerifyReport, verify_cache

__all__ = [
    "ContentNotFound",
    "ContentStore",
    "MemoryIndex",
    "MetadataIndex",
    "SqliteIndex",
    "VerifyReport",
    "content_key",
    "hash_content",
    "is_valid_content_key",
    "verify_cache",
]
