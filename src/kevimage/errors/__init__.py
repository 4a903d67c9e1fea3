"""Error taxonomy shared by the store, index, pipeline and HTTP boundary."""

from kevimage.errors.exceptions import (
    CompressionFailedError,
    CorruptCacheEntryError,
    DuplicateRecordError,
    FetchFailedError,
    KevimageError,
    RaceDetectedError,
    StorageWriteError,
    ValidationError,
)

__all__ = [
    "KevimageError",
    "ValidationError",
    "FetchFailedError",
    "CompressionFailedError",
    "StorageWriteError",
    "CorruptCacheEntryError",
    "RaceDetectedError",
    "DuplicateRecordError",
]
