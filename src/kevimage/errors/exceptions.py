"""Custom exception hierarchy for kevimage."""

from __future__ import annotations

from typing import Any


class KevimageError(Exception):
    """Base exception for all kevimage errors."""

    error_kind = "internal_error"
    http_status = 500

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, str]:
        return {"error": self.error_kind, "message": self.message}


class ValidationError(KevimageError):
    """Missing or malformed input parameter."""

    error_kind = "validation_error"
    http_status = 400


class FetchFailedError(KevimageError):
    """The source image could not be downloaded.

    Examples: unreachable host, non-2xx response, timeout, oversized body.
    """

    error_kind = "fetch_failed"
    http_status = 502

    def __init__(
        self,
        message: str = "",
        url: str = "",
        upstream_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.url = url
        self.upstream_status = upstream_status


class CompressionFailedError(KevimageError):
    """The downloaded bytes could not be decoded or re-encoded."""

    error_kind = "compression_failed"
    http_status = 500


class StorageWriteError(KevimageError):
    """Compressed bytes could not be written to the content store."""

    error_kind = "storage_write_failed"
    http_status = 500

    def __init__(self, message: str = "", content_key: str = "") -> None:
        super().__init__(message)
        self.content_key = content_key


class CorruptCacheEntryError(KevimageError):
    """An index record points at bytes that are no longer stored.

    Never answered by re-fetching: a present index entry is a durability promise.
    """

    error_kind = "corrupt_cache_entry"
    http_status = 500

    def __init__(self, message: str = "", source_url: str = "", content_key: str = "") -> None:
        super().__init__(message)
        self.source_url = source_url
        self.content_key = content_key


class RaceDetectedError(KevimageError):
    """Another writer indexed the same URL and its record could not be read back."""

    error_kind = "race_detected"
    http_status = 500

    def __init__(self, message: str = "", source_url: str = "") -> None:
        super().__init__(message)
        self.source_url = source_url


class DuplicateRecordError(KevimageError):
    """Index uniqueness violation on ``source_url``."""

    error_kind = "duplicate_record"
    http_status = 409

    def __init__(self, message: str = "", source_url: str = "") -> None:
        super().__init__(message)
        self.source_url = source_url
