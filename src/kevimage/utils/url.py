"""Source URL validation."""

from __future__ import annotations

from urllib.parse import urlsplit

from kevimage.errors.exceptions import ValidationError

_ALLOWED_SCHEMES = {"http", "https"}
_MAX_URL_LENGTH = 2048


def validate_source_url(url: str | None) -> str:
    """Return the stripped URL, or raise ValidationError if it cannot be fetched."""
    if url is None or not url.strip():
        raise ValidationError("The 'url' parameter is missing.")
    url = url.strip()
    if len(url) > _MAX_URL_LENGTH:
        raise ValidationError(f"The 'url' parameter exceeds {_MAX_URL_LENGTH} characters.")
    parts = urlsplit(url)
    if parts.scheme.lower() not in _ALLOWED_SCHEMES:
        raise ValidationError(f"Unsupported URL scheme: {parts.scheme or '(none)'!r}")
    if not parts.netloc:
        raise ValidationError(f"URL has no host: {url}")
    return url
