"""Tests for source URL validation."""

import pytest

from kevimage.errors.exceptions import ValidationError
from kevimage.utils.url import validate_source_url


class TestValidateSourceUrl:
    def test_accepts_https(self):
        assert validate_source_url("https://example.com/a.png") == "https://example.com/a.png"

    def test_strips_whitespace(self):
        assert validate_source_url("  http://example.com/a.png ") == "http://example.com/a.png"

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing(self, value):
        with pytest.raises(ValidationError, match="missing"):
            validate_source_url(value)

    def test_rejects_other_schemes(self):
        with pytest.raises(ValidationError, match="scheme"):
            validate_source_url("file:///etc/passwd")

    def test_rejects_missing_host(self):
        with pytest.raises(ValidationError, match="host"):
            validate_source_url("https:///a.png")

    def test_rejects_overlong(self):
        with pytest.raises(ValidationError):
            validate_source_url("https://example.com/" + "a" * 3000)
