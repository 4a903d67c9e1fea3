"""Tests for content key derivation."""

from kevimage.cache.keys import content_key, hash_content, is_valid_content_key


class TestHashContent:
    def test_deterministic(self):
        assert hash_content(b"abc") == hash_content(b"abc")

    def test_known_digest(self):
        # sha256("test")
        assert hash_content(b"test") == (
            "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08"
        )

    def test_different_data_different_hash(self):
        assert hash_content(b"aaa") != hash_content(b"bbb")


class TestContentKey:
    def test_format(self):
        key = content_key(b"test", "jpg")
        assert key == "9f86d081884c7d659a2feaa0c55ad015a3bf4f1b2b0b822cd15d6c15b0f00a08.jpg"

    def test_extension_normalized(self):
        assert content_key(b"x", ".JPG") == content_key(b"x", "jpg")

    def test_identical_bytes_share_key(self):
        assert content_key(b"same", "jpg") == content_key(b"same", "jpg")


class TestIsValidContentKey:
    def test_accepts_generated_key(self):
        assert is_valid_content_key(content_key(b"data", "jpg"))

    def test_rejects_traversal(self):
        assert not is_valid_content_key("../etc/passwd")

    def test_rejects_short_hash(self):
        assert not is_valid_content_key("abc.jpg")

    def test_rejects_missing_extension(self):
        assert not is_valid_content_key("a" * 64)
