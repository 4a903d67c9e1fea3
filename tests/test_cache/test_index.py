"""Tests for the metadata index implementations."""

import pytest

from kevimage.cache.index import SqliteIndex
from kevimage.cache.memory import MemoryIndex
from kevimage.errors.exceptions import DuplicateRecordError
from kevimage.types import ImageRecord

KEY_A = "a" * 64 + ".jpg"
KEY_B = "b" * 64 + ".jpg"


def _record(url: str, key: str = KEY_A, **kwargs) -> ImageRecord:
    defaults = dict(original_size=1000, compressed_size=400, mime_type="image/jpeg")
    defaults.update(kwargs)
    return ImageRecord(source_url=url, content_key=key, **defaults)


@pytest.fixture(params=["sqlite", "memory"])
def any_index(request, tmp_path):
    idx = SqliteIndex(tmp_path / "index.db") if request.param == "sqlite" else MemoryIndex()
    yield idx
    idx.close()


class TestIndexContract:
    def test_find_miss(self, any_index):
        assert any_index.find_by_url("https://example.com/a.png") is None

    def test_insert_and_find(self, any_index):
        record = _record("https://example.com/a.png")
        any_index.insert(record)
        found = any_index.find_by_url("https://example.com/a.png")
        assert found == record

    def test_duplicate_url_rejected(self, any_index):
        any_index.insert(_record("https://example.com/a.png"))
        with pytest.raises(DuplicateRecordError) as exc_info:
            any_index.insert(_record("https://example.com/a.png", KEY_B))
        assert exc_info.value.source_url == "https://example.com/a.png"

    def test_duplicate_keeps_first_record(self, any_index):
        any_index.insert(_record("https://example.com/a.png", KEY_A))
        with pytest.raises(DuplicateRecordError):
            any_index.insert(_record("https://example.com/a.png", KEY_B))
        assert any_index.find_by_url("https://example.com/a.png").content_key == KEY_A

    def test_shared_content_key_allowed(self, any_index):
        any_index.insert(_record("https://example.com/a.png", KEY_A))
        any_index.insert(_record("https://mirror.example.com/a.png", KEY_A))
        found = any_index.find_by_key(KEY_A)
        assert {r.source_url for r in found} == {
            "https://example.com/a.png",
            "https://mirror.example.com/a.png",
        }

    def test_records(self, any_index):
        any_index.insert(_record("https://example.com/1.png", created_at=1.0))
        any_index.insert(_record("https://example.com/2.png", KEY_B, created_at=2.0))
        assert [r.source_url for r in any_index.records()] == [
            "https://example.com/1.png",
            "https://example.com/2.png",
        ]

    def test_summary(self, any_index):
        any_index.insert(_record("https://example.com/1.png", KEY_A))
        any_index.insert(_record("https://example.com/2.png", KEY_A))
        any_index.insert(
            _record("https://example.com/3.png", KEY_B, original_size=2000, compressed_size=200)
        )
        summary = any_index.summary()
        assert summary.entries == 3
        assert summary.distinct_content_keys == 2
        assert summary.original_bytes == 4000
        assert summary.compressed_bytes == 1000
        assert summary.savings_ratio == pytest.approx(0.75)

    def test_empty_summary(self, any_index):
        summary = any_index.summary()
        assert summary.entries == 0
        assert summary.savings_ratio == 0.0


class TestSqliteIndex:
    def test_persistence(self, tmp_path):
        db_path = tmp_path / "index.db"
        idx1 = SqliteIndex(db_path)
        idx1.insert(_record("https://example.com/a.png", created_at=123.5))
        idx1.close()

        idx2 = SqliteIndex(db_path)
        try:
            found = idx2.find_by_url("https://example.com/a.png")
            assert found is not None
            assert found.created_at == 123.5
            assert found.mime_type == "image/jpeg"
        finally:
            idx2.close()

    def test_creates_parent_dir(self, tmp_path):
        idx = SqliteIndex(tmp_path / "deep" / "dir" / "index.db")
        try:
            assert (tmp_path / "deep" / "dir").is_dir()
        finally:
            idx.close()
