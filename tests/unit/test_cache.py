"""Unit tests for the resume cache."""

import json

import pytest
from reqtree.core.cache import ResumeCache


class TestResumeCache:
    """Tests for ResumeCache."""

    @pytest.fixture
    def cache(self):
        return ResumeCache()

    def test_miss_then_hit(self, cache):
        assert cache.get("COMPSCI 161", "abc") is None
        cache.put("COMPSCI 161", "abc", {"AND": []})
        assert cache.get("COMPSCI 161", "abc") == {"AND": []}
        assert (cache.hits, cache.misses) == (1, 1)

    def test_changed_fingerprint_is_a_miss(self, cache):
        cache.put("COMPSCI 161", "abc", {})
        assert cache.get("COMPSCI 161", "def") is None

    def test_put_marks_dirty_only_on_change(self, cache):
        cache.put("k", "f", 1)
        assert cache.dirty
        cache.dirty = False
        cache.put("k", "f", 1)
        assert not cache.dirty

    def test_container_protocol(self, cache):
        cache.put("a", "f", 1)
        cache.put("b", "f", 2)
        assert "a" in cache
        assert sorted(cache) == ["a", "b"]
        assert len(cache) == 2

    def test_load_missing_file_starts_empty(self, tmp_path):
        cache = ResumeCache.load(tmp_path / "cache.json")
        assert len(cache) == 0
        assert cache.source == tmp_path / "cache.json"

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "cache.json"
        cache = ResumeCache.load(path)
        cache.put("COMPSCI 161", "abc", {"OR": ["x"]})
        cache.save()
        assert not cache.dirty

        reloaded = ResumeCache.load(path)
        assert reloaded.get("COMPSCI 161", "abc") == {"OR": ["x"]}
        assert json.loads(path.read_text()) == {"COMPSCI 161": {"fingerprint": "abc", "value": {"OR": ["x"]}}}

    def test_save_without_path(self, cache):
        with pytest.raises(ValueError):
            cache.save()

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("{broken")
        with pytest.raises(ValueError, match="not valid JSON"):
            ResumeCache.load(path)

    def test_load_non_object(self, tmp_path):
        path = tmp_path / "cache.json"
        path.write_text("[]")
        with pytest.raises(ValueError, match="JSON object"):
            ResumeCache.load(path)

    def test_caches_are_independent(self):
        first, second = ResumeCache(), ResumeCache()
        first.put("k", "f", 1)
        assert "k" not in second
