"""Tests for the derivation cache store."""

from trackfx import ABSENT, CacheEntry, DerivationCache, FieldRef, MapCache

owner = object()
A = FieldRef(owner, "a")
B = FieldRef(owner, "b")


class TestMapCache:
    def test_get_unknown(self):
        assert MapCache().get("total") is None

    def test_add_creates_absent_entry(self):
        cache = MapCache()
        cache.add("total", [A, B])
        entry = cache.get("total")
        assert entry.dependencies == {A, B}
        assert entry.value is ABSENT
        assert not entry.has_value

    def test_add_overwrites(self):
        cache = MapCache()
        cache.add("total", [A])
        cache.get("total").value = 3
        cache.add("total", [B])
        entry = cache.get("total")
        assert entry.dependencies == {B}
        assert entry.value is ABSENT

    def test_add_dependency(self):
        cache = MapCache()
        cache.add("total", [A])
        cache.add_dependency("total", B)
        cache.add_dependency("total", B)
        assert cache.get("total").dependencies == {A, B}

    def test_add_dependency_unknown_is_noop(self):
        cache = MapCache()
        cache.add_dependency("nope", A)
        assert cache.get("nope") is None
        assert len(cache) == 0

    def test_invalidate_clears_value_keeps_entry(self):
        cache = MapCache()
        cache.add("uses_a", [A])
        cache.add("uses_b", [B])
        cache.get("uses_a").value = 1
        cache.get("uses_b").value = 2

        cache.invalidate(A)

        assert cache.get("uses_a").value is ABSENT
        assert cache.get("uses_a").dependencies == {A}
        assert cache.get("uses_b").value == 2

    def test_invalidate_skips_empty_dependency_entries(self):
        cache = MapCache()
        cache.add("const", [])
        cache.get("const").value = 42
        cache.invalidate(A)
        assert cache.get("const").value == 42

    def test_remove(self):
        cache = MapCache()
        cache.add("total", [A])
        cache.remove("total")
        cache.remove("total")  # already gone, no error
        assert "total" not in cache

    def test_iteration(self):
        cache = MapCache()
        cache.add("x", [])
        cache.add("y", [A])
        assert list(cache) == ["x", "y"]
        assert "MapCache" in repr(cache)

    def test_satisfies_protocol(self):
        assert isinstance(MapCache(), DerivationCache)


class TestCacheEntry:
    def test_falsy_values_are_present(self):
        for value in (0, "", False, None, []):
            assert CacheEntry(set(), value).has_value

    def test_absent_sentinel(self):
        assert not ABSENT
        assert repr(ABSENT) == "ABSENT"
        assert not CacheEntry().has_value
