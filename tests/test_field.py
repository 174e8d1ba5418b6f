"""Tests for observable fields."""

import pytest

from trackfx import ConfigurationError, FieldRef, cache_of, wrap, wrap_derivation, wrap_field


class TestObservableField:
    def test_get_set(self):
        obj = wrap({"x": 42})
        assert obj.x == 42
        obj.x = 100
        assert obj.x == 100

    def test_source_not_mutated(self):
        source = {"x": 1}
        obj = wrap(source)
        obj.x = 2
        assert source == {"x": 1}

    def test_unknown_attribute_rejected(self):
        obj = wrap({"x": 1})
        with pytest.raises(AttributeError):
            obj.y = 2

    def test_delete_rejected(self):
        obj = wrap({"x": 1})
        with pytest.raises(AttributeError, match="cannot delete"):
            del obj.x

    def test_read_outside_consumers_records_nothing(self):
        obj = wrap({"x": 1})
        obj.x
        assert len(cache_of(obj)) == 0


class TestWrapField:
    def test_missing_field(self):
        """Defining a field absent from the record fails before any read/write."""
        obj = wrap({"x": 1})
        with pytest.raises(ConfigurationError, match="'y' does not exist"):
            wrap_field(obj, "y")

    def test_reserved_name(self):
        obj = wrap({"x": 1})
        with pytest.raises(ConfigurationError, match="internals"):
            wrap_field(obj, "_tracked_values")

    @pytest.mark.parametrize("name", ["__class__", "__repr__", "__init__", "__weakref__"])
    def test_dunder_name(self, name):
        with pytest.raises(ConfigurationError, match="internals"):
            wrap({name: 1})

    def test_dunder_derived_name(self):
        obj = wrap({"x": 1})
        with pytest.raises(ConfigurationError, match="internals"):
            wrap_derivation(obj, "__repr__", lambda o: "nope")
        assert repr(obj) == "TrackedDict(x=1)"

    def test_non_string_name(self):
        with pytest.raises(ConfigurationError, match="must be strings"):
            wrap({1: "one"})

    def test_rewrap_existing_field(self):
        obj = wrap({"x": 1})
        wrap_field(obj, "x")
        obj.x = 5
        assert obj.x == 5


class TestDependencyRecording:
    def test_repeated_reads_recorded_once(self):
        obj = wrap({"a": 2}, derived={"poly": lambda o: o.a * o.a + o.a})
        assert obj.poly == 6
        deps = cache_of(obj).get("poly").dependencies
        assert deps == {FieldRef(obj, "a")}
        assert len(deps) == 1


class TestFieldRef:
    def test_identity_equality(self):
        first = wrap({"a": 1})
        second = wrap({"a": 1})
        assert FieldRef(first, "a") == FieldRef(first, "a")
        assert hash(FieldRef(first, "a")) == hash(FieldRef(first, "a"))
        assert FieldRef(first, "a") != FieldRef(second, "a")
        assert FieldRef(first, "a") != FieldRef(first, "b")

    def test_repr(self):
        obj = wrap({"a": 1})
        assert ".a)" in repr(FieldRef(obj, "a"))
