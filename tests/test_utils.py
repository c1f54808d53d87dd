"""Tests for the equality helpers."""

from snarflux import shallow_equal, strict_equal


class TestStrictEqual:
    def test_identity_only(self):
        a = {"x": 1}
        assert strict_equal(a, a)
        assert not strict_equal(a, {"x": 1})


class TestShallowEqual:
    def test_same_object(self):
        a = {"x": [1]}
        assert shallow_equal(a, a)

    def test_equal_scalars(self):
        assert shallow_equal({"a": 1, "b": "s", "c": None}, {"c": None, "b": "s", "a": 1})

    def test_nested_compared_by_identity(self):
        items = [1, 2]
        assert shallow_equal({"items": items}, {"items": items})
        assert not shallow_equal({"items": [1, 2]}, {"items": [1, 2]})

    def test_different_keys(self):
        assert not shallow_equal({"a": 1}, {"b": 1})
        assert not shallow_equal({"a": 1}, {"a": 1, "b": 2})

    def test_scalar_types_must_match(self):
        assert not shallow_equal({"a": 1}, {"a": True})
        assert not shallow_equal({"a": 1}, {"a": 1.0})

    def test_non_records(self):
        assert shallow_equal(3, 3)
        assert not shallow_equal(tuple([1]), tuple([1]))
        assert not shallow_equal({"a": 1}, None)

    def test_nan_matches_nan(self):
        assert shallow_equal({"v": float("nan")}, {"v": float("nan")})
        assert not shallow_equal({"v": float("nan")}, {"v": 1.0})
