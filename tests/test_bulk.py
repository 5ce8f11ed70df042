from __future__ import annotations

import pytest

from pydiverse.map2d import Map2d, NullKeyError


class TestFillMap:
    def test_fill_from_row(self, abc):
        target = {"old": 0}
        assert abc.fill_map_from_row(target, "A") is abc
        assert target == {"x": 1, "y": 2}

    def test_fill_from_missing_row(self, abc):
        target = {"old": 0}
        assert abc.fill_map_from_row(target, "missingRow") is abc
        assert target == {"old": 0}

    def test_fill_from_row_empty_map(self, empty):
        target = {"old": 0}
        assert empty.fill_map_from_row(target, "A") is empty
        assert target == {"old": 0}

    def test_fill_from_row_none_target(self, abc):
        assert abc.fill_map_from_row(None, "A") is abc

    def test_fill_from_column(self, abc):
        target = {"old": 0}
        assert abc.fill_map_from_column(target, "x") is abc
        assert target == {"A": 1, "B": 3}

    def test_fill_from_missing_column(self, abc, empty):
        target = {"old": 0}
        abc.fill_map_from_column(target, "z")
        empty.fill_map_from_column(target, "x")
        assert target == {"old": 0}
        assert abc.fill_map_from_column(None, "x") is abc

    def test_target_is_a_copy(self, abc):
        target = {}
        abc.fill_map_from_row(target, "A")
        target["x"] = 100
        assert abc.get("A", "x") == 1


class TestPutAll:
    def test_put_all(self, abc):
        other = Map2d({"A": {"x": 10, "z": 11}, "C": {"x": 12}})
        assert abc.put_all(other) is abc
        assert abc.row_map_view() == {
            "A": {"x": 10, "y": 2, "z": 11},
            "B": {"x": 3},
            "C": {"x": 12},
        }
        assert abc.size() == 5
        assert other.size() == 3

    def test_put_all_none(self, abc):
        assert abc.put_all(None) is abc
        assert abc.size() == 3

    def test_put_all_self(self, abc):
        abc.put_all(abc)
        assert abc.size() == 3

    def test_put_all_wrong_type(self, abc):
        with pytest.raises(TypeError, match="source"):
            abc.put_all({"A": {"x": 1}})


class TestPutAllToRow:
    def test_new_row(self, empty):
        assert empty.put_all_to_row({"x": 10, "y": 20}, "C") is empty
        assert empty.size() == 2
        assert empty.get("C", "x") == 10

    def test_merge_into_row(self, abc):
        abc.put_all_to_row({"x": 10, "z": 30}, "A")
        assert abc.row_view("A") == {"x": 10, "y": 2, "z": 30}
        assert abc.size() == 4

    def test_none_and_empty_source(self, abc):
        assert abc.put_all_to_row(None, "A") is abc
        abc.put_all_to_row({}, "Z")
        assert not abc.contains_row("Z")
        assert abc.size() == 3

    def test_source_is_copied(self, empty):
        source = {"x": 1}
        empty.put_all_to_row(source, "A")
        source["y"] = 2
        assert empty.row_view("A") == {"x": 1}
        assert empty.size() == 1

    def test_none_keys(self, abc):
        with pytest.raises(NullKeyError):
            abc.put_all_to_row({"x": 1}, None)
        with pytest.raises(NullKeyError):
            abc.put_all_to_row({"z": 1, None: 2}, "A")
        assert abc.row_view("A") == {"x": 1, "y": 2}
        assert abc.size() == 3


class TestPutAllToColumn:
    def test_put_all_to_column(self, abc):
        assert abc.put_all_to_column({"A": 10, "C": 30}, "x") is abc
        assert abc.column_view("x") == {"A": 10, "B": 3, "C": 30}
        assert abc.size() == 4

    def test_new_column_on_existing_row(self, abc):
        abc.put_all_to_column({"A": 5, "B": 6}, "z")
        assert abc.row_view("A") == {"x": 1, "y": 2, "z": 5}
        assert abc.size() == 5

    def test_none_source(self, abc):
        assert abc.put_all_to_column(None, "x") is abc
        assert abc.size() == 3

    def test_none_column_key(self, abc):
        with pytest.raises(NullKeyError):
            abc.put_all_to_column({"A": 1}, None)
        with pytest.raises(NullKeyError):
            abc.put_all_to_column({"Z": 1}, None)
        assert abc.size() == 3

    def test_none_row_key_leaves_map_unchanged(self, abc):
        with pytest.raises(NullKeyError):
            abc.put_all_to_column({"A": 100, None: 2}, "x")
        assert abc.get("A", "x") == 1
        assert abc.size() == 3

    def test_unhashable_column_key(self, abc):
        with pytest.raises(TypeError):
            abc.put_all_to_column({"A": 1}, ["x"])
        assert abc.row_view("A") == {"x": 1, "y": 2}
        assert abc.size() == 3

    def test_chaining(self, empty):
        empty.put_all_to_row({"x": 1}, "A").put_all_to_column({"B": 2}, "x")
        assert empty.column_view("x") == {"A": 1, "B": 2}


class TestCopyWithConversion:
    def test_identity(self, abc):
        copy = abc.copy_with_conversion(lambda r: r, lambda c: c, lambda v: v)
        assert copy == abc
        assert copy is not abc

        copy.put("A", "x", 100)
        copy.put("D", "d", 0)
        assert abc.get("A", "x") == 1
        assert not abc.contains_row("D")
        assert abc.size() == 3

    def test_conversion(self, abc):
        copy = abc.copy_with_conversion(str.lower, str.upper, lambda v: v * 10)
        assert copy.row_map_view() == {"a": {"X": 10, "Y": 20}, "b": {"X": 30}}
        assert copy.size() == 3

    def test_collision_keeps_first(self, abc):
        copy = abc.copy_with_conversion(lambda r: "row", lambda c: c, str)
        assert copy.row_map_view() == {"row": {"x": "1", "y": "2"}}
        assert copy.size() == 2

    def test_collision_keeps_first_none(self, empty):
        empty.put("A", "x", None)
        empty.put("B", "x", 1)
        copy = empty.copy_with_conversion(lambda r: 0, lambda c: 0, lambda v: v)
        assert (0, 0) in copy
        assert copy.get(0, 0) is None
        assert copy.size() == 1

    def test_empty(self, empty):
        copy = empty.copy_with_conversion(str, str, str)
        assert copy.is_empty()

    def test_not_callable(self, abc):
        with pytest.raises(TypeError, match="column_fn"):
            abc.copy_with_conversion(str, "x", str)
