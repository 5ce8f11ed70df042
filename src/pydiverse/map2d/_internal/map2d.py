from __future__ import annotations

from collections.abc import (
    Callable,
    Hashable,
    Iterable,
    Iterator,
    KeysView,
    Mapping,
    MutableMapping,
)
from types import MappingProxyType
from typing import Any, Generic, TypeVar

import pandas as pd
import polars as pl
import structlog

from pydiverse.map2d._internal import export as export_
from pydiverse.map2d._internal.errors import check_arg_type, check_callable, check_key
from pydiverse.map2d._internal.targets import Target

R = TypeVar("R", bound=Hashable)
C = TypeVar("C", bound=Hashable)
V = TypeVar("V")

R2 = TypeVar("R2", bound=Hashable)
C2 = TypeVar("C2", bound=Hashable)
V2 = TypeVar("V2")

logger = structlog.get_logger(__name__)


class Map2d(Generic[R, C, V]):
    """
    Two-dimensional map, keyed by a (row key, column key) pair.

    It can be viewed as a sheet of rows and cells. Row and column keys are
    compared by equality and must be hashable; neither may be `None`.
    Values can be anything, including `None`.

    Internally every row key maps to its own dict of column key to value.
    Rows that become empty are dropped. The number of stored entries is
    tracked separately so `size()` is O(1).

    All `*_view` methods return read-only snapshots. Mutating the Map2d
    afterwards is never visible through a view obtained earlier.

    Iteration follows insertion order: rows in the order they were first
    written to, and columns within a row likewise.

    A stored `None` reads as absent for `get`, `get_or_default` and
    `contains_key`. Key presence decides everything else (`remove`, `size`,
    `in`, `[]`, `contains_row`, `contains_column`).
    """

    def __init__(self, mapping: Mapping[R, Mapping[C, V]] | None = None):
        self._mapping: dict[R, dict[C, V]] = dict()
        self._size = 0
        if mapping is not None:
            self.update(mapping)

    @classmethod
    def from_entries(cls, entries: Iterable[tuple[R, C, V]]) -> Map2d[R, C, V]:
        m = cls()
        for row_key, column_key, value in entries:
            m.put(row_key, column_key, value)
        return m

    @classmethod
    def from_polars(
        cls,
        df: pl.DataFrame | pl.LazyFrame,
        *,
        row: str = "row",
        column: str = "column",
        value: str = "value",
    ) -> Map2d:
        """
        Build a Map2d from a long-format polars data frame with one entry per row.
        If a key occurs more than once, the last row wins.
        """
        return cls.from_entries(
            export_.entries_from_polars(df, row=row, column=column, value=value)
        )

    @classmethod
    def from_pandas(
        cls,
        df: pd.DataFrame,
        *,
        row: str = "row",
        column: str = "column",
        value: str = "value",
    ) -> Map2d:
        return cls.from_entries(
            export_.entries_from_pandas(df, row=row, column=column, value=value)
        )

    # --- single entries ---

    def put(self, row_key: R, column_key: C, value: V) -> V | None:
        """
        Store `value` under (`row_key`, `column_key`), replacing what was there.

        Returns the previously stored value, or `None` if there was none.
        Raises `NullKeyError` if either key is `None`.
        """
        check_key("put", row_key, column_key)
        # unhashable keys must fail before a new row is created
        hash(column_key)
        row = self._mapping.get(row_key)
        if row is None:
            row = self._mapping[row_key] = dict()
        if column_key not in row:
            self._size += 1
        previous = row.get(column_key)
        row[column_key] = value
        return previous

    def get(self, row_key: R, column_key: C) -> V | None:
        row = self._mapping.get(row_key)
        if row is None:
            return None
        return row.get(column_key)

    def get_or_default(self, row_key: R, column_key: C, default: V) -> V:
        """
        Like `get`, but returns `default` if nothing is stored. A stored `None`
        counts as nothing stored, so `default` is returned for it as well.
        """
        value = self.get(row_key, column_key)
        if value is None:
            return default
        return value

    def remove(self, row_key: R, column_key: C) -> V | None:
        row = self._mapping.get(row_key)
        if row is None or column_key not in row:
            return None
        value = row.pop(column_key)
        self._size -= 1
        if not row:
            del self._mapping[row_key]
        return value

    # --- size ---

    def is_empty(self) -> bool:
        return self._size == 0

    def non_empty(self) -> bool:
        return self._size != 0

    def size(self) -> int:
        return self._size

    def clear(self) -> None:
        self._mapping.clear()
        self._size = 0

    # --- views ---

    def row_view(self, row_key: R) -> Mapping[C, V]:
        return MappingProxyType(dict(self._mapping.get(row_key, ())))

    def column_view(self, column_key: C) -> Mapping[R, V]:
        # built from the full transpose, so this is O(size) and not O(column size)
        column = self.column_map_view().get(column_key)
        if column is None:
            return MappingProxyType(dict())
        return column

    def row_map_view(self) -> Mapping[R, Mapping[C, V]]:
        return MappingProxyType(
            {
                row_key: MappingProxyType(dict(row))
                for row_key, row in self._mapping.items()
            }
        )

    def column_map_view(self) -> Mapping[C, Mapping[R, V]]:
        columns: dict[C, dict[R, V]] = dict()
        for row_key, column_key, value in self.entries():
            columns.setdefault(column_key, dict())[row_key] = value
        return MappingProxyType(
            {column_key: MappingProxyType(col) for column_key, col in columns.items()}
        )

    # --- lookups ---

    def contains_value(self, value: V) -> bool:
        return any(v == value for row in self._mapping.values() for v in row.values())

    def contains_key(self, row_key: R, column_key: C) -> bool:
        return self.get(row_key, column_key) is not None

    def contains_row(self, row_key: R) -> bool:
        return row_key in self._mapping

    def contains_column(self, column_key: C) -> bool:
        return any(column_key in row for row in self._mapping.values())

    # --- bulk operations, all of them return `self` ---

    def fill_map_from_row(self, target: MutableMapping[C, V] | None, row_key: R):
        """
        Replace the contents of `target` with the entries of row `row_key`.

        Nothing happens, and `target` keeps its contents, if `target` is `None`
        or the row does not exist.
        """
        if target is None or self.is_empty():
            return self
        row = self._mapping.get(row_key)
        if row is None:
            return self
        target.clear()
        target.update(row)
        return self

    def fill_map_from_column(
        self, target: MutableMapping[R, V] | None, column_key: C
    ):
        if target is None or self.is_empty():
            return self
        column = self.column_map_view().get(column_key)
        if not column:
            return self
        target.clear()
        target.update(column)
        return self

    def put_all(self, source: Map2d[R, C, V] | None):
        if source is None:
            return self
        check_arg_type(Map2d, "Map2d.put_all", "source", source)
        for row_key, row in source.row_map_view().items():
            for column_key, value in row.items():
                self.put(row_key, column_key, value)
        return self

    def put_all_to_row(self, source: Mapping[C, V] | None, row_key: R):
        """
        Merge a flat mapping of column key to value into row `row_key`.
        Existing entries of the row are overwritten on collision.
        """
        if source is None:
            return self
        for column_key in source:
            check_key("put_all_to_row", row_key, column_key)

        row = self._mapping.get(row_key)
        if row is None:
            if not source:
                return self
            row = self._mapping[row_key] = dict()
        self._size -= len(row)
        row.update(source)
        self._size += len(row)
        return self

    def put_all_to_column(self, source: Mapping[R, V] | None, column_key: C):
        """
        Merge a flat mapping of row key to value into column `column_key`.
        """
        if source is None:
            return self
        for row_key in source:
            check_key("put_all_to_column", row_key, column_key)
        if source:
            hash(column_key)

        for row_key, value in source.items():
            row = self._mapping.get(row_key)
            if row is None:
                self.put(row_key, column_key, value)
                continue
            self._size -= len(row)
            row[column_key] = value
            self._size += len(row)
        return self

    def update(self, other: Map2d[R, C, V] | Mapping[R, Mapping[C, V]]):
        check_arg_type(Map2d | Mapping, "Map2d.update", "other", other)
        if isinstance(other, Map2d):
            return self.put_all(other)
        for row_key, row in other.items():
            check_arg_type(Mapping, "Map2d.update", f"other[{row_key!r}]", row)
        for row_key, row in other.items():
            self.put_all_to_row(row, row_key)
        return self

    def map_values(self, fn: Callable[[V], Any]):
        check_callable("Map2d.map_values", "fn", fn)
        self._mapping = {
            row_key: {column_key: fn(val) for column_key, val in row.items()}
            for row_key, row in self._mapping.items()
        }
        return self

    # --- conversion ---

    def copy_with_conversion(
        self,
        row_fn: Callable[[R], R2],
        column_fn: Callable[[C], C2],
        value_fn: Callable[[V], V2],
    ) -> Map2d[R2, C2, V2]:
        """
        Create a new Map2d by converting every row key, column key and value.

        If several entries end up with the same converted key, the one that
        comes first in iteration order (i.e. insertion order) is kept and the
        others are dropped.
        """
        fn = "Map2d.copy_with_conversion"
        check_callable(fn, "row_fn", row_fn)
        check_callable(fn, "column_fn", column_fn)
        check_callable(fn, "value_fn", value_fn)

        converted: Map2d[R2, C2, V2] = Map2d()
        dropped = 0
        for row_key, column_key, value in self.entries():
            new_key = (row_fn(row_key), column_fn(column_key))
            if new_key in converted:
                dropped += 1
                continue
            converted.put(*new_key, value_fn(value))

        if dropped:
            logger.debug(
                "key conversion produced collisions, kept first entry per key",
                dropped=dropped,
                size=converted.size(),
            )
        return converted

    def export(
        self,
        target: Target,
        *,
        row: str = "row",
        column: str = "column",
        value: str = "value",
    ) -> Any:
        """
        Convert to the format described by `target`.

        :param target: One of `Polars`, `Pandas`, `Dict`, `DictOfLists` or
            `ListOfDicts`. Data frames and flat formats are in long format,
            with one row (or record) per entry.
        :param row: Name of the column holding row keys.
        :param column: Name of the column holding column keys.
        :param value: Name of the column holding values.
        """
        check_arg_type(Target, "Map2d.export", "target", target)
        return export_.export(self, target, row=row, column=column, value=value)

    def copy(self) -> Map2d[R, C, V]:
        return self.__copy__()

    # --- iteration ---

    def entries(self) -> Iterator[tuple[R, C, V]]:
        for row_key, row in self._mapping.items():
            for column_key, value in row.items():
                yield row_key, column_key, value

    def values(self) -> Iterator[V]:
        for row in self._mapping.values():
            yield from row.values()

    def row_keys(self) -> KeysView[R]:
        return dict.fromkeys(self._mapping).keys()

    def column_keys(self) -> KeysView[C]:
        return dict.fromkeys(
            column_key for row in self._mapping.values() for column_key in row
        ).keys()

    # --- python protocol ---

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self.non_empty()

    def __contains__(self, key: tuple[R, C]) -> bool:
        row_key, column_key = key
        row = self._mapping.get(row_key)
        return row is not None and column_key in row

    def __getitem__(self, key: tuple[R, C]) -> V:
        row_key, column_key = key
        row = self._mapping.get(row_key)
        if row is None or column_key not in row:
            raise KeyError(key)
        return row[column_key]

    def __setitem__(self, key: tuple[R, C], value: V):
        row_key, column_key = key
        self.put(row_key, column_key, value)

    def __delitem__(self, key: tuple[R, C]):
        if key not in self:
            raise KeyError(key)
        self.remove(*key)

    def __iter__(self) -> Iterator[tuple[R, C]]:
        for row_key, row in self._mapping.items():
            for column_key in row:
                yield row_key, column_key

    def __eq__(self, other) -> bool:
        if not isinstance(other, Map2d):
            return NotImplemented
        return self._mapping == other._mapping

    __hash__ = None

    def __repr__(self):
        return f"{self.__class__.__name__}({self._mapping!r})"

    def __copy__(self):
        return self.__class__(self._mapping)
