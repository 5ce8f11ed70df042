from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import pandas as pd
import polars as pl
import structlog

from pydiverse.map2d._internal.errors import ColumnNotFoundError, NullKeyError
from pydiverse.map2d._internal.targets import (
    Dict,
    DictOfLists,
    ListOfDicts,
    Pandas,
    Polars,
    Target,
)

if TYPE_CHECKING:
    from pydiverse.map2d._internal.map2d import Map2d

logger = structlog.get_logger(__name__)


def check_column_names(row: str, column: str, value: str):
    if len({row, column, value}) != 3:
        raise ValueError(
            "names for the row, column and value columns must be distinct, found "
            f"`{row}`, `{column}` and `{value}`"
        )


def export(m: Map2d, target: Target, *, row: str, column: str, value: str) -> Any:
    check_column_names(row, column, value)

    if isinstance(target, Dict):
        return {r: dict(cols) for r, cols in m.row_map_view().items()}

    if isinstance(target, ListOfDicts):
        return [{row: r, column: c, value: v} for r, c, v in m.entries()]

    data = {row: [], column: [], value: []}
    for r, c, v in m.entries():
        data[row].append(r)
        data[column].append(c)
        data[value].append(v)

    if isinstance(target, DictOfLists):
        return data

    if isinstance(target, Polars):
        df = pl.DataFrame(data)
        return df.lazy() if target.lazy else df

    if isinstance(target, Pandas):
        return pd.DataFrame(data)

    raise TypeError(
        f"cannot export a Map2d to target of type `{type(target).__name__}`\n"
        "hint: use one of `Polars`, `Pandas`, `Dict`, `DictOfLists`, `ListOfDicts`"
    )


def _check_columns_present(available: Iterable[str], needed: Iterable[str]):
    available = set(available)
    for name in needed:
        if name not in available:
            raise ColumnNotFoundError(
                f"column `{name}` does not exist in the data frame, available columns "
                "are " + ", ".join(f"`{c}`" for c in sorted(map(str, available)))
            )


def _log_duplicates(entries: list[tuple], source: str) -> list[tuple]:
    distinct = len({(r, c) for r, c, _ in entries})
    if distinct < len(entries):
        logger.debug(
            "duplicate keys in data frame, later rows overwrite earlier ones",
            source=source,
            rows=len(entries),
            distinct_keys=distinct,
        )
    return entries


def entries_from_polars(
    df: pl.DataFrame | pl.LazyFrame, *, row: str, column: str, value: str
) -> list[tuple]:
    check_column_names(row, column, value)
    if isinstance(df, pl.LazyFrame):
        df = df.collect()
    _check_columns_present(df.columns, (row, column, value))
    entries = list(df.select(row, column, value).iter_rows())
    return _log_duplicates(entries, "polars")


def entries_from_pandas(
    df: pd.DataFrame, *, row: str, column: str, value: str
) -> list[tuple]:
    check_column_names(row, column, value)
    _check_columns_present(df.columns, (row, column, value))
    # pandas stores missing keys as NaN or NaT, which `put` would accept
    for part, name in (("row", row), ("column", column)):
        if df[name].isna().any():
            raise NullKeyError(
                f"{part} key column `{name}` contains missing values\n"
                "hint: drop or fill these rows before building a Map2d"
            )
    entries = list(df[[row, column, value]].itertuples(index=False, name=None))
    return _log_duplicates(entries, "pandas")
