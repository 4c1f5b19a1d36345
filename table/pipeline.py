from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

import polars as pl

from table.columns import ColumnDef, find_column
from table.state import SortKey, TableState, clamp_page_index, page_count

GlobalFilter = Callable[[str], pl.Expr]


@dataclass
class TablePage:
    """The visible slice of the table plus the counts around it."""
    rows: pl.DataFrame
    filtered_count: int
    page_count: int
    page_index: int
    page_size: int

    @property
    def is_empty(self) -> bool:
        return self.filtered_count == 0


def contains_filter(key: str) -> GlobalFilter:
    """Case-insensitive substring match against one column."""
    def predicate(text: str) -> pl.Expr:
        return pl.col(key).str.to_lowercase().str.contains(text.lower(), literal=True)
    return predicate


def apply_column_filter(df: pl.DataFrame, column_filter: tuple[str, Any] | None) -> pl.DataFrame:
    if column_filter is None:
        return df
    key, value = column_filter
    if isinstance(value, Enum):
        value = value.value
    return df.filter(pl.col(key) == value)


def apply_global_filter(df: pl.DataFrame, text: str, predicate: GlobalFilter | None) -> pl.DataFrame:
    if not text or predicate is None:
        return df
    return df.filter(predicate(text))


def apply_sort(df: pl.DataFrame, sorting: tuple[SortKey, ...], columns: list[ColumnDef]) -> pl.DataFrame:
    """Stable multi-key sort. Columns with a sort key sort by its output."""
    if not sorting or df.is_empty():
        return df

    by = []
    helper_cols = []
    for i, sort in enumerate(sorting):
        key_fn = find_column(columns, sort.column).key_fn()
        if key_fn is None:
            by.append(sort.column)
            continue
        name = f"__sort_{i}"
        keys = [key_fn(v) for v in df[sort.column].to_list()]
        df = df.with_columns(pl.Series(name, keys, strict=False))
        by.append(name)
        helper_cols.append(name)

    sorted_df = df.sort(
        by,
        descending=[s.descending for s in sorting],
        nulls_last=True,
        maintain_order=True,
    )
    return sorted_df.drop(helper_cols)


def paginate(df: pl.DataFrame, page_index: int, page_size: int) -> pl.DataFrame:
    return df.slice(page_index * page_size, page_size)


def filtered_rows(
    state: TableState,
    columns: list[ColumnDef],
    global_filter: GlobalFilter | None = None,
) -> pl.DataFrame:
    """Filter and sort the loaded rows, without paginating."""
    df = state.rows
    if df is None:
        return pl.DataFrame()
    if df.is_empty():
        return df

    df = apply_column_filter(df, state.column_filter)
    df = apply_global_filter(df, state.global_filter, global_filter)
    return apply_sort(df, state.sorting, columns)


def derive(
    state: TableState,
    columns: list[ColumnDef],
    global_filter: GlobalFilter | None = None,
) -> TablePage:
    """Run filter -> sort -> paginate over the current state.

    An out-of-range page index is clamped to the last page, never raised.
    """
    df = filtered_rows(state, columns, global_filter)
    count = df.height
    index = clamp_page_index(state.page_index, count, state.page_size)
    return TablePage(
        rows=paginate(df, index, state.page_size),
        filtered_count=count,
        page_count=page_count(count, state.page_size),
        page_index=index,
        page_size=state.page_size,
    )
