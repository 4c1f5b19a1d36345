"""Table state bundle and the pure transitions that update it.

Every transition returns a new TableState; nothing here mutates its input or
the loaded rows.
"""

import math
from dataclasses import dataclass, field, replace
from typing import Any

import polars as pl

from table.columns import ColumnDef, find_column

PAGE_SIZE_OPTIONS = (10, 25, 50)
DEFAULT_PAGE_SIZE = 10


@dataclass(frozen=True)
class SortKey:
    column: str
    descending: bool = False


@dataclass(frozen=True)
class TableState:
    rows: pl.DataFrame | None = field(default=None, compare=False)
    loading: bool = True
    load_failed: bool = False
    sorting: tuple[SortKey, ...] = ()
    global_filter: str = ""
    column_filter: tuple[str, Any] | None = None
    page_index: int = 0
    page_size: int = DEFAULT_PAGE_SIZE


def data_loaded(state: TableState, rows: pl.DataFrame) -> TableState:
    return replace(state, rows=rows, loading=False, load_failed=False, page_index=0)


def data_failed(state: TableState) -> TableState:
    """Settle into an empty, non-loading state after a failed load."""
    return replace(state, rows=None, loading=False, load_failed=True, page_index=0)


def set_sorting(state: TableState, sorting: list[SortKey] | tuple[SortKey, ...]) -> TableState:
    return replace(state, sorting=tuple(sorting), page_index=0)


def toggle_sort(state: TableState, columns: list[ColumnDef], key: str) -> TableState:
    """Header click: make `key` the only sort key, cycling asc -> desc -> unsorted."""
    column = find_column(columns, key)
    if not column.sortable:
        return state

    current = next((s for s in state.sorting if s.column == key), None)
    if current is None:
        sorting = (SortKey(key),)
    elif not current.descending:
        sorting = (SortKey(key, descending=True),)
    else:
        sorting = ()
    return set_sorting(state, sorting)


def set_global_filter(state: TableState, text: str) -> TableState:
    return replace(state, global_filter=text or "", page_index=0)


def set_column_filter(state: TableState, column: str, value: Any) -> TableState:
    """Constrain `column` to equal `value`; an empty value unsets the filter."""
    column_filter = None if value in (None, "") else (column, value)
    return replace(state, column_filter=column_filter, page_index=0)


def clear_filters(state: TableState) -> TableState:
    return replace(state, global_filter="", column_filter=None, page_index=0)


def page_count(filtered_count: int, page_size: int) -> int:
    return math.ceil(filtered_count / page_size)


def clamp_page_index(page_index: int, filtered_count: int, page_size: int) -> int:
    last = max(page_count(filtered_count, page_size) - 1, 0)
    return min(max(page_index, 0), last)


def set_page_size(
    state: TableState,
    page_size: int,
    options: tuple[int, ...] = PAGE_SIZE_OPTIONS,
) -> TableState:
    if page_size not in options:
        raise ValueError(f"Page size must be one of {', '.join(map(str, options))}, got {page_size}")
    return replace(state, page_size=page_size, page_index=0)


def set_page_index(state: TableState, page_index: int, filtered_count: int) -> TableState:
    return replace(state, page_index=clamp_page_index(page_index, filtered_count, state.page_size))
