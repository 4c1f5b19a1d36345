import asyncio
from typing import Any, Callable

import click
import polars as pl

from table.columns import ColumnDef
from table.pipeline import GlobalFilter, TablePage, derive
from table import state as st

LOADING_LABEL = "Loading…"


class LoadTask:
    """One-shot background load whose result is discarded once cancelled."""

    def __init__(self, load: Callable[[], pl.DataFrame]):
        self._load = load
        self.cancelled = False

    async def run(self) -> pl.DataFrame | None:
        rows = await asyncio.to_thread(self._load)
        if self.cancelled:
            return None
        return rows

    def cancel(self):
        self.cancelled = True


class TableView:
    """Owns one table's state: loads rows once, then derives pages on demand.

    All user actions are synchronous transitions over already-loaded rows.
    """

    def __init__(
        self,
        columns: list[ColumnDef],
        loader: Callable[[], pl.DataFrame],
        global_filter: GlobalFilter | None = None,
        page_size: int = st.DEFAULT_PAGE_SIZE,
        page_size_options: tuple[int, ...] = st.PAGE_SIZE_OPTIONS,
    ):
        self.columns = columns
        self.global_filter = global_filter
        self.page_size_options = page_size_options
        self.state = st.set_page_size(st.TableState(), page_size, page_size_options)
        self._loader = loader
        self._task: LoadTask | None = None

    # --- lifecycle ---

    async def mount(self):
        """Fetch rows once. A failure settles into the empty, non-loading state."""
        self._task = task = LoadTask(self._loader)
        try:
            rows = await task.run()
        except Exception as exc:
            if task.cancelled:
                return
            click.echo(f"Failed to load rows: {exc}", err=True)
            self.state = st.data_failed(self.state)
            return

        if rows is None:
            return
        self.state = st.data_loaded(self.state, rows)

    def unmount(self):
        """Tear down; a load still in flight will not touch this view."""
        if self._task is not None:
            self._task.cancel()

    def load(self) -> "TableView":
        asyncio.run(self.mount())
        return self

    # --- queries ---

    @property
    def loading(self) -> bool:
        return self.state.loading

    @property
    def load_failed(self) -> bool:
        return self.state.load_failed

    def page(self) -> TablePage:
        return derive(self.state, self.columns, self.global_filter)

    @property
    def is_empty(self) -> bool:
        """True once loading finished with nothing to show."""
        return not self.loading and self.page().is_empty

    def page_label(self) -> str:
        if self.loading:
            return LOADING_LABEL
        page = self.page()
        total = page.page_count or 1
        return f"Page {min(page.page_index + 1, total)} of {total}"

    def can_previous_page(self) -> bool:
        return self.page().page_index > 0

    def can_next_page(self) -> bool:
        page = self.page()
        return page.page_index < page.page_count - 1

    # --- transitions ---

    def toggle_sort(self, key: str):
        self.state = st.toggle_sort(self.state, self.columns, key)

    def set_sorting(self, sorting: list[st.SortKey]):
        self.state = st.set_sorting(self.state, sorting)

    def set_global_filter(self, text: str):
        self.state = st.set_global_filter(self.state, text)

    def set_column_filter(self, column: str, value: Any):
        self.state = st.set_column_filter(self.state, column, value)

    def clear_filters(self):
        self.state = st.clear_filters(self.state)

    def set_page_size(self, page_size: int):
        self.state = st.set_page_size(self.state, page_size, self.page_size_options)

    def set_page_index(self, page_index: int):
        self.state = st.set_page_index(self.state, page_index, self.page().filtered_count)

    def first_page(self):
        self.set_page_index(0)

    def previous_page(self):
        self.set_page_index(self.page().page_index - 1)

    def next_page(self):
        self.set_page_index(self.page().page_index + 1)

    def last_page(self):
        self.set_page_index(max(self.page().page_count - 1, 0))

    def sort_direction(self, key: str) -> str | None:
        for sort in self.state.sorting:
            if sort.column == key:
                return "desc" if sort.descending else "asc"
        return None
