import click

from table.columns import ColumnDef
from table.view import LOADING_LABEL, TableView

SORT_INDICATORS = {None: "↕", "asc": "↑", "desc": "↓"}
EMPTY_MESSAGE = "No results match your filters."
MAX_CELL_WIDTH = 32


def _header(view: TableView, column: ColumnDef) -> str:
    if not column.sortable:
        return column.label
    return f"{column.label} {SORT_INDICATORS[view.sort_direction(column.key)]}"


def _clip(line: str) -> str:
    if len(line) <= MAX_CELL_WIDTH:
        return line
    return line[:MAX_CELL_WIDTH - 1] + "…"


def _toolbar(view: TableView) -> str:
    state = view.state
    parts = [f"Search: {state.global_filter!r}" if state.global_filter else "Search: -"]
    if state.column_filter:
        key, value = state.column_filter
        parts.append(f"{key}: {value}")
    else:
        parts.append("Filter: all")
    if state.sorting:
        parts.append("Sort: " + ", ".join(
            f"{s.column} {'desc' if s.descending else 'asc'}" for s in state.sorting
        ))
    return " | ".join(parts)


def _footer(view: TableView, color: bool) -> str:
    def control(label: str, enabled: bool) -> str:
        text = f"[{label}]"
        if color and not enabled:
            return click.style(text, dim=True)
        return text if enabled else f" {label} "

    controls = " ".join([
        control("First", view.can_previous_page()),
        control("Prev", view.can_previous_page()),
        control("Next", view.can_next_page()),
        control("Last", view.can_next_page()),
    ])
    return f"Rows per page: {view.state.page_size}    {view.page_label()}    {controls}"


def render_table(
    view: TableView,
    color: bool = True,
    loading_label: str = LOADING_LABEL,
    empty_message: str = EMPTY_MESSAGE,
) -> str:
    """Render the current page of a view as plain (optionally styled) text.

    Loading and empty results each render their own message instead of a table.
    """
    if view.loading:
        return loading_label

    lines = [_toolbar(view), ""]
    page = view.page()
    if page.is_empty:
        lines.append(empty_message)
        lines.append("Use 'clear' to reset filters.")
        return "\n".join(lines)

    columns = view.columns
    headers = [_header(view, c) for c in columns]

    # Each cell is a list of display lines; widths are measured before styling
    grid = []
    for row in page.rows.iter_rows(named=True):
        grid.append([
            ([_clip(part) for part in c.render_cell(row).split("\n")], c.badge_color(row))
            for c in columns
        ])

    widths = [len(h) for h in headers]
    for cells in grid:
        for i, (parts, _) in enumerate(cells):
            widths[i] = max(widths[i], *(len(p) for p in parts))

    lines.append(" | ".join(h.ljust(widths[i]) for i, h in enumerate(headers)))
    lines.append("-+-".join("-" * w for w in widths))
    for cells in grid:
        height = max(len(parts) for parts, _ in cells)
        for n in range(height):
            out = []
            for i, (parts, badge) in enumerate(cells):
                text = (parts[n] if n < len(parts) else "").ljust(widths[i])
                if color and badge:
                    text = click.style(text, fg=badge)
                out.append(text)
            lines.append(" | ".join(out).rstrip())
    lines.append("")
    lines.append(_footer(view, color))
    return "\n".join(lines)
