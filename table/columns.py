from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable

# Non-ISO date forms accepted by parse_timestamp, tried in order
FALLBACK_DATE_FORMATS = ["%m/%d/%Y", "%b %d, %Y", "%Y-%m-%d"]


class ColumnKind(Enum):
    TEXT = "text"
    CURRENCY = "currency"
    DATE = "date"
    BADGE = "badge"


def parse_timestamp(value: Any) -> float | None:
    """Convert a date-like string to epoch seconds; naive values are taken as UTC.

    Accepts ISO 8601 (with or without a trailing Z) plus a few non-ISO forms
    such as 1/2/2024 and "Jan 02, 2024". Returns None for empty or
    unparseable values so they sort last.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        moment = value
    else:
        text = str(value).strip()
        try:
            moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            moment = None
            for fmt in FALLBACK_DATE_FORMATS:
                try:
                    moment = datetime.strptime(text, fmt)
                    break
                except ValueError:
                    continue
            if moment is None:
                return None

    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.timestamp()


def _to_utc(iso: str) -> datetime | None:
    timestamp = parse_timestamp(iso)
    if timestamp is None:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def text_sort_key(value: Any) -> str | None:
    """Case-insensitive text comparison."""
    if value is None:
        return None
    return str(value).lower()


def format_usd(cents: int) -> str:
    return f"${cents / 100:,.2f}"


def format_date(iso: str) -> str:
    """Jan 02, 2024; unparseable values are shown as-is."""
    moment = _to_utc(iso)
    if moment is None:
        return "" if iso is None else str(iso)
    return moment.strftime("%b %d, %Y")


def format_time(iso: str) -> str:
    """1:05 PM; empty when the value is not a date."""
    moment = _to_utc(iso)
    if moment is None:
        return ""
    return moment.strftime("%I:%M %p").lstrip("0")


@dataclass(frozen=True)
class ColumnDef:
    """Declarative description of one table column.

    `sort_key` maps a cell value to the value actually compared when sorting;
    `render` maps (value, row) to the displayed text. Both default by kind:
    text columns compare case-insensitively, date columns compare as
    timestamps and render as "Jan 02, 2024", currency columns render
    cents as dollars.
    """
    key: str
    label: str
    kind: ColumnKind = ColumnKind.TEXT
    sortable: bool = False
    sort_key: Callable[[Any], Any] | None = None
    render: Callable[[Any, dict], str] | None = None
    badge_colors: dict[str, str] | None = None
    badge_field: str | None = None  # row field that picks the color, defaults to key

    def badge_color(self, row: dict) -> str | None:
        if self.kind != ColumnKind.BADGE or not self.badge_colors:
            return None
        return self.badge_colors.get(row.get(self.badge_field or self.key))

    def key_fn(self) -> Callable[[Any], Any] | None:
        if self.sort_key is not None:
            return self.sort_key
        if self.kind == ColumnKind.DATE:
            return parse_timestamp
        if self.kind == ColumnKind.TEXT:
            return text_sort_key
        return None

    def render_cell(self, row: dict) -> str:
        value = row.get(self.key)
        if self.render is not None:
            return self.render(value, row)
        if value is None:
            return ""
        if self.kind == ColumnKind.CURRENCY:
            return format_usd(value)
        if self.kind == ColumnKind.DATE:
            return format_date(value)
        return str(value)


def find_column(columns: list[ColumnDef], key: str) -> ColumnDef:
    for column in columns:
        if column.key == key:
            return column
    raise ValueError(f"Unknown column: {key}")
