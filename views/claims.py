from pathlib import Path

from data.loader import load_claims
from data.models import DEFAULT_COVERAGE_TYPE, DEFAULT_SYNC_DETAIL, ClaimStatus
from table.columns import ColumnDef, ColumnKind, format_date, format_time
from table.pipeline import contains_filter
from table.state import DEFAULT_PAGE_SIZE
from table.view import TableView

STATUS_COLUMN = "status"
SEARCH_COLUMN = "patientName"

# "" means no status filter
STATUS_OPTIONS = [""] + [s.value for s in ClaimStatus]

COVERAGE_COLORS = {"Primary": "cyan", "Secondary": "yellow"}
SYNC_COLORS = {"Synced": "green", "Not synced": "bright_black"}

CLAIMS_LOADING_LABEL = "Loading claims…"


def _patient(value, row: dict) -> str:
    return f"{value}\nID: {row['patientId']}"


def _carrier(value, row: dict) -> str:
    return f"{value}\n[{row.get('coverageType') or DEFAULT_COVERAGE_TYPE.value}]"


def _status(value, row: dict) -> str:
    return f"NCOF - {value}"


def _last_updated(value, row: dict) -> str:
    return f"{format_date(value)}\n{format_time(value)}"


def _sync(value, row: dict) -> str:
    return f"{value}\n{row.get('pmsSyncStatusDetail') or DEFAULT_SYNC_DETAIL}"


def _provider(value, row: dict) -> str:
    return f"{value}\nID:{row['providerId']}"


CLAIM_COLUMNS = [
    ColumnDef("patientName", "Patient", sortable=True, render=_patient),
    ColumnDef("serviceDate", "Service Date", kind=ColumnKind.DATE, sortable=True),
    ColumnDef("insuranceCarrier", "Insurance Carrier", kind=ColumnKind.BADGE,
              render=_carrier, badge_colors=COVERAGE_COLORS, badge_field="coverageType"),
    ColumnDef("amountCents", "Amount", kind=ColumnKind.CURRENCY),
    ColumnDef(STATUS_COLUMN, "Status", sortable=True, render=_status),
    ColumnDef("lastUpdated", "Last Updated", kind=ColumnKind.DATE, sortable=True,
              render=_last_updated),
    ColumnDef("userInitials", "User"),
    ColumnDef("dateSent", "Date Sent", kind=ColumnKind.DATE),
    ColumnDef("dateSentOrig", "Date Sent Orig", kind=ColumnKind.DATE),
    ColumnDef("pmsSyncStatus", "PMS Sync Status", kind=ColumnKind.BADGE,
              render=_sync, badge_colors=SYNC_COLORS),
    ColumnDef("provider", "Provider", render=_provider),
]

patient_name_filter = contains_filter(SEARCH_COLUMN)


def make_claims_view(source: str | Path, page_size: int = DEFAULT_PAGE_SIZE) -> TableView:
    """Build an unmounted claims table that loads from `source` on mount."""
    return TableView(
        columns=CLAIM_COLUMNS,
        loader=lambda: load_claims(source),
        global_filter=patient_name_filter,
        page_size=page_size,
    )


def set_status_filter(view: TableView, status: str | None):
    """Apply the single-select status control; "" or None clears it."""
    if status and status not in STATUS_OPTIONS:
        raise ValueError(f"Unknown status {status!r}; expected one of {', '.join(STATUS_OPTIONS[1:])}")
    view.set_column_filter(STATUS_COLUMN, status or "")
