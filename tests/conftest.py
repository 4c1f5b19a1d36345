"""Shared fixtures: small hand-built claim collections in the fixture's JSON shape."""

import json
from pathlib import Path

import polars as pl
import pytest

from data.loader import claims_frame
from table.state import data_loaded
from table.view import TableView
from views.claims import CLAIM_COLUMNS, patient_name_filter

STATUSES = ["RESUBMITTED", "PENDING", "REJECTED", "CALL"]


def make_claim(n: int, **overrides) -> dict:
    """Build one complete claim object; `n` keeps ids and names distinct."""
    claim = {
        "id": f"claim-{n:04d}",
        "patientName": f"Patient {n:04d}",
        "patientId": str(1000 + n),
        "serviceDate": f"2024-03-{n % 28 + 1:02d}T09:30:00.000Z",
        "insuranceCarrier": "ACME HEALTH",
        "coverageType": "Primary",
        "amountCents": 10_000 + n * 100,
        "status": STATUSES[n % 4],
        "lastUpdated": f"2024-04-{n % 28 + 1:02d}T14:05:00.000Z",
        "userInitials": "PA",
        "dateSent": "2024-03-15T08:00:00.000Z",
        "dateSentOrig": "2024-02-01T08:00:00.000Z",
        "pmsSyncStatus": "Synced" if n % 2 else "Not synced",
        "pmsSyncStatusDetail": "Status modified yesterday",
        "provider": "Dr. Jane Roe",
        "providerId": "12345678",
    }
    claim.update(overrides)
    return claim


def loaded_view(records: list[dict], page_size: int = 10) -> TableView:
    """A claims view whose rows are already loaded, without going through mount()."""
    view = TableView(CLAIM_COLUMNS, loader=lambda: claims_frame(records),
                     global_filter=patient_name_filter, page_size=page_size)
    view.state = data_loaded(view.state, claims_frame(records))
    return view


@pytest.fixture
def claim_records() -> list[dict]:
    """60 claims, 15 of each status."""
    return [make_claim(n) for n in range(60)]


@pytest.fixture
def claims_df(claim_records: list[dict]) -> pl.DataFrame:
    return claims_frame(claim_records)


@pytest.fixture
def fixture_file(tmp_path: Path, claim_records: list[dict]) -> Path:
    """Write the sample claims as a fixture JSON file and return its path."""
    path = tmp_path / "public" / "claims.json"
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps(claim_records, indent=2), encoding="utf-8")
    return path
