"""Tests for the filter -> sort -> paginate derivation."""

import polars as pl
import pytest

from table.columns import ColumnDef, ColumnKind, parse_timestamp
from table.pipeline import apply_sort, contains_filter, derive, filtered_rows
from table.state import SortKey, TableState, data_loaded
from tests.conftest import loaded_view, make_claim
from views.claims import CLAIM_COLUMNS, patient_name_filter, set_status_filter


def _state(df: pl.DataFrame, **kwargs) -> TableState:
    return data_loaded(TableState(**kwargs), df)


def test_no_state_yields_empty_page():
    page = derive(TableState(), CLAIM_COLUMNS, patient_name_filter)
    assert page.is_empty
    assert page.rows.is_empty()
    assert page.page_count == 0


def test_column_filter_keeps_equal_rows(claims_df):
    state = _state(claims_df, column_filter=("status", "REJECTED"), page_size=50)
    page = derive(state, CLAIM_COLUMNS, patient_name_filter)
    assert page.filtered_count == 15
    assert set(page.rows["status"].to_list()) == {"REJECTED"}


def test_sort_is_stable(claims_df):
    # Only four distinct statuses, so most rows tie on the sort key
    df = apply_sort(claims_df, (SortKey("status"),), CLAIM_COLUMNS)
    for status in df["status"].unique().to_list():
        ids = df.filter(pl.col("status") == status)["id"].to_list()
        original = claims_df.filter(pl.col("status") == status)["id"].to_list()
        assert ids == original


def test_descending_sort_is_stable(claims_df):
    df = apply_sort(claims_df, (SortKey("status", descending=True),), CLAIM_COLUMNS)
    assert df["status"].to_list() == sorted(df["status"].to_list(), reverse=True)
    rejected = df.filter(pl.col("status") == "REJECTED")["id"].to_list()
    assert rejected == claims_df.filter(pl.col("status") == "REJECTED")["id"].to_list()


def test_sort_is_idempotent(claims_df):
    keys = (SortKey("serviceDate"),)
    once = apply_sort(claims_df, keys, CLAIM_COLUMNS)
    twice = apply_sort(once, keys, CLAIM_COLUMNS)
    assert once["id"].to_list() == twice["id"].to_list()


def test_sort_does_not_mutate_source(claims_df):
    before = claims_df["id"].to_list()
    apply_sort(claims_df, (SortKey("lastUpdated", descending=True),), CLAIM_COLUMNS)
    assert claims_df["id"].to_list() == before


def test_multi_column_sort(claims_df):
    keys = (SortKey("status"), SortKey("patientName", descending=True))
    df = apply_sort(claims_df, keys, CLAIM_COLUMNS)
    pairs = list(zip(df["status"].to_list(), df["patientName"].to_list()))
    call_names = [name for status, name in pairs if status == "CALL"]
    assert call_names == sorted(call_names, reverse=True)
    assert pairs[0][0] == "CALL"


@pytest.mark.parametrize("page_size", [10, 25, 50])
def test_pages_partition_filtered_rows(claims_df, page_size):
    state = _state(claims_df, page_size=page_size, column_filter=("status", "PENDING"),
                   sorting=(SortKey("patientName"),))
    expected = filtered_rows(state, CLAIM_COLUMNS, patient_name_filter)["id"].to_list()
    page = derive(state, CLAIM_COLUMNS, patient_name_filter)

    seen = []
    for index in range(page.page_count):
        state = TableState(rows=state.rows, loading=False, page_index=index, page_size=page_size,
                           column_filter=state.column_filter, sorting=state.sorting)
        seen.extend(derive(state, CLAIM_COLUMNS, patient_name_filter).rows["id"].to_list())

    assert seen == expected
    assert len(seen) == len(set(seen)) == 15


def test_page_index_beyond_last_page_is_clamped(claims_df):
    state = _state(claims_df, page_size=25)
    state = TableState(rows=state.rows, loading=False, page_size=25, page_index=99)
    page = derive(state, CLAIM_COLUMNS, patient_name_filter)
    assert page.page_index == 2
    assert page.rows.height == 10
    assert page.rows["id"].to_list() == claims_df["id"].to_list()[50:]


def test_contains_filter_is_case_insensitive_substring():
    df = pl.DataFrame({"name": ["Anna Lee", "Bob Ann", "Carl Smith"]})
    matched = df.filter(contains_filter("name")("ANN"))
    assert matched["name"].to_list() == ["Anna Lee", "Bob Ann"]


def test_contains_filter_treats_text_literally():
    df = pl.DataFrame({"name": ["A.B", "AxB"]})
    assert df.filter(contains_filter("name")("a.b"))["name"].to_list() == ["A.B"]


def test_parse_timestamp_orders_non_iso_dates():
    assert parse_timestamp("1/2/2024") < parse_timestamp("1/10/2024")
    assert parse_timestamp("Jan 02, 2024") == parse_timestamp("2024-01-02")
    assert parse_timestamp("2024-1-2") == parse_timestamp("2024-01-02T00:00:00Z")
    assert parse_timestamp("") is None
    assert parse_timestamp("not a date") is None


def test_date_columns_sort_as_timestamps_not_strings():
    # As strings "1/10/2024" < "1/2/2024"; as dates the 2nd comes first
    columns = [ColumnDef("when", "When", kind=ColumnKind.DATE, sortable=True)]
    df = pl.DataFrame({"id": ["a", "b", "c"], "when": ["1/10/2024", "1/2/2024", "2024-01-05"]})
    out = apply_sort(df, (SortKey("when"),), columns)
    assert out["id"].to_list() == ["b", "c", "a"]
    assert out.columns == ["id", "when"]


def test_custom_sort_key():
    columns = [ColumnDef("size", "Size", sortable=True,
                         sort_key=lambda v: {"S": 0, "M": 1, "L": 2}[v])]
    df = pl.DataFrame({"size": ["L", "S", "M", "S"]})
    out = apply_sort(df, (SortKey("size"),), columns)
    assert out["size"].to_list() == ["S", "S", "M", "L"]


def test_unparseable_dates_sort_last():
    columns = [ColumnDef("when", "When", kind=ColumnKind.DATE, sortable=True)]
    df = pl.DataFrame({"id": ["a", "b"], "when": ["garbage", "2024-01-01"]})
    out = apply_sort(df, (SortKey("when"),), columns)
    assert out["id"].to_list() == ["b", "a"]


# --- scenarios ---

def test_search_matches_anywhere_in_name():
    view = loaded_view([
        make_claim(1, patientName="Anna Lee"),
        make_claim(2, patientName="Bob Ann"),
        make_claim(3, patientName="Carl Smith"),
    ])
    view.set_global_filter("ann")
    names = view.page().rows["patientName"].to_list()
    assert names == ["Anna Lee", "Bob Ann"]
    assert not view.is_empty


def test_search_without_match_shows_empty_state():
    view = loaded_view([make_claim(1, patientName="Carl Smith")])
    view.set_global_filter("ann")
    page = view.page()
    assert page.rows.is_empty()
    assert page.page_count == 0
    assert view.is_empty
    assert not view.loading


def test_status_filter_then_page_size_change(claim_records):
    records = claim_records + [make_claim(n, status="REJECTED") for n in range(100, 130)]
    view = loaded_view(records)
    set_status_filter(view, "REJECTED")
    view.next_page()
    assert view.state.page_index == 1

    view.set_page_size(25)
    page = view.page()
    assert view.state.page_index == 0
    assert page.rows.height == 25
    assert set(page.rows["status"].to_list()) == {"REJECTED"}
    assert page.filtered_count == 45


def test_last_updated_header_sorts_ascending_by_time():
    view = loaded_view([
        make_claim(1, lastUpdated="2024-01-10T08:00:00.000Z"),
        make_claim(2, lastUpdated="2024-01-02T08:00:00.000Z"),
        make_claim(3, lastUpdated="2023-12-31T23:59:59.000Z"),
    ])
    view.toggle_sort("lastUpdated")
    assert view.page().rows["id"].to_list() == ["claim-0003", "claim-0002", "claim-0001"]
    view.toggle_sort("lastUpdated")
    assert view.page().rows["id"].to_list() == ["claim-0001", "claim-0002", "claim-0003"]


def test_clear_filters_restores_full_view(claim_records):
    view = loaded_view(claim_records)
    view.set_global_filter("Patient 001")
    set_status_filter(view, "CALL")
    assert view.page().filtered_count < len(claim_records)

    view.clear_filters()
    page = view.page()
    assert page.filtered_count == len(claim_records)
    assert page.page_index == 0
    assert page.rows["id"].to_list() == [r["id"] for r in claim_records[:10]]


def test_text_columns_sort_case_insensitively():
    view = loaded_view([
        make_claim(1, patientName="bob Lee"),
        make_claim(2, patientName="Carl Smith"),
        make_claim(3, patientName="Anna Ray"),
    ])
    view.toggle_sort("patientName")
    assert view.page().rows["patientName"].to_list() == ["Anna Ray", "bob Lee", "Carl Smith"]
    view.toggle_sort("patientName")
    assert view.page().rows["patientName"].to_list() == ["Carl Smith", "bob Lee", "Anna Ray"]


def test_text_sort_key_default():
    column = ColumnDef("name", "Name", sortable=True)
    assert column.key_fn()("MiXeD") == "mixed"
    assert ColumnDef("amount", "Amount", kind=ColumnKind.CURRENCY).key_fn() is None
