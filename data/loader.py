from pathlib import Path

import polars as pl

from data.fetch import fetch_claims
from data.models import FIELD_MAP, ClaimRecord

CLAIM_SCHEMA = {
    key: (pl.Int64 if key == "amountCents" else pl.Utf8)
    for key in FIELD_MAP.values()
}


def claims_frame(records: list[dict]) -> pl.DataFrame:
    """Validate raw fixture objects and collect them into a DataFrame.

    Column names keep the fixture's camelCase keys. Missing optional fields
    are filled with their defaults by ClaimRecord.from_dict.
    """
    claims = [ClaimRecord.from_dict(raw).to_dict() for raw in records]

    df = pl.DataFrame(claims, schema=CLAIM_SCHEMA)
    if df["id"].n_unique() != df.height:
        raise ValueError("Claim ids must be unique within the collection")
    return df


def load_claims(source: str | Path) -> pl.DataFrame:
    """Fetch the fixture from a path or URL and return it as a DataFrame."""
    return claims_frame(fetch_claims(source))

