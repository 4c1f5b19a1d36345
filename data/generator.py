import json
import os
import random
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

import click
from faker import Faker

from data.models import ClaimRecord, ClaimStatus, CoverageType, SyncStatus

ROWS = 250
PUBLIC_DIR = Path(__file__).parent.parent / "public"
FIXTURE_FILE = PUBLIC_DIR / "claims.json"

STATUS_WEIGHTS = {
    ClaimStatus.RESUBMITTED: 0.45,
    ClaimStatus.PENDING: 0.25,
    ClaimStatus.REJECTED: 0.20,
    ClaimStatus.CALL: 0.10,
}
COVERAGE_WEIGHTS = {
    CoverageType.PRIMARY: 0.75,
    CoverageType.SECONDARY: 0.25,
}

# Day horizons for "now minus N days" timestamps
SERVICE_DATE_DAYS = 120
LAST_UPDATED_DAYS = 15
DATE_SENT_DAYS = 60
DATE_SENT_ORIG_DAYS = 180

MIN_AMOUNT_CENTS = 10_000  # $100.00
MAX_AMOUNT_CENTS = 250_000  # $2,500.00
MAX_SYNC_DETAIL_DAYS = 6


def to_iso(moment: datetime) -> str:
    """Render a UTC datetime as ISO 8601 with milliseconds and a Z suffix."""
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def random_date_in_last(days: int, rng: random.Random, now: datetime) -> str:
    return to_iso(now - timedelta(days=rng.randrange(days)))


def sync_detail(days: int) -> str:
    if days == 0:
        return "Status modified today"
    if days == 1:
        return "Status modified yesterday"
    return f"Status modified {days} days ago"


def _weighted(weights: dict, rng: random.Random):
    return rng.choices(list(weights), weights=list(weights.values()))[0]


def generate_claims(
    count: int = ROWS,
    rng: random.Random | None = None,
    now: datetime | None = None,
) -> list[ClaimRecord]:
    """Generate a fresh collection of synthetic claims.

    Unseeded by default, so two runs give different data. Passing a seeded
    `rng` also seeds Faker from it, which makes the whole collection
    reproducible.
    """
    if rng is None:
        rng = random.Random()
    if now is None:
        now = datetime.now(timezone.utc)

    fake = Faker()
    fake.seed_instance(rng.getrandbits(64))

    claims = []
    for _ in range(count):
        first = fake.first_name()
        last = fake.last_name()
        claims.append(ClaimRecord(
            id=fake.uuid4(),
            patient_name=f"{first} {last}",
            patient_id=str(rng.randint(1000, 9999)),
            service_date=random_date_in_last(SERVICE_DATE_DAYS, rng, now),
            insurance_carrier=fake.company().upper(),
            coverage_type=_weighted(COVERAGE_WEIGHTS, rng),
            amount_cents=rng.randint(MIN_AMOUNT_CENTS, MAX_AMOUNT_CENTS),
            status=_weighted(STATUS_WEIGHTS, rng),
            last_updated=random_date_in_last(LAST_UPDATED_DAYS, rng, now),
            user_initials=f"{first[0]}{last[0]}".upper(),
            date_sent=random_date_in_last(DATE_SENT_DAYS, rng, now),
            date_sent_orig=random_date_in_last(DATE_SENT_ORIG_DAYS, rng, now),
            pms_sync_status=rng.choice(list(SyncStatus)),
            pms_sync_status_detail=sync_detail(rng.randint(0, MAX_SYNC_DETAIL_DAYS)),
            provider=f"Dr. {fake.first_name()} {fake.last_name()}",
            provider_id=str(rng.randint(10_000_000, 99_999_999)),
        ))
    return claims


def write_fixture(claims: list[ClaimRecord], path: Path | None = None) -> Path:
    """Write claims as a pretty-printed JSON array, replacing the file atomically.

    The data goes to a temporary file next to the destination first, so a
    failed run leaves any previous fixture intact.
    """
    if path is None:
        path = FIXTURE_FILE

    payload = json.dumps([c.to_dict() for c in claims], indent=2)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as exc:
        raise click.ClickException(f"Could not write fixture to {path}: {exc}") from exc

    return path
