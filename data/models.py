from dataclasses import asdict, dataclass
from enum import Enum


class ClaimStatus(Enum):
    RESUBMITTED = "RESUBMITTED"
    PENDING = "PENDING"
    REJECTED = "REJECTED"
    CALL = "CALL"


class CoverageType(Enum):
    PRIMARY = "Primary"
    SECONDARY = "Secondary"


class SyncStatus(Enum):
    SYNCED = "Synced"
    NOT_SYNCED = "Not synced"


DEFAULT_COVERAGE_TYPE = CoverageType.PRIMARY
DEFAULT_SYNC_DETAIL = "Status modified today"

# Attribute name -> JSON key in the fixture file. Keys are case-sensitive.
FIELD_MAP = {
    "id": "id",
    "patient_name": "patientName",
    "patient_id": "patientId",
    "service_date": "serviceDate",
    "insurance_carrier": "insuranceCarrier",
    "coverage_type": "coverageType",
    "amount_cents": "amountCents",
    "status": "status",
    "last_updated": "lastUpdated",
    "user_initials": "userInitials",
    "date_sent": "dateSent",
    "date_sent_orig": "dateSentOrig",
    "pms_sync_status": "pmsSyncStatus",
    "pms_sync_status_detail": "pmsSyncStatusDetail",
    "provider": "provider",
    "provider_id": "providerId",
}

REVERSE_MAP = {v: k for k, v in FIELD_MAP.items()}

OPTIONAL_DEFAULTS = {
    "coverageType": DEFAULT_COVERAGE_TYPE.value,
    "pmsSyncStatusDetail": DEFAULT_SYNC_DETAIL,
}


@dataclass(frozen=True)
class ClaimRecord:
    """A single insurance claim tracked through the resubmission workflow."""
    id: str
    patient_name: str
    patient_id: str
    service_date: str  # ISO 8601
    insurance_carrier: str
    amount_cents: int
    status: ClaimStatus
    last_updated: str  # ISO 8601
    user_initials: str
    date_sent: str
    date_sent_orig: str
    pms_sync_status: SyncStatus
    provider: str
    provider_id: str
    coverage_type: CoverageType = DEFAULT_COVERAGE_TYPE
    pms_sync_status_detail: str = DEFAULT_SYNC_DETAIL

    def __post_init__(self):
        if not self.id:
            raise ValueError("Claim id must be non-empty")
        if self.amount_cents < 0:
            raise ValueError(f"Claim {self.id} has negative amount {self.amount_cents}")

    def to_dict(self) -> dict:
        """Serialize with the fixture's camelCase keys and enum spellings."""
        out = {}
        for attr, value in asdict(self).items():
            out[FIELD_MAP[attr]] = value.value if isinstance(value, Enum) else value
        return out

    @classmethod
    def from_dict(cls, raw: dict) -> "ClaimRecord":
        """Build a record from a fixture object.

        Missing optional fields (coverageType, pmsSyncStatusDetail) fall back
        to defaults; anything else missing or outside its enum is a ValueError.
        """
        merged = {**OPTIONAL_DEFAULTS, **{k: v for k, v in raw.items() if v is not None}}
        missing = [key for key in FIELD_MAP.values() if key not in merged]
        if missing:
            raise ValueError(f"Claim record missing fields: {', '.join(missing)}")

        kwargs = {REVERSE_MAP[key]: merged[key] for key in FIELD_MAP.values()}
        kwargs["status"] = ClaimStatus(kwargs["status"])
        kwargs["coverage_type"] = CoverageType(kwargs["coverage_type"])
        kwargs["pms_sync_status"] = SyncStatus(kwargs["pms_sync_status"])
        amount = kwargs["amount_cents"]
        if isinstance(amount, bool) or not isinstance(amount, (int, float)) or (
                isinstance(amount, float) and not amount.is_integer()):
            raise ValueError(f"Claim {kwargs['id']} amountCents must be a whole number of cents, got {amount!r}")
        kwargs["amount_cents"] = int(amount)
        return cls(**kwargs)
