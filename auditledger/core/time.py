"""
auditledger/core/time.py

Timestamps and record identifiers.

Wire format for ts:  YYYY-MM-DDTHH:MM:SS.mmmZ
Record id format:    YYYYMMDDTHHMMSSZ-xxxx  (4 lowercase hex chars)

Ids sort lexically by creation second. The random suffix only separates
writes within the same second; it is not a uniqueness guarantee.
"""

import secrets
from datetime import datetime, timezone
from typing import Optional

# 2 random bytes = 4 hex chars
_ID_SUFFIX_BYTES = 2


def _as_utc(now: Optional[datetime]) -> datetime:
    if now is None:
        return datetime.now(timezone.utc)
    if now.tzinfo is None:
        return now.replace(tzinfo=timezone.utc)
    return now.astimezone(timezone.utc)


def ledger_timestamp(now: Optional[datetime] = None) -> str:
    """
    Return a UTC time in ledger wire format.
    Format: YYYY-MM-DDTHH:MM:SS.mmmZ  (exactly 3 fractional digits, Z suffix)
    """
    now = _as_utc(now)
    ms  = now.microsecond // 1000
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ms:03d}Z"


def generate_id(now: Optional[datetime] = None) -> str:
    """
    Return a new record id, e.g. 20260131T034656Z-3fa9.

    Naive datetimes are taken to be UTC.
    """
    compact = _as_utc(now).strftime("%Y%m%dT%H%M%SZ")
    return f"{compact}-{secrets.token_hex(_ID_SUFFIX_BYTES)}"
