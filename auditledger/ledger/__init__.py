"""
auditledger Ledger - Append-Only Action Log

The ledger file is the source of truth. Nothing in it is ever rewritten.
"""

from auditledger.ledger.ledger import Ledger
from auditledger.ledger.store import (
    FaultPolicy,
    append_record,
    ensure_dir,
    read_records,
)

__all__ = ["Ledger", "FaultPolicy", "append_record", "ensure_dir", "read_records"]
