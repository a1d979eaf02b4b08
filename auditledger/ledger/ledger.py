"""
Ledger facade for auditledger.

Ledger.append() is the write path every caller should use:

    1. Validate the record           → ValidationError
    2. Redact it (unless disabled)   → SecretsDetected in strict mode
    3. Re-parse the redacted dict    → stored record is schema-valid
    4. append_record()               → one JSONL line

Read helpers (last, get, search, stats) stream the whole file on every
call. There is no index and no cache.
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional

from auditledger.core.exceptions import ParseFault
from auditledger.core.models import Record
from auditledger.core.redaction import RedactOptions, Redactor
from auditledger.ledger.store import (
    FaultPolicy,
    PathLike,
    append_record,
    read_records,
)


class Ledger:
    """
    An append-only action ledger bound to one file.

    Usage:
        ledger = Ledger("memory/action-ledger.jsonl")
        ledger.append(Record.create("file_edit", "Updated README"))
        for record in ledger.entries():
            ...
    """

    def __init__(
        self,
        path:     PathLike,
        redactor: Optional[Redactor] = None,
        options:  Optional[RedactOptions] = None,
        redact:   bool = True,
        on_fault: Optional[Callable[[ParseFault], None]] = None,
    ):
        self.path     = Path(path)
        self.redactor = redactor or Redactor()
        self.options  = options or RedactOptions()
        self.redact   = redact
        self.on_fault = on_fault

    # ── Write ─────────────────────────────────────────────────

    def append(self, record: Record) -> Record:
        """
        Validate, redact and persist record. Returns what was written.

        Raises:
            ValidationError  record does not conform to the schema
            SecretsDetected  strict mode and the record carries secrets
            OSError          the write itself failed
        """
        record.validate_or_raise()

        stored = record
        if self.redact:
            cleaned = self.redactor.scan(record.to_dict(), self.options)
            stored  = Record.from_dict(cleaned)

        append_record(self.path, stored)
        return stored

    # ── Read ──────────────────────────────────────────────────

    def entries(self, policy: FaultPolicy = FaultPolicy.STRICT) -> Iterator[Record]:
        """Lazy iterator over the ledger in append order."""
        return read_records(self.path, policy, self.on_fault)

    def all(self, policy: FaultPolicy = FaultPolicy.STRICT) -> List[Record]:
        return list(self.entries(policy))

    def last(self, n: int = 10, policy: FaultPolicy = FaultPolicy.STRICT) -> List[Record]:
        """The n most recent records, oldest first."""
        if n < 1:
            raise ValueError(f"n must be a positive integer, got {n!r}")
        return self.all(policy)[-n:]

    def get(self, record_id: str, policy: FaultPolicy = FaultPolicy.STRICT) -> Optional[Record]:
        """First record with this id, or None."""
        for record in self.entries(policy):
            if record.id == record_id:
                return record
        return None

    def search(self, term: str, policy: FaultPolicy = FaultPolicy.STRICT) -> List[Record]:
        """Records whose JSON form contains term, case-insensitive."""
        needle = term.lower()
        return [
            record for record in self.entries(policy)
            if needle in json.dumps(record.to_dict(), ensure_ascii=False).lower()
        ]

    def stats(self, policy: FaultPolicy = FaultPolicy.STRICT) -> Dict[str, Any]:
        """Get ledger statistics"""
        type_counts: Dict[str, int] = {}
        first: Optional[Record] = None
        last:  Optional[Record] = None
        total = 0

        for record in self.entries(policy):
            total += 1
            type_counts[record.action.type] = type_counts.get(record.action.type, 0) + 1
            if first is None:
                first = record
            last = record

        return {
            "total_entries":    total,
            "by_type":          type_counts,
            "first_entry_time": first.ts if first else None,
            "last_entry_time":  last.ts if last else None,
        }

    def __repr__(self) -> str:
        return f"Ledger(path={str(self.path)!r}, redact={self.redact})"
