"""
auditledger/ledger/store.py

Ledger Store — append-only JSONL file.

Write path:
    append_record(target, record)
        1. Create missing parent directories
        2. Encode record as ONE compact canonical JSON line
        3. Append line + "\\n" (file created if absent)

    No redaction here and no re-validation: callers redact and validate
    first (see Ledger.append). OSError propagates as-is.

Read path:
    read_records(source, policy)
        Missing file  → empty iterator, not an error
        Blank line    → skipped, still counted for line numbers
        Other lines   → UTF-8 decode → json.loads → Record.from_dict
        Failure       → ParseFault(line_number, content, cause)

    FaultPolicy.STRICT        first ParseFault is raised; reading stops
    FaultPolicy.SKIP_INVALID  fault goes to on_fault (logged at WARNING
                              when there is no callback), the line is
                              dropped, reading continues

Records come back in file order = append order = creation order.

Concurrency: none. No locking. Concurrent appenders from several
processes rely on the OS keeping small O_APPEND writes whole; nothing
here coordinates them.
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, Optional, Union

from auditledger.core.canonical import encode_line
from auditledger.core.exceptions import ParseFault, ValidationError
from auditledger.core.models import Record

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Stored in ParseFault.content
_FAULT_CONTENT_LENGTH = 100


class FaultPolicy(Enum):
    STRICT       = "strict"
    SKIP_INVALID = "skip_invalid"


# ── Write ─────────────────────────────────────────────────────

def ensure_dir(target: PathLike) -> None:
    """Create the directory that will hold target, parents included."""
    Path(target).parent.mkdir(parents=True, exist_ok=True)


def append_record(target: PathLike, record: Record) -> None:
    """
    Append one record as a single JSONL line.

    The only mutating operation on a ledger file.
    """
    ensure_dir(target)
    line = encode_line(record.to_dict())
    with open(target, "a", encoding="utf-8") as f:
        f.write(line + "\n")
    logger.debug("Appended record %s to %s", record.id, target)


# ── Read ──────────────────────────────────────────────────────

def _parse_line(line_number: int, raw: bytes) -> Record:
    content = raw.decode("utf-8", errors="replace")[:_FAULT_CONTENT_LENGTH]

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ParseFault(
            f"Invalid UTF-8 on line {line_number}", line_number, content, e
        ) from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParseFault(
            f"Invalid JSON on line {line_number}", line_number, content, e
        ) from e

    try:
        return Record.from_dict(data)
    except ValidationError as e:
        raise ParseFault(
            f"Schema validation failed on line {line_number}", line_number, content, e
        ) from e


def read_records(
    source:   PathLike,
    policy:   FaultPolicy = FaultPolicy.STRICT,
    on_fault: Optional[Callable[[ParseFault], None]] = None,
) -> Iterator[Record]:
    """
    Lazily yield every valid record in source, in file order.

    Each call re-reads the file from the start. See module docstring for
    fault handling.
    """
    source = Path(source)
    if not source.exists():
        return

    # Binary: lines split on b"\n" only and each one is decoded on its own,
    # so bad bytes fault a single line
    with open(source, "rb") as f:
        for line_number, raw in enumerate(f, 1):
            raw = raw.strip()
            if not raw:
                continue

            try:
                record = _parse_line(line_number, raw)
            except ParseFault as fault:
                if policy is FaultPolicy.STRICT:
                    raise
                if on_fault is not None:
                    on_fault(fault)
                else:
                    logger.warning("Skipping ledger line: %s", fault)
                continue

            yield record
