"""
auditledger/cli/verify.py

auditledger verify — Ledger Integrity Check
============================================

Streams every line of the ledger through the same decode + schema
validation the readers use and reports what it found.

Usage:
    auditledger verify                       Human output (default)
    auditledger verify --format json         Machine-readable JSON
    auditledger verify --skip-invalid        Report every bad line, not just the first
    auditledger verify --quiet               Exit code only

Exit codes:
    0  Every line is a valid record (a missing ledger counts as empty)
    1  One or more malformed lines (bad JSON, bad UTF-8, schema violation)
    2  Error  (ledger cannot be opened or read)

CI one-liners:
    auditledger verify --quiet && echo "clean" || echo "CORRUPT"
    auditledger verify --format json --skip-invalid | python -m json.tool
"""

import json
import sys
from pathlib import Path
from typing import Dict, List, Optional

import click

from auditledger.cli.output import _Color, skip_invalid_option
from auditledger.config import LedgerConfig
from auditledger.core.exceptions import ParseFault
from auditledger.ledger import FaultPolicy, read_records


@click.command(name="verify")
@click.option(
    "--format", "fmt",
    type=click.Choice(["human", "json"], case_sensitive=False),
    default="human",
    show_default=True,
    help="Output format: human (default) or json (CI/automation).",
)
@click.option(
    "--quiet",
    is_flag=True,
    default=False,
    help="Suppress all output. Use exit code only (0=valid, 1=invalid, 2=error).",
)
@skip_invalid_option
@click.pass_obj
def verify_command(
    config:       LedgerConfig,
    fmt:          str,
    quiet:        bool,
    skip_invalid: bool,
) -> None:
    """
    Verify the ledger — every line must decode and match the record schema.
    """
    ledger_path = config.ledger_path
    policy      = FaultPolicy.SKIP_INVALID if skip_invalid else FaultPolicy.STRICT

    faults:      List[ParseFault] = []
    type_counts: Dict[str, int]   = {}
    first_ts:    Optional[str]    = None
    last_ts:     Optional[str]    = None
    total = 0

    try:
        for record in read_records(ledger_path, policy, faults.append):
            total += 1
            type_counts[record.action.type] = type_counts.get(record.action.type, 0) + 1
            if first_ts is None:
                first_ts = record.ts
            last_ts = record.ts
    except ParseFault as fault:
        faults.append(fault)
    except OSError as e:
        _emit_error(f"Cannot read ledger {ledger_path}: {e}", fmt, quiet)
        sys.exit(2)

    ledger_valid = not faults

    if quiet:
        sys.exit(0 if ledger_valid else 1)

    if fmt == "json":
        _output_json(
            ledger_path, total, type_counts, first_ts, last_ts,
            faults, skip_invalid, ledger_valid,
        )
    else:
        _output_human(
            ledger_path, total, type_counts, first_ts, last_ts,
            faults, skip_invalid, ledger_valid,
        )

    sys.exit(0 if ledger_valid else 1)


# ── Human output ──────────────────────────────────────────────────────────────

def _output_human(
    ledger_path:  Path,
    total:        int,
    type_counts:  Dict[str, int],
    first_ts:     Optional[str],
    last_ts:      Optional[str],
    faults:       List[ParseFault],
    skip_invalid: bool,
    ledger_valid: bool,
) -> None:
    bar = "─" * 60

    click.echo(f"Ledger        {ledger_path}")
    if not ledger_path.exists():
        click.echo("Status        empty (no ledger file yet)")
    click.echo(f"Records       {total:,}")
    if type_counts:
        counts = "  ".join(f"{k}: {v}" for k, v in sorted(type_counts.items()))
        click.echo(f"Action types  {counts}")
    if first_ts:
        click.echo(f"First entry   {first_ts}")
    if last_ts:
        click.echo(f"Last entry    {last_ts}")

    if faults:
        click.echo(bar)
        for fault in faults:
            click.echo(f"line {fault.line_number:>6}  {fault}")
            click.echo(f"             {_Color.dim(fault.content)}")
        click.echo(bar)
        if not skip_invalid:
            click.echo("Stopped at the first bad line; use --skip-invalid to see all.")

    if ledger_valid:
        click.echo("VALID    0 faults")
    else:
        click.echo(f"INVALID  {len(faults)} fault(s)")


# ── JSON output ───────────────────────────────────────────────────────────────

def _output_json(
    ledger_path:  Path,
    total:        int,
    type_counts:  Dict[str, int],
    first_ts:     Optional[str],
    last_ts:      Optional[str],
    faults:       List[ParseFault],
    skip_invalid: bool,
    ledger_valid: bool,
) -> None:
    out = {
        "auditledger_verify": {
            "ledger":          str(ledger_path),
            "exists":          ledger_path.exists(),
            "ledger_valid":    ledger_valid,
            "total_records":   total,
            "by_type":         type_counts,
            "first_timestamp": first_ts,
            "last_timestamp":  last_ts,
            "skip_invalid":    skip_invalid,
            "fault_count":     len(faults),
            "faults": [
                {
                    "line_number": f.line_number,
                    "message":     f.message,
                    "cause":       str(f.cause) if f.cause is not None else None,
                    "content":     f.content,
                }
                for f in faults
            ],
        }
    }
    click.echo(json.dumps(out, indent=2))


# ── Error output ──────────────────────────────────────────────────────────────

def _emit_error(msg: str, fmt: str, quiet: bool) -> None:
    """Emit error in the correct format. Never raises."""
    if quiet:
        return
    if fmt == "json":
        click.echo(json.dumps({
            "auditledger_verify": {
                "error":        msg,
                "ledger_valid": False,
            }
        }))
    else:
        click.echo(_Color.red(f"ERROR: {msg}"), err=True)
