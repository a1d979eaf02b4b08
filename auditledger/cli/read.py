"""
auditledger/cli/read.py

Read-only commands: last, show, search.

Each command streams the ledger from the start. Without --skip-invalid a
malformed line stops the command with exit code 1.
"""

import json
from typing import Callable, Tuple, TypeVar

import click

from auditledger.cli.output import (
    echo_warning,
    fail,
    format_entry_line,
    skip_invalid_option,
    warn_fault,
)
from auditledger.config import LedgerConfig
from auditledger.core.exceptions import ParseFault
from auditledger.ledger import FaultPolicy, Ledger


def _open(config: LedgerConfig, skip_invalid: bool) -> Tuple[Ledger, FaultPolicy]:
    policy = FaultPolicy.SKIP_INVALID if skip_invalid else FaultPolicy.STRICT
    return config.open_ledger(on_fault=warn_fault), policy


T = TypeVar("T")


def _guarded(read: Callable[[], T]) -> T:
    try:
        return read()
    except ParseFault as fault:
        fail(str(fault), "Use --skip-invalid to read past malformed lines")


@click.command(name="last")
@click.argument("count", type=click.IntRange(min=1), default=10, required=False)
@skip_invalid_option
@click.pass_obj
def last_command(config: LedgerConfig, count: int, skip_invalid: bool) -> None:
    """Show the COUNT most recent entries (default: 10)."""
    ledger, policy = _open(config, skip_invalid)
    records = _guarded(lambda: ledger.last(count, policy))

    if not records:
        echo_warning("Ledger is empty")
        return

    for record in records:
        click.echo(format_entry_line(record))


@click.command(name="show")
@click.argument("record_id")
@skip_invalid_option
@click.pass_obj
def show_command(config: LedgerConfig, record_id: str, skip_invalid: bool) -> None:
    """Print one entry as JSON."""
    ledger, policy = _open(config, skip_invalid)
    record = _guarded(lambda: ledger.get(record_id, policy))

    if record is None:
        fail(f'Entry not found: "{record_id}"',
             "Use 'auditledger last' to see recent IDs")

    click.echo(json.dumps(record.to_dict(), indent=2, ensure_ascii=False))


@click.command(name="search")
@click.argument("term", nargs=-1, required=True)
@skip_invalid_option
@click.pass_obj
def search_command(config: LedgerConfig, term: Tuple[str, ...], skip_invalid: bool) -> None:
    """List entries containing TERM (case-insensitive)."""
    text = " ".join(term)
    ledger, policy = _open(config, skip_invalid)
    hits = _guarded(lambda: ledger.search(text, policy))

    if not hits:
        click.echo(f"No matches for: {text}", err=True)
        return

    for record in hits:
        click.echo(format_entry_line(record))
