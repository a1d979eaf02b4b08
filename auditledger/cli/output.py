"""
auditledger/cli/output.py

Terminal output helpers shared by the CLI commands.
"""

import sys
from typing import Optional

import click

from auditledger.core.exceptions import ParseFault
from auditledger.core.models import Record


# ── ANSI color ────────────────────────────────────────────────────────────────

class _Color:
    """
    Minimal ANSI color wrapper.
    Auto-disables when stdout is not a TTY.
    """
    _on: bool = True

    @classmethod
    def configure(cls, enabled: bool) -> None:
        cls._on = enabled and sys.stdout.isatty()

    @classmethod
    def red(cls, s: str) -> str:
        return f"\033[31m{s}\033[0m" if cls._on else s

    @classmethod
    def yellow(cls, s: str) -> str:
        return f"\033[33m{s}\033[0m" if cls._on else s

    @classmethod
    def cyan(cls, s: str) -> str:
        return f"\033[36m{s}\033[0m" if cls._on else s

    @classmethod
    def dim(cls, s: str) -> str:
        return f"\033[2m{s}\033[0m" if cls._on else s


def format_entry_line(record: Record) -> str:
    """id  ts  type  summary"""
    return (
        f"{_Color.cyan(record.id)}  {_Color.dim(record.ts)}  "
        f"{record.action.type}  {record.action.summary}"
    )


def echo_error(message: str, hint: Optional[str] = None) -> None:
    click.echo(f"{_Color.red('error:')} {message}", err=True)
    if hint:
        click.echo(f"{_Color.dim('hint:')} {hint}", err=True)


def echo_warning(message: str) -> None:
    click.echo(f"{_Color.yellow('warn:')} {message}", err=True)


def fail(message: str, hint: Optional[str] = None, code: int = 1) -> None:
    """Print an error and exit."""
    echo_error(message, hint)
    sys.exit(code)


def warn_fault(fault: ParseFault) -> None:
    """on_fault callback for --skip-invalid reads."""
    echo_warning(f"skipped {fault}")


skip_invalid_option = click.option(
    "--skip-invalid",
    is_flag=True,
    default=False,
    help="Skip (and report) malformed ledger lines instead of stopping.",
)
