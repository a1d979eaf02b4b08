"""
auditledger/cli/__init__.py

auditledger CLI — root Click command group.

This file is the sole entry point for the `auditledger` terminal command.
It is registered in pyproject.toml as:

    [project.scripts]
    auditledger = "auditledger.cli:cli"

Adding a new command:
    1. Create auditledger/cli/your_command.py with a @click.command()
    2. Import it here
    3. cli.add_command(your_command)
"""

from typing import Optional

import click

from auditledger.cli.add import add_command
from auditledger.cli.output import _Color, fail
from auditledger.cli.read import last_command, search_command, show_command
from auditledger.cli.verify import verify_command
from auditledger.config import LedgerConfig
from auditledger.core.exceptions import ConfigError


@click.group()
@click.version_option(package_name="auditledger")
@click.option(
    "--ledger",
    "ledger_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Ledger file (default: $AUDIT_LEDGER_PATH or ./memory/action-ledger.jsonl).",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="YAML config file (default: $AUDIT_LEDGER_CONFIG).",
)
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable ANSI color output.",
)
@click.pass_context
def cli(
    ctx:         click.Context,
    ledger_path: Optional[str],
    config_file: Optional[str],
    no_color:    bool,
) -> None:
    """
    auditledger — append-only action ledger for AI agents.

    Records what an agent did, what it assumed, and what it is unsure of.
    Secrets are redacted before anything is written.

    \b
    Quick start:
      auditledger add --type file_edit --summary "Updated README" --did "Added install notes"
      auditledger last 5
      auditledger show 20260131T034656Z-3fa9
      auditledger search deploy
      auditledger verify
    """
    _Color.configure(not no_color)

    try:
        config = LedgerConfig.from_env(config_file=config_file)
    except ConfigError as e:
        fail(str(e), code=2)

    ctx.obj = config.with_overrides(ledger_path=ledger_path)


cli.add_command(add_command)
cli.add_command(last_command)
cli.add_command(show_command)
cli.add_command(search_command)
cli.add_command(verify_command)
