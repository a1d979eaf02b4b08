"""
auditledger/cli/add.py

auditledger add — append one record.

Usage:
    auditledger add --type file_edit --summary "Updated README" \\
        --artifact README.md --did "Added install instructions"
    auditledger add --type api_call --summary "Posted to API" \\
        --assume "API key is valid" --unsure "Rate limits unclear"
    echo '{"type":"exec","summary":"Ran tests"}' | auditledger add --json
    printf "Compiled\\nRan unit tests\\n" | auditledger add --type exec \\
        --summary "Build and test" --stdin did

Exit codes:
    0  Record appended; its id is printed on stdout
    1  Invalid input, or secrets found with --strict
"""

import json
import re
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import click

from auditledger.cli.output import _Color, echo_error, fail
from auditledger.config import LedgerConfig
from auditledger.core.exceptions import SecretsDetected, ValidationError
from auditledger.core.models import ACTION_TYPES, Record, Verification
from auditledger.core.redaction import RedactMode
from auditledger.core.time import generate_id, ledger_timestamp

STDIN_FIELDS = ("did", "assume", "unsure", "suggest", "observed", "artifact")

_BULLET_RE = re.compile(r"^[-*•]\s*")


def parse_bullets(text: str) -> List[str]:
    """One item per non-empty line, leading "-", "*" or "•" removed."""
    items = []
    for line in text.splitlines():
        item = _BULLET_RE.sub("", line).strip()
        if item:
            items.append(item)
    return items


def _read_stdin() -> str:
    return click.get_text_stream("stdin").read().strip()


def _record_from_json(text: str) -> Record:
    """
    Build a record from a JSON document.

    Accepts a full record or the shorthand {"type", "summary", "artifacts"}.
    id and ts are filled in when absent.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        fail("Invalid JSON input", "Ensure valid JSON is piped to stdin")

    if not isinstance(data, dict):
        fail("JSON input must be an object")

    now = datetime.now(timezone.utc)
    data.setdefault("id", generate_id(now))
    data.setdefault("ts", ledger_timestamp(now))

    if "action" not in data and "type" in data and "summary" in data:
        data["action"] = {
            "type":      data.pop("type"),
            "summary":   data.pop("summary"),
            "artifacts": data.pop("artifacts", []),
        }

    try:
        return Record.from_dict(data)
    except ValidationError as e:
        fail("Invalid entry schema", "; ".join(e.errors))


@click.command(name="add")
@click.option(
    "--type", "action_type",
    type=click.Choice(ACTION_TYPES),
    default=None,
    help="Action type (default: $AUDIT_LEDGER_DEFAULT_TYPE or 'other').",
)
@click.option("--summary", default=None, help="Brief description of the action.")
@click.option("--artifact", "artifacts", multiple=True, help="File or URL affected (repeatable).")
@click.option("--did", multiple=True, help="What was done (repeatable).")
@click.option("--assume", multiple=True, help="Assumption made (repeatable).")
@click.option("--unsure", multiple=True, help="Uncertainty (repeatable).")
@click.option("--suggest", multiple=True, help="Suggested verification step (repeatable).")
@click.option("--observed", multiple=True, help="Observed result (repeatable).")
@click.option(
    "--stdin", "stdin_field",
    type=click.Choice(STDIN_FIELDS),
    default=None,
    help="Read bullet items for this field from stdin.",
)
@click.option("--json", "json_mode", is_flag=True, default=False,
              help="Read the whole entry from stdin as JSON.")
@click.option("--strict", is_flag=True, default=False,
              help="Reject the entry if secrets are detected.")
@click.option("--no-redact", is_flag=True, default=False,
              help="Disable secret redaction (not recommended).")
@click.pass_obj
def add_command(
    config:      LedgerConfig,
    action_type: Optional[str],
    summary:     Optional[str],
    artifacts:   Tuple[str, ...],
    did:         Tuple[str, ...],
    assume:      Tuple[str, ...],
    unsure:      Tuple[str, ...],
    suggest:     Tuple[str, ...],
    observed:    Tuple[str, ...],
    stdin_field: Optional[str],
    json_mode:   bool,
    strict:      bool,
    no_redact:   bool,
) -> None:
    """
    Add a new entry to the ledger and print its id.
    """
    if json_mode:
        text = _read_stdin()
        if not text:
            fail("No JSON input received on stdin",
                 "echo '{...}' | auditledger add --json")
        record = _record_from_json(text)
    else:
        if not summary:
            fail("Missing required flag: --summary",
                 'Provide a brief description: --summary "Updated config"')

        fields: Dict[str, List[str]] = {
            "did":      list(did),
            "assume":   list(assume),
            "unsure":   list(unsure),
            "suggest":  list(suggest),
            "observed": list(observed),
            "artifact": list(artifacts),
        }
        if stdin_field:
            fields[stdin_field].extend(parse_bullets(_read_stdin()))

        try:
            record = Record.create(
                action_type=   action_type or config.default_type,
                summary=       summary,
                artifacts=     fields["artifact"],
                what_i_did=    fields["did"],
                assumptions=   fields["assume"],
                uncertainties= fields["unsure"],
                verification=  Verification(
                    suggested= fields["suggest"],
                    observed=  fields["observed"],
                ),
            )
        except ValidationError as e:
            fail("Invalid entry", "; ".join(e.errors))

    if strict:
        config = config.with_overrides(mode=RedactMode.STRICT)
    ledger = config.open_ledger(redact=not no_redact)

    try:
        stored = ledger.append(record)
    except SecretsDetected as e:
        echo_error("Entry contains potential secrets:")
        for match in e.matches:
            click.echo(f"  {_Color.dim('•')} {match}", err=True)
        fail("Entry rejected, nothing was written",
             "Use --no-redact to bypass (not recommended)")

    click.echo(stored.id)
