"""
tests/test_cli.py

End-to-end CLI tests through click's CliRunner. Every test points the
CLI at a fresh ledger under tmp_path with --ledger.
"""

import json
import sys

import pytest
from click.testing import CliRunner

from auditledger.cli import cli
from auditledger.cli.output import _Color, format_entry_line
from auditledger.core.canonical import encode_line
from auditledger.core.models import Record
from auditledger.ledger import read_records

# Keep the caller's shell configuration out of the tests
CLEAN_ENV = {
    "AUDIT_LEDGER_PATH":         None,
    "AUDIT_LEDGER_DEFAULT_TYPE": None,
    "AUDIT_LEDGER_MODE":         None,
    "AUDIT_LEDGER_CONFIG":       None,
}


@pytest.fixture
def ledger_path(tmp_path):
    return tmp_path / "memory" / "action-ledger.jsonl"


@pytest.fixture
def run(ledger_path):
    runner = CliRunner()

    def _run(*args, input=None, env=None):
        return runner.invoke(
            cli,
            ["--ledger", str(ledger_path), *args],
            input=input,
            env=dict(CLEAN_ENV, **(env or {})),
        )

    return _run


def add(run, summary, *extra):
    result = run("add", "--type", "exec", "--summary", summary, *extra)
    assert result.exit_code == 0, result.output
    return result.output.strip()


def corrupt(ledger_path, *lines):
    ledger_path.parent.mkdir(parents=True, exist_ok=True)
    with open(ledger_path, "a", encoding="utf-8") as f:
        for line in lines:
            f.write(line + "\n")


def corrupt_bytes(ledger_path, raw):
    ledger_path.parent.mkdir(parents=True, exist_ok=True)
    with open(ledger_path, "ab") as f:
        f.write(raw + b"\n")


# ─────────────────────────────────────────────────────────────
# add
# ─────────────────────────────────────────────────────────────

class TestAdd:

    def test_add_prints_id_and_writes_line(self, run, ledger_path):
        result = run(
            "add", "--type", "file_edit", "--summary", "Updated README",
            "--artifact", "README.md",
            "--did", "Added install notes",
            "--assume", "Markdown renders",
            "--unsure", "Links may be stale",
            "--suggest", "Open the page",
        )
        assert result.exit_code == 0, result.output

        records = list(read_records(ledger_path))
        assert len(records) == 1
        record = records[0]
        assert result.output.strip() == record.id
        assert record.action.type == "file_edit"
        assert record.action.artifacts == ["README.md"]
        assert record.what_i_did == ["Added install notes"]
        assert record.assumptions == ["Markdown renders"]
        assert record.uncertainties == ["Links may be stale"]
        assert record.verification.suggested == ["Open the page"]

    def test_missing_summary(self, run, ledger_path):
        result = run("add", "--type", "exec")
        assert result.exit_code == 1
        assert "--summary" in result.output
        assert not ledger_path.exists()

    def test_unknown_type(self, run):
        result = run("add", "--type", "teleport", "--summary", "x")
        assert result.exit_code == 2

    def test_default_type_from_environment(self, run, ledger_path):
        result = run("add", "--summary", "Opened a page",
                     env={"AUDIT_LEDGER_DEFAULT_TYPE": "browser"})
        assert result.exit_code == 0, result.output
        assert next(read_records(ledger_path)).action.type == "browser"

    def test_secrets_redacted_by_default(self, run, ledger_path):
        add(run, "Logged in", "--did", "used password=hunter22")
        text = ledger_path.read_text(encoding="utf-8")
        assert "hunter22" not in text
        assert "[REDACTED]" in text

    def test_strict_rejects(self, run, ledger_path):
        result = run("add", "--type", "exec", "--summary", "Logged in",
                     "--did", "used password=hunter22", "--strict")
        assert result.exit_code == 1
        assert "potential secrets" in result.output
        assert "what_i_did[0]" in result.output
        assert "hunter22" in result.output
        assert not ledger_path.exists()

    def test_strict_mode_from_environment(self, run, ledger_path):
        result = run("add", "--type", "exec", "--summary", "token=abcd1234",
                     env={"AUDIT_LEDGER_MODE": "strict"})
        assert result.exit_code == 1
        assert not ledger_path.exists()

    def test_no_redact(self, run, ledger_path):
        add(run, "Logged in", "--did", "used password=hunter22", "--no-redact")
        assert "hunter22" in ledger_path.read_text(encoding="utf-8")

    def test_json_shorthand(self, run, ledger_path):
        result = run("add", "--json",
                     input='{"type": "exec", "summary": "Ran tests", "artifacts": ["tests/"]}')
        assert result.exit_code == 0, result.output

        record = next(read_records(ledger_path))
        assert record.id == result.output.strip()
        assert record.action.summary == "Ran tests"
        assert record.action.artifacts == ["tests/"]

    def test_json_full_record_keeps_id(self, run, ledger_path):
        doc = {
            "id":         "20260131T034656Z-3fa9",
            "ts":         "2026-01-31T03:46:56.406Z",
            "action":     {"type": "api_call", "summary": "Posted"},
            "what_i_did": ["POST /items"],
        }
        result = run("add", "--json", input=json.dumps(doc))
        assert result.exit_code == 0, result.output
        assert result.output.strip() == "20260131T034656Z-3fa9"

    @pytest.mark.parametrize("payload", ["", "not json", "[1, 2]", '{"type": "nope", "summary": "x"}'])
    def test_json_rejected(self, run, ledger_path, payload):
        result = run("add", "--json", input=payload)
        assert result.exit_code == 1
        assert not ledger_path.exists()

    def test_stdin_bullets(self, run, ledger_path):
        result = run("add", "--type", "exec", "--summary", "Build and test",
                     "--stdin", "did", input="- Compiled\n\n* Ran unit tests\n")
        assert result.exit_code == 0, result.output
        assert next(read_records(ledger_path)).what_i_did == ["Compiled", "Ran unit tests"]


# ─────────────────────────────────────────────────────────────
# last / show / search
# ─────────────────────────────────────────────────────────────

class TestRead:

    def test_last_on_empty_ledger(self, run):
        result = run("last")
        assert result.exit_code == 0
        assert "Ledger is empty" in result.output

    def test_last_count(self, run):
        for i in range(4):
            add(run, f"step {i}")

        result = run("last", "2")
        assert result.exit_code == 0, result.output
        lines = result.output.strip().splitlines()
        assert len(lines) == 2
        assert lines[0].endswith("step 2")
        assert lines[1].endswith("step 3")

    def test_last_rejects_zero(self, run):
        assert run("last", "0").exit_code == 2

    def test_show(self, run):
        record_id = add(run, "Ran tests", "--did", "pytest -q")

        result = run("show", record_id)
        assert result.exit_code == 0, result.output
        shown = json.loads(result.output)
        assert shown["id"] == record_id
        assert shown["what_i_did"] == ["pytest -q"]

    def test_show_missing(self, run):
        add(run, "Ran tests")
        result = run("show", "20000101T000000Z-0000")
        assert result.exit_code == 1
        assert "Entry not found" in result.output

    def test_search(self, run):
        add(run, "Deployed the API")
        add(run, "Wrote docs")

        result = run("search", "deployed", "the")
        assert result.exit_code == 0, result.output
        assert "Deployed the API" in result.output
        assert "Wrote docs" not in result.output

    def test_search_no_hits(self, run):
        add(run, "Wrote docs")
        result = run("search", "kubernetes")
        assert result.exit_code == 0
        assert "No matches for: kubernetes" in result.output

    def test_bad_line_stops_strict_read(self, run, ledger_path):
        add(run, "first")
        corrupt(ledger_path, "not json")

        result = run("last")
        assert result.exit_code == 1
        assert "Invalid JSON on line 2" in result.output
        assert "--skip-invalid" in result.output

    def test_skip_invalid_reads_past_bad_line(self, run, ledger_path):
        add(run, "first")
        corrupt(ledger_path, "not json")
        add(run, "third")

        result = run("last", "--skip-invalid")
        assert result.exit_code == 0, result.output
        assert "skipped Invalid JSON on line 2" in result.output
        assert "first" in result.output
        assert "third" in result.output

    def test_invalid_bytes_stop_strict_read(self, run, ledger_path):
        add(run, "first")
        corrupt_bytes(ledger_path, b"\xff\xfe garbage")

        result = run("last")
        assert result.exit_code == 1
        assert "Invalid UTF-8 on line 2" in result.output

    def test_skip_invalid_reads_past_invalid_bytes(self, run, ledger_path):
        add(run, "first")
        corrupt_bytes(ledger_path, b"\xff\xfe garbage")
        add(run, "third")

        result = run("last", "--skip-invalid")
        assert result.exit_code == 0, result.output
        assert "skipped Invalid UTF-8 on line 2" in result.output
        assert "first" in result.output
        assert "third" in result.output


# ─────────────────────────────────────────────────────────────
# verify
# ─────────────────────────────────────────────────────────────

class TestVerify:

    def test_missing_ledger_is_valid(self, run):
        result = run("verify")
        assert result.exit_code == 0
        assert "VALID" in result.output

    def test_clean_ledger(self, run):
        add(run, "one")
        add(run, "two")

        result = run("verify", "--format", "json")
        assert result.exit_code == 0, result.output
        report = json.loads(result.output)["auditledger_verify"]
        assert report["ledger_valid"] is True
        assert report["total_records"] == 2
        assert report["by_type"] == {"exec": 2}
        assert report["faults"] == []

    def test_strict_stops_at_first_fault(self, run, ledger_path):
        add(run, "one")
        corrupt(ledger_path, "not json", '{"id": "x"}')

        result = run("verify", "--format", "json")
        assert result.exit_code == 1
        report = json.loads(result.output)["auditledger_verify"]
        assert report["ledger_valid"] is False
        assert report["fault_count"] == 1
        assert report["faults"][0]["line_number"] == 2

    def test_skip_invalid_reports_every_fault(self, run, ledger_path):
        add(run, "one")
        corrupt(ledger_path, "not json", '{"id": "x"}')
        add(run, "four")

        result = run("verify", "--format", "json", "--skip-invalid")
        assert result.exit_code == 1
        report = json.loads(result.output)["auditledger_verify"]
        assert report["total_records"] == 2
        assert [f["line_number"] for f in report["faults"]] == [2, 3]
        assert report["faults"][1]["message"] == "Schema validation failed on line 3"

    def test_human_output(self, run, ledger_path):
        add(run, "one")
        corrupt(ledger_path, "not json")

        result = run("verify")
        assert result.exit_code == 1
        assert "INVALID  1 fault(s)" in result.output
        assert "Invalid JSON on line 2" in result.output

    def test_quiet(self, run, ledger_path):
        corrupt(ledger_path, "not json")
        result = run("verify", "--quiet")
        assert result.exit_code == 1
        assert result.output == ""

    def test_invalid_bytes_are_a_fault(self, run, ledger_path):
        add(run, "one")
        corrupt_bytes(ledger_path, b"\xff\xfe garbage")
        add(run, "three")

        result = run("verify", "--format", "json", "--skip-invalid")
        assert result.exit_code == 1, result.output
        report = json.loads(result.output)["auditledger_verify"]
        assert report["total_records"] == 2
        assert report["fault_count"] == 1
        assert report["faults"][0]["line_number"] == 2
        assert report["faults"][0]["message"] == "Invalid UTF-8 on line 2"

    def test_invalid_bytes_human_output(self, run, ledger_path):
        add(run, "one")
        corrupt_bytes(ledger_path, b"\xff\xfe garbage")

        result = run("verify")
        assert result.exit_code == 1
        assert "Invalid UTF-8 on line 2" in result.output
        assert "INVALID  1 fault(s)" in result.output

    def test_unreadable_ledger(self, tmp_path):
        # A directory where the ledger file should be cannot be opened
        ledger_dir = tmp_path / "ledger.jsonl"
        ledger_dir.mkdir()

        result = CliRunner().invoke(
            cli,
            ["verify", "--format", "json"],
            env=dict(CLEAN_ENV, AUDIT_LEDGER_PATH=str(ledger_dir)),
        )
        assert result.exit_code == 2
        assert "error" in json.loads(result.output)["auditledger_verify"]

    def test_records_written_by_library_verify(self, run, ledger_path):
        record = Record.create("file_read", "Read config")
        corrupt(ledger_path, encode_line(record.to_dict()))
        assert run("verify", "--quiet").exit_code == 0


# ─────────────────────────────────────────────────────────────
# Group options
# ─────────────────────────────────────────────────────────────

class TestGroup:

    def test_missing_config_file(self, run, tmp_path):
        result = run("--config", str(tmp_path / "absent.yaml"), "last")
        assert result.exit_code == 2
        assert "Config file not found" in result.output

    def test_config_file_default_type(self, run, ledger_path, tmp_path):
        cfg = tmp_path / "auditledger.yaml"
        cfg.write_text("default_type: config_change\n", encoding="utf-8")

        result = run("--config", str(cfg), "add", "--summary", "Bumped timeout")
        assert result.exit_code == 0, result.output
        assert next(read_records(ledger_path)).action.type == "config_change"

    def test_help_lists_commands(self, run):
        result = run("--help")
        assert result.exit_code == 0
        for name in ("add", "last", "show", "search", "verify"):
            assert name in result.output


# ─────────────────────────────────────────────────────────────
# Color
# ─────────────────────────────────────────────────────────────

class _Stream:
    def __init__(self, tty):
        self._tty = tty

    def isatty(self):
        return self._tty


class TestColor:

    @pytest.fixture(autouse=True)
    def restore_color(self, monkeypatch):
        monkeypatch.setattr(_Color, "_on", _Color._on)

    def test_piped_stdout_gets_no_escape_codes(self, monkeypatch):
        monkeypatch.setattr(sys, "stdout", _Stream(tty=False))
        monkeypatch.setattr(sys, "stderr", _Stream(tty=True))
        _Color.configure(True)

        record = Record.create("exec", "Ran tests")
        assert "\033[" not in format_entry_line(record)

    def test_terminal_stdout_is_colored(self, monkeypatch):
        monkeypatch.setattr(sys, "stdout", _Stream(tty=True))
        monkeypatch.setattr(sys, "stderr", _Stream(tty=False))
        _Color.configure(True)
        assert _Color.cyan("x") == "\033[36mx\033[0m"

    def test_no_color_flag_wins(self, monkeypatch):
        monkeypatch.setattr(sys, "stdout", _Stream(tty=True))
        _Color.configure(False)
        assert _Color.cyan("x") == "x"
