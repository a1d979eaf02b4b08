"""
auditledger/core/models.py

Ledger Record Model

One Record = one line in the ledger file. JSON shape:

    {
      "id":            "20260131T034656Z-3fa9",
      "ts":            "2026-01-31T03:46:56.406Z",
      "context":       {"channel": "...", "session": "...", "request": "..."},
      "action":        {"type": "file_edit", "summary": "...", "artifacts": [...]},
      "what_i_did":    [...],
      "assumptions":   [...],
      "uncertainties": [...],
      "verification":  {"suggested": [...], "observed": [...]}
    }

context and verification are optional, as is every key inside context.
Every list defaults to [] when absent. A list that is present but null or
holds non-strings is a violation, not a default.

Unknown keys are dropped on parse.

Enforcement points:
    validate_record() → SchemaValidationResult listing every violation
    from_dict()       → ValidationError if invalid, Record otherwise
    create()          → builds a fresh record (new id + ts) and validates it
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Set

from auditledger.core.exceptions import ValidationError
from auditledger.core.time import generate_id, ledger_timestamp


# ─────────────────────────────────────────────────────────────
# Action Type Vocabulary
# ─────────────────────────────────────────────────────────────

class ActionType:
    """
    action.type string constants. These are the ONLY valid values.
    """
    FILE_READ     = "file_read"
    FILE_WRITE    = "file_write"
    FILE_EDIT     = "file_edit"
    BROWSER       = "browser"
    API_CALL      = "api_call"
    EXEC          = "exec"
    MESSAGE_SEND  = "message_send"
    CONFIG_CHANGE = "config_change"
    OTHER         = "other"


ACTION_TYPES = (
    ActionType.FILE_READ,
    ActionType.FILE_WRITE,
    ActionType.FILE_EDIT,
    ActionType.BROWSER,
    ActionType.API_CALL,
    ActionType.EXEC,
    ActionType.MESSAGE_SEND,
    ActionType.CONFIG_CHANGE,
    ActionType.OTHER,
)

_VALID_ACTION_TYPES: Set[str] = set(ACTION_TYPES)


def is_action_type(value: Any) -> bool:
    """Return True if value is one of ACTION_TYPES."""
    return isinstance(value, str) and value in _VALID_ACTION_TYPES


# ts: ISO-8601 UTC, Z suffix, optional fraction of any precision
_TS_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$"
)

_CONTEXT_FIELDS = ("channel", "session", "request")


# ─────────────────────────────────────────────────────────────
# SchemaValidationResult
# ─────────────────────────────────────────────────────────────

@dataclass
class SchemaValidationResult:
    """
    Result of validate_record().

    Returned — not raised — so callers can choose hard fail vs log.
    bool(result) is True iff valid.
    """
    valid:  bool
    errors: List[str]

    def __bool__(self) -> bool:
        return self.valid

    def __repr__(self) -> str:
        if self.valid:
            return "SchemaValidationResult(VALID)"
        return f"SchemaValidationResult(INVALID, errors={self.errors})"


# ─────────────────────────────────────────────────────────────
# Field checks
# ─────────────────────────────────────────────────────────────

def _check_string_list(value: Any, name: str, errors: List[str]) -> None:
    if not isinstance(value, list):
        errors.append(f"{name} must be a list of strings, got {type(value).__name__}")
        return
    for i, item in enumerate(value):
        if not isinstance(item, str):
            errors.append(f"{name}[{i}] must be str, got {type(item).__name__}")


def _check_timestamp(value: Any, errors: List[str]) -> None:
    if not isinstance(value, str):
        errors.append(f"ts must be str, got {type(value).__name__}")
        return
    if not _TS_RE.match(value):
        errors.append(
            f"ts '{value}' is not an ISO-8601 UTC datetime "
            f"(YYYY-MM-DDTHH:MM:SS[.fff]Z)"
        )
        return
    # Regex accepts 2026-13-45; make sure the calendar agrees
    try:
        datetime.strptime(value[:19], "%Y-%m-%dT%H:%M:%S")
    except ValueError:
        errors.append(f"ts '{value}' is not a valid calendar datetime")


def validate_record(data: Any) -> SchemaValidationResult:
    """
    Validate a decoded ledger line (or candidate record dict).

    Absent optional lists are fine here; from_dict() fills them.
    """
    errors: List[str] = []

    if not isinstance(data, dict):
        return SchemaValidationResult(
            valid=False,
            errors=[f"record must be a JSON object, got {type(data).__name__}"],
        )

    # id
    record_id = data.get("id")
    if not isinstance(record_id, str) or not record_id:
        errors.append("id must be a non-empty string")

    # ts
    if "ts" not in data:
        errors.append("ts is required")
    else:
        _check_timestamp(data["ts"], errors)

    # context
    if "context" in data:
        context = data["context"]
        if not isinstance(context, dict):
            errors.append(f"context must be an object, got {type(context).__name__}")
        else:
            for name in _CONTEXT_FIELDS:
                if name in context and not isinstance(context[name], str):
                    errors.append(
                        f"context.{name} must be str, got {type(context[name]).__name__}"
                    )

    # action
    action = data.get("action")
    if not isinstance(action, dict):
        errors.append("action must be an object")
    else:
        if not is_action_type(action.get("type")):
            errors.append(
                f"action.type {action.get('type')!r} not in valid set: "
                f"{list(ACTION_TYPES)}"
            )
        summary = action.get("summary")
        if not isinstance(summary, str) or not summary:
            errors.append("action.summary must be a non-empty string")
        if "artifacts" in action:
            _check_string_list(action["artifacts"], "action.artifacts", errors)

    # core lists
    for name in ("what_i_did", "assumptions", "uncertainties"):
        if name in data:
            _check_string_list(data[name], name, errors)

    # verification
    if "verification" in data:
        verification = data["verification"]
        if not isinstance(verification, dict):
            errors.append(
                f"verification must be an object, got {type(verification).__name__}"
            )
        else:
            for name in ("suggested", "observed"):
                if name in verification:
                    _check_string_list(
                        verification[name], f"verification.{name}", errors
                    )

    return SchemaValidationResult(valid=len(errors) == 0, errors=errors)


# ─────────────────────────────────────────────────────────────
# Record parts
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Context:
    """Free-form correlators linking a record to its conversation."""
    channel: Optional[str] = None
    session: Optional[str] = None
    request: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        return {
            name: getattr(self, name)
            for name in _CONTEXT_FIELDS
            if getattr(self, name) is not None
        }


@dataclass(frozen=True)
class Action:
    type:      str
    summary:   str
    artifacts: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type":      self.type,
            "summary":   self.summary,
            "artifacts": list(self.artifacts),
        }


@dataclass(frozen=True)
class Verification:
    suggested: List[str] = field(default_factory=list)
    observed:  List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "suggested": list(self.suggested),
            "observed":  list(self.observed),
        }


# ─────────────────────────────────────────────────────────────
# Record
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Record:
    """
    One ledger entry: an action, why it was taken, and what is still unsure.

    Immutable once built. The ledger never rewrites a record; corrections
    are appended as new records.
    """

    id:            str
    ts:            str
    action:        Action
    what_i_did:    List[str] = field(default_factory=list)
    assumptions:   List[str] = field(default_factory=list)
    uncertainties: List[str] = field(default_factory=list)
    context:       Optional[Context] = None
    verification:  Optional[Verification] = None

    # ── Constructor ───────────────────────────────────────────

    @classmethod
    def create(
        cls,
        action_type:   str,
        summary:       str,
        artifacts:     Sequence[str] = (),
        what_i_did:    Sequence[str] = (),
        assumptions:   Sequence[str] = (),
        uncertainties: Sequence[str] = (),
        context:       Optional[Context] = None,
        verification:  Optional[Verification] = None,
        now:           Optional[datetime] = None,
    ) -> "Record":
        """
        Build a new record with a fresh id and timestamp.

        Raises ValidationError if the result would not pass validate_record().
        """
        record = cls(
            id=            generate_id(now),
            ts=            ledger_timestamp(now),
            action=        Action(action_type, summary, list(artifacts)),
            what_i_did=    list(what_i_did),
            assumptions=   list(assumptions),
            uncertainties= list(uncertainties),
            context=       context,
            verification=  verification,
        )
        record.validate_or_raise()
        return record

    @classmethod
    def from_dict(cls, data: Any) -> "Record":
        """
        Validate a decoded dict and build a Record from it.

        Absent lists become []; unknown keys are dropped.
        Raises ValidationError listing every violation.
        """
        result = validate_record(data)
        if not result:
            raise ValidationError("Record failed schema validation", result.errors)

        action  = data["action"]
        context = data.get("context")
        verif   = data.get("verification")

        return cls(
            id=            data["id"],
            ts=            data["ts"],
            action=        Action(
                type=      action["type"],
                summary=   action["summary"],
                artifacts= list(action.get("artifacts", [])),
            ),
            what_i_did=    list(data.get("what_i_did", [])),
            assumptions=   list(data.get("assumptions", [])),
            uncertainties= list(data.get("uncertainties", [])),
            context=       (
                Context(**{k: context[k] for k in _CONTEXT_FIELDS if k in context})
                if context is not None else None
            ),
            verification=  (
                Verification(
                    suggested= list(verif.get("suggested", [])),
                    observed=  list(verif.get("observed", [])),
                )
                if verif is not None else None
            ),
        )

    # ── Serialization ─────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-ready dict. Absent optional objects are omitted."""
        d: Dict[str, Any] = {"id": self.id, "ts": self.ts}
        if self.context is not None:
            d["context"] = self.context.to_dict()
        d["action"]        = self.action.to_dict()
        d["what_i_did"]    = list(self.what_i_did)
        d["assumptions"]   = list(self.assumptions)
        d["uncertainties"] = list(self.uncertainties)
        if self.verification is not None:
            d["verification"] = self.verification.to_dict()
        return d

    # ── Validation ────────────────────────────────────────────

    def validate_schema(self) -> SchemaValidationResult:
        return validate_record(self.to_dict())

    def validate_or_raise(self) -> None:
        result = self.validate_schema()
        if not result:
            raise ValidationError("Record failed schema validation", result.errors)
