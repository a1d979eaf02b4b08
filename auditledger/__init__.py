"""
auditledger/__init__.py

auditledger: Append-Only Action Ledger for AI Agents

Every action an agent takes becomes one JSON line: what it did, what it
assumed, what it is still unsure of. Credential-like content is redacted
(or the entry rejected) before anything touches disk.
"""

__version__ = "0.1.0"

from auditledger.core.models import (
    ACTION_TYPES,
    Action,
    ActionType,
    Context,
    Record,
    SchemaValidationResult,
    Verification,
    validate_record,
)
from auditledger.core.exceptions import (
    AuditLedgerError,
    ConfigError,
    LedgerError,
    ParseFault,
    RedactionError,
    SecretsDetected,
    ValidationError,
)
from auditledger.core.patterns import DEFAULT_CATALOG, PatternCatalog
from auditledger.core.redaction import (
    Redacted,
    RedactionMatch,
    RedactMode,
    RedactOptions,
    Redactor,
    Rejected,
    contains_secrets,
    redact_string,
    scan,
)
from auditledger.core.time import generate_id, ledger_timestamp
from auditledger.ledger import FaultPolicy, Ledger, append_record, read_records
from auditledger.config import LedgerConfig

__all__ = [
    # Records
    "Record",
    "Action",
    "Context",
    "Verification",
    "ActionType",
    "ACTION_TYPES",
    "SchemaValidationResult",
    "validate_record",
    # Redaction
    "Redactor",
    "RedactMode",
    "RedactOptions",
    "RedactionMatch",
    "Redacted",
    "Rejected",
    "PatternCatalog",
    "DEFAULT_CATALOG",
    "scan",
    "contains_secrets",
    "redact_string",
    # Ledger
    "Ledger",
    "LedgerConfig",
    "FaultPolicy",
    "append_record",
    "read_records",
    # Helpers
    "generate_id",
    "ledger_timestamp",
    # Errors
    "AuditLedgerError",
    "ValidationError",
    "ConfigError",
    "RedactionError",
    "SecretsDetected",
    "LedgerError",
    "ParseFault",
]
