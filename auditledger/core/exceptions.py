"""
auditledger Exception Hierarchy

All exceptions inherit from AuditLedgerError for easy catching.

Missing ledger files are NOT errors: an unwritten ledger reads as empty.
Write failures (disk full, permission denied) are NOT wrapped: they
propagate as the raw OSError.
"""

from typing import Any, List, Optional


class AuditLedgerError(Exception):
    """Base exception for all auditledger errors"""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self):
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class ValidationError(AuditLedgerError):
    """Raised when a record does not conform to the ledger schema"""

    def __init__(self, message: str, errors: List[str]):
        super().__init__(message, {"errors": "; ".join(errors)} if errors else None)
        self.errors = list(errors)


class ConfigError(AuditLedgerError):
    """Raised when configuration is invalid"""
    pass


class RedactionError(AuditLedgerError):
    """Raised when redaction refuses to process data"""
    pass


class SecretsDetected(RedactionError):
    """
    Raised by strict-mode redaction when anything sensitive was found.

    matches holds every RedactionMatch in walk order. Each match carries
    only a truncated preview, never the full secret.
    """

    def __init__(self, matches: List[Any]):
        super().__init__(f"Detected {len(matches)} potential secret(s) in data")
        self.matches = list(matches)

    @property
    def descriptions(self) -> List[str]:
        """The matches rendered as 'path: preview' strings."""
        return [str(m) for m in self.matches]


class LedgerError(AuditLedgerError):
    """Raised when ledger operations fail"""
    pass


class ParseFault(LedgerError):
    """
    One ledger line that could not be decoded or schema-validated.

    Attributes:
        line_number: 1-based line number in the ledger file.
        content:     First 100 characters of the stripped line.
        cause:       The JSONDecodeError or ValidationError behind it.
    """

    def __init__(
        self,
        message:     str,
        line_number: int,
        content:     str,
        cause:       Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.line_number = line_number
        self.content     = content
        self.cause       = cause

    def __str__(self):
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message
