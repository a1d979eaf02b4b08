"""
auditledger/core/redaction.py

Redaction Engine — strips credential-like content from JSON-shaped data
before it reaches the ledger.

Two modes:
    REDACT (default)  every detected fragment is replaced with "[REDACTED]";
                      always succeeds, returns a NEW tree
    STRICT            nothing is rewritten; any detection anywhere rejects
                      the whole tree with the full, ordered match list

Walk rules (depth-first, dotted path tracking):
    None              passes through
    str               value patterns; empty strings are never flagged
    list / tuple      element-wise, path suffix [i]
    dict              key-by-key, path suffix .key
                      sensitive key + non-empty str value → whole value is
                      sensitive regardless of content
    anything else     numbers, booleans — passes through

evaluate() returns Redacted | Rejected. scan() is the raising form.
The engine holds no state between calls; the catalog is injected.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Tuple, Union

from auditledger.core.exceptions import SecretsDetected
from auditledger.core.patterns import (
    DEFAULT_CATALOG,
    DEFAULT_REPLACEMENT,
    PatternCatalog,
    PatternLike,
    compile_key_patterns,
    compile_value_patterns,
)

ROOT_PATH = "(root)"

KEY_MATCH_PREVIEW = "sensitive key name"


class RedactMode(str, Enum):
    REDACT = "redact"
    STRICT = "strict"


@dataclass(frozen=True)
class RedactOptions:
    """Per-call redaction settings."""
    mode:                 RedactMode = RedactMode.REDACT
    replacement:          str = DEFAULT_REPLACEMENT
    extra_key_patterns:   Tuple[PatternLike, ...] = ()
    extra_value_patterns: Tuple[PatternLike, ...] = ()


@dataclass(frozen=True)
class RedactionMatch:
    """
    One detection. Never holds the full secret — preview is truncated.

    str(match) is "path: preview", e.g. "user.credentials.token: sensitive key name".
    """
    path:    str
    preview: str

    def __str__(self) -> str:
        return f"{self.path}: {self.preview}"


@dataclass(frozen=True)
class Redacted:
    """Successful scan. value is the (possibly rewritten) tree."""
    value: Any


@dataclass(frozen=True)
class Rejected:
    """Strict-mode scan that found secrets."""
    matches: List[RedactionMatch] = field(default_factory=list)


ScanResult = Union[Redacted, Rejected]


class Redactor:
    """
    Applies a PatternCatalog to arbitrary JSON-shaped trees.

    Usage:
        redactor = Redactor()
        clean    = redactor.scan(data)                          # redact
        redactor.scan(data, RedactOptions(mode=RedactMode.STRICT))  # may raise

    Tests and callers with their own patterns build an isolated engine:
        Redactor(DEFAULT_CATALOG.extended(value_patterns=[r"internal-\\d+"]))
    """

    def __init__(self, catalog: PatternCatalog = DEFAULT_CATALOG):
        self.catalog = catalog

    # ── Public API ────────────────────────────────────────────

    def evaluate(self, value: Any, options: Optional[RedactOptions] = None) -> ScanResult:
        """
        Walk value once and decide.

        REDACT → always Redacted(new_tree)
        STRICT → Rejected(matches) if anything was found, else Redacted(value)
        """
        options = options or RedactOptions()
        walk    = _Walk(self.catalog, options)
        result  = walk.visit(value, "")

        if walk.strict:
            if walk.matches:
                return Rejected(matches=walk.matches)
            # Strict never rewrites
            return Redacted(value=value)
        return Redacted(value=result)

    def scan(self, value: Any, options: Optional[RedactOptions] = None) -> Any:
        """
        Return the redacted tree, or raise SecretsDetected in strict mode.
        """
        result = self.evaluate(value, options)
        if isinstance(result, Rejected):
            raise SecretsDetected(result.matches)
        return result.value

    def contains_secrets(self, value: Any, options: Optional[RedactOptions] = None) -> bool:
        """True iff a strict scan of value would be rejected."""
        options = options or RedactOptions()
        strict  = RedactOptions(
            mode=                 RedactMode.STRICT,
            replacement=          options.replacement,
            extra_key_patterns=   options.extra_key_patterns,
            extra_value_patterns= options.extra_value_patterns,
        )
        return isinstance(self.evaluate(value, strict), Rejected)

    def redact_string(self, text: str, options: Optional[RedactOptions] = None) -> str:
        """Single-string convenience; same semantics as scan()."""
        return self.scan(text, options)


class _Walk:
    """State for one evaluate() call."""

    def __init__(self, catalog: PatternCatalog, options: RedactOptions):
        self.catalog        = catalog
        self.strict         = RedactMode(options.mode) is RedactMode.STRICT
        self.replacement    = options.replacement
        self.key_patterns   = compile_key_patterns(options.extra_key_patterns)
        self.value_patterns = compile_value_patterns(options.extra_value_patterns)
        self.matches: List[RedactionMatch] = []

    def visit(self, value: Any, path: str) -> Any:
        if value is None:
            return None

        if isinstance(value, str):
            return self._visit_string(value, path)

        if isinstance(value, (list, tuple)):
            return [
                self.visit(item, f"{path}[{i}]")
                for i, item in enumerate(value)
            ]

        if isinstance(value, dict):
            return self._visit_mapping(value, path)

        # int, float, bool: cannot carry secrets
        return value

    def _visit_string(self, value: str, path: str) -> str:
        if not value:
            return value

        found = self.catalog.find_matches(value, self.value_patterns)
        if not found:
            return value

        if self.strict:
            for item in found:
                self.matches.append(RedactionMatch(path or ROOT_PATH, item))
            return value

        return self.catalog.redact_text(value, self.replacement, self.value_patterns)

    def _visit_mapping(self, value: dict, path: str) -> dict:
        result = {}
        for key, item in value.items():
            current = f"{path}.{key}" if path else str(key)

            if (
                isinstance(item, str)
                and item
                and self.catalog.is_sensitive_key(str(key), self.key_patterns)
            ):
                if self.strict:
                    self.matches.append(RedactionMatch(current, KEY_MATCH_PREVIEW))
                    result[key] = item
                else:
                    result[key] = self.replacement
                continue

            result[key] = self.visit(item, current)
        return result


# ── Module-level helpers ──────────────────────────────────────

_default_redactor = Redactor()


def scan(value: Any, options: Optional[RedactOptions] = None) -> Any:
    return _default_redactor.scan(value, options)


def contains_secrets(value: Any, options: Optional[RedactOptions] = None) -> bool:
    return _default_redactor.contains_secrets(value, options)


def redact_string(text: str, options: Optional[RedactOptions] = None) -> str:
    return _default_redactor.redact_string(text, options)
