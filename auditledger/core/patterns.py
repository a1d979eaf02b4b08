"""
auditledger/core/patterns.py

Pattern Catalog — what counts as credential-like.

Two pattern sets:

    key patterns    matched against mapping KEY NAMES, case-insensitive,
                    whole-name ("token" is sensitive, "tokenCount" is not)
    value patterns  matched against string CONTENT wherever it appears

PatternCatalog is frozen. Callers that need more patterns either pass
extra_patterns per call or build a new catalog with extended(). Nothing
mutates DEFAULT_CATALOG.

The replacement literal "[REDACTED]" matches none of the value patterns,
so redacting already-redacted text is a no-op.
"""

import re
from dataclasses import dataclass
from typing import Iterable, List, Tuple, Union

PatternLike = Union[str, re.Pattern]

DEFAULT_REPLACEMENT = "[REDACTED]"

# Previews longer than this are cut and suffixed with "..."
_PREVIEW_LENGTH = 20


# ─────────────────────────────────────────────────────────────
# Built-in key names
# ─────────────────────────────────────────────────────────────

_KEY_PATTERN_SOURCES = (
    r"^(api[_-]?key|apikey)$",
    r"^(auth[_-]?token|authtoken)$",
    r"^(access[_-]?token|accesstoken)$",
    r"^(refresh[_-]?token|refreshtoken)$",
    r"^(bearer[_-]?token|bearertoken)$",
    r"^(secret|secret[_-]?key|secretkey)$",
    r"^(password|passwd|pwd)$",
    r"^(token)$",
    r"^(ct0)$",                                 # X/Twitter session cookie
    r"^(private[_-]?key|privatekey)$",
    r"^(session[_-]?id|sessionid)$",
    r"^(session[_-]?token|sessiontoken)$",
    r"^(cookie|cookies)$",
    r"^(authorization)$",
    r"^(credential|credentials)$",
    r"^(client[_-]?secret|clientsecret)$",
    r"^(signing[_-]?key|signingkey)$",
    r"^(encryption[_-]?key|encryptionkey)$",
)


# ─────────────────────────────────────────────────────────────
# Built-in value shapes
# ─────────────────────────────────────────────────────────────

_VALUE_PATTERN_SOURCES: Tuple[Tuple[str, int], ...] = (
    # Bearer <token>
    (r"\bBearer\s+[A-Za-z0-9\-_.]{20,}\b", re.IGNORECASE),
    # AWS access key id
    (r"\bAKIA[0-9A-Z]{16}\b", 0),
    # AWS secret key: exactly 40 chars, upper + lower + digit somewhere in it.
    # Plain lowercase hex (git SHAs) does not qualify.
    (
        r"\b(?=[A-Za-z0-9/+=]{0,39}[A-Z])(?=[A-Za-z0-9/+=]{0,39}[a-z])"
        r"(?=[A-Za-z0-9/+=]{0,39}\d)[A-Za-z0-9/+=]{40}\b",
        0,
    ),
    # GitHub
    (r"\b(?:ghp|gho|ghu|ghs|ghr)_[A-Za-z0-9]{36,}\b", 0),
    # Slack
    (r"\bxox[baprs]-[A-Za-z0-9\-]{10,}\b", 0),
    # Generic API key: 32+ alphanumerics mixing upper, lower and digits
    (
        r"\b(?=[A-Za-z0-9]*[a-z])(?=[A-Za-z0-9]*[A-Z])(?=[A-Za-z0-9]*\d)"
        r"[A-Za-z0-9]{32,}\b",
        0,
    ),
    # Long hex (64+)
    (r"\b[a-fA-F0-9]{64,}\b", 0),
    # PEM private key headers
    (r"-----BEGIN\s+(?:RSA\s+)?PRIVATE\s+KEY-----", 0),
    (r"-----BEGIN\s+EC\s+PRIVATE\s+KEY-----", 0),
    (r"-----BEGIN\s+OPENSSH\s+PRIVATE\s+KEY-----", 0),
    # JWT
    (r"\beyJ[A-Za-z0-9\-_]+\.eyJ[A-Za-z0-9\-_]+\.[A-Za-z0-9\-_]+\b", 0),
    # Basic auth header value
    (r"\bBasic\s+[A-Za-z0-9+/=]{20,}\b", re.IGNORECASE),
    # Stripe
    (r"\b(?:sk|pk)_(?:live|test)_[A-Za-z0-9]{24,}\b", 0),
    # SendGrid
    (r"\bSG\.[A-Za-z0-9\-_]{22,}\.[A-Za-z0-9\-_]{22,}\b", 0),
    # Inline password=..., token: ..., api_key="..."
    (
        r"\b(?:password|passwd|pwd|token|api[_-]?key|secret|auth[_-]?token"
        r"|access[_-]?token)\s*[=:]\s*[\"']?[^\s\"',;]{4,}[\"']?",
        re.IGNORECASE,
    ),
)


def compile_pattern(pattern: PatternLike, flags: int = 0) -> re.Pattern:
    """Compile a string pattern; pass compiled patterns through untouched."""
    if isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(pattern, flags)


def compile_key_patterns(patterns: Iterable[PatternLike]) -> Tuple[re.Pattern, ...]:
    """Key patterns are case-insensitive when given as strings."""
    return tuple(compile_pattern(p, re.IGNORECASE) for p in patterns)


def compile_value_patterns(patterns: Iterable[PatternLike]) -> Tuple[re.Pattern, ...]:
    return tuple(compile_pattern(p) for p in patterns)


def preview(text: str) -> str:
    """Truncated form of matched text, safe to put in error messages."""
    if len(text) > _PREVIEW_LENGTH:
        return text[:_PREVIEW_LENGTH] + "..."
    return text


# ─────────────────────────────────────────────────────────────
# PatternCatalog
# ─────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PatternCatalog:
    """
    Immutable key and value pattern sets.

    Every method also accepts extra_patterns, unioned with the catalog's
    own for that call only.
    """

    key_patterns:   Tuple[re.Pattern, ...]
    value_patterns: Tuple[re.Pattern, ...]

    def extended(
        self,
        key_patterns:   Iterable[PatternLike] = (),
        value_patterns: Iterable[PatternLike] = (),
    ) -> "PatternCatalog":
        """Return a new catalog with the given patterns appended."""
        return PatternCatalog(
            key_patterns=   self.key_patterns + compile_key_patterns(key_patterns),
            value_patterns= self.value_patterns + compile_value_patterns(value_patterns),
        )

    def is_sensitive_key(
        self,
        name: str,
        extra_patterns: Iterable[PatternLike] = (),
    ) -> bool:
        """True if name looks like a credential field name."""
        patterns = self.key_patterns + compile_key_patterns(extra_patterns)
        return any(p.search(name) for p in patterns)

    def find_matches(
        self,
        text: str,
        extra_patterns: Iterable[PatternLike] = (),
    ) -> List[str]:
        """
        One truncated preview per pattern that matches text.

        Empty list means nothing sensitive was found. Order follows the
        catalog, then extra_patterns.
        """
        found: List[str] = []
        for pattern in self.value_patterns + compile_value_patterns(extra_patterns):
            match = pattern.search(text)
            if match:
                found.append(preview(match.group(0)))
        return found

    def redact_text(
        self,
        text: str,
        replacement: str = DEFAULT_REPLACEMENT,
        extra_patterns: Iterable[PatternLike] = (),
    ) -> str:
        """
        Replace every occurrence of every value pattern with replacement.

        Patterns run in order over the progressively redacted string.
        """
        result = text
        for pattern in self.value_patterns + compile_value_patterns(extra_patterns):
            # Callable replacement: the text is literal, no backslash expansion
            result = pattern.sub(lambda _m: replacement, result)
        return result


DEFAULT_CATALOG = PatternCatalog(
    key_patterns=   compile_key_patterns(_KEY_PATTERN_SOURCES),
    value_patterns= tuple(
        re.compile(source, flags) for source, flags in _VALUE_PATTERN_SOURCES
    ),
)


def is_sensitive_key(name: str, extra_patterns: Iterable[PatternLike] = ()) -> bool:
    return DEFAULT_CATALOG.is_sensitive_key(name, extra_patterns)


def find_matches(text: str, extra_patterns: Iterable[PatternLike] = ()) -> List[str]:
    return DEFAULT_CATALOG.find_matches(text, extra_patterns)
