"""
auditledger: Canonical JSON Encoding — RFC 8785 (JCS)

Every ledger line is written through encode_line(). JCS output is compact
(no insignificant whitespace), key-order independent and UTF-8, so the
same record always produces the same bytes on disk.

RFC 8785: https://www.rfc-editor.org/rfc/rfc8785
"""

import jcs


def canonicalize(obj: dict) -> bytes:
    """
    Encode a dict to RFC 8785 canonical JSON bytes.

    All values must be JSON-primitive (str, int, float, bool, None, list, dict).
    """
    return jcs.canonicalize(obj)


def encode_line(obj: dict) -> str:
    """
    One ledger line for obj, without the trailing newline.

    JCS never emits raw newlines (control characters inside strings are
    escaped), so the result is always a single line.
    """
    return canonicalize(obj).decode("utf-8")
