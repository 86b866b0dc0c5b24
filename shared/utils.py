from __future__ import annotations
import base64
import math
import re
import time

# ========================================
#           FIELD CHECK HELPERS
# ========================================
"""
Helpers the per-kind validators call to decide whether a decoded field
is present, non-blank or numeric. All of them are pure.
"""

# Binary values (signatures) travel as base64url (no padding) in JSON.
_B64URL_RE = re.compile(r'^[A-Za-z0-9_-]+$')  # no '=' padding allowed

_INFINITY_LITERALS = {"inf", "infinity"}

# Unicode White_Space set; str.strip() also trims the \x1c-\x1f separators
_WHITESPACE = (
    "\t\n\v\f\r \x85\xa0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000"
)


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def is_blank(s: str) -> bool:
    """
    True when the string is empty once leading/trailing whitespace is trimmed.
    Used for human-entered text (names, addresses, chat text).
    """
    return len(s.strip(_WHITESPACE)) == 0


def is_empty(s: str) -> bool:
    """
    True when the string has zero length. No trimming: identifier fields
    are compared byte-for-byte elsewhere, so whitespace counts as content.
    """
    return len(s) == 0


def parse_decimal(s: str) -> float:
    """
    Parse a base-10 floating point string.

    Stricter than ``float()``: surrounding whitespace and digit separators
    ('_') and non-ASCII digits are rejected, and finite-looking input that overflows to infinity
    is an error rather than ``inf``. Explicit "inf"/"nan" literals parse.

    Raises:
        ValueError: with the underlying parse message
    """
    if s != s.strip():
        raise ValueError(f"could not convert string to float: {s!r} (surrounding whitespace)")
    if not s.isascii():
        # float() accepts non-ASCII Unicode digits
        raise ValueError(f"could not convert string to float: {s!r}")
    if "_" in s:
        raise ValueError(f"could not convert string to float: {s!r}")

    value = float(s)

    if math.isinf(value) and s.lstrip("+-").lower() not in _INFINITY_LITERALS:
        raise ValueError(f"value out of range: {s!r}")
    return value


def is_base64url(s: str) -> bool:
    """
    returns True if the string is only base64url-safe characters, otherwise False.
    """
    return bool(_B64URL_RE.fullmatch(s))


def b64url_decode(s: str) -> bytes:
    """Decode unpadded base64url text."""
    return base64.urlsafe_b64decode(s + "=" * (-len(s) % 4))


def b64url_encode(data: bytes) -> str:
    """Encode bytes as unpadded base64url text."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")
