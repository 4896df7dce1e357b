"""Redaction utilities for logs and error messages.

Deterministic and non-mutating. Never stores or prints the actual secret,
only indicates that redaction occurred.
"""

from __future__ import annotations

import re
from typing import Any

# ── Constants ────────────────────────────────────────────────────

SENSITIVE_KEYWORDS = [
    "api_token", "apitoken", "token", "secret", "password",
    "authorization", "credential",
]

REDACTED = "***REDACTED***"

# Max string length before truncation in redact_dict
_MAX_STRING_LEN = 240

# Max recursion depth for redact_dict
_MAX_DEPTH = 10

# ── Patterns ─────────────────────────────────────────────────────

_AUTH_HEADER_RE = re.compile(r"((?:Basic|Bearer)\s+)\S+", re.IGNORECASE)
_TOKEN_CRED_RE = re.compile(r"(/token:)\S+")
_LONG_HEX_RE = re.compile(r"\b[0-9a-fA-F]{24,}\b")


def _is_sensitive_key(key: str) -> bool:
    lower = key.lower()
    return any(kw in lower for kw in SENSITIVE_KEYWORDS)


# ── Public API ───────────────────────────────────────────────────


def redact_text(text: str) -> str:
    """Redact credentials from a text string.

    - Replaces Basic/Bearer authorization values
    - Replaces the token part of ``email/token:<token>`` credentials
    - Replaces long hex strings (>=24 chars)
    """
    if not text:
        return text
    result = _AUTH_HEADER_RE.sub(r"\1" + REDACTED, text)
    result = _TOKEN_CRED_RE.sub(r"\1" + REDACTED, result)
    result = _LONG_HEX_RE.sub(REDACTED, result)
    return result


def redact_dict(obj: Any, *, _depth: int = 0) -> Any:
    """Recursively redact sensitive values from a data structure.

    Keys matching SENSITIVE_KEYWORDS have their values replaced and long
    strings are truncated. Never mutates the input object.
    """
    if _depth > _MAX_DEPTH:
        return "[max_depth_exceeded]"

    if isinstance(obj, dict):
        result = {}
        for k, v in obj.items():
            if isinstance(k, str) and _is_sensitive_key(k):
                result[k] = REDACTED
            else:
                result[k] = redact_dict(v, _depth=_depth + 1)
        return result

    if isinstance(obj, (list, tuple)):
        return [redact_dict(item, _depth=_depth + 1) for item in obj]

    if isinstance(obj, str):
        obj = redact_text(obj)
        if len(obj) > _MAX_STRING_LEN:
            return obj[:60] + "..." + obj[-60:]
        return obj

    return obj


def mask(value: str) -> str:
    """Return ``***`` for a non-empty secret, ``""`` otherwise."""
    return "***" if value else ""
