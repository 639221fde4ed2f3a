"""Sensitive data masking for log output.

Masks credential values before they reach log handlers: any mapping key that
mentions a credential has its value replaced outright, and free text is
scanned for inline credentials (bearer tokens, ``user:pass@`` URLs,
``password=...`` pairs).
"""

import logging
import re
from typing import Any, Final, List, Tuple

MASK: Final[str] = "[MASKED]"

SENSITIVE_KEY_FRAGMENTS: Final[Tuple[str, ...]] = (
    "password",
    "passwd",
    "authorization",
    "token",
    "secret",
    "credential",
    "api_key",
    "apikey",
)

# Matched whole; as fragments these would catch "author" or "taxonKey".
SENSITIVE_KEYS: Final[frozenset] = frozenset({"auth", "key", "pwd"})

SENSITIVE_PATTERNS: Final[List[Tuple[re.Pattern, str]]] = [
    (re.compile(r"(?i)(bearer|basic)\s+[a-zA-Z0-9_\-\.=+/]+"), r"\1 " + MASK),
    (re.compile(r"(?i)(https?://)[^/\s:@]+:[^/\s@]+@"), r"\1" + MASK + "@"),
    (
        re.compile(r"(?i)(password|passwd|pwd|secret|token)(\s*[:=]\s*)['\"]?[^\s'\",&]+['\"]?"),
        r"\1\2" + MASK,
    ),
]

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_STANDARD_RECORD_ATTRS: Final[frozenset] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


def is_sensitive_key(key: Any) -> bool:
    """Return True if a mapping key names a credential."""
    key_lower = str(key).lower().replace("-", "_")
    if key_lower in SENSITIVE_KEYS:
        return True
    return any(fragment in key_lower for fragment in SENSITIVE_KEY_FRAGMENTS)


def redact_text(text: str) -> str:
    """Mask inline credentials in a free-text string."""
    result = text
    for pattern, replacement in SENSITIVE_PATTERNS:
        result = pattern.sub(replacement, result)
    return result


def redact_sensitive(data: Any, *, max_depth: int = 10) -> Any:
    """Recursively mask sensitive values in dicts, lists, and strings.

    Returns a copy; the input is never mutated.

    Example:
        >>> redact_sensitive({"username": "ana", "password": "hunter2"})
        {'username': 'ana', 'password': '[MASKED]'}
    """
    if max_depth <= 0:
        return "[MAX_DEPTH_EXCEEDED]"

    if isinstance(data, str):
        return redact_text(data)

    if isinstance(data, dict):
        return {
            key: MASK if is_sensitive_key(key) else redact_sensitive(value, max_depth=max_depth - 1)
            for key, value in data.items()
        }

    if isinstance(data, (list, tuple)):
        items = [redact_sensitive(item, max_depth=max_depth - 1) for item in data]
        return tuple(items) if isinstance(data, tuple) else items

    return data


class RedactionFilter(logging.Filter):
    """Logging filter that masks credentials in ``extra`` fields and messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        for attr, value in list(vars(record).items()):
            if attr in _STANDARD_RECORD_ATTRS:
                continue
            if is_sensitive_key(attr):
                setattr(record, attr, MASK)
            else:
                setattr(record, attr, redact_sensitive(value))
        if isinstance(record.msg, str):
            record.msg = redact_text(record.msg)
        if record.args:
            if isinstance(record.args, dict):
                record.args = redact_sensitive(record.args)
            else:
                record.args = tuple(redact_sensitive(arg) for arg in record.args)
        return True
