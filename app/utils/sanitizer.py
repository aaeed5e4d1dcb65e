# app/utils/sanitizer.py
"""
Input hygiene for text that ends up inside a generation prompt.

sanitize_text() rejects injection-looking input outright (ValidationError) and
otherwise strips markup, quotes and control characters. clean_text() only
strips; it is for stored values that already passed validation once.
"""

import re

from app.exceptions import ValidationError
from app.utils.logger import get_logger

logger = get_logger(__name__)

MAX_TEXT_LENGTH = 1000

SQL_PATTERNS = [
    re.compile(r"'|;|--|\s+(or|and)\s+.*(=|like)", re.IGNORECASE),
    re.compile(r"\b(union|select|insert|update|delete|drop|create|alter|exec|execute)\b", re.IGNORECASE),
    re.compile(r"\b(script|javascript|vbscript|onload|onerror|onclick)\b", re.IGNORECASE),
]

MARKUP_PATTERNS = [
    re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<iframe[^>]*>.*?</iframe>", re.IGNORECASE | re.DOTALL),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
    re.compile(r"<[^>]*on\w+[^>]*>", re.IGNORECASE),
]

_STRIP_RE = re.compile(r"[<>\"']")
_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

_OPENAI_KEY_RE = re.compile(r"^sk-[A-Za-z0-9_\-]{48,}$")
_GENERIC_KEY_RE = re.compile(r"^[A-Za-z0-9_\-]{20,}$")


def contains_sql_injection(value: str) -> bool:
    return any(p.search(value) for p in SQL_PATTERNS)


def contains_markup_injection(value: str) -> bool:
    return any(p.search(value) for p in MARKUP_PATTERNS)


def clean_text(value: str) -> str:
    value = _CONTROL_RE.sub("", value)
    value = _STRIP_RE.sub("", value)
    return value.strip()[:MAX_TEXT_LENGTH]


def sanitize_text(value: str, field: str = "input") -> str:
    if not isinstance(value, str):
        raise ValidationError(f"'{field}' must be a string")
    if contains_sql_injection(value) or contains_markup_injection(value):
        logger.warning(f"Suspicious input rejected in '{field}': {value[:100]!r}")
        raise ValidationError(f"'{field}' contains suspicious patterns")
    return clean_text(value)


def is_valid_api_key(key) -> bool:
    """Format check only: a well-formed key can still be revoked."""
    if not key or not isinstance(key, str):
        return False
    if key.startswith("sk-"):
        return bool(_OPENAI_KEY_RE.match(key))
    return bool(_GENERIC_KEY_RE.match(key))
