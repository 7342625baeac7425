"""
Content Sanitizer

Recursive clean-up of parsed Claude JSON before schema validation:
- null values are dropped so optional fields fall back to their defaults
- UTF-8 text mis-decoded as Windows-1252 ("Â£2,000", "donâ€™t") is repaired
- stray control characters are removed
"""

import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_MOJIBAKE_MARKERS = ("Ã", "Â", "â€", "â€™", "â€œ")

_COMMON_REPLACEMENTS = {
    "Â£": "£",
    "â‚¬": "€",
    "â€™": "’",
    "â€˜": "‘",
    "â€œ": "“",
    "â€\x9d": "”",
    "â€“": "–",
    "â€”": "—",
    "â€¦": "…",
    "Â ": " ",
    "�": "",
}

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def fix_encoding(text: str) -> str:
    """Repair common mojibake and strip control characters."""
    if not text:
        return text

    if any(marker in text for marker in _MOJIBAKE_MARKERS):
        try:
            text = text.encode("cp1252").decode("utf-8")
        except (UnicodeEncodeError, UnicodeDecodeError):
            for broken, fixed in _COMMON_REPLACEMENTS.items():
                text = text.replace(broken, fixed)
    elif "�" in text:
        text = text.replace("�", "")

    return _CONTROL_CHARS.sub("", text)


def sanitize_content(value: Any) -> Any:
    """
    Recursively sanitize a parsed JSON value.

    Returns a new structure; the input is not modified.
    """
    if isinstance(value, dict):
        return {
            str(key): sanitize_content(item)
            for key, item in value.items()
            if item is not None
        }
    if isinstance(value, list):
        return [sanitize_content(item) for item in value if item is not None]
    if isinstance(value, str):
        return fix_encoding(value)
    return value
