"""
HTML helpers shared by the HTML templates.

Every LLM-sourced value goes through escape_html at its interpolation
point.
"""

import html
import re
from typing import Any, Iterable, Optional


def escape_html(value: Any) -> str:
    """Escape & < > " ' for safe interpolation (None renders as empty)."""
    if value is None:
        return ""
    return html.escape(str(value), quote=True)


def format_number(value: Any) -> str:
    """Thousands separators: 12500 -> '12,500'. Non-numbers are escaped as-is."""
    if isinstance(value, bool) or value is None:
        return escape_html(value)
    if isinstance(value, (int, float)):
        if float(value).is_integer():
            return f"{int(value):,}"
        return f"{value:,.1f}"
    return escape_html(value)


def format_currency(value: Any, symbol: str = "£") -> str:
    """Currency with no decimals: 2000 -> '£2,000'."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{symbol}{round(value):,}"
    return escape_html(value)


def format_percent(value: Any) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return f"{round(value):,}%"
    return escape_html(value)


def list_items(items: Iterable[Any], css_class: Optional[str] = None) -> str:
    """<li> elements for escaped items."""
    attr = f' class="{css_class}"' if css_class else ""
    return "".join(f"<li{attr}>{escape_html(item)}</li>" for item in items)


def paragraphs(text: Any) -> str:
    """Escaped text split into <p> blocks on blank lines or newlines."""
    if not text:
        return ""
    blocks = [block.strip() for block in re.split(r"\n+", str(text)) if block.strip()]
    return "".join(f"<p>{escape_html(block)}</p>" for block in blocks)


def slugify(name: str) -> str:
    """Lowercase, non-alphanumeric runs collapsed to single hyphens."""
    slug = re.sub(r"[^a-z0-9]+", "-", (name or "").lower()).strip("-")
    return slug or "proposal"

