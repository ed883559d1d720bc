"""Body content helpers shared by senders and renderers.

- ``substitute_placeholders``: minimal ``{{FieldName}}`` substitution used
  when no HTML renderer is supplied.
- ``is_html``: shallow markup detection for raw bodies.
- ``html_to_text``: plain-text alternative generated from HTML.
"""

from __future__ import annotations

from collections.abc import Mapping
from html import unescape
import re
from typing import Any

PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")

_HTML_MARKERS = re.compile(r"<(?:html|!doctype|div|p|h[1-6])\b", re.IGNORECASE)


def _lookup_field(model: Any, field_name: str) -> Any:
    """Read a field from a mapping key or an object attribute."""
    if isinstance(model, Mapping):
        return model.get(field_name)
    return getattr(model, field_name, None)


def substitute_placeholders(template: str, model: Any) -> str:
    """Replace ``{{FieldName}}`` tokens with values read from ``model``.

    Field names match case-sensitively against mapping keys or attributes.
    Missing fields and ``None`` values become an empty string. Tokens that are
    not a bare identifier (``{{ Name }}``, ``{{a.b}}``) are left untouched.

    Args:
        template: Template text containing ``{{FieldName}}`` tokens.
        model: Mapping or object supplying the values.

    Returns:
        The substituted text.

    Example:
        >>> substitute_placeholders("Hi {{Name}}", {"Name": "Ann"})
        'Hi Ann'
    """

    def _replace(match: re.Match[str]) -> str:
        value = _lookup_field(model, match.group(1))
        return "" if value is None else str(value)

    return PLACEHOLDER_PATTERN.sub(_replace, template)


def is_html(content: str) -> bool:
    """Detect common HTML markup (html, doctype, div, p, h1-h6 tags)."""
    return bool(content) and _HTML_MARKERS.search(content) is not None


def html_to_text(html: str) -> str:
    """Convert HTML to plain text.

    Performs basic HTML to text conversion:
    - Converts links to ``text (url)``
    - Breaks lines on headers, paragraphs, divs, br and list items
    - Removes remaining tags and decodes entities
    - Normalizes whitespace

    Args:
        html: HTML content.

    Returns:
        Plain text version.
    """
    if not html:
        return ""

    html = re.sub(r"<(style|script|head)[^>]*>.*?</\1>", "", html, flags=re.IGNORECASE | re.DOTALL)

    html = re.sub(
        r'<a[^>]+href=["\']([^"\']+)["\'][^>]*>([^<]+)</a>',
        r"\2 (\1)",
        html,
        flags=re.IGNORECASE,
    )

    html = re.sub(r"</h[1-6]\s*>", "\n\n", html, flags=re.IGNORECASE)
    html = re.sub(r"</?(p|div|tr|table)[^>]*>", "\n\n", html, flags=re.IGNORECASE)
    html = re.sub(r"<br\s*/?>", "\n", html, flags=re.IGNORECASE)
    html = re.sub(r"<li[^>]*>", "\n  * ", html, flags=re.IGNORECASE)

    html = re.sub(r"<[^>]+>", "", html)
    text = unescape(html)

    text = re.sub(r"[ \t]+", " ", text)
    text = re.sub(r"\n[ \t]+", "\n", text)
    text = re.sub(r"\n\s*\n", "\n\n", text)
    return text.strip()


__all__ = [
    "PLACEHOLDER_PATTERN",
    "html_to_text",
    "is_html",
    "substitute_placeholders",
]
