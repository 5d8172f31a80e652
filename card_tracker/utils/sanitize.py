"""HTML escaping of inbound request data"""

from typing import Any

HTML_ESCAPES = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#x27;",
    "/": "&#x2F;",
}

_TRANSLATION = str.maketrans(HTML_ESCAPES)


def escape_html(value: Any) -> Any:
    """
    Escape HTML-significant characters in a string.

    The translation is a single pass over the original characters, so the
    entities it produces are never escaped again. Non-string values are
    returned unchanged.
    """
    if not isinstance(value, str):
        return value
    return value.translate(_TRANSLATION)


def sanitize_value(value: Any) -> Any:
    """Recursively escape every string leaf of a JSON-like value"""
    if value is None:
        return None
    if isinstance(value, str):
        return escape_html(value)
    if isinstance(value, dict):
        return {key: sanitize_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [sanitize_value(item) for item in value]
    if isinstance(value, tuple):
        return tuple(sanitize_value(item) for item in value)
    return value
