"""
Markup stripping for untrusted API data.

Every string that comes back from the backend is treated as untrusted:
embedded tags are removed and a small fixed set of HTML entities is decoded.
The two steps are repeated until the string stops changing, so decoding an
entity can never leave behind a tag that a later pass would strip. That makes
``strip_html`` (and therefore ``sanitize_object``) idempotent.
"""

import re
from typing import Any

# script/style bodies are code, not text; drop them together with their tags
_SCRIPT_OR_STYLE_ELEMENT = re.compile(
    r"<(script|style)\b[^>]*>.*?</\1\s*>",
    re.IGNORECASE | re.DOTALL,
)
_TAG = re.compile(r"<[^>]*>")

# &amp; last: "&amp;lt;" decodes one level per pass
_ENTITIES = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#x27;", "'"),
    ("&#x2F;", "/"),
    ("&amp;", "&"),
)


def _strip_once(value: str) -> str:
    value = _SCRIPT_OR_STYLE_ELEMENT.sub("", value)
    value = _TAG.sub("", value)
    for entity, char in _ENTITIES:
        value = value.replace(entity, char)
    return value


def strip_html(value: str) -> str:
    """
    Remove markup from a single string.

    Each pass either returns its input unchanged or makes it strictly
    shorter, so the loop always terminates.

    Args:
        value: The untrusted string.

    Returns:
        The string with tags removed and entities decoded. Non-string and
        empty values are returned as they are.
    """
    if not value or not isinstance(value, str):
        return value

    while True:
        stripped = _strip_once(value)
        if stripped == value:
            return value
        value = stripped


def sanitize_object(obj: Any) -> Any:
    """
    Recursively sanitize every string value in a decoded JSON document.

    Lists keep their length and order, dicts keep their keys (keys are never
    rewritten), numbers, booleans and None pass through untouched.
    """
    if isinstance(obj, str):
        return strip_html(obj)
    if isinstance(obj, list):
        return [sanitize_object(item) for item in obj]
    if isinstance(obj, dict):
        return {key: sanitize_object(value) for key, value in obj.items()}
    return obj
