from __future__ import annotations

import json
import re
from typing import Optional

# A JSON string literal (with escapes) or a bare number.
_VALUE_RE = re.compile(r'(?:"((?:[^"\\]|\\.)*)"|(-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?))')


def extract_field(json_text: Optional[str], key: str) -> Optional[str]:
    """
    Pull the value of ``key`` out of a small, flat JSON object without parsing it.

    This is a pattern match over a known shape, not a JSON parser. It finds the
    first ``"key":`` in the text (whitespace around the colon allowed) and
    returns the quoted string or bare number that follows it, as text.
    Nesting is ignored: if the key appears inside a nested object first, that
    one wins.

    Args:
        json_text: Raw response body
        key: Field name to look for

    Returns:
        The value as a string, or None if the key is missing or its first
        occurrence holds something else (null, bool, object, array).
    """
    if not json_text:
        return None

    key_match = re.search(r'"' + re.escape(key) + r'"\s*:\s*', json_text)
    if not key_match:
        return None

    # Only the first occurrence counts; a null there means absent.
    m = _VALUE_RE.match(json_text, key_match.end())
    if not m:
        return None

    quoted, number = m.group(1), m.group(2)
    if number is not None:
        return number

    # Decode JSON escapes (\", \\, é, ...) the way a real decoder would.
    try:
        return json.loads(f'"{quoted}"')
    except json.JSONDecodeError:
        return quoted
