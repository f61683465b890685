"""
Best-effort JSON field extraction without a JSON parser.

Health endpoints return loosely specified JSON (sometimes truncated, sometimes
with trailing garbage). Instead of strictly parsing it, we scan for a single
`"key":` pattern and read whatever value follows. These helpers never raise:
anything they cannot resolve comes back as an empty string.

Functions:
  - extract_json_value: raw text of one field (string, composite or scalar)
  - classify_status: OK / FAIL / UNKNOWN from an extracted "status" value
  - parse_group_names: names from an extracted "groups" array
"""

from typing import List

from .model import Status

_WHITESPACE = " \t\n\r"
_SCALAR_TERMINATORS = ",}\n\r"
_CLOSING = {"[": "]", "{": "}"}

OK_VALUES = ("ok", "up")
FAIL_VALUES = ("fail", "down")


def _skip_quoted(text: str, i: int) -> int:
    """Return the index of the quote closing the string that opens at text[i]."""
    i += 1
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == '"':
            return i
        i += 1
    return len(text)


def extract_json_value(text: str, key: str) -> str:
    """
    Return the raw value of the first `"key":` occurrence in text.

    Strings are returned unquoted (escapes are skipped, not decoded), arrays
    and objects as their balanced span including delimiters, and scalars as
    the trimmed text up to the next comma, closing brace or newline.
    Returns "" if the key is not present.
    """
    if not isinstance(text, str) or not isinstance(key, str):
        return ""

    pattern = f'"{key}":'
    idx = text.find(pattern)
    if idx == -1:
        return ""

    i = idx + len(pattern)
    while i < len(text) and text[i] in _WHITESPACE:
        i += 1
    if i >= len(text):
        return ""

    ch = text[i]

    if ch == '"':
        end = _skip_quoted(text, i)
        return text[i + 1:end]

    if ch in _CLOSING:
        opener, closer = ch, _CLOSING[ch]
        start = i
        depth = 0
        while i < len(text):
            c = text[i]
            if c == '"':
                i = _skip_quoted(text, i)
            else:
                if c == opener:
                    depth += 1
                elif c == closer:
                    depth -= 1
                if depth == 0:
                    return text[start:i + 1].strip()
            i += 1
        # truncated input: everything from the value start
        return text[start:].strip()

    start = i
    while i < len(text) and text[i] not in _SCALAR_TERMINATORS:
        i += 1
    return text[start:i].strip()


def _body_has_status(lower_body: str, values) -> bool:
    return any(f'"status":"{v}"' in lower_body for v in values)


def classify_status(extracted: str, body: str = "") -> Status:
    """Classify an extracted status value, falling back to literal patterns in body."""
    value = (extracted or "").strip().lower()
    lower_body = (body or "").lower()

    if value in OK_VALUES or _body_has_status(lower_body, OK_VALUES):
        return Status.OK
    if value in FAIL_VALUES or _body_has_status(lower_body, FAIL_VALUES) or value:
        return Status.FAIL
    return Status.UNKNOWN


def parse_group_names(extracted: str) -> List[str]:
    """Split an extracted `[...]` array of group names into clean names."""
    raw = (extracted or "").strip()
    if not raw:
        return []
    if raw.startswith("["):
        raw = raw[1:]
    if raw.endswith("]"):
        raw = raw[:-1]

    names = []
    for part in raw.split(","):
        name = part.strip().strip('"').strip("]}")
        if name:
            names.append(name)
    return names
