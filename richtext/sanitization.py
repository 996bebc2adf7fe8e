"""Helpers for sanitizing untrusted scalars before they reach rich-text models."""

from __future__ import annotations

import math
import re

DEFAULT_FONT_SIZE = 16
MAX_INDENT = 8
MAX_OFFSET = 2**53

_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_HTTP_SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)
_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?\Z")


def strip_control_characters(value: str) -> str:
    """Remove C0 and C1 control characters (including DEL)."""

    return _CONTROL_CHARS_RE.sub("", value)


def sanitize_ui_text(value: str | None, *, max_length: int = 5000) -> str:
    """Strip unsafe control characters and cap length for rendered text."""

    if value is None:
        return ""

    trimmed = value[:max_length]
    safe_chars = []
    for char in trimmed:
        if char in {"\n", "\r", "\t"} or not _CONTROL_CHARS_RE.match(char):
            safe_chars.append(char)
    return "".join(safe_chars)


def truncate_utf16(value: str, limit: int) -> str:
    """Keep at most ``limit`` UTF-16 code units without splitting a character."""

    units = 0
    for index, char in enumerate(value):
        units += 2 if ord(char) > 0xFFFF else 1
        if units > limit:
            return value[:index]
    return value


def sanitize_url(value: object) -> str:
    """Return the URL if it is a plain http(s) link, otherwise an empty string."""

    if not isinstance(value, str):
        return ""
    cleaned = strip_control_characters(value).strip()
    if not _HTTP_SCHEME_RE.match(cleaned):
        return ""
    return cleaned


def to_number(value: object) -> float | None:
    """Coerce ints, floats and plain decimal strings to float; ``None`` when not numeric.

    Ints beyond the float range become signed infinity.
    """

    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        try:
            number = float(value)
        except OverflowError:
            return math.inf if value > 0 else -math.inf
    elif isinstance(value, float):
        number = value
    elif isinstance(value, str):
        source = value.strip()
        if not _DECIMAL_RE.match(source):
            return None
        number = float(source)
    else:
        return None
    if math.isnan(number):
        return None
    return number


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def coerce_font_size(value: object, fallback: int = DEFAULT_FONT_SIZE) -> int:
    """Convert an editor size value (``24``, ``"24px"``, ``"24"``) to whole pixels."""

    if isinstance(value, str):
        source = value.strip().lower()
        if not source:
            return fallback
        if source.endswith("px"):
            source = source[:-2]
        number = to_number(source)
    else:
        number = to_number(value)

    if number is None or math.isinf(number):
        return fallback
    return round_half_up(number)


def clamp_font_size(size: int, min_size: int, max_size: int) -> int:
    return max(min_size, min(max_size, size))


def clamp_indent(value: object) -> int:
    """Clamp an indent level into ``[0, MAX_INDENT]`` and round it."""

    number = to_number(value) or 0.0
    return round_half_up(max(0.0, min(float(MAX_INDENT), number)))


def coerce_offset(value: object) -> int:
    """Return a text offset in ``[0, MAX_OFFSET]``; anything unusable becomes 0."""

    number = to_number(value)
    if number is None:
        return 0
    if number >= MAX_OFFSET:
        return MAX_OFFSET
    return max(0, math.floor(number))
