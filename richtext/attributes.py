"""Allowlist sanitizers for editor attributes, run styles and mention embeds."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel

from richtext.models import (
    DEFAULT_COLOR,
    DEFAULT_MAX_FONT_SIZE,
    DEFAULT_MIN_FONT_SIZE,
    MAX_NICKNAME_LENGTH,
    AttributeMap,
    Mention,
    Style,
)
from richtext.sanitization import (
    DEFAULT_FONT_SIZE,
    clamp_font_size,
    clamp_indent,
    coerce_font_size,
    sanitize_url,
    to_number,
    truncate_utf16,
)

_WHITESPACE_RE = re.compile(r"\s+")
ALLOWED_LIST_VALUES = frozenset({"ordered", "bullet"})
ALLOWED_ALIGN_VALUES = frozenset({"center", "right", "justify"})


@dataclass(frozen=True, slots=True)
class FontBounds:
    """Inclusive pixel range every emitted font size is clamped into."""

    min_size: int
    max_size: int

    def clamp(self, size: int) -> int:
        return clamp_font_size(size, self.min_size, self.max_size)


def font_bounds(min_size: object, max_size: object) -> FontBounds:
    """Build bounds from caller input; inverted bounds collapse onto ``min_size``."""

    low = max(0, coerce_font_size(min_size, DEFAULT_MIN_FONT_SIZE))
    high = max(low, coerce_font_size(max_size, DEFAULT_MAX_FONT_SIZE))
    return FontBounds(low, high)


def as_mapping(value: object) -> Mapping[str, Any]:
    """View models and dicts uniformly; anything else is treated as empty."""

    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True)
    if isinstance(value, Mapping):
        return value
    return {}


def _text(value: object) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return ""


AttributeTransform = Callable[[object, FontBounds], Any]


def _flag(value: object, _bounds: FontBounds) -> bool | None:
    return True if value else None


def _header(value: object, _bounds: FontBounds) -> int | None:
    number = to_number(value)
    if number in (1.0, 2.0):
        return int(number)
    return None


def _choice(allowed: frozenset[str]) -> AttributeTransform:
    def transform(value: object, _bounds: FontBounds) -> str | None:
        normalized = _text(value).strip().lower()
        return normalized if normalized in allowed else None

    return transform


def _indent(value: object, _bounds: FontBounds) -> int | None:
    if value is None:
        return None
    return clamp_indent(value) or None


def _color(value: object, _bounds: FontBounds) -> str | None:
    return _text(value).strip() or None


def _size(value: object, bounds: FontBounds) -> str:
    return f"{bounds.clamp(coerce_font_size(value, DEFAULT_FONT_SIZE))}px"


def _link(value: object, _bounds: FontBounds) -> str | None:
    return sanitize_url(value) or None


# One entry per allowlisted key. A transform returns None to omit the key.
ATTRIBUTE_RULES: dict[str, AttributeTransform] = {
    "bold": _flag,
    "italic": _flag,
    "strike": _flag,
    "underline": _flag,
    "blockquote": _flag,
    "code-block": _flag,
    "header": _header,
    "list": _choice(ALLOWED_LIST_VALUES),
    "align": _choice(ALLOWED_ALIGN_VALUES),
    "indent": _indent,
    "color": _color,
    "size": _size,
    "link": _link,
}


def sanitize_attributes(
    raw: object,
    min_size: int = DEFAULT_MIN_FONT_SIZE,
    max_size: int = DEFAULT_MAX_FONT_SIZE,
) -> AttributeMap:
    """Reduce an untrusted attribute bag to the allowlisted, clamped form.

    Never raises: unknown keys are ignored, invalid values are omitted, and
    ``size`` is always present.
    """

    source = as_mapping(raw)
    bounds = font_bounds(min_size, max_size)
    fields: dict[str, Any] = {}
    for key, transform in ATTRIBUTE_RULES.items():
        value = transform(source.get(key), bounds)
        if value is not None:
            fields[key] = value
    return AttributeMap.model_validate(fields)


def sanitize_mention(raw: object) -> Mention | None:
    """Validate a mention embed value, or return ``None`` so the caller drops it."""

    source = as_mapping(raw)
    uid = _text(source.get("uid") or source.get("id")).strip()
    nickname_source = source.get("nickname") or source.get("label") or source.get("name")
    nickname = _WHITESPACE_RE.sub(" ", _text(nickname_source)).strip()
    nickname = truncate_utf16(nickname, MAX_NICKNAME_LENGTH).rstrip()
    if not nickname:
        return None
    return Mention(uid=uid, nickname=nickname)


def sanitize_style(
    raw: object,
    min_size: int = DEFAULT_MIN_FONT_SIZE,
    max_size: int = DEFAULT_MAX_FONT_SIZE,
) -> Style:
    """Normalize a payload-side run style, defaulting anything missing or invalid."""

    source = as_mapping(raw)
    bounds = font_bounds(min_size, max_size)
    raw_size = source.get("fontSize", source.get("font_size"))
    return Style(
        bold=bool(source.get("bold")),
        italic=bool(source.get("italic")),
        strikethrough=bool(source.get("strikethrough")),
        underline=bool(source.get("underline")),
        color=_text(source.get("color")).strip() or DEFAULT_COLOR,
        font_size=bounds.clamp(coerce_font_size(raw_size, DEFAULT_FONT_SIZE)),
        link=sanitize_url(source.get("link")),
    )


def style_from_attributes(attributes: AttributeMap) -> Style:
    """Inline-only view of sanitized attributes; block attributes are dropped."""

    return Style(
        bold=bool(attributes.bold),
        italic=bool(attributes.italic),
        strikethrough=bool(attributes.strike),
        underline=bool(attributes.underline),
        color=attributes.color or DEFAULT_COLOR,
        font_size=coerce_font_size(attributes.size, DEFAULT_FONT_SIZE),
        link=attributes.link or "",
    )


def attributes_from_style(
    style: Style,
    min_size: int = DEFAULT_MIN_FONT_SIZE,
    max_size: int = DEFAULT_MAX_FONT_SIZE,
) -> AttributeMap:
    """Inverse of :func:`style_from_attributes`."""

    fields: dict[str, Any] = {
        "color": style.color,
        "size": f"{style.font_size}px",
    }
    if style.bold:
        fields["bold"] = True
    if style.italic:
        fields["italic"] = True
    if style.strikethrough:
        fields["strike"] = True
    if style.underline:
        fields["underline"] = True
    if style.link:
        fields["link"] = style.link
    return sanitize_attributes(fields, min_size, max_size)
