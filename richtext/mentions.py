"""Mention scanning over canonical text and mention embeds."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass

from richtext.models import MAX_NICKNAME_LENGTH, EmbedOp, Mention, Operation
from richtext.sanitization import sanitize_ui_text, truncate_utf16

_MENTION_RE = re.compile(r"(?:^|\s)@([^\s@]{1,%d})" % MAX_NICKNAME_LENGTH)
_MENTION_ALL_RE = re.compile(r"(?:^|\s)@all(?=\s|\Z)", re.IGNORECASE)
_MENTION_CONTEXT_RE = re.compile(r"(?:^|\s)@([^\s@]{0,%d})\Z" % MAX_NICKNAME_LENGTH)
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class MentionContext:
    """The ``@query`` being typed immediately before the cursor."""

    start: int
    end: int
    query: str


def normalize_nickname(value: str | None) -> str:
    cleaned = _WHITESPACE_RE.sub(" ", sanitize_ui_text(value).strip())
    return truncate_utf16(cleaned, MAX_NICKNAME_LENGTH)


def _dedupe_preserving_order(values: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result


def extract_mention_nicknames(text: str) -> list[str]:
    """Return unique ``@nickname`` tokens in order of first appearance."""

    nicknames = (normalize_nickname(match.group(1)) for match in _MENTION_RE.finditer(text))
    return _dedupe_preserving_order(nickname for nickname in nicknames if nickname)


def has_all_mention_command(text: str) -> bool:
    return _MENTION_ALL_RE.search(text) is not None


def detect_mention_context(text: str, cursor: int) -> MentionContext | None:
    """Find an unfinished mention ending at ``cursor``, for autocomplete menus."""

    safe_cursor = max(0, min(len(text), cursor))
    match = _MENTION_CONTEXT_RE.search(text[:safe_cursor])
    if match is None:
        return None
    # group(0) may include one leading whitespace character before "@".
    start = match.start(0) if match.group(0).startswith("@") else match.start(0) + 1
    return MentionContext(start=start, end=safe_cursor, query=normalize_nickname(match.group(1)))


def mentioned_users(seq: Iterable[Operation]) -> list[Mention]:
    """Mention embeds in document order, one entry per distinct uid/nickname pair."""

    seen: set[tuple[str, str]] = set()
    mentions: list[Mention] = []
    for op in seq:
        if not isinstance(op, EmbedOp):
            continue
        key = (op.mention.uid, op.mention.nickname)
        if key in seen:
            continue
        seen.add(key)
        mentions.append(op.mention)
    return mentions
