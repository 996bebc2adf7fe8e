"""Sanitizer for editor operation sequences (Quill-style deltas)."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from richtext.attributes import font_bounds, sanitize_attributes, sanitize_mention
from richtext.models import (
    DEFAULT_MAX_FONT_SIZE,
    DEFAULT_MIN_FONT_SIZE,
    EmbedOp,
    Operation,
    OperationSequence,
    TextOp,
)

MENTION_EMBED_KEY = "mention-chip"

logger = logging.getLogger("richtext.sequence")


def _raw_operations(seq: object) -> Sequence[object]:
    if isinstance(seq, Mapping):
        ops = seq.get("ops")
        return ops if isinstance(ops, (list, tuple)) else ()
    if isinstance(seq, (list, tuple)):
        return seq
    return ()


def sanitize_operation(
    op: object,
    min_size: int = DEFAULT_MIN_FONT_SIZE,
    max_size: int = DEFAULT_MAX_FONT_SIZE,
) -> Operation | None:
    """Sanitize one operation; ``None`` means the operation must be dropped.

    Text is accepted as ``content`` or ``insert``; mentions as ``mention`` or
    the editor's ``{"insert": {"mention-chip": ...}}`` embed.
    """

    if isinstance(op, EmbedOp):
        mention = sanitize_mention(op.mention)
        return EmbedOp(mention=mention) if mention else None

    content: object
    attributes: object
    if isinstance(op, TextOp):
        content, attributes = op.content, op.attributes
    elif isinstance(op, Mapping):
        content = op["content"] if "content" in op else op.get("insert")
        attributes = op.get("attributes")
    else:
        return None

    if isinstance(content, str):
        if not content:
            return None
        return TextOp(
            content=content,
            attributes=sanitize_attributes(attributes, min_size, max_size),
        )

    if isinstance(op, Mapping):
        if "mention" in op:
            raw_mention = op["mention"]
        elif isinstance(content, Mapping):
            raw_mention = content.get(MENTION_EMBED_KEY)
        else:
            return None
        mention = sanitize_mention(raw_mention)
        if mention is not None:
            return EmbedOp(mention=mention)
    return None


def _ends_with_newline(op: Operation) -> bool:
    return isinstance(op, TextOp) and op.content.endswith("\n")


def sanitize_sequence(
    seq: object,
    min_size: int = DEFAULT_MIN_FONT_SIZE,
    max_size: int = DEFAULT_MAX_FONT_SIZE,
) -> OperationSequence:
    """Sanitize every operation and guarantee a newline-terminated result.

    Accepts a list of operations or a ``{"ops": [...]}`` delta. Unrecognized
    operations, empty text and invalid mentions are dropped. The result is
    never empty and sanitizing it again returns an equal sequence.
    """

    bounds = font_bounds(min_size, max_size)
    raw_ops = _raw_operations(seq)
    ops: list[Operation] = []
    for raw in raw_ops:
        op = sanitize_operation(raw, bounds.min_size, bounds.max_size)
        if op is not None:
            ops.append(op)

    if len(ops) != len(raw_ops):
        logger.debug("sequence_ops_dropped dropped=%s kept=%s", len(raw_ops) - len(ops), len(ops))

    if not ops or not _ends_with_newline(ops[-1]):
        ops.append(
            TextOp(
                content="\n",
                attributes=sanitize_attributes({}, bounds.min_size, bounds.max_size),
            )
        )
    return tuple(ops)


def to_delta(seq: Iterable[Operation]) -> dict[str, Any]:
    """Render sanitized operations in the editor's ``{"ops": [...]}`` wire form."""

    ops: list[dict[str, Any]] = []
    for op in seq:
        if isinstance(op, TextOp):
            ops.append({"insert": op.content, "attributes": op.attributes.to_wire()})
        else:
            ops.append({"insert": {MENTION_EMBED_KEY: op.mention.model_dump()}})
    return {"ops": ops}


def plain_text(seq: Iterable[Operation]) -> str:
    """Text as displayed by the editor, with mentions shown as ``@nickname``."""

    parts = []
    for op in seq:
        if isinstance(op, TextOp):
            parts.append(op.content)
        else:
            parts.append(f"@{op.mention.nickname}")
    return "".join(parts)
