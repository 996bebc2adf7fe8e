"""Build and hydrate the persisted representations of one document version."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from richtext.attributes import as_mapping
from richtext.models import (
    DEFAULT_MAX_FONT_SIZE,
    DEFAULT_MIN_FONT_SIZE,
    CanonicalPayload,
    OperationSequence,
    StoredContent,
)
from richtext.projection import expand_to_sequence, plain_payload, project_to_payload
from richtext.sequence import sanitize_sequence, to_delta

logger = logging.getLogger("richtext.storage")


def prepare_stored_content(
    seq: object,
    min_size: int = DEFAULT_MIN_FONT_SIZE,
    max_size: int = DEFAULT_MAX_FONT_SIZE,
) -> StoredContent:
    """Sanitize editor output once and derive every stored representation from it."""

    ops = sanitize_sequence(seq, min_size, max_size)
    payload = project_to_payload(ops, min_size, max_size)
    return StoredContent(
        content_delta=to_delta(ops),
        content_rich=payload,
        content_text=payload.text,
    )


def _field(record: Mapping[str, Any], camel: str, snake: str) -> Any:
    value = record.get(camel)
    return value if value is not None else record.get(snake)


def _has_ops(delta: object) -> bool:
    if isinstance(delta, Mapping):
        delta = delta.get("ops")
    return isinstance(delta, (list, tuple)) and len(delta) > 0


def load_stored_content(
    record: object,
    min_size: int = DEFAULT_MIN_FONT_SIZE,
    max_size: int = DEFAULT_MAX_FONT_SIZE,
) -> OperationSequence:
    """Hydrate an editor sequence from a stored record.

    Prefers the stored delta, then the canonical payload, then plain text.
    Records written before rich content existed only carry ``contentText``.
    """

    source = as_mapping(record)
    delta = _field(source, "contentDelta", "content_delta")
    if _has_ops(delta):
        logger.debug("stored_content_loaded source=delta")
        return sanitize_sequence(delta, min_size, max_size)

    rich = _field(source, "contentRich", "content_rich")
    if isinstance(rich, (Mapping, CanonicalPayload)):
        logger.debug("stored_content_loaded source=rich")
        return expand_to_sequence(rich, min_size, max_size)

    text = _field(source, "contentText", "content_text")
    logger.debug("stored_content_loaded source=text")
    return expand_to_sequence(
        plain_payload(text if isinstance(text, str) else "", min_size, max_size),
        min_size,
        max_size,
    )
