"""Conversion between operation sequences and the canonical ``{text, runs}`` payload."""

from __future__ import annotations

from richtext.attributes import (
    as_mapping,
    attributes_from_style,
    font_bounds,
    sanitize_style,
    style_from_attributes,
)
from richtext.models import (
    DEFAULT_MAX_FONT_SIZE,
    DEFAULT_MIN_FONT_SIZE,
    CanonicalPayload,
    Operation,
    OperationSequence,
    Run,
    Style,
    TextOp,
)
from richtext.sanitization import coerce_offset
from richtext.sequence import sanitize_sequence


def _segment(op: Operation, default_style: Style) -> tuple[str, Style]:
    if isinstance(op, TextOp):
        return op.content, style_from_attributes(op.attributes)
    return f"@{op.mention.nickname}", default_style


def _clip_runs(runs: list[Run], limit: int) -> list[Run]:
    clipped: list[Run] = []
    for run in runs:
        end = min(run.end, limit)
        if end <= run.start:
            continue
        clipped.append(run if end == run.end else run.model_copy(update={"end": end}))
    return clipped


def project_to_payload(
    seq: object,
    min_size: int = DEFAULT_MIN_FONT_SIZE,
    max_size: int = DEFAULT_MAX_FONT_SIZE,
) -> CanonicalPayload:
    """Flatten an operation sequence into plain text plus minimal styled runs.

    The sequence is sanitized first, so raw editor output and stored
    sequences project identically. Block attributes have no ``Style``
    counterpart and are discarded. Mentions become ``@nickname`` in the
    default style. Consecutive segments with equal styles share one run, and
    the editor's terminal newline is removed from the text.
    """

    bounds = font_bounds(min_size, max_size)
    default_style = sanitize_style({}, bounds.min_size, bounds.max_size)
    parts: list[str] = []
    runs: list[Run] = []
    cursor = 0
    open_start = 0
    open_style: Style | None = None

    for op in sanitize_sequence(seq, bounds.min_size, bounds.max_size):
        segment, style = _segment(op, default_style)
        if open_style is None:
            open_style = style
        elif style.signature() != open_style.signature():
            runs.append(Run(start=open_start, end=cursor, style=open_style))
            open_start, open_style = cursor, style
        parts.append(segment)
        cursor += len(segment)

    if open_style is not None and cursor > open_start:
        runs.append(Run(start=open_start, end=cursor, style=open_style))

    text = "".join(parts)
    if text.endswith("\n"):
        text = text[:-1]
        runs = _clip_runs(runs, len(text))
    return CanonicalPayload(text=text, runs=tuple(runs))


def normalize_runs(
    text: str,
    runs: object,
    min_size: int = DEFAULT_MIN_FONT_SIZE,
    max_size: int = DEFAULT_MAX_FONT_SIZE,
) -> list[Run]:
    """Coerce untrusted runs into valid, ascending ``Run`` objects.

    An empty run list over non-empty text becomes one default-style run.
    Overlaps are left in place; :func:`expand_to_sequence` resolves them.
    """

    raw_runs = runs if isinstance(runs, (list, tuple)) else ()
    if not raw_runs:
        if not text:
            return []
        return [Run(start=0, end=len(text), style=sanitize_style({}, min_size, max_size))]

    normalized: list[Run] = []
    for item in raw_runs:
        source = as_mapping(item)
        start = coerce_offset(source.get("start"))
        end = coerce_offset(source.get("end"))
        if end <= start:
            continue
        style = sanitize_style(source.get("style"), min_size, max_size)
        normalized.append(Run(start=start, end=end, style=style))
    normalized.sort(key=lambda run: (run.start, run.end))
    return normalized


def expand_to_sequence(
    payload: object,
    min_size: int = DEFAULT_MIN_FONT_SIZE,
    max_size: int = DEFAULT_MAX_FONT_SIZE,
) -> OperationSequence:
    """Rebuild a sanitized operation sequence from a canonical payload.

    Uncovered spans are filled with the default style. When runs overlap, the
    run that sorts first by ``(start, end)`` owns the shared span and later
    runs keep only the part past it, so every character of ``text`` is emitted
    exactly once.
    """

    bounds = font_bounds(min_size, max_size)
    source = as_mapping(payload)
    text = source.get("text")
    if not isinstance(text, str):
        text = ""
    runs = normalize_runs(text, source.get("runs"), bounds.min_size, bounds.max_size)
    default_attributes = attributes_from_style(
        sanitize_style({}, bounds.min_size, bounds.max_size),
        bounds.min_size,
        bounds.max_size,
    )

    ops: list[TextOp] = []
    cursor = 0
    for run in runs:
        start = max(cursor, min(len(text), run.start))
        end = min(len(text), run.end)
        if end <= start:
            continue
        if start > cursor:
            ops.append(TextOp(content=text[cursor:start], attributes=default_attributes))
        ops.append(
            TextOp(
                content=text[start:end],
                attributes=attributes_from_style(run.style, bounds.min_size, bounds.max_size),
            )
        )
        cursor = end

    if cursor < len(text):
        ops.append(TextOp(content=text[cursor:], attributes=default_attributes))
    if not ops:
        ops.append(TextOp(content=""))
    ops.append(TextOp(content="\n"))
    return sanitize_sequence(ops, bounds.min_size, bounds.max_size)


def plain_payload(
    text: str,
    min_size: int = DEFAULT_MIN_FONT_SIZE,
    max_size: int = DEFAULT_MAX_FONT_SIZE,
) -> CanonicalPayload:
    """Payload for plain text: one default-style run, or no runs when empty."""

    return CanonicalPayload(text=text, runs=tuple(normalize_runs(text, (), min_size, max_size)))
