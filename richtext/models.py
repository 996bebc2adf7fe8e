"""Immutable value objects for editor operation sequences and canonical payloads."""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from richtext.sanitization import DEFAULT_FONT_SIZE

DEFAULT_COLOR = "#0f172a"
DEFAULT_MIN_FONT_SIZE = 10
DEFAULT_MAX_FONT_SIZE = 48
# Measured in UTF-16 code units.
MAX_NICKNAME_LENGTH = 20

_FROZEN = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class AttributeMap(BaseModel):
    """Allowlisted formatting attributes for one text operation.

    Instances are built by ``richtext.attributes.sanitize_attributes``; a field
    left as ``None`` is absent from the wire form.
    """

    model_config = _FROZEN

    bold: Literal[True] | None = None
    italic: Literal[True] | None = None
    strike: Literal[True] | None = None
    underline: Literal[True] | None = None
    blockquote: Literal[True] | None = None
    code_block: Literal[True] | None = Field(default=None, alias="code-block")
    header: Literal[1, 2] | None = None
    list: Literal["ordered", "bullet"] | None = None
    align: Literal["center", "right", "justify"] | None = None
    indent: int | None = Field(default=None, ge=1, le=8)
    color: str | None = Field(default=None, min_length=1)
    size: str = Field(default=f"{DEFAULT_FONT_SIZE}px", pattern=r"^[0-9]+px$")
    link: str | None = Field(default=None, min_length=1)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class Mention(BaseModel):
    model_config = _FROZEN

    uid: str = ""
    nickname: str = Field(min_length=1, max_length=MAX_NICKNAME_LENGTH)


class TextOp(BaseModel):
    """Insert of literal text carrying sanitized attributes."""

    model_config = _FROZEN

    content: str
    attributes: AttributeMap = Field(default_factory=AttributeMap)


class EmbedOp(BaseModel):
    """Inline ``@mention`` embed; the only embed kind the editor allows."""

    model_config = _FROZEN

    mention: Mention


Operation = Union[TextOp, EmbedOp]
OperationSequence = tuple[Operation, ...]


class Style(BaseModel):
    """Inline-only style of a canonical run."""

    model_config = _FROZEN

    bold: bool = False
    italic: bool = False
    strikethrough: bool = False
    underline: bool = False
    color: str = DEFAULT_COLOR
    font_size: int = Field(default=DEFAULT_FONT_SIZE, alias="fontSize")
    link: str = ""

    def signature(self) -> tuple[bool, bool, bool, bool, str, int, str]:
        return (
            self.bold,
            self.italic,
            self.strikethrough,
            self.underline,
            self.color,
            self.font_size,
            self.link,
        )


class Run(BaseModel):
    """Half-open ``[start, end)`` range over ``CanonicalPayload.text``."""

    model_config = _FROZEN

    start: int = Field(ge=0)
    end: int
    style: Style = Field(default_factory=Style)

    @model_validator(mode="after")
    def _check_range(self) -> Run:
        if self.end <= self.start:
            raise ValueError("run end must be greater than start")
        return self


class CanonicalPayload(BaseModel):
    model_config = _FROZEN

    text: str = ""
    runs: tuple[Run, ...] = ()

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class StoredContent(BaseModel):
    """Everything persisted for one document version."""

    model_config = _FROZEN

    content_delta: dict[str, Any]
    content_rich: CanonicalPayload
    content_text: str

    def to_wire(self) -> dict[str, Any]:
        return {
            "contentDelta": self.content_delta,
            "contentRich": self.content_rich.to_wire(),
            "contentText": self.content_text,
        }
