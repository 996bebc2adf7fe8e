"""FastAPI entrypoint exposing the rich-text engine to non-browser callers."""

import logging
from time import monotonic
from typing import Any

from fastapi import FastAPI, HTTPException, Request, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, model_validator

from richtext.config import get_settings
from richtext.mentions import (
    detect_mention_context,
    extract_mention_nicknames,
    has_all_mention_command,
    mentioned_users,
)
from richtext.projection import expand_to_sequence, project_to_payload
from richtext.sequence import sanitize_sequence, to_delta
from richtext.storage import load_stored_content, prepare_stored_content

MAX_SCAN_TEXT_LENGTH = 20_000

settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
app = FastAPI(title=settings.app_name, version=settings.app_version)
request_logger = logging.getLogger("richtext.request")
content_logger = logging.getLogger("richtext.content")


class FontBoundsRequest(BaseModel):
    """Optional per-request font bounds; unset values fall back to settings."""

    min_font_size: int | None = Field(default=None, ge=1, le=512)
    max_font_size: int | None = Field(default=None, ge=1, le=512)

    @model_validator(mode="after")
    def _check_bounds(self) -> "FontBoundsRequest":
        low, high = self.resolved_bounds()
        if low > high:
            raise ValueError("min_font_size must not exceed max_font_size")
        return self

    def resolved_bounds(self) -> tuple[int, int]:
        low = self.min_font_size if self.min_font_size is not None else settings.min_font_size
        high = self.max_font_size if self.max_font_size is not None else settings.max_font_size
        return low, high


class DocumentRequest(FontBoundsRequest):
    document: Any = None


class PayloadRequest(FontBoundsRequest):
    payload: Any = None


class StoredRecordRequest(FontBoundsRequest):
    record: dict[str, Any] = Field(default_factory=dict)


class MentionScanRequest(BaseModel):
    text: str = Field(default="", max_length=MAX_SCAN_TEXT_LENGTH)
    cursor: int | None = Field(default=None, ge=0)


_BODYLESS_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


def _reject(request: Request, status_code: int, reason: str, detail: str) -> JSONResponse:
    request_logger.warning(
        "request_rejected method=%s path=%s status=%s reason=%s content_length=%s limit=%s",
        request.method.upper(),
        request.url.path,
        status_code,
        reason,
        request.headers.get("content-length"),
        settings.max_request_body_bytes,
    )
    return JSONResponse(status_code=status_code, content={"detail": detail})


@app.middleware("http")
async def content_body_limit_middleware(request: Request, call_next: Any) -> Response:
    """Refuse editor documents whose declared size exceeds the configured limit."""

    limit = settings.max_request_body_bytes
    if limit <= 0 or request.method.upper() in _BODYLESS_METHODS:
        return await call_next(request)

    declared = request.headers.get("content-length")
    if declared is None:
        return await call_next(request)
    try:
        declared_bytes = int(declared)
    except ValueError:
        return _reject(
            request,
            status.HTTP_400_BAD_REQUEST,
            "invalid_content_length",
            "Invalid Content-Length header",
        )
    if declared_bytes > limit:
        return _reject(
            request,
            status.HTTP_413_CONTENT_TOO_LARGE,
            "body_too_large",
            "Document payload too large",
        )
    return await call_next(request)


@app.middleware("http")
async def access_log_middleware(request: Request, call_next: Any) -> Response:
    started = monotonic()
    method = request.method.upper()
    path = request.url.path
    body_bytes = request.headers.get("content-length", "0")
    try:
        response = await call_next(request)
    except Exception:
        request_logger.exception(
            "request method=%s path=%s status=500 body_bytes=%s latency_ms=%s",
            method,
            path,
            body_bytes,
            int((monotonic() - started) * 1000),
        )
        raise

    request_logger.info(
        "request method=%s path=%s status=%s body_bytes=%s latency_ms=%s",
        method,
        path,
        response.status_code,
        body_bytes,
        int((monotonic() - started) * 1000),
    )
    return response


@app.get("/api/v1", tags=["meta"])
async def api_root() -> dict[str, str]:
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "ok",
    }


@app.get("/api/v1/health", tags=["health"])
async def health() -> dict[str, Any]:
    return {
        "status": "ok",
        "environment": settings.environment,
        "font_bounds": [settings.min_font_size, settings.max_font_size],
    }


@app.post("/api/v1/content/sanitize", tags=["content"])
async def sanitize_content(body: DocumentRequest) -> dict[str, Any]:
    low, high = body.resolved_bounds()
    return to_delta(sanitize_sequence(body.document, low, high))


@app.post("/api/v1/content/project", tags=["content"])
async def project_content(body: DocumentRequest) -> dict[str, Any]:
    low, high = body.resolved_bounds()
    return project_to_payload(body.document, low, high).to_wire()


@app.post("/api/v1/content/expand", tags=["content"])
async def expand_content(body: PayloadRequest) -> dict[str, Any]:
    low, high = body.resolved_bounds()
    return to_delta(expand_to_sequence(body.payload, low, high))


@app.post("/api/v1/content/store", tags=["content"])
async def store_content(body: DocumentRequest) -> dict[str, Any]:
    low, high = body.resolved_bounds()
    stored = prepare_stored_content(body.document, low, high)
    mentions = mentioned_users(sanitize_sequence(stored.content_delta, low, high))
    content_logger.info(
        "content_prepared text_length=%s runs=%s mentions=%s",
        len(stored.content_text),
        len(stored.content_rich.runs),
        len(mentions),
    )
    return {
        **stored.to_wire(),
        "mentionedUsers": [mention.model_dump() for mention in mentions],
    }


@app.post("/api/v1/content/load", tags=["content"])
async def load_content(body: StoredRecordRequest) -> dict[str, Any]:
    if not body.record:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            detail="record must include contentDelta, contentRich, or contentText",
        )
    low, high = body.resolved_bounds()
    return to_delta(load_stored_content(body.record, low, high))


@app.post("/api/v1/mentions/scan", tags=["mentions"])
async def scan_mentions(body: MentionScanRequest) -> dict[str, Any]:
    context = None
    if body.cursor is not None:
        found = detect_mention_context(body.text, body.cursor)
        if found is not None:
            context = {"start": found.start, "end": found.end, "query": found.query}
    return {
        "nicknames": extract_mention_nicknames(body.text),
        "mentionAll": has_all_mention_command(body.text),
        "context": context,
    }
