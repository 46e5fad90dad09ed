from __future__ import annotations

import json
import logging
import secrets
import time
from contextvars import ContextVar

from fastapi import Request
from starlette.responses import Response

from emlview.core.config import Settings

request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)
logger = logging.getLogger("emlview.api")


def build_request_id(request: Request, *, header_name: str) -> str:
    incoming = (request.headers.get(header_name) or "").strip()
    if incoming:
        return incoming[:128]
    return secrets.token_urlsafe(18)


def apply_security_headers(response: Response, *, settings: Settings) -> None:
    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("X-Frame-Options", "DENY")
    response.headers.setdefault("Referrer-Policy", "same-origin")
    response.headers.setdefault("Content-Security-Policy", settings.CONTENT_SECURITY_POLICY)


def parse_context(request: Request) -> dict[str, int]:
    """Upload size and attachment count recorded by the parse route, if any."""
    context: dict[str, int] = {}
    for key in ("eml_bytes", "attachment_count"):
        value = getattr(request.state, key, None)
        if value is not None:
            context[key] = value
    return context


def log_request_completion(
    *,
    request_id: str,
    method: str,
    path: str,
    status_code: int,
    duration_ms: int,
    parse: dict[str, int] | None = None,
) -> None:
    event: dict[str, object] = {
        "event": "http.request.completed",
        "request_id": request_id,
        "method": method,
        "path": path,
        "status_code": status_code,
        "duration_ms": duration_ms,
    }
    if parse:
        event["eml"] = parse
    logger.info(json.dumps(event, separators=(",", ":"), sort_keys=True))


def now_ts() -> float:
    return time.time()
