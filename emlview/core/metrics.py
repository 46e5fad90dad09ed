from __future__ import annotations

from prometheus_client import Counter, Histogram

_HTTP_REQUESTS_TOTAL = Counter(
    "emlview_http_requests_total",
    "Total HTTP requests handled by the API.",
    labelnames=("method", "path", "status_code"),
)
_HTTP_REQUEST_DURATION_SECONDS = Histogram(
    "emlview_http_request_duration_seconds",
    "HTTP request duration in seconds.",
    labelnames=("method", "path"),
)
_MESSAGES_PARSED_TOTAL = Counter(
    "emlview_messages_parsed_total",
    "Total messages parsed, by body layout.",
    labelnames=("kind",),
)
_ATTACHMENTS_EXTRACTED_TOTAL = Counter(
    "emlview_attachments_extracted_total",
    "Total attachments extracted from parsed messages.",
)
_DECODE_FALLBACKS_TOTAL = Counter(
    "emlview_decode_fallbacks_total",
    "Decode steps that failed and fell back to a lenient result.",
    labelnames=("step",),
)


def observe_http_request(
    *,
    method: str,
    path: str,
    status_code: int,
    duration_ms: int,
) -> None:
    safe_path = path or "unknown"
    safe_method = method or "UNKNOWN"

    _HTTP_REQUESTS_TOTAL.labels(
        method=safe_method,
        path=safe_path,
        status_code=str(status_code),
    ).inc()
    _HTTP_REQUEST_DURATION_SECONDS.labels(method=safe_method, path=safe_path).observe(
        max(0.0, duration_ms / 1000.0)
    )


def observe_message_parsed(*, multipart: bool, attachment_count: int) -> None:
    _MESSAGES_PARSED_TOTAL.labels(kind="multipart" if multipart else "single").inc()
    if attachment_count:
        _ATTACHMENTS_EXTRACTED_TOTAL.inc(attachment_count)


def observe_decode_fallback(step: str) -> None:
    _DECODE_FALLBACKS_TOTAL.labels(step=step).inc()
