from __future__ import annotations

import asyncio
import base64
import logging
from datetime import UTC, datetime
from os import PathLike

from emlview.core.metrics import observe_message_parsed
from emlview.services.mime.content_type import resolve_content_type, resolve_filename
from emlview.services.mime.encoded_words import decode_header_value
from emlview.services.mime.headers import parse_headers, split_head_and_body
from emlview.services.mime.multipart import split_multipart, split_part
from emlview.services.mime.transfer import decode_content
from emlview.services.mime.types import Attachment, HeaderBlock, ParsedEmail, Part

logger = logging.getLogger("emlview.mime")

NO_SUBJECT = "No Subject"
UNKNOWN_SENDER = "Unknown Sender"


class EmlReadError(RuntimeError):
    pass


def _now_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _split_recipients(value: str | None) -> tuple[str, ...]:
    return tuple(decode_header_value(addr.strip()) for addr in (value or "").split(","))


def _build_attachment(part: Part, media_type: str) -> Attachment:
    raw = part.raw_content
    return Attachment(
        filename=resolve_filename(part.headers.last("content-disposition")),
        size=len(raw),
        content=base64.b64encode(raw.encode("utf-8")).decode("ascii"),
        content_type=media_type,
    )


def _walk_parts(
    body: str,
    boundary: str,
    default_charset: str | None,
) -> tuple[str, str, list[Attachment]]:
    text = ""
    html = ""
    attachments: list[Attachment] = []

    for segment in split_multipart(body, boundary):
        part = split_part(segment)
        info = resolve_content_type(part.headers.last("content-type"))
        charset = info.charset or default_charset
        decoded = decode_content(
            part.raw_content,
            part.headers.last("content-transfer-encoding"),
            charset,
        )

        if info.media_type == "text/plain":
            text = decoded
        elif info.media_type == "text/html":
            html = decoded
        elif "attachment" in (part.headers.last("content-disposition") or ""):
            attachments.append(_build_attachment(part, info.media_type))

    return text, html, attachments


def parse_eml(raw_text: str) -> ParsedEmail:
    header_text, body = split_head_and_body(raw_text)
    headers: HeaderBlock = parse_headers(header_text)
    info = resolve_content_type(headers.last("content-type"))

    if info.boundary:
        text, html, attachments = _walk_parts(body, info.boundary, info.charset)
    else:
        text = decode_content(body, headers.last("content-transfer-encoding"), info.charset)
        html = ""
        attachments = []

    observe_message_parsed(multipart=bool(info.boundary), attachment_count=len(attachments))
    logger.debug(
        "Parsed message media_type=%s multipart=%s attachments=%d",
        info.media_type or "-",
        bool(info.boundary),
        len(attachments),
    )

    html = html.strip()
    return ParsedEmail(
        subject=decode_header_value(headers.last("subject") or NO_SUBJECT),
        from_=decode_header_value(headers.last("from") or UNKNOWN_SENDER),
        to=_split_recipients(headers.last("to")),
        date=headers.last("date") or _now_iso(),
        text=text.strip(),
        html=html or None,
        attachments=tuple(attachments),
        headers=headers,
    )


def parse_eml_bytes(raw: bytes) -> ParsedEmail:
    return parse_eml(raw.decode("utf-8", errors="replace"))


async def read_eml_file(path: str | PathLike[str], *, max_bytes: int | None = None) -> ParsedEmail:
    """Read an ``.eml`` file off the event loop and parse it.

    Raises ``EmlReadError`` when the file cannot be read or is larger than
    ``max_bytes``.
    """
    try:
        raw = await asyncio.to_thread(_read_file_bytes, path)
    except OSError as e:
        raise EmlReadError(f"cannot read {path}: {e}") from e
    if max_bytes is not None and len(raw) > max_bytes:
        raise EmlReadError(f"{path} is {len(raw)} bytes, limit is {max_bytes}")
    return parse_eml_bytes(raw)


def _read_file_bytes(path: str | PathLike[str]) -> bytes:
    with open(path, "rb") as f:
        return f.read()
