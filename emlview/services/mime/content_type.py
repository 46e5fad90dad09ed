from __future__ import annotations

import re
from urllib.parse import unquote_to_bytes

from emlview.services.mime.charset import decode_bytes
from emlview.services.mime.encoded_words import decode_header_value
from emlview.services.mime.types import ContentTypeInfo

DEFAULT_FILENAME = "unnamed"

_BOUNDARY_RE = re.compile(r'boundary="?([^";\s]+)"?', re.IGNORECASE)
_CHARSET_RE = re.compile(r'charset="?([^";\s]+)"?', re.IGNORECASE)
_FILENAME_RE = re.compile(r'filename\s*=\s*(?:"([^"]*)"|([^;\s]+))', re.IGNORECASE)
# RFC 2231: filename*=utf-8'ja'%E3%83%86...
_FILENAME_EXT_RE = re.compile(r"filename\*\s*=\s*\"?([^'\";\s]*)'[^']*'([^\";\s]+)", re.IGNORECASE)


def resolve_content_type(value: str | None) -> ContentTypeInfo:
    value = value or ""
    media_type = value.split(";", 1)[0].strip().lower()

    boundary_match = _BOUNDARY_RE.search(value)
    charset_match = _CHARSET_RE.search(value)
    return ContentTypeInfo(
        media_type=media_type,
        boundary=boundary_match.group(1) if boundary_match else None,
        charset=charset_match.group(1).lower() if charset_match else None,
    )


def resolve_filename(disposition: str | None) -> str:
    """Return the decoded ``filename`` parameter of a Content-Disposition value."""
    if not disposition:
        return DEFAULT_FILENAME

    extended = _FILENAME_EXT_RE.search(disposition)
    if extended is not None:
        charset, encoded = extended.groups()
        name = decode_bytes(unquote_to_bytes(encoded), charset or None)
        if name:
            return name

    match = _FILENAME_RE.search(disposition)
    if match is None:
        return DEFAULT_FILENAME
    raw = match.group(1) if match.group(1) is not None else match.group(2)
    return decode_header_value(raw) or DEFAULT_FILENAME
