from __future__ import annotations

import re

from emlview.services.mime.headers import parse_headers, split_head_and_body
from emlview.services.mime.types import Part


def _delimiter_pattern(boundary: str) -> re.Pattern[str]:
    return re.compile(rf"--{re.escape(boundary)}(?:--)?\s*")


def split_multipart(body: str, boundary: str) -> list[str]:
    """Return the raw, trimmed segments between the boundary delimiters.

    The preamble before the first delimiter and the epilogue after the last
    one are dropped. Nested multiparts are not descended into.
    """
    segments = _delimiter_pattern(boundary).split(body)
    return [segment.strip() for segment in segments[1:-1]]


def split_part(segment: str) -> Part:
    header_text, raw_content = split_head_and_body(segment)
    return Part(headers=parse_headers(header_text), raw_content=raw_content)
