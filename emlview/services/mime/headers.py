from __future__ import annotations

import re

from emlview.services.mime.encoded_words import decode_header_value
from emlview.services.mime.types import HeaderBlock

_LINE_SPLIT_RE = re.compile(r"\r?\n")
_FIELD_RE = re.compile(r"^([\w-]+):\s*(.*)$", re.ASCII)
_BLANK_LINE_RE = re.compile(r"\r?\n\r?\n")


def split_head_and_body(text: str) -> tuple[str, str]:
    """Split at the first blank line. Without one, everything is header text."""
    pieces = _BLANK_LINE_RE.split(text, maxsplit=1)
    if len(pieces) == 1:
        return pieces[0], ""
    return pieces[0], pieces[1]


def parse_headers(header_text: str) -> HeaderBlock:
    fields: dict[str, list[str]] = {}
    current_name: str | None = None
    current_values: list[str] = []

    def flush() -> None:
        if current_name is None:
            return
        decoded = [decode_header_value(v.strip()) for v in current_values]
        fields.setdefault(current_name.lower(), []).extend(decoded)

    for line in _LINE_SPLIT_RE.split(header_text):
        if line[:1].isspace():
            # Folded continuation of the previous field.
            if current_values:
                current_values[-1] += line.strip()
            continue
        match = _FIELD_RE.match(line)
        if match is None:
            continue
        flush()
        current_name = match.group(1)
        current_values = [match.group(2)]

    flush()
    return HeaderBlock(fields)
