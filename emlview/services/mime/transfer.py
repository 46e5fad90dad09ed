from __future__ import annotations

import base64
import binascii
import logging
import re

from emlview.core.metrics import observe_decode_fallback
from emlview.services.mime.charset import decode_bytes

logger = logging.getLogger("emlview.mime")

_WHITESPACE_RE = re.compile(r"\s+")
_SOFT_LINE_BREAK_RE = re.compile(r"=\r?\n")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def base64_to_bytes(text: str) -> bytes:
    """Decode base64 text, ignoring whitespace and tolerating missing padding.

    Raises ``binascii.Error`` on anything that is not base64.
    """
    cleaned = _WHITESPACE_RE.sub("", text)
    padding = -len(cleaned) % 4
    if padding == 3:
        raise binascii.Error("Invalid base64 length")
    return base64.b64decode(cleaned + "=" * padding, validate=True)


def quoted_printable_to_bytes(text: str) -> bytes:
    data = _SOFT_LINE_BREAK_RE.sub("", text)
    out = bytearray()
    i = 0
    n = len(data)
    while i < n:
        ch = data[i]
        if ch == "=":
            if i + 2 >= n:
                # Truncated escape at end of input.
                i += 1
                continue
            hex_pair = data[i + 1 : i + 3]
            if hex_pair[0] in _HEX_DIGITS and hex_pair[1] in _HEX_DIGITS:
                out.append(int(hex_pair, 16))
                i += 3
                continue
            out.append(ord("="))
            i += 1
            continue
        # Each character is one byte; code points above 0xFF are truncated.
        out.append(ord(ch) & 0xFF)
        i += 1
    return bytes(out)


def decode_base64(text: str, charset: str | None = None) -> str:
    try:
        raw = base64_to_bytes(text)
    except (binascii.Error, ValueError) as exc:
        logger.warning("Base64 decode error, keeping original text: %s", exc)
        observe_decode_fallback("base64")
        return text
    return decode_bytes(raw, charset)


def decode_quoted_printable(text: str, charset: str | None = None) -> str:
    try:
        raw = quoted_printable_to_bytes(text)
    except (UnicodeError, ValueError) as exc:
        logger.warning("Quoted-printable decode error, keeping original text: %s", exc)
        observe_decode_fallback("quoted-printable")
        return text
    return decode_bytes(raw, charset)


def decode_content(content: str, encoding: str | None = None, charset: str | None = None) -> str:
    """Reverse a Content-Transfer-Encoding and decode the result as text.

    ``7bit`` and ``8bit`` bodies are already text, so they are re-read through
    ``charset`` rather than transformed. Unknown or missing encodings return
    ``content`` untouched.
    """
    if not encoding:
        return content

    normalized = encoding.strip().lower()
    if normalized == "base64":
        return decode_base64(content, charset)
    if normalized == "quoted-printable":
        return decode_quoted_printable(content, charset)
    if normalized in {"7bit", "8bit"}:
        try:
            raw = content.encode("utf-8")
        except UnicodeError as exc:
            logger.warning("Content decode error, keeping original text: %s", exc)
            observe_decode_fallback(normalized)
            return content
        return decode_bytes(raw, charset)
    return content
