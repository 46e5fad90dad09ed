from __future__ import annotations

import logging
import re

from emlview.core.metrics import observe_decode_fallback
from emlview.services.mime.transfer import decode_base64, decode_quoted_printable

logger = logging.getLogger("emlview.mime")

# =?charset?encoding?encoded-text?=
_ENCODED_WORD_RE = re.compile(r"=\?([^?]+)\?([BQbq])\?([^?]*)\?=")


def decode_encoded_word(charset: str, encoding: str, text: str) -> str:
    """Decode the payload of one RFC 2047 encoded word.

    A word that cannot be decoded comes back as its raw ``text``.
    """
    try:
        kind = encoding.upper()
        if kind == "B":
            return decode_base64(text, charset)
        if kind == "Q":
            return decode_quoted_printable(text.replace("_", " "), charset)
    except Exception as exc:
        logger.warning("Header word decode error for charset %r: %s", charset, exc)
        observe_decode_fallback("header")
    return text


def decode_header_value(value: str | None) -> str:
    if not value:
        return ""
    if "=?" not in value:
        return value
    return _ENCODED_WORD_RE.sub(
        lambda m: decode_encoded_word(m.group(1), m.group(2), m.group(3)),
        value,
    )
