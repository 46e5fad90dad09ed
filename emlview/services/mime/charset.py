from __future__ import annotations

import logging
import re

from emlview.core.metrics import observe_decode_fallback

logger = logging.getLogger("emlview.mime")

DEFAULT_CHARSET = "utf-8"

# Japanese mail still arrives under many spellings of the same three codecs.
_JAPANESE_ALIASES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"iso-2022-jp|iso2022jp", re.IGNORECASE), "iso-2022-jp"),
    (re.compile(r"shift[-_]?jis|sjis|ms932", re.IGNORECASE), "shift-jis"),
    (re.compile(r"euc-?jp", re.IGNORECASE), "euc-jp"),
)

# Shift_JIS as sent by mail clients is Windows-31J: it carries the NEC and IBM
# extension rows (circled digits, roman numerals, ㈱) missing from shift_jis.
_CODECS: dict[str, str] = {
    "shift-jis": "cp932",
}


def normalize_charset(charset: str | None) -> str:
    if not charset:
        return DEFAULT_CHARSET
    normalized = charset.strip().lower()
    for pattern, canonical in _JAPANESE_ALIASES:
        if pattern.search(normalized):
            return canonical
    return normalized


def decode_bytes(data: bytes, charset: str | None = None) -> str:
    """Decode ``data`` with ``charset``, substituting U+FFFD for bad bytes.

    Only an unusable label (unknown or not a text codec) falls back to UTF-8;
    this function never raises.
    """
    label = normalize_charset(charset)
    try:
        return data.decode(_CODECS.get(label, label), errors="replace")
    except (LookupError, ValueError) as exc:
        logger.warning("Failed to decode with charset %r, falling back to utf-8: %s", charset, exc)
        observe_decode_fallback("charset")
        return data.decode(DEFAULT_CHARSET, errors="replace")
