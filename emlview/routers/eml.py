from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Query, Request, status

from emlview.core.config import get_settings
from emlview.schemas.eml import ParsedEmailOut
from emlview.services.mime.parser import parse_eml_bytes

logger = logging.getLogger("emlview.api")

router = APIRouter(prefix="/eml", tags=["eml"])


@router.post("/parse", response_model=ParsedEmailOut, response_model_by_alias=True)
async def eml_parse(
    request: Request,
    include_headers: bool = Query(default=True),
) -> ParsedEmailOut:
    settings = get_settings()
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > settings.MAX_EML_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Email file too large",
        )

    raw = await request.body()
    request.state.eml_bytes = len(raw)
    if len(raw) > settings.MAX_EML_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail="Email file too large",
        )
    if not raw.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Empty email file")

    try:
        parsed = parse_eml_bytes(raw)
    except Exception as e:
        logger.exception("Failed to parse uploaded email")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Failed to parse the email file",
        ) from e
    request.state.attachment_count = len(parsed.attachments)
    return ParsedEmailOut.from_parsed(parsed, include_headers=include_headers)
