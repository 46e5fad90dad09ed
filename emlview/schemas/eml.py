from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from emlview.services.mime.types import Attachment, ParsedEmail


class AttachmentOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    filename: str
    size: int
    content: str
    content_type: str = Field(alias="contentType")

    @classmethod
    def from_attachment(cls, attachment: Attachment) -> AttachmentOut:
        return cls(
            filename=attachment.filename,
            size=attachment.size,
            content=attachment.content,
            content_type=attachment.content_type,
        )


class ParsedEmailOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    subject: str
    from_: str = Field(alias="from")
    to: list[str]
    date: str
    text: str
    html: str | None = None
    attachments: list[AttachmentOut]
    headers: dict[str, list[str]] = Field(default_factory=dict)

    @classmethod
    def from_parsed(cls, parsed: ParsedEmail, *, include_headers: bool = True) -> ParsedEmailOut:
        return cls(
            subject=parsed.subject,
            from_=parsed.from_,
            to=list(parsed.to),
            date=parsed.date,
            text=parsed.text,
            html=parsed.html,
            attachments=[AttachmentOut.from_attachment(a) for a in parsed.attachments],
            headers=parsed.headers.to_dict() if include_headers else {},
        )
