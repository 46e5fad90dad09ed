from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field


class HeaderBlock(Mapping[str, tuple[str, ...]]):
    """Decoded header fields keyed by lowercase name.

    Repeated fields keep every value in document order; keys keep the order
    in which each field first appeared.
    """

    __slots__ = ("_fields",)

    def __init__(self, fields: Mapping[str, list[str] | tuple[str, ...]] | None = None) -> None:
        self._fields: dict[str, tuple[str, ...]] = {
            name.lower(): tuple(values) for name, values in (fields or {}).items()
        }

    def __getitem__(self, name: str) -> tuple[str, ...]:
        return self._fields[name.lower()]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"HeaderBlock({self._fields!r})"

    def get_all(self, name: str) -> tuple[str, ...]:
        return self._fields.get(name.lower(), ())

    def first(self, name: str) -> str | None:
        values = self.get_all(name)
        return values[0] if values else None

    def last(self, name: str) -> str | None:
        values = self.get_all(name)
        return values[-1] if values else None

    def to_dict(self) -> dict[str, list[str]]:
        return {name: list(values) for name, values in self._fields.items()}


@dataclass(frozen=True)
class ContentTypeInfo:
    media_type: str
    boundary: str | None = None
    charset: str | None = None


@dataclass(frozen=True)
class Part:
    headers: HeaderBlock
    raw_content: str


@dataclass(frozen=True)
class Attachment:
    filename: str
    size: int
    # base64 of the raw part body, before any transfer or charset decoding
    content: str
    content_type: str


@dataclass(frozen=True)
class ParsedEmail:
    subject: str
    from_: str
    to: tuple[str, ...]
    date: str
    text: str
    html: str | None = None
    attachments: tuple[Attachment, ...] = ()
    headers: HeaderBlock = field(default_factory=HeaderBlock)
