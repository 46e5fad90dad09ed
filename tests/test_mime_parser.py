from __future__ import annotations

import asyncio
import base64
from datetime import datetime

import pytest

from emlview.services.mime.parser import EmlReadError, parse_eml, parse_eml_bytes, read_eml_file


def _raw_email(*, headers: list[str], body: str = "Hello from a test message.") -> str:
    return "\r\n".join(headers) + "\r\n\r\n" + body


def _multipart(*parts: str, boundary: str = "XYZ") -> str:
    chunks = [f"--{boundary}\r\n{part}\r\n" for part in parts]
    return "preamble\r\n" + "".join(chunks) + f"--{boundary}--\r\n"


def test_plain_ascii_message_round_trips() -> None:
    raw = _raw_email(
        headers=[
            "Subject: Quarterly report",
            "From: Alice <alice@example.com>",
            "To: bob@example.com, carol@example.com",
            "Date: Mon, 19 Oct 2026 09:30:00 +0900",
        ],
        body="Hi Bob,\r\nSee attached.\r\n\r\n",
    )
    parsed = parse_eml(raw)
    assert parsed.subject == "Quarterly report"
    assert parsed.from_ == "Alice <alice@example.com>"
    assert parsed.to == ("bob@example.com", "carol@example.com")
    assert parsed.date == "Mon, 19 Oct 2026 09:30:00 +0900"
    assert parsed.text == "Hi Bob,\r\nSee attached."
    assert parsed.html is None
    assert parsed.attachments == ()


def test_missing_headers_use_defaults() -> None:
    parsed = parse_eml(_raw_email(headers=["X-Mailer: test"], body="body"))
    assert parsed.subject == "No Subject"
    assert parsed.from_ == "Unknown Sender"
    assert parsed.to == ("",)
    assert parsed.date.endswith("Z")
    assert datetime.fromisoformat(parsed.date.replace("Z", "+00:00")).tzinfo is not None


def test_encoded_subject_and_recipients() -> None:
    subject = base64.b64encode("日本語".encode()).decode("ascii")
    parsed = parse_eml(
        _raw_email(
            headers=[
                f"Subject: =?UTF-8?B?{subject}?=",
                "From: =?UTF-8?Q?Jos=C3=A9?= <jose@example.com>",
                "To: =?UTF-8?B?5pel?= <a@example.com>,  b@example.com ",
            ]
        )
    )
    assert parsed.subject == "日本語"
    assert parsed.from_ == "José <jose@example.com>"
    assert parsed.to == ("日 <a@example.com>", "b@example.com")


def test_multipart_text_and_html_use_their_own_charsets() -> None:
    jis_body = "テスト本文".encode("iso-2022-jp").decode("ascii")
    raw = _raw_email(
        headers=["Subject: Alt", 'Content-Type: multipart/alternative; boundary="XYZ"'],
        body=_multipart(
            "Content-Type: text/plain; charset=ISO-2022-JP\r\n"
            "Content-Transfer-Encoding: 7bit\r\n\r\n" + jis_body,
            'Content-Type: text/html; charset="utf-8"\r\n'
            "Content-Transfer-Encoding: quoted-printable\r\n\r\n"
            "<p>caf=C3=A9 =\r\nand more</p>",
        ),
    )
    parsed = parse_eml(raw)
    assert parsed.text == "テスト本文"
    assert parsed.html == "<p>café and more</p>"


def test_part_charset_falls_back_to_top_level_charset() -> None:
    body = base64.b64encode("日本語".encode("shift_jis")).decode("ascii")
    raw = _raw_email(
        headers=['Content-Type: multipart/mixed; boundary="XYZ"; charset="Shift_JIS"'],
        body=_multipart("Content-Type: text/plain\r\nContent-Transfer-Encoding: base64\r\n\r\n" + body),
    )
    assert parse_eml(raw).text == "日本語"


def test_attachment_content_keeps_raw_part_bytes() -> None:
    raw = _raw_email(
        headers=["Subject: With file", 'Content-Type: multipart/mixed; boundary="XYZ"'],
        body=_multipart(
            "Content-Type: text/plain\r\n\r\nSee attached.",
            "Content-Type: application/octet-stream\r\n"
            'Content-Disposition: attachment; filename="test.txt"\r\n'
            "Content-Transfer-Encoding: base64\r\n\r\n"
            "SGVsbG8=",
        ),
    )
    parsed = parse_eml(raw)
    assert parsed.text == "See attached."
    assert len(parsed.attachments) == 1
    att = parsed.attachments[0]
    assert att.filename == "test.txt"
    assert att.content_type == "application/octet-stream"
    assert att.size == len("SGVsbG8=")
    assert base64.b64decode(att.content) == b"SGVsbG8="


def test_attachment_without_filename_is_unnamed() -> None:
    raw = _raw_email(
        headers=['Content-Type: multipart/mixed; boundary="XYZ"'],
        body=_multipart("Content-Type: image/png\r\nContent-Disposition: attachment\r\n\r\nAAAA"),
    )
    (att,) = parse_eml(raw).attachments
    assert att.filename == "unnamed"
    assert att.content_type == "image/png"


def test_text_part_is_body_even_with_attachment_disposition() -> None:
    raw = _raw_email(
        headers=['Content-Type: multipart/mixed; boundary="XYZ"'],
        body=_multipart('Content-Type: text/plain\r\nContent-Disposition: attachment; filename="a.txt"\r\n\r\nnotes'),
    )
    parsed = parse_eml(raw)
    assert parsed.text == "notes"
    assert parsed.attachments == ()


def test_last_text_part_wins_and_unknown_parts_are_dropped() -> None:
    raw = _raw_email(
        headers=['Content-Type: multipart/mixed; boundary="XYZ"'],
        body=_multipart(
            "Content-Type: text/plain\r\n\r\nfirst",
            "Content-Type: image/png\r\nContent-Disposition: inline\r\n\r\nAAAA",
            "Content-Type: text/plain\r\n\r\nsecond",
        ),
    )
    parsed = parse_eml(raw)
    assert parsed.text == "second"
    assert parsed.attachments == ()


def test_whitespace_only_html_is_omitted() -> None:
    raw = _raw_email(
        headers=['Content-Type: multipart/alternative; boundary="XYZ"'],
        body=_multipart("Content-Type: text/plain\r\n\r\n  text  ", "Content-Type: text/html\r\n\r\n   "),
    )
    parsed = parse_eml(raw)
    assert parsed.text == "text"
    assert parsed.html is None


def test_single_part_body_uses_top_level_encoding_and_charset() -> None:
    body = base64.b64encode("こんにちは".encode("euc-jp")).decode("ascii")
    raw = _raw_email(
        headers=[
            'Content-Type: text/plain; charset="EUC-JP"',
            "Content-Transfer-Encoding: base64",
        ],
        body=body[:8] + "\r\n" + body[8:],
    )
    assert parse_eml(raw).text == "こんにちは"


def test_single_part_html_is_treated_as_text() -> None:
    raw = _raw_email(headers=["Content-Type: text/html"], body="<b>hi</b>")
    parsed = parse_eml(raw)
    assert parsed.text == "<b>hi</b>"
    assert parsed.html is None


def test_unknown_part_charset_does_not_raise() -> None:
    raw = _raw_email(
        headers=['Content-Type: multipart/mixed; boundary="XYZ"'],
        body=_multipart(
            "Content-Type: text/plain; charset=x-made-up\r\n"
            "Content-Transfer-Encoding: base64\r\n\r\n" + base64.b64encode(b"hello").decode("ascii")
        ),
    )
    assert parse_eml(raw).text == "hello"


def test_lf_only_line_endings() -> None:
    raw = (
        "Subject: LF\n"
        'Content-Type: multipart/alternative; boundary="b1"\n'
        "\n"
        "--b1\n"
        "Content-Type: text/plain\n"
        "\n"
        "plain\n"
        "--b1\n"
        "Content-Type: text/html\n"
        "\n"
        "<i>html</i>\n"
        "--b1--\n"
    )
    parsed = parse_eml(raw)
    assert parsed.subject == "LF"
    assert parsed.text == "plain"
    assert parsed.html == "<i>html</i>"


def test_headers_are_exposed() -> None:
    parsed = parse_eml(_raw_email(headers=["Subject: a", "Received: x", "Received: y"]))
    assert parsed.headers.get_all("received") == ("x", "y")
    assert parsed.headers.first("subject") == "a"


def test_parse_eml_bytes_tolerates_invalid_utf8() -> None:
    parsed = parse_eml_bytes(b"Subject: bytes\r\n\r\nbad \xff byte")
    assert parsed.subject == "bytes"
    assert parsed.text == "bad � byte"


def test_read_eml_file(tmp_path) -> None:
    path = tmp_path / "message.eml"
    path.write_bytes(b"Subject: From disk\r\nFrom: a@example.com\r\n\r\nbody\r\n")
    parsed = asyncio.run(read_eml_file(path))
    assert parsed.subject == "From disk"
    assert parsed.text == "body"


def test_read_eml_file_missing_raises(tmp_path) -> None:
    with pytest.raises(EmlReadError):
        asyncio.run(read_eml_file(tmp_path / "missing.eml"))


def test_read_eml_file_over_limit_raises(tmp_path) -> None:
    path = tmp_path / "big.eml"
    path.write_bytes(b"Subject: big\r\n\r\n" + b"x" * 100)
    with pytest.raises(EmlReadError):
        asyncio.run(read_eml_file(path, max_bytes=50))


def test_repeated_single_value_fields_use_last_occurrence() -> None:
    raw = _raw_email(
        headers=["Subject: first", "From: a@example.com", "Subject: second", "To: x@example.com", "To: y@example.com"],
    )
    parsed = parse_eml(raw)
    assert parsed.subject == "second"
    assert parsed.to == ("y@example.com",)
    assert parsed.headers.get_all("subject") == ("first", "second")


def test_repeated_transfer_encoding_uses_last_occurrence() -> None:
    raw = _raw_email(
        headers=["Content-Transfer-Encoding: 7bit", "Content-Transfer-Encoding: base64"],
        body="SGVsbG8=",
    )
    assert parse_eml(raw).text == "Hello"


def test_repeated_part_content_type_uses_last_occurrence() -> None:
    raw = _raw_email(
        headers=['Content-Type: multipart/alternative; boundary="XYZ"'],
        body=_multipart("Content-Type: text/plain\r\nContent-Type: text/html\r\n\r\n<p>x</p>"),
    )
    parsed = parse_eml(raw)
    assert parsed.html == "<p>x</p>"
    assert parsed.text == ""


def test_parsed_email_collections_are_immutable() -> None:
    raw = _raw_email(
        headers=['Content-Type: multipart/mixed; boundary="XYZ"', "To: a@example.com"],
        body=_multipart('Content-Type: image/png\r\nContent-Disposition: attachment; filename="a.png"\r\n\r\nAAAA'),
    )
    parsed = parse_eml(raw)
    assert isinstance(parsed.to, tuple)
    assert isinstance(parsed.attachments, tuple)
    assert len(parsed.attachments) == 1
