# tests/test_multipart.py

import base64

import pytest

from eml_viewer.email_parser.errors import NestingTooDeep
from eml_viewer.email_parser.models import MimePart
from eml_viewer.email_parser.multipart import (
    boundary_delimiter,
    build_attachment,
    decompose_multipart,
    iter_parts,
)


def _b64(data: bytes) -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return "\n".join(encoded[i:i + 76] for i in range(0, len(encoded), 76))


def test_text_and_pdf_attachment(pdf_bytes):
    body = (
        "This is a multi-part message in MIME format.\n"
        "--BOUND1\n"
        "Content-Type: text/plain; charset=utf-8\n"
        "\n"
        "Hello\n"
        "--BOUND1\n"
        "Content-Type: application/pdf\n"
        'Content-Disposition: attachment; filename="report.pdf"\n'
        "Content-Transfer-Encoding: base64\n"
        "\n"
        f"{_b64(pdf_bytes)}\n"
        "--BOUND1--\n"
    )
    result = decompose_multipart(body, "--BOUND1")

    assert result.text == "Hello"
    assert result.html == ""
    assert len(result.attachments) == 1
    att = result.attachments[0]
    assert att.filename == "report.pdf"
    assert att.content_type == "application/pdf"
    assert att.size == len(pdf_bytes)
    assert att.to_bytes() == pdf_bytes


def test_base64_attachment_keeps_original_encoded_body(pdf_bytes):
    encoded = _b64(pdf_bytes)
    body = (
        "--B\n"
        "Content-Type: application/pdf\n"
        "Content-Transfer-Encoding: base64\n"
        "\n"
        f"{encoded}\n"
        "--B--\n"
    )
    att = decompose_multipart(body, "--B").attachments[0]
    assert att.content == encoded


def test_non_base64_attachment_is_reencoded():
    body = (
        "--B\n"
        "Content-Type: text/csv\n"
        "Content-Disposition: attachment; filename=data.csv\n"
        "\n"
        "a,b\n1,2\n"
        "--B--\n"
    )
    att = decompose_multipart(body, "--B").attachments[0]
    assert att.filename == "data.csv"
    assert att.content_type == "text/csv"
    assert att.to_bytes() == b"a,b\n1,2"
    assert att.size == 7


def test_quoted_printable_attachment_size_is_decoded_length():
    part = MimePart(
        headers={"content-disposition": "attachment"},
        body="abc=3D",
        content_type="",
        transfer_encoding="quoted-printable",
    )
    att = build_attachment(part)
    assert att.to_bytes() == b"abc="
    assert att.size == 4
    assert att.filename == "attachment"
    assert att.content_type == "application/octet-stream"


def test_filename_falls_back_to_content_type_name():
    part = MimePart(
        headers={},
        body="",
        content_type='image/png; name="logo.png"',
    )
    att = build_attachment(part)
    assert att.filename == "logo.png"
    assert att.content_type == "image/png"


def test_nested_alternative_propagates_text_and_html():
    body = (
        "--OUTER\n"
        "Content-Type: application/zip\n"
        'Content-Disposition: attachment; filename="first.zip"\n'
        "\n"
        "zipdata\n"
        "--OUTER\n"
        'Content-Type: multipart/alternative; boundary="ALT"\n'
        "\n"
        "--ALT\n"
        "Content-Type: text/plain\n"
        "\n"
        "plain body\n"
        "--ALT\n"
        "Content-Type: text/html\n"
        "\n"
        "<p>html body</p>\n"
        "--ALT\n"
        "Content-Type: image/gif\n"
        "Content-Disposition: inline; filename=dot.gif\n"
        "\n"
        "GIF89a\n"
        "--ALT--\n"
        "\n"
        "--OUTER\n"
        "Content-Type: audio/mpeg\n"
        "\n"
        "ID3\n"
        "--OUTER--\n"
    )
    result = decompose_multipart(body, "--OUTER")

    assert result.text == "plain body"
    assert result.html == "<p>html body</p>"
    assert [a.filename for a in result.attachments] == ["first.zip", "dot.gif", "attachment"]
    assert [a.content_type for a in result.attachments] == [
        "application/zip",
        "image/gif",
        "audio/mpeg",
    ]


def test_dash_prefixed_nested_boundary():
    body = (
        "------=_Part_0\n"
        'Content-Type: multipart/alternative; boundary="----=_Part_1"\n'
        "\n"
        "------=_Part_1\n"
        "Content-Type: text/html\n"
        "Content-Transfer-Encoding: quoted-printable\n"
        "\n"
        "<b>caf=C2=A9</b>\n"
        "------=_Part_1--\n"
        "------=_Part_0--\n"
    )
    result = decompose_multipart(body, boundary_delimiter("----=_Part_0"))
    assert result.html == "<b>caf©</b>"


def test_first_non_empty_body_wins():
    body = (
        "--OUT\n"
        "Content-Type: text/plain\n"
        "\n"
        "outer text\n"
        "--OUT\n"
        "Content-Type: multipart/alternative; boundary=IN\n"
        "\n"
        "--IN\n"
        "Content-Type: text/plain\n"
        "\n"
        "inner text\n"
        "--IN\n"
        "Content-Type: text/html\n"
        "\n"
        "<i>inner html</i>\n"
        "--IN--\n"
        "--OUT\n"
        "Content-Type: text/html\n"
        "\n"
        "<i>outer html</i>\n"
        "--OUT--\n"
    )
    result = decompose_multipart(body, "--OUT")
    assert result.text == "outer text"
    assert result.html == "<i>inner html</i>"


def test_unclassified_parts_are_dropped():
    body = (
        "--B\n"
        "Content-Type: message/delivery-status\n"
        "\n"
        "Status: 5.0.0\n"
        "--B\n"
        "X-No-Content-Type: true\n"
        "\n"
        "orphan\n"
        "--B--\n"
    )
    result = decompose_multipart(body, "--B")
    assert result.text == ""
    assert result.html == ""
    assert result.attachments == []


def test_nested_multipart_without_boundary_contributes_nothing():
    body = (
        "--B\n"
        "Content-Type: multipart/related\n"
        "\n"
        "--X\n"
        "Content-Type: text/plain\n"
        "\n"
        "lost\n"
        "--B--\n"
    )
    assert decompose_multipart(body, "--B").text == ""


def test_iter_parts_skips_preamble_and_closing_marker():
    body = "--B\nContent-Type: text/plain\n\none\n--B\nContent-Type: text/plain\n\ntwo\n--B--\n"
    parts = list(iter_parts(body, "--B"))
    assert [p.body for p in parts] == ["one", "two"]
    assert parts[0].content_type == "text/plain"
    assert parts[0].transfer_encoding == ""


def test_depth_guard():
    with pytest.raises(NestingTooDeep) as exc_info:
        decompose_multipart("", "--B", depth=4, max_depth=3)
    assert exc_info.value.depth == 4
    assert exc_info.value.max_depth == 3


def test_quoted_printable_soft_break_before_delimiter():
    body = (
        "--B\n"
        "Content-Type: text/plain\n"
        "Content-Transfer-Encoding: quoted-printable\n"
        "\n"
        "Hello wor=\n"
        "ld=\n"
        "--B--\n"
    )
    assert decompose_multipart(body, "--B").text == "Hello world"
