"""
eml_viewer/email_parser/decoding.py
-----------------------------------
Content-transfer-encoding decoders (quoted-printable, base64, identity).

Decoding never raises: a span that cannot be decoded is passed through
unchanged so a single bad part does not take down the whole message.
"""

import base64
import binascii
import re
from typing import Dict

from eml_viewer.email_parser.errors import DecodeFailure
from eml_viewer.utils.logging_utils import get_logger

logger = get_logger()

QUOTED_PRINTABLE = "quoted-printable"
BASE64 = "base64"

# A trailing "=" is a soft break whose line ending belongs to the next delimiter.
_SOFT_BREAK = re.compile(r"=(?:\r?\n|\Z)")
_HEX_ESCAPE = re.compile(r"=([0-9A-F]{2})")
_WHITESPACE = re.compile(r"\s+")

# Two-byte UTF-8 escapes that are known to render correctly.
QP_SYMBOLS: Dict[str, str] = {
    "=C2=A0": "\u00a0",  # non-breaking space
    "=C2=A9": "\u00a9",  # copyright
    "=C2=AE": "\u00ae",  # registered trademark
    "=C2=B0": "\u00b0",  # degree
    "=C2=A2": "\u00a2",  # cent
    "=C2=A3": "\u00a3",  # pound
    "=C2=A5": "\u00a5",  # yen
    "=C2=A7": "\u00a7",  # section
    "=C2=B1": "\u00b1",  # plus-minus
    "=C2=B6": "\u00b6",  # pilcrow
    "=C2=B7": "\u00b7",  # middle dot
    "=C2=BB": "\u00bb",  # right guillemet
    "=C2=AB": "\u00ab",  # left guillemet
}

# Lead bytes of Latin-1 supplement sequences; emitting them alone shows up as "Â"/"Ã".
_DROPPED_BYTES = (0xC2, 0xC3)


def _normalize(encoding: str) -> str:
    return (encoding or "").strip().lower()


def _replace_escape(match: "re.Match[str]") -> str:
    value = int(match.group(1), 16)
    if value in _DROPPED_BYTES:
        return ""
    return chr(value)


def decode_quoted_printable(text: str) -> str:
    """
    Decode a quoted-printable span.

    Soft line breaks are removed first, then the fixed symbol table is
    applied, and finally every remaining upper-case =XX escape becomes the
    single code point XX. Multi-byte UTF-8 sequences outside QP_SYMBOLS are
    not reassembled: their 0xC2/0xC3 lead bytes are dropped.
    """
    decoded = _SOFT_BREAK.sub("", text)
    for escape, symbol in QP_SYMBOLS.items():
        decoded = decoded.replace(escape, symbol)
    return _HEX_ESCAPE.sub(_replace_escape, decoded)


def decode_base64(text: str) -> bytes:
    """
    Strictly decode base64 text, ignoring embedded whitespace.

    Raises:
        DecodeFailure: the text is not valid base64.
    """
    try:
        return base64.b64decode(_WHITESPACE.sub("", text), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeFailure(str(e)) from e


def decode_transfer_bytes(text: str, encoding: str) -> bytes:
    """
    Decode a part body to raw bytes according to its declared encoding.
    Used for attachments, where the payload is binary.
    """
    enc = _normalize(encoding)
    if enc == BASE64:
        try:
            return decode_base64(text)
        except DecodeFailure as e:
            logger.debug(f"base64 decode failed, keeping raw body: {e}")
            return text.encode("utf-8")
    if enc == QUOTED_PRINTABLE:
        return decode_quoted_printable(text).encode("utf-8")
    return text.encode("utf-8")


def decode_transfer(text: str, encoding: str) -> str:
    """
    Decode a part body to text according to its declared encoding.

    Args:
        text (str): Raw body as it appears in the message.
        encoding (str): Declared Content-Transfer-Encoding (any case).

    Returns:
        str: Decoded text. Unknown encodings and undecodable base64 are
        returned unchanged.
    """
    enc = _normalize(encoding)
    if enc == QUOTED_PRINTABLE:
        return decode_quoted_printable(text)
    if enc == BASE64:
        try:
            return decode_base64(text).decode("utf-8", errors="replace")
        except DecodeFailure as e:
            logger.debug(f"base64 decode failed, keeping raw body: {e}")
            return text
    return text
