"""
eml_viewer/email_parser/parser.py
---------------------------------
Entry point of the message parser: turns raw .eml text into a
ParsedMessage with sender, recipients, subject, date, text, HTML and
attachments.
"""

from datetime import datetime, timezone
from email.errors import HeaderParseError
from email.header import decode_header, make_header
from email.utils import parsedate_to_datetime
from typing import Callable, Optional

from eml_viewer.email_parser.addresses import extract_addresses
from eml_viewer.email_parser.decoding import decode_transfer
from eml_viewer.email_parser.errors import MalformedInput
from eml_viewer.email_parser.headers import header_param, tokenize_headers
from eml_viewer.email_parser.models import (
    DEFAULT_SENDER,
    DEFAULT_SUBJECT,
    DecomposedBody,
    HeaderMap,
    ParsedMessage,
)
from eml_viewer.email_parser.multipart import boundary_delimiter, decompose_multipart
from eml_viewer.utils.config import CONFIG
from eml_viewer.utils.logging_utils import get_logger

logger = get_logger()

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_date(value: str) -> Optional[datetime]:
    """
    Parse an RFC 2822 Date header, falling back to ISO-8601.
    Returns None when neither form matches. Naive results are taken as UTC.
    """
    value = (value or "").strip()
    if not value:
        return None

    parsed: Optional[datetime] = None
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def decode_subject(value: str) -> str:
    """Decode RFC 2047 encoded words (=?utf-8?B?...?=); plain text passes through."""
    if "=?" not in value:
        return value
    try:
        return str(make_header(decode_header(value)))
    except (HeaderParseError, LookupError, UnicodeDecodeError) as e:
        logger.debug(f"Could not decode subject {value!r}: {e}")
        return value


def _decompose_top_level(headers: HeaderMap, body: str, max_depth: int) -> DecomposedBody:
    content_type = headers.get("content-type", "")
    boundary = header_param(content_type, "boundary")
    if not boundary:
        raise MalformedInput(f"multipart content-type without boundary: {content_type!r}")
    return decompose_multipart(body, boundary_delimiter(boundary), depth=1, max_depth=max_depth)


def parse_message(
    message_text: str,
    *,
    clock: Optional[Clock] = None,
    max_depth: Optional[int] = None,
) -> ParsedMessage:
    """
    Parse a raw internet-mail message.

    Args:
        message_text (str): Full message text (headers + body).
        clock (callable): Returns the timestamp used when the Date header is
            absent or unparsable. Defaults to the current UTC time.
        max_depth (int): Maximum multipart nesting depth. Defaults to
            CONFIG.MAX_NESTING_DEPTH.

    Returns:
        ParsedMessage: always fully populated; missing fields are defaulted.

    Raises:
        NestingTooDeep: multipart sections are nested beyond max_depth.
    """
    clock = clock or utc_now
    max_depth = CONFIG.MAX_NESTING_DEPTH if max_depth is None else max_depth

    headers, body = tokenize_headers(message_text)
    if not headers:
        logger.debug("Message has no headers, returning defaults")

    content_type = headers.get("content-type", "")

    if "multipart" in content_type.lower():
        try:
            decomposed = _decompose_top_level(headers, body, max_depth)
        except MalformedInput as e:
            logger.warning(f"{e}; returning empty body")
            decomposed = DecomposedBody()
    else:
        decoded = decode_transfer(body, headers.get("content-transfer-encoding", ""))
        if "text/html" in content_type.lower():
            decomposed = DecomposedBody(html=decoded)
        else:
            decomposed = DecomposedBody(text=decoded)

    senders = extract_addresses(headers.get("from", ""))
    date = parse_date(headers.get("date", "")) or clock()

    return ParsedMessage(
        from_=senders[0] if senders else DEFAULT_SENDER,
        to=extract_addresses(headers.get("to", "")),
        subject=decode_subject(headers.get("subject", "")) or DEFAULT_SUBJECT,
        date=date,
        text=decomposed.text,
        html=decomposed.html,
        attachments=decomposed.attachments,
    )
