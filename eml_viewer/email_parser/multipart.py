"""
eml_viewer/email_parser/multipart.py
------------------------------------
Recursive decomposition of multipart bodies into text, HTML and
attachments.

Parts are found by plain string splitting on the boundary delimiter, so a
delimiter that happens to occur inside attachment data will split it.
"""

import base64
from typing import Iterator

from eml_viewer.email_parser.decoding import (
    BASE64,
    decode_base64,
    decode_transfer,
    decode_transfer_bytes,
)
from eml_viewer.email_parser.errors import DecodeFailure, NestingTooDeep
from eml_viewer.email_parser.headers import header_param, strip_params, tokenize_headers
from eml_viewer.email_parser.models import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_FILENAME,
    Attachment,
    DecomposedBody,
    MimePart,
)
from eml_viewer.utils.config import CONFIG
from eml_viewer.utils.logging_utils import get_logger

logger = get_logger()

ATTACHMENT_TYPES = ("application/", "image/", "video/", "audio/")


def boundary_delimiter(boundary: str) -> str:
    """The delimiter line that separates parts is "--" + boundary."""
    return f"--{boundary}"


def _drop_trailing_break(segment: str) -> str:
    # The line break before a delimiter belongs to the delimiter.
    if segment.endswith("\r\n"):
        return segment[:-2]
    if segment.endswith("\n"):
        return segment[:-1]
    return segment


def iter_parts(body: str, delimiter: str) -> Iterator[MimePart]:
    """
    Yield the parts of a multipart body, skipping empty segments and the
    closing "--" marker.
    """
    for segment in body.split(delimiter):
        segment = _drop_trailing_break(segment)
        if segment.strip() in ("", "--"):
            continue
        headers, part_body = tokenize_headers(segment)
        yield MimePart(
            headers=headers,
            body=part_body,
            content_type=headers.get("content-type", ""),
            transfer_encoding=headers.get("content-transfer-encoding", ""),
        )


def is_attachment(part: MimePart) -> bool:
    disposition = part.headers.get("content-disposition", "").lower()
    ctype = part.content_type.lower()
    return "attachment" in disposition or any(t in ctype for t in ATTACHMENT_TYPES)


def build_attachment(part: MimePart) -> Attachment:
    """
    Turn a part into an Attachment record.

    Base64 parts keep their original encoded body as the payload; anything
    else is decoded and re-encoded to base64. Size is always the decoded
    byte count.
    """
    disposition = part.headers.get("content-disposition", "")
    filename = (
        header_param(disposition, "filename")
        or header_param(part.content_type, "name")
        or DEFAULT_FILENAME
    )
    content_type = strip_params(part.content_type) or DEFAULT_CONTENT_TYPE

    if part.transfer_encoding.strip().lower() == BASE64:
        try:
            payload = decode_base64(part.body)
            content = part.body
        except DecodeFailure as e:
            logger.warning(f"Attachment {filename!r} is not valid base64, storing raw body: {e}")
            payload = part.body.encode("utf-8")
            content = base64.b64encode(payload).decode("ascii")
    else:
        payload = decode_transfer_bytes(part.body, part.transfer_encoding)
        content = base64.b64encode(payload).decode("ascii")

    return Attachment(
        filename=filename,
        content_type=content_type,
        size=len(payload),
        content=content,
    )


def _merge(result: DecomposedBody, nested: DecomposedBody) -> None:
    # First non-empty body wins, at every nesting level.
    if not result.text:
        result.text = nested.text
    if not result.html:
        result.html = nested.html
    result.attachments.extend(nested.attachments)


def decompose_multipart(
    body: str,
    delimiter: str,
    depth: int = 1,
    max_depth: int = CONFIG.MAX_NESTING_DEPTH,
) -> DecomposedBody:
    """
    Walk a multipart body and aggregate its text, HTML and attachments.

    Args:
        body (str): Body text of the multipart message or part.
        delimiter (str): Full delimiter string, e.g. "--BOUNDARY".
        depth (int): Nesting level of this body; the top level is 1.
        max_depth (int): Deepest level allowed.

    Returns:
        DecomposedBody: text/html hold the first non-empty body of each
        kind; attachments are in encounter order.

    Raises:
        NestingTooDeep: depth exceeds max_depth.
    """
    if depth > max_depth:
        raise NestingTooDeep(depth, max_depth)

    result = DecomposedBody()

    for part in iter_parts(body, delimiter):
        ctype = part.content_type.lower()

        if "multipart" in ctype:
            boundary = header_param(part.content_type, "boundary")
            if not boundary:
                logger.warning(f"Nested {strip_params(part.content_type)} part has no boundary, skipping")
                continue
            nested = decompose_multipart(
                part.body,
                boundary_delimiter(boundary),
                depth=depth + 1,
                max_depth=max_depth,
            )
            _merge(result, nested)

        elif "text/plain" in ctype:
            if not result.text:
                result.text = decode_transfer(part.body, part.transfer_encoding)

        elif "text/html" in ctype:
            if not result.html:
                result.html = decode_transfer(part.body, part.transfer_encoding)

        elif is_attachment(part):
            result.attachments.append(build_attachment(part))

        else:
            logger.debug(f"Dropping part with content-type {part.content_type!r}")

    return result
