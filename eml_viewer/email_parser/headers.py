"""
eml_viewer/email_parser/headers.py
----------------------------------
Split a block of message text into a header map and a body.
"""

import re
from typing import List, Optional, Tuple

from eml_viewer.email_parser.models import HeaderMap

_LINE_BREAK = re.compile(r"\r?\n")


def tokenize_headers(block: str) -> Tuple[HeaderMap, str]:
    """
    Tokenize the header section of a message or a multipart part.

    Header keys are lower-cased and the last occurrence of a name wins.
    Folded continuation lines are joined onto the header above them.
    Leading blank lines are skipped; the first blank line after a header
    separates headers from body. Without such a line the body is empty.

    Returns:
        (headers, body): body lines are re-joined with "\\n".
    """
    lines: List[str] = _LINE_BREAK.split(block)
    headers: HeaderMap = {}
    last_key: Optional[str] = None

    for i, line in enumerate(lines):
        if not line.strip():
            if not headers:
                continue
            return headers, "\n".join(lines[i + 1:])

        if last_key is not None and line[0] in " \t":
            headers[last_key] = f"{headers[last_key]} {line.strip()}".strip()
            continue

        colon = line.find(":")
        if colon <= 0:
            last_key = None
            continue

        key = line[:colon].strip().lower()
        headers[key] = line[colon + 1:].strip()
        last_key = key

    return headers, ""


def header_param(value: str, name: str) -> str:
    """
    Read a parameter such as boundary= or filename= from a header value.
    The quoted form is preferred over the bare form; returns "" if absent.
    """
    quoted = re.search(rf'\b{name}="([^"]+)"', value, re.IGNORECASE)
    if quoted:
        return quoted.group(1)
    bare = re.search(rf"\b{name}=([^;\s]+)", value, re.IGNORECASE)
    return bare.group(1) if bare else ""


def strip_params(value: str) -> str:
    """'text/plain; charset=utf-8' -> 'text/plain'"""
    return value.split(";", 1)[0].strip()
