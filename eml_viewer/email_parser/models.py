"""
eml_viewer/email_parser/models.py
---------------------------------
Plain data containers produced by the parser.
"""

import base64
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

HeaderMap = Dict[str, str]

DEFAULT_FILENAME = "attachment"
DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_SENDER = "Unknown"
DEFAULT_SUBJECT = "No Subject"


@dataclass(frozen=True)
class MimePart:
    headers: HeaderMap
    body: str
    content_type: str = ""
    transfer_encoding: str = ""


@dataclass(frozen=True)
class Attachment:
    filename: str = DEFAULT_FILENAME
    content_type: str = DEFAULT_CONTENT_TYPE
    size: int = 0
    content: str = ""  # base64 text

    def to_bytes(self) -> bytes:
        """
        Decode the stored base64 payload back to raw bytes.
        Line breaks left over from the original part body are ignored.
        """
        return base64.b64decode(self.content)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "contentType": self.content_type,
            "size": self.size,
        }


@dataclass
class DecomposedBody:
    text: str = ""
    html: str = ""
    attachments: List[Attachment] = field(default_factory=list)


@dataclass(frozen=True)
class ParsedMessage:
    from_: str
    to: List[str]
    subject: str
    date: datetime
    text: str = ""
    html: str = ""
    attachments: List[Attachment] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """
        JSON-friendly view. Attachment payloads are left out; they are
        served separately by index.
        """
        return {
            "from": self.from_,
            "to": list(self.to),
            "subject": self.subject,
            "date": self.date.isoformat(),
            "text": self.text,
            "html": self.html,
            "attachments": [a.to_dict() for a in self.attachments],
        }
