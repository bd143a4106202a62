"""
eml_viewer/email_parser/errors.py
---------------------------------
Error kinds raised while parsing a raw message.

Only NestingTooDeep ever escapes parse_message(); the others are caught
inside the parser and turned into defaulted fields.
"""


class ParseError(Exception):
    """Base class for all parsing errors."""


class MalformedInput(ParseError):
    """A multipart type was declared without a usable boundary."""


class DecodeFailure(ParseError):
    """A transfer-encoded span could not be decoded."""


class NestingTooDeep(ParseError):
    """Multipart sections are nested deeper than the configured bound."""

    def __init__(self, depth: int, max_depth: int):
        self.depth = depth
        self.max_depth = max_depth
        super().__init__(
            f"multipart nesting depth {depth} exceeds maximum of {max_depth}"
        )
