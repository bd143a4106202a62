"""
eml_viewer/email_parser/addresses.py
------------------------------------
Pull bare mailbox strings out of address-list headers (From, To, Cc).
"""

import re
from typing import List

_BRACKETED = re.compile(r"<([^>]+)>")
_BARE = re.compile(r"([^<\s]+@[^>\s]+)")


def extract_addresses(value: str) -> List[str]:
    """
    "Jane Doe <jane@example.com>, bob@example.org"
        -> ["jane@example.com", "bob@example.org"]

    Each comma-separated token yields its <...> address, else the first
    local@domain substring, else the token itself. Blank tokens are dropped.
    """
    if not value:
        return []

    addresses: List[str] = []
    for token in value.split(","):
        match = _BRACKETED.search(token) or _BARE.search(token)
        address = match.group(1).strip() if match else token.strip()
        if address:
            addresses.append(address)
    return addresses
