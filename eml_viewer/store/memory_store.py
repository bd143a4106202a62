"""
eml_viewer/store/memory_store.py
--------------------------------
Bounded in-memory store for parsed messages, keyed by an opaque id.
Inserting past capacity evicts the oldest entry (FIFO).
"""

import secrets
import string
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from eml_viewer.email_parser.models import ParsedMessage
from eml_viewer.utils.logging_utils import get_logger

logger = get_logger()

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_email_id() -> str:
    """email_<epoch millis>_<9 random base36 chars>"""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"email_{int(time.time() * 1000)}_{suffix}"


@dataclass(frozen=True)
class StoredEmail:
    id: str
    message: ParsedMessage
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class MessageStore:
    """
    Thread-safe FIFO map of email id -> StoredEmail.
    """

    def __init__(self, capacity: int = 100):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._items: "OrderedDict[str, StoredEmail]" = OrderedDict()
        self._lock = threading.Lock()

    def add(self, message: ParsedMessage) -> StoredEmail:
        """Store a message under a freshly generated id."""
        entry = StoredEmail(id=generate_email_id(), message=message)
        self.put(entry)
        return entry

    def put(self, entry: StoredEmail) -> None:
        with self._lock:
            self._items[entry.id] = entry
            while len(self._items) > self.capacity:
                evicted, _ = self._items.popitem(last=False)
                logger.info(f"Store full ({self.capacity}), evicted {evicted}")

    def get(self, email_id: str) -> Optional[StoredEmail]:
        with self._lock:
            return self._items.get(email_id)

    def clear(self) -> None:
        with self._lock:
            self._items.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def __contains__(self, email_id: object) -> bool:
        with self._lock:
            return email_id in self._items
