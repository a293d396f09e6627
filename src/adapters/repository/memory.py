"""
In-memory repository adapter - Implements EmailRepository protocol.

Process-local store selected with EMAILLIST_DB=memory://. Records are
lost on exit. A single lock makes each method atomic, which gives the
same per-call guarantees the PostgreSQL adapter gets from the database.
"""

import threading

from src.domain.entry import EmailEntry
from src.domain.exceptions import StoreError


class InMemoryEmailRepository:
    """
    Implements EmailRepository protocol with a dictionary keyed by address.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Ids are assigned sequentially and never reused.
    """

    def __init__(self) -> None:
        self._entries: dict[str, EmailEntry] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def ensure_schema(self) -> None:
        pass

    def read(self, email: str) -> EmailEntry | None:
        with self._lock:
            return self._entries.get(email)

    def read_page(self, page: int, count: int) -> list[EmailEntry]:
        offset = page * count
        with self._lock:
            # Insertion order is id order, ids only grow
            entries = list(self._entries.values())
        return entries[offset : offset + count]

    def create(self, email: str) -> None:
        with self._lock:
            if email in self._entries:
                raise StoreError(f"Email already exists: {email}")
            self._entries[email] = EmailEntry(id=self._next_id, email=email)
            self._next_id += 1

    def replace(self, entry: EmailEntry) -> None:
        with self._lock:
            current = self._entries.get(entry.email)
            if current is None:
                return
            self._entries[entry.email] = EmailEntry(
                id=current.id,
                email=current.email,
                confirmed_at=entry.confirmed_at,
                opt_out=entry.opt_out,
            )

    def delete(self, email: str) -> None:
        with self._lock:
            self._entries.pop(email, None)

    def close(self) -> None:
        pass
