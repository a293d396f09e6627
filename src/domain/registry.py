"""
Registry domain service - Protocol-agnostic subscriber operations.

Both network adapters call into EmailRegistry, which is why they behave
identically against the same Store.

Mutate-then-re-read
===================

create, update and delete perform their Store mutation and then issue an
independent read by address to build the response. The two calls are not
a transaction:

    create(a)  ->  repository.create(a); repository.read(a)
    delete(a)  ->  repository.delete(a); repository.read(a)

A concurrent writer on the same address may land between them, so a
successful create can report no record and a delete can report one.
Ordering is whatever the Store provides; the registry takes no locks.
"""

from dataclasses import dataclass, replace

from .entry import EmailEntry
from .exceptions import InvalidRequest
from .ports import EmailRepository

# Paging stays in the signed 32-bit range, so page * count always fits a bigint offset
MAX_PAGING_VALUE = 2**31 - 1


@dataclass
class EmailRegistry:
    """
    Domain service for the subscriber registry.

    Normalizes addresses, validates paging, dispatches exactly one
    Store mutation per request and re-reads for the response.
    """

    repository: EmailRepository

    def get(self, email: str) -> EmailEntry | None:
        """Return the record for this address, or None if there is none."""
        return self.repository.read(self._normalize_email(email))

    def get_batch(self, page: int, count: int) -> list[EmailEntry]:
        """
        Return one page of records.

        Args:
            page: Zero-based page index
            count: Page size

        Raises:
            InvalidRequest: If page is negative, count is not positive, or
                either exceeds MAX_PAGING_VALUE
        """
        if not 0 <= page <= MAX_PAGING_VALUE:
            raise InvalidRequest(f"page must be >= 0 and <= {MAX_PAGING_VALUE}, got {page}")
        if not 0 < count <= MAX_PAGING_VALUE:
            raise InvalidRequest(f"count must be > 0 and <= {MAX_PAGING_VALUE}, got {count}")
        return self.repository.read_page(page, count)

    def create(self, email: str) -> EmailEntry | None:
        """Create a record for this address and return its current state."""
        normalized_email = self._normalize_email(email)
        self.repository.create(normalized_email)
        return self.get(normalized_email)

    def update(self, entry: EmailEntry) -> EmailEntry | None:
        """Replace the record matching entry.email and return its current state."""
        entry = replace(entry, email=self._normalize_email(entry.email))
        self.repository.replace(entry)
        return self.get(entry.email)

    def delete(self, email: str) -> EmailEntry | None:
        """Delete the record for this address and return its current state (normally None)."""
        normalized_email = self._normalize_email(email)
        self.repository.delete(normalized_email)
        return self.get(normalized_email)

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent storage and lookup.

        Applies: strip whitespace + lowercase
        """
        normalized = email.strip().lower()
        if not normalized:
            raise InvalidRequest("email must not be empty")
        return normalized
