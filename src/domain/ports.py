"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the Store interface the registry requires.
Adapters implement this protocol through structural subtyping.
"""

from typing import Protocol

from .entry import EmailEntry


class EmailRepository(Protocol):
    """Port interface for subscriber persistence."""

    def ensure_schema(self) -> None:
        """
        Create the backing structure if it does not exist.

        Must be idempotent: safe to call on an initialized store.

        Raises:
            StoreError: If the store cannot be initialized
        """
        ...

    def read(self, email: str) -> EmailEntry | None:
        """
        Look up a single record by address.

        Returns:
            The record, or None if no record has this address
        """
        ...

    def read_page(self, page: int, count: int) -> list[EmailEntry]:
        """
        Read one page of the listing ordered by id.

        The offset is page * count; the last page may hold fewer
        than count records and pages past the end are empty.
        """
        ...

    def create(self, email: str) -> None:
        """
        Insert a new unconfirmed, opted-in record.

        Raises:
            StoreError: If the address already exists
        """
        ...

    def replace(self, entry: EmailEntry) -> None:
        """
        Overwrite confirmed_at and opt_out of the record matching entry.email.

        Writes nothing when no record matches. The id is never changed.
        """
        ...

    def delete(self, email: str) -> None:
        """Remove the record with this address. Absent addresses are a no-op."""
        ...

    def close(self) -> None:
        """Release store resources."""
        ...
