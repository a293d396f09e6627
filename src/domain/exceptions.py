"""
Domain exceptions - Semantic error types for the subscriber registry.

Absence of a record is never an exception; these types cover caller
errors and opaque Store failures only.
"""


class RegistryError(Exception):
    """Base class for registry domain errors."""

    pass


class InvalidRequest(RegistryError):
    """Request rejected before reaching the Store (bad page, count, address or timestamp)."""

    pass


class StoreError(RegistryError):
    """Store operation failed (I/O, constraint violation, connection failure)."""

    pass
