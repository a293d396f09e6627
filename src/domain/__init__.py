"""
Domain layer - Pure registry logic with zero framework imports.

This package holds the canonical subscriber record, the Store port and
the registry service shared by every network adapter.
"""

from .entry import EmailEntry, from_unix_seconds, to_unix_seconds
from .exceptions import InvalidRequest, RegistryError, StoreError
from .ports import EmailRepository
from .registry import EmailRegistry

__all__ = [
    "EmailEntry",
    "EmailRegistry",
    "EmailRepository",
    "InvalidRequest",
    "RegistryError",
    "StoreError",
    "from_unix_seconds",
    "to_unix_seconds",
]
