"""Repository adapters - Store implementations."""

from .memory import InMemoryEmailRepository
from .postgres import PostgresEmailRepository, run_migrations

__all__ = ["InMemoryEmailRepository", "PostgresEmailRepository", "run_migrations"]
