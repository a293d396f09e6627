"""
PostgreSQL repository adapter - Implements EmailRepository protocol.

This module provides the PostgreSQL implementation of the domain's
Store port using psycopg3 with raw SQL.

Concurrency is delegated to the connection pool and to PostgreSQL:
every method checks out its own connection, so the one repository
instance can be shared by both network adapters. Uniqueness of
addresses is enforced by the UNIQUE constraint on email.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import psycopg
from psycopg_pool import ConnectionPool

from src.domain.entry import EmailEntry
from src.domain.exceptions import StoreError

logger = logging.getLogger(__name__)

_COLUMNS = "id, email, confirmed_at, opt_out"


class PostgresEmailRepository:
    """
    Implements EmailRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries. Driver errors surface as StoreError.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def ensure_schema(self) -> None:
        """Run the idempotent migration files."""
        run_migrations(self._pool)

    def read(self, email: str) -> EmailEntry | None:
        sql = f"SELECT {_COLUMNS} FROM email_entries WHERE email = %s"

        with self._cursor() as cursor:
            cursor.execute(sql, (email,))
            row = cursor.fetchone()

        if row is None:
            return None
        return _row_to_entry(row)

    def read_page(self, page: int, count: int) -> list[EmailEntry]:
        """
        Read one page ordered by id.

        LIMIT/OFFSET gives the short last page and empty pages past the end.
        """
        sql = f"""
            SELECT {_COLUMNS}
            FROM email_entries
            ORDER BY id ASC
            LIMIT %s OFFSET %s
        """

        with self._cursor() as cursor:
            cursor.execute(sql, (count, page * count))
            rows = cursor.fetchall()

        return [_row_to_entry(row) for row in rows]

    def create(self, email: str) -> None:
        """
        Insert a new record with default confirmation and opt-out state.

        A duplicate address violates the UNIQUE constraint and raises StoreError.
        """
        sql = "INSERT INTO email_entries (email) VALUES (%s)"

        with self._cursor(commit=True) as cursor:
            cursor.execute(sql, (email,))

    def replace(self, entry: EmailEntry) -> None:
        """
        Overwrite mutable fields of the record keyed by entry.email.

        The id column is never written; an unknown address updates zero rows.
        """
        sql = """
            UPDATE email_entries
            SET confirmed_at = %s, opt_out = %s
            WHERE email = %s
        """

        with self._cursor(commit=True) as cursor:
            cursor.execute(sql, (entry.confirmed_at, entry.opt_out, entry.email))
            if cursor.rowcount == 0:
                logger.debug("Replace matched no record: %s", entry.email)

    def delete(self, email: str) -> None:
        """Delete by address; deleting an absent address is not an error."""
        sql = "DELETE FROM email_entries WHERE email = %s"

        with self._cursor(commit=True) as cursor:
            cursor.execute(sql, (email,))

    def close(self) -> None:
        self._pool.close()

    @contextmanager
    def _cursor(self, commit: bool = False) -> Iterator[psycopg.Cursor]:
        """Check out a connection and translate driver failures into StoreError."""
        try:
            with self._pool.connection() as conn, conn.cursor() as cursor:
                yield cursor
                if commit:
                    conn.commit()
        except psycopg.Error as e:
            raise StoreError(str(e)) from e


def _row_to_entry(row: tuple) -> EmailEntry:
    return EmailEntry(id=row[0], email=row[1], confirmed_at=row[2], opt_out=row[3])


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration must be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance

    Raises:
        StoreError: If the migrations directory is missing or a migration fails
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        raise StoreError(f"Migrations directory not found: {migrations_dir}")

    sql_files = sorted(migrations_dir.glob("*.sql"))

    if not sql_files:
        logger.info("No migration files found")
        return

    logger.info("Running %d migration(s)", len(sql_files))

    for sql_file in sql_files:
        logger.info("Executing migration: %s", sql_file.name)
        try:
            sql_content = sql_file.read_text()

            with pool.connection() as conn:
                conn.execute(sql_content)
                conn.commit()

            logger.info("Migration complete: %s", sql_file.name)
        except psycopg.Error as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise StoreError(f"Database migration failed: {sql_file.name}") from e
