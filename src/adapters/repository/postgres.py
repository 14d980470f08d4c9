"""
PostgreSQL repository adapter - Implements MetadataRepository protocol.

This module provides the PostgreSQL implementation of the domain's
metadata port using psycopg3 with raw SQL.

Records move forward only: PENDING (prepared, may be overwritten by a newer
preparation) -> MINTED (confirmed on-chain, never overwritten). The guard
lives in the upsert's WHERE clause, so concurrent preparations cannot
replace a minted record.
"""

import logging
from pathlib import Path
from typing import Any

from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

logger = logging.getLogger(__name__)


class PostgresMetadataRepository:
    """
    Implements MetadataRepository protocol via psycopg3.

    Uses structural subtyping - no explicit inheritance from Protocol.
    All SQL uses parameterized queries.
    """

    def __init__(self, pool: ConnectionPool) -> None:
        """
        Initialize repository with connection pool.

        Args:
            pool: psycopg3 ConnectionPool for database connections
        """
        self._pool = pool

    def save_pending(self, domain: str, owner: str, metadata: dict[str, Any]) -> bool:
        """
        Atomically store prepared metadata for a domain.

        Uses INSERT ... ON CONFLICT DO UPDATE WHERE for atomic upsert.
        The WHERE clause ensures MINTED records are never overwritten.

        Returns:
            True if stored, False if the domain is already minted
        """
        sql = """
            INSERT INTO domain_metadata (domain, owner, metadata, state, created_at, updated_at)
            VALUES (%s, %s, %s, 'PENDING', NOW(), NOW())
            ON CONFLICT (domain) DO UPDATE
            SET owner = EXCLUDED.owner,
                metadata = EXCLUDED.metadata,
                updated_at = NOW()
            WHERE domain_metadata.state = 'PENDING'
        """

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (domain, owner, Jsonb(metadata)))
            conn.commit()
            return cursor.rowcount == 1

    def mark_minted(self, domain: str, transaction_hash: str, metadata: dict[str, Any]) -> None:
        """Record a confirmed mint, replacing the prepared metadata."""
        sql = """
            INSERT INTO domain_metadata
                (domain, owner, metadata, state, transaction_hash, created_at, updated_at, minted_at)
            VALUES (%s, %s, %s, 'MINTED', %s, NOW(), NOW(), NOW())
            ON CONFLICT (domain) DO UPDATE
            SET metadata = EXCLUDED.metadata,
                state = 'MINTED',
                transaction_hash = EXCLUDED.transaction_hash,
                updated_at = NOW(),
                minted_at = NOW()
            WHERE domain_metadata.state = 'PENDING'
        """
        owner = _owner_from(metadata)

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (domain, owner, Jsonb(metadata), transaction_hash))
            conn.commit()
            if cursor.rowcount != 1:
                logger.warning("Mint for %s not recorded: domain already minted", domain)

    def get_metadata(self, domain: str) -> dict[str, Any] | None:
        sql = "SELECT metadata FROM domain_metadata WHERE domain = %s"

        with self._pool.connection() as conn, conn.cursor() as cursor:
            cursor.execute(sql, (domain,))
            row = cursor.fetchone()
            return row[0] if row is not None else None


def _owner_from(metadata: dict[str, Any]) -> str:
    for attribute in metadata.get("attributes", []):
        if attribute.get("trait_type") == "Owner":
            return str(attribute.get("value", ""))
    return ""


def run_migrations(pool: ConnectionPool) -> None:
    """
    Execute all SQL migration files from the migrations directory.

    Migrations are executed in sorted order (alphabetically by filename).
    Each migration should be idempotent (use IF NOT EXISTS, etc.).

    Args:
        pool: psycopg3 ConnectionPool instance
    """
    # Structure: src/adapters/repository/postgres.py -> migrations/
    migrations_dir = Path(__file__).parent.parent.parent.parent / "migrations"

    if not migrations_dir.exists():
        logger.warning("Migrations directory not found: %s", migrations_dir)
        return

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

            logger.info("Migration complete: %s", sql_file.name)
        except Exception as e:
            logger.error("Migration failed: %s - %s", sql_file.name, e)
            raise RuntimeError(f"Database migration failed: {sql_file.name}") from e
