"""Repository adapters - Database implementations."""

from .postgres import PostgresMetadataRepository, run_migrations

__all__ = ["PostgresMetadataRepository", "run_migrations"]
