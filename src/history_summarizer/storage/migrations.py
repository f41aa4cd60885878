"""Schema migrations for the summary cache database."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Migration:
    """A single schema migration."""

    version: int
    name: str
    statements: list[str]


MIGRATION_001_INITIAL = Migration(
    version=1,
    name="initial_schema",
    statements=[
        """
        CREATE TABLE schema_version (
            version INTEGER PRIMARY KEY,
            applied_at TEXT NOT NULL
        )
        """,
        """
        CREATE TABLE block_summary (
            hash TEXT PRIMARY KEY,
            summary TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """,
    ],
)

# Exports list entries oldest first
MIGRATION_002_UPDATED_INDEX = Migration(
    version=2,
    name="add_updated_at_index",
    statements=[
        "CREATE INDEX idx_block_summary_updated ON block_summary(updated_at)",
    ],
)

ALL_MIGRATIONS: list[Migration] = [
    MIGRATION_001_INITIAL,
    MIGRATION_002_UPDATED_INDEX,
]


def get_all_migrations() -> list[Migration]:
    """Return all migrations in version order."""
    return ALL_MIGRATIONS
