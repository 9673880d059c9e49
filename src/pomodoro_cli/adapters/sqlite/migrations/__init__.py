"""Forward-only schema migrations for the session history database."""

from .m001_initial_schema import initial_migration
from .m002_in_progress_revision import in_progress_revision_migration
from .runner import Migration, MigrationRunner

MIGRATIONS: list[Migration] = [initial_migration, in_progress_revision_migration]

__all__ = ["MIGRATIONS", "Migration", "MigrationRunner"]
