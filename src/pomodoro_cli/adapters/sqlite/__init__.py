"""SQLite adapter backing the session history."""

from .connection import open_connection

__all__ = ["open_connection"]
