"""SQLite persistence for edges and people."""
from __future__ import annotations

from .database import Database
from .edges import DuplicateEdgeError, EdgeStore, SQLiteEdgeStore
from .people import SQLitePersonDirectory

__all__ = [
    "Database",
    "EdgeStore",
    "SQLiteEdgeStore",
    "DuplicateEdgeError",
    "SQLitePersonDirectory",
]
