"""Persistent term index."""

from .store import DB_FILE, IndexStore

__all__ = ["IndexStore", "DB_FILE"]
