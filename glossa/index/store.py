"""
Term index backed by SQLite.

Tables:
- glossary_sources: one row per materialized glossary source, unique on path
- terms: term entries, each pointing at the source row that contributed it

The store is only ever used through :meth:`IndexStore.open`, which commits on
success and always closes the connection.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Set, Union

from glossa.core.glossary import Glossary, GlossarySource, TermEntry

logger = logging.getLogger(__name__)

DB_FILE = "index.sqlite3"

_ENCODINGS = {
    "utf8": "UTF-8",
    "utf-8": "UTF-8",
    "utf16": "UTF-16",
    "utf-16": "UTF-16",
}

_TERM_COLUMNS = """
    t.source_term, t.target_term, t.note,
    s.glossary_name, s.source_language, s.target_language
"""


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class IndexStore:
    """
    Persistent term index keyed by source term.

    Example:
        >>> with IndexStore.open("~/.glossa/db", "utf8") as store:
        ...     store.recreate_schema()
        ...     store.index_glossary(source.glossary, source)
        ...     hits = store.lookup("build", source.glossary)
    """

    def __init__(self, connection: sqlite3.Connection):
        self._conn = connection

    @staticmethod
    def db_file(path: Union[str, Path]) -> Path:
        return Path(path).expanduser() / DB_FILE

    @classmethod
    def exists(cls, path: Union[str, Path]) -> bool:
        """Whether an index has ever been built under ``path``."""
        return cls.db_file(path).exists()

    @classmethod
    @contextmanager
    def open(cls, path: Union[str, Path], encoding: str = "utf8") -> Iterator["IndexStore"]:
        """
        Open the index stored under directory ``path``.

        Args:
            path: Index directory (created if missing)
            encoding: Text encoding of a newly created database

        Yields:
            IndexStore bound to an open connection
        """
        sqlite_encoding = _ENCODINGS.get(encoding.lower())
        if sqlite_encoding is None:
            raise ValueError(f"Unsupported index encoding: {encoding}")

        db_file = cls.db_file(path)
        db_file.parent.mkdir(parents=True, exist_ok=True)

        conn = sqlite3.connect(str(db_file))
        try:
            conn.execute(f"PRAGMA encoding = '{sqlite_encoding}'")
            conn.execute("PRAGMA foreign_keys = ON")
            yield cls(conn)
            conn.commit()
        finally:
            conn.close()

    def recreate_schema(self) -> None:
        """Create missing tables and indices. Existing data is kept."""
        cursor = self._conn.cursor()

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS glossary_sources (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                path TEXT UNIQUE NOT NULL,
                glossary_name TEXT NOT NULL,
                source_language TEXT NOT NULL,
                target_language TEXT NOT NULL,
                indexed_at REAL NOT NULL
            )
        """
        )
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS terms (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                source_id INTEGER NOT NULL
                    REFERENCES glossary_sources(id) ON DELETE CASCADE,
                source_term TEXT NOT NULL,
                target_term TEXT NOT NULL,
                note TEXT NOT NULL DEFAULT ''
            )
        """
        )

        cursor.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_terms_source_term ON terms(source_term)
        """
        )
        cursor.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_terms_source_id ON terms(source_id)
        """
        )
        cursor.execute(
            """
            CREATE INDEX IF NOT EXISTS idx_sources_glossary
            ON glossary_sources(glossary_name, source_language, target_language)
        """
        )

    def _source_id(self, source: GlossarySource) -> Optional[int]:
        row = self._conn.execute(
            """
            SELECT id FROM glossary_sources
            WHERE path = ? AND glossary_name = ?
              AND source_language = ? AND target_language = ?
        """,
            (
                source.path,
                source.glossary.name,
                source.glossary.source_language,
                source.glossary.target_language,
            ),
        ).fetchone()
        return row[0] if row else None

    def glossary_source_indexed(self, source: GlossarySource) -> bool:
        return self._source_id(source) is not None

    def index_glossary(self, glossary: Glossary, source: GlossarySource) -> int:
        """
        Add all term entries of ``source`` under ``glossary``.

        A source that is already indexed is replaced.

        Returns:
            Number of term entries indexed
        """
        entries = source.entries()
        self.deindex_glossary(glossary, source)

        cursor = self._conn.execute(
            """
            INSERT INTO glossary_sources
            (path, glossary_name, source_language, target_language, indexed_at)
            VALUES (?, ?, ?, ?, ?)
        """,
            (
                source.path,
                glossary.name,
                glossary.source_language,
                glossary.target_language,
                time.time(),
            ),
        )
        source_id = cursor.lastrowid
        self._conn.executemany(
            """
            INSERT INTO terms (source_id, source_term, target_term, note)
            VALUES (?, ?, ?, ?)
        """,
            [(source_id, e.source_term, e.target_term, e.note) for e in entries],
        )
        logger.debug(f"Indexed {len(entries)} terms from {source.path}")
        return len(entries)

    def deindex_glossary(self, glossary: Glossary, source: GlossarySource) -> None:
        """Remove ``source`` and every term entry it contributed."""
        self._conn.execute(
            """
            DELETE FROM terms WHERE source_id IN (
                SELECT id FROM glossary_sources
                WHERE path = ? AND glossary_name = ?
                  AND source_language = ? AND target_language = ?
            )
        """,
            (source.path, glossary.name, glossary.source_language, glossary.target_language),
        )
        self._conn.execute(
            """
            DELETE FROM glossary_sources
            WHERE path = ? AND glossary_name = ?
              AND source_language = ? AND target_language = ?
        """,
            (source.path, glossary.name, glossary.source_language, glossary.target_language),
        )

    def indexed_sources(self) -> Set[GlossarySource]:
        rows = self._conn.execute(
            """
            SELECT path, glossary_name, source_language, target_language
            FROM glossary_sources
        """
        ).fetchall()
        return {GlossarySource(path, Glossary(name, src, tgt)) for path, name, src, tgt in rows}

    def lookup(self, term: str, glossary: Glossary) -> List[TermEntry]:
        """Partial match on source terms within one glossary."""
        rows = self._conn.execute(
            f"""
            SELECT {_TERM_COLUMNS}
            FROM terms t JOIN glossary_sources s ON t.source_id = s.id
            WHERE s.glossary_name = ?
              AND s.source_language = ? AND s.target_language = ?
              AND t.source_term LIKE ? ESCAPE '\\'
            ORDER BY t.source_term, t.target_term, t.id
        """,
            (
                glossary.name,
                glossary.source_language,
                glossary.target_language,
                _like_pattern(term),
            ),
        ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def lookup_dictionary(self, term: str) -> List[TermEntry]:
        """Partial match on source or target terms across every glossary."""
        pattern = _like_pattern(term)
        rows = self._conn.execute(
            f"""
            SELECT {_TERM_COLUMNS}
            FROM terms t JOIN glossary_sources s ON t.source_id = s.id
            WHERE t.source_term LIKE ? ESCAPE '\\'
               OR t.target_term LIKE ? ESCAPE '\\'
            ORDER BY t.source_term, t.target_term, s.glossary_name, t.id
        """,
            (pattern, pattern),
        ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    @staticmethod
    def _row_to_entry(row) -> TermEntry:
        source_term, target_term, note, name, src, tgt = row
        return TermEntry(source_term, target_term, note, Glossary(name, src, tgt))


__all__ = ["IndexStore", "DB_FILE"]
