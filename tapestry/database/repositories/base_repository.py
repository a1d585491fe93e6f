"""Base repository for SQLite-backed storage."""

from abc import ABC, abstractmethod
import sqlite3
from typing import List, Optional


class BaseRepository(ABC):
    """Shared query helpers for repositories on a single connection."""

    def __init__(self, connection: sqlite3.Connection):
        self.conn = connection

    @abstractmethod
    def create_table(self):
        """Create this repository's table(s) and indexes if missing."""
        pass

    def _execute(self, query: str, params: tuple = ()) -> sqlite3.Cursor:
        return self.conn.execute(query, params)

    def _fetchone(self, query: str, params: tuple = ()) -> Optional[sqlite3.Row]:
        return self._execute(query, params).fetchone()

    def _fetchall(self, query: str, params: tuple = ()) -> List[sqlite3.Row]:
        return self._execute(query, params).fetchall()

    def _commit(self):
        self.conn.commit()
