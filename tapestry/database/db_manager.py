import sqlite3
from typing import Optional

from tapestry.database.repositories import CharacterRepository


class DBManager:
    """
    Database connection manager with repository-based access.

    Usage:
        with DBManager("tapestry.db") as db:
            db.create_tables()
            character = db.characters.get_by_id(character_id)
    """

    def __init__(self, db_path: str):
        self.db_path = db_path
        self.conn = None

        # Repositories (initialized in __enter__)
        self.characters: Optional[CharacterRepository] = None

    def __enter__(self):
        self.conn = sqlite3.connect(self.db_path, timeout=30.0)

        # WAL is not available for in-memory databases; sqlite ignores it there
        self.conn.execute("PRAGMA journal_mode=WAL;")
        self.conn.row_factory = sqlite3.Row

        self.characters = CharacterRepository(self.conn)

        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.conn:
            self.conn.close()
            self.conn = None

    def create_tables(self):
        """Initialize all database tables."""
        for repo in [self.characters]:
            if repo:
                repo.create_table()
