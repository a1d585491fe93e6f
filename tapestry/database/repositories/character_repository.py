"""Repository for character sheets."""

from typing import List, Optional

from tapestry.models.character import Character
from .base_repository import BaseRepository


class CharacterRepository(BaseRepository):
    """Stores each character as a JSON document with indexed lookup columns."""

    def create_table(self):
        self._execute(
            """CREATE TABLE IF NOT EXISTS characters (
                   id TEXT PRIMARY KEY,
                   player_id TEXT NOT NULL,
                   campaign_id TEXT,
                   status TEXT NOT NULL DEFAULT 'active',
                   name TEXT NOT NULL,
                   data TEXT NOT NULL,
                   deleted INTEGER NOT NULL DEFAULT 0,
                   updated_at TEXT NOT NULL
               )"""
        )
        self._execute(
            "CREATE INDEX IF NOT EXISTS idx_characters_player ON characters(player_id, status, updated_at);"
        )
        self._execute(
            "CREATE INDEX IF NOT EXISTS idx_characters_campaign ON characters(campaign_id, player_id, status);"
        )
        self._commit()

    def insert(self, character: Character) -> Character:
        """Insert a new character."""
        self._execute(
            """INSERT INTO characters (id, player_id, campaign_id, status, name, data, deleted, updated_at)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            self._row_params(character),
        )
        self._commit()
        return character

    def update(self, character: Character) -> Character:
        """Overwrite an existing character."""
        cursor = self._execute(
            """UPDATE characters
               SET player_id = ?, campaign_id = ?, status = ?, name = ?, data = ?,
                   deleted = ?, updated_at = ?
               WHERE id = ?""",
            self._row_params(character)[1:] + (character.id,),
        )
        self._commit()
        if cursor.rowcount == 0:
            raise ValueError(f"Character '{character.id}' does not exist.")
        return character

    def get_by_id(self, character_id: str) -> Optional[Character]:
        """Load a character by id, soft-deleted ones included."""
        row = self._fetchone("SELECT data FROM characters WHERE id = ?", (character_id,))
        if row:
            return Character.model_validate_json(row["data"])
        return None

    def get_by_player(self, player_id: str, include_archived: bool = False) -> List[Character]:
        """A player's live sheets, newest first."""
        query = "SELECT data FROM characters WHERE player_id = ? AND deleted = 0"
        if not include_archived:
            query += " AND status = 'active'"
        query += " ORDER BY updated_at DESC"
        rows = self._fetchall(query, (player_id,))
        return [Character.model_validate_json(row["data"]) for row in rows]

    def delete(self, character_id: str):
        """Hard delete. The service soft-deletes through meta.deleted_at instead."""
        self._execute("DELETE FROM characters WHERE id = ?", (character_id,))
        self._commit()

    @staticmethod
    def _row_params(character: Character) -> tuple:
        return (
            character.id,
            character.player_id,
            character.campaign_id,
            character.status,
            character.name,
            character.model_dump_json(),
            1 if character.meta.deleted_at else 0,
            character.updated_at.isoformat(),
        )
