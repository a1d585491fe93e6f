import copy
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError

from tapestry.database.db_manager import DBManager
from tapestry.models.character import Aspects, Character, apply_rule_data, to_rule_data
from tapestry.models.settings_registry import is_valid_setting
from tapestry.rules import ASPECT_FAMILIES, DEFAULT_RULES, RuleConfig, RuleValidationError, apply_character_rules

logger = logging.getLogger(__name__)

# Fields a caller may not overwrite through update_character
PROTECTED_FIELDS = ("id", "player_id", "created_at", "forked_from")


class ServiceError(Exception):
    """A request-level failure with the status code to report it under."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def error_response(error: Exception) -> Tuple[int, Dict[str, Any]]:
    """
    Translate an exception into (status_code, body).

    Rule and schema validation errors are client errors (400).
    """
    if isinstance(error, RuleValidationError):
        return 400, {"success": False, **error.to_dict()}
    if isinstance(error, ValidationError):
        messages = [f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in error.errors()]
        return 400, {"success": False, "message": ", ".join(messages) or "Validation Error"}
    if isinstance(error, ServiceError):
        return error.status_code, {"success": False, "message": error.message}
    return 500, {"success": False, "message": str(error) or "Server Error"}


def _deep_merge(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    """Merge updates into base. Nested dicts merge, everything else replaces."""
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = copy.deepcopy(value)
    return base


def _check_sheet_shape(data: Dict[str, Any]) -> None:
    """
    Reject sheet blocks that are present but not objects.

    sheet and sheet.resources may not be null. Aspect families and resource
    tracks may be null (the rules report or initialize them) but nothing
    else that isn't an object.
    """
    if "sheet" not in data:
        return
    sheet = data["sheet"]
    if not isinstance(sheet, dict):
        raise ServiceError("Field 'sheet' must be an object", 400)
    if "resources" in sheet and not isinstance(sheet["resources"], dict):
        raise ServiceError("Field 'sheet.resources' must be an object", 400)

    nested = {"sheet.aspects": sheet.get("aspects")}
    aspects = sheet.get("aspects")
    if isinstance(aspects, dict):
        for family in ASPECT_FAMILIES:
            nested[f"sheet.aspects.{family}"] = aspects.get(family)
    resources = sheet.get("resources") or {}
    for track in ("hp", "threads"):
        nested[f"sheet.resources.{track}"] = resources.get(track)

    for path, value in nested.items():
        if value is not None and not isinstance(value, dict):
            raise ServiceError(f"Field '{path}' must be an object", 400)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CharacterService:
    """
    Character sheet CRUD.

    Every create and update runs the sheet through the game rules before it
    is stored, so a persisted sheet always satisfies them.
    """

    def __init__(self, db_manager: DBManager, rules: Optional[RuleConfig] = None):
        self.db = db_manager
        self.rules = rules or DEFAULT_RULES

    # --- rules ---

    def _apply_rules(self, data: Dict[str, Any]) -> Character:
        """Run the rules over a character dict's sheet and build the model."""
        sheet = data.get("sheet") or {}
        data["sheet"] = sheet
        rule_data = to_rule_data(sheet)
        apply_character_rules(rule_data, self.rules)
        apply_rule_data(sheet, rule_data)
        return Character.model_validate(data)

    # --- lookups ---

    def get_character(self, character_id: str) -> Character:
        character = self.db.characters.get_by_id(character_id)
        if not character or character.meta.deleted_at:
            raise ServiceError("Character not found", 404)
        return character

    def _get_owned(self, character_id: str, player_id: str) -> Character:
        character = self.get_character(character_id)
        if character.player_id != player_id:
            raise ServiceError("You do not own this character", 403)
        return character

    def list_characters(self, player_id: str, include_archived: bool = False) -> List[Character]:
        return self.db.characters.get_by_player(player_id, include_archived=include_archived)

    # --- writes ---

    def create_character(self, player_id: str, data: Dict[str, Any]) -> Character:
        """
        Create a character for a player.

        A missing aspect block or sub-aspect defaults to 0. Missing hp or
        threads tracks are initialized by the rules (12 HP, 5 threads).

        Raises:
            ServiceError: 400 without a player or with an unknown setting
            RuleValidationError: If the aspects break the rules
        """
        if not player_id:
            raise ServiceError("Player reference is required", 400)

        setting_key = data.get("setting_key")
        if setting_key and not is_valid_setting(setting_key):
            raise ServiceError(f"Unknown setting '{setting_key}'", 400)
        _check_sheet_shape(data)

        payload = copy.deepcopy(data)
        payload.pop("id", None)
        payload["player_id"] = player_id

        sheet = payload.get("sheet") or {}
        payload["sheet"] = sheet
        sheet["aspects"] = Aspects.model_validate(sheet.get("aspects") or {}).model_dump()

        character = self._apply_rules(payload)
        self.db.characters.insert(character)
        logger.info(f"Created character '{character.name}' ({character.id}) for player {player_id}")
        return character

    def update_character(self, character_id: str, player_id: str, updates: Dict[str, Any]) -> Character:
        """
        Apply a partial update and re-run the rules.

        Nested dicts in ``updates`` merge into the stored character; lists and
        scalars replace.
        """
        existing = self._get_owned(character_id, player_id)

        for field in PROTECTED_FIELDS:
            if field in updates:
                raise ServiceError(f"Cannot change character field '{field}'", 400)

        setting_key = updates.get("setting_key")
        if setting_key and not is_valid_setting(setting_key):
            raise ServiceError(f"Unknown setting '{setting_key}'", 400)
        _check_sheet_shape(updates)

        merged = _deep_merge(existing.model_dump(mode="json"), updates)
        merged["updated_at"] = _now()

        character = self._apply_rules(merged)
        self.db.characters.update(character)
        logger.info(f"Updated character {character_id}")
        return character

    def delete_character(self, character_id: str, player_id: str) -> Character:
        """Soft delete: the row stays, marked with meta.deleted_at."""
        character = self._get_owned(character_id, player_id)
        character.meta.deleted_at = _now()
        character.updated_at = character.meta.deleted_at
        self.db.characters.update(character)
        logger.info(f"Deleted character {character_id}")
        return character

    def fork_character(self, character_id: str, player_id: str) -> Character:
        """Copy a character. The copy starts outside any campaign."""
        original = self._get_owned(character_id, player_id)

        data = original.model_dump(exclude={"id", "created_at", "updated_at"})
        data.update(
            {
                "forked_from": original.id,
                "campaign_id": None,
                "name": f"{original.name} (Copy)",
            }
        )
        forked = Character.model_validate(data)
        self.db.characters.insert(forked)
        logger.info(f"Forked character {original.id} -> {forked.id}")
        return forked

    def join_campaign(self, character_id: str, player_id: str, campaign_id: str) -> Character:
        """
        Point a character at a campaign.

        Checking that the player belongs to the campaign is up to the caller.
        """
        if not campaign_id:
            raise ServiceError("Campaign ID is required", 400)
        character = self._get_owned(character_id, player_id)
        character.campaign_id = campaign_id
        character.updated_at = _now()
        self.db.characters.update(character)
        logger.info(f"Character {character_id} joined campaign {campaign_id}")
        return character

    def leave_campaign(self, character_id: str, player_id: str) -> Character:
        character = self._get_owned(character_id, player_id)
        previous = character.campaign_id
        character.campaign_id = None
        character.updated_at = _now()
        self.db.characters.update(character)
        if previous:
            logger.info(f"Character {character_id} left campaign {previous}")
        return character
