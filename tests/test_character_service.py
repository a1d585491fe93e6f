import pytest
from pydantic import ValidationError

from tapestry.database.db_manager import DBManager
from tapestry.rules import RuleConfig, RuleValidationError
from tapestry.services.character_service import CharacterService, ServiceError, error_response

PLAYER = "player-1"
OTHER_PLAYER = "player-2"


@pytest.fixture
def db_manager(tmp_path):
    with DBManager(str(tmp_path / "tapestry.db")) as db:
        db.create_tables()
        yield db


@pytest.fixture
def service(db_manager):
    return CharacterService(db_manager)


@pytest.fixture
def character_data():
    return {
        "name": "Wren",
        "setting_key": "woven-realms",
        "sheet": {
            "aspects": {
                "might": {"strength": 3, "presence": 1},
                "finesse": {"agility": 2, "charm": 0},
                "wit": {"instinct": -1, "knowledge": 2},
                "resolve": {"willpower": 1, "empathy": 3},
            },
            "resources": {
                "hp": {"current": 20, "max": 20},
                "threads": {"current": 4, "max": 8},
            },
        },
    }


@pytest.fixture
def character(service, character_data):
    return service.create_character(PLAYER, character_data)


# --- create ---

def test_create_applies_rules(character):
    assert character.player_id == PLAYER
    assert character.sheet.resources.hp.max == 15
    assert character.sheet.resources.hp.current == 15
    assert character.sheet.resources.threads.max == 5
    assert character.sheet.resources.threads.current == 4


def test_create_persists(service, character):
    stored = service.get_character(character.id)
    assert stored == character


def test_create_initializes_missing_tracks(service):
    created = service.create_character(PLAYER, {"name": "Blank"})
    assert created.sheet.aspects.might.strength == 0
    assert created.sheet.resources.hp.model_dump() == {"current": 12, "max": 12, "temp": 0}
    assert created.sheet.resources.threads.model_dump() == {"current": 5, "max": 5, "temp": 0}


def test_create_rejects_out_of_range_aspect(service, character_data):
    character_data["sheet"]["aspects"]["wit"]["knowledge"] = 6
    with pytest.raises(RuleValidationError, match=r"wit\.knowledge value 6"):
        service.create_character(PLAYER, character_data)
    assert service.list_characters(PLAYER) == []


def test_create_requires_player(service, character_data):
    with pytest.raises(ServiceError, match="Player reference is required") as exc_info:
        service.create_character("", character_data)
    assert exc_info.value.status_code == 400


def test_create_rejects_unknown_setting(service, character_data):
    character_data["setting_key"] = "steampunk"
    with pytest.raises(ServiceError, match="Unknown setting 'steampunk'"):
        service.create_character(PLAYER, character_data)


def test_create_rejects_bad_schema(service, character_data):
    character_data["sheet"]["weave_level"] = 0
    with pytest.raises(ValidationError):
        service.create_character(PLAYER, character_data)


def test_create_uses_service_rules(db_manager, character_data):
    service = CharacterService(db_manager, rules=RuleConfig(base_hp=20))
    created = service.create_character(PLAYER, character_data)
    assert created.sheet.resources.hp.max == 23


@pytest.mark.parametrize(
    "sheet,message",
    [
        (None, "Field 'sheet' must be an object"),
        ({"resources": None}, "Field 'sheet.resources' must be an object"),
        ({"resources": {"hp": 20}}, "Field 'sheet.resources.hp' must be an object"),
    ],
)
def test_create_rejects_null_sheet_blocks(service, sheet, message):
    with pytest.raises(ServiceError, match=message) as exc_info:
        service.create_character(PLAYER, {"name": "Blank", "sheet": sheet})

    assert error_response(exc_info.value)[0] == 400
    assert service.list_characters(PLAYER) == []


# --- read ---

def test_get_unknown_character(service):
    with pytest.raises(ServiceError, match="Character not found") as exc_info:
        service.get_character("nope")
    assert exc_info.value.status_code == 404


def test_list_characters_by_player(service, character, character_data):
    service.create_character(OTHER_PLAYER, character_data)
    assert [c.id for c in service.list_characters(PLAYER)] == [character.id]


# --- update ---

def test_update_reapplies_rules(service, character):
    updated = service.update_character(
        character.id, PLAYER, {"sheet": {"aspects": {"might": {"strength": 0}}}}
    )

    assert updated.sheet.aspects.might.strength == 0
    assert updated.sheet.aspects.might.presence == 1
    assert updated.sheet.resources.hp.max == 12
    assert updated.sheet.resources.hp.current == 12
    assert service.get_character(character.id).sheet.resources.hp.max == 12


def test_update_rejects_out_of_range_and_keeps_stored_sheet(service, character):
    with pytest.raises(RuleValidationError):
        service.update_character(character.id, PLAYER, {"sheet": {"aspects": {"might": {"strength": 9}}}})
    assert service.get_character(character.id).sheet.aspects.might.strength == 3


def test_update_requires_ownership(service, character):
    with pytest.raises(ServiceError, match="You do not own this character") as exc_info:
        service.update_character(character.id, OTHER_PLAYER, {"name": "Thief"})
    assert exc_info.value.status_code == 403


def test_update_cannot_change_owner(service, character):
    with pytest.raises(ServiceError, match="player_id"):
        service.update_character(character.id, PLAYER, {"player_id": OTHER_PLAYER})


def test_update_clamps_threads(service, character):
    updated = service.update_character(
        character.id, PLAYER, {"sheet": {"resources": {"threads": {"current": 11, "temp": 9}}}}
    )
    assert updated.sheet.resources.threads.model_dump() == {"current": 5, "max": 5, "temp": 5}


@pytest.mark.parametrize(
    "updates,message",
    [
        ({"sheet": None}, "Field 'sheet' must be an object"),
        ({"sheet": {"resources": None}}, "Field 'sheet.resources' must be an object"),
        ({"sheet": {"aspects": {"might": [1]}}}, "Field 'sheet.aspects.might' must be an object"),
    ],
)
def test_update_rejects_null_sheet_blocks(service, character, updates, message):
    with pytest.raises(ServiceError, match=message) as exc_info:
        service.update_character(character.id, PLAYER, updates)

    assert exc_info.value.status_code == 400
    assert service.get_character(character.id).sheet == character.sheet


def test_update_with_null_family_is_a_rule_error(service, character):
    with pytest.raises(RuleValidationError, match="Aspect family 'might' is missing"):
        service.update_character(character.id, PLAYER, {"sheet": {"aspects": {"might": None}}})


# --- delete / fork / campaigns ---

def test_delete_is_soft(service, db_manager, character):
    service.delete_character(character.id, PLAYER)

    with pytest.raises(ServiceError, match="Character not found"):
        service.get_character(character.id)
    assert service.list_characters(PLAYER) == []
    assert db_manager.characters.get_by_id(character.id).meta.deleted_at is not None


def test_repository_delete_removes_row(service, db_manager, character):
    db_manager.characters.delete(character.id)

    assert db_manager.characters.get_by_id(character.id) is None
    with pytest.raises(ServiceError, match="Character not found"):
        service.get_character(character.id)


def test_fork_copies_sheet(service, character):
    service.join_campaign(character.id, PLAYER, "campaign-1")
    forked = service.fork_character(character.id, PLAYER)

    assert forked.id != character.id
    assert forked.name == "Wren (Copy)"
    assert forked.forked_from == character.id
    assert forked.campaign_id is None
    assert forked.sheet == service.get_character(character.id).sheet
    assert len(service.list_characters(PLAYER)) == 2


def test_fork_requires_ownership(service, character):
    with pytest.raises(ServiceError) as exc_info:
        service.fork_character(character.id, OTHER_PLAYER)
    assert exc_info.value.status_code == 403


def test_join_and_leave_campaign(service, character):
    joined = service.join_campaign(character.id, PLAYER, "campaign-1")
    assert joined.campaign_id == "campaign-1"
    assert service.get_character(character.id).campaign_id == "campaign-1"

    left = service.leave_campaign(character.id, PLAYER)
    assert left.campaign_id is None


def test_join_requires_campaign_id(service, character):
    with pytest.raises(ServiceError, match="Campaign ID is required"):
        service.join_campaign(character.id, PLAYER, "")


# --- error translation ---

def test_rule_errors_map_to_400(service, character_data):
    character_data["sheet"]["aspects"]["might"]["strength"] = 7
    with pytest.raises(RuleValidationError) as exc_info:
        service.create_character(PLAYER, character_data)

    status, body = error_response(exc_info.value)
    assert status == 400
    assert body["success"] is False
    assert "might.strength value 7" in body["message"]
    assert body["violations"][0]["field"] == "aspects.might.strength"


def test_schema_errors_map_to_400(service, character_data):
    character_data["name"] = ""
    with pytest.raises(ValidationError) as exc_info:
        service.create_character(PLAYER, character_data)

    status, body = error_response(exc_info.value)
    assert status == 400
    assert body["message"].startswith("name:")


def test_service_and_unexpected_errors():
    assert error_response(ServiceError("Character not found", 404)) == (
        404,
        {"success": False, "message": "Character not found"},
    )
    assert error_response(RuntimeError("boom")) == (500, {"success": False, "message": "boom"})
