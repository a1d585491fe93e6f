from tapestry.models.character import (
    Aspects,
    Character,
    CharacterMeta,
    CharacterSheet,
    ConditionInstance,
    InventoryItem,
    ResourceTrack,
    Resources,
)
from tapestry.models.settings_registry import GameSetting

__all__ = [
    "Aspects",
    "Character",
    "CharacterMeta",
    "CharacterSheet",
    "ConditionInstance",
    "InventoryItem",
    "ResourceTrack",
    "Resources",
    "GameSetting",
]
