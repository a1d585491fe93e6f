"""
Character sheet models.

Canonical aspects per the Player's Guide:
    Might [Strength], Might [Presence]
    Finesse [Agility], Finesse [Charm]
    Wit [Instinct], Wit [Knowledge]
    Resolve [Willpower], Resolve [Empathy]
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ResourceTrack(BaseModel):
    current: int = 0
    max: int = 0
    temp: int = 0


# --- Aspects ---

class MightAspects(BaseModel):
    strength: int = 0
    presence: int = 0


class FinesseAspects(BaseModel):
    agility: int = 0
    charm: int = 0


class WitAspects(BaseModel):
    instinct: int = 0
    knowledge: int = 0


class ResolveAspects(BaseModel):
    willpower: int = 0
    empathy: int = 0


class Aspects(BaseModel):
    might: MightAspects = Field(default_factory=MightAspects)
    finesse: FinesseAspects = Field(default_factory=FinesseAspects)
    wit: WitAspects = Field(default_factory=WitAspects)
    resolve: ResolveAspects = Field(default_factory=ResolveAspects)
    extra: Dict[str, int] = Field(
        default_factory=dict,
        description="Escape hatch for modules that add sub-aspects. Not range-checked.",
    )


# --- Sheet contents ---

class Resources(BaseModel):
    hp: ResourceTrack = Field(default_factory=ResourceTrack)
    threads: ResourceTrack = Field(default_factory=ResourceTrack)
    resolve: ResourceTrack = Field(default_factory=ResourceTrack)
    other: Dict[str, int] = Field(default_factory=dict)


class ConditionInstance(BaseModel):
    key: str = Field(..., description="Condition key, e.g. 'poisoned', 'exposed'.")
    stacks: int = 1
    applied_at: datetime = Field(default_factory=_now)
    expires_at: Optional[datetime] = None
    source: Optional[str] = Field(default=None, description="Narrative reference or source key.")
    notes: Optional[str] = None


class InventoryItem(BaseModel):
    item_key: Optional[str] = Field(default=None, description="Content key, e.g. 'wr:longbow'.")
    source_id: Optional[str] = Field(default=None, description="e.g. 'core', 'woven-realms'.")
    name: Optional[str] = Field(default=None, description="Freeform fallback when there is no item_key.")
    qty: int = Field(default=1, ge=0)
    tags: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


class CharacterSheet(BaseModel):
    archetype_key: Optional[str] = None
    weave_level: int = Field(default=1, ge=1)
    aspects: Aspects = Field(default_factory=Aspects)
    skills: Dict[str, int] = Field(default_factory=dict)
    features: List[str] = Field(default_factory=list)
    resources: Resources = Field(default_factory=Resources)
    conditions: List[ConditionInstance] = Field(default_factory=list)
    inventory: List[InventoryItem] = Field(default_factory=list)
    notes: str = ""


class CharacterMeta(BaseModel):
    last_played_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None


class Character(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    player_id: str = Field(..., description="Owning player profile.")
    campaign_id: Optional[str] = None
    name: str = Field(..., min_length=1)
    avatar_url: Optional[str] = None
    forked_from: Optional[str] = Field(default=None, description="Original sheet if this is a copy.")
    status: Literal["active", "archived"] = "active"
    tags: List[str] = Field(default_factory=list)

    setting_key: Optional[str] = Field(default=None, description="e.g. 'woven-realms'.")
    tone_modules: List[str] = Field(default_factory=list)
    ruleset_version: int = 1

    sheet: CharacterSheet = Field(default_factory=CharacterSheet)
    meta: CharacterMeta = Field(default_factory=CharacterMeta)

    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


def _resources(sheet: Dict[str, Any]) -> Dict[str, Any]:
    # A null resources block is treated as empty
    resources = sheet.get("resources") or {}
    sheet["resources"] = resources
    return resources


def to_rule_data(sheet: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build the rules-engine record for a dumped sheet.

    The returned dict shares the sheet's nested aspect and resource dicts, so
    changes made by the rules land in the sheet. A sheet without resources
    gets an empty one so initialized tracks have somewhere to go.
    """
    resources = _resources(sheet)
    rule_data = {
        "aspects": sheet.get("aspects"),
        "hp": resources.get("hp"),
        "threads": resources.get("threads"),
    }
    return rule_data


def apply_rule_data(sheet: Dict[str, Any], rule_data: Dict[str, Any]) -> None:
    """Write tracks the rules initialized back into the sheet."""
    resources = _resources(sheet)
    resources["hp"] = rule_data["hp"]
    resources["threads"] = rule_data["threads"]
