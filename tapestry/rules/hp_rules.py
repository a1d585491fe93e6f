"""
HP (Health Points) rules.

Max HP = 12 + Might [Strength]. Current HP never exceeds max and never
drops below zero.
"""

import math

from tapestry.rules.types import DEFAULT_RULES, CharacterRuleData, RuleConfig


def calculate_max_hp(character: CharacterRuleData, rules: RuleConfig = DEFAULT_RULES) -> int:
    """Base HP plus strength, with a missing strength counted as 0."""
    might = (character.get("aspects") or {}).get("might") or {}
    strength = might.get("strength")
    if strength is None:
        strength = 0
    return rules.base_hp + strength


def adjust_current_hp(character: CharacterRuleData, rules: RuleConfig = DEFAULT_RULES) -> None:
    """
    Clamp current HP into [0, max].

    When max drops (strength loss) current follows it down, but only if it
    was higher. A missing hp track is initialized to the flat base value.

    Examples:
    - max 12 -> 8, current 9 -> current 8
    - max 12 -> 10, current 8 -> current stays 8
    """
    hp = character.get("hp")
    if hp is None:
        character["hp"] = {"current": rules.base_hp, "max": rules.base_hp, "temp": 0}
        return

    current = hp.get("current")
    # None and NaN both count as no HP left
    if current is None or (isinstance(current, float) and math.isnan(current)):
        current = 0
    max_hp = hp.get("max")

    if max_hp is not None and current > max_hp:
        current = max_hp

    if current < 0:
        current = 0

    hp["current"] = current


def apply_hp_rules(character: CharacterRuleData, rules: RuleConfig = DEFAULT_RULES) -> None:
    """Recalculate max HP from strength, then clamp current."""
    # A character without an hp track gets the flat default, strength is not applied
    if character.get("hp") is not None:
        character["hp"]["max"] = calculate_max_hp(character, rules)
    adjust_current_hp(character, rules)
