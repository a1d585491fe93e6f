"""
Game Rules Package
==================
Rule enforcement for the Tapestry game system, applied on every character
create and update.

Rules enforced, in order:
1. Aspect range: every sub-aspect within -2 to +4 (rejects the edit)
2. HP max: 12 + Might [Strength]
3. HP current: clamped to [0, max]
4. Threads: current, max and temp clamped to 0-5

Usage:
    from tapestry.rules import apply_character_rules
    character = apply_character_rules(character_data)
"""

import logging

from tapestry.rules.types import (
    ASPECT_FAMILIES,
    ASPECT_MAX,
    ASPECT_MIN,
    BASE_HP,
    DEFAULT_RULES,
    THREADS_MAX,
    THREADS_MIN,
    CharacterRuleData,
    RuleConfig,
    RuleValidationError,
    RuleViolation,
)
from tapestry.rules.aspect_rules import validate_aspect_ranges, get_aspect_range_description
from tapestry.rules.hp_rules import calculate_max_hp, adjust_current_hp, apply_hp_rules
from tapestry.rules.threads_rules import enforce_threads_range

logger = logging.getLogger(__name__)


def apply_character_rules(
    character: CharacterRuleData, rules: RuleConfig = DEFAULT_RULES
) -> CharacterRuleData:
    """
    Apply all game rules to a character, in place.

    Args:
        character: Character rule data (aspects, hp, threads, ...)
        rules: Bounds to enforce

    Returns:
        The same dictionary, modified.

    Raises:
        RuleValidationError: If aspects fail validation. hp and threads are
            left untouched in that case.

    Example:
        character = {
            "aspects": {"might": {"strength": 4, "presence": 2}, ...},
            "hp": {"current": 15, "max": 15},
            "threads": {"current": 3, "max": 5},
        }
        apply_character_rules(character)["hp"]["max"]  # 16
    """
    validate_aspect_ranges(character, rules)
    apply_hp_rules(character, rules)
    enforce_threads_range(character, rules)

    logger.debug(f"Character rules applied: hp={character['hp']} threads={character['threads']}")
    return character


__all__ = [
    "apply_character_rules",
    # Types and constants
    "ASPECT_FAMILIES",
    "ASPECT_MIN",
    "ASPECT_MAX",
    "THREADS_MIN",
    "THREADS_MAX",
    "BASE_HP",
    "DEFAULT_RULES",
    "CharacterRuleData",
    "RuleConfig",
    "RuleValidationError",
    "RuleViolation",
    # Individual rules
    "validate_aspect_ranges",
    "get_aspect_range_description",
    "calculate_max_hp",
    "adjust_current_hp",
    "apply_hp_rules",
    "enforce_threads_range",
]
