"""
Aspect range validation.

Sub-aspects have a legal range of -2 to +4 for direct character edits.
Values outside that range can come from status effects, but a character
sheet edit that stores one is rejected.
"""

import logging
from numbers import Real
from typing import Any, List, Tuple

from tapestry.rules.types import (
    ASPECT_FAMILIES,
    DEFAULT_RULES,
    CharacterRuleData,
    RuleConfig,
    RuleValidationError,
    RuleViolation,
)

logger = logging.getLogger(__name__)


def _is_number(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _collect_values(character: CharacterRuleData) -> List[Tuple[str, str, Any]]:
    """
    Check that every family and sub-aspect is present.

    Stops at the first missing piece. Returns (family, sub_aspect, value)
    triples in check order.
    """
    aspects = character.get("aspects")
    if aspects is None:
        raise RuleValidationError("Character aspects are missing or undefined")

    values = []
    for family, sub_aspects in ASPECT_FAMILIES.items():
        family_data = aspects.get(family)
        if family_data is None:
            raise RuleValidationError(f"Aspect family '{family}' is missing")

        for sub_aspect in sub_aspects:
            value = family_data.get(sub_aspect)
            if value is None:
                raise RuleValidationError(
                    f"Sub-aspect '{family}.{sub_aspect}' is missing or undefined"
                )
            values.append((family, sub_aspect, value))

    return values


def validate_aspect_ranges(character: CharacterRuleData, rules: RuleConfig = DEFAULT_RULES) -> None:
    """
    Validate that all eight sub-aspects are within the legal range.

    Families and their sub-aspects:
    - Might: strength, presence
    - Finesse: agility, charm
    - Wit: instinct, knowledge
    - Resolve: willpower, empathy

    The optional ``aspects.extra`` bucket is not checked.

    Args:
        character: Character rule data containing ``aspects``
        rules: Bounds to validate against

    Raises:
        RuleValidationError: On the first structural gap, or once with every
            range violation if all values are present.
    """
    violations: List[RuleViolation] = []

    for family, sub_aspect, value in _collect_values(character):
        if not _is_number(value):
            message = f"{family}.{sub_aspect} value {value!r} is not a number"
        elif rules.aspect_min <= value <= rules.aspect_max:
            continue
        else:
            message = (
                f"{family}.{sub_aspect} value {value} is outside the legal range "
                f"({rules.aspect_min} to {rules.aspect_max})"
            )

        violations.append(
            RuleViolation(
                field=f"aspects.{family}.{sub_aspect}",
                value=value,
                expected_min=rules.aspect_min,
                expected_max=rules.aspect_max,
                message=message,
            )
        )

    if violations:
        logger.debug(f"Aspect validation found {len(violations)} violation(s)")
        error_messages = "; ".join(v.message for v in violations)
        raise RuleValidationError(f"Aspect validation failed: {error_messages}", violations)


def get_aspect_range_description(rules: RuleConfig = DEFAULT_RULES) -> str:
    """Human-readable description of the aspect range."""
    return f"Aspects must be between {rules.aspect_min} and {rules.aspect_max} (inclusive)"
