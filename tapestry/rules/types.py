"""
Rule Types
==========
Constants, configuration and error types shared by the character rules.

Character rule data is a plain dictionary (an open record):

    {
        "aspects": {"might": {"strength": 2, "presence": 0}, ...},
        "hp": {"current": 14, "max": 14, "temp": 0},
        "threads": {"current": 5, "max": 5},
        ...anything else passes through untouched
    }
"""

from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


# =============================================================================
# CONSTANTS
# =============================================================================

ASPECT_MIN = -2
ASPECT_MAX = 4
THREADS_MIN = 0
THREADS_MAX = 5
BASE_HP = 12

# Family -> sub-aspects, in the order they are checked
ASPECT_FAMILIES: Dict[str, Tuple[str, str]] = {
    "might": ("strength", "presence"),
    "finesse": ("agility", "charm"),
    "wit": ("instinct", "knowledge"),
    "resolve": ("willpower", "empathy"),
}

CharacterRuleData = Dict[str, Any]


# =============================================================================
# CONFIG
# =============================================================================

class RuleConfig(BaseModel):
    """
    Numeric bounds for the rules engine.

    Immutable; pass a custom instance to any rule function to override the
    defaults (e.g. for a variant ruleset).
    """

    model_config = ConfigDict(frozen=True)

    aspect_min: int = Field(default=ASPECT_MIN, description="Lowest legal sub-aspect value.")
    aspect_max: int = Field(default=ASPECT_MAX, description="Highest legal sub-aspect value.")
    threads_min: int = Field(default=THREADS_MIN, description="Threads floor.")
    threads_max: int = Field(default=THREADS_MAX, description="Threads cap, also the default pool.")
    base_hp: int = Field(default=BASE_HP, description="Max HP before Might [Strength] is added.")

    @model_validator(mode="after")
    def _check_bounds(self) -> "RuleConfig":
        if self.aspect_min > self.aspect_max:
            raise ValueError(
                f"aspect_min ({self.aspect_min}) cannot exceed aspect_max ({self.aspect_max})"
            )
        if self.threads_min > self.threads_max:
            raise ValueError(
                f"threads_min ({self.threads_min}) cannot exceed threads_max ({self.threads_max})"
            )
        return self


DEFAULT_RULES = RuleConfig()


# =============================================================================
# ERRORS
# =============================================================================

class RuleViolation(BaseModel):
    """A single out-of-range (or non-numeric) sub-aspect."""

    field: str = Field(..., description="Dot path, e.g. 'aspects.might.strength'.")
    value: Any
    expected_min: int
    expected_max: int
    message: str


class RuleValidationError(ValueError):
    """
    Raised when character data breaks a rule.

    Structural problems (missing aspects, family or sub-aspect) carry no
    violations; range problems carry every violation found.
    """

    status_code = 400

    def __init__(self, message: str, violations: Optional[List[RuleViolation]] = None):
        super().__init__(message)
        self.message = message
        self.violations = list(violations or [])

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "violations": [v.model_dump() for v in self.violations],
        }
