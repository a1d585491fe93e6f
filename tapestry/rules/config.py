"""Rule configuration loaded from environment variables."""

import logging
import os
from typing import Mapping, Optional

from tapestry.rules.types import RuleConfig

logger = logging.getLogger(__name__)

# Environment variable -> RuleConfig field
ENV_VARS = {
    "TAPESTRY_ASPECT_MIN": "aspect_min",
    "TAPESTRY_ASPECT_MAX": "aspect_max",
    "TAPESTRY_THREADS_MIN": "threads_min",
    "TAPESTRY_THREADS_MAX": "threads_max",
    "TAPESTRY_BASE_HP": "base_hp",
}


def load_rule_config(env: Optional[Mapping[str, str]] = None) -> RuleConfig:
    """
    Build a RuleConfig from environment overrides.

    Call ``load_dotenv()`` first if the values live in a .env file.

    Args:
        env: Mapping to read instead of os.environ

    Raises:
        ValueError: If a variable is set to something other than an integer,
            or the resulting bounds are inverted.
    """
    if env is None:
        env = os.environ

    overrides = {}
    for var, field in ENV_VARS.items():
        raw = env.get(var)
        if raw is None or raw.strip() == "":
            continue
        try:
            overrides[field] = int(raw.strip())
        except ValueError:
            raise ValueError(f"{var} must be an integer, got '{raw}'") from None

    if overrides:
        logger.info(f"Rule overrides from environment: {overrides}")

    return RuleConfig(**overrides)
