import json
import logging
import os
import sys

from dotenv import load_dotenv

from tapestry.rules import RuleValidationError, apply_character_rules
from tapestry.rules.config import load_rule_config
from tapestry.utils.logger_config import setup_logging

logger = logging.getLogger(__name__)


def main(argv=None) -> int:
    """Apply the character rules to a JSON file and print the result."""
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) != 1:
        print("Usage: python main.py <character.json>", file=sys.stderr)
        return 2

    load_dotenv()
    setup_logging(os.environ.get("TAPESTRY_LOG_LEVEL", "INFO").upper())

    try:
        with open(argv[0], encoding="utf-8") as f:
            character = json.load(f)
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.error(f"Could not read character file '{argv[0]}': {e}")
        return 1

    if not isinstance(character, dict):
        logger.error(f"Character file '{argv[0]}' must hold a JSON object")
        return 1

    try:
        apply_character_rules(character, load_rule_config())
    except RuleValidationError as e:
        logger.error(e.message)
        return 1

    print(json.dumps(character, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
