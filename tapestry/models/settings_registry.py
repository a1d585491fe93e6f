"""
Settings Registry
=================
Central list of game settings (worlds), so content filtering by setting
stays consistent.
"""

from enum import Enum
from typing import Dict, List, Optional


class GameSetting(str, Enum):
    WOVEN_REALMS = "woven-realms"
    CYBERPUNK = "cyberpunk"


SETTING_METADATA: Dict[GameSetting, Dict[str, str]] = {
    GameSetting.WOVEN_REALMS: {
        "display_name": "Woven Realms",
        "description": "A fantasy world of magic and mystery",
    },
    GameSetting.CYBERPUNK: {
        "display_name": "Cyberpunk 2080",
        "description": "A dystopian future of technology and corporate power",
    },
}


def get_all_settings() -> List[GameSetting]:
    return list(GameSetting)


def is_valid_setting(setting: str) -> bool:
    return setting in {s.value for s in GameSetting}


def get_setting_metadata(setting: str) -> Optional[Dict[str, str]]:
    """Display name and description, or None for an unknown setting."""
    try:
        return dict(SETTING_METADATA[GameSetting(setting)])
    except (ValueError, KeyError):
        return None
