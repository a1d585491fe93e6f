"""
Character snapshots for campaigns.

A snapshot is a deep copy of a character taken when it enters a campaign, so
the campaign keeps that state even if the player edits the sheet later.
"""

import copy
from datetime import datetime, timezone
from typing import Any, Dict, List

from tapestry.models.character import Character


def _character_data(character: Any) -> Dict[str, Any]:
    if isinstance(character, Character):
        return character.model_dump(mode="json")
    return copy.deepcopy(dict(character))


def create_snapshot(character: Any) -> Dict[str, Any]:
    """
    Snapshot a character.

    Args:
        character: A Character model or a plain character dict

    Returns:
        Dict with the character/player ids, snapshot date, name and full data.
    """
    data = _character_data(character)
    return {
        "character_id": data.get("id"),
        "player_id": data.get("player_id"),
        "snapshot_date": datetime.now(timezone.utc),
        "name": data.get("name"),
        "data": data,
    }


def update_snapshot(snapshot: Dict[str, Any], character: Any) -> Dict[str, Any]:
    """Re-sync a snapshot mid-campaign, keeping the previous data."""
    data = _character_data(character)
    updated = dict(snapshot)
    updated.update(
        {
            "snapshot_date": datetime.now(timezone.utc),
            "name": data.get("name"),
            "data": data,
            "previous_snapshot": snapshot.get("data"),
        }
    )
    return updated


def _flatten(data: Any, prefix: str = "") -> Dict[str, Any]:
    if isinstance(data, dict) and data:
        flat = {}
        for key, value in data.items():
            path = f"{prefix}.{key}" if prefix else str(key)
            flat.update(_flatten(value, path))
        return flat
    return {prefix: data}


def _changed_fields(old: Dict[str, Any], new: Dict[str, Any]) -> List[str]:
    old_flat = _flatten(old or {})
    new_flat = _flatten(new or {})
    missing = object()
    return sorted(
        path
        for path in set(old_flat) | set(new_flat)
        if old_flat.get(path, missing) != new_flat.get(path, missing)
    )


def compare_snapshots(old_snapshot: Dict[str, Any], new_snapshot: Dict[str, Any]) -> Dict[str, Any]:
    """
    Describe what changed between two snapshots.

    Returns:
        changed: True if the snapshot dates or any data differ
        date_diff: Seconds between the two snapshots
        changed_fields: Sorted dot-paths whose values differ, e.g.
            ['sheet.aspects.might.strength', 'sheet.resources.hp.max']
    """
    changed_fields = _changed_fields(old_snapshot.get("data"), new_snapshot.get("data"))
    date_diff = (new_snapshot["snapshot_date"] - old_snapshot["snapshot_date"]).total_seconds()
    return {
        "changed": bool(changed_fields) or old_snapshot["snapshot_date"] != new_snapshot["snapshot_date"],
        "date_diff": date_diff,
        "changed_fields": changed_fields,
    }
