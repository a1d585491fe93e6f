"""
Threads rules.

Threads are a fixed-range (0-5) narrative pool. Unlike HP they do not
scale with any aspect.
"""

from tapestry.rules.types import DEFAULT_RULES, CharacterRuleData, RuleConfig


def _clamp(value: int, rules: RuleConfig) -> int:
    return max(rules.threads_min, min(rules.threads_max, value))


def enforce_threads_range(character: CharacterRuleData, rules: RuleConfig = DEFAULT_RULES) -> None:
    """
    Clamp threads.current, threads.max and threads.temp into range.

    A missing threads track starts full. A missing max counts as full, a
    missing current as empty. temp is only clamped when present.
    """
    threads = character.get("threads")
    if threads is None:
        character["threads"] = {
            "current": rules.threads_max,
            "max": rules.threads_max,
            "temp": 0,
        }
        return

    max_threads = threads.get("max")
    threads["max"] = _clamp(rules.threads_max if max_threads is None else max_threads, rules)

    current = threads.get("current")
    threads["current"] = _clamp(0 if current is None else current, rules)

    if threads.get("temp") is not None:
        threads["temp"] = _clamp(threads["temp"], rules)
