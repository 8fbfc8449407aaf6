"""
Tool: Neutral Language Filter
Purpose: Detect and reframe failure or deficiency language in absence and
experiment text

Gaps in a capacity record are not lapses. Words like "missed", "failed" or
"broke your streak" turn a neutral record into a judgment, and a judgment is
what makes people stop checking in. Every phrasing this package produces
must pass check_content; the CLI exposes the same check for copy written
elsewhere.

Usage:
    python -m capacity.cli check-language --content "Days missed: 12"

Examples:
    Input:  "Days missed: 12"
    Output: "Days without signals: 12"

    Input:  "Signals present on 72 of 90 days (80%)"
    Output: unchanged, is_safe=True

Dependencies:
    - pyyaml via capacity.config_models
    - re (pattern matching)

Output:
    dict results with success status, matches and filtered content
"""

from __future__ import annotations

import re
from typing import Any

from capacity.config_models import LanguageConfig, load_config

DEFAULT_BLOCKED_PHRASES = [
    "missed",
    "missing",
    "failed",
    "failure",
    "you forgot",
    "you didn't",
    "you haven't",
    "should have",
    "broke your streak",
    "lost your streak",
    "behind",
    "incomplete",
    "neglected",
    "lapse",
    "slacking",
    "not enough effort",
]

DEFAULT_REFRAMES = {
    "missed": "without signals",
    "missing": "without signals",
    "failed": "did not record",
    "you forgot": "there was no entry for",
    "broke your streak": "started a new stretch",
    "lost your streak": "started a new stretch",
    "behind": "in a different rhythm",
    "incomplete": "partial",
}

GENERIC_REFRAME = "no signals recorded"


def get_language_config(config: LanguageConfig | None = None) -> dict[str, Any]:
    """Blocked phrases and reframes, falling back to the built-in lists."""
    if config is None:
        config = load_config().language
    return {
        "enabled": config.enabled,
        "blocked_phrases": config.blocked_phrases or list(DEFAULT_BLOCKED_PHRASES),
        "reframe_patterns": config.reframe_patterns or dict(DEFAULT_REFRAMES),
    }


def _phrase_pattern(phrase: str) -> re.Pattern:
    return re.compile(rf"\b{re.escape(phrase)}\b", re.IGNORECASE)


def detect_blocked_phrases(content: str, config: LanguageConfig | None = None) -> list[dict[str, Any]]:
    """
    Detect all blocked phrases in content, whole words only.

    Returns:
        List of dicts with phrase, position, length and suggested reframe,
        sorted by position

    Examples:
        >>> detect_blocked_phrases("Days missed: 3")
        [{"phrase": "missed", "position": 5, "length": 6, "reframe": "without signals"}]
    """
    settings = get_language_config(config)
    if not settings["enabled"]:
        return []
    reframes = settings["reframe_patterns"]

    detections = []
    for phrase in settings["blocked_phrases"]:
        for match in _phrase_pattern(phrase).finditer(content):
            detections.append(
                {
                    "phrase": phrase,
                    "position": match.start(),
                    "length": len(match.group()),
                    "reframe": reframes.get(phrase.lower()),
                }
            )

    detections.sort(key=lambda d: d["position"])
    return detections


def reframe_content(
    content: str, config: LanguageConfig | None = None
) -> tuple[str, list[dict[str, Any]]]:
    """
    Replace blocked phrases with neutral alternatives.

    Longer phrases are replaced first so "broke your streak" wins over any
    shorter phrase inside it.

    Returns:
        Tuple of (reframed_content, list_of_changes)
    """
    settings = get_language_config(config)
    if not settings["enabled"]:
        return content, []
    reframes = settings["reframe_patterns"]

    changes = []
    result = content

    for phrase in sorted(settings["blocked_phrases"], key=len, reverse=True):
        reframe = reframes.get(phrase.lower(), GENERIC_REFRAME)
        for match in reversed(list(_phrase_pattern(phrase).finditer(result))):
            original = match.group()
            replacement = reframe.capitalize() if original[0].isupper() else reframe.lower()
            changes.append(
                {"original": original, "replacement": replacement, "position": match.start()}
            )
            result = result[: match.start()] + replacement + result[match.end():]

    changes.sort(key=lambda c: c["position"])
    return result, changes


def check_content(content: str, config: LanguageConfig | None = None) -> dict[str, Any]:
    """Check content without modifying it."""
    detections = detect_blocked_phrases(content, config)
    return {
        "success": True,
        "is_safe": not detections,
        "detections": detections,
        "phrase_count": len(detections),
    }


def filter_content(content: str, config: LanguageConfig | None = None) -> dict[str, Any]:
    filtered, changes = reframe_content(content, config)
    return {
        "success": True,
        "original": content,
        "filtered": filtered,
        "changes": changes,
        "was_modified": bool(changes),
    }


def is_neutral(content: str, config: LanguageConfig | None = None) -> bool:
    return not detect_blocked_phrases(content, config)
