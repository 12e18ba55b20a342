"""Canonical event definitions for Atlas."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Literal, Optional

from .event_bus import EventPayload

# Shell topics
TOPIC_LOGS_EVENT = "logs.event"
TOPIC_STATUS_TEXT = "status.text"
TOPIC_THEME_CHANGED = "theme.changed"

# Roster topics
TOPIC_ROSTER_LOADED = "roster.loaded"
TOPIC_ROSTER_CHANGED = "roster.changed"

# Converter topics
TOPIC_CONVERTER_CHANGED = "converter.changed"


def create_logs_event(
    message: str,
    level: Literal["info", "warning", "error", "success"] = "info",
    topic: str | None = None,
) -> EventPayload:
    """Create a log feed event."""
    return {
        "message": message,
        "level": level,
        "topic": topic,
        "ts": time.time(),
    }


def create_status_text_event(text: str) -> EventPayload:
    """Create a status text update event."""
    return {
        "text": text,
    }


def create_theme_changed_event(dark_mode: bool) -> EventPayload:
    return {
        "dark_mode": dark_mode,
    }


def create_roster_loaded_event(
    requested: List[str],
    loaded: List[str],
    failed: List[str],
) -> EventPayload:
    """Create a roster loaded event.

    Args:
        requested: Names that were looked up, in request order
        loaded: Identifiers that made it into the active collection
        failed: Names that produced no country
    """
    return {
        "requested": list(requested),
        "loaded": list(loaded),
        "failed": list(failed),
    }


def create_roster_changed_event(
    action: str,
    cca3: str,
    active: List[str],
    removed: List[str],
    expanded: Optional[str],
) -> EventPayload:
    """Create a roster changed event (remove, restore or toggle)."""
    return {
        "action": action,
        "cca3": cca3,
        "active": list(active),
        "removed": list(removed),
        "expanded": expanded,
    }


def create_converter_changed_event(state: Dict[str, Any], generation: int) -> EventPayload:
    """Create a converter changed event carrying a state snapshot."""
    return {
        **state,
        "generation": generation,
    }
