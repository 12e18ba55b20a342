"""Application Shell State Management.

Holds the presentation-only state of the dashboard (theme flag, status line,
log feed) and keeps it in sync with roster and converter events.
"""

from __future__ import annotations

import time
from collections import deque
from typing import Any, Deque, Dict, List

from atlas.shared.core import events
from atlas.shared.core.event_bus import EventBus, EventPayload


class AppState:
    """State for the dashboard shell.

    Subscribes to EventBus topics and updates plain attributes that the
    rendering layer reads on every pass.
    """

    def __init__(self, event_bus: EventBus, dark_mode: bool = False, log_feed_size: int = 100) -> None:
        """Initialize application state.

        Args:
            event_bus: The shared event bus
            dark_mode: Initial theme flag
            log_feed_size: Maximum number of entries kept in the log feed
        """
        self.bus = event_bus

        # Theme is a single flag; the renderer derives colors from it
        self.dark_mode: bool = dark_mode

        self.is_ready: bool = False
        self.status_text: str = "Loading countries..."

        # Log entries (each is a dict: {message, level, ts})
        self.logs: Deque[Dict[str, Any]] = deque(maxlen=log_feed_size)

        self._started = False

    async def initialize(self) -> None:
        """Bind to EventBus events. Safe to call more than once."""
        if self._started:
            return

        await self.bus.subscribe(events.TOPIC_ROSTER_LOADED, self._handle_roster_loaded)
        await self.bus.subscribe(events.TOPIC_ROSTER_CHANGED, self._handle_roster_changed)
        await self.bus.subscribe(events.TOPIC_CONVERTER_CHANGED, self._handle_converter_changed)
        await self.bus.subscribe(events.TOPIC_STATUS_TEXT, self._handle_status_text)
        await self.bus.subscribe(events.TOPIC_LOGS_EVENT, self._handle_log_event)

        self._started = True
        self.is_ready = True

    # --- Public Actions ---

    async def toggle_theme(self) -> bool:
        """Flip the theme flag and announce it.

        Returns:
            The new value of the flag
        """
        self.dark_mode = not self.dark_mode
        await self.bus.publish(
            events.TOPIC_THEME_CHANGED,
            events.create_theme_changed_event(self.dark_mode),
        )
        return self.dark_mode

    async def push_status(self, text: str) -> None:
        await self.bus.publish(events.TOPIC_STATUS_TEXT, events.create_status_text_event(text))

    def push_log(self, message: str, level: str = "info", topic: str | None = None) -> None:
        """Append a log entry to the feed."""
        self.logs.append({"message": message, "level": level, "topic": topic, "ts": time.time()})

    def recent_logs(self, limit: int = 20) -> List[Dict[str, Any]]:
        """Newest entries first."""
        return list(reversed(self.logs))[:limit]

    # --- Event Handlers ---

    async def _handle_roster_loaded(self, payload: EventPayload) -> None:
        loaded = payload.get("loaded", [])
        failed = payload.get("failed", [])
        self.status_text = f"{len(loaded)} countries loaded"
        self.push_log(self.status_text, "success", events.TOPIC_ROSTER_LOADED)
        if failed:
            self.push_log(f"Not found: {', '.join(failed)}", "warning", events.TOPIC_ROSTER_LOADED)

    async def _handle_roster_changed(self, payload: EventPayload) -> None:
        action = payload.get("action")
        if action in ("remove", "restore"):
            self.push_log(f"{action}: {payload.get('cca3')}", "info", events.TOPIC_ROSTER_CHANGED)

    async def _handle_converter_changed(self, payload: EventPayload) -> None:
        if payload.get("status") == "error":
            self.push_log(
                f"{payload.get('source')} -> {payload.get('target')}: {payload.get('error')}",
                "error",
                events.TOPIC_CONVERTER_CHANGED,
            )

    async def _handle_status_text(self, payload: EventPayload) -> None:
        text = payload.get("text")
        if text:
            self.status_text = str(text)

    async def _handle_log_event(self, payload: EventPayload) -> None:
        if payload:
            self.logs.append(payload)
