"""Country Roster Service for Atlas.

Loads the initial countries once and moves them between the active and the
removed collection on user action. Every identifier lives in exactly one of
the two collections.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional, Protocol, Sequence, Tuple

from atlas.shared.core import events
from atlas.shared.core.event_bus import EventBus, EventPayload
from atlas.shared.domain.models import Country, roster_ids
from atlas.shared.infrastructure.http.base import ServiceError

logger = logging.getLogger(__name__)


class CountryLookup(Protocol):
    async def lookup(self, name: str) -> Country: ...


class CountryRoster:
    """Active/removed country collections plus the expanded-card projection."""

    def __init__(
        self,
        event_bus: EventBus,
        client: CountryLookup,
        initial_names: Optional[Sequence[str]] = None,
    ):
        """Initialize the roster.

        Args:
            event_bus: Event bus used to announce loads and membership changes
            client: Country lookup adapter
            initial_names: Names looked up by ``load()`` when none are given
        """
        self.event_bus = event_bus
        self.client = client
        self.initial_names: List[str] = list(initial_names or [])
        self._active: List[Country] = []
        self._removed: List[Country] = []
        self._expanded: Optional[str] = None
        self.loaded = False

    # --- Queries ---

    @property
    def active(self) -> Tuple[Country, ...]:
        return tuple(self._active)

    @property
    def removed(self) -> Tuple[Country, ...]:
        return tuple(self._removed)

    @property
    def expanded(self) -> Optional[str]:
        return self._expanded

    def is_expanded(self, cca3: str) -> bool:
        return self._expanded == cca3

    def get(self, cca3: str) -> Optional[Country]:
        """Find a country in either collection."""
        for country in (*self._active, *self._removed):
            if country.cca3 == cca3:
                return country
        return None

    def snapshot(self) -> EventPayload:
        return {
            "active": roster_ids(self._active),
            "removed": roster_ids(self._removed),
            "expanded": self._expanded,
        }

    # --- Loading ---

    async def load(self, names: Optional[Iterable[str]] = None) -> List[Country]:
        """Look up every name concurrently and replace the roster with the results.

        Results keep request order. A name whose lookup fails is dropped and
        logged; an unexpected failure of the batch leaves the roster empty.

        Args:
            names: Display names to look up (defaults to ``initial_names``)

        Returns:
            The new active collection
        """
        requested = list(names) if names is not None else list(self.initial_names)
        logger.info(f"Loading {len(requested)} countries")

        self._active = []
        self._removed = []
        self._expanded = None

        try:
            outcomes = await asyncio.gather(
                *(self.client.lookup(name) for name in requested),
                return_exceptions=True,
            )
            countries, failed = self._collect(requested, outcomes)
        except Exception:
            logger.exception("Failed to load countries")
            countries, failed = [], list(requested)

        self._active = countries
        self.loaded = True
        logger.info(f"Roster loaded: {len(countries)} active, {len(failed)} dropped")

        await self.event_bus.publish(
            events.TOPIC_ROSTER_LOADED,
            events.create_roster_loaded_event(requested, roster_ids(countries), failed),
        )
        return list(self._active)

    def _collect(
        self,
        requested: List[str],
        outcomes: List[object],
    ) -> Tuple[List[Country], List[str]]:
        """Pair outcomes with their names, dropping lookup failures.

        Raises:
            Exception: The first outcome that is not a country nor a ServiceError
        """
        countries: List[Country] = []
        failed: List[str] = []
        seen: set[str] = set()

        for name, outcome in zip(requested, outcomes):
            if isinstance(outcome, ServiceError):
                logger.warning(f"Dropping {name!r}: {outcome}")
                failed.append(name)
            elif isinstance(outcome, BaseException):
                raise outcome
            elif outcome is None:
                logger.warning(f"Dropping {name!r}: no candidate")
                failed.append(name)
            elif outcome.cca3 in seen:
                logger.warning(f"Dropping {name!r}: {outcome.cca3} already in roster")
                failed.append(name)
            else:
                seen.add(outcome.cca3)
                countries.append(outcome)

        return countries, failed

    # --- User actions ---

    async def toggle_details(self, cca3: str) -> None:
        """Expand a country card, or collapse it if it is already expanded.

        At most one card is expanded; removed or unknown ids are ignored.
        """
        if not any(country.cca3 == cca3 for country in self._active):
            logger.debug(f"toggle_details ignored for inactive id {cca3}")
            return

        self._expanded = None if self._expanded == cca3 else cca3
        await self._publish_change("toggle", cca3)

    async def remove(self, cca3: str) -> bool:
        """Move a country from the active to the removed collection.

        Returns:
            True if something moved
        """
        country = self._pop(self._active, cca3)
        if country is None:
            return False

        self._removed.append(country)
        if self._expanded == cca3:
            self._expanded = None
        logger.info(f"Removed {cca3}")
        await self._publish_change("remove", cca3)
        return True

    async def restore(self, cca3: str) -> bool:
        """Move a country from the removed collection back to the active one.

        Returns:
            True if something moved
        """
        country = self._pop(self._removed, cca3)
        if country is None:
            return False

        self._active.append(country)
        logger.info(f"Restored {cca3}")
        await self._publish_change("restore", cca3)
        return True

    @staticmethod
    def _pop(collection: List[Country], cca3: str) -> Optional[Country]:
        for index, country in enumerate(collection):
            if country.cca3 == cca3:
                return collection.pop(index)
        return None

    async def _publish_change(self, action: str, cca3: str) -> None:
        await self.event_bus.publish(
            events.TOPIC_ROSTER_CHANGED,
            events.create_roster_changed_event(
                action,
                cca3,
                roster_ids(self._active),
                roster_ids(self._removed),
                self._expanded,
            ),
        )
