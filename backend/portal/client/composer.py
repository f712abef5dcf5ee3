"""Event View Composer — cached event reads, derived views and optimistic RSVP.

One fetched list feeds every view (today, upcoming, previous, recordings,
calendar). Writes invalidate the cached lists only after the server has
answered, so a successful mutation never leaves a stale view behind.
"""
import logging
from datetime import datetime
from typing import Any, Callable, Optional, Union

import pytz

from portal.client.api import EventsAPI
from portal.client.cache import QueryCache
from portal.client.errors import EventNotFound, EventsClientError
from portal.client.views import EventViews, TODAY_DISPLAY_LIMIT, partition
from portal.models.participant import ParticipantStatus
from portal.schemas.event import (
    EventCreate,
    EventDetailOut,
    EventFilters,
    EventOut,
    EventUpdate,
    ParticipantOut,
)
from portal.utils import utcnow

logger = logging.getLogger(__name__)

EVENTS = "events"
LIST = "list"
DETAIL = "detail"
UPCOMING = "upcoming"

LIST_STALE_SECONDS = 60.0
UPCOMING_STALE_SECONDS = 30.0


class EventViewComposer:
    def __init__(
        self,
        api: EventsAPI,
        viewer_id: Optional[str] = None,
        timezone: str = "UTC",
        cache: Optional[QueryCache] = None,
        clock: Callable[[], datetime] = utcnow,
        list_stale_seconds: float = LIST_STALE_SECONDS,
        upcoming_stale_seconds: float = UPCOMING_STALE_SECONDS,
    ):
        self.api = api
        self.viewer_id = viewer_id
        self.tz = pytz.timezone(timezone)
        self.cache = cache or QueryCache()
        self.clock = clock
        self.list_stale_seconds = list_stale_seconds
        self.upcoming_stale_seconds = upcoming_stale_seconds

    # ── Reads ───────────────────────────────────────────────────────

    def fetch(self, filters: Optional[EventFilters] = None) -> list[EventOut]:
        """Events matching ``filters``, served from cache while fresh."""
        filters = filters or EventFilters()
        key = (EVENTS, LIST, filters)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        events = self.api.list_events(filters)
        self.cache.set(key, events, self.list_stale_seconds)
        return events

    def get_event(self, event_id: str) -> Optional[EventDetailOut]:
        """Event detail, or None when the event does not exist (empty state)."""
        key = (EVENTS, DETAIL, event_id)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        try:
            event = self.api.get_event(event_id)
        except EventNotFound:
            logger.info("Event %s not found", event_id)
            return None
        self.cache.set(key, event, self.list_stale_seconds)
        return event

    def upcoming(self, limit: int = 5) -> list[EventOut]:
        """Sidebar widget data. Any failure degrades to an empty list."""
        key = (EVENTS, UPCOMING, limit)
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        try:
            events = self.api.upcoming(limit)
        except EventsClientError as exc:
            logger.warning("Failed to fetch upcoming events: %s", exc)
            return []
        self.cache.set(key, events, self.upcoming_stale_seconds)
        return events

    def views(
        self,
        filters: Optional[EventFilters] = None,
        now: Optional[datetime] = None,
        today_limit: int = TODAY_DISPLAY_LIMIT,
    ) -> EventViews:
        """Partition the (cached) list into the dashboard buckets."""
        now = (now or self.clock()).astimezone(self.tz)
        return partition(self.fetch(filters), now, today_limit=today_limit)

    # ── Writes ──────────────────────────────────────────────────────

    def create_event(self, payload: Union[EventCreate, dict[str, Any]]) -> EventDetailOut:
        if isinstance(payload, EventCreate):
            payload = payload.model_dump(mode="json", by_alias=True, exclude_none=True)
        event = self.api.create_event(payload)
        self._invalidate()
        return event

    def update_event(self, event_id: str, patch: Union[EventUpdate, dict[str, Any]]) -> EventDetailOut:
        if isinstance(patch, EventUpdate):
            patch = patch.model_dump(mode="json", exclude_unset=True)
        event = self.api.update_event(event_id, patch)
        self._invalidate()
        return event

    def add_participants(self, event_id: str, user_ids: list[str]) -> list[str]:
        added = self.api.add_participants(event_id, user_ids)
        self._invalidate()
        return added

    def delete_event(self, event_id: str, confirm: Callable[[], bool]) -> bool:
        """Delete after an explicit confirmation; returns False if the user backed out."""
        if not confirm():
            logger.info("Deletion of event %s cancelled by user", event_id)
            return False
        self.api.delete_event(event_id)
        self._invalidate()
        return True

    def mutate_rsvp(self, event_id: str, user_id: str, status: Any) -> ParticipantOut:
        """Optimistically set an RSVP, rolling the cache back if the call fails.

        On success every cached events query is invalidated and the ones that
        were cached are fetched again from the server.
        """
        status = ParticipantStatus(status)
        snapshot = self.cache.snapshot()
        self._apply_rsvp(event_id, user_id, status)
        try:
            participant = self.api.set_rsvp(event_id, user_id, status)
        except Exception:
            self.cache.restore(snapshot)
            logger.warning("RSVP %s for event %s failed; rolled back", status.value, event_id)
            raise
        self._refetch(self._invalidate())
        return participant

    # ── Internals ───────────────────────────────────────────────────

    def _invalidate(self) -> list[tuple]:
        return self.cache.invalidate((EVENTS,))

    def _refetch(self, keys: list[tuple]) -> None:
        for key in keys:
            kind, arg = key[1], key[2]
            try:
                if kind == LIST:
                    self.fetch(arg)
                elif kind == DETAIL:
                    self.get_event(arg)
                elif kind == UPCOMING:
                    self.upcoming(arg)
            except EventsClientError as exc:
                # Left invalidated; the next read goes to the server.
                logger.warning("Refetch of %s failed: %s", key, exc)

    def _apply_rsvp(self, event_id: str, user_id: str, status: ParticipantStatus) -> None:
        is_viewer = self.viewer_id is not None and self.viewer_id == user_id
        for key in self.cache.keys((EVENTS,)):
            value = self.cache.peek(key)
            if isinstance(value, list):
                self.cache.replace(key, [
                    event.model_copy(update={"participant_status": status})
                    if event.event_id == event_id and is_viewer and event.participant_status is not None
                    else event
                    for event in value
                ])
            elif isinstance(value, EventDetailOut) and value.event_id == event_id:
                participants = [
                    p.model_copy(update={"status": status}) if p.user_id == user_id else p
                    for p in value.participants
                ]
                update: dict[str, Any] = {"participants": participants}
                if is_viewer:
                    update["participant_status"] = status
                self.cache.replace(key, value.model_copy(update=update))
