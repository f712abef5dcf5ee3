"""Derived views over a fetched event list.

Everything here is a pure function of its inputs; the current time is
always passed in so the same list and ``now`` give the same buckets.
"""
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime, time, tzinfo
from typing import Iterable, Optional, Sequence, Union

import pytz

from portal.models.participant import ParticipantStatus
from portal.schemas.event import EventOut

TODAY_DISPLAY_LIMIT = 2


@dataclass
class EventViews:
    """The portal's view buckets for one ``now``.

    ``today``, ``upcoming`` and ``previous`` never share an event;
    ``recordings`` may repeat events from ``previous``.
    """

    today: list[EventOut] = field(default_factory=list)
    upcoming: list[EventOut] = field(default_factory=list)
    previous: list[EventOut] = field(default_factory=list)
    recordings: list[EventOut] = field(default_factory=list)
    today_limit: int = TODAY_DISPLAY_LIMIT

    @property
    def todays_meetings(self) -> list[EventOut]:
        """Today's meetings capped for the dashboard card."""
        return self.today[:self.today_limit]


@dataclass(frozen=True)
class CalendarEntry:
    event_id: str
    title: str
    start: datetime
    end: datetime
    event_type: str
    event: EventOut


def _resolve_tz(tz: Union[str, tzinfo, None]) -> Optional[tzinfo]:
    if isinstance(tz, str):
        return pytz.timezone(tz)
    return tz


def _local(value: datetime, tz: Optional[tzinfo]) -> datetime:
    return value.astimezone(tz) if tz is not None else value


def is_today(event: EventOut, now: datetime) -> bool:
    """Starts on now's calendar day (in now's timezone) and has not ended."""
    start_local = event.start_time.astimezone(now.tzinfo)
    return start_local.date() == now.date() and event.end_time > now


def partition(
    events: Iterable[EventOut],
    now: datetime,
    today_limit: int = TODAY_DISPLAY_LIMIT,
) -> EventViews:
    """Split one event list into today / upcoming / previous / recordings.

    ``now`` must be timezone-aware; its timezone decides what "today" means.
    Events that started before today and are still running land in none of
    the three time buckets.
    """
    if now.tzinfo is None:
        raise ValueError("now must be timezone-aware")

    views = EventViews(today_limit=today_limit)
    for event in events:
        if is_today(event, now):
            views.today.append(event)
        elif event.start_time >= now:
            views.upcoming.append(event)
        elif event.end_time < now:
            views.previous.append(event)
        if event.recording is not None:
            views.recordings.append(event)

    views.today.sort(key=lambda e: e.start_time)
    views.upcoming.sort(key=lambda e: e.start_time)
    views.previous.sort(key=lambda e: e.start_time, reverse=True)
    views.recordings.sort(key=lambda e: e.start_time, reverse=True)
    return views


def effective_status(event: EventOut, user_id: Optional[str]) -> Optional[ParticipantStatus]:
    """The viewer's RSVP as the UI should show it.

    The organizer counts as going whether or not they hold a participant row.
    List rows only carry the status of the user who fetched them, so pass
    that same user for an ``EventOut``; details are searched by ``user_id``.
    """
    if user_id is None:
        return None
    if event.organizer_id == user_id:
        return ParticipantStatus.accepted
    participants = getattr(event, "participants", None)
    if participants is not None:
        for participant in participants:
            if participant.user_id == user_id:
                return participant.status
        return None
    return event.participant_status


def compose_datetime(day: date, hhmm: str, tz: Union[str, tzinfo, None] = "UTC") -> datetime:
    """Combine a picked calendar day with an "HH:MM" time in the viewer's timezone.

    The result is always timezone-aware; no timezone means UTC.
    """
    hours, minutes = (int(part) for part in hhmm.split(":"))
    naive = datetime.combine(day, time(hours, minutes))
    zone = _resolve_tz(tz) or pytz.utc
    if hasattr(zone, "localize"):
        return zone.localize(naive)
    return naive.replace(tzinfo=zone)


def calendar_entries(events: Iterable[EventOut]) -> list[CalendarEntry]:
    """Adapt events to the (id, title, start, end) shape calendar widgets expect."""
    return [
        CalendarEntry(
            event_id=event.event_id,
            title=event.title,
            start=event.start_time,
            end=event.end_time,
            event_type=event.event_type.value,
            event=event,
        )
        for event in sorted(events, key=lambda e: e.start_time)
    ]


def events_by_day(
    events: Sequence[EventOut],
    tz: Union[str, tzinfo, None] = None,
) -> dict[date, list[EventOut]]:
    """Group events by the local calendar day they start on, days in order."""
    zone = _resolve_tz(tz)
    grouped: dict[date, list[EventOut]] = defaultdict(list)
    for event in sorted(events, key=lambda e: e.start_time):
        grouped[_local(event.start_time, zone).date()].append(event)
    return dict(sorted(grouped.items()))
