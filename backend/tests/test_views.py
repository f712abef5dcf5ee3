"""Tests for the pure view helpers used by the portal UI."""
from datetime import date, datetime, timezone, timedelta

import pytest
import pytz

from portal.client.views import (
    calendar_entries,
    compose_datetime,
    effective_status,
    events_by_day,
    is_today,
    partition,
)
from portal.models.participant import ParticipantStatus
from portal.schemas.event import EventDetailOut, EventOut, ParticipantOut

NOW = datetime(2025, 3, 12, 14, 0, tzinfo=timezone.utc)
ORGANIZER = {"user_id": "org-1", "first_name": "Olivia", "last_name": "Organizer", "email": "olivia@acme.io"}


def _event(event_id, start, hours=1, recording=None, organizer_id="org-1", **extra):
    return EventOut(
        event_id=event_id,
        title=event_id.title(),
        event_type=extra.pop("event_type", "team_meeting"),
        start_time=start,
        end_time=start + timedelta(hours=hours),
        is_mandatory=False,
        recording=recording,
        organizer_id=organizer_id,
        organizer=ORGANIZER,
        created_at=NOW,
        updated_at=NOW,
        **extra,
    )


def _ids(events):
    return [e.event_id for e in events]


class TestPartition:

    def test_scenario_buckets(self):
        """Today-ongoing, today-later, tomorrow, last week with a recording."""
        ongoing = _event("standup", NOW - timedelta(minutes=30))
        later = _event("retro", NOW + timedelta(hours=2))
        tomorrow = _event("planning", NOW + timedelta(days=1))
        last_week = _event("onboarding", NOW - timedelta(days=7),
                           recording={"url": "https://videos.acme.io/onboarding"})

        views = partition([tomorrow, last_week, later, ongoing], NOW)

        assert _ids(views.today) == ["standup", "retro"]
        assert _ids(views.upcoming) == ["planning"]
        assert _ids(views.previous) == ["onboarding"]
        assert _ids(views.recordings) == ["onboarding"]

    def test_buckets_are_disjoint(self):
        events = [_event(f"e{i}", NOW + timedelta(hours=h)) for i, h in enumerate(range(-72, 72, 5))]
        views = partition(events, NOW)
        buckets = [set(_ids(views.today)), set(_ids(views.upcoming)), set(_ids(views.previous))]
        for i, a in enumerate(buckets):
            for b in buckets[i + 1:]:
                assert not a & b

    def test_today_excludes_ended_events(self):
        morning = _event("morning", NOW.replace(hour=8))
        views = partition([morning], NOW)
        assert views.today == []
        assert _ids(views.previous) == ["morning"]

    def test_event_ending_exactly_now_is_in_no_time_bucket(self):
        boundary = _event("boundary", NOW - timedelta(hours=1))
        views = partition([boundary], NOW)
        assert views.today == [] and views.upcoming == [] and views.previous == []

    def test_running_event_from_yesterday(self):
        overnight = _event("overnight", NOW - timedelta(days=1), hours=30)
        views = partition([overnight], NOW)
        assert views.today == [] and views.upcoming == [] and views.previous == []

    def test_ordering(self):
        upcoming = [_event(f"u{d}", NOW + timedelta(days=d)) for d in (3, 1, 2)]
        previous = [_event(f"p{d}", NOW - timedelta(days=d)) for d in (2, 5, 1)]
        views = partition(upcoming + previous, NOW)
        assert _ids(views.upcoming) == ["u1", "u2", "u3"]
        assert _ids(views.previous) == ["p1", "p2", "p5"]

    def test_todays_meetings_capped(self):
        today = [_event(f"t{h}", NOW + timedelta(hours=h)) for h in (3, 1, 2)]
        views = partition(today, NOW)
        assert _ids(views.today) == ["t1", "t2", "t3"]
        assert _ids(views.todays_meetings) == ["t1", "t2"]
        assert _ids(partition(today, NOW, today_limit=1).todays_meetings) == ["t1"]

    def test_recordings_newest_first_and_independent(self):
        old = _event("old", NOW - timedelta(days=30), recording={"url": "https://v.acme.io/1"})
        recent = _event("recent", NOW - timedelta(days=2), recording={"url": "https://v.acme.io/2"})
        plain = _event("plain", NOW - timedelta(days=1))
        views = partition([old, plain, recent], NOW)
        assert _ids(views.recordings) == ["recent", "old"]
        assert _ids(views.previous) == ["plain", "recent", "old"]

    def test_naive_now_rejected(self):
        with pytest.raises(ValueError):
            partition([], datetime(2025, 3, 12, 14, 0))

    def test_same_input_same_output(self):
        events = [_event("a", NOW + timedelta(hours=1)), _event("b", NOW - timedelta(days=1))]
        assert partition(events, NOW) == partition(events, NOW)

    def test_today_follows_viewer_timezone(self):
        """23:30 UTC is already tomorrow in Berlin."""
        tz = pytz.timezone("Europe/Berlin")
        late = _event("late", datetime(2025, 3, 12, 23, 30, tzinfo=timezone.utc))
        utc_now = datetime(2025, 3, 12, 20, 0, tzinfo=timezone.utc)
        assert is_today(late, utc_now)
        assert not is_today(late, utc_now.astimezone(tz))
        assert _ids(partition([late], utc_now.astimezone(tz)).upcoming) == ["late"]


class TestEffectiveStatus:

    def test_organizer_counts_as_accepted(self):
        event = _event("kickoff", NOW + timedelta(days=1))
        assert effective_status(event, "org-1") is ParticipantStatus.accepted

    def test_list_row_uses_viewer_status(self):
        event = _event("kickoff", NOW + timedelta(days=1), participant_status="maybe")
        assert effective_status(event, "user-2") is ParticipantStatus.maybe

    def test_detail_searches_participants(self):
        base = _event("kickoff", NOW + timedelta(days=1))
        detail = EventDetailOut(**base.model_dump(), participants=[
            ParticipantOut(event_id="kickoff", user_id="user-2", status="declined"),
        ])
        assert effective_status(detail, "user-2") is ParticipantStatus.declined
        assert effective_status(detail, "user-3") is None

    def test_no_viewer(self):
        assert effective_status(_event("x", NOW), None) is None


class TestComposeDatetime:

    def test_utc_default(self):
        assert compose_datetime(date(2025, 3, 12), "09:30") == datetime(2025, 3, 12, 9, 30, tzinfo=pytz.utc)

    def test_localized_in_viewer_timezone(self):
        value = compose_datetime(date(2025, 7, 1), "09:00", "America/New_York")
        assert value.astimezone(timezone.utc) == datetime(2025, 7, 1, 13, 0, tzinfo=timezone.utc)

    def test_dst_offset_applied(self):
        winter = compose_datetime(date(2025, 1, 15), "09:00", "Europe/Berlin")
        summer = compose_datetime(date(2025, 7, 15), "09:00", "Europe/Berlin")
        assert winter.utcoffset() == timedelta(hours=1)
        assert summer.utcoffset() == timedelta(hours=2)

    def test_missing_timezone_means_utc(self):
        value = compose_datetime(date(2025, 3, 12), "09:30", None)
        assert value == datetime(2025, 3, 12, 9, 30, tzinfo=timezone.utc)
        assert partition([], value).today == []

    def test_bad_time(self):
        with pytest.raises(ValueError):
            compose_datetime(date(2025, 1, 15), "25:00")


class TestCalendar:

    def test_calendar_entries_sorted(self):
        events = [_event("b", NOW + timedelta(days=2)), _event("a", NOW + timedelta(days=1))]
        entries = calendar_entries(events)
        assert [e.event_id for e in entries] == ["a", "b"]
        assert entries[0].start == events[1].start_time
        assert entries[0].event_type == "team_meeting"

    def test_events_by_day_in_timezone(self):
        late = _event("late", datetime(2025, 3, 12, 23, 30, tzinfo=timezone.utc))
        early = _event("early", datetime(2025, 3, 12, 8, 0, tzinfo=timezone.utc))
        grouped = events_by_day([late, early], "Europe/Berlin")
        assert list(grouped) == [date(2025, 3, 12), date(2025, 3, 13)]
        assert _ids(grouped[date(2025, 3, 13)]) == ["late"]
