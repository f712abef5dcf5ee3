"""Core event store — persistence, organizer authorization and RSVP transitions.

Responsibilities:
- Invariants: non-empty title, end after start, known event type,
  recordings only on events that have ended
- Authorization hook: only the organizer may update/delete
- Participant rows: idempotent invites, pending → {accepted, declined, maybe}
- Enriched reads: organizer summary, participant count, viewer status
"""
import logging
from datetime import datetime
from typing import Any, Iterable, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased, selectinload

from portal.utils import as_utc, utcnow
from portal.errors import Forbidden, NotFound, ValidationError
from portal.models.event import Event, EventType
from portal.models.participant import EventParticipant, ParticipantStatus, RESPONSE_STATUSES
from portal.models.user import User
from portal.schemas.event import EventDetailOut, EventFilters, EventOut, ParticipantOut

logger = logging.getLogger(__name__)

# Fields a patch may not clear with an explicit null.
REQUIRED_FIELDS = ("title", "start_time", "end_time", "event_type", "is_mandatory")
EDITABLE_FIELDS = (
    "title", "description", "event_type", "start_time", "end_time", "location",
    "meeting_link", "is_mandatory", "max_participants",
)


# ── Validation ──────────────────────────────────────────────────────

def _validate_event(event: Event, now: datetime) -> None:
    """Check the invariants that hold for every persisted event."""
    if not event.title or not event.title.strip():
        raise ValidationError("Title must not be empty")
    if event.end_time <= event.start_time:
        raise ValidationError("End time must be after start time")
    if event.max_participants is not None and event.max_participants < 1:
        raise ValidationError("Capacity must be at least 1")
    if event.recording_url and event.end_time > now:
        raise ValidationError("A recording can only be attached once the event has ended")


def _coerce_event_type(value: Any) -> EventType:
    try:
        return EventType(value)
    except ValueError:
        raise ValidationError(f"Unknown event type: {value}") from None


def _apply_recording(event: Event, recording: Optional[dict[str, Any]]) -> None:
    if recording is None:
        event.recording_url = None
        event.recording_thumbnail_url = None
        event.recording_duration_seconds = None
        return
    event.recording_url = recording.get("url")
    event.recording_thumbnail_url = recording.get("thumbnail_url")
    event.recording_duration_seconds = recording.get("duration_seconds")


def _check_authorization(event: Event, actor_user_id: str) -> None:
    """Only the organizer may update or delete an event."""
    if event.organizer_id != actor_user_id:
        logger.info("User %s denied mutation of event %s (organizer %s)",
                    actor_user_id, event.event_id, event.organizer_id)
        raise Forbidden("Only the organizer may modify this event")


def _load_event(db: Session, event_id: str) -> Event:
    event = db.get(Event, event_id)
    if not event:
        raise NotFound("Event not found")
    return event


def _distinct_user_ids(db: Session, user_ids: Iterable[str]) -> list[str]:
    """Collapse duplicates (keeping order) and make sure every id is a real user."""
    unique = list(dict.fromkeys(user_ids))
    if not unique:
        return []
    known = set(db.scalars(select(User.user_id).where(User.user_id.in_(unique))))
    missing = [uid for uid in unique if uid not in known]
    if missing:
        raise ValidationError({"message": "Unknown user ids", "user_ids": missing})
    return unique


def _insert_participants(db: Session, event_id: str, user_ids: list[str]) -> list[str]:
    """Insert pending rows for users not yet invited; returns the newly invited ids."""
    existing = set(db.scalars(
        select(EventParticipant.user_id).where(
            EventParticipant.event_id == event_id,
            EventParticipant.user_id.in_(user_ids),
        )
    ))
    new_ids = [uid for uid in user_ids if uid not in existing]
    if not new_ids:
        return []

    rows = [
        {"event_id": event_id, "user_id": uid, "status": ParticipantStatus.pending}
        for uid in new_ids
    ]
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = pg_insert(EventParticipant).values(rows).on_conflict_do_nothing()
    elif dialect == "sqlite":
        stmt = sqlite_insert(EventParticipant).values(rows).on_conflict_do_nothing()
    else:
        for row in rows:
            db.add(EventParticipant(**row))
        db.flush()
        return new_ids
    db.execute(stmt)
    return new_ids


# ── Enrichment ──────────────────────────────────────────────────────

def _viewer_status(event: Event, viewer_id: Optional[str]) -> Optional[ParticipantStatus]:
    for participant in event.participants:
        if participant.user_id == viewer_id:
            return participant.status
    return None


def _to_detail(event: Event, viewer_id: Optional[str] = None) -> EventDetailOut:
    detail = EventDetailOut.model_validate(event)
    participants = sorted(
        detail.participants,
        key=lambda p: (p.user.last_name, p.user.first_name) if p.user else ("", ""),
    )
    return detail.model_copy(update={
        "participants": participants,
        "participant_count": len(participants),
        "participant_status": _viewer_status(event, viewer_id),
        "is_organizer": viewer_id is not None and event.organizer_id == viewer_id,
    })


def _enriched_query(db: Session, viewer_id: Optional[str]):
    """Select (Event, participant_count, viewer_status) rows."""
    counts = (
        select(EventParticipant.event_id, func.count().label("participant_count"))
        .group_by(EventParticipant.event_id)
        .subquery()
    )
    viewer_row = aliased(EventParticipant)
    query = (
        db.query(Event, func.coalesce(counts.c.participant_count, 0), viewer_row.status)
        .outerjoin(counts, counts.c.event_id == Event.event_id)
        .outerjoin(
            viewer_row,
            (viewer_row.event_id == Event.event_id) & (viewer_row.user_id == viewer_id),
        )
    )
    return query


def _to_out(row, viewer_id: Optional[str]) -> EventOut:
    event, participant_count, viewer_status = row
    return EventOut.model_validate(event).model_copy(update={
        "participant_count": participant_count,
        "participant_status": viewer_status,
        "is_organizer": viewer_id is not None and event.organizer_id == viewer_id,
    })


def _involving_user(user_id: str):
    invited = select(EventParticipant.event_id).where(EventParticipant.user_id == user_id)
    return or_(Event.organizer_id == user_id, Event.event_id.in_(invited))


# ── Queries ─────────────────────────────────────────────────────────

def list_events(
    db: Session,
    filters: Optional[EventFilters] = None,
    viewer_id: Optional[str] = None,
) -> list[EventOut]:
    """List enriched events matching every supplied filter, earliest first."""
    filters = filters or EventFilters()
    query = _enriched_query(db, viewer_id)
    if filters.event_type is not None:
        query = query.filter(Event.event_type == filters.event_type)
    if filters.start_date is not None:
        query = query.filter(Event.start_time >= filters.start_date)
    if filters.end_date is not None:
        query = query.filter(Event.end_time <= filters.end_date)
    if filters.user_id is not None:
        query = query.filter(_involving_user(filters.user_id))
    rows = query.order_by(Event.start_time, Event.event_id).all()
    return [_to_out(row, viewer_id) for row in rows]


def get_event(db: Session, event_id: str, viewer_id: Optional[str] = None) -> EventDetailOut:
    """Fetch one event with organizer summary and the full participant list."""
    event = (
        db.query(Event)
        .options(selectinload(Event.participants).joinedload(EventParticipant.user))
        .filter(Event.event_id == event_id)
        .first()
    )
    if not event:
        raise NotFound("Event not found")
    return _to_detail(event, viewer_id)


def upcoming_for_user(
    db: Session,
    user_id: str,
    limit: int = 5,
    now: Optional[datetime] = None,
) -> list[EventOut]:
    """Upcoming events the user organizes or is invited to, for the sidebar widget.

    Lookup failures are logged and degrade to an empty list.
    """
    now = now or utcnow()
    try:
        rows = (
            _enriched_query(db, user_id)
            .filter(Event.start_time >= now, _involving_user(user_id))
            .order_by(Event.start_time, Event.event_id)
            .limit(limit)
            .all()
        )
    except SQLAlchemyError:
        logger.warning("Upcoming-events lookup failed for user %s; returning empty list",
                       user_id, exc_info=True)
        db.rollback()
        return []
    return [_to_out(row, user_id) for row in rows]


# ── Mutations ───────────────────────────────────────────────────────

def create_event(
    db: Session,
    organizer_id: str,
    title: str,
    start_time: datetime,
    end_time: datetime,
    event_type: Any = EventType.company_event,
    description: Optional[str] = None,
    location: Optional[str] = None,
    meeting_link: Optional[str] = None,
    is_mandatory: bool = False,
    max_participants: Optional[int] = None,
    recording: Optional[dict[str, Any]] = None,
    participant_ids: Iterable[str] = (),
) -> EventDetailOut:
    """Create an event owned by ``organizer_id`` and invite ``participant_ids``.

    The event row and its pending participant rows commit together.
    """
    if db.get(User, organizer_id) is None:
        raise ValidationError("Organizer does not exist")

    event = Event(
        title=title.strip() if title else title,
        description=description,
        event_type=_coerce_event_type(event_type),
        start_time=as_utc(start_time),
        end_time=as_utc(end_time),
        location=location,
        meeting_link=meeting_link,
        is_mandatory=is_mandatory,
        max_participants=max_participants,
        organizer_id=organizer_id,
    )
    _apply_recording(event, recording)
    _validate_event(event, utcnow())
    invitees = _distinct_user_ids(db, participant_ids)

    try:
        db.add(event)
        db.flush()
        _insert_participants(db, event.event_id, invitees)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info("Created event '%s' (%s) by organizer %s with %d invitees",
                event.title, event.event_id, organizer_id, len(invitees))
    return get_event(db, event.event_id, viewer_id=organizer_id)


def update_event(
    db: Session,
    event_id: str,
    actor_user_id: str,
    updates: dict[str, Any],
) -> EventDetailOut:
    """Apply a partial update; omitted fields stay as they are."""
    event = _load_event(db, event_id)
    _check_authorization(event, actor_user_id)

    for field in REQUIRED_FIELDS:
        if field in updates and updates[field] is None:
            raise ValidationError(f"'{field}' cannot be cleared")

    try:
        for field, value in updates.items():
            if field == "recording":
                _apply_recording(event, value)
            elif field == "event_type":
                event.event_type = _coerce_event_type(value)
            elif field == "title":
                event.title = value.strip()
            elif field in ("start_time", "end_time"):
                setattr(event, field, as_utc(value))
            elif field in EDITABLE_FIELDS:
                setattr(event, field, value)
        _validate_event(event, utcnow())
    except ValidationError:
        db.rollback()
        raise

    event.updated_at = utcnow()
    db.commit()
    logger.info("Updated event %s (fields: %s)", event_id, ", ".join(sorted(updates)) or "none")
    return get_event(db, event_id, viewer_id=actor_user_id)


def delete_event(db: Session, event_id: str, actor_user_id: str) -> None:
    """Delete an event and its participant rows in one transaction."""
    event = _load_event(db, event_id)
    _check_authorization(event, actor_user_id)

    try:
        db.query(EventParticipant).filter(
            EventParticipant.event_id == event_id
        ).delete(synchronize_session=False)
        db.expire(event, ["participants"])
        db.delete(event)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    logger.info("Deleted event %s by organizer %s", event_id, actor_user_id)


def add_participants(db: Session, event_id: str, user_ids: Iterable[str]) -> list[str]:
    """Invite users; already-invited users are silently skipped."""
    _load_event(db, event_id)
    invitees = _distinct_user_ids(db, user_ids)
    added = _insert_participants(db, event_id, invitees)
    db.commit()
    logger.info("Invited %d new participant(s) to event %s", len(added), event_id)
    return added


def set_participant_status(
    db: Session,
    event_id: str,
    user_id: str,
    status: Any,
) -> ParticipantOut:
    """Record an RSVP response. Callers must ensure the acting user is ``user_id``."""
    try:
        new_status = ParticipantStatus(status)
    except ValueError:
        raise ValidationError(f"Invalid RSVP status: {status}") from None
    if new_status not in RESPONSE_STATUSES:
        raise ValidationError("RSVP status cannot be reset to pending")

    _load_event(db, event_id)
    participant = db.get(EventParticipant, (event_id, user_id))
    if not participant:
        raise NotFound("User is not a participant of this event")

    participant.status = new_status
    participant.responded_at = utcnow()
    db.commit()
    db.refresh(participant)
    logger.info("User %s RSVP'd '%s' to event %s", user_id, new_status.value, event_id)
    return ParticipantOut.model_validate(participant)
