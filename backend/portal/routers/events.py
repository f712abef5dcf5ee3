"""Event API routes — delegates to event_service for invariant enforcement.

Every endpoint requires a session; the acting user always comes from the
session, never from the request body.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from portal.config import settings
from portal.database import get_db
from portal.deps import get_current_user
from portal.errors import Forbidden, ValidationError
from portal.models.event import EventType
from portal.models.user import User
from portal.schemas.event import (
    EventCreate,
    EventDeleted,
    EventDetailOut,
    EventFilters,
    EventOut,
    EventUpdate,
    ParticipantOut,
    ParticipantsAdd,
    ParticipantsAdded,
    RSVPUpdate,
)
from portal.services import event_service

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=list[EventOut])
def list_events(
    event_type: Optional[EventType] = Query(None, alias="eventType"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    user_id: Optional[str] = Query(None, alias="userId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """List events matching all supplied filters, ordered by start time."""
    try:
        filters = EventFilters(
            event_type=event_type,
            start_date=start_date,
            end_date=end_date,
            user_id=user_id,
        )
    except PydanticValidationError as exc:
        raise ValidationError(exc.errors(include_url=False, include_context=False)) from None
    return event_service.list_events(db, filters, viewer_id=current_user.user_id)


@router.get("/upcoming/sidebar", response_model=list[EventOut])
def upcoming_sidebar(
    limit: int = Query(settings.UPCOMING_SIDEBAR_DEFAULT_LIMIT, ge=1, le=settings.UPCOMING_SIDEBAR_MAX_LIMIT),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Upcoming events for the calling user; empty on lookup failure."""
    return event_service.upcoming_for_user(db, current_user.user_id, limit=limit)


@router.get("/{event_id}", response_model=EventDetailOut)
def get_event(
    event_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Fetch a single event with organizer and participants."""
    return event_service.get_event(db, event_id, viewer_id=current_user.user_id)


@router.post("", response_model=EventDetailOut, status_code=status.HTTP_201_CREATED)
def create_event(
    payload: EventCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Create an event organized by the session user, inviting participantIds."""
    return event_service.create_event(
        db,
        organizer_id=current_user.user_id,
        title=payload.title,
        description=payload.description,
        event_type=payload.event_type,
        start_time=payload.start_time,
        end_time=payload.end_time,
        location=payload.location,
        meeting_link=payload.meeting_link,
        is_mandatory=payload.is_mandatory,
        max_participants=payload.max_participants,
        recording=payload.recording.model_dump() if payload.recording else None,
        participant_ids=payload.participant_ids,
    )


@router.put("/{event_id}", response_model=EventDetailOut)
def update_event(
    event_id: str,
    payload: EventUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Partially update an event (organizer only)."""
    updates = payload.model_dump(exclude_unset=True)
    return event_service.update_event(db, event_id, current_user.user_id, updates)


@router.delete("/{event_id}", response_model=EventDeleted)
def delete_event(
    event_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Delete an event and all of its participant rows (organizer only)."""
    event_service.delete_event(db, event_id, current_user.user_id)
    return EventDeleted(event_id=event_id)


@router.post("/{event_id}/participants", response_model=ParticipantsAdded)
def add_participants(
    event_id: str,
    payload: ParticipantsAdd,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Invite users; users already invited are skipped."""
    added = event_service.add_participants(db, event_id, payload.user_ids)
    event = event_service.get_event(db, event_id, viewer_id=current_user.user_id)
    return ParticipantsAdded(added=added, event=event)


@router.put("/{event_id}/participants/{user_id}", response_model=ParticipantOut)
def set_rsvp(
    event_id: str,
    user_id: str,
    payload: RSVPUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Set the session user's own RSVP status."""
    if user_id != current_user.user_id:
        logger.info("User %s tried to RSVP on behalf of %s for event %s",
                    current_user.user_id, user_id, event_id)
        raise Forbidden("You can only update your own RSVP")
    return event_service.set_participant_status(db, event_id, user_id, payload.status)
