"""Event ORM model."""
import uuid
import enum
from sqlalchemy import Column, String, Text, Boolean, Integer, ForeignKey, CheckConstraint, Enum as SAEnum
from sqlalchemy.orm import relationship
from portal.database import Base, UTCDateTime
from portal.utils import utcnow


class EventType(str, enum.Enum):
    company_event = "company_event"
    training = "training"
    team_meeting = "team_meeting"
    one_on_one = "1on1"


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("end_time > start_time", name="ck_events_end_after_start"),
    )

    event_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    event_type = Column(
        SAEnum(EventType, values_callable=lambda e: [m.value for m in e], name="event_type"),
        nullable=False,
        default=EventType.company_event,
    )
    start_time = Column(UTCDateTime, nullable=False, index=True)
    end_time = Column(UTCDateTime, nullable=False)
    location = Column(String(500), nullable=True)
    meeting_link = Column(String(1000), nullable=True)
    is_mandatory = Column(Boolean, nullable=False, default=False)
    max_participants = Column(Integer, nullable=True)
    recording_url = Column(String(1000), nullable=True)
    recording_thumbnail_url = Column(String(1000), nullable=True)
    recording_duration_seconds = Column(Integer, nullable=True)
    organizer_id = Column(String(36), ForeignKey("users.user_id"), nullable=False, index=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
    updated_at = Column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    organizer = relationship("User", lazy="joined")
    participants = relationship(
        "EventParticipant",
        back_populates="event",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def recording(self):
        """Recording reference as a dict, or None before one is attached."""
        if not self.recording_url:
            return None
        return {
            "url": self.recording_url,
            "thumbnail_url": self.recording_thumbnail_url,
            "duration_seconds": self.recording_duration_seconds,
        }
