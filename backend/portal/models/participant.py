"""EventParticipant ORM model — one row per (event, invited user)."""
import enum
from sqlalchemy import Column, String, ForeignKey, Enum as SAEnum
from sqlalchemy.orm import relationship
from portal.database import Base, UTCDateTime


class ParticipantStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    declined = "declined"
    maybe = "maybe"


# Statuses a participant may set on their own row; pending is initial-only.
RESPONSE_STATUSES = frozenset({
    ParticipantStatus.accepted,
    ParticipantStatus.declined,
    ParticipantStatus.maybe,
})


class EventParticipant(Base):
    __tablename__ = "event_participants"

    event_id = Column(String(36), ForeignKey("events.event_id", ondelete="CASCADE"), primary_key=True)
    user_id = Column(String(36), ForeignKey("users.user_id"), primary_key=True, index=True)
    status = Column(
        SAEnum(ParticipantStatus, name="participant_status"),
        nullable=False,
        default=ParticipantStatus.pending,
    )
    responded_at = Column(UTCDateTime, nullable=True)

    event = relationship("Event", back_populates="participants")
    user = relationship("User", lazy="joined")
