"""User ORM model — owned by the auth/profile layer, referenced by events."""
import uuid
from sqlalchemy import Column, String
from portal.database import Base, UTCDateTime
from portal.utils import utcnow


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), nullable=False, unique=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    password_hash = Column(String(255), nullable=False, default="")
    profile_image = Column(String(500), nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
