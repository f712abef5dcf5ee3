"""User API routes — registration and profile summaries."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.deps import get_current_user
from portal.errors import NotFound
from portal.models.user import User
from portal.schemas.user import UserCreate, UserOut
from portal.security import hash_password

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(payload: UserCreate, db: Session = Depends(get_db)):
    """Register a new user account."""
    email = payload.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
    user = User(
        email=email,
        first_name=payload.first_name,
        last_name=payload.last_name,
        profile_image=payload.profile_image,
        password_hash=hash_password(payload.password),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Created user %s (%s)", user.user_id, user.email)
    return user


@router.get("", response_model=list[UserOut])
def list_users(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """List all users (for the invitee picker)."""
    return db.query(User).order_by(User.last_name, User.first_name).all()


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    """Fetch a single user by ID."""
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found")
    return user
