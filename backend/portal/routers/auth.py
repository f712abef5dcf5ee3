"""Session login/logout routes."""
import logging
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.deps import SESSION_USER_KEY, get_current_user
from portal.errors import NotAuthenticated
from portal.models.user import User
from portal.schemas.user import LoginRequest, UserOut
from portal.security import verify_password

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/login", response_model=UserOut)
def login(payload: LoginRequest, request: Request, db: Session = Depends(get_db)):
    """Check credentials and bind the user to the session cookie."""
    user = db.query(User).filter(User.email == payload.email.lower()).first()
    if not user or not verify_password(payload.password, user.password_hash):
        logger.info("Failed login for %s", payload.email)
        raise NotAuthenticated("Invalid email or password")
    request.session.clear()
    request.session[SESSION_USER_KEY] = user.user_id
    logger.info("User %s logged in", user.user_id)
    return user


@router.post("/logout")
def logout(request: Request):
    user_id = request.session.pop(SESSION_USER_KEY, None)
    request.session.clear()
    if user_id:
        logger.info("User %s logged out", user_id)
    return {"status": "ok"}


@router.get("/me", response_model=UserOut)
def me(current_user: User = Depends(get_current_user)):
    return current_user
