"""Request dependencies shared by the routers."""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from portal.database import get_db
from portal.errors import NotAuthenticated
from portal.models.user import User

SESSION_USER_KEY = "user_id"


def get_current_user(request: Request, db: Session = Depends(get_db)) -> User:
    """Resolve the session cookie to a user, or fail with 401."""
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        raise NotAuthenticated()
    user = db.get(User, user_id)
    if user is None:
        request.session.clear()
        raise NotAuthenticated("Session user no longer exists")
    return user
