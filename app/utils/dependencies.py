from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.database import get_db
from app.utils.security import decode_token
from app.models.user import User
from app.services.exceptions import Unauthorized
from app.services.list_service import ListService
from app.services.comment_service import CommentService

# auto_error=False so a missing header resolves to "no actor" instead of a 403
security = HTTPBearer(auto_error=False)


def resolve_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db)
) -> Optional[User]:
    """Resolve the bearer token to an active user, or None"""
    if credentials is None:
        return None

    payload = decode_token(credentials.credentials)
    if payload is None or payload.get("type") != "access":
        return None

    user_id = payload.get("user_id")
    if user_id is None:
        return None

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        return None
    return user


# Dependency to get the current authenticated user
def get_current_user(actor: Optional[User] = Depends(resolve_actor)) -> User:
    if actor is None:
        raise Unauthorized()
    return actor


# Services get the request's session injected
def get_list_service(db: Session = Depends(get_db)) -> ListService:
    return ListService(db)


def get_comment_service(db: Session = Depends(get_db)) -> CommentService:
    return CommentService(db)
