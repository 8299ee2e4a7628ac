"""
Comment Service - public comments on titles
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from app.models.comment import Comment
from app.models.user import User
from app.schemas.comment import resolve_author_name
from app.services.exceptions import InternalError, InvalidRequest

logger = logging.getLogger(__name__)


class CommentService:
    """Service for comment operations"""

    def __init__(self, db: Session):
        self.db = db

    def add_comment(
        self,
        user: User,
        title_id: Optional[str],
        text: Optional[str],
        author_name: Optional[str] = None
    ) -> Comment:
        """
        Post a comment on a title.

        The displayed author is the caller-supplied name, else the user's
        username, else their display name, else "Anonymous". The email is
        never used: it is the login handle and comments are public.
        """
        title_id = (title_id or "").strip()
        text = (text or "").strip()
        if not title_id or not text:
            raise InvalidRequest("Missing required fields")

        comment = Comment(
            title_id=title_id,
            user_id=user.id,
            author_name=resolve_author_name(author_name, user.username, user.name),
            text=text,
        )
        try:
            self.db.add(comment)
            self.db.commit()
            self.db.refresh(comment)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise InternalError("Failed to create comment", cause=e) from e

        logger.info(f"User {user.id} commented on title {title_id}")
        return comment

    def list_comments(self, title_id: Optional[str]) -> List[Comment]:
        """All comments on a title with their authors, newest first"""
        title_id = (title_id or "").strip()
        if not title_id:
            raise InvalidRequest("Title ID is required")

        try:
            return self.db.query(Comment).options(joinedload(Comment.user)).filter(
                Comment.title_id == title_id
            ).order_by(Comment.created_at.desc(), Comment.id.desc()).all()
        except SQLAlchemyError as e:
            raise InternalError("Failed to fetch comments", cause=e) from e
