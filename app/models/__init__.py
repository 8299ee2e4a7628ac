"""
Import all models to ensure they are registered with SQLAlchemy
"""
from app.models.user import User
from app.models.list_entry import ListEntry
from app.models.comment import Comment

__all__ = [
    "User",
    "ListEntry",
    "Comment",
]
