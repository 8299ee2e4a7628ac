from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base

# Historical column width for every descriptive field
MAX_FIELD_LENGTH = 191


class ListEntry(Base):
    """
    One title in one of a user's lists (Watching / Will Watch / Already Watched).
    A title occupies at most one list per user; re-adding it moves it.
    """
    __tablename__ = "list_entries"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    movie_id = Column(String(MAX_FIELD_LENGTH), nullable=False)  # Catalog-specific id (TMDB id or YouTube video id)
    source = Column(String(32), nullable=False, default="tmdb")
    category = Column(String(32), nullable=False)

    title = Column(String(MAX_FIELD_LENGTH), nullable=False)
    poster = Column(String(MAX_FIELD_LENGTH), default="")
    overview = Column(String(MAX_FIELD_LENGTH), default="")
    release_date = Column(String(MAX_FIELD_LENGTH), default="")
    rating = Column(String(MAX_FIELD_LENGTH), default="N/A")
    votes = Column(String(MAX_FIELD_LENGTH), default="0")
    genre_ids = Column(String(MAX_FIELD_LENGTH), default="[]")  # JSON-encoded list
    description = Column(String(MAX_FIELD_LENGTH), default="")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    user = relationship("User", back_populates="list_entries")

    # Ensure one entry per user per title
    __table_args__ = (
        UniqueConstraint('user_id', 'movie_id', name='unique_user_movie_list_entry'),
        Index('ix_list_entries_user_category', 'user_id', 'category'),
    )

    def __repr__(self):
        return f"<ListEntry(user_id={self.user_id}, movie_id={self.movie_id}, category={self.category})>"
