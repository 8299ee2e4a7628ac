"""
List Service - a user's Watching / Will Watch / Already Watched lists.

A title occupies at most one list per user: adding a title that is already
in some list moves it to the new one.
"""
import json
import logging
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.list_entry import ListEntry, MAX_FIELD_LENGTH
from app.schemas.list_entry import ListEntryAdd
from app.services.exceptions import InternalError, InvalidRequest, NotFound, ServiceError
from app.utils.categories import (
    Category,
    DEFAULT_SOURCE,
    Source,
    bucket_for,
    category_variants,
    normalize_category,
)

logger = logging.getLogger(__name__)


def truncate(value: Optional[str], default: str = "") -> str:
    """Fit a text field into its column"""
    if value is None or value == "":
        value = default
    return value[:MAX_FIELD_LENGTH]


def clean_movie_id(movie_id: Optional[str]) -> str:
    """Catalog id as stored: stripped and cut to the column width"""
    return (movie_id or "").strip()[:MAX_FIELD_LENGTH]


def serialize_genre_ids(genre_ids) -> str:
    """
    Store genre ids as a JSON list that fits the column.
    Ids that don't fit are dropped from the end so the value stays valid JSON.
    A blank string counts as no genres.
    """
    if genre_ids is None:
        return "[]"
    if isinstance(genre_ids, str):
        if not genre_ids.strip():
            return "[]"
        try:
            genre_ids = json.loads(genre_ids)
        except ValueError:
            raise InvalidRequest("genreIds must be a list of numbers")
        if not isinstance(genre_ids, list):
            raise InvalidRequest("genreIds must be a list of numbers")

    ids = list(genre_ids)
    encoded = json.dumps(ids, separators=(",", ":"))
    while len(encoded) > MAX_FIELD_LENGTH:
        ids.pop()
        encoded = json.dumps(ids, separators=(",", ":"))
    return encoded


def normalize_source(source: Optional[str]) -> str:
    if not source or not source.strip():
        return DEFAULT_SOURCE.value
    try:
        return Source(source.strip().lower()).value
    except ValueError:
        raise InvalidRequest(
            "Invalid source",
            details={"source": source, "allowed": [s.value for s in Source]},
        )


class ListService:
    """Service for a user's movie lists"""

    def __init__(self, db: Session):
        self.db = db

    def _find_entry(self, user_id: int, movie_id: str) -> Optional[ListEntry]:
        return self.db.query(ListEntry).filter(
            ListEntry.user_id == user_id,
            ListEntry.movie_id == movie_id
        ).first()

    def _move_entry(self, entry: ListEntry, category: str) -> ListEntry:
        if entry.category != category:
            logger.info(f"Moving movie {entry.movie_id} for user {entry.user_id}: {entry.category} -> {category}")
        entry.category = category
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def add_or_move_entry(self, user_id: int, data: ListEntryAdd) -> ListEntry:
        """
        Add a title to a list, or move it there if it's already in another one.

        Only the category changes on a move; the stored metadata is kept.
        """
        movie_id = clean_movie_id(data.movie_id)
        title = (data.title or "").strip()
        if not movie_id or not title or not (data.category or "").strip():
            raise InvalidRequest(
                "Missing required fields",
                details={"movieId": data.movie_id, "title": data.title, "category": data.category},
            )

        category = normalize_category(data.category)

        try:
            existing = self._find_entry(user_id, movie_id)
            if existing:
                return self._move_entry(existing, category)

            entry = ListEntry(
                user_id=user_id,
                movie_id=movie_id,
                title=truncate(title),
                poster=truncate(data.poster),
                category=category,
                overview=truncate(data.overview),
                release_date=truncate(data.release_date),
                rating=truncate(data.rating, default="N/A"),
                votes=truncate(data.votes, default="0"),
                genre_ids=serialize_genre_ids(data.genre_ids),
                description=truncate(data.description),
                source=normalize_source(data.source),
            )
            self.db.add(entry)
            try:
                self.db.commit()
            except IntegrityError as e:
                # Another request inserted the same title first; treat as a move
                self.db.rollback()
                existing = self._find_entry(user_id, movie_id)
                if existing is None:
                    raise InvalidRequest("Movie already exists in list") from e
                return self._move_entry(existing, category)

            self.db.refresh(entry)
            logger.info(f"Added movie {movie_id} to '{category}' for user {user_id}")
            return entry

        except ServiceError:
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            raise InternalError("Failed to add movie", cause=e) from e

    def remove_entry(self, user_id: int, movie_id: Optional[str], category: Optional[str]) -> int:
        """
        Remove a title from one list.

        Scoped by category: a title in a different list is left alone.
        Returns the number of rows removed; raises NotFound when none matched.
        """
        movie_id = clean_movie_id(movie_id)
        if not movie_id or not (category or "").strip():
            raise InvalidRequest("Movie ID and category are required")

        canonical = normalize_category(category)

        try:
            deleted = self.db.query(ListEntry).filter(
                ListEntry.user_id == user_id,
                ListEntry.movie_id == movie_id,
                func.lower(ListEntry.category).in_(category_variants(canonical))
            ).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise InternalError("Failed to remove movie from list", cause=e) from e

        if deleted == 0:
            raise NotFound("Movie not found in list")

        logger.info(f"Removed movie {movie_id} from '{canonical}' for user {user_id}")
        return deleted

    def list_entries_for_user(self, user_id: int) -> Dict[str, List[ListEntry]]:
        """
        Get the user's titles grouped by list, newest first.
        Rows with a category that matches no list are left out.
        """
        try:
            entries = self.db.query(ListEntry).filter(
                ListEntry.user_id == user_id
            ).order_by(ListEntry.created_at.desc(), ListEntry.id.desc()).all()
        except SQLAlchemyError as e:
            raise InternalError("Failed to fetch movies", cause=e) from e

        grouped: Dict[str, List[ListEntry]] = {category.value: [] for category in Category}
        for entry in entries:
            bucket = bucket_for(entry.category)
            if bucket is None:
                logger.debug(f"Skipping entry {entry.id} with unknown category '{entry.category}'")
                continue
            grouped[bucket].append(entry)
        return grouped

    def get_entry(self, user_id: int, movie_id: str) -> ListEntry:
        """Get the user's entry for a title, whichever list it's in"""
        try:
            entry = self._find_entry(user_id, clean_movie_id(movie_id))
        except SQLAlchemyError as e:
            raise InternalError("Failed to fetch movies", cause=e) from e

        if entry is None:
            raise NotFound("Movie not found in list")
        return entry
