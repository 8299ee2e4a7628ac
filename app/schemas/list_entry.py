from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import List, Optional, Union


# Request/response bodies use camelCase keys; snake_case is accepted on input too
CAMEL_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def stringify(value):
    """Catalog ids and counters arrive as numbers (TMDB) or strings (YouTube)"""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ValueError("must be a string or number")


# ==================== REQUEST SCHEMAS ====================

class ListEntryAdd(BaseModel):
    """
    Schema for adding a title to one of the user's lists.

    movieId, title and category are required; the service reports missing
    values as InvalidRequest so callers get a single error shape.
    """
    model_config = CAMEL_CONFIG

    movie_id: Optional[str] = Field(None, description="Catalog id of the title")
    title: Optional[str] = None
    poster: Optional[str] = None
    category: Optional[str] = Field(None, description="Watching, Will Watch or Already Watched")
    overview: Optional[str] = None
    release_date: Optional[str] = None
    rating: Optional[str] = None
    votes: Optional[str] = None
    genre_ids: Optional[Union[List[int], str]] = None
    description: Optional[str] = None
    source: Optional[str] = Field(None, description="tmdb or youtube (default tmdb)")

    @field_validator("movie_id", "rating", "votes", mode="before")
    @classmethod
    def coerce_to_string(cls, v):
        return stringify(v)


class ListEntryRemove(BaseModel):
    """Schema for removing a title from one list"""
    model_config = CAMEL_CONFIG

    movie_id: Optional[str] = None
    category: Optional[str] = None

    @field_validator("movie_id", mode="before")
    @classmethod
    def coerce_to_string(cls, v):
        return stringify(v)


# ==================== RESPONSE SCHEMAS ====================

class ListEntryResponse(BaseModel):
    """Schema for a list entry response"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    user_id: int
    movie_id: str
    title: str
    poster: Optional[str] = None
    category: str
    overview: Optional[str] = None
    release_date: Optional[str] = None
    rating: Optional[str] = None
    votes: Optional[str] = None
    genre_ids: Optional[str] = None
    description: Optional[str] = None
    source: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserListsResponse(BaseModel):
    """A user's titles grouped by list"""
    model_config = ConfigDict(populate_by_name=True)

    watching: List[ListEntryResponse] = Field(default_factory=list)
    will_watch: List[ListEntryResponse] = Field(default_factory=list, alias="will-watch")
    already_watched: List[ListEntryResponse] = Field(default_factory=list, alias="already-watched")


class DeletedCount(BaseModel):
    count: int


class ListEntryRemoveResponse(BaseModel):
    message: str
    deleted: DeletedCount
