from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional

from app.schemas.list_entry import stringify
from app.schemas.validation import SafeStringMixin

ANONYMOUS_AUTHOR = "Anonymous"


def resolve_author_name(
    override: Optional[str],
    username: Optional[str],
    name: Optional[str],
) -> str:
    """First non-blank of: caller override, username, display name, "Anonymous".

    The email is never a fallback; it stays private.
    """
    for candidate in (override, username, name):
        if candidate and candidate.strip():
            return candidate.strip()
    return ANONYMOUS_AUTHOR


class CommentCreate(BaseModel, SafeStringMixin):
    """Validated comment input"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    title_id: Optional[str] = Field(None, description="Catalog id of the commented title")
    text: Optional[str] = Field(None, max_length=2000)
    author_name: Optional[str] = Field(None, max_length=191, description="Overrides the displayed author")

    @field_validator('title_id', mode='before')
    @classmethod
    def coerce_title_id(cls, v):
        return stringify(v)

    @field_validator('text')
    @classmethod
    def clean_text(cls, v):
        if v is None:
            return v
        v = cls.validate_no_script(v)
        return cls.sanitize_html(v)

    @field_validator('author_name')
    @classmethod
    def clean_author_name(cls, v):
        if v is None:
            return v
        v = cls.validate_no_script(v)
        return cls.strip_tags(v) or None


class CommentUser(BaseModel):
    """Public profile bits shown next to a comment"""
    model_config = ConfigDict(from_attributes=True)

    username: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None


class CommentResponse(BaseModel):
    """Schema for comment response"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: int
    title_id: str
    user_id: int
    author_name: Optional[str] = None
    text: str
    created_at: Optional[datetime] = None
    user: Optional[CommentUser] = None

    @model_validator(mode='after')
    def fill_author_name(self):
        # Rows stored without a name fall back to the author's current profile
        if not self.author_name:
            username = self.user.username if self.user else None
            name = self.user.name if self.user else None
            self.author_name = resolve_author_name(None, username, name)
        return self
