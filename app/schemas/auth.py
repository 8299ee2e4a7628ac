from pydantic import BaseModel, EmailStr, Field, field_validator, ConfigDict, ValidationInfo
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Optional


def ensure_password_strength(password: str) -> str:
    """Validate password length limits (bcrypt only uses the first 72 bytes)."""
    if len(password.encode('utf-8')) > 72:
        raise ValueError('Password cannot be longer than 72 characters')
    return password


# Schema for user registration
class UserRegister(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: EmailStr
    password: str = Field(..., min_length=8)
    confirm_password: str = Field(..., min_length=8)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    username: Optional[str] = Field(None, min_length=3, max_length=30, pattern=r'^[a-zA-Z0-9_]+$')

    # Password validation
    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        return ensure_password_strength(v)

    @field_validator('confirm_password')
    @classmethod
    def confirm_matches(cls, v, info: ValidationInfo):
        password = info.data.get('password')
        if password and v != password:
            raise ValueError('Passwords do not match')
        return v

# Schema for user login
class UserLogin(BaseModel):
    email: EmailStr
    password: str

# Google sign-in: the ID token issued to the frontend
class GoogleLogin(BaseModel):
    credential: str = Field(..., min_length=1)

# Schema for user response
class UserResponse(BaseModel):
    id: int
    email: str
    username: Optional[str] = None
    name: Optional[str] = None
    image: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user: UserResponse
