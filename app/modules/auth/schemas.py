from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional

# Supabase Auth rejects shorter passwords with an opaque error
MIN_PASSWORD_LENGTH = 6


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    display_name: Optional[str] = None

    @field_validator("password")
    @classmethod
    def password_long_enough(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return v

    @field_validator("display_name")
    @classmethod
    def display_name_trimmed(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return v.strip() or None


class SessionToken(BaseModel):
    """Bearer session issued by the identity provider."""
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisteredUser(BaseModel):
    user_id: str
    email: str
    confirmation_required: bool = False
