"""Authentication request/response schemas."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128  # Reasonable max to prevent DoS
USERNAME_MAX_LENGTH = 64


# =============================================================================
# Request Models
# =============================================================================


class RegisterRequest(BaseModel):
    """User registration request."""

    username: str = Field(..., min_length=1, max_length=USERNAME_MAX_LENGTH)
    email: EmailStr
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LENGTH,
        max_length=PASSWORD_MAX_LENGTH,
        description=f"Password: {PASSWORD_MIN_LENGTH}-{PASSWORD_MAX_LENGTH} chars",
    )

    @field_validator("username")
    @classmethod
    def strip_username(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Username is required")
        return v


class LoginRequest(BaseModel):
    """User login request."""

    email: EmailStr
    password: str = Field(..., max_length=PASSWORD_MAX_LENGTH)


# =============================================================================
# Response Models
# =============================================================================


class UserResponse(BaseModel):
    """Public user view. Never carries the password digest."""

    model_config = {"from_attributes": True}

    id: str
    username: str
    email: str
    created_at: datetime


class Session(BaseModel):
    """A minted session token."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int  # seconds until the token expires
    expires_at: datetime
    user: UserResponse


class AuthResult(BaseModel):
    """Outcome of a registration: the new user plus its first session."""

    user: UserResponse
    session: Session
