"""Pydantic schemas for users, authentication, and tasks.

These classes define request and response models used by the FastAPI endpoints:
- SignupIn / LoginIn / ProfileUpdate / UserOut
- AuthResponse / ProfileResponse
- TaskCreate / TaskUpdate / TaskOut
- TaskListResponse / TaskResponse / MessageResponse / HealthResponse
"""

from datetime import datetime
from typing import Annotated, Optional, List

from pydantic import BaseModel, BeforeValidator, EmailStr, Field, field_validator

PASSWORD_MIN_LENGTH = 6
# bcrypt only looks at the first 72 bytes of the secret
PASSWORD_MAX_BYTES = 72


def _normalize_email(v):
    if isinstance(v, str):
        return v.strip().lower()
    return v


# Emails are stored trimmed and lower-cased so lookups are case-insensitive.
NormalizedEmail = Annotated[EmailStr, BeforeValidator(_normalize_email)]


# ---------- Users ----------
class SignupIn(BaseModel):
    """Payload for creating a new account."""
    name: str
    email: NormalizedEmail
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name cannot be empty")
        return v.strip()

    @field_validator("password")
    @classmethod
    def password_max_bytes(cls, v: str) -> str:
        if len(v.encode("utf-8")) > PASSWORD_MAX_BYTES:
            raise ValueError("password too long: must be at most 72 bytes when UTF-8 encoded")
        return v


class LoginIn(BaseModel):
    """Credentials for login."""
    email: Annotated[str, BeforeValidator(_normalize_email)]
    password: str


class ProfileUpdate(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""
    name: Optional[str] = None
    email: Optional[NormalizedEmail] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("name cannot be empty")
        return v.strip() if v is not None else v


class UserOut(BaseModel):
    """Public representation of a user."""
    id: int
    name: str
    email: EmailStr
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


# ---------- Auth ----------
class AuthResponse(BaseModel):
    """Returned by signup and login."""
    message: str
    token: str
    user: UserOut


class ProfileResponse(BaseModel):
    user: UserOut


class ProfileUpdateResponse(BaseModel):
    message: str
    user: UserOut


# ---------- Tasks ----------
class TaskCreate(BaseModel):
    """Payload for creating a task. Presence is checked by the task layer."""
    title: Optional[str] = None
    description: Optional[str] = None


class TaskUpdate(BaseModel):
    """Payload for updating a task; every field is optional."""
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None


class TaskOut(BaseModel):
    """Representation of a task returned by the API."""
    id: int
    title: str
    description: str
    status: str
    owner_id: int
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TaskListResponse(BaseModel):
    tasks: List[TaskOut]


class TaskResponse(BaseModel):
    message: str
    task: TaskOut


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    timestamp: datetime
