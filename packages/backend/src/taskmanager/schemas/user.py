"""Pydantic schemas for users and authentication.

The request schemas are the field constraints: a UserCreate or
UserUpdate that exists has already passed every per-field check.
Uniqueness of email is the one rule only the database can decide.

- UserCreate: signup body
- UserUpdate: PATCH /users/me, closed set of editable fields
- UserRead: public profile (no password hash, tokens or avatar)
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

MIN_PASSWORD_LENGTH = 7


def _check_password(value: str) -> str:
    if "password" in value.lower():
        raise ValueError("Password can't contain the word 'password'")
    return value


def _normalize_email(value: str) -> str:
    return value.strip().lower()


class UserCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
    age: int = Field(default=0, ge=0)

    model_config = {"str_strip_whitespace": True}

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def password_not_obvious(cls, v: str) -> str:
        return _check_password(v)


class UserUpdate(BaseModel):
    """Partial profile update. Any key outside these four rejects the request."""

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=MIN_PASSWORD_LENGTH)
    age: Optional[int] = Field(None, ge=0)

    model_config = {"str_strip_whitespace": True, "extra": "forbid"}

    @field_validator("name", "email", "password", "age")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v

    @field_validator("email")
    @classmethod
    def lowercase_email(cls, v: str) -> str:
        return _normalize_email(v)

    @field_validator("password")
    @classmethod
    def password_not_obvious(cls, v: str) -> str:
        return _check_password(v)


class LoginRequest(BaseModel):
    email: str
    password: str

    # Same stripping as UserCreate and UserUpdate apply before hashing.
    model_config = {"str_strip_whitespace": True}


class UserRead(BaseModel):
    id: uuid.UUID
    name: str
    email: str
    age: int
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    """Signup and login both return the profile plus a fresh token."""

    user: UserRead
    token: str
