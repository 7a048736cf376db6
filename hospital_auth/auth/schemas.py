"""
Hospital Auth - Request/Response Schemas

Pydantic models for API request validation and response serialization.
Separates API contracts from database models.

Field names follow the mobile app's JSON (camelCase isVerified).
"""

import re
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    """Basic email format check (allows .local for development)."""
    return bool(EMAIL_PATTERN.match(email))


class LoginRequest(BaseModel):
    """
    Request body for POST /login.

    Both fields are optional at the schema level so that a missing field
    yields the 400 "required" error instead of a schema error.
    """
    email: Optional[str] = Field(default=None, description="Account email")
    password: Optional[str] = Field(default=None, description="Account password")


class LoginResponse(BaseModel):
    """Response body for successful login."""
    token: str = Field(..., description="JWT session token")
    expires_in: int = Field(..., description="Seconds until token expires")


class ProfileResponse(BaseModel):
    """Response body for GET /profile."""
    id: int
    email: str
    roles: List[str]


class AccountResponse(BaseModel):
    """Account as shown to administrators."""
    model_config = ConfigDict(populate_by_name=True)

    id: int
    email: str
    roles: List[str]
    is_verified: bool = Field(..., alias="isVerified")
    created_at: datetime = Field(..., alias="createdAt")


# bcrypt only accepts passwords up to 72 bytes
PASSWORD_MAX_BYTES = 72


def _check_password_length(password: str) -> str:
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise ValueError("Mot de passe trop long (72 octets maximum)")
    return password


def _clean_roles(roles: List[str]) -> List[str]:
    # "ROLE_ADMIN, ROLE_USER" typed in the app arrives split but untrimmed
    cleaned = []
    for role in roles:
        role = role.strip()
        if role and role not in cleaned:
            cleaned.append(role)
    return cleaned


class CreateAccountRequest(BaseModel):
    """Request body for POST /users (admin only)."""
    model_config = ConfigDict(populate_by_name=True)

    email: str
    password: str = Field(..., min_length=8)
    roles: List[str] = Field(default_factory=list)
    is_verified: bool = Field(default=False, alias="isVerified")

    @field_validator("email")
    @classmethod
    def email_format(cls, v):
        v = normalize_email(v)
        if not is_valid_email(v):
            raise ValueError("Format d'email invalide")
        return v

    @field_validator("roles")
    @classmethod
    def clean_roles(cls, v):
        return _clean_roles(v)

    @field_validator("password")
    @classmethod
    def password_length(cls, v):
        return _check_password_length(v)


class UpdateAccountRequest(BaseModel):
    """Request body for PUT /users/{id}; omitted fields are left unchanged."""
    model_config = ConfigDict(populate_by_name=True)

    email: Optional[str] = None
    password: Optional[str] = Field(default=None, min_length=8)
    roles: Optional[List[str]] = None
    is_verified: Optional[bool] = Field(default=None, alias="isVerified")

    @field_validator("email")
    @classmethod
    def email_format(cls, v):
        if v is None:
            return v
        v = normalize_email(v)
        if not is_valid_email(v):
            raise ValueError("Format d'email invalide")
        return v

    @field_validator("roles")
    @classmethod
    def clean_roles(cls, v):
        if v is None:
            return v
        return _clean_roles(v)

    @field_validator("password")
    @classmethod
    def password_length(cls, v):
        if v is None:
            return v
        return _check_password_length(v)
