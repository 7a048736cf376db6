"""
Hospital Auth - Account Database Model

SQLModel-based model for staff accounts.
Uses SQLite for local development; MySQL or PostgreSQL in production.

Security:
- Passwords stored as bcrypt hashes only
- Roles are free-form labels (e.g. ROLE_ADMIN), stored as a JSON list
- No server-side session table: tokens are stateless
- All timestamps in UTC
"""

from datetime import datetime
from typing import List, Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import Column, String, Boolean, DateTime, JSON


ROLE_ADMIN = "ROLE_ADMIN"
ROLE_ADMINISTRATIF = "ROLE_ADMINISTRATIF"
ROLE_USER = "ROLE_USER"


class Account(SQLModel, table=True):
    """
    Staff account for authentication.

    Attributes:
        id: Numeric identifier (autoincrement)
        email: Login identifier (unique, indexed, lower-cased)
        password_hash: bcrypt hash (never store plaintext)
        roles: Role labels granting UI and API capabilities
        is_verified: Unverified accounts can never obtain a token
        created_at: Account creation timestamp (UTC)
        updated_at: Last modification timestamp (UTC)
    """
    __tablename__ = "accounts"

    id: Optional[int] = Field(
        default=None,
        primary_key=True,
        description="Account identifier"
    )
    email: str = Field(
        sa_column=Column(String(255), unique=True, index=True, nullable=False),
        description="Email address (login identifier)"
    )
    password_hash: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="bcrypt password hash"
    )
    roles: List[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False, default=list),
        description="Role labels"
    )
    is_verified: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, default=False),
        description="Whether the account may authenticate"
    )
    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime, nullable=False, default=datetime.utcnow),
        description="Account creation timestamp"
    )
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        sa_column=Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow),
        description="Last update timestamp"
    )
