"""
Hospital Auth - Session Token Management

Creates and validates JWT session tokens carrying:
- Account ID (id)
- Email
- Roles (free-form labels)
- Issued-at and expiry (iat, exp)

Security:
- Stateless: validity depends only on signature and expiry
- Signed with a server-held symmetric secret (HS256 by default)
- Lifetime fixed at issuance (30 minutes by default)
"""

from datetime import datetime, timedelta
from typing import List, Optional

from jose import jwt, JWTError
from pydantic import BaseModel, Field

from hospital_auth.config import settings


class TokenPayload(BaseModel):
    """
    Decoded session token payload.

    Attributes:
        id: Account identifier
        email: Account email at issuance
        roles: Account roles at issuance
        exp: Expiration time
        iat: Issued-at time
    """
    id: int = Field(..., description="Account ID")
    email: str = Field(..., description="Account email")
    roles: List[str] = Field(default_factory=list, description="Account roles")
    exp: datetime = Field(..., description="Expiration time")
    iat: datetime = Field(..., description="Issued at time")


class InvalidTokenError(Exception):
    """Raised when JWT validation fails."""
    pass


def create_access_token(
    account_id: int,
    email: str,
    roles: List[str],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Create a signed session token.

    Args:
        account_id: Account's identifier
        email: Account's email
        roles: Account's role labels
        expires_delta: Optional custom lifetime (negative values yield an
            already-expired token)

    Returns:
        Encoded JWT string

    Example:
        >>> token = create_access_token(1, "a@b.com", ["ROLE_ADMIN"])
    """
    now = datetime.utcnow()

    if expires_delta is not None:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    payload = {
        "id": account_id,
        "email": email,
        "roles": list(roles),
        "exp": expire,
        "iat": now,
    }

    return jwt.encode(
        payload,
        settings.SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )


def verify_access_token(token: str) -> TokenPayload:
    """
    Verify and decode a session token.

    Args:
        token: Encoded JWT string

    Returns:
        Decoded TokenPayload

    Raises:
        InvalidTokenError: If the signature does not verify, the token is
            expired, or the payload is malformed
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
        return TokenPayload(**payload)
    except JWTError as e:
        raise InvalidTokenError(f"Token validation failed: {str(e)}")
    except (TypeError, ValueError) as e:
        # Signed but structurally wrong payload
        raise InvalidTokenError(f"Token payload invalid: {str(e)}")


def get_token_expiry_seconds() -> int:
    """Get token lifetime in seconds."""
    return settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
