"""
Hospital Auth - Security Dependencies

FastAPI dependencies for the session guard.

Usage:
    @app.get("/protected")
    async def protected_route(account: AuthenticatedAccount = Depends(get_current_account)):
        ...

Security:
- Stateless: the token alone decides, no server-side session lookup
- A missing token (401) is distinguished from a rejected one (403) so the
  client knows to drop its stored session
"""

import logging
from datetime import datetime
from typing import Generator, List, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from sqlmodel import Session as DBSession

from hospital_auth.auth.tokens import verify_access_token, InvalidTokenError
from hospital_auth.errors import Unauthenticated, Forbidden


logger = logging.getLogger(__name__)

# HTTP Bearer scheme for JWT extraction
security = HTTPBearer(auto_error=False)


class AuthenticatedAccount(BaseModel):
    """
    Identity decoded from a valid session token.

    Available in route handlers via Depends(get_current_account).
    """
    id: int
    email: str
    roles: List[str]
    token_expires_at: datetime


def get_db(request: Request) -> Generator[DBSession, None, None]:
    """Yield a database session from the app's session factory."""
    db = request.app.state.db_session_factory()
    try:
        yield db
    finally:
        db.close()


async def get_current_account(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthenticatedAccount:
    """
    Validate the request's bearer token and return the decoded identity.

    Raises:
        Unauthenticated: No Authorization: Bearer header
        Forbidden: Token signature invalid, malformed or expired
    """
    if not credentials or not credentials.credentials:
        raise Unauthenticated()

    try:
        payload = verify_access_token(credentials.credentials)
    except InvalidTokenError as e:
        logger.info("Rejected session token: %s", e)
        raise Forbidden()

    return AuthenticatedAccount(
        id=payload.id,
        email=payload.email,
        roles=payload.roles,
        token_expires_at=payload.exp,
    )
