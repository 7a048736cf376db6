"""
Hospital Auth - Authentication Routes

API endpoints for authentication:
- POST /login    - Verify credentials and issue a session token
- GET  /profile  - Get the current account (requires a valid token)

Errors are raised as hospital_auth.errors classes and rendered by the
app's exception handlers.
"""

from fastapi import APIRouter, Depends
from sqlmodel import Session as DBSession

from hospital_auth.auth.credentials import verify_credentials, issue_token
from hospital_auth.auth.dependencies import AuthenticatedAccount, get_current_account, get_db
from hospital_auth.auth.models import Account
from hospital_auth.auth.schemas import LoginRequest, LoginResponse, ProfileResponse
from hospital_auth.auth.tokens import get_token_expiry_seconds
from hospital_auth.errors import NotFound


router = APIRouter(tags=["authentication"])

ERROR_RESPONSES = {
    400: {"description": "Missing email or password"},
    401: {"description": "Invalid credentials or missing token"},
    403: {"description": "Account not verified or token rejected"},
    500: {"description": "Server error"},
}


@router.post(
    "/login",
    response_model=LoginResponse,
    responses=ERROR_RESPONSES,
    summary="Verify credentials and issue a session token",
)
def login(
    credentials: LoginRequest,
    db: DBSession = Depends(get_db),
):
    """
    Authenticate an account with email and password.

    Returns:
        LoginResponse with the session token

    Raises:
        400: Missing email or password
        401: Invalid credentials (unknown email and wrong password look the same)
        403: Account not verified
    """
    account = verify_credentials(db, credentials.email, credentials.password)

    return LoginResponse(
        token=issue_token(account),
        expires_in=get_token_expiry_seconds(),
    )


@router.get(
    "/profile",
    response_model=ProfileResponse,
    responses={**ERROR_RESPONSES, 404: {"description": "Account no longer exists"}},
    summary="Get the current account",
)
def get_profile(
    account: AuthenticatedAccount = Depends(get_current_account),
    db: DBSession = Depends(get_db),
):
    """
    Return the account behind the session token.

    Roles come from the account store, not the token, so role edits show
    up here before the token expires.
    """
    db_account = db.get(Account, account.id)

    if db_account is None:
        raise NotFound("Utilisateur introuvable")

    return ProfileResponse(
        id=db_account.id,
        email=db_account.email,
        roles=list(db_account.roles or []),
    )
