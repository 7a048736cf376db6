"""
Hospital Auth - Account Management Routes

Admin endpoints backing the app's user screens:
- GET /users          - List accounts, optionally filtered by ?search=
- GET /users/{id}     - Show one account
- POST /users         - Create an account
- PUT /users/{id}     - Edit email, roles, verification flag or password

All routes require a valid token whose roles grant manage:users.
Accounts are never deleted here.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session as DBSession, col, select

from hospital_auth.auth.dependencies import AuthenticatedAccount, get_db
from hospital_auth.auth.models import Account
from hospital_auth.auth.password import hash_password
from hospital_auth.auth.schemas import (
    AccountResponse,
    CreateAccountRequest,
    UpdateAccountRequest,
)
from hospital_auth.errors import Conflict, NotFound
from hospital_auth.gateway.rbac import Permission, require_permission


router = APIRouter(prefix="/users", tags=["accounts"])

audit_logger = logging.getLogger("hospital_auth.audit")

require_admin = require_permission(Permission.MANAGE_USERS)


def _to_response(account: Account) -> AccountResponse:
    return AccountResponse(
        id=account.id,
        email=account.email,
        roles=list(account.roles or []),
        is_verified=account.is_verified,
        created_at=account.created_at,
    )


def _email_taken(db: DBSession, email: str) -> bool:
    return db.exec(select(Account).where(Account.email == email)).first() is not None


def _commit_or_conflict(db: DBSession) -> None:
    # A concurrent write can still hit the unique email index
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Email déjà utilisé")


@router.get("", response_model=List[AccountResponse], summary="List accounts")
def list_accounts(
    search: Optional[str] = Query(default=None, max_length=255),
    admin: AuthenticatedAccount = Depends(require_admin),
    db: DBSession = Depends(get_db),
):
    """List accounts by id. `search` keeps emails containing it, ignoring case."""
    query = select(Account)
    if search and search.strip():
        query = query.where(col(Account.email).icontains(search.strip(), autoescape=True))
    accounts = db.exec(query.order_by(Account.id)).all()
    return [_to_response(a) for a in accounts]


@router.get("/{account_id}", response_model=AccountResponse, summary="Get account")
def get_account(
    account_id: int = Path(..., ge=1),
    admin: AuthenticatedAccount = Depends(require_admin),
    db: DBSession = Depends(get_db),
):
    account = db.get(Account, account_id)
    if account is None:
        raise NotFound("Utilisateur introuvable")
    return _to_response(account)


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create account",
)
def create_account(
    body: CreateAccountRequest,
    admin: AuthenticatedAccount = Depends(require_admin),
    db: DBSession = Depends(get_db),
):
    """
    Create a new account. Password is hashed with bcrypt.

    Raises:
        409: Email already registered
    """
    if _email_taken(db, body.email):
        raise Conflict("Email déjà utilisé")

    now = datetime.utcnow()
    account = Account(
        email=body.email,
        password_hash=hash_password(body.password),
        roles=body.roles,
        is_verified=body.is_verified,
        created_at=now,
        updated_at=now,
    )

    db.add(account)
    _commit_or_conflict(db)
    db.refresh(account)

    audit_logger.info(
        "auth.account.created account_id=%s by=%s roles=%s verified=%s",
        account.id, admin.id, account.roles, account.is_verified,
    )
    return _to_response(account)


@router.put("/{account_id}", response_model=AccountResponse, summary="Update account")
def update_account(
    body: UpdateAccountRequest,
    account_id: int = Path(..., ge=1),
    admin: AuthenticatedAccount = Depends(require_admin),
    db: DBSession = Depends(get_db),
):
    """
    Update an account. Omitted fields are left unchanged, including the
    password.

    Tokens already issued keep their roles until they expire.
    """
    account = db.get(Account, account_id)
    if account is None:
        raise NotFound("Utilisateur introuvable")

    if body.email is not None and body.email != account.email:
        if _email_taken(db, body.email):
            raise Conflict("Email déjà utilisé")
        account.email = body.email

    if body.roles is not None:
        account.roles = body.roles

    if body.is_verified is not None:
        account.is_verified = body.is_verified

    if body.password:
        account.password_hash = hash_password(body.password)

    account.updated_at = datetime.utcnow()
    db.add(account)
    _commit_or_conflict(db)
    db.refresh(account)

    audit_logger.info(
        "auth.account.updated account_id=%s by=%s roles=%s verified=%s password_changed=%s",
        account.id, admin.id, account.roles, account.is_verified, bool(body.password),
    )
    return _to_response(account)
