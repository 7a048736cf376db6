"""
Hospital Auth - Credential Verification

Checks an email/password pair against the account store and issues a
session token.

Order of checks matters:
1. Missing fields            -> ValidationError
2. Unknown or malformed email -> InvalidCredentials
3. Wrong password            -> InvalidCredentials
4. Unverified account        -> AccountNotVerified

"Unknown email" and "wrong password" produce the same error so that the
login endpoint cannot be used to enumerate accounts. Verification status
is only revealed once the password is known to be correct.
"""

import logging
from typing import Optional

from sqlmodel import Session as DBSession, select

from hospital_auth.auth.models import Account
from hospital_auth.auth.password import verify_password, burn_password_check
from hospital_auth.auth.schemas import normalize_email, is_valid_email
from hospital_auth.auth.tokens import create_access_token
from hospital_auth.errors import ValidationError, InvalidCredentials, AccountNotVerified


audit_logger = logging.getLogger("hospital_auth.audit")


def verify_credentials(db: DBSession, email: Optional[str], password: Optional[str]) -> Account:
    """
    Authenticate an account by email and password.

    Args:
        db: Database session
        email: Submitted email
        password: Submitted plaintext password

    Returns:
        The verified Account

    Raises:
        ValidationError: email or password missing/empty
        InvalidCredentials: no such account, malformed email or wrong password
        AccountNotVerified: credentials correct but account not verified
    """
    if not email or not email.strip() or not password:
        raise ValidationError()

    email = normalize_email(email)

    if not is_valid_email(email):
        burn_password_check(password)
        audit_logger.info("auth.login.failure reason=malformed_email")
        raise InvalidCredentials()

    account = db.exec(select(Account).where(Account.email == email)).first()

    if account is None:
        burn_password_check(password)
        audit_logger.info("auth.login.failure reason=account_not_found")
        raise InvalidCredentials()

    if not verify_password(password, account.password_hash):
        audit_logger.info("auth.login.failure account_id=%s reason=invalid_password", account.id)
        raise InvalidCredentials()

    if not account.is_verified:
        audit_logger.info("auth.login.failure account_id=%s reason=account_not_verified", account.id)
        raise AccountNotVerified()

    return account


def issue_token(account: Account) -> str:
    """Issue a session token for an authenticated account."""
    token = create_access_token(
        account_id=account.id,
        email=account.email,
        roles=list(account.roles or []),
    )
    audit_logger.info("auth.login.success account_id=%s", account.id)
    return token
