"""
Hospital Auth - Authentication Package

Stateless authentication with:
- bcrypt password hashing
- JWT session tokens (30 minute lifetime)
- Bearer-token session guard
"""

from hospital_auth.auth.models import Account
from hospital_auth.auth.dependencies import AuthenticatedAccount, get_current_account
from hospital_auth.auth.tokens import create_access_token, verify_access_token

__all__ = [
    "Account",
    "AuthenticatedAccount",
    "get_current_account",
    "create_access_token",
    "verify_access_token",
]
