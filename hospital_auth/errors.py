"""
Hospital Auth - Error Taxonomy

Every failure the auth core can surface, with its HTTP status and a
machine-readable code. The server turns these into JSON bodies of the
form {"error": <message>, "code": <code>}; the client package maps the
same bodies back into these classes.
"""

from typing import Dict, Optional, Type


class AuthError(Exception):
    """Base class for errors surfaced to API callers."""
    status_code: int = 500
    code: str = "server_error"
    default_message: str = "Erreur interne du serveur"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class ValidationError(AuthError):
    """Missing or malformed input the caller can correct."""
    status_code = 400
    code = "validation_error"
    default_message = "Email et mot de passe requis"


class InvalidCredentials(AuthError):
    """Unknown email or wrong password (never distinguished)."""
    status_code = 401
    code = "invalid_credentials"
    default_message = "Identifiants invalides"


class AccountNotVerified(AuthError):
    """Correct credentials on an account that is not verified yet."""
    status_code = 403
    code = "account_not_verified"
    default_message = "Compte non vérifié"


class Unauthenticated(AuthError):
    """No token presented."""
    status_code = 401
    code = "unauthenticated"
    default_message = "Token manquant"


class Forbidden(AuthError):
    """Token presented but invalid or expired."""
    status_code = 403
    code = "forbidden"
    default_message = "Token invalide ou expiré"


class InsufficientRole(AuthError):
    """Valid token whose roles do not grant the requested permission."""
    status_code = 403
    code = "insufficient_role"
    default_message = "Accès refusé"


class NotFound(AuthError):
    status_code = 404
    code = "not_found"
    default_message = "Ressource introuvable"


class Conflict(AuthError):
    status_code = 409
    code = "conflict"
    default_message = "Ressource déjà existante"


class ServerError(AuthError):
    """Unexpected failure, e.g. account store unavailable."""


# Errors that mean the presented token can no longer be used
SESSION_ERRORS = (Unauthenticated, Forbidden)


_BY_CODE: Dict[str, Type[AuthError]] = {
    cls.code: cls
    for cls in (
        ValidationError,
        InvalidCredentials,
        AccountNotVerified,
        Unauthenticated,
        Forbidden,
        InsufficientRole,
        NotFound,
        Conflict,
        ServerError,
    )
}

_BY_STATUS: Dict[int, Type[AuthError]] = {
    400: ValidationError,
    401: Unauthenticated,
    403: Forbidden,
    404: NotFound,
    409: Conflict,
}


def error_from_response(status_code: int, body: Optional[dict]) -> AuthError:
    """
    Rebuild an AuthError from an API error response.

    The body's "code" wins; the status code is the fallback for bodies
    that carry no code (proxies, unexpected servers). Any 5xx maps to
    ServerError.
    """
    body = body if isinstance(body, dict) else {}
    message = body.get("error") or body.get("detail")
    if not isinstance(message, str):
        message = None

    error_cls = _BY_CODE.get(body.get("code"))
    if error_cls is None:
        error_cls = _BY_STATUS.get(status_code, ServerError)

    if error_cls is ServerError:
        # Never surface internal detail to the user
        return ServerError()
    return error_cls(message)
