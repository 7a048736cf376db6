"""
Hospital Auth - API Client

httpx client for the hospital API that drives the SessionStore.

Every authenticated request:
1. Reads the token and the session generation together
2. Sends Authorization: Bearer <token>
3. Discards the response if the session changed meanwhile
   (StaleResponseError), e.g. the user logged out
4. On 401, or 403 with code "forbidden", clears the session for that
   generation and raises the matching error

A 403 "insufficient_role" leaves the session alone: the token is fine,
the account just may not do that.
"""

import logging
from typing import Any, List, Optional

import httpx
from pydantic import BaseModel

from hospital_auth.client.session_store import SessionStore, StaleResponseError
from hospital_auth.config import settings
from hospital_auth.errors import SESSION_ERRORS, ServerError, Unauthenticated, error_from_response


logger = logging.getLogger(__name__)


class Profile(BaseModel):
    id: int
    email: str
    roles: List[str]


def _json_body(response: httpx.Response) -> Optional[dict]:
    try:
        body = response.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


class HospitalApiClient:
    """
    Client for /login, /profile and any other token-protected endpoint.

    Args:
        store: Session store holding the token
        base_url: API root (defaults to settings.API_BASE_URL)
        http: Pre-built httpx.Client (tests pass a FastAPI TestClient)
    """

    def __init__(
        self,
        store: SessionStore,
        base_url: Optional[str] = None,
        http: Optional[httpx.Client] = None,
    ):
        self.store = store
        self._owns_http = http is None
        self._http = http if http is not None else httpx.Client(
            base_url=base_url or settings.API_BASE_URL,
            timeout=settings.CLIENT_TIMEOUT_SECONDS,
        )

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "HospitalApiClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def login(self, email: str, password: str, remember: bool = False) -> str:
        """
        Exchange credentials for a token and store it.

        Raises:
            ValidationError, InvalidCredentials, AccountNotVerified, ServerError
            StaleResponseError: the session changed while the login was in flight
        """
        generation = self.store.generation
        try:
            response = self._http.post("/login", json={"email": email, "password": password})
        except httpx.HTTPError as e:
            logger.warning("Login request failed: %s", e)
            raise ServerError("Serveur injoignable") from e

        if response.status_code != 200:
            raise error_from_response(response.status_code, _json_body(response))

        token = (_json_body(response) or {}).get("token")
        if not token:
            raise ServerError("Réponse de connexion invalide")

        # Generation check and write happen under the store lock
        self.store.save(
            token,
            remember=(email, password) if remember else None,
            expected_generation=generation,
        )
        return token

    def logout(self) -> None:
        """Drop the local session; in-flight responses become stale."""
        self.store.clear()

    # ------------------------------------------------------------------
    # Authenticated requests
    # ------------------------------------------------------------------

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """
        Send an authenticated request.

        Returns:
            The successful (2xx) response

        Raises:
            Unauthenticated: no token stored (no request is sent)
            Forbidden / Unauthenticated: token rejected; session cleared
            AuthError subclass: any other error response
            StaleResponseError: session changed while the request was in flight
        """
        token, generation = self.store.snapshot()
        if not token:
            raise Unauthenticated()

        headers = dict(kwargs.pop("headers", None) or {})
        headers["Authorization"] = f"Bearer {token}"

        try:
            response = self._http.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise ServerError("Serveur injoignable") from e

        if self.store.generation != generation:
            raise StaleResponseError(f"{method} {path}: session changed during request")

        if response.is_success:
            return response

        error = error_from_response(response.status_code, _json_body(response))
        if isinstance(error, SESSION_ERRORS):
            if self.store.clear(generation=generation):
                logger.info("Session cleared after %s on %s %s", error.code, method, path)
        raise error

    def get_profile(self) -> Profile:
        return Profile(**self.request("GET", "/profile").json())
