"""
Hospital Auth - Login Controller

Client authentication state machine:

    UNAUTHENTICATED -> AUTHENTICATING -> AUTHENTICATED
                                      -> AUTH_FAILED -> AUTHENTICATING ...
    AUTHENTICATED -> UNAUTHENTICATED   (logout or forced session clear)

Only one login may be in flight at a time; a second submit while
AUTHENTICATING is refused, like a disabled login button.
"""

import logging
import threading
from enum import Enum
from typing import Optional, Tuple

from hospital_auth.client.api import HospitalApiClient, StaleResponseError
from hospital_auth.errors import AuthError


logger = logging.getLogger(__name__)


class AuthState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    AUTH_FAILED = "auth_failed"


class LoginController:
    """Drives the login screen and follows the session store."""

    def __init__(self, api: HospitalApiClient):
        self.api = api
        self._submit_lock = threading.Lock()
        self._state = AuthState.AUTHENTICATED if api.store.is_authenticated else AuthState.UNAUTHENTICATED
        self.last_error: Optional[AuthError] = None
        self._unsubscribe = api.store.subscribe(self._on_session_change)

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def loading(self) -> bool:
        return self._state is AuthState.AUTHENTICATING

    @property
    def can_submit(self) -> bool:
        return self._state in (AuthState.UNAUTHENTICATED, AuthState.AUTH_FAILED)

    def _on_session_change(self, is_authenticated: bool) -> None:
        # A forced clear (401/403 elsewhere) sends the user back to login
        if not is_authenticated and self._state is AuthState.AUTHENTICATED:
            self._state = AuthState.UNAUTHENTICATED

    def prefill(self) -> Optional[Tuple[str, str]]:
        """Remembered (email, password) for the login form, if any."""
        return self.api.store.remembered_credentials()

    def submit(self, email: str, password: str, remember: bool = False) -> bool:
        """
        Attempt a login.

        Returns:
            True on success. False if refused (already in flight or
            already authenticated) or failed; on failure last_error holds
            the error to show.
        """
        if not self.can_submit or not self._submit_lock.acquire(blocking=False):
            logger.debug("Login submit ignored in state %s", self._state.value)
            return False

        try:
            self._state = AuthState.AUTHENTICATING
            self.last_error = None
            try:
                self.api.login(email, password, remember=remember)
            except StaleResponseError:
                logger.info("Discarded login response after session change")
                self._state = AuthState.UNAUTHENTICATED
                return False
            except AuthError as e:
                self.last_error = e
                self._state = AuthState.AUTH_FAILED
                return False

            self._state = AuthState.AUTHENTICATED
            return True
        finally:
            self._submit_lock.release()

    def logout(self) -> None:
        self.api.logout()
        self._state = AuthState.UNAUTHENTICATED
        self.last_error = None

    def close(self) -> None:
        self._unsubscribe()
