"""
Hospital Auth - Client Session Store

Keeps the session token in local storage and derives the
is_authenticated flag from it.

Rules:
- boot() re-reads storage; a stored token means "authenticated" even if
  it has expired. The first rejected request corrects that.
- save() and clear() are serialized and each bumps a generation counter.
  Requests capture the generation when they start; a response whose
  generation is no longer current belongs to a dead session.
- clear(generation=n) only clears when n is still current, so a late
  rejection from an old session cannot wipe out a newer login.

Remember-me keeps the email and the raw password in storage to pre-fill
the login form. The password is stored in plaintext.
"""

import logging
import threading
from typing import Callable, List, Optional, Tuple

from hospital_auth.client.storage import SecureStorage


logger = logging.getLogger(__name__)

TOKEN_KEY = "authToken"
REMEMBERED_EMAIL_KEY = "rememberedEmail"
REMEMBERED_PASSWORD_KEY = "rememberedPassword"

Listener = Callable[[bool], None]


class StaleResponseError(Exception):
    """Response belongs to a session that has since been replaced or cleared."""


class SessionStore:
    """Client-side session state backed by a SecureStorage."""

    def __init__(self, storage: SecureStorage):
        self._storage = storage
        self._lock = threading.RLock()
        self._generation = 0
        self._is_authenticated = False
        self._listeners: List[Listener] = []
        self.boot()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_authenticated(self) -> bool:
        return self._is_authenticated

    @property
    def generation(self) -> int:
        return self._generation

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """
        Call listener(is_authenticated) whenever the flag changes.

        Returns:
            A function that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _set_authenticated(self, value: bool) -> None:
        changed = value != self._is_authenticated
        self._is_authenticated = value
        if changed:
            for listener in list(self._listeners):
                listener(value)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def boot(self) -> bool:
        """Re-derive is_authenticated from storage."""
        with self._lock:
            token = self._storage.get(TOKEN_KEY)
            self._set_authenticated(bool(token))
            return self._is_authenticated

    def load(self) -> Optional[str]:
        with self._lock:
            return self._storage.get(TOKEN_KEY) or None

    def snapshot(self) -> Tuple[Optional[str], int]:
        """Token and generation read together, for binding a request."""
        with self._lock:
            return self.load(), self._generation

    def save(
        self,
        token: str,
        remember: Optional[Tuple[str, str]] = None,
        expected_generation: Optional[int] = None,
    ) -> int:
        """
        Persist a freshly issued token.

        Args:
            token: Session token from /login
            remember: (email, password) to keep for pre-filling the login
                form, or None to forget any remembered credentials
            expected_generation: Generation the login started under; the
                token is dropped if the session changed since

        Returns:
            The new generation

        Raises:
            StaleResponseError: expected_generation is no longer current
        """
        if not token:
            raise ValueError("token must not be empty")

        with self._lock:
            if expected_generation is not None and expected_generation != self._generation:
                raise StaleResponseError("Session changed during login")
            self._storage.set(TOKEN_KEY, token)
            if remember is not None:
                email, password = remember
                logger.warning("Remember-me enabled: password stored in plaintext on this device")
                self._storage.set(REMEMBERED_EMAIL_KEY, email)
                self._storage.set(REMEMBERED_PASSWORD_KEY, password)
            else:
                self.forget_credentials()
            self._generation += 1
            self._set_authenticated(True)
            return self._generation

    def clear(self, generation: Optional[int] = None) -> bool:
        """
        Drop the stored token.

        Args:
            generation: Only clear if this is still the current generation

        Returns:
            True if the session was cleared, False if the call was stale
        """
        with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug("Ignoring clear for stale generation %s (current %s)", generation, self._generation)
                return False
            self._storage.delete(TOKEN_KEY)
            self._generation += 1
            self._set_authenticated(False)
            return True

    def remembered_credentials(self) -> Optional[Tuple[str, str]]:
        with self._lock:
            email = self._storage.get(REMEMBERED_EMAIL_KEY)
            password = self._storage.get(REMEMBERED_PASSWORD_KEY)
        if email and password:
            return email, password
        return None

    def forget_credentials(self) -> None:
        with self._lock:
            self._storage.delete(REMEMBERED_EMAIL_KEY)
            self._storage.delete(REMEMBERED_PASSWORD_KEY)
