"""Bearer token acquisition for TheTVDB API."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Any, Callable, Optional

from .errors import AuthError, TVDBError
from .json_access import get_string

LOGGER = logging.getLogger(__name__)

LOGIN_PATH = "login"

# (path, json body) -> decoded response document
LoginRequest = Callable[[str, dict[str, Any]], Any]


class Authenticator:
    """Exchanges the API key for a bearer token and caches it.

    Only one login request is in flight at a time. Threads that ask for a
    token while a login is running wait on the same future and receive the
    same token, or the same exception. After a failure the next call starts a
    new attempt.
    """

    def __init__(self, api_key: str, login: LoginRequest) -> None:
        self._api_key = api_key
        self._login = login
        self._token: Optional[str] = None
        self._pending: Optional[Future[str]] = None
        self._lock = threading.Lock()

    @property
    def has_token(self) -> bool:
        with self._lock:
            return self._token is not None

    def get_token(self) -> str:
        """Return the cached token, logging in first if there is none.

        Raises:
            AuthError: If the login request fails or returns no token
        """
        with self._lock:
            if self._token is not None:
                return self._token
            pending = self._pending
            if pending is None:
                future: Future[str] = Future()
                self._pending = future

        if pending is not None:
            return pending.result()

        try:
            token = self._request_token()
        except BaseException as exc:
            with self._lock:
                self._pending = None
            future.set_exception(exc)
            raise

        with self._lock:
            self._token = token
            self._pending = None
        future.set_result(token)
        return token

    def invalidate(self, token: str) -> None:
        """Forget ``token`` if it is still the cached one (e.g. after a 401)."""
        with self._lock:
            if self._token == token:
                LOGGER.debug("Discarding rejected authorization token")
                self._token = None

    def _request_token(self) -> str:
        try:
            response = self._login(LOGIN_PATH, {"apikey": self._api_key})
        except TVDBError as exc:
            raise AuthError(f"Failed to retrieve authorization token: {exc}") from exc

        token = get_string(response, "token")
        if token is None:
            raise AuthError("Failed to retrieve authorization token: response did not contain a token")

        LOGGER.info("Obtained TheTVDB authorization token")
        return token
