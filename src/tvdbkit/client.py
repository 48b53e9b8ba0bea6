"""HTTP client for TheTVDB REST API."""

from __future__ import annotations

import json
import logging
from datetime import timedelta
from typing import Any, Optional

import httpx

from .auth import Authenticator
from .cache import ONE_DAY, CacheEntry, CacheGateway, CacheKey, FetchResult
from .errors import AuthError, DecodeError, InvalidArgumentError, NotFoundError, TransportError
from .utils import language_code

LOGGER = logging.getLogger(__name__)

API_BASE_URL = "https://api.thetvdb.com/"
CACHE_NAMESPACE = "TheTVDB"
DEFAULT_TIMEOUT = 30.0


def decode_json(content: bytes, path: str) -> Any:
    """Decode a UTF-8 JSON body.

    Raises:
        DecodeError: If the body is not valid UTF-8 JSON
    """
    try:
        return json.loads(content.decode("utf-8"))
    except ValueError as exc:
        raise DecodeError(f"Invalid JSON response for {path}: {exc}") from exc


class TVDBClient:
    """Authenticated, cached JSON requests against TheTVDB API.

    GET requests go through the :class:`CacheGateway`; when a cached body is
    stale the request is made conditional (If-None-Match / If-Modified-Since)
    so an unchanged resource costs a 304 instead of a download. The bearer
    token is only requested when the network is actually used.

    The only uncached request is the login POST, which carries the API key.
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = API_BASE_URL,
        cache: Optional[CacheGateway] = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport_retries: int = 0,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: TheTVDB API key exchanged for a bearer token on first use
            base_url: API endpoint
            cache: Response cache; an in-memory cache is used when omitted
            timeout: HTTP request timeout in seconds
            transport_retries: Connection retries performed by the transport
            http_client: Pre-configured client; not closed by :meth:`close`
        """
        if not api_key:
            raise InvalidArgumentError("TheTVDB API key must not be empty")

        self.base_url = base_url.rstrip("/") + "/"
        self.cache = cache if cache is not None else CacheGateway()
        if http_client is None:
            self._client = httpx.Client(
                timeout=timeout,
                transport=httpx.HTTPTransport(retries=transport_retries),
            )
            self._owns_client = True
        else:
            self._client = http_client
            self._owns_client = False
        self.auth = Authenticator(api_key, self.post_json)

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path.lstrip('/')}"
        try:
            return self._client.request(method, url, **kwargs)
        except httpx.RequestError as exc:
            raise TransportError(f"Request to {path} failed: {exc}") from exc

    @staticmethod
    def _check_status(response: httpx.Response, path: str) -> None:
        status = response.status_code
        if status == 404:
            raise NotFoundError(f"Resource not found: {path}", status)
        if not 200 <= status < 300:
            raise TransportError(f"Request to {path} failed with HTTP {status}", status)

    @staticmethod
    def _request_headers(locale: Optional[str], token: str, entry: Optional[CacheEntry]) -> dict[str, str]:
        headers: dict[str, str] = {}
        language = language_code(locale)
        if language:
            headers["Accept-Language"] = language
        headers["Accept"] = "application/json"
        headers["Authorization"] = f"Bearer {token}"
        if entry is not None:
            if entry.etag:
                headers["If-None-Match"] = entry.etag
            if entry.last_modified:
                headers["If-Modified-Since"] = entry.last_modified
        return headers

    def _fetch_if_modified(self, path: str, locale: Optional[str], entry: Optional[CacheEntry]) -> Optional[FetchResult]:
        """GET ``path``, conditional on ``entry`` when there is one.

        Returns:
            FetchResult with the new body, or None if the server returned 304

        Raises:
            AuthError: If the service rejects a freshly obtained token
            NotFoundError: If the resource does not exist (404)
            TransportError: On other network or HTTP failures
        """
        token = self.auth.get_token()
        response = self._send("GET", path, headers=self._request_headers(locale, token, entry))

        if response.status_code == 401:
            LOGGER.debug("Authorization rejected (401), requesting a new token: %s", path)
            self.auth.invalidate(token)
            token = self.auth.get_token()
            response = self._send("GET", path, headers=self._request_headers(locale, token, entry))
            if response.status_code == 401:
                raise AuthError(f"Authorization rejected for {path}")

        if response.status_code == 304:
            LOGGER.debug("Content not modified (304): %s", path)
            return None

        self._check_status(response, path)
        LOGGER.debug("Fetched fresh data: %s", path)
        return FetchResult(
            content=response.content,
            etag=response.headers.get("ETag"),
            last_modified=response.headers.get("Last-Modified"),
        )

    def request_json(self, path: str, locale: Optional[str] = None, ttl: timedelta = ONE_DAY) -> Any:
        """Return the decoded JSON document for an authenticated, cached GET.

        Args:
            path: Endpoint path relative to the base URL, including any query
            locale: Response language (``en`` or ``en-US``); None for language neutral data
            ttl: Maximum age of a cached response

        Raises:
            AuthError: If no valid token can be obtained
            TransportError: On network or HTTP failures
            DecodeError: If the body is not valid JSON
        """
        key = CacheKey.for_request(CACHE_NAMESPACE, path, locale)
        content = self.cache.fetch(key, ttl, lambda entry: self._fetch_if_modified(path, locale, entry))
        return decode_json(content, path)

    def post_json(self, path: str, body: dict[str, Any]) -> Any:
        """POST a JSON body and return the decoded response. Never cached.

        Raises:
            TransportError: On network or HTTP failures
            DecodeError: If the body is not valid JSON
        """
        response = self._send("POST", path, json=body, headers={"Accept": "application/json"})
        self._check_status(response, path)
        return decode_json(response.content, path)

    def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> TVDBClient:
        return self

    def __exit__(self, *args) -> None:
        self.close()
