"""
Generic JSON lookup client.

Performs exactly one outbound request per call and either returns the
decoded JSON body or raises a LookupClientError subclass. Retry policy and
caching are left to callers.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import requests

from shared.constants import DEFAULT_LOOKUP_TIMEOUT, DEFAULT_POOL_SIZE
from shared.errors import InvalidRequest, TransportError, BadResponse, DecodeError

logger = logging.getLogger(__name__)

_ALLOWED_METHODS = {"GET", "POST"}
_SECRET_PARAM = re.compile(r"((?:api_)?key=)[^&]+", re.IGNORECASE)


def redact(url: str) -> str:
    """Hide API keys embedded in a URL before it is logged."""
    return _SECRET_PARAM.sub(r"\1***", url)


def is_absolute_url(url: Any) -> bool:
    if not isinstance(url, str) or not url.strip():
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class LookupClient:
    """Sends JSON requests over a pooled requests session."""

    def __init__(self, timeout: float = DEFAULT_LOOKUP_TIMEOUT, session: Optional[requests.Session] = None):
        self.timeout = timeout
        if session is None:
            session = requests.Session()
            adapter = requests.adapters.HTTPAdapter(
                pool_connections=DEFAULT_POOL_SIZE, pool_maxsize=DEFAULT_POOL_SIZE, max_retries=0
            )
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self._session = session

    def fetch_json(
        self,
        url: str,
        method: str = "GET",
        body: Optional[Any] = None,
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Perform one request and decode its JSON body.

        Args:
            url: Absolute http(s) URL
            method: "GET" or "POST"
            body: Optional JSON-serialisable request body
            headers: Optional extra headers
            params: Optional query parameters (URL-encoded by the client)

        Returns:
            The parsed JSON value

        Raises:
            InvalidRequest: URL, method or body rejected; nothing was sent
            TransportError: Network failure or timeout
            BadResponse: Status other than 200
            DecodeError: Body is not valid JSON
        """
        if not is_absolute_url(url):
            raise InvalidRequest(f"Not an absolute URL: {url!r}")
        method = (method or "").upper()
        if method not in _ALLOWED_METHODS:
            raise InvalidRequest(f"Unsupported method: {method!r}")

        request_headers = {"Accept": "application/json"}
        if headers:
            request_headers.update(headers)

        data = None
        if body is not None:
            try:
                data = json.dumps(body).encode("utf-8")
            except (TypeError, ValueError) as e:
                raise InvalidRequest(f"Body is not JSON-encodable: {e}") from e
            request_headers.setdefault("Content-Type", "application/json")

        logger.debug(f"{method} {redact(url)} params={sorted((params or {}).keys())}")
        try:
            response = self._session.request(
                method,
                url,
                params=params,
                data=data,
                headers=request_headers,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            raise TransportError(f"{method} {redact(url)} failed: {e}") from e

        if response.status_code != 200:
            raise BadResponse(response.status_code, redact(url))

        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"Malformed JSON from {redact(url)}: {e}") from e

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> "LookupClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
