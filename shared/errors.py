"""
Exceptions raised by the lookup client and the history store.
"""

from typing import Optional


class LookupClientError(Exception):
    """Base class for failures of a single outbound lookup request."""


class InvalidRequest(LookupClientError):
    """The request could not be built (bad URL, method or body). Nothing was sent."""


class TransportError(LookupClientError):
    """Network failure or timeout before a response arrived."""


class BadResponse(LookupClientError):
    """The endpoint answered with a non-200 status."""

    def __init__(self, status_code: int, url: Optional[str] = None):
        self.status_code = status_code
        self.url = url
        super().__init__(f"HTTP {status_code}" + (f" from {url}" if url else ""))


class DecodeError(LookupClientError):
    """The response body was not valid JSON."""


class PersistenceError(Exception):
    """Reading or writing the persistence medium failed."""
