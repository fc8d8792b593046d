"""Error taxonomy for the client.

RateLimitedError is the only error recovered locally (by retrying).
Everything else propagates unchanged to the caller.
"""

from typing import Any, Dict, Optional


class StoryblokError(Exception):
    """Base class for all client errors."""


class ConfigurationError(StoryblokError, ValueError):
    """Invalid or missing configuration, detected before any network activity."""


class TransportError(StoryblokError):
    """A non-2xx response or a network failure."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.headers = headers or {}


class RateLimitedError(TransportError):
    """HTTP 429 from the API."""

    def __init__(self, message: str = "Rate limit exceeded", body: Any = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(message, status_code=429, body=body, headers=headers)


class MaxRetryError(RateLimitedError):
    """Exception raised when the retry budget for rate-limited requests is spent."""

    def __init__(self, original_exception: RateLimitedError, attempts: int):
        self.original_exception = original_exception
        self.attempts = attempts
        super().__init__(
            f"Max retries ({attempts}) exceeded. Last error: {original_exception}",
            body=original_exception.body,
            headers=original_exception.headers,
        )
