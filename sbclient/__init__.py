"""sbclient: an async client for the Storyblok content API.

Rate limits outgoing requests, caches published reads, resolves relation
fields and retries rate-limited requests.
"""

from sbclient.core.client import StoryblokClient
from sbclient.domain.errors import (
    ConfigurationError,
    MaxRetryError,
    RateLimitedError,
    StoryblokError,
    TransportError,
)
from sbclient.domain.models.common import ApiResponse
from sbclient.domain.models.config import CacheConfig, ClientConfig

__version__ = "0.1.0"

__all__ = [
    "StoryblokClient",
    "ClientConfig",
    "CacheConfig",
    "ApiResponse",
    "StoryblokError",
    "ConfigurationError",
    "TransportError",
    "RateLimitedError",
    "MaxRetryError",
]
