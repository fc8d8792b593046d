"""Configuration value objects for the client.

These are built once at client construction and never change afterwards.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..errors import ConfigurationError
from ..interfaces.component_resolver import ComponentResolver

CACHE_TYPE_MEMORY = "memory"
CLEAR_MANUAL = "manual"
CLEAR_AUTO = "auto"


@dataclass
class CacheConfig:
    """Static cache choice: strategy ('memory' or None) and clearing policy."""
    type: Optional[str] = None
    clear: str = CLEAR_MANUAL

    def __post_init__(self) -> None:
        if self.clear not in (CLEAR_MANUAL, CLEAR_AUTO):
            raise ConfigurationError(f"Unknown cache clear policy: {self.clear!r} (expected 'manual' or 'auto')")


@dataclass
class ClientConfig:
    """Options recognized by StoryblokClient.

    Attributes:
        access_token: Delivery API token, sent as the 'token' parameter.
        oauth_token: Management API token; sent as Authorization header and
            lowers the default rate limit.
        region: Optional region suffix for the API host (e.g. 'us').
        https: Use https (default) or plain http.
        timeout: Request timeout in seconds; 0/None disables it.
        proxy: Optional proxy URL.
        max_retries: Retry budget for rate-limited requests.
        rate_limit: Requests per second; defaults to 5, or 3 with oauth_token.
        cache: Cache strategy and clear policy.
        component_resolver: Rich-text component renderer hook.
        headers: Extra headers sent with every request.
        endpoint: Full API root, overriding region/https.
    """
    access_token: Optional[str] = None
    oauth_token: Optional[str] = None
    region: Optional[str] = None
    https: bool = True
    timeout: Optional[float] = None
    proxy: Optional[str] = None
    max_retries: int = 5
    rate_limit: Optional[int] = None
    cache: CacheConfig = field(default_factory=CacheConfig)
    component_resolver: Optional[ComponentResolver] = None
    headers: Dict[str, str] = field(default_factory=dict)
    endpoint: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.cache, dict):
            self.cache = CacheConfig(**self.cache)
        if self.rate_limit is not None and self.rate_limit < 1:
            raise ConfigurationError(f"rate_limit must be a positive integer, got {self.rate_limit!r}")
        if self.component_resolver is not None and not callable(self.component_resolver):
            raise ConfigurationError("component_resolver must be callable")

    def base_url(self) -> str:
        """Returns the API root this configuration points at."""
        if self.endpoint:
            return self.endpoint
        region = f"-{self.region}" if self.region else ""
        protocol = "http" if self.https is False else "https"
        return f"{protocol}://api{region}.storyblok.com/v2"

    def as_dict(self) -> Dict[str, Any]:
        """Summary safe for logging (tokens masked)."""
        return {
            "endpoint": self.base_url(),
            "access_token": "***" if self.access_token else None,
            "oauth_token": "***" if self.oauth_token else None,
            "rate_limit": self.rate_limit,
            "max_retries": self.max_retries,
            "cache": {"type": self.cache.type, "clear": self.cache.clear},
        }
